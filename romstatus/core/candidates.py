from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from romstatus.dats.models import ROM, Game


@dataclass(frozen=True, slots=True)
class File:
    """Um ficheiro resolvido no disco, com os checksums já calculados."""
    file_path: str
    size: int = 0
    crc32: Optional[str] = None
    md5: Optional[str] = None
    sha1: Optional[str] = None

    def hash_code(self) -> str:
        if self.sha1:
            return self.sha1.lower()
        if self.md5:
            return self.md5.lower()
        return f"{(self.crc32 or '').lower()}|{self.size}"


@dataclass(frozen=True, slots=True)
class RomWithFiles:
    """Uma ROM do DAT e o ficheiro de entrada (e saída, se houve escrita) que a satisfaz."""
    rom: ROM
    input_file: File
    output_file: Optional[File] = None


@dataclass(frozen=True)
class WriteCandidate:
    """Proposta de resolução de um jogo; pode ter menos ROMs do que o jogo declara."""
    game: Game
    roms_with_files: tuple[RomWithFiles, ...] = ()
    patched: bool = False

    def is_patched(self) -> bool:
        return self.patched
