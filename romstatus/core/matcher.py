from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from romstatus.core.candidates import File, RomWithFiles, WriteCandidate
from romstatus.dats.models import DAT, ROM
from romstatus.logging_cfg import get_logger, log_call

logger = get_logger(__name__)


@dataclass
class MatchResult:
    """Candidatos de um DAT e os ficheiros de entrada que nenhum candidato usou."""
    candidates: list[WriteCandidate] = field(default_factory=list)
    unused: list[str] = field(default_factory=list)
    duplicates: list[str] = field(default_factory=list)


class FileIndex:
    """Índice dos ficheiros de entrada por SHA1, MD5 e CRC32+tamanho."""

    def __init__(self, files: Sequence[File]):
        self.by_sha1: dict[str, File] = {}
        self.by_md5: dict[str, File] = {}
        self.by_crc: dict[tuple[str, int], File] = {}
        for f in files:
            if f.sha1:
                self.by_sha1.setdefault(f.sha1.lower(), f)
            if f.md5:
                self.by_md5.setdefault(f.md5.lower(), f)
            if f.crc32:
                self.by_crc.setdefault((f.crc32.lower(), f.size), f)

    def find(self, rom: ROM) -> Optional[File]:
        if rom.sha1:
            return self.by_sha1.get(rom.sha1.lower())
        if rom.md5:
            return self.by_md5.get(rom.md5.lower())
        if rom.crc32:
            return self.by_crc.get((rom.crc32.lower(), rom.size))
        return None


@log_call(level=logging.DEBUG)
def match_files(dat: DAT, files: Sequence[File]) -> MatchResult:
    """Associa ficheiros às ROMs do DAT; um candidato por jogo com pelo menos uma ROM encontrada."""
    index = FileIndex(files)
    result = MatchResult()

    for game in dat.games:
        roms_with_files = []
        for rom in game.roms:
            found = index.find(rom)
            if found is not None:
                roms_with_files.append(RomWithFiles(rom=rom, input_file=found))
        if roms_with_files:
            result.candidates.append(WriteCandidate(game=game, roms_with_files=tuple(roms_with_files)))

    used_paths = {
        rom_with_files.input_file.file_path
        for candidate in result.candidates
        for rom_with_files in candidate.roms_with_files
    }
    used_hashes = {f.hash_code() for f in files if f.file_path in used_paths}
    for f in files:
        if f.file_path in used_paths:
            continue
        if f.hash_code() in used_hashes:
            result.duplicates.append(f.file_path)
        else:
            result.unused.append(f.file_path)

    logger.info(
        "%s: %d candidatos, %d ficheiros não usados, %d duplicados",
        dat.name,
        len(result.candidates),
        len(result.unused),
        len(result.duplicates),
    )
    return result
