import zlib
from typing import Optional

from romstatus.core.candidates import File, RomWithFiles, WriteCandidate
from romstatus.dats.models import DAT, ROM, Game, Header
from romstatus.options import Options


def make_rom(name: str, crc: str, size: int = 1024) -> ROM:
    return ROM(name=name, size=size, crc32=crc)


def make_game(name: str, rom_count: int = 1, **kwargs) -> Game:
    roms = tuple(
        make_rom(f"{name} ({i}).bin", f"{zlib.crc32(f'{name}|{i}'.encode()):08x}")
        for i in range(rom_count)
    )
    return Game(name=name, description=name, roms=roms, **kwargs)


def make_dat(*games: Game, name: str = "Test", version: str = "20240101") -> DAT:
    return DAT(header=Header(name=name, description=name, version=version), games=tuple(games))


def make_candidate(
    game: Game,
    rom_count: Optional[int] = None,
    patched: bool = False,
    input_dir: str = "/input",
    output_dir: Optional[str] = None,
) -> WriteCandidate:
    roms = game.roms if rom_count is None else game.roms[:rom_count]
    roms_with_files = tuple(
        RomWithFiles(
            rom=rom,
            input_file=File(f"{input_dir}/{rom.name}", size=rom.size, crc32=rom.crc32),
            output_file=File(f"{output_dir}/{rom.name}", size=rom.size, crc32=rom.crc32)
            if output_dir
            else None,
        )
        for rom in roms
    )
    return WriteCandidate(game=game, roms_with_files=roms_with_files, patched=patched)


def make_options(**kwargs) -> Options:
    kwargs.setdefault("dat", ["test.dat"])
    return Options(**kwargs)
