"""Estado de coleção por DAT: encontrado, incompleto ou em falta.

Cada DAT processado tem a sua própria instância de `DATStatus`, construída uma
única vez a partir do DAT e dos candidatos já resolvidos. Depois da
construção nada é alterado: as consultas e os renderizadores (consola e CSV)
apenas leem as partições.
"""

from __future__ import annotations

import csv
import io
import unicodedata
from enum import Enum, IntEnum
from typing import Iterable, Mapping, Optional, Sequence, TypeVar

from romstatus.common.exceptions import StatusConsistencyError
from romstatus.core.candidates import File, RomWithFiles, WriteCandidate
from romstatus.dats.models import DAT, Game
from romstatus.logging_cfg import get_logger
from romstatus.options import Options

logger = get_logger(__name__)

T = TypeVar("T")


class ROMType(str, Enum):
    GAME = "games"
    BIOS = "BIOSes"
    DEVICE = "devices"
    RETAIL = "retail releases"
    PATCHED = "patched games"


class GameStatus(IntEnum):
    # The Game wanted to be written, and it has no ROMs or every ROM was found
    FOUND = 1
    # Only some of the Game's ROMs were found
    INCOMPLETE = 2
    # The Game wanted to be written, but there was no matching candidate
    MISSING = 3
    # The input file was not used in any candidate, but a duplicate file was
    DUPLICATE = 4
    # The input file was not used in any candidate, and neither was any duplicate
    UNUSED = 5
    # The output file was not from any candidate, so it was deleted
    DELETED = 6


CSV_HEADERS = [
    "DAT Name",
    "Game Name",
    "Status",
    "ROM Files",
    "Patched",
    "BIOS",
    "Retail Release",
    "Unlicensed",
    "Debug",
    "Demo",
    "Beta",
    "Sample",
    "Prototype",
    "Program",
    "Aftermarket",
    "Homebrew",
    "Bad",
]

# (lower bound %, rich color), checked top-down
_COLOR_BANDS = (
    (100.0, "rgb(0,166,0)"),
    (75.0, "rgb(153,153,0)"),
    (50.0, "rgb(160,124,0)"),
    (25.0, "rgb(162,93,0)"),
)
_COLOR_SOME = "rgb(160,59,0)"
_COLOR_NONE = "rgb(153,0,0)"


def rom_types_for_game(game: Game) -> list[ROMType]:
    """Etiquetas (não exclusivas) a que um jogo do DAT pertence."""
    types = [ROMType.GAME]
    if game.is_bios():
        types.append(ROMType.BIOS)
    if game.is_device():
        types.append(ROMType.DEVICE)
    if game.is_retail():
        types.append(ROMType.RETAIL)
    return types


def get_allowed_types(options: Options) -> list[ROMType]:
    """Etiquetas avaliadas tendo em conta os filtros only-*/no-*."""
    allowed = []
    if not options.only_bios and not options.only_device and not options.only_retail:
        allowed.append(ROMType.GAME)
    if options.only_bios or (not options.no_bios and not options.only_device):
        allowed.append(ROMType.BIOS)
    if options.only_device or (not options.only_bios and not options.no_device):
        allowed.append(ROMType.DEVICE)
    if options.only_retail or (not options.only_bios and not options.only_device):
        allowed.append(ROMType.RETAIL)
    allowed.append(ROMType.PATCHED)
    return allowed


def resolve_game_status(game: Game, has_incomplete: bool, has_found: bool) -> GameStatus:
    """Precedência explícita: FOUND sobrepõe-se a INCOMPLETE, que se sobrepõe a MISSING."""
    if has_found or len(game.roms) == 0:
        return GameStatus.FOUND
    if has_incomplete:
        return GameStatus.INCOMPLETE
    return GameStatus.MISSING


def percentage_color(percentage: float) -> str:
    for lower_bound, color in _COLOR_BANDS:
        if percentage >= lower_bound:
            return color
    return _COLOR_SOME if percentage > 0 else _COLOR_NONE


def _game_sort_key(game: Game) -> tuple[str, str]:
    """Ordem alfabética sem distinguir maiúsculas nem acentos; o nome original desempata."""
    decomposed = unicodedata.normalize("NFKD", game.name)
    base = "".join(char for char in decomposed if not unicodedata.combining(char))
    return (base.casefold(), game.name)


def _unique(values: Iterable[T]) -> list[T]:
    return list(dict.fromkeys(values))


def _bool_text(value: bool) -> str:
    return "true" if value else "false"


def _write_rows(rows: Iterable[Sequence[str]], headers: Optional[Sequence[str]] = None) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    if headers:
        writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue().removesuffix("\n")


class DATStatus:
    """Classifica cada jogo de um DAT e sabe apresentá-lo na consola e em CSV.

    Três partições, todas indexadas por `ROMType` e, dentro de cada etiqueta,
    pela identidade de conteúdo do jogo (`Game.hash_code()`), o que as mantém
    ordenadas e sem repetições:

    - todos os jogos;
    - candidatos completos (`None` para jogos sem ROMs e sem candidato);
    - candidatos incompletos.

    Os candidatos corrigidos (patched) ficam também numa lista própria: na
    consola cada um conta, mesmo que vários corrijam o mesmo jogo; no CSV há
    uma linha por jogo.
    """

    def __init__(self, dat: DAT, candidates: Sequence[WriteCandidate]):
        self.dat = dat
        self._all_games: dict[ROMType, dict[str, Game]] = {}
        self._found_candidates: dict[ROMType, dict[str, Optional[WriteCandidate]]] = {}
        self._incomplete_candidates: dict[ROMType, dict[str, WriteCandidate]] = {}

        indexed_candidates: dict[str, list[WriteCandidate]] = {}
        for candidate in candidates:
            indexed_candidates.setdefault(candidate.game.hash_code(), []).append(candidate)

        # Un-patched ROMs
        for game in dat.games:
            key = game.hash_code()
            game_types = rom_types_for_game(game)
            self._put(self._all_games, game_types, key, game)

            game_candidates = indexed_candidates.get(key)
            if game_candidates is None and len(game.roms) > 0:
                continue

            game_candidate = game_candidates[0] if game_candidates else None
            if game_candidate is not None and len(game_candidate.roms_with_files) < len(game.roms):
                self._put(self._incomplete_candidates, game_types, key, game_candidate)
            else:
                self._put(self._found_candidates, game_types, key, game_candidate)

        self._check_exclusive()

        # Patched ROMs are always found===all
        self._patched_candidates = [candidate for candidate in candidates if candidate.is_patched()]
        for candidate in self._patched_candidates:
            key = candidate.game.hash_code()
            self._put(self._all_games, [ROMType.PATCHED], key, candidate.game)
            self._put(self._found_candidates, [ROMType.PATCHED], key, candidate)

        logger.debug(
            "%s: %d jogos, %d encontrados, %d incompletos",
            dat.name,
            len(self._all_games.get(ROMType.GAME, {})),
            len(self._found_candidates.get(ROMType.GAME, {})),
            len(self._incomplete_candidates.get(ROMType.GAME, {})),
        )

    @staticmethod
    def _put(
        partition: dict[ROMType, dict[str, T]],
        rom_types: Iterable[ROMType],
        key: str,
        value: T,
    ) -> None:
        for rom_type in rom_types:
            partition.setdefault(rom_type, {}).setdefault(key, value)

    def _check_exclusive(self) -> None:
        """Nenhum jogo pode estar ao mesmo tempo em encontrado e incompleto."""
        found_keys = {
            key
            for rom_type, entries in self._found_candidates.items()
            if rom_type is not ROMType.PATCHED
            for key in entries
        }
        overlap = _unique(
            candidate.game.name
            for rom_type, entries in self._incomplete_candidates.items()
            if rom_type is not ROMType.PATCHED
            for key, candidate in entries.items()
            if key in found_keys
        )
        if overlap:
            raise StatusConsistencyError(self.dat.name, overlap)

    def get_dat_name(self) -> str:
        return self.dat.name

    def get_input_files(self) -> list[File]:
        """Ficheiros de entrada usados por candidatos completos e incompletos, sem repetições."""
        candidates = [
            candidate
            for partition in (self._found_candidates, self._incomplete_candidates)
            for entries in partition.values()
            for candidate in entries.values()
            if candidate is not None
        ] + self._patched_candidates
        files = {
            rom_with_files.input_file.file_path: rom_with_files.input_file
            for candidate in candidates
            for rom_with_files in candidate.roms_with_files
        }
        return list(files.values())

    def any_games_found(self, options: Options) -> bool:
        """Se algum jogo do DAT, numa etiqueta permitida, foi encontrado."""
        return any(
            len(self._found_candidates.get(rom_type, {})) > 0
            for rom_type in get_allowed_types(options)
        )

    def to_console(self, options: Options) -> str:
        """Linha de resumo com markup `rich`, pronta para `Console.print`."""
        segments = []
        for rom_type in get_allowed_types(options):
            all_games = self._all_games.get(rom_type, {})
            if not all_games:
                continue
            found_count = len(self._found_candidates.get(rom_type, {}))
            all_count = len(all_games)
            if rom_type is ROMType.PATCHED:
                # Each patched candidate counts, even several for the same game
                found_count = all_count = len(self._patched_candidates)

            if not options.using_dats():
                segments.append(f"{found_count:,} {rom_type.value}")
                continue

            color = percentage_color(found_count / all_count * 100)
            if rom_type is ROMType.PATCHED:
                segments.append(f"[{color}]{all_count:,}[/] {rom_type.value}")
            else:
                segments.append(f"[{color}]{found_count:,}[/]/{all_count:,} {rom_type.value}")

        return f"{', '.join(segments)} {'written' if options.should_write() else 'found'}"

    def to_csv(self, options: Options) -> str:
        """Conteúdo CSV (com cabeçalho) com o estado de cada jogo."""
        found_index = self._values_for_allowed_types(options, self._found_candidates)
        incomplete_index = self._values_for_allowed_types(options, self._incomplete_candidates)
        games = self._values_for_allowed_types(options, self._all_games).values()

        rows = [
            self._game_row(options, game, found_index, incomplete_index)
            for game in sorted(games, key=_game_sort_key)
        ]
        return _write_rows(rows, headers=CSV_HEADERS)

    def _game_row(
        self,
        options: Options,
        game: Game,
        found_index: Mapping[str, Optional[WriteCandidate]],
        incomplete_index: Mapping[str, WriteCandidate],
    ) -> list[str]:
        key = game.hash_code()
        found_candidate = found_index.get(key)
        incomplete_candidate = incomplete_index.get(key)
        status = resolve_game_status(
            game,
            has_incomplete=incomplete_candidate is not None,
            has_found=key in found_index,
        )

        roms_with_files = [
            *(incomplete_candidate.roms_with_files if incomplete_candidate else ()),
            *(found_candidate.roms_with_files if found_candidate else ()),
        ]
        file_paths = _unique(
            self._reported_file(options, rom_with_files).file_path
            for rom_with_files in roms_with_files
        )

        return self._build_csv_row(
            self.get_dat_name(),
            game.name,
            status,
            file_paths,
            patched=found_candidate.is_patched() if found_candidate else False,
            bios=game.is_bios(),
            retail=game.is_retail(),
            unlicensed=game.is_unlicensed(),
            debug=game.is_debug(),
            demo=game.is_demo(),
            beta=game.is_beta(),
            sample=game.is_sample(),
            prototype=game.is_prototype(),
            program=game.is_program(),
            aftermarket=game.is_aftermarket(),
            homebrew=game.is_homebrew(),
            bad=game.is_bad(),
        )

    @staticmethod
    def _reported_file(options: Options, rom_with_files: RomWithFiles) -> File:
        if options.should_write() and rom_with_files.output_file is not None:
            return rom_with_files.output_file
        return rom_with_files.input_file

    @staticmethod
    def csv_header() -> str:
        """Linha de cabeçalho do CSV, escrita pelo mesmo `csv.writer` das linhas."""
        return _write_rows((), headers=CSV_HEADERS)

    @staticmethod
    def files_to_csv(file_paths: Iterable[str], status: GameStatus) -> str:
        """Linhas CSV sem cabeçalho para ficheiros classificados fora do motor."""
        return _write_rows(
            DATStatus._build_csv_row("", "", status, [file_path]) for file_path in file_paths
        )

    @staticmethod
    def _build_csv_row(
        dat_name: str,
        game_name: str,
        status: GameStatus,
        file_paths: Sequence[str] = (),
        patched: bool = False,
        bios: bool = False,
        retail: bool = False,
        unlicensed: bool = False,
        debug: bool = False,
        demo: bool = False,
        beta: bool = False,
        sample: bool = False,
        prototype: bool = False,
        program: bool = False,
        aftermarket: bool = False,
        homebrew: bool = False,
        bad: bool = False,
    ) -> list[str]:
        return [
            dat_name,
            game_name,
            status.name,
            "|".join(file_paths),
            *(
                _bool_text(flag)
                for flag in (
                    patched, bios, retail, unlicensed, debug, demo, beta,
                    sample, prototype, program, aftermarket, homebrew, bad,
                )
            ),
        ]

    @staticmethod
    def _values_for_allowed_types(
        options: Options, rom_types_to_values: Mapping[ROMType, Mapping[str, T]]
    ) -> dict[str, T]:
        merged: dict[str, T] = {}
        for rom_type in get_allowed_types(options):
            for key, value in rom_types_to_values.get(rom_type, {}).items():
                merged.setdefault(key, value)
        return merged
