from __future__ import annotations

from datetime import datetime
from typing import Callable, Optional, Sequence

from romstatus import config
from romstatus.common import fileops
from romstatus.core.candidates import WriteCandidate
from romstatus.dats import logiqx
from romstatus.dats.models import DAT, Header
from romstatus.logging_cfg import get_logger
from romstatus.options import Options

_TOGGLES = ("only_bios", "only_device", "only_retail", "no_bios", "no_device")


def build_derived_header(
    dat_type: str,
    original_dat: DAT,
    options: Options,
    now: Optional[datetime] = None,
) -> Header:
    """Cabeçalho de um DAT derivado, com referência ao DAT de origem."""
    now = now or datetime.now()
    original = original_dat.name
    if original_dat.header.version:
        original += f" ({original_dat.header.version})"
    active = [toggle for toggle in _TOGGLES if getattr(options, toggle)]

    comment_lines = [
        f"{dat_type} generated by {config.AUTHOR}",
        f"Original DAT: {original}",
    ]
    if active:
        comment_lines.append(f"Filters: {', '.join(active)}")

    return Header(
        name=f"{original_dat.name} {dat_type}".strip(),
        description=f"{original_dat.description} {dat_type}".strip(),
        version=now.strftime(config.DAT_VERSION_FMT),
        date=now.strftime(config.DAT_DATE_FMT),
        author=config.AUTHOR,
        url=config.HOMEPAGE,
        comment="\n".join(comment_lines),
    )


class FixdatCreator:
    """Cria um "fixdat" com todos os jogos que têm pelo menos uma ROM por encontrar."""

    def __init__(
        self,
        options: Options,
        progress_cb: Optional[Callable[[float, str], None]] = None,
    ):
        self.options = options
        self.progress_cb = progress_cb
        self.logger = get_logger("core.fixdat")

    def _emit_progress(self, percent: float, message: str):
        if self.progress_cb:
            self.progress_cb(percent, message)

    async def create(
        self, original_dat: DAT, candidates: Sequence[WriteCandidate]
    ) -> Optional[str]:
        """Cria e grava o fixdat; devolve o caminho, ou None se não houver nada em falta.

        Erros de I/O ao criar a diretoria ou gravar o ficheiro propagam sem
        tratamento.
        """
        if not self.options.should_fixdat():
            return None

        self.logger.debug(f"{original_dat.name}: a gerar fixdat")
        self._emit_progress(0.0, f"Fixdat: {original_dat.name}")

        # Qualquer resolução conta, não apenas o primeiro candidato de cada jogo
        written_rom_hash_codes = {
            rom_with_files.rom.hash_code()
            for candidate in candidates
            for rom_with_files in candidate.roms_with_files
        }
        games_with_missing_roms = [
            game
            for game in original_dat.games
            if not all(rom.hash_code() in written_rom_hash_codes for rom in game.roms)
        ]
        if not games_with_missing_roms:
            self.logger.debug(
                f"{original_dat.name}: fixdat não criado, todos os jogos foram encontrados"
            )
            return None

        fixdat_dir = self.options.get_fixdat_output()
        if not await fileops.exists(fixdat_dir):
            await fileops.mkdir(fixdat_dir)

        header = build_derived_header("fixdat", original_dat, self.options)
        fixdat = DAT(header=header, games=tuple(games_with_missing_roms))
        fixdat_contents = logiqx.to_xml_dat(fixdat)
        fixdat_path = fixdat_dir / logiqx.get_filename(fixdat)
        self.logger.info(f"{original_dat.name}: a gravar fixdat em '{fixdat_path}'")
        await fileops.write_file(fixdat_path, fixdat_contents)

        self._emit_progress(1.0, f"Fixdat: {original_dat.name}")
        self.logger.debug(f"{original_dat.name}: fixdat concluído")
        return str(fixdat_path)
