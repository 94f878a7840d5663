from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, Sequence

from romstatus.core.dat_status import DATStatus, GameStatus
from romstatus.logging_cfg import get_logger
from romstatus.options import Options


class ReportGenerator:
    """Gera o relatório CSV de conformidade de todos os DATs processados."""

    def __init__(self, options: Options):
        self.options = options
        self.logger = get_logger("core.report")

    def output_path(self, now: Optional[datetime] = None) -> Path:
        """Caminho do relatório, com tokens strftime expandidos."""
        return self.options.get_report_output(now)

    def build(
        self,
        dat_statuses: Sequence[DATStatus],
        duplicates: Iterable[str] = (),
        unused: Iterable[str] = (),
        deleted: Iterable[str] = (),
    ) -> str:
        """Junta o CSV de cada DAT (cabeçalho uma só vez) e as linhas de ficheiros soltos."""
        parts = [DATStatus.csv_header()]
        for status in sorted(dat_statuses, key=lambda s: s.get_dat_name()):
            _, _, rows = status.to_csv(self.options).partition("\n")
            if rows:
                parts.append(rows)

        for file_paths, game_status in (
            (duplicates, GameStatus.DUPLICATE),
            (unused, GameStatus.UNUSED),
            (deleted, GameStatus.DELETED),
        ):
            rows = DATStatus.files_to_csv(sorted(set(file_paths)), game_status)
            if rows:
                parts.append(rows)

        return "\n".join(parts) + "\n"

    def generate(
        self,
        dat_statuses: Sequence[DATStatus],
        duplicates: Iterable[str] = (),
        unused: Iterable[str] = (),
        deleted: Iterable[str] = (),
    ) -> Path:
        """Grava o relatório e devolve o caminho; erros de I/O propagam."""
        output_path = self.output_path()
        self.logger.info(f"A gerar relatório: {output_path}")
        contents = self.build(dat_statuses, duplicates, unused, deleted)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(contents, encoding="utf-8")
        return output_path
