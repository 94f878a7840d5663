"""
romstatus CLI - estado de coleção por DAT, relatórios CSV e fixdats.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from romstatus.common.exceptions import RomStatusError, format_exception_chain
from romstatus.core.config_manager import ConfigManager
from romstatus.core.dat_status import DATStatus
from romstatus.core.fixdat import FixdatCreator
from romstatus.core.matcher import match_files
from romstatus.core.report import ReportGenerator
from romstatus.dats.downloader import load_dat
from romstatus.logging_cfg import configure_logging, get_logger, set_correlation_id
from romstatus.options import Options
from romstatus.verification.hasher import scan_files

app = typer.Typer(
    help="📀 romstatus: Auditoria de coleções de ROMs contra DATs, com relatórios e fixdats.",
    rich_markup_mode="rich",
    add_completion=False,
)
console = Console()
logger = get_logger("cli")


@app.callback()
def global_options(
    log_format: str = typer.Option("auto", "--log-format", help="auto | human | json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Mostra mensagens de debug."),
):
    configure_logging(log_format, level=logging.DEBUG if verbose else logging.WARNING)


def _scan_inputs(options: Options):
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("A calcular hashes...", total=100)

        def prog_wrapper(p, m):
            progress.update(task, completed=p * 100, description=m)

        return scan_files([Path(p) for p in options.input], progress_cb=prog_wrapper)


def _run(options: Options) -> Optional[Path]:
    files = _scan_inputs(options)

    statuses: list[DATStatus] = []
    used_paths: set[str] = set()
    duplicate_paths: set[str] = set()
    unused_paths: Optional[set[str]] = None
    fixdat_creator = FixdatCreator(options)

    for source in options.dat:
        set_correlation_id()
        dat = load_dat(source, options.get_dat_cache())
        match = match_files(dat, files)
        status = DATStatus(dat, match.candidates)
        statuses.append(status)
        used_paths.update(f.file_path for f in status.get_input_files())
        duplicate_paths.update(match.duplicates)
        # Unused only if no DAT used it nor holds a copy of it
        unused_paths = set(match.unused) if unused_paths is None else unused_paths & set(match.unused)

        console.print(f"[bold]{escape(dat.name)}:[/bold] {status.to_console(options)}")

        fixdat_path = asyncio.run(fixdat_creator.create(dat, match.candidates))
        if fixdat_path:
            console.print(f"  [dim]fixdat:[/dim] {escape(fixdat_path)}")

    if not options.should_report():
        return None

    duplicates = duplicate_paths - used_paths
    unused = unused_paths or set()
    return ReportGenerator(options).generate(statuses, duplicates=duplicates, unused=unused)


@app.command("report")
def cmd_report(
    dat: Optional[List[str]] = typer.Option(None, "--dat", "-d", help="Ficheiro DAT ou URL (repetível)."),
    input_paths: Optional[List[Path]] = typer.Option(None, "--input", "-i", help="Ficheiro ou diretoria de entrada (repetível)."),
    fixdat: Optional[bool] = typer.Option(None, "--fixdat/--no-fixdat", help="Gera um fixdat por DAT com os jogos em falta."),
    fixdat_output: Optional[str] = typer.Option(None, "--fixdat-output", help="Diretoria dos fixdats."),
    report_output: Optional[str] = typer.Option(None, "--report-output", help="Caminho do CSV (aceita tokens strftime)."),
    only_bios: Optional[bool] = typer.Option(None, "--only-bios/--not-only-bios", help="Só BIOSes."),
    only_device: Optional[bool] = typer.Option(None, "--only-device/--not-only-device", help="Só devices."),
    only_retail: Optional[bool] = typer.Option(None, "--only-retail/--not-only-retail", help="Só lançamentos retail."),
    no_bios: Optional[bool] = typer.Option(None, "--no-bios/--with-bios", help="Ignora BIOSes."),
    no_device: Optional[bool] = typer.Option(None, "--no-device/--with-device", help="Ignora devices."),
    config_file: Path = typer.Option(Path("romstatus.json"), "--config", help="Ficheiro de configuração JSON."),
):
    """
    [bold white]📊 Relatório de Coleção[/bold white]

    Compara os ficheiros de entrada com cada DAT, imprime o resumo de jogos
    encontrados/incompletos/em falta e exporta o relatório CSV.
    """
    try:
        options = ConfigManager(config_file).to_options(
            dat=dat or None,
            input=[str(p) for p in input_paths] if input_paths else None,
            fixdat=fixdat,
            fixdat_output=fixdat_output,
            report_output=report_output,
            only_bios=only_bios,
            only_device=only_device,
            only_retail=only_retail,
            no_bios=no_bios,
            no_device=no_device,
        )
        if not options.using_dats():
            console.print("[bold red]✘[/bold red] Nenhum DAT indicado (use --dat).")
            raise typer.Exit(code=2)

        report_path = _run(options)
    except RomStatusError as e:
        logger.debug("report failed", exc_info=True)
        console.print(f"[bold red]✘[/bold red] {escape(format_exception_chain(e))}")
        raise typer.Exit(code=1)

    if report_path:
        console.print(f"[bold green]✔[/bold green] Relatório exportado: [underline]{escape(str(report_path))}[/underline]")


def main():
    app()


if __name__ == "__main__":
    main()
