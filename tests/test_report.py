import csv
import io
from datetime import datetime

from romstatus.core.dat_status import CSV_HEADERS, DATStatus
from romstatus.core.report import ReportGenerator
from tests.helpers import make_candidate, make_dat, make_game, make_options


def _statuses():
    game_a = make_game("GameA", rom_count=2)
    game_b = make_game("GameB", rom_count=2)
    zelda = make_game("Zelda")
    first = DATStatus(make_dat(game_b, game_a, name="Beta DAT"), [make_candidate(game_a)])
    second = DATStatus(make_dat(zelda, name="Alpha DAT"), [])
    return [first, second]


def test_output_path_expands_strftime(tmp_path):
    options = make_options(report_output=str(tmp_path / "report_%Y-%m-%d.csv"))

    path = ReportGenerator(options).output_path(datetime(2024, 2, 3))

    assert path == tmp_path / "report_2024-02-03.csv"


def test_build_merges_dats_with_single_header():
    text = ReportGenerator(make_options()).build(
        _statuses(),
        duplicates=["/in/dup.bin"],
        unused=["/in/z.bin", "/in/a.bin", "/in/z.bin"],
    )

    assert text.count(",".join(CSV_HEADERS)) == 1
    assert text.endswith("\n")
    rows = list(csv.DictReader(io.StringIO(text)))
    assert [(r["DAT Name"], r["Game Name"], r["Status"]) for r in rows[:3]] == [
        ("Alpha DAT", "Zelda", "MISSING"),
        ("Beta DAT", "GameA", "FOUND"),
        ("Beta DAT", "GameB", "MISSING"),
    ]
    assert [(r["Status"], r["ROM Files"]) for r in rows[3:]] == [
        ("DUPLICATE", "/in/dup.bin"),
        ("UNUSED", "/in/a.bin"),
        ("UNUSED", "/in/z.bin"),
    ]


def test_build_without_loose_files():
    text = ReportGenerator(make_options()).build(_statuses())

    rows = list(csv.DictReader(io.StringIO(text)))
    assert len(rows) == 3
    assert {r["Status"] for r in rows} == {"FOUND", "MISSING"}


def test_generate_writes_file(tmp_path):
    options = make_options(report_output=str(tmp_path / "out" / "report.csv"))

    path = ReportGenerator(options).generate(_statuses(), deleted=["/out/old.bin"])

    assert path == tmp_path / "out" / "report.csv"
    content = path.read_text(encoding="utf-8")
    assert content.startswith("DAT Name,Game Name,Status,ROM Files")
    assert "DELETED,/out/old.bin" in content


def test_header_written_like_engine_csv():
    statuses = _statuses()
    text = ReportGenerator(make_options()).build(statuses)

    header = text.split("\n", 1)[0]
    assert header == DATStatus.csv_header()
    assert header == statuses[0].to_csv(make_options()).split("\n", 1)[0]
    assert next(csv.reader(io.StringIO(header))) == CSV_HEADERS
