import asyncio
import xml.etree.ElementTree as ET
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from romstatus.core.fixdat import FixdatCreator, build_derived_header
from romstatus.dats.parser import parse_dat_file
from tests.helpers import make_candidate, make_dat, make_game, make_options


def _create(options, dat, candidates, progress_cb=None):
    return asyncio.run(FixdatCreator(options, progress_cb=progress_cb).create(dat, candidates))


@pytest.fixture
def example():
    game_a = make_game("GameA", rom_count=2)
    game_b = make_game("GameB", rom_count=2)
    game_c = make_game("GameC", rom_count=0)
    dat = make_dat(game_a, game_b, game_c)
    candidates = [make_candidate(game_a), make_candidate(game_b, rom_count=1)]
    return dat, candidates


def test_disabled_returns_none(tmp_path, example):
    dat, candidates = example
    out = tmp_path / "fixdats"

    assert _create(make_options(fixdat_output=str(out)), dat, candidates) is None
    assert not out.exists()


def test_nothing_missing_returns_none(tmp_path):
    game = make_game("Complete", rom_count=3)
    out = tmp_path / "fixdats"
    options = make_options(fixdat=True, fixdat_output=str(out))

    assert _create(options, make_dat(game), [make_candidate(game)]) is None
    # No directory is created when there is nothing to write
    assert not out.exists()


def test_only_games_with_missing_roms(tmp_path, example):
    dat, candidates = example
    options = make_options(fixdat=True, fixdat_output=str(tmp_path / "fixdats"))

    path = _create(options, dat, candidates)

    assert path is not None
    fixdat = parse_dat_file(Path(path))
    assert [g.name for g in fixdat.games] == ["GameB"]
    # Every ROM of the game is listed, including the resolved one
    assert [r.crc32 for r in fixdat.games[0].roms] == [r.crc32 for r in dat.games[1].roms]


def test_no_candidates_lists_every_game_with_roms(tmp_path, example):
    dat, _ = example
    options = make_options(fixdat=True, fixdat_output=str(tmp_path))

    path = _create(options, dat, [])

    names = [g.name for g in parse_dat_file(Path(path)).games]
    assert names == ["GameA", "GameB"]


def test_rom_resolved_by_any_candidate(tmp_path):
    game = make_game("Split", rom_count=2)
    first = make_candidate(game, rom_count=1)
    second = make_candidate(game, input_dir="/other")
    options = make_options(fixdat=True, fixdat_output=str(tmp_path))

    assert _create(options, make_dat(game), [first, second]) is None


def test_creates_missing_directory(tmp_path, example):
    dat, candidates = example
    out = tmp_path / "deep" / "nested" / "fixdats"
    options = make_options(fixdat=True, fixdat_output=str(out))

    path = _create(options, dat, candidates)

    assert out.is_dir()
    assert path.startswith(str(out))


def test_output_is_logiqx_xml_with_derived_header(tmp_path, example):
    dat, candidates = example
    options = make_options(fixdat=True, fixdat_output=str(tmp_path))

    path = _create(options, dat, candidates)

    text = Path(path).read_text(encoding="utf-8")
    assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>')
    assert "<!DOCTYPE datafile" in text
    header = ET.parse(path).getroot().find("header")
    assert header.findtext("name") == "Test fixdat"
    assert "Original DAT: Test (20240101)" in header.findtext("comment")
    assert Path(path).name.startswith("Test fixdat (")


def test_write_failure_propagates(tmp_path, example):
    dat, candidates = example
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")
    options = make_options(fixdat=True, fixdat_output=str(blocker))

    with pytest.raises(OSError):
        _create(options, dat, candidates)


def test_progress_callback(tmp_path, example):
    dat, candidates = example
    progress = MagicMock()

    _create(make_options(fixdat=True, fixdat_output=str(tmp_path)), dat, candidates, progress)

    assert progress.call_args_list[0].args[0] == 0.0
    assert progress.call_args_list[-1].args[0] == 1.0


class TestDerivedHeader:
    def test_fields(self):
        dat = make_dat(make_game("G"), name="Nintendo - Game Boy", version="20240101-000000")
        now = datetime(2024, 5, 6, 7, 8, 9)

        header = build_derived_header("fixdat", dat, make_options(), now=now)

        assert header.name == "Nintendo - Game Boy fixdat"
        assert header.description == "Nintendo - Game Boy fixdat"
        assert header.version == "20240506-070809"
        assert header.date == "2024-05-06"
        assert header.author == "romstatus"
        assert "Original DAT: Nintendo - Game Boy (20240101-000000)" in header.comment
        assert "Filters" not in header.comment

    def test_active_filters_recorded(self):
        header = build_derived_header(
            "fixdat", make_dat(), make_options(no_bios=True, only_retail=True)
        )

        assert "Filters: only_retail, no_bios" in header.comment
