import asyncio

import pytest

import romstatus.common.fileops as fileops


def test_mkdir_and_exists(tmp_path):
    target = tmp_path / "a" / "b"

    assert asyncio.run(fileops.exists(target)) is False
    asyncio.run(fileops.mkdir(target))
    assert asyncio.run(fileops.exists(target)) is True
    # Creating an existing directory is a no-op
    asyncio.run(fileops.mkdir(target))


def test_write_file_replaces_contents(tmp_path):
    target = tmp_path / "out.dat"
    target.write_text("old")

    asyncio.run(fileops.write_file(target, "ção\n"))

    assert target.read_text(encoding="utf-8") == "ção\n"


def test_write_file_errors_propagate(tmp_path):
    with pytest.raises(OSError):
        asyncio.run(fileops.write_file(tmp_path / "missing" / "out.dat", "x"))
