"""Load Logiqx XML and ClrMamePro DATs into the immutable `DAT` model."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional

from romstatus.common.exceptions import DATParseError
from romstatus.dats.models import DAT, ROM, Game, Header


def parse_dat_file(dat_path: Path) -> DAT:
    try:
        with open(dat_path, "rb") as f:
            head = f.read(512)
    except OSError as e:
        raise DATParseError(str(dat_path), str(e)) from e

    # Check for XML signature
    if b"<?xml" in head or b"<datafile" in head:
        return _parse_xml_dat(dat_path)

    # Fallback to ClrMamePro
    return _parse_clrmamepro(dat_path)


def _parse_size(value: Optional[str]) -> int:
    try:
        return int(value or 0)
    except ValueError:
        return 0


def _lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if value else None


def _parse_xml_dat(dat_path: Path) -> DAT:
    try:
        root = ET.parse(dat_path).getroot()
    except ET.ParseError as e:
        raise DATParseError(str(dat_path), str(e)) from e

    header = Header()
    header_elem = root.find("header")
    if header_elem is not None:
        header = Header(
            **{
                field_name: (header_elem.findtext(field_name) or "").strip()
                for field_name in ("name", "description", "version", "date", "author", "url", "comment")
            }
        )

    games = []
    # MAME-style DATs use <machine> instead of <game>
    for game_elem in [*root.iter("game"), *root.iter("machine")]:
        roms = tuple(
            ROM(
                name=rom.get("name", "Unknown"),
                size=_parse_size(rom.get("size")),
                crc32=_lower(rom.get("crc")),
                md5=_lower(rom.get("md5")),
                sha1=_lower(rom.get("sha1")),
                status=rom.get("status"),
            )
            for rom in game_elem.findall("rom")
        )
        name = game_elem.get("name", "Unknown")
        games.append(
            Game(
                name=name,
                description=(game_elem.findtext("description") or name).strip(),
                roms=roms,
                bios=game_elem.get("isbios") == "yes",
                device=game_elem.get("isdevice") == "yes",
                cloneof=game_elem.get("cloneof"),
                romof=game_elem.get("romof"),
            )
        )

    return DAT(header=header, games=tuple(games))


_QUOTED_FIELD = r'{}\s+"([^"]*)"'
_HEX_FIELD = r"{}\s+([0-9A-Fa-f]+)"


def _find(pattern: str, key: str, content: str) -> Optional[str]:
    match = re.search(pattern.format(key), content)
    return match.group(1) if match else None


def _iter_blocks(keyword: str, content: str):
    """Yield the body of every `keyword ( ... )` block, honouring nesting."""
    for match in re.finditer(rf"(?m)^[ \t]*{keyword}\s*\(", content):
        start = match.end()
        depth = 1
        end = start
        in_quotes = False
        while depth > 0 and end < len(content):
            char = content[end]
            if char == '"':
                in_quotes = not in_quotes
            elif not in_quotes and char == "(":
                depth += 1
            elif not in_quotes and char == ")":
                depth -= 1
            end += 1

        if depth == 0:
            yield content[start:end - 1]


def _parse_clrmamepro(dat_path: Path) -> DAT:
    try:
        content = dat_path.read_text(encoding="utf-8", errors="ignore")
    except OSError as e:
        raise DATParseError(str(dat_path), str(e)) from e

    header = Header()
    for header_content in _iter_blocks("clrmamepro", content):
        header = Header(
            name=_find(_QUOTED_FIELD, "name", header_content) or "",
            description=_find(_QUOTED_FIELD, "description", header_content) or "",
            version=_find(_QUOTED_FIELD, "version", header_content) or "",
            date=_find(_QUOTED_FIELD, "date", header_content) or "",
            author=_find(_QUOTED_FIELD, "author", header_content) or "",
            url=_find(_QUOTED_FIELD, "url", header_content) or "",
            comment=_find(_QUOTED_FIELD, "comment", header_content) or "",
        )
        break

    games = [
        _parse_game_block(block)
        for keyword in ("game", "resource")
        for block in _iter_blocks(keyword, content)
    ]
    return DAT(header=header, games=tuple(games))


def _parse_game_block(block_content: str) -> Game:
    # Strip nested rom blocks first so their "name" does not shadow the game's
    roms = tuple(_parse_rom(rom_content) for rom_content in _iter_blocks("rom", block_content))
    game_fields = re.sub(r"(?m)^[ \t]*rom\s*\((?:[^()\"]|\"[^\"]*\")*\)", "", block_content)

    name = _find(_QUOTED_FIELD, "name", game_fields) or "Unknown"
    return Game(
        name=name,
        description=_find(_QUOTED_FIELD, "description", game_fields) or name,
        roms=roms,
        cloneof=_find(_QUOTED_FIELD, "cloneof", game_fields),
        romof=_find(_QUOTED_FIELD, "romof", game_fields),
    )


def _parse_rom(rom_content: str) -> ROM:
    size_match = re.search(r"size\s+(\d+)", rom_content)
    return ROM(
        name=_find(_QUOTED_FIELD, "name", rom_content) or "Unknown",
        size=int(size_match.group(1)) if size_match else 0,
        crc32=_lower(_find(_HEX_FIELD, "crc", rom_content)),
        md5=_lower(_find(_HEX_FIELD, "md5", rom_content)),
        sha1=_lower(_find(_HEX_FIELD, "sha1", rom_content)),
        status=_find(r"{}\s+(\w+)", "flags", rom_content),
    )
