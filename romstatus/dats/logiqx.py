"""Logiqx XML serialization for DATs, plus the canonical DAT filename."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET

from romstatus.dats.models import DAT, Game, ROM

XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>'
DOCTYPE = (
    '<!DOCTYPE datafile PUBLIC "-//Logiqx//DTD ROM Management Datafile//EN" '
    '"http://www.logiqx.com/Dats/datafile.dtd">'
)

_HEADER_FIELDS = ("name", "description", "version", "date", "author", "url", "comment")

# Characters that are invalid in filenames on at least one common filesystem
_UNSAFE_FILENAME_CHARS = re.compile(r'[\\/:*?"<>|\x00-\x1f]')


def _rom_element(rom: ROM) -> ET.Element:
    attrs = {"name": rom.name, "size": str(rom.size)}
    if rom.crc32:
        attrs["crc"] = rom.crc32
    if rom.md5:
        attrs["md5"] = rom.md5
    if rom.sha1:
        attrs["sha1"] = rom.sha1
    if rom.status:
        attrs["status"] = rom.status
    return ET.Element("rom", attrs)


def _game_element(game: Game) -> ET.Element:
    attrs = {"name": game.name}
    if game.bios:
        attrs["isbios"] = "yes"
    if game.device:
        attrs["isdevice"] = "yes"
    if game.cloneof:
        attrs["cloneof"] = game.cloneof
    if game.romof:
        attrs["romof"] = game.romof

    elem = ET.Element("game", attrs)
    ET.SubElement(elem, "description").text = game.description or game.name
    for rom in game.roms:
        elem.append(_rom_element(rom))
    return elem


def to_xml_dat(dat: DAT) -> str:
    """Serialize a DAT to Logiqx XML text."""
    root = ET.Element("datafile")
    header = ET.SubElement(root, "header")
    for field_name in _HEADER_FIELDS:
        value = getattr(dat.header, field_name)
        if value:
            ET.SubElement(header, field_name).text = value

    for game in dat.games:
        root.append(_game_element(game))

    ET.indent(root, space="\t")
    body = ET.tostring(root, encoding="unicode")
    return f"{XML_DECLARATION}\n{DOCTYPE}\n{body}\n"


def get_filename(dat: DAT) -> str:
    """`<name> (<version>).dat`, with path-unsafe characters replaced."""
    stem = dat.name or "Unknown"
    if dat.header.version:
        stem = f"{stem} ({dat.header.version})"
    stem = _UNSAFE_FILENAME_CHARS.sub("_", stem).strip(" .")
    return f"{stem}.dat"
