"""Immutable catalog (DAT) model: headers, games and their ROMs."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True, slots=True)
class ROM:
    name: str
    size: int = 0
    crc32: Optional[str] = None
    md5: Optional[str] = None
    sha1: Optional[str] = None
    status: Optional[str] = None

    def hash_code(self) -> str:
        """Content identity: strongest available checksum, else CRC32 + size."""
        if self.sha1:
            return self.sha1.lower()
        if self.md5:
            return self.md5.lower()
        return f"{(self.crc32 or '').lower()}|{self.size}"


# No-Intro / Redump naming conventions
_UNLICENSED = re.compile(r"\(Unl[a-z0-9. ]*\)", re.IGNORECASE)
_DEBUG = re.compile(r"\(Debug[a-z0-9. ]*\)", re.IGNORECASE)
_DEMO = re.compile(r"\((Demo|Kiosk|Taikenban)[a-z0-9. -]*\)", re.IGNORECASE)
_BETA = re.compile(r"\(Beta[a-z0-9. ]*\)", re.IGNORECASE)
_SAMPLE = re.compile(r"\(Sample[a-z0-9. ]*\)", re.IGNORECASE)
_PROTOTYPE = re.compile(r"\(Proto[a-z0-9. ]*\)", re.IGNORECASE)
_PROGRAM = re.compile(r"\((Program|Test Program|SDK Build)[a-z0-9. ]*\)", re.IGNORECASE)
_AFTERMARKET = re.compile(r"\(Aftermarket[a-z0-9. ]*\)", re.IGNORECASE)
_HOMEBREW = re.compile(r"\(Homebrew[a-z0-9. ]*\)", re.IGNORECASE)
_BAD = re.compile(r"\[b[0-9]*\]")


@dataclass(frozen=True, eq=False)
class Game:
    """One DAT entry. Equality follows `hash_code()`, never object identity."""
    name: str
    description: str = ""
    roms: tuple[ROM, ...] = ()
    bios: bool = False
    device: bool = False
    cloneof: Optional[str] = None
    romof: Optional[str] = None

    def hash_code(self) -> str:
        return "|".join([self.name, *(rom.hash_code() for rom in self.roms)])

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Game):
            return NotImplemented
        return self.hash_code() == other.hash_code()

    def __hash__(self) -> int:
        return hash(self.hash_code())

    def is_bios(self) -> bool:
        return self.bios

    def is_device(self) -> bool:
        return self.device

    def is_unlicensed(self) -> bool:
        return _UNLICENSED.search(self.name) is not None

    def is_debug(self) -> bool:
        return _DEBUG.search(self.name) is not None

    def is_demo(self) -> bool:
        return _DEMO.search(self.name) is not None

    def is_beta(self) -> bool:
        return _BETA.search(self.name) is not None

    def is_sample(self) -> bool:
        return _SAMPLE.search(self.name) is not None

    def is_prototype(self) -> bool:
        return _PROTOTYPE.search(self.name) is not None

    def is_program(self) -> bool:
        return _PROGRAM.search(self.name) is not None

    def is_aftermarket(self) -> bool:
        return _AFTERMARKET.search(self.name) is not None

    def is_homebrew(self) -> bool:
        return _HOMEBREW.search(self.name) is not None

    def is_bad(self) -> bool:
        return _BAD.search(self.name) is not None

    def is_retail(self) -> bool:
        return not (
            self.bios
            or self.is_unlicensed()
            or self.is_debug()
            or self.is_demo()
            or self.is_beta()
            or self.is_sample()
            or self.is_prototype()
            or self.is_program()
            or self.is_aftermarket()
            or self.is_homebrew()
            or self.is_bad()
        )


@dataclass(frozen=True, slots=True)
class Header:
    name: str = ""
    description: str = ""
    version: str = ""
    date: str = ""
    author: str = ""
    url: str = ""
    comment: str = ""


@dataclass(frozen=True)
class DAT:
    header: Header = field(default_factory=Header)
    games: tuple[Game, ...] = ()

    @property
    def name(self) -> str:
        return self.header.name

    @property
    def description(self) -> str:
        return self.header.description or self.header.name
