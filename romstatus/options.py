from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping, Optional

from romstatus import config


@dataclass
class Options:
    """Runtime options shared by the status engine, fixdat and report writers."""
    commands: list[str] = field(default_factory=lambda: list(config.DEFAULTS["commands"]))
    dat: list[str] = field(default_factory=list)
    input: list[str] = field(default_factory=list)
    fixdat: bool = False
    fixdat_output: str = config.FIXDAT_OUTPUT_DEFAULT
    report_output: str = config.REPORT_OUTPUT_DEFAULT
    dat_cache: str = config.DAT_CACHE_DEFAULT
    only_bios: bool = False
    only_device: bool = False
    only_retail: bool = False
    no_bios: bool = False
    no_device: bool = False

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "Options":
        """Build from a settings mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in values.items() if k in known})

    def should_write(self) -> bool:
        return any(cmd in config.WRITE_COMMANDS for cmd in self.commands)

    def should_fixdat(self) -> bool:
        return self.fixdat

    def should_report(self) -> bool:
        return "report" in self.commands

    def using_dats(self) -> bool:
        """True when games are matched against DATs instead of only listed."""
        return len(self.dat) > 0

    def get_fixdat_output(self) -> Path:
        return Path(self.fixdat_output)

    def get_report_output(self, now: Optional[datetime] = None) -> Path:
        """Report path with strftime tokens expanded."""
        return Path((now or datetime.now()).strftime(self.report_output))

    def get_dat_cache(self) -> Path:
        return Path(self.dat_cache)

