"""Configuration defaults and constants for the romstatus package."""
from __future__ import annotations

from typing import Any, Dict

# Author string written into generated DAT headers
AUTHOR = "romstatus"
HOMEPAGE = "https://github.com/romstatus/romstatus"

# Default locations, relative to the working directory
FIXDAT_OUTPUT_DEFAULT = "./fixdats"
REPORT_OUTPUT_DEFAULT = "./romstatus_%Y-%m-%dT%H%M%S.csv"
DAT_CACHE_DEFAULT = "./.romstatus_cache/dats"

# Version stamp for generated DAT headers
DAT_VERSION_FMT = "%Y%m%d-%H%M%S"
DAT_DATE_FMT = "%Y-%m-%d"

# Commands that copy/move/link files into an output directory
WRITE_COMMANDS = frozenset({"copy", "move", "link"})

DEFAULTS: Dict[str, Any] = {
    "commands": ["report"],
    "fixdat": False,
    "fixdat_output": FIXDAT_OUTPUT_DEFAULT,
    "report_output": REPORT_OUTPUT_DEFAULT,
    "dat_cache": DAT_CACHE_DEFAULT,
    "only_bios": False,
    "only_device": False,
    "only_retail": False,
    "no_bios": False,
    "no_device": False,
}
