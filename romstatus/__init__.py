"""romstatus package root.

Expose the two reporting entry points at package level. Keep this file small
and explicit to make `import romstatus` lightweight.
"""

from .core.dat_status import DATStatus, GameStatus, ROMType
from .core.fixdat import FixdatCreator

__all__ = [
    "DATStatus",
    "FixdatCreator",
    "GameStatus",
    "ROMType",
]
