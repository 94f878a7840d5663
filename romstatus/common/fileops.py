"""Filesystem helpers used by the writers (fixdat, report).

The blocking calls run in a worker thread through `asyncio.to_thread` so a
caller processing several DATs concurrently never stalls its event loop.
Errors are not caught here: an OSError from mkdir or write reaches the caller
unchanged.
"""

from __future__ import annotations

import asyncio
from pathlib import Path


async def exists(path: Path) -> bool:
    return await asyncio.to_thread(path.exists)


async def mkdir(path: Path) -> None:
    """Create `path` and any missing ancestors."""
    await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)


async def write_file(path: Path, contents: str) -> None:
    """Write UTF-8 text, replacing any existing file."""
    await asyncio.to_thread(path.write_text, contents, encoding="utf-8")
