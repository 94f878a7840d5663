"""Centralized logging helpers for romstatus.

Every module asks for its logger through `get_logger` so formatting and
verbosity are adjusted in one place. The CLI calls `configure_logging` once
to pick a human or JSON console format.
"""

from __future__ import annotations

import contextvars
import functools
import json
import logging
import os
import sys
import time
import uuid
from typing import Optional


_STD_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def get_logger(name: str = "romstatus", level: Optional[int] = None) -> logging.Logger:
    """Return a logger under the `romstatus` namespace.

    Handlers are never attached here; records propagate to whatever
    `configure_logging` installed on the root logger.
    """
    if not name.startswith("romstatus"):
        name = f"romstatus.{name}"
    logger = logging.getLogger(name)
    if level is not None:
        logger.setLevel(level)
    return logger


# Correlation ID support for tracing one DAT's processing across modules
_cid_var: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "romstatus_correlation_id", default=None
)


def set_correlation_id(cid: str | None = None) -> str:
    """Set or create and set a correlation id for the current context.

    Returns the correlation id string.
    """
    if cid is None:
        cid = uuid.uuid4().hex
    _cid_var.set(cid)
    return cid


def get_correlation_id() -> str | None:
    return _cid_var.get()


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter that includes correlation id when available."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        cid = get_correlation_id()
        if cid:
            payload["correlation_id"] = cid
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def log_call(level: int = logging.DEBUG):
    """Decorator that logs function entry, duration and exit.

    Usage:
        @log_call()
        def foo(...):
            ...
    """

    def _decorator(func):
        @functools.wraps(func)
        def _wrapper(*args, **kwargs):
            logger = logging.getLogger(func.__module__)
            start = time.time()
            logger.debug("Entering %s", func.__qualname__)
            try:
                result = func(*args, **kwargs)
            except Exception:
                duration = (time.time() - start) * 1000.0
                logger.exception(
                    "Exception in %s after %.2fms",
                    func.__qualname__,
                    duration,
                )
                raise
            duration = (time.time() - start) * 1000.0
            logger.log(
                level,
                "Exited %s; duration_ms=%.2f",
                func.__qualname__,
                duration,
            )
            return result

        return _wrapper

    return _decorator


def configure_logging(env: Optional[str] = "auto", level: int = logging.INFO):
    """Configure the root logger.

    env: 'auto' (default) | 'json' | 'human'
    - 'auto' chooses human-readable when stderr is a TTY, otherwise JSON.
    - 'json' forces JSON output.
    - 'human' forces a readable formatter.

    Returns the root logger.
    """
    chosen = env or os.getenv("ROMSTATUS_LOG_FORMAT", "auto")
    chosen = chosen.lower()
    if chosen in ("json", "human"):
        mode = chosen
    else:
        mode = "human" if sys.stderr.isatty() else "json"

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # One console handler, marked by name so repeated calls stay idempotent
    if not any(
        getattr(h, "name", None) == "romstatus_console"
        for h in root_logger.handlers
    ):
        sh = logging.StreamHandler()
        sh.name = "romstatus_console"
        if mode == "json":
            sh.setFormatter(JsonFormatter())
        else:
            sh.setFormatter(logging.Formatter(_STD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(sh)

    return root_logger
