# query_handlers/utils/logger.py
from __future__ import annotations

import json
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Iterator, Optional

from rich.console import Console
from rich.logging import RichHandler

from query_handlers.utils.config import LogLevel, get_settings


__all__ = [
    "get_logger",
    "set_log_level",
    "bind",
    "unbind",
    "bound",
]

PACKAGE_LOGGER = "query_handlers"

_config_lock = threading.Lock()
_configured = False
_context: Dict[str, Any] = {}  # e.g. url / selector of the query being run


# ------------- Record enrichment -------------

class _ContextFilter(logging.Filter):
    """Copies the bound query context onto each record as `record.context`."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.context = dict(_context)
        return True


class _ConsoleFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        msg = super().format(record)
        ctx = getattr(record, "context", None)
        if ctx:
            msg += "  " + " ".join(f"{k}={v}" for k, v in ctx.items())
        return msg


class JsonFormatter(logging.Formatter):
    """One JSON object per line: time, level, logger, message and bound context."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(getattr(record, "context", None) or {})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


# ------------- Setup -------------

_LEVELS = {
    LogLevel.DEBUG: logging.DEBUG,
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.CRITICAL: logging.CRITICAL,
}


def _ensure_configured() -> None:
    """
    Attach handlers to the package logger on first use.

    Only the `query_handlers` logger is touched; the root logger stays under
    the embedding application's control.
    """
    global _configured
    if _configured:
        return

    with _config_lock:
        if _configured:
            return

        settings = get_settings()
        level = _LEVELS.get(settings.LOG_LEVEL, logging.INFO)

        pkg = logging.getLogger(PACKAGE_LOGGER)
        pkg.setLevel(level)
        pkg.propagate = False
        for h in list(pkg.handlers):
            pkg.removeHandler(h)
        context_filter = _ContextFilter()

        console = RichHandler(
            console=Console(stderr=True, color_system="auto", no_color=not settings.COLORIZED_OUTPUT),
            show_time=True,
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        console.setFormatter(_ConsoleFormatter("%(message)s"))
        console.addFilter(context_filter)
        console.setLevel(level)
        pkg.addHandler(console)

        if settings.LOG_TO_FILE:
            settings.LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
            to_file = RotatingFileHandler(
                filename=str(settings.LOG_FILE),
                maxBytes=2 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
                delay=True,
            )
            to_file.setFormatter(JsonFormatter())
            to_file.addFilter(context_filter)
            to_file.setLevel(level)
            pkg.addHandler(to_file)

        # Playwright's driver chatter is only interesting when something breaks
        for name in ("asyncio", "playwright"):
            logging.getLogger(name).setLevel(max(level, logging.WARNING))

        _configured = True


# ------------- Public API -------------

def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the package hierarchy; handlers are set up on first call."""
    _ensure_configured()
    return logging.getLogger(name or PACKAGE_LOGGER)


def set_log_level(level: LogLevel | str) -> None:
    _ensure_configured()
    name = level.value if isinstance(level, LogLevel) else str(level).upper()
    py_level = logging.getLevelName(name)
    if not isinstance(py_level, int):
        raise ValueError(f"Unknown log level: {level!r}")
    pkg = logging.getLogger(PACKAGE_LOGGER)
    pkg.setLevel(py_level)
    for h in pkg.handlers:
        h.setLevel(py_level)


def bind(**kwargs: Any) -> None:
    """Attach key=value context (e.g. url=...) to every following record."""
    _context.update(kwargs)


def unbind(*keys: str) -> None:
    for k in keys:
        _context.pop(k, None)


@contextmanager
def bound(**kwargs: Any) -> Iterator[None]:
    """
    Scoped `bind`:

        with bound(url=url, selector=selector):
            log.info("querying")
    """
    bind(**kwargs)
    try:
        yield
    finally:
        unbind(*kwargs)
