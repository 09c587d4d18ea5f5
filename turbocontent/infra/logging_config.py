"""Custom logging -- shorten absolute paths to relative in log output."""

from __future__ import annotations

import asyncio
import logging
import traceback
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# loggers that install their own handlers
_THIRD_PARTY_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "watchfiles", "watchfiles.main")

# noisy SDK transports; DEBUG from these dumps whole request bodies
_QUIET_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "google_genai")


def _shorten_path(text: str, root_normalized: str) -> str:
    """Replace project-absolute paths with relative ones in a string."""
    if not text or not root_normalized:
        return text
    normalized = text.replace("\\", "/")
    if root_normalized not in normalized:
        return text
    return normalized.replace(root_normalized + "/", "").replace(root_normalized, ".")


class ShortPathFormatter(logging.Formatter):

    def __init__(self, *args, project_root: Path | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.project_root = project_root or _PROJECT_ROOT
        self._root_norm = str(self.project_root).replace("\\", "/")

    def _shorten(self, text: str) -> str:
        return _shorten_path(text, self._root_norm)

    def _shorten_logger_name(self, name: str) -> str:
        if name == "uvicorn.error":
            return "uvicorn"
        if name.startswith("watchfiles"):
            return "watchfiles"
        if name.startswith("turbocontent.") or name == "uvicorn.access":
            return name
        if "." in name:
            return ".".join(name.split(".")[-2:])
        return name

    def format(self, record: logging.LogRecord) -> str:
        original_name = record.name
        record.name = self._shorten_logger_name(record.name)
        try:
            message = self._shorten(self._safe_format(record))
        finally:
            record.name = original_name
        return message

    def _safe_format(self, record: logging.LogRecord) -> str:
        """Format with fallback for mismatched %-style args (e.g. SDK loggers)."""
        try:
            return super().format(record)
        except TypeError:
            record.msg = f"{record.msg} {record.args}"
            record.args = None
            return super().format(record)

    def formatException(self, ei) -> str:
        return "".join(self._shorten(line) for line in traceback.format_exception(*ei))


class ReloadCancelledErrorFilter(logging.Filter):
    """Downgrade CancelledError tracebacks from uvicorn's lifespan to DEBUG.

    They fire on every ``--reload`` restart and are not failures.
    """

    _MARKERS = ("lifespan", "receive_queue", "starlette/routing.py", "asyncio/queues.py")

    def filter(self, record: logging.LogRecord) -> bool:
        exc_info = record.exc_info
        if record.levelno < logging.ERROR or not exc_info or exc_info[0] is None:
            return True
        if not issubclass(exc_info[0], asyncio.CancelledError):
            return True

        text = record.getMessage()
        if exc_info[2] is not None:
            text += "".join(traceback.format_tb(exc_info[2]))
        text = text.replace("\\", "/").lower()
        if any(marker in text for marker in self._MARKERS):
            record.levelno = logging.DEBUG
            record.levelname = "DEBUG"
        return True


def configure_logging(
    formatter: logging.Formatter | None = None,
    *,
    level: int = logging.INFO,
) -> None:
    if formatter is None:
        formatter = ShortPathFormatter("%(asctime)s %(levelname)-8s [%(name)s] %(message)s")

    reload_filter = ReloadCancelledErrorFilter()
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    handler.addFilter(reload_filter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # uvicorn / watchfiles have their own handlers -- override them
    for name in _THIRD_PARTY_LOGGERS:
        lg = logging.getLogger(name)
        lg.handlers.clear()
        lg.addHandler(handler)
        lg.propagate = False

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
