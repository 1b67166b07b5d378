"""Logging setup for the roster: text or JSON lines on stderr."""

import json
import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .models import LoggingConfig

# Fields attached to every record emitted inside ``log_context``
_context_fields: ContextVar[Dict[str, Any]] = ContextVar("communal_log_context", default={})

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None))
) | {"message", "asctime"}

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class JsonLogFormatter(logging.Formatter):
    """One JSON object per record.

    Context fields (the acting user, the operation) come first, then any
    ``extra`` values passed to the logging call such as counts and timings.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_context_fields.get())
        entry.update(
            (key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRS
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """Route the root logger to stderr (and optionally a file).

    Command output goes to stdout, so graph JSON piped from the CLI stays
    parseable whatever the log level.
    """
    config = config or LoggingConfig()
    formatter = JsonLogFormatter() if config.format == "json" else logging.Formatter(TEXT_FORMAT)

    handlers = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(logging.FileHandler(config.file, encoding="utf-8"))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(getattr(logging, config.level.upper(), logging.INFO))
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)


@contextmanager
def log_context(**fields):
    """Attach fields to every record logged inside the block.

    ``None`` values are skipped, so callers can pass an optional user id.
    """
    merged = dict(_context_fields.get())
    merged.update({k: v for k, v in fields.items() if v is not None})
    token = _context_fields.set(merged)
    try:
        yield
    finally:
        _context_fields.reset(token)


def log_performance(logger: logging.Logger, operation: str, duration_ms: float, **fields) -> None:
    """Log how long an operation took, with its sizes as extra fields."""
    logger.info(
        f"{operation} took {duration_ms:.1f}ms",
        extra={"operation": operation, "duration_ms": round(duration_ms, 3), **fields},
    )


class Timer:
    """Measures the wall time of a ``with`` block in milliseconds."""

    def __init__(self):
        self.duration_ms: Optional[float] = None
        self._start = 0.0

    def __enter__(self):
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (time.perf_counter() - self._start) * 1000
