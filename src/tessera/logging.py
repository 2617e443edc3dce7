"""Structured JSON logging for tessera.

Writes JSONL to .tessera/tessera.log with rotation (5MB, 3 backups). Request
log lines carry ``method``, ``path``, ``status`` and ``duration_ms`` as
top-level keys; build them with ``request_extra()``.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

_LOG_FILENAME = "tessera.log"
_setup_lock = threading.Lock()
_MAX_BYTES = 5 * 1024 * 1024  # 5MB
_BACKUP_COUNT = 3

_REQUEST_KEYS = ("method", "path", "status", "duration_ms", "error")


def request_extra(
    method: str,
    path: str,
    status: int,
    duration_ms: float,
    *,
    error: str | None = None,
) -> dict[str, Any]:
    """``extra=`` mapping for one request log line."""
    extra: dict[str, Any] = {"method": method, "path": path, "status": status, "duration_ms": duration_ms}
    if error is not None:
        extra["error"] = error
    return extra


class _JsonFormatter(logging.Formatter):
    """One JSON object per record; UTC millisecond timestamps."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        entry.update({key: getattr(record, key) for key in _REQUEST_KEYS if hasattr(record, key)})
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = str(record.exc_info[1])
        return json.dumps(entry, default=str)


def _take_file_handler(logger: logging.Logger, target: str) -> RotatingFileHandler | None:
    """Return the handler already writing *target*; close any writing elsewhere."""
    found: RotatingFileHandler | None = None
    for h in logger.handlers[:]:
        if not isinstance(h, RotatingFileHandler):
            continue
        if h.baseFilename == target and found is None:
            found = h
            continue
        logger.removeHandler(h)
        h.close()
    return found


def setup_logging(log_dir: Path, *, level: int = logging.INFO) -> logging.Logger:
    """Attach the JSONL file handler for *log_dir* to the ``tessera`` logger.

    Safe to call once per process entry point and again from tests: the same
    directory keeps its handler, a new one replaces it.
    """
    logger = logging.getLogger("tessera")
    log_path = log_dir / _LOG_FILENAME

    with _setup_lock:
        if _take_file_handler(logger, os.path.abspath(str(log_path))) is None:
            handler = RotatingFileHandler(str(log_path), maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT)
            handler.setFormatter(_JsonFormatter())
            logger.addHandler(handler)
        logger.setLevel(level)
    return logger
