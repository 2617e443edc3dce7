"""Project discovery and runtime configuration.

Convention-based: each project has a ``.tessera/`` directory containing
``tessera.db`` (SQLite), ``config.json`` (server settings), and
``tessera.log`` (JSONL log). ``TESSERA_*`` environment variables override
values from ``config.json``.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

TESSERA_DIR_NAME = ".tessera"
DB_FILENAME = "tessera.db"
CONFIG_FILENAME = "config.json"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3000
DEFAULT_CORS_ORIGINS = ("http://localhost:5173", "http://localhost:3000")
VALID_ENVIRONMENTS: frozenset[str] = frozenset({"development", "production", "test"})


@dataclass
class AppConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    environment: str = "production"
    cors_origins: list[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def find_tessera_root(start: Path | None = None) -> Path:
    """Walk up from start (default cwd) looking for .tessera/ directory.

    Returns the .tessera/ directory path (not the project root).
    """
    current = (start or Path.cwd()).resolve()
    for parent in [current, *current.parents]:
        candidate = parent / TESSERA_DIR_NAME
        if candidate.is_dir():
            return candidate
    msg = f"No {TESSERA_DIR_NAME}/ directory found in {current} or any parent"
    raise FileNotFoundError(msg)


def resolve_db_path(start: Path | None = None) -> Path:
    """``TESSERA_DB_PATH`` if set, else ``<.tessera>/tessera.db`` found from *start*."""
    override = os.getenv("TESSERA_DB_PATH")
    if override:
        return Path(override)
    return find_tessera_root(start) / DB_FILENAME


def _coerce_port(raw: Any) -> int:
    try:
        port = int(raw)
    except (TypeError, ValueError):
        logger.warning("Invalid port value %r in config; using default %d", raw, DEFAULT_PORT)
        return DEFAULT_PORT
    if not (1 <= port <= 65535):
        logger.warning("Port %d out of range (1-65535) in config; using default %d", port, DEFAULT_PORT)
        return DEFAULT_PORT
    return port


def _coerce_environment(raw: Any) -> str:
    value = str(raw).strip().lower()
    if value not in VALID_ENVIRONMENTS:
        logger.warning("Unknown environment %r in config, falling back to 'production'", raw)
        return "production"
    return value


def read_config(tessera_dir: Path | None) -> AppConfig:
    """Read .tessera/config.json plus env overrides. Returns defaults if missing or corrupt."""
    data: dict[str, Any] = {}
    if tessera_dir is not None:
        config_path = tessera_dir / CONFIG_FILENAME
        if config_path.exists():
            try:
                loaded = json.loads(config_path.read_text())
            except (json.JSONDecodeError, OSError) as exc:
                logger.warning("Failed to read %s, using defaults: %s", config_path, exc)
                loaded = {}
            if isinstance(loaded, dict):
                data = loaded
            else:
                logger.warning("Config %s is not a JSON object; using defaults", config_path)

    config = AppConfig()
    config.host = str(os.getenv("TESSERA_HOST") or data.get("host", DEFAULT_HOST))
    config.port = _coerce_port(os.getenv("TESSERA_PORT") or data.get("port", DEFAULT_PORT))
    config.environment = _coerce_environment(os.getenv("TESSERA_ENV") or data.get("environment", "production"))
    origins = data.get("cors_origins")
    if isinstance(origins, list) and all(isinstance(o, str) for o in origins):
        config.cors_origins = list(origins)
    return config


def write_atomic(path: Path, content: str) -> None:
    """Write content to path atomically via temp file + os.replace()."""
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(content, encoding="utf-8")
        os.replace(tmp, path)
    except BaseException:
        with contextlib.suppress(OSError):
            tmp.unlink()
        raise


def write_config(tessera_dir: Path, config: AppConfig) -> None:
    """Write .tessera/config.json."""
    write_atomic(tessera_dir / CONFIG_FILENAME, json.dumps(config.to_dict(), indent=2) + "\n")
