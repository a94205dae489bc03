"""
Configuration helpers for the work orders backend.

Routers/services read a Settings object instead of fetching os.environ
directly, so tests can swap values with monkeypatch + get_settings.cache_clear().
"""

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
import logging
import os

DEFAULT_WORK_ORDERS_FILE = Path(__file__).resolve().parents[1] / "data" / "work_orders.json"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    public_base_url: str
    work_orders_file: Path
    log_level: int


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _path(value: str | None, default: Path) -> Path:
        if not value or not value.strip():
            return default
        return Path(value.strip()).expanduser()

    def _level(value: str | None, default: int = logging.INFO) -> int:
        if not value:
            return default
        level = logging.getLevelName(value.strip().upper())
        return level if isinstance(level, int) else default

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        public_base_url=os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/"),
        work_orders_file=_path(os.getenv("WORK_ORDERS_FILE"), DEFAULT_WORK_ORDERS_FILE),
        log_level=_level(os.getenv("LOG_LEVEL")),
    )
