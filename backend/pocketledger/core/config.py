"""Environment-driven settings for the PocketLedger backend and client."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

SHIELD_MODES = {"LIVE", "DRY_RUN", "OFF"}
STORAGE_BACKENDS = {"local", "firestore"}


class Settings:
    def __init__(
        self,
        environment: str,
        is_vercel: bool,
        log_dir: Path,
        shield_key: str | None,
        shield_mode: str,
        storage_backend: str,
        data_dir: Path,
        api_base_url: str,
        fetch_timeout_secs: float,
    ) -> None:
        self.environment = environment
        self.is_vercel = is_vercel
        self.log_dir = log_dir
        self.shield_key = shield_key
        self.shield_mode = shield_mode
        self.storage_backend = storage_backend
        self.data_dir = data_dir
        self.api_base_url = api_base_url
        self.fetch_timeout_secs = fetch_timeout_secs

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def normalize_shield_mode(value: str | None) -> str:
    """Accept only LIVE or DRY_RUN; anything else (including unset) means OFF."""
    mode = (value or "OFF").strip().upper()
    return mode if mode in SHIELD_MODES else "OFF"


def load_settings() -> Settings:
    """Build settings from the current environment without caching."""
    storage_backend = os.getenv("STORAGE_BACKEND", "local").strip().lower()
    if storage_backend not in STORAGE_BACKENDS:
        storage_backend = "local"

    return Settings(
        environment=os.getenv("ENVIRONMENT", "development").strip().lower(),
        is_vercel=os.getenv("VERCEL") == "1",
        log_dir=Path(os.getenv("LOG_DIR", "logs")),
        shield_key=os.getenv("SHIELD_KEY") or None,
        shield_mode=normalize_shield_mode(os.getenv("SHIELD_MODE")),
        storage_backend=storage_backend,
        data_dir=Path(os.getenv("DATA_DIR", "./data")).resolve(),
        api_base_url=os.getenv("API_BASE_URL", "http://localhost:8000").rstrip("/"),
        fetch_timeout_secs=float(os.getenv("FETCH_TIMEOUT_SECS", "10")),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
