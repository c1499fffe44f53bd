"""
config/settings.py
──────────────────────────────────────────────────────────────────────────────
Single source of truth for all tuneable parameters.

All values can be overridden via environment variables or a .env file placed
at the project root.  The frozen dataclass ensures settings are never mutated
at runtime.

Most commonly changed:
  API_KEY          → training service credentials
  BUNDLES_DIR      → where the <category>/<label>.zip archives live
  CONCURRENCY      → parallel submit+poll pipelines (1 = strictly serial)
  FAILURE_POLICY   → "record" failed jobs or "abort" the whole run
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (two levels up from this file)
load_dotenv(Path(__file__).parent.parent.parent / ".env")

_PROJECT_ROOT = Path(__file__).parent.parent.parent


def _env(key: str, default: str) -> str:
    return os.getenv(key, default)


def _env_int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _env_float(key: str, default: float) -> float:
    return float(os.getenv(key, str(default)))


def _env_path(key: str, default: Path) -> Path:
    return Path(os.getenv(key, str(default)))


@dataclass(frozen=True)
class Settings:
    """Immutable application settings loaded from environment variables."""

    # ── Training service ───────────────────────────────────────────────────
    api_key: str = field(
        default_factory=lambda: _env("API_KEY", "<api-key>")
    )
    service_url: str = field(
        default_factory=lambda: _env(
            "SERVICE_URL",
            "https://gateway-a.watsonplatform.net/visual-recognition/api",
        )
    )
    api_version: str = field(
        default_factory=lambda: _env("API_VERSION", "v3")
    )
    # Query-string version date pinned by the service for API behaviour.
    version_date: str = field(
        default_factory=lambda: _env("VERSION_DATE", "2015-05-19")
    )
    request_timeout: int = field(
        default_factory=lambda: _env_int("REQUEST_TIMEOUT", 120)
    )

    # ── Job scheduling (seconds) ───────────────────────────────────────────
    polling_delay: float = field(
        default_factory=lambda: _env_float("POLLING_DELAY", 2.0)
    )
    # Pause after each finished job before the slot takes the next one.
    cooldown_delay: float = field(
        default_factory=lambda: _env_float("COOLDOWN_DELAY", 5.0)
    )
    concurrency: int = field(
        default_factory=lambda: _env_int("CONCURRENCY", 1)
    )
    # 0 = poll until the job reaches a terminal status.
    max_polls: int = field(
        default_factory=lambda: _env_int("MAX_POLLS", 0)
    )
    # "record" | "abort"
    failure_policy: str = field(
        default_factory=lambda: _env("FAILURE_POLICY", "record")
    )

    # ── Combinations ───────────────────────────────────────────────────────
    min_tags: int = field(
        default_factory=lambda: _env_int("MIN_TAGS", 3)
    )
    negative_pattern: str = field(
        default_factory=lambda: _env("NEGATIVE_PATTERN", r"negative|non-fruit")
    )

    # ── Data paths ─────────────────────────────────────────────────────────
    bundles_dir: Path = field(
        default_factory=lambda: _env_path(
            "BUNDLES_DIR",
            _PROJECT_ROOT / "public" / "images" / "bundles",
        )
    )
    cache_file: Path = field(
        default_factory=lambda: _env_path(
            "CACHE_FILE",
            _PROJECT_ROOT / "classifiers.json",
        )
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Returns a cached singleton Settings instance.

    Use this everywhere instead of instantiating Settings() directly —
    it guarantees a single object is shared across the entire process.
    """
    return Settings()
