"""
Configuration module with frozen dataclasses and hard minimums.

Immutable config grouped by concern, with environment variable overrides
that cannot push values below their floors.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

# Load .env file if present
load_dotenv()


def _env_str(name: str, default: str) -> str:
    """Load string from environment variable."""
    return os.getenv(name, default)


def _env_int(name: str, default: int, min_val: int | None = None) -> int:
    """
    Load int from env with an optional hard minimum.

    Unparseable values fall back to the default rather than failing at import.
    """
    try:
        value = int(os.getenv(name, str(default)))
    except ValueError:
        value = default

    if min_val is not None:
        return max(value, min_val)
    return value


def _env_float(name: str, default: float, min_val: float | None = None) -> float:
    """Load float from env with optional hard minimum."""
    try:
        value = float(os.getenv(name, str(default)))
    except ValueError:
        value = default

    if min_val is not None:
        return max(value, min_val)
    return value


@dataclass(frozen=True)
class AnalyticsConfig:
    """Tunables for the conversation analytics transform."""

    # Number of keywords returned by keyword extraction
    KEYWORD_LIMIT: int = _env_int("KEYWORD_LIMIT", 10, min_val=1)

    # Roughly 0.75 words per token, so tokens ~= words * 1.33
    TOKENS_PER_WORD: float = _env_float("TOKENS_PER_WORD", 1.33, min_val=0.0)


@dataclass(frozen=True)
class ServerConfig:
    """Server configuration."""

    HOST: str = _env_str("HOST", "127.0.0.1")  # Default to localhost for safety
    PORT: int = _env_int("PORT", 3000)
    LOG_LEVEL: str = _env_str("LOG_LEVEL", "INFO")
    DEBUG: bool = _env_str("DEBUG", "false").lower() == "true"

    # CORS configuration - comma-separated list of allowed origins
    CORS_ORIGINS: tuple[str, ...] = tuple(
        origin.strip()
        for origin in _env_str("CORS_ORIGINS", "http://localhost:4200").split(",")
        if origin.strip()
    )


@dataclass(frozen=True)
class PathConfig:
    """Path configuration for persisted conversations and preferences."""

    BASE_DIR: Path = Path(__file__).parent.parent.parent
    DATA_DIR: Path = Path(_env_str("CONV_ANALYTICS_DATA_DIR", str(BASE_DIR / "data")))
    CONVERSATIONS_DIR: Path = DATA_DIR / "conversations"
    PREFERENCES_FILE: Path = DATA_DIR / "preferences.json"


# Module-level singletons (immutable)
ANALYTICS = AnalyticsConfig()
SERVER = ServerConfig()
PATHS = PathConfig()


@lru_cache(maxsize=1)
def get_all_config() -> dict[str, object]:
    """Return all configuration as a dictionary for debugging."""
    return {
        "analytics": ANALYTICS,
        "server": SERVER,
        "paths": {
            "base_dir": str(PATHS.BASE_DIR),
            "data_dir": str(PATHS.DATA_DIR),
            "conversations_dir": str(PATHS.CONVERSATIONS_DIR),
            "preferences_file": str(PATHS.PREFERENCES_FILE),
        },
    }
