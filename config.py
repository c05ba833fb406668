from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dotenv import load_dotenv, dotenv_values

# ──────────────────────────────────────────────────────────────
#  Project root & .env loading
# ──────────────────────────────────────────────────────────────

ROOT_DIR: Path = Path(__file__).resolve().parent

# Load the project-level .env file if present (values do **not** override
# already-exported environment variables).
load_dotenv(ROOT_DIR / ".env", override=False)

_SECRET_MARKERS: tuple[str, ...] = ("KEY", "TOKEN", "SECRET", "PASSWORD")


class ConfigError(RuntimeError):
    """Raised when a required setting is missing at startup."""


# ──────────────────────────────────────────────────────────────
#  Public helpers
# ──────────────────────────────────────────────────────────────


def _to_bool(value: str) -> bool:
    """Convert common truthy strings to ``True``."""
    return value.strip().lower() in {"1", "true", "yes", "on"}


def env(key: str, default: Any = None, cast: type | None = str) -> Any:
    """
    Return environment variable *key* with optional *cast*.

    If *key* is missing or *cast* fails, *default* is returned instead.
    """
    raw = os.getenv(key)
    if raw is None:  # not set → fall back immediately
        return default

    if cast is bool:  # specialised fast-path for booleans
        return _to_bool(raw)

    try:
        return cast(raw) if cast else raw
    except (TypeError, ValueError):
        return default


def mask(key: str, value: str | None) -> str:
    """Return *value* unless *key* names a credential, in which case hide it."""
    if value and any(marker in key.upper() for marker in _SECRET_MARKERS):
        return "***"
    return value or ""


# ──────────────────────────────────────────────────────────────
#  Required settings
# ──────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class Settings:
    """Process-wide, read-only values every query needs."""

    assistant_id: str
    api_key: str

    def __repr__(self) -> str:
        return f"Settings(assistant_id={self.assistant_id!r}, api_key='***')"


def require(key: str) -> str:
    """Return the stripped value of *key*; raise :class:`ConfigError` if unset or blank."""
    value = (env(key, "") or "").strip()
    if not value:
        raise ConfigError(f"Missing required environment variable: {key}")
    return value


def load_settings() -> Settings:
    """
    Read ``ASSISTANT_ID`` and ``API_KEY`` from the environment.

    Raises :class:`ConfigError` listing every missing variable so the CLI
    can fail before the first prompt is shown.
    """
    values: dict[str, str] = {}
    missing: list[str] = []
    for key in ("ASSISTANT_ID", "API_KEY"):
        try:
            values[key] = require(key)
        except ConfigError:
            missing.append(key)
    if missing:
        raise ConfigError(f"Missing required environment variable(s): {', '.join(missing)}")
    return Settings(assistant_id=values["ASSISTANT_ID"], api_key=values["API_KEY"])


# ──────────────────────────────────────────────────────────────
#  Global debug flag
# ──────────────────────────────────────────────────────────────

ENABLE_DEBUG: bool = env("ENABLE_DEBUG", False, cast=bool)
LOG_LEVEL: str = env("LOG_LEVEL", "WARNING").upper()

# ──────────────────────────────────────────────────────────────
#  Optional debug dump of .env values
# ──────────────────────────────────────────────────────────────

if ENABLE_DEBUG:
    # Identify which file actually provided the values
    _env_file: Path = ROOT_DIR / ".env"
    if not _env_file.exists():
        _env_file = ROOT_DIR / ".env.example"

    _values = dotenv_values(_env_file)

    # Ensure at least one stream handler exists before emitting
    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s | %(message)s")

    _logger = logging.getLogger("config")
    _dump = "\n".join(f"{k}={mask(k, v)}" for k, v in _values.items())
    _logger.debug("Loaded environment variables from %s:\n%s", _env_file.name, _dump)

__all__ = [
    "ROOT_DIR",
    "ConfigError",
    "ENABLE_DEBUG",
    "LOG_LEVEL",
    "Settings",
    "env",
    "load_settings",
    "mask",
    "require",
]
