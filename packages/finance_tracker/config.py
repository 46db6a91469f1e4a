"""Runtime configuration read from the environment.

Entrypoints load a local ``.env`` (via ``python-dotenv``) before calling
:meth:`Settings.from_env`; library code receives a ``Settings`` instance and
never reads the environment itself.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from db.client import resolve_database_url

# 5 MiB
DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024
PREVIEW_ROW_LIMIT = 5
LOG_LEVEL_ENV_VAR = "FINANCE_TRACKER_LOG_LEVEL"


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be positive, got {value}")
    return value


def log_level_from_env() -> str | None:
    raw = os.getenv(LOG_LEVEL_ENV_VAR)
    return raw.strip() if raw and raw.strip() else None


@dataclass(frozen=True, slots=True)
class Settings:
    database_url: str
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    log_level: str | None = None

    @classmethod
    def from_env(cls, *, database_url: str | None = None) -> Settings:
        """Build settings from ``DATABASE_URL`` and ``FINANCE_TRACKER_*`` variables."""

        return cls(
            database_url=resolve_database_url(database_url),
            max_upload_bytes=_int_env(
                "FINANCE_TRACKER_MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES
            ),
            log_level=log_level_from_env(),
        )


__all__ = [
    "DEFAULT_MAX_UPLOAD_BYTES",
    "LOG_LEVEL_ENV_VAR",
    "PREVIEW_ROW_LIMIT",
    "Settings",
    "log_level_from_env",
]
