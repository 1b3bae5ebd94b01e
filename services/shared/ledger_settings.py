from __future__ import annotations

"""
Environment-driven settings for the ledger service.

The engine, the SQL-backed key-value store, and the integration tests all need
the same handful of knobs (where the database lives, which key holds the state
blob, how hard to retry writes). Parsing them in one place keeps the defaults
and the error messages consistent.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DB_URL_ENV_VAR = "LEDGER_DB_URL"
STORAGE_KEY_ENV_VAR = "LEDGER_STORAGE_KEY"
WRITE_ATTEMPTS_ENV_VAR = "LEDGER_WRITE_ATTEMPTS"
WRITE_BACKOFF_ENV_VAR = "LEDGER_WRITE_BACKOFF_SECONDS"

DEFAULT_STORAGE_KEY = "expenses_app_data"
DEFAULT_DB_FILENAME = "ledger.db"
DEFAULT_DB_PATH = Path.cwd() / "data" / DEFAULT_DB_FILENAME
DEFAULT_WRITE_ATTEMPTS = 3
DEFAULT_WRITE_BACKOFF_SECONDS = 0.05


class LedgerSettingsError(RuntimeError):
    """Raised when ledger configuration cannot be constructed."""


@dataclass(frozen=True, slots=True)
class LedgerSettings:
    database_url: str
    storage_key: str = DEFAULT_STORAGE_KEY
    write_attempts: int = DEFAULT_WRITE_ATTEMPTS
    write_backoff_seconds: float = DEFAULT_WRITE_BACKOFF_SECONDS


def load_ledger_settings(
    *,
    default_database_url: Optional[str] = None,
    default_storage_key: str = DEFAULT_STORAGE_KEY,
    default_write_attempts: int = DEFAULT_WRITE_ATTEMPTS,
    default_write_backoff: float = DEFAULT_WRITE_BACKOFF_SECONDS,
) -> LedgerSettings:
    """
    Construct LedgerSettings from the process environment.

    Args:
        default_database_url: Fallback URL when LEDGER_DB_URL is unset; defaults to a SQLite file.
        default_storage_key: Fallback key for the serialized application state.
        default_write_attempts: Fallback number of write attempts (must be >= 1).
        default_write_backoff: Fallback base backoff in seconds (must be >= 0).
    """

    database_url = (os.getenv(DB_URL_ENV_VAR) or "").strip() or default_database_url or f"sqlite:///{DEFAULT_DB_PATH}"
    storage_key = (os.getenv(STORAGE_KEY_ENV_VAR) or "").strip() or default_storage_key

    write_attempts = _parse_int(os.getenv(WRITE_ATTEMPTS_ENV_VAR), default_write_attempts, WRITE_ATTEMPTS_ENV_VAR)
    if write_attempts < 1:
        raise LedgerSettingsError(f"{WRITE_ATTEMPTS_ENV_VAR} must be at least 1 (received {write_attempts})")

    write_backoff = _parse_float(os.getenv(WRITE_BACKOFF_ENV_VAR), default_write_backoff, WRITE_BACKOFF_ENV_VAR)
    if write_backoff < 0:
        raise LedgerSettingsError(f"{WRITE_BACKOFF_ENV_VAR} must not be negative (received {write_backoff})")

    return LedgerSettings(
        database_url=database_url,
        storage_key=storage_key,
        write_attempts=write_attempts,
        write_backoff_seconds=write_backoff,
    )


def _parse_float(raw_value: Optional[str], default: float, env_key: str) -> float:
    if raw_value is None or raw_value.strip() == "":
        return default

    try:
        return float(raw_value)
    except ValueError as exc:
        raise LedgerSettingsError(f"{env_key} must be numeric (received '{raw_value}')") from exc


def _parse_int(raw_value: Optional[str], default: int, env_key: str) -> int:
    if raw_value is None or raw_value.strip() == "":
        return default

    try:
        return int(raw_value)
    except ValueError as exc:
        raise LedgerSettingsError(f"{env_key} must be an integer (received '{raw_value}')") from exc
