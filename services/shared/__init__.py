"""
Shared utilities for the monthly ledger service.

This package contains code shared by the ledger service and its tests:
- ledger_settings: Environment-driven configuration for storage and retries
- observability: Telemetry, logging, and privacy utilities
"""

from .ledger_settings import (
    DEFAULT_STORAGE_KEY,
    LedgerSettings,
    LedgerSettingsError,
    load_ledger_settings,
)

__all__ = [
    "DEFAULT_STORAGE_KEY",
    "LedgerSettings",
    "LedgerSettingsError",
    "load_ledger_settings",
]
