"""Exception hierarchy for the ledger service."""


class LedgerError(Exception):
    """Base class for every error the ledger raises on purpose."""


class ValidationError(LedgerError, ValueError):
    """Raised when a transaction or month key is rejected before any mutation."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class StateDecodeError(LedgerError):
    """Raised when a stored state blob cannot be turned back into an ApplicationState."""


class PersistenceError(LedgerError):
    """Raised when the key-value store rejects a read or a write."""
