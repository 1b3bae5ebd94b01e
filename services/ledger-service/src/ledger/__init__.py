"""Monthly transaction store and aggregation engine."""

from ledger.errors import LedgerError, PersistenceError, StateDecodeError, ValidationError
from ledger.ledger_engine import LedgerEngine, LoadResult, LoadStatus, init_ledger
from ledger.ledger_model import (
    ApplicationState,
    BalanceSummary,
    CategoryTotal,
    MonthlyBucket,
    RecurringTransaction,
    Transaction,
    TransactionDraft,
)

__all__ = [
    "ApplicationState",
    "BalanceSummary",
    "CategoryTotal",
    "LedgerEngine",
    "LedgerError",
    "LoadResult",
    "LoadStatus",
    "MonthlyBucket",
    "PersistenceError",
    "RecurringTransaction",
    "StateDecodeError",
    "Transaction",
    "TransactionDraft",
    "ValidationError",
    "init_ledger",
]
