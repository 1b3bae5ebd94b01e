from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal

TransactionType = Literal["income", "expense"]
RecurringFrequency = Literal["monthly", "weekly"]

TRANSACTION_TYPES: frozenset[str] = frozenset({"income", "expense"})
MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class TransactionDraft:
    """Everything a caller supplies for a new transaction; the engine assigns the id."""

    amount: float
    category: str
    date: str
    type: TransactionType
    description: str | None = None


@dataclass(frozen=True)
class Transaction:
    id: str
    amount: float
    category: str
    date: str  # ISO-8601
    type: TransactionType
    description: str | None = None

    @classmethod
    def from_draft(cls, transaction_id: str, draft: TransactionDraft) -> "Transaction":
        return cls(
            id=transaction_id,
            amount=float(draft.amount),
            category=draft.category,
            date=draft.date,
            type=draft.type,
            description=draft.description,
        )


@dataclass
class MonthlyBucket:
    """Transactions for one (year, month) pair; month is zero-based (0 = January)."""

    year: int
    month: int
    transactions: list[Transaction] = field(default_factory=list)

    @property
    def key(self) -> tuple[int, int]:
        return (self.year, self.month)


@dataclass(frozen=True)
class RecurringTransaction:
    """
    Schedule metadata for a repeating transaction.

    Nothing posts these automatically; they are stored and reloaded untouched.
    """

    id: str
    amount: float
    category: str
    type: TransactionType
    frequency: RecurringFrequency
    next_run_iso: str
    active: bool
    description: str | None = None
    day_of_month: int | None = None
    day_of_week: int | None = None


@dataclass
class ApplicationState:
    monthly_data: list[MonthlyBucket] = field(default_factory=list)
    recurring: list[RecurringTransaction] | None = None

    def find_bucket(self, year: int, month: int) -> MonthlyBucket | None:
        for bucket in self.monthly_data:
            if bucket.year == year and bucket.month == month:
                return bucket
        return None

    def iter_transactions(self):
        for bucket in self.monthly_data:
            yield from bucket.transactions


@dataclass(frozen=True)
class BalanceSummary:
    total_income: float
    total_expenses: float
    balance: float
    is_overdue: bool


@dataclass(frozen=True)
class CategoryTotal:
    category: str
    total: float
    count: int


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp (date-only values and a trailing "Z" included).

    Naive values are pinned to UTC so that every parsed timestamp compares with every other.
    """
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def bucket_key_for(date: str) -> tuple[int, int]:
    """Return the (year, zero-based month) a timestamp falls into, as written (no zone conversion)."""
    parsed = parse_timestamp(date)
    return parsed.year, parsed.month - 1


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Step a (year, month) key by `delta` months, rolling over year boundaries."""
    absolute = year * MONTHS_PER_YEAR + month + delta
    return divmod(absolute, MONTHS_PER_YEAR)
