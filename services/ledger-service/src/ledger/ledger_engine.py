"""
Monthly transaction store and aggregation engine.

A LedgerEngine owns one in-memory ApplicationState, hydrates it from a
KeyValueStore on `load`, and writes the whole state back after every add or
delete. Queries are synchronous and always recomputed from the current buckets.
"""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List
from uuid import uuid4

from ledger.compute_summary import (
    collect_categories,
    compute_balance_summary,
    compute_category_breakdown,
    compute_category_shares,
    sort_by_date_desc,
)
from ledger.errors import LedgerError, PersistenceError, StateDecodeError
from ledger.ledger_model import (
    ApplicationState,
    BalanceSummary,
    CategoryTotal,
    MonthlyBucket,
    Transaction,
    TransactionDraft,
    TransactionType,
)
from ledger.persistence.store import KeyValueStore
from ledger.state_codec import decode_state, encode_state
from ledger.validation import validate_draft, validate_month_key
from shared.ledger_settings import DEFAULT_STORAGE_KEY, LedgerSettings
from shared.observability.privacy import hash_payload, redact_fields
from shared.observability.telemetry import bind_session_context, get_tracer, new_session_id, reset_session_context

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)


class LoadStatus(str, Enum):
    """Outcome of hydrating the engine from its store."""

    SUCCESS = "success"
    RECOVERED = "recovered"
    FATAL = "fatal"


@dataclass(frozen=True)
class LoadResult:
    status: LoadStatus
    state: ApplicationState
    error: LedgerError | None = None

    @property
    def ok(self) -> bool:
        return self.status is LoadStatus.SUCCESS


class LedgerEngine:
    """Single-session ledger over an injected key-value store."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        storage_key: str = DEFAULT_STORAGE_KEY,
        write_attempts: int = 1,
        write_backoff_seconds: float = 0.0,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._store = store
        self._storage_key = storage_key
        self._write_attempts = max(1, write_attempts)
        self._write_backoff_seconds = max(0.0, write_backoff_seconds)
        self._id_factory = id_factory or (lambda: uuid4().hex)
        self._state = ApplicationState()
        self._lock = asyncio.Lock()
        self.ledger_session_id = new_session_id()

    @property
    def state(self) -> ApplicationState:
        return self._state

    async def load(self) -> LoadResult:
        """
        Replace the in-memory state with whatever the store holds.

        Never raises for storage or decode problems: a failed read or an undecodable
        blob leaves the previous state in place and is reported through the result.
        """
        async with self._lock:
            token = bind_session_context(self.ledger_session_id)
            try:
                with tracer.start_as_current_span("ledger.load") as span:
                    result = await self._load_locked()
                    span.set_attribute("ledger.load.status", result.status.value)
                    return result
            finally:
                reset_session_context(token)

    def get_or_create_month_bucket(self, year: int, month: int) -> MonthlyBucket:
        validate_month_key(year, month)
        bucket = self._state.find_bucket(year, month)
        if bucket is None:
            bucket = MonthlyBucket(year=year, month=month)
            self._state.monthly_data.append(bucket)
        return bucket

    async def add_transaction(self, year: int, month: int, draft: TransactionDraft) -> Transaction:
        """
        Store a new transaction in the (year, month) bucket and persist the whole state.

        Raises:
            ValidationError: the month key or the draft is invalid; nothing is changed.
            PersistenceError: every write attempt failed; the append is rolled back.
            asyncio.CancelledError: the caller was cancelled mid-write; the append is
                rolled back first.
        """
        validate_month_key(year, month)
        validate_draft(draft)

        async with self._lock:
            token = bind_session_context(self.ledger_session_id)
            try:
                with tracer.start_as_current_span("ledger.add_transaction") as span:
                    bucket = self.get_or_create_month_bucket(year, month)
                    transaction = Transaction.from_draft(self._next_id(), draft)
                    bucket.transactions.append(transaction)
                    span.set_attribute("ledger.bucket", f"{year}-{month:02d}")

                    try:
                        await self._persist()
                    except BaseException:  # includes cancellation mid-write
                        bucket.transactions.remove(transaction)
                        raise

                    logger.info(
                        {
                            "event": "transaction_added",
                            "year": year,
                            "month": month,
                            "transaction": redact_fields(
                                {
                                    "id": transaction.id,
                                    "amount": transaction.amount,
                                    "category": transaction.category,
                                    "date": transaction.date,
                                    "type": transaction.type,
                                    "description": transaction.description,
                                }
                            ),
                        }
                    )
                    return transaction
            finally:
                reset_session_context(token)

    async def delete_transaction(self, year: int, month: int, transaction_id: str) -> bool:
        """
        Remove the transaction with `transaction_id` from the bucket and persist.

        Unknown ids are a silent no-op. Returns whether anything was removed.
        """
        validate_month_key(year, month)

        async with self._lock:
            token = bind_session_context(self.ledger_session_id)
            try:
                with tracer.start_as_current_span("ledger.delete_transaction") as span:
                    bucket = self.get_or_create_month_bucket(year, month)
                    previous = bucket.transactions
                    remaining = [item for item in previous if item.id != transaction_id]
                    removed = len(remaining) != len(previous)
                    bucket.transactions = remaining
                    span.set_attribute("ledger.removed", removed)

                    try:
                        await self._persist()
                    except BaseException:  # includes cancellation mid-write
                        bucket.transactions = previous
                        raise

                    logger.info(
                        {
                            "event": "transaction_deleted",
                            "year": year,
                            "month": month,
                            "transaction_id": transaction_id,
                            "removed": removed,
                        }
                    )
                    return removed
            finally:
                reset_session_context(token)

    def get_all_transactions_for_month(
        self,
        year: int,
        month: int,
        transaction_type: TransactionType | None = None,
    ) -> List[Transaction]:
        bucket = self.get_or_create_month_bucket(year, month)
        transactions = bucket.transactions
        if transaction_type is not None:
            transactions = [item for item in transactions if item.type == transaction_type]
        return sort_by_date_desc(transactions)

    def get_balance_summary(self, year: int, month: int) -> BalanceSummary:
        return compute_balance_summary(self.get_or_create_month_bucket(year, month).transactions)

    def get_category_breakdown(self, year: int, month: int, transaction_type: TransactionType) -> List[CategoryTotal]:
        return compute_category_breakdown(self.get_or_create_month_bucket(year, month).transactions, transaction_type)

    def get_category_shares(self, year: int, month: int, transaction_type: TransactionType) -> dict[str, float]:
        return compute_category_shares(self.get_or_create_month_bucket(year, month).transactions, transaction_type)

    def get_all_categories(self, transaction_type: TransactionType) -> set[str]:
        """Every category ever used for `transaction_type`, across all months."""
        return collect_categories(self._state.monthly_data, transaction_type)

    async def _load_locked(self) -> LoadResult:
        try:
            raw = await self._store.read(self._storage_key)
        except Exception as exc:  # adapter failures are reported, not raised
            error = PersistenceError(f"reading '{self._storage_key}' failed: {exc}")
            error.__cause__ = exc
            logger.error({"event": "ledger_load", "outcome": "fatal", "key": self._storage_key, "error": str(exc)})
            return LoadResult(status=LoadStatus.FATAL, state=self._state, error=error)

        if raw is None:
            self._state = ApplicationState()
            logger.info({"event": "ledger_load", "outcome": "empty", "key": self._storage_key})
            return LoadResult(status=LoadStatus.SUCCESS, state=self._state)

        try:
            state = decode_state(raw)
        except StateDecodeError as exc:
            logger.warning(
                {
                    "event": "ledger_load",
                    "outcome": "recovered",
                    "key": self._storage_key,
                    "digest": hash_payload(raw),
                    "error": str(exc),
                }
            )
            return LoadResult(status=LoadStatus.RECOVERED, state=self._state, error=exc)

        self._state = state
        logger.info(
            {
                "event": "ledger_load",
                "outcome": "success",
                "key": self._storage_key,
                "buckets": len(state.monthly_data),
                "digest": hash_payload(raw),
            }
        )
        return LoadResult(status=LoadStatus.SUCCESS, state=self._state)

    async def _persist(self) -> None:
        blob = encode_state(self._state)
        attempts = 0

        while True:
            attempts += 1
            try:
                await self._store.write(self._storage_key, blob)
            except Exception as exc:  # adapter failures are retried, then wrapped
                if attempts < self._write_attempts:
                    logger.warning(
                        {
                            "event": "ledger_persist",
                            "outcome": "retry",
                            "key": self._storage_key,
                            "attempts": attempts,
                            "error": str(exc),
                        }
                    )
                    await asyncio.sleep(self._backoff_seconds(attempts))
                    continue
                logger.error(
                    {
                        "event": "ledger_persist",
                        "outcome": "failure",
                        "key": self._storage_key,
                        "attempts": attempts,
                        "error": str(exc),
                    }
                )
                raise PersistenceError(f"writing '{self._storage_key}' failed after {attempts} attempt(s)") from exc

            logger.debug({"event": "ledger_persist", "outcome": "success", "key": self._storage_key, "attempts": attempts})
            return

    def _backoff_seconds(self, attempts: int) -> float:
        base = self._write_backoff_seconds * (2 ** (attempts - 1))
        jitter = random.uniform(0, base / 2 if base else 0)
        return base + jitter

    def _next_id(self) -> str:
        existing = {transaction.id for transaction in self._state.iter_transactions()}
        candidate = self._id_factory()
        while not candidate or candidate in existing:
            candidate = self._id_factory()
        return candidate


def init_ledger(store: KeyValueStore, settings: LedgerSettings | None = None) -> LedgerEngine:
    """Build an engine over `store`, taking storage key and retry policy from `settings`."""
    if settings is None:
        return LedgerEngine(store)
    return LedgerEngine(
        store,
        storage_key=settings.storage_key,
        write_attempts=settings.write_attempts,
        write_backoff_seconds=settings.write_backoff_seconds,
    )
