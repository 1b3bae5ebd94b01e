"""JSON wire format for the persisted ApplicationState blob."""

from __future__ import annotations

import json
from typing import List, Literal, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ledger.errors import StateDecodeError
from ledger.ledger_model import ApplicationState, MonthlyBucket, RecurringTransaction, Transaction, parse_timestamp


class TransactionPayload(BaseModel):
    id: str
    amount: float = Field(allow_inf_nan=False)
    category: str
    description: Optional[str] = None
    date: str
    type: Literal["income", "expense"]

    @field_validator("date")
    @classmethod
    def _date_is_iso(cls, value: str) -> str:
        parse_timestamp(value)
        return value

    @classmethod
    def from_dataclass(cls, transaction: Transaction) -> "TransactionPayload":
        return cls(
            id=transaction.id,
            amount=transaction.amount,
            category=transaction.category,
            description=transaction.description,
            date=transaction.date,
            type=transaction.type,
        )

    def to_dataclass(self) -> Transaction:
        return Transaction(
            id=self.id,
            amount=self.amount,
            category=self.category,
            description=self.description,
            date=self.date,
            type=self.type,
        )


class MonthlyDataPayload(BaseModel):
    year: int
    month: int = Field(ge=0, le=11)
    transactions: List[TransactionPayload] = Field(default_factory=list)

    @classmethod
    def from_dataclass(cls, bucket: MonthlyBucket) -> "MonthlyDataPayload":
        return cls(
            year=bucket.year,
            month=bucket.month,
            transactions=[TransactionPayload.from_dataclass(item) for item in bucket.transactions],
        )

    def to_dataclass(self) -> MonthlyBucket:
        return MonthlyBucket(
            year=self.year,
            month=self.month,
            transactions=[item.to_dataclass() for item in self.transactions],
        )


class RecurringTransactionPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    amount: float = Field(allow_inf_nan=False)
    category: str
    description: Optional[str] = None
    type: Literal["income", "expense"]
    frequency: Literal["monthly", "weekly"]
    next_run_iso: str = Field(alias="nextRunISO")
    day_of_month: Optional[int] = Field(default=None, alias="dayOfMonth")
    day_of_week: Optional[int] = Field(default=None, alias="dayOfWeek")
    active: bool

    @classmethod
    def from_dataclass(cls, recurring: RecurringTransaction) -> "RecurringTransactionPayload":
        return cls(
            id=recurring.id,
            amount=recurring.amount,
            category=recurring.category,
            description=recurring.description,
            type=recurring.type,
            frequency=recurring.frequency,
            next_run_iso=recurring.next_run_iso,
            day_of_month=recurring.day_of_month,
            day_of_week=recurring.day_of_week,
            active=recurring.active,
        )

    def to_dataclass(self) -> RecurringTransaction:
        return RecurringTransaction(
            id=self.id,
            amount=self.amount,
            category=self.category,
            description=self.description,
            type=self.type,
            frequency=self.frequency,
            next_run_iso=self.next_run_iso,
            day_of_month=self.day_of_month,
            day_of_week=self.day_of_week,
            active=self.active,
        )


class ApplicationStatePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    monthly_data: List[MonthlyDataPayload] = Field(default_factory=list, alias="monthlyData")
    recurring: Optional[List[RecurringTransactionPayload]] = None

    @classmethod
    def from_dataclass(cls, state: ApplicationState) -> "ApplicationStatePayload":
        recurring = None
        if state.recurring is not None:
            recurring = [RecurringTransactionPayload.from_dataclass(item) for item in state.recurring]
        return cls(
            monthly_data=[MonthlyDataPayload.from_dataclass(bucket) for bucket in state.monthly_data],
            recurring=recurring,
        )

    def to_dataclass(self) -> ApplicationState:
        recurring = None
        if self.recurring is not None:
            recurring = [item.to_dataclass() for item in self.recurring]
        return ApplicationState(
            monthly_data=[bucket.to_dataclass() for bucket in self.monthly_data],
            recurring=recurring,
        )


def encode_state(state: ApplicationState) -> str:
    """Serialize the whole state; optional fields that are None are left out entirely."""
    payload = ApplicationStatePayload.from_dataclass(state)
    return payload.model_dump_json(by_alias=True, exclude_none=True)


def decode_state(raw: str) -> ApplicationState:
    """
    Parse a stored blob back into an ApplicationState.

    Raises:
        StateDecodeError: the blob is not JSON (or nests too deeply to parse), does
            not match the schema, or holds more than one bucket for the same
            (year, month).
    """
    try:
        document = json.loads(raw)
    except (TypeError, ValueError, RecursionError) as exc:
        raise StateDecodeError(f"stored state is not valid JSON: {exc}") from exc

    try:
        payload = ApplicationStatePayload.model_validate(document)
    except pydantic.ValidationError as exc:
        raise StateDecodeError(f"stored state does not match the expected shape: {exc}") from exc

    state = payload.to_dataclass()
    seen: set[tuple[int, int]] = set()
    for bucket in state.monthly_data:
        if bucket.key in seen:
            raise StateDecodeError(f"stored state holds duplicate buckets for {bucket.key}")
        seen.add(bucket.key)
    return state
