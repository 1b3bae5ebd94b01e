from __future__ import annotations

import math
from numbers import Real

from ledger.errors import ValidationError
from ledger.ledger_model import MONTHS_PER_YEAR, TRANSACTION_TYPES, TransactionDraft, parse_timestamp


def validate_month_key(year: int, month: int) -> None:
    if isinstance(year, bool) or not isinstance(year, int):
        raise ValidationError("year", f"must be an integer (received {year!r})")
    if isinstance(month, bool) or not isinstance(month, int):
        raise ValidationError("month", f"must be an integer (received {month!r})")
    if not 0 <= month < MONTHS_PER_YEAR:
        raise ValidationError("month", f"must be between 0 and 11 (received {month})")


def validate_draft(draft: TransactionDraft) -> None:
    """
    Reject drafts the ledger must never store.

    Callers are expected to validate user input themselves; this is the last line
    so the ledger stays consistent when reused without a form in front of it.
    """
    _validate_amount(draft.amount)

    if not isinstance(draft.category, str) or not draft.category.strip():
        raise ValidationError("category", "must be a non-empty string")

    if draft.type not in TRANSACTION_TYPES:
        raise ValidationError("type", f"must be 'income' or 'expense' (received {draft.type!r})")

    if not isinstance(draft.date, str):
        raise ValidationError("date", f"must be an ISO-8601 string (received {draft.date!r})")
    try:
        parse_timestamp(draft.date)
    except ValueError as exc:
        raise ValidationError("date", f"is not ISO-8601 (received {draft.date!r})") from exc

    if draft.description is not None and not isinstance(draft.description, str):
        raise ValidationError("description", "must be a string when present")


def _validate_amount(amount: object) -> None:
    if isinstance(amount, bool) or not isinstance(amount, Real):
        raise ValidationError("amount", f"must be a number (received {amount!r})")
    try:
        value = float(amount)
    except OverflowError as exc:
        raise ValidationError("amount", "is too large to represent") from exc
    if not math.isfinite(value):
        raise ValidationError("amount", f"must be finite (received {amount!r})")
    if value <= 0:
        raise ValidationError("amount", f"must be positive (received {amount!r})")
