import math

import pytest
from ledger.errors import ValidationError
from ledger.ledger_model import TransactionDraft, bucket_key_for, parse_timestamp, shift_month
from ledger.validation import validate_draft, validate_month_key


def make_draft(**overrides) -> TransactionDraft:
    fields = {
        "amount": 42.5,
        "category": "Groceries",
        "date": "2024-03-14T09:30:00.000Z",
        "type": "expense",
        "description": None,
    }
    fields.update(overrides)
    return TransactionDraft(**fields)


def test_valid_draft_passes():
    validate_draft(make_draft())
    validate_draft(make_draft(amount=3, description="weekly shop", date="2024-03-14"))


@pytest.mark.parametrize("amount", [0, -1.0, math.nan, math.inf, 10**400, "12", None, True])
def test_invalid_amounts_are_rejected(amount):
    with pytest.raises(ValidationError) as excinfo:
        validate_draft(make_draft(amount=amount))

    assert excinfo.value.field == "amount"


@pytest.mark.parametrize(
    ("overrides", "field"),
    [
        ({"category": ""}, "category"),
        ({"category": "   "}, "category"),
        ({"type": "transfer"}, "type"),
        ({"date": "last tuesday"}, "date"),
        ({"date": 20240314}, "date"),
        ({"description": 7}, "description"),
    ],
)
def test_invalid_fields_name_the_offender(overrides, field):
    with pytest.raises(ValidationError) as excinfo:
        validate_draft(make_draft(**overrides))

    assert excinfo.value.field == field


def test_validation_error_is_a_value_error():
    with pytest.raises(ValueError):
        validate_draft(make_draft(amount=-5))


@pytest.mark.parametrize(("year", "month"), [(2024, -1), (2024, 12), (2024, 1.0), ("2024", 0), (True, 0)])
def test_invalid_month_keys_are_rejected(year, month):
    with pytest.raises(ValidationError):
        validate_month_key(year, month)


def test_parse_timestamp_pins_naive_values_to_utc():
    assert parse_timestamp("2024-01-05") == parse_timestamp("2024-01-05T00:00:00Z")


def test_bucket_key_for_uses_zero_based_month():
    assert bucket_key_for("2024-01-05") == (2024, 0)
    assert bucket_key_for("2023-12-31T23:59:59-05:00") == (2023, 11)


def test_shift_month_rolls_over_year_boundaries():
    assert shift_month(2024, 0, -1) == (2023, 11)
    assert shift_month(2023, 11, 1) == (2024, 0)
    assert shift_month(2024, 5, 0) == (2024, 5)
    assert shift_month(2024, 5, 25) == (2026, 6)
