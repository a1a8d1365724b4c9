"""Tests for transaction contracts and amount parsing."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from shared.models import (
    InsertResult,
    Transaction,
    TransactionCreate,
    TransactionUpdate,
    parse_amount,
)


def _payload(**overrides: object) -> dict[str, object]:
    payload: dict[str, object] = {
        "type": "Expense",
        "category": "Groceries",
        "amount": "12.5",
        "date": "2024-02-01",
        "userEmail": "a@x.com",
    }
    payload.update(overrides)
    return payload


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(" 42.50", 42.5), ("-3", -3.0), (0, 0.0), (7, 7.0), (1.25, 1.25)],
)
def test_parse_amount_accepts_numbers_and_numeric_strings(raw: object, expected: float) -> None:
    assert parse_amount(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "", "   ", None, True, "nan", "inf", [1]])
def test_parse_amount_rejects_non_numeric_input(raw: object) -> None:
    with pytest.raises(ValueError):
        parse_amount(raw)


def test_transaction_create_trims_email_and_name_and_defaults_description() -> None:
    created = TransactionCreate.model_validate(
        _payload(userEmail="  a@x.com ", userName=" Alice ")
    )

    assert created.user_email == "a@x.com"
    assert created.user_name == "Alice"
    assert created.description == ""
    assert created.to_document() == {
        "type": "Expense",
        "category": "Groceries",
        "amount": 12.5,
        "description": "",
        "date": "2024-02-01",
        "userEmail": "a@x.com",
        "userName": "Alice",
    }


def test_transaction_create_rejects_unknown_type() -> None:
    with pytest.raises(ValidationError):
        TransactionCreate.model_validate(_payload(type="Transfer"))


def test_transaction_create_rejects_blank_email() -> None:
    with pytest.raises(ValidationError):
        TransactionCreate.model_validate(_payload(userEmail="   "))


def test_transaction_update_never_carries_owner_email() -> None:
    update = TransactionUpdate.model_validate(_payload(userEmail="b@x.com", description=None))

    document = update.to_document()

    assert "userEmail" not in document
    assert "user_email" not in document
    assert document["description"] == ""


def test_transaction_serializes_with_store_field_names() -> None:
    transaction = Transaction.model_validate(
        {
            "_id": "65f000000000000000000001",
            "type": "Income",
            "category": "Salary",
            "amount": "100",
            "date": "2024-01-01",
            "userEmail": "a@x.com",
        }
    )

    dumped = transaction.model_dump(by_alias=True)

    assert dumped["_id"] == "65f000000000000000000001"
    assert dumped["amount"] == 100.0
    assert dumped["userName"] == ""
    assert InsertResult(inserted_id="x").model_dump(by_alias=True) == {
        "acknowledged": True,
        "insertedId": "x",
    }


@pytest.mark.parametrize("value", [1704067200000, 1704067200.5, "2024-01-01"])
def test_transaction_create_keeps_scalar_dates_verbatim(value: object) -> None:
    created = TransactionCreate.model_validate(_payload(date=value))

    assert created.date == value
    assert type(created.date) is type(value)


@pytest.mark.parametrize("value", [True, None, "  "])
def test_transaction_create_rejects_blank_or_boolean_dates(value: object) -> None:
    with pytest.raises(ValidationError):
        TransactionCreate.model_validate(_payload(date=value))
