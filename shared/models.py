"""Pydantic contracts shared across backend layers."""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TransactionType(str, Enum):
    """Closed set of transaction kinds."""

    INCOME = "Income"
    EXPENSE = "Expense"


def parse_amount(value: Any) -> float:
    """Parse caller input into a finite float amount.

    Accepts numbers and numeric strings with surrounding whitespace. Booleans,
    blanks and non-finite values are rejected.
    """

    if value is None or isinstance(value, bool):
        raise ValueError("amount must be a valid number")
    if isinstance(value, (int, float)):
        parsed = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError("amount must be a valid number")
        try:
            parsed = float(text)
        except ValueError as exc:
            raise ValueError("amount must be a valid number") from exc
    else:
        raise ValueError("amount must be a valid number")

    if not math.isfinite(parsed):
        raise ValueError("amount must be a finite number")
    return parsed


class _TransactionFields(BaseModel):
    """Fields a caller may set on creation and replace on update."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    type: TransactionType
    category: str = Field(min_length=1)
    amount: float
    description: str = ""
    date: str | int | float

    @field_validator("amount", mode="before")
    @classmethod
    def validate_amount(cls, value: Any) -> float:
        return parse_amount(value)

    @field_validator("description", mode="before")
    @classmethod
    def default_description(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, value: Any) -> Any:
        # Stored verbatim; only used for ordering.
        if isinstance(value, bool) or value is None:
            raise ValueError("date is required")
        if isinstance(value, str) and not value.strip():
            raise ValueError("date is required")
        return value


class TransactionCreate(_TransactionFields):
    user_email: str = Field(alias="userEmail")
    user_name: str = Field(default="", alias="userName")

    @field_validator("user_email", mode="before")
    @classmethod
    def normalize_user_email(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
        if not value:
            raise ValueError("userEmail is required")
        return value

    @field_validator("user_name", mode="before")
    @classmethod
    def normalize_user_name(cls, value: Any) -> Any:
        if value is None:
            return ""
        return value.strip() if isinstance(value, str) else value

    def to_document(self) -> dict[str, Any]:
        """Return the storage document (camelCase keys, no id)."""
        return self.model_dump(by_alias=True)


class TransactionUpdate(_TransactionFields):
    """Replaceable fields of an existing transaction; `userEmail` is never part of it."""

    model_config = ConfigDict(populate_by_name=True, use_enum_values=True, extra="ignore")

    def to_document(self) -> dict[str, Any]:
        return self.model_dump()


class Transaction(BaseModel):
    """Stored transaction as returned to callers."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(alias="_id")
    type: str
    category: str
    amount: float
    description: str = ""
    date: str | int | float | datetime | None = None
    user_email: str = Field(alias="userEmail")
    user_name: str = Field(default="", alias="userName")


class InsertResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = True
    inserted_id: str = Field(alias="insertedId")


class UpdateResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = True
    matched_count: int = Field(alias="matchedCount")
    modified_count: int = Field(alias="modifiedCount")


class DeleteResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    acknowledged: bool = True
    deleted_count: int = Field(alias="deletedCount")


class TotalResult(BaseModel):
    total: float


class Identity(BaseModel):
    """Caller identity asserted by the identity provider."""

    email: str
    user_id: str | None = None
