"""Transaction business rules over a repository adapter.

The service validates caller input, enforces ownership on mutations and maps
repository outcomes to the error taxonomy in `backend.services.errors`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from bson import ObjectId
from pydantic import BaseModel, ValidationError

from backend.auth.access_control import authorize_owner
from backend.repositories.transactions_repository import TransactionsRepository
from backend.services.errors import (
    InvalidIdError,
    NotFoundError,
    TransactionValidationError,
)
from shared.models import (
    DeleteResult,
    InsertResult,
    Transaction,
    TransactionCreate,
    TransactionType,
    TransactionUpdate,
    UpdateResult,
)


logger = logging.getLogger(__name__)


def _validation_message(exc: ValidationError) -> str:
    missing = [
        ".".join(str(part) for part in error["loc"])
        for error in exc.errors()
        if error["type"] == "missing"
    ]
    if missing:
        return f"Missing required transaction fields: {', '.join(missing)}"

    error = exc.errors()[0]
    field_name = ".".join(str(part) for part in error["loc"])
    message = str(error["msg"]).removeprefix("Value error, ")
    return f"Invalid {field_name}: {message}" if field_name else message


def _validate(model: type[BaseModel], payload: Any) -> Any:
    if not isinstance(payload, dict):
        raise TransactionValidationError("Request body must be a JSON object")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise TransactionValidationError(_validation_message(exc)) from exc


def _require(value: str | None, message: str) -> str:
    if value is None or not value.strip():
        raise TransactionValidationError(message)
    return value


def _check_id(transaction_id: str) -> None:
    if not ObjectId.is_valid(transaction_id):
        raise InvalidIdError("Invalid transaction id")


@dataclass(slots=True)
class TransactionService:
    repository: TransactionsRepository

    def create(self, payload: dict[str, Any]) -> InsertResult:
        """Validate and store a new transaction."""

        transaction = _validate(TransactionCreate, payload)
        inserted_id = self.repository.insert(transaction.to_document())
        logger.info("transaction_created id=%s type=%s", inserted_id, transaction.type)
        return InsertResult(inserted_id=inserted_id)

    def get_by_id(self, transaction_id: str) -> Transaction:
        _check_id(transaction_id)
        transaction = self.repository.find_by_id(transaction_id)
        if transaction is None:
            raise NotFoundError("Transaction not found")
        return transaction

    def list_all(self) -> list[Transaction]:
        return self.repository.list_all()

    def list_by_owner(self, email: str | None) -> list[Transaction]:
        """Return the owner's transactions, newest date first."""

        email = _require(email, "Email query is required")
        return self.repository.list_by_owner(email)

    def sum_by_type_for_owner(self, email: str | None, type: str) -> float:
        email = _require(email, "userEmail query is required")
        return self.repository.sum_amount(user_email=email, type=TransactionType(type).value)

    def sum_by_category_for_owner(self, email: str | None, category: str | None) -> float:
        category = _require(category, "category and userEmail are required")
        email = _require(email, "category and userEmail are required")
        return self.repository.sum_amount(user_email=email, category=category)

    def update(
        self,
        transaction_id: str,
        caller_email: str | None,
        payload: dict[str, Any],
    ) -> UpdateResult:
        """Replace the editable fields of a transaction owned by `caller_email`.

        Checks run in order: id shape, existence, ownership, then field
        validation. Nothing is written unless every check passes.
        """

        _check_id(transaction_id)
        caller_email = _require(caller_email, "userEmail is required")
        existing = self.get_by_id(transaction_id)
        authorize_owner(existing, caller_email)

        fields = _validate(TransactionUpdate, payload)
        result = self.repository.update_fields(transaction_id, fields.to_document())
        logger.info(
            "transaction_updated id=%s modified_count=%s",
            transaction_id,
            result.modified_count,
        )
        return result

    def delete(self, transaction_id: str, caller_email: str | None) -> DeleteResult:
        _check_id(transaction_id)
        caller_email = _require(caller_email, "userEmail is required")
        existing = self.get_by_id(transaction_id)
        authorize_owner(existing, caller_email)

        result = self.repository.delete(transaction_id)
        logger.info("transaction_deleted id=%s deleted_count=%s", transaction_id, result.deleted_count)
        return result

    def ping(self) -> bool:
        return self.repository.ping()
