"""Transactions repository adapters.

Repositories only persist and query documents. Validation and ownership rules
live in `backend.services.transaction_service`.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Protocol

from bson import ObjectId
from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from pydantic import ValidationError

from backend.services.errors import StoreFailureError
from shared.models import DeleteResult, Transaction, UpdateResult


logger = logging.getLogger(__name__)


class TransactionsRepository(Protocol):
    def insert(self, document: dict[str, Any]) -> str:
        """Store a new transaction document and return its generated id."""

    def find_by_id(self, transaction_id: str) -> Transaction | None:
        """Return the transaction with this id, or None."""

    def list_all(self) -> list[Transaction]:
        """Return every stored transaction."""

    def list_by_owner(self, user_email: str) -> list[Transaction]:
        """Return the owner's transactions sorted by date, newest first."""

    def sum_amount(
        self,
        *,
        user_email: str,
        type: str | None = None,
        category: str | None = None,
    ) -> float:
        """Return the amount total over matching transactions, 0 when none match."""

    def update_fields(self, transaction_id: str, fields: dict[str, Any]) -> UpdateResult:
        """Replace the given fields on one transaction."""

    def delete(self, transaction_id: str) -> DeleteResult:
        """Remove one transaction permanently."""

    def ping(self) -> bool:
        """Return whether the store answers."""


def _date_sort_key(transaction: Transaction) -> tuple[int, Any]:
    # Mirrors the BSON comparison order: null < numbers < string < date.
    value = transaction.date
    if value is None:
        return (0, "")
    if isinstance(value, (int, float)):
        return (1, value)
    if isinstance(value, datetime):
        return (3, value)
    return (2, value)


def _matches(document: dict[str, Any], match: dict[str, Any]) -> bool:
    return all(document.get(key) == value for key, value in match.items())


def _build_match(*, user_email: str, type: str | None, category: str | None) -> dict[str, Any]:
    match: dict[str, Any] = {"userEmail": user_email}
    if type is not None:
        match["type"] = type
    if category is not None:
        match["category"] = category
    return match


def _parse_document(document: dict[str, Any]) -> Transaction | None:
    """Return the transaction, or None when the stored document cannot be read.

    Older documents were stored as sent by clients, so amounts or owners may
    not fit the current contract.
    """

    payload = dict(document)
    payload["_id"] = str(payload.get("_id"))
    payload["description"] = payload.get("description") or ""
    payload["userName"] = payload.get("userName") or ""
    try:
        return Transaction.model_validate(payload)
    except ValidationError as exc:
        logger.warning(
            "transaction_document_invalid id=%s errors=%s",
            payload["_id"],
            exc.error_count(),
        )
        return None


def _parse_documents(documents: list[dict[str, Any]]) -> list[Transaction]:
    parsed = (_parse_document(document) for document in documents)
    return [transaction for transaction in parsed if transaction is not None]


def _normalize_id(transaction_id: str) -> str:
    return str(ObjectId(transaction_id))


class InMemoryTransactionsRepository:
    """In-memory repository used by tests/dev when MongoDB is not configured."""

    def __init__(self) -> None:
        self._documents: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def insert(self, document: dict[str, Any]) -> str:
        transaction_id = str(ObjectId())
        with self._lock:
            self._documents[transaction_id] = {**document, "_id": transaction_id}
        return transaction_id

    def find_by_id(self, transaction_id: str) -> Transaction | None:
        with self._lock:
            document = self._documents.get(_normalize_id(transaction_id))
        return _parse_document(document) if document is not None else None

    def list_all(self) -> list[Transaction]:
        with self._lock:
            documents = list(self._documents.values())
        return _parse_documents(documents)

    def list_by_owner(self, user_email: str) -> list[Transaction]:
        with self._lock:
            documents = [
                document
                for document in self._documents.values()
                if document.get("userEmail") == user_email
            ]
        transactions = _parse_documents(documents)
        return sorted(transactions, key=_date_sort_key, reverse=True)

    def sum_amount(
        self,
        *,
        user_email: str,
        type: str | None = None,
        category: str | None = None,
    ) -> float:
        match = _build_match(user_email=user_email, type=type, category=category)
        with self._lock:
            amounts = [
                document.get("amount")
                for document in self._documents.values()
                if _matches(document, match)
            ]
        # $sum ignores non-numeric values.
        return float(
            sum(
                amount
                for amount in amounts
                if isinstance(amount, (int, float)) and not isinstance(amount, bool)
            )
        )

    def update_fields(self, transaction_id: str, fields: dict[str, Any]) -> UpdateResult:
        transaction_id = _normalize_id(transaction_id)
        with self._lock:
            document = self._documents.get(transaction_id)
            if document is None:
                return UpdateResult(matched_count=0, modified_count=0)
            updated = {**document, **fields}
            modified = updated != document
            self._documents[transaction_id] = updated
        return UpdateResult(matched_count=1, modified_count=1 if modified else 0)

    def delete(self, transaction_id: str) -> DeleteResult:
        with self._lock:
            removed = self._documents.pop(_normalize_id(transaction_id), None)
        return DeleteResult(deleted_count=0 if removed is None else 1)

    def ping(self) -> bool:
        return True


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except PyMongoError as exc:
        raise StoreFailureError(f"MongoDB {operation} failed: {exc}") from exc


class MongoTransactionsRepository:
    """MongoDB repository over the `personal-finance` collection."""

    def __init__(self, collection: Collection) -> None:
        self._collection = collection

    def insert(self, document: dict[str, Any]) -> str:
        with _store_errors("insert"):
            result = self._collection.insert_one(dict(document))
        return str(result.inserted_id)

    def find_by_id(self, transaction_id: str) -> Transaction | None:
        with _store_errors("find"):
            document = self._collection.find_one({"_id": ObjectId(transaction_id)})
        return _parse_document(document) if document is not None else None

    def list_all(self) -> list[Transaction]:
        with _store_errors("find"):
            documents = list(self._collection.find())
        return _parse_documents(documents)

    def list_by_owner(self, user_email: str) -> list[Transaction]:
        with _store_errors("find"):
            documents = list(
                self._collection.find({"userEmail": user_email}).sort("date", DESCENDING)
            )
        return _parse_documents(documents)

    def sum_amount(
        self,
        *,
        user_email: str,
        type: str | None = None,
        category: str | None = None,
    ) -> float:
        pipeline = [
            {"$match": _build_match(user_email=user_email, type=type, category=category)},
            {"$group": {"_id": None, "total": {"$sum": "$amount"}}},
        ]
        with _store_errors("aggregate"):
            groups = list(self._collection.aggregate(pipeline))
        if not groups:
            return 0.0
        return float(groups[0].get("total") or 0)

    def update_fields(self, transaction_id: str, fields: dict[str, Any]) -> UpdateResult:
        with _store_errors("update"):
            result = self._collection.update_one(
                {"_id": ObjectId(transaction_id)},
                {"$set": dict(fields)},
            )
        return UpdateResult(
            acknowledged=result.acknowledged,
            matched_count=result.matched_count,
            modified_count=result.modified_count,
        )

    def delete(self, transaction_id: str) -> DeleteResult:
        with _store_errors("delete"):
            result = self._collection.delete_one({"_id": ObjectId(transaction_id)})
        return DeleteResult(acknowledged=result.acknowledged, deleted_count=result.deleted_count)

    def ping(self) -> bool:
        try:
            self._collection.database.client.admin.command("ping")
        except PyMongoError:
            return False
        return True
