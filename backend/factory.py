"""Composition root for backend services."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from backend.db.mongo_client import MongoSettings, mongo_collection
from backend.repositories.transactions_repository import (
    InMemoryTransactionsRepository,
    MongoTransactionsRepository,
    TransactionsRepository,
)
from backend.services.transaction_service import TransactionService
from shared import config


logger = logging.getLogger(__name__)


def mongo_settings_from_env() -> MongoSettings | None:
    """Return MongoDB settings, or None when no connection string is configured."""

    uri = config.mongodb_uri()
    if not uri:
        return None
    return MongoSettings(
        uri=uri,
        database=config.mongodb_database(),
        collection=config.mongodb_collection(),
        timeout_ms=config.mongodb_timeout_ms(),
    )


@contextmanager
def open_transactions_repository() -> Iterator[TransactionsRepository]:
    """Yield the configured repository for the lifetime of the process.

    MongoDB is used when `MONGODB_URI` is set; otherwise an in-memory
    repository is provided.
    """

    settings = mongo_settings_from_env()
    if settings is None:
        logger.warning("mongodb_uri_missing; using in-memory transactions repository")
        yield InMemoryTransactionsRepository()
        return

    with mongo_collection(settings) as collection:
        yield MongoTransactionsRepository(collection=collection)


def build_transaction_service(repository: TransactionsRepository) -> TransactionService:
    return TransactionService(repository=repository)
