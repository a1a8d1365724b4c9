"""MongoDB connection settings and scoped client lifecycle."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.server_api import ServerApi


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class MongoSettings:
    uri: str
    database: str = "finance-management"
    collection: str = "personal-finance"
    timeout_ms: int = 5000


def create_client(settings: MongoSettings) -> MongoClient:
    """Build a client pinned to the stable server API v1."""

    return MongoClient(
        settings.uri,
        server_api=ServerApi("1", strict=True, deprecation_errors=True),
        serverSelectionTimeoutMS=settings.timeout_ms,
    )


@contextmanager
def mongo_collection(settings: MongoSettings) -> Iterator[Collection]:
    """Yield the transactions collection and close the client on exit."""

    client = create_client(settings)
    logger.info(
        "mongo_client_opened database=%s collection=%s",
        settings.database,
        settings.collection,
    )
    try:
        yield client[settings.database][settings.collection]
    finally:
        client.close()
        logger.info("mongo_client_closed")
