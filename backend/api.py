"""FastAPI entrypoint for the transactions HTTP endpoints."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Body, Depends, FastAPI, Header
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.requests import Request
from fastapi.responses import JSONResponse, PlainTextResponse

from backend.auth.access_control import authenticate, authorize_caller
from backend.factory import build_transaction_service, open_transactions_repository
from backend.services.errors import StoreFailureError, TransactionError
from backend.services.transaction_service import TransactionService
from shared import config as _config
from shared.models import (
    DeleteResult,
    Identity,
    InsertResult,
    TotalResult,
    Transaction,
    TransactionType,
    UpdateResult,
)


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Own the store connection for the lifetime of the application."""

    with open_transactions_repository() as repository:
        service = build_transaction_service(repository)
        if service.ping():
            logger.info("transactions_store_ping_ok")
        else:
            logger.error("transactions_store_ping_failed")
        app.state.transaction_service = service
        yield
        app.state.transaction_service = None


def _bound_service(request: Request) -> TransactionService | None:
    return getattr(request.app.state, "transaction_service", None)


def get_transaction_service(request: Request) -> TransactionService:
    """Return the service bound to the running application."""

    service = _bound_service(request)
    if service is None:
        raise StoreFailureError("Transactions store is not initialised")
    return service


def require_identity(authorization: str | None = Header(default=None)) -> Identity | None:
    """Authenticate mutating calls; returns None when auth is disabled."""

    if not _config.auth_required():
        return None
    identity = authenticate(authorization)
    logger.info("caller_authenticated user_id=%s", identity.user_id)
    return identity


app = FastAPI(title="Personal Finance API", lifespan=lifespan)

ALLOW_ORIGINS = _config.cors_allow_origins()


@app.middleware("http")
async def log_http_requests(request: Request, call_next):
    """Log incoming requests, HTTP status codes and unexpected errors."""

    logger.info("http_request_received method=%s path=%s", request.method, request.url.path)
    try:
        response = await call_next(request)
    except Exception:
        logger.exception(
            "http_request_failed method=%s path=%s",
            request.method,
            request.url.path,
        )
        raise

    logger.info(
        "http_response_sent method=%s path=%s status_code=%s",
        request.method,
        request.url.path,
        response.status_code,
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

logger.info("cors_allow_origins=%s", ALLOW_ORIGINS)


@app.exception_handler(TransactionError)
async def handle_transaction_error(request: Request, exc: TransactionError) -> JSONResponse:
    """Map domain errors to their HTTP status; store faults stay opaque."""

    if isinstance(exc, StoreFailureError):
        logger.exception(
            "transactions_store_failure method=%s path=%s",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return JSONResponse(status_code=exc.status_code, content={"detail": "Internal Server Error"})

    logger.info(
        "transaction_request_rejected method=%s path=%s status_code=%s detail=%s",
        request.method,
        request.url.path,
        exc.status_code,
        exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": "Malformed request"})


@app.exception_handler(Exception)
async def handle_unexpected_exception(request: Request, exc: Exception) -> JSONResponse:
    """Return a JSON 500 response for unhandled exceptions."""

    logger.exception(
        "unhandled_exception method=%s path=%s exception_type=%s message=%s",
        request.method,
        request.url.path,
        type(exc).__name__,
        str(exc),
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content={"detail": "Internal Server Error"})


@app.get("/", response_class=PlainTextResponse)
def root() -> str:
    return "Your Finance API is running smoothly!"


@app.get("/health")
def health(request: Request) -> JSONResponse:
    """Healthcheck endpoint backed by a store ping."""

    service = _bound_service(request)
    if service is not None and service.ping():
        return JSONResponse(status_code=200, content={"status": "ok"})
    return JSONResponse(status_code=503, content={"status": "unavailable"})


@app.get("/alluser", response_model=list[Transaction])
def list_all_transactions(service: TransactionService = Depends(get_transaction_service)) -> Any:
    return service.list_all()


@app.post("/transactions", response_model=InsertResult)
def create_transaction(
    payload: Any = Body(default=None),
    identity: Identity | None = Depends(require_identity),
    service: TransactionService = Depends(get_transaction_service),
) -> Any:
    caller_email = payload.get("userEmail") if isinstance(payload, dict) else None
    authorize_caller(identity, caller_email)
    return service.create(payload)


@app.get("/transactions", response_model=list[Transaction])
def list_user_transactions(
    email: str | None = None,
    service: TransactionService = Depends(get_transaction_service),
) -> Any:
    return service.list_by_owner(email)


@app.get("/transactions/total-income", response_model=TotalResult)
def total_income(
    userEmail: str | None = None,
    service: TransactionService = Depends(get_transaction_service),
) -> Any:
    return TotalResult(total=service.sum_by_type_for_owner(userEmail, TransactionType.INCOME.value))


@app.get("/transactions/total-expense", response_model=TotalResult)
def total_expense(
    userEmail: str | None = None,
    service: TransactionService = Depends(get_transaction_service),
) -> Any:
    return TotalResult(total=service.sum_by_type_for_owner(userEmail, TransactionType.EXPENSE.value))


@app.get("/transactions/category-total", response_model=TotalResult)
def category_total(
    category: str | None = None,
    userEmail: str | None = None,
    service: TransactionService = Depends(get_transaction_service),
) -> Any:
    return TotalResult(total=service.sum_by_category_for_owner(userEmail, category))


@app.get("/transactions/{transaction_id}", response_model=Transaction)
def get_transaction(
    transaction_id: str,
    service: TransactionService = Depends(get_transaction_service),
) -> Any:
    return service.get_by_id(transaction_id)


@app.get("/reports", response_model=list[Transaction])
def reports(
    email: str | None = None,
    service: TransactionService = Depends(get_transaction_service),
) -> Any:
    """Report listing; same contract as `GET /transactions`."""

    return service.list_by_owner(email)


@app.put("/transactions/{transaction_id}", response_model=UpdateResult)
def update_transaction(
    transaction_id: str,
    payload: Any = Body(default=None),
    identity: Identity | None = Depends(require_identity),
    service: TransactionService = Depends(get_transaction_service),
) -> Any:
    caller_email = payload.get("userEmail") if isinstance(payload, dict) else None
    authorize_caller(identity, caller_email)
    return service.update(transaction_id, caller_email, payload)


@app.delete("/transactions/{transaction_id}", response_model=DeleteResult)
def delete_transaction(
    transaction_id: str,
    userEmail: str | None = None,
    identity: Identity | None = Depends(require_identity),
    service: TransactionService = Depends(get_transaction_service),
) -> Any:
    authorize_caller(identity, userEmail)
    return service.delete(transaction_id, userEmail)
