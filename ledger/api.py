"""
HTTP boundary for Personal Ledger

Maps routes to flows and domain errors to status codes:

    ValidationError        → 400
    AuthenticationError    → 401
    NotFoundError          → 404
    DuplicateError         → 409
    StorageError           → 500 (opaque; full detail goes to the log)

The caller's identity is resolved by a per-request dependency
(`get_caller_id`) and handed to the flows as an explicit argument.
"""

from contextlib import asynccontextmanager
from typing import Optional
from uuid import UUID

from fastapi import Depends, FastAPI, Header, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ledger import __version__
from ledger.config import get_settings
from ledger.models.transaction import (
    MonthlySummary,
    Summary,
    TransactionCreate,
    TransactionResponse,
)
from ledger.models.user import LoginRequest, MessageResponse, RegisterRequest, TokenResponse
from ledger.orchestrator import AppComponents, create_app_components
from ledger.services.auth import AuthenticationError
from ledger.services.storage import DuplicateError, NotFoundError, StorageError
from ledger.validation import (
    ValidationError,
    parse_period,
    parse_transaction_id,
    require_period,
)


def get_components(request: Request) -> AppComponents:
    return request.app.state.components


def get_caller_id(
    authorization: Optional[str] = Header(default=None),
    components: AppComponents = Depends(get_components),
) -> UUID:
    """Auth Gateway as a dependency: the verified user id for this request."""
    return components.gateway.authenticate(authorization)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

def _error(status_code: int, detail: str, headers: Optional[dict] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail}, headers=headers)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid input", "errors": errors},
    )


async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, exc.message)


async def handle_authentication_error(request: Request, exc: AuthenticationError) -> JSONResponse:
    return _error(
        status.HTTP_401_UNAUTHORIZED,
        exc.reason,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def handle_not_found(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, "Transaction not found")


async def handle_duplicate(request: Request, exc: DuplicateError) -> JSONResponse:
    return _error(status.HTTP_409_CONFLICT, "User already exists")


async def handle_storage_error(request: Request, exc: StorageError) -> JSONResponse:
    components: AppComponents = request.app.state.components
    components.audit_logger.log_store_error(
        operation=f"{request.method} {request.url.path}",
        error_message=str(exc),
    )
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


# =============================================================================
# APPLICATION
# =============================================================================

def create_app(components: Optional[AppComponents] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        components: Pre-built components (tests inject an in-memory
            database here). Defaults to create_app_components().
    """
    components = components or create_app_components()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        components.database.dispose()

    app = FastAPI(title="Personal Ledger", version=__version__, lifespan=lifespan)
    app.state.components = components

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_settings().app.cors_origins_list,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Accept", "Authorization", "Content-Type"],
    )

    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(ValidationError, handle_validation_error)
    app.add_exception_handler(AuthenticationError, handle_authentication_error)
    app.add_exception_handler(NotFoundError, handle_not_found)
    app.add_exception_handler(DuplicateError, handle_duplicate)
    app.add_exception_handler(StorageError, handle_storage_error)

    # ---------------- Accounts ----------------

    @app.post(
        "/api/register",
        status_code=status.HTTP_201_CREATED,
        response_model=MessageResponse,
    )
    def register(
        payload: RegisterRequest,
        components: AppComponents = Depends(get_components),
    ):
        components.account_flow.register(payload)
        return MessageResponse(message="User registered successfully")

    @app.post("/api/login", response_model=TokenResponse)
    def login(
        payload: LoginRequest,
        components: AppComponents = Depends(get_components),
    ):
        return TokenResponse(token=components.account_flow.login(payload))

    # ---------------- Transactions ----------------

    @app.get("/api/transactions", response_model=list[TransactionResponse])
    def list_transactions(
        year: Optional[str] = Query(default=None),
        month: Optional[str] = Query(default=None),
        caller_id: UUID = Depends(get_caller_id),
        components: AppComponents = Depends(get_components),
    ):
        period = parse_period(year, month)
        return components.ledger_flow.list_transactions(caller_id, period)

    @app.post(
        "/api/transactions",
        status_code=status.HTTP_201_CREATED,
        response_model=TransactionResponse,
    )
    def create_transaction(
        payload: TransactionCreate,
        caller_id: UUID = Depends(get_caller_id),
        components: AppComponents = Depends(get_components),
    ):
        return components.ledger_flow.create_transaction(caller_id, payload)

    @app.delete(
        "/api/transactions/{transaction_id}",
        status_code=status.HTTP_204_NO_CONTENT,
    )
    def delete_transaction(
        transaction_id: str,
        caller_id: UUID = Depends(get_caller_id),
        components: AppComponents = Depends(get_components),
    ):
        components.ledger_flow.delete_transaction(
            caller_id,
            parse_transaction_id(transaction_id),
        )
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    # ---------------- Aggregates ----------------

    @app.get("/api/summary", response_model=Summary)
    def summary(
        year: Optional[str] = Query(default=None),
        month: Optional[str] = Query(default=None),
        caller_id: UUID = Depends(get_caller_id),
        components: AppComponents = Depends(get_components),
    ):
        period = parse_period(year, month)
        return components.ledger_flow.summary(caller_id, period)

    @app.get("/api/monthly-summary", response_model=list[MonthlySummary])
    def monthly_summary(
        year: Optional[str] = Query(default=None),
        month: Optional[str] = Query(default=None),
        caller_id: UUID = Depends(get_caller_id),
        components: AppComponents = Depends(get_components),
    ):
        period = require_period(year, month)
        return components.ledger_flow.monthly_summary(caller_id, period)

    # ---------------- Health ----------------

    @app.get("/api/health")
    def health():
        return {"status": "ok", "version": __version__}

    return app
