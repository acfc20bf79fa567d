"""
Main Orchestrator for Personal Ledger

This module ties together all the components and defines the
end-to-end flows for:
1. Accounts (register → hash → persist; login → verify → issue token)
2. Ledger (create / list / delete, always for one owner)
3. Aggregates (list for owner and period → summarize / monthly breakdown)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Every ledger flow takes the caller's id as an explicit argument
- The id only ever comes from the Auth Gateway, never from the payload
- Every step is audited

Transport concerns (status codes, JSON, headers) live in ledger.api.
"""

from typing import Optional
from uuid import UUID

from ledger.audit import AuditLogger
from ledger.config import Settings, get_settings
from ledger.models.transaction import (
    MonthlySummary,
    PeriodFilter,
    Summary,
    Transaction,
    TransactionCreate,
)
from ledger.models.user import LoginRequest, RegisterRequest
from ledger.queries import monthly_breakdown, summarize
from ledger.services.auth import (
    AuthGateway,
    CredentialStore,
    InvalidCredentialsError,
    PasswordHasher,
    TokenService,
)
from ledger.services.storage import (
    Database,
    DuplicateError,
    NotFoundError,
    SqlTransactionStorage,
    SqlUserStorage,
    TransactionStorageInterface,
)
from ledger.validation import ValidationError


class AccountFlow:
    """
    Orchestrates registration and login.

    Flow:
    1. Register → hash password → insert (store enforces uniqueness)
    2. Login → verify credentials → issue a 24h token
    """

    def __init__(
        self,
        credential_store: CredentialStore,
        token_service: TokenService,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._credentials = credential_store
        self._tokens = token_service
        self._audit_logger = audit_logger

    def register(self, request: RegisterRequest) -> UUID:
        """
        Register a new user.

        Raises:
            DuplicateError: username or email already taken
        """
        try:
            user_id = self._credentials.register(
                username=request.username,
                email=request.email,
                password=request.password,
            )
        except DuplicateError:
            if self._audit_logger:
                self._audit_logger.log_registration_rejected(
                    username=request.username,
                    reason="duplicate",
                )
            raise

        if self._audit_logger:
            self._audit_logger.log_user_registered(user_id=user_id, username=request.username)
        return user_id

    def login(self, request: LoginRequest) -> str:
        """
        Exchange credentials for an identity token.

        Raises:
            InvalidCredentialsError: unknown email or wrong password
        """
        try:
            user_id = self._credentials.verify(request.email, request.password)
        except InvalidCredentialsError:
            if self._audit_logger:
                self._audit_logger.log_login_failed(email=request.email)
            raise

        token = self._tokens.issue(user_id)

        if self._audit_logger:
            self._audit_logger.log_login_succeeded(user_id=user_id)
        return token


class LedgerFlow:
    """
    Orchestrates ownership-scoped ledger operations and aggregates.

    `owner_id` is always the verified caller. Aggregates are computed
    over exactly what list_transactions returns for that caller.
    """

    def __init__(
        self,
        storage: TransactionStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit_logger = audit_logger

    def create_transaction(self, owner_id: UUID, data: TransactionCreate) -> Transaction:
        transaction = self._storage.create_transaction(owner_id, data)

        if self._audit_logger:
            self._audit_logger.log_transaction_created(
                user_id=owner_id,
                transaction_id=transaction.id,
                transaction_type=transaction.type.value,
                amount=str(transaction.amount),
            )
        return transaction

    def list_transactions(
        self,
        owner_id: UUID,
        period: Optional[PeriodFilter] = None,
    ) -> list[Transaction]:
        return self._storage.list_transactions(owner_id, period or PeriodFilter())

    def delete_transaction(self, owner_id: UUID, transaction_id: UUID) -> None:
        """
        Delete one of the caller's transactions.

        Raises:
            NotFoundError: missing, or owned by someone else (same answer)
        """
        try:
            self._storage.delete_transaction(owner_id, transaction_id)
        except NotFoundError:
            if self._audit_logger:
                self._audit_logger.log_delete_refused(
                    user_id=owner_id,
                    transaction_id=transaction_id,
                )
            raise

        if self._audit_logger:
            self._audit_logger.log_transaction_deleted(
                user_id=owner_id,
                transaction_id=transaction_id,
            )

    def summary(
        self,
        owner_id: UUID,
        period: Optional[PeriodFilter] = None,
    ) -> Summary:
        period = period or PeriodFilter()
        transactions = self.list_transactions(owner_id, period)
        result = summarize(transactions)

        if self._audit_logger:
            self._audit_logger.log_summary_computed(
                user_id=owner_id,
                view="summary",
                period=period.date_prefix,
                transaction_count=len(transactions),
            )
        return result

    def monthly_summary(self, owner_id: UUID, period: PeriodFilter) -> list[MonthlySummary]:
        """
        Twelve monthly buckets for `period.year`.

        Raises:
            ValidationError: the period has no year
        """
        if period.year is None:
            raise ValidationError("Parameter 'year' is required", field="year")

        transactions = self.list_transactions(owner_id, period)
        result = monthly_breakdown(transactions, period.year)

        if self._audit_logger:
            self._audit_logger.log_summary_computed(
                user_id=owner_id,
                view="monthly_summary",
                period=period.date_prefix,
                transaction_count=len(transactions),
            )
        return result


class AppComponents:
    """Everything the HTTP layer needs, built once per process."""

    def __init__(
        self,
        database: Database,
        gateway: AuthGateway,
        account_flow: AccountFlow,
        ledger_flow: LedgerFlow,
        audit_logger: AuditLogger,
    ):
        self.database = database
        self.gateway = gateway
        self.account_flow = account_flow
        self.ledger_flow = ledger_flow
        self.audit_logger = audit_logger


def create_app_components(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    No connection is opened here: the database engine is created on the
    first request that needs it.

    Args:
        settings: Settings to use (defaults to get_settings())
        database: Pre-built Database (e.g. an in-memory one for tests)
    """
    settings = settings or get_settings()
    auth_settings = settings.auth

    audit_logger = AuditLogger()
    database = database or Database(settings.database)

    token_service = TokenService(
        secret_key=auth_settings.secret_key,
        algorithm=auth_settings.algorithm,
    )
    credential_store = CredentialStore(
        storage=SqlUserStorage(database),
        hasher=PasswordHasher(rounds=auth_settings.bcrypt_rounds),
    )

    return AppComponents(
        database=database,
        gateway=AuthGateway(token_service, audit_logger=audit_logger),
        account_flow=AccountFlow(credential_store, token_service, audit_logger=audit_logger),
        ledger_flow=LedgerFlow(SqlTransactionStorage(database), audit_logger=audit_logger),
        audit_logger=audit_logger,
    )
