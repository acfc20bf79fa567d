"""
SQL Storage Implementation

DESIGN DECISION: A relational backend (SQLite by default, any SQLAlchemy
URL in production) gives us the two guarantees the ledger policy leans on:
1. UNIQUE constraints make duplicate registration an atomic failure
2. `DELETE ... WHERE id = ? AND user_id = ?` makes "exists and owned"
   a single predicate, with no check-then-act window

The two tables mirror the two logical collections, `users` and
`transactions`. Dates are stored as `YYYY-MM-DD` text so period filters
are plain prefix matches.

The engine is process-wide, created lazily on first use and exactly once.
"""

import threading
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    MetaData,
    Numeric,
    String,
    Table,
    and_,
    create_engine,
    delete,
    insert,
    select,
    text,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.pool import StaticPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from ledger.config import DatabaseSettings, get_settings
from ledger.models.transaction import PeriodFilter, Transaction, TransactionCreate
from ledger.models.user import User
from ledger.queries.aggregation import normalize_amount
from ledger.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
    UserStorageInterface,
)


metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("username", String(50), unique=True, nullable=False),
    Column("email", String(320), unique=True, nullable=False),
    Column("password_hash", String(255), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)

transactions = Table(
    "transactions",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id"), nullable=False, index=True),
    Column("description", String(200), nullable=False),
    # Floats come back from the driver; normalize_amount turns them into Decimal.
    Column("amount", Numeric(18, 2, asdecimal=False), nullable=False),
    Column("date", String(10), nullable=False, index=True),
    Column("type", String(10), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
)


class Database:
    """
    Lazily-initialized, process-wide engine holder.

    The first caller builds the engine under a lock; everyone else
    either waits for that single initialization or reuses the result.
    Queries themselves never take the lock.
    """

    def __init__(self, settings: Optional[DatabaseSettings] = None):
        self._settings = settings or get_settings().database
        self._engine: Optional[Engine] = None
        self._lock = threading.Lock()

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            with self._lock:
                if self._engine is None:
                    self._engine = self._connect()
        return self._engine

    @property
    def is_connected(self) -> bool:
        return self._engine is not None

    def _engine_options(self) -> dict:
        url = self._settings.url
        timeout = self._settings.connect_timeout
        options: dict = {"echo": self._settings.echo}

        if url.startswith("sqlite"):
            options["connect_args"] = {"check_same_thread": False, "timeout": timeout}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # One shared connection, otherwise every checkout is a fresh empty DB.
                options["poolclass"] = StaticPool
        else:
            options["pool_pre_ping"] = True
            options["pool_timeout"] = timeout
            if url.startswith(("postgresql", "mysql")):
                options["connect_args"] = {"connect_timeout": int(timeout)}
        return options

    @retry(
        retry=retry_if_exception_type(ConnectionError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _connect(self) -> Engine:
        """
        Create the engine, ping it and make sure both tables exist.

        Only this bootstrap step is retried. Ledger operations fail fast.
        """
        engine = None
        try:
            engine = create_engine(self._settings.url, **self._engine_options())
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            metadata.create_all(engine)
            return engine
        except SQLAlchemyError as e:
            if engine is not None:
                engine.dispose()
            raise ConnectionError(f"Failed to connect to database: {e}") from e

    def dispose(self) -> None:
        """Release pooled connections (used on shutdown and in tests)."""
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                self._engine = None


class SqlUserStorage(UserStorageInterface):
    """SQL implementation of credential storage."""

    def __init__(self, database: Database):
        self._db = database

    def _row_to_user(self, row) -> User:
        return User(
            id=UUID(row.id),
            username=row.username,
            email=row.email,
            password_hash=row.password_hash,
            created_at=row.created_at,
        )

    def create_user(self, user: User) -> User:
        try:
            with self._db.engine.begin() as conn:
                conn.execute(
                    insert(users).values(
                        id=str(user.id),
                        username=user.username,
                        email=user.email,
                        password_hash=user.password_hash,
                        created_at=user.created_at,
                    )
                )
            return user
        except IntegrityError as e:
            raise DuplicateError("User already exists") from e
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to save user: {e}") from e

    def get_user_by_email(self, email: str) -> Optional[User]:
        try:
            with self._db.engine.connect() as conn:
                row = conn.execute(
                    select(users).where(users.c.email == email)
                ).first()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get user: {e}") from e
        return self._row_to_user(row) if row else None

    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        try:
            with self._db.engine.connect() as conn:
                row = conn.execute(
                    select(users).where(users.c.id == str(user_id))
                ).first()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to get user: {e}") from e
        return self._row_to_user(row) if row else None


class SqlTransactionStorage(TransactionStorageInterface):
    """
    SQL implementation of ledger storage.

    Every statement carries `user_id = owner_id` in its WHERE clause.
    """

    def __init__(self, database: Database):
        self._db = database

    def _row_to_transaction(self, row) -> Transaction:
        return Transaction(
            id=UUID(row.id),
            owner_id=UUID(row.user_id),
            description=row.description,
            amount=normalize_amount(row.amount),
            date=row.date,
            type=row.type,
        )

    def create_transaction(
        self,
        owner_id: UUID,
        data: TransactionCreate,
    ) -> Transaction:
        transaction = Transaction(
            id=uuid4(),
            owner_id=owner_id,
            description=data.description,
            amount=data.amount,
            date=data.date,
            type=data.type,
        )
        try:
            with self._db.engine.begin() as conn:
                conn.execute(
                    insert(transactions).values(
                        id=str(transaction.id),
                        user_id=str(owner_id),
                        description=transaction.description,
                        amount=transaction.amount,
                        date=transaction.date,
                        type=transaction.type.value,
                        created_at=datetime.now(timezone.utc),
                    )
                )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to save transaction: {e}") from e
        return transaction

    def list_transactions(
        self,
        owner_id: UUID,
        period: Optional[PeriodFilter] = None,
    ) -> list[Transaction]:
        query = select(transactions).where(transactions.c.user_id == str(owner_id))

        prefix = period.date_prefix if period else None
        if prefix is not None:
            query = query.where(transactions.c.date.like(f"{prefix}-%"))

        # Newest first
        query = query.order_by(
            transactions.c.date.desc(),
            transactions.c.created_at.desc(),
        )

        try:
            with self._db.engine.connect() as conn:
                rows = conn.execute(query).all()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list transactions: {e}") from e

        return [self._row_to_transaction(row) for row in rows]

    def delete_transaction(self, owner_id: UUID, transaction_id: UUID) -> None:
        try:
            with self._db.engine.begin() as conn:
                result = conn.execute(
                    delete(transactions).where(
                        and_(
                            transactions.c.id == str(transaction_id),
                            transactions.c.user_id == str(owner_id),
                        )
                    )
                )
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to delete transaction: {e}") from e

        if result.rowcount == 0:
            raise NotFoundError(f"Transaction not found: {transaction_id}")
