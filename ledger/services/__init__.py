"""Services package."""

from ledger.services.auth import (
    AuthenticationError,
    AuthGateway,
    CredentialStore,
    InvalidCredentialsError,
    PasswordHasher,
    TokenError,
    TokenErrorKind,
    TokenService,
)
from ledger.services.storage import (
    ConnectionError,
    Database,
    DuplicateError,
    NotFoundError,
    SqlTransactionStorage,
    SqlUserStorage,
    StorageError,
    TransactionStorageInterface,
    UserStorageInterface,
)

__all__ = [
    # Auth services
    "AuthenticationError",
    "AuthGateway",
    "CredentialStore",
    "InvalidCredentialsError",
    "PasswordHasher",
    "TokenError",
    "TokenErrorKind",
    "TokenService",
    # Storage services
    "ConnectionError",
    "Database",
    "DuplicateError",
    "NotFoundError",
    "SqlTransactionStorage",
    "SqlUserStorage",
    "StorageError",
    "TransactionStorageInterface",
    "UserStorageInterface",
]
