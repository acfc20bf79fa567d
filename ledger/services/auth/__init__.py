"""Authentication services package."""

from ledger.services.auth.credentials import CredentialStore
from ledger.services.auth.errors import (
    AuthenticationError,
    InvalidCredentialsError,
    TokenError,
    TokenErrorKind,
)
from ledger.services.auth.gateway import AuthGateway
from ledger.services.auth.passwords import PasswordHasher
from ledger.services.auth.tokens import TOKEN_LIFETIME, TokenService

__all__ = [
    "AuthGateway",
    "AuthenticationError",
    "CredentialStore",
    "InvalidCredentialsError",
    "PasswordHasher",
    "TOKEN_LIFETIME",
    "TokenError",
    "TokenErrorKind",
    "TokenService",
]
