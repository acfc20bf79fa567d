"""
Authentication errors.

Every class here maps to the same 401 outcome at the HTTP boundary;
the distinctions exist for logs and diagnostics only.
"""

from enum import Enum


class AuthenticationError(Exception):
    """Caller could not be authenticated. `reason` is safe to show to the caller."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidCredentialsError(AuthenticationError):
    """Unknown email or wrong password (deliberately not distinguished)."""

    def __init__(self, reason: str = "invalid credentials"):
        super().__init__(reason)


class TokenErrorKind(str, Enum):
    MISSING = "missing"
    MALFORMED = "malformed"
    EXPIRED = "expired"
    BAD_SIGNATURE = "bad_signature"
    INVALID_CLAIMS = "invalid_claims"


class TokenError(AuthenticationError):
    """An identity token was rejected."""

    def __init__(self, kind: TokenErrorKind, detail: str = ""):
        super().__init__(detail or kind.value.replace("_", " "))
        self.kind = kind
