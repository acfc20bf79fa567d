"""
Auth Gateway

Sits in front of every ownership-scoped operation. It turns the
`Authorization` header into a verified user id, and that id is then
passed explicitly to every downstream call. Nothing downstream ever
takes an owner id from the request body or query string.
"""

from typing import Optional
from uuid import UUID

from ledger.audit import AuditLogger
from ledger.services.auth.errors import AuthenticationError, TokenError, TokenErrorKind
from ledger.services.auth.tokens import TokenService


BEARER_SCHEME = "bearer"

MISSING_TOKEN = "missing token"
INVALID_TOKEN = "invalid token"
INVALID_CLAIMS = "invalid claims"


class AuthGateway:
    """Authenticates a request from its Authorization header."""

    def __init__(
        self,
        token_service: TokenService,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._tokens = token_service
        self._audit_logger = audit_logger

    def authenticate(self, authorization: Optional[str]) -> UUID:
        """
        Return the caller's user id.

        Raises:
            AuthenticationError: with reason "missing token",
                "invalid token" or "invalid claims"
        """
        header = (authorization or "").strip()
        if not header:
            raise AuthenticationError(MISSING_TOKEN)

        scheme, _, token = header.partition(" ")
        if scheme.lower() != BEARER_SCHEME:
            self._reject(TokenErrorKind.MALFORMED)
            raise AuthenticationError(INVALID_TOKEN)

        token = token.strip()
        if not token:
            raise AuthenticationError(MISSING_TOKEN)

        try:
            return self._tokens.verify(token)
        except TokenError as e:
            self._reject(e.kind)
            if e.kind == TokenErrorKind.INVALID_CLAIMS:
                raise AuthenticationError(INVALID_CLAIMS) from e
            raise AuthenticationError(INVALID_TOKEN) from e

    def _reject(self, kind: TokenErrorKind) -> None:
        if self._audit_logger:
            self._audit_logger.log_token_rejected(kind.value)
