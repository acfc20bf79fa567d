"""
Identity Token Service

Issues and verifies signed, time-bounded identity tokens (JWT, HMAC).

DESIGN DECISION: Tokens are stateless. There is no session table and no
revocation list: a correctly signed token whose expiry lies in the future
is accepted, anything else is rejected. Tokens are never refreshed;
callers log in again after 24 hours.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
from uuid import UUID

from jose import jwt
from jose.exceptions import JWTClaimsError, JWTError

from ledger.services.auth.errors import TokenError, TokenErrorKind


TOKEN_LIFETIME = timedelta(hours=24)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenService:
    """
    Signs `{sub, iat, exp}` claims with a process-wide secret.

    The clock is injectable so expiry can be checked deterministically.
    """

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret_key:
            raise ValueError("Token secret key must not be empty")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._clock = clock or _utcnow

    def issue(self, user_id: UUID) -> str:
        """Create a token for `user_id` that expires exactly 24 hours from now."""
        issued_at = self._clock()
        claims = {
            "sub": str(user_id),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + TOKEN_LIFETIME).timestamp()),
        }
        return jwt.encode(claims, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: Optional[str]) -> UUID:
        """
        Return the user id asserted by `token`.

        Raises:
            TokenError: MISSING, MALFORMED, BAD_SIGNATURE, EXPIRED or
                INVALID_CLAIMS
        """
        if not token:
            raise TokenError(TokenErrorKind.MISSING)

        # Structure first, so garbage is not reported as a bad signature.
        try:
            jwt.get_unverified_header(token)
            jwt.get_unverified_claims(token)
        except JWTError as e:
            raise TokenError(TokenErrorKind.MALFORMED) from e

        try:
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                # Expiry is checked below against our own clock.
                options={"verify_exp": False},
            )
        except JWTClaimsError as e:
            raise TokenError(TokenErrorKind.INVALID_CLAIMS) from e
        except JWTError as e:
            raise TokenError(TokenErrorKind.BAD_SIGNATURE) from e

        expires_at = claims.get("exp")
        if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
            raise TokenError(TokenErrorKind.INVALID_CLAIMS)
        if self._clock().timestamp() >= expires_at:
            raise TokenError(TokenErrorKind.EXPIRED)

        subject = claims.get("sub")
        try:
            return UUID(subject)
        except (TypeError, ValueError) as e:
            raise TokenError(TokenErrorKind.INVALID_CLAIMS) from e
