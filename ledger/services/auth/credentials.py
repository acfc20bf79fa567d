"""
Credential Store

Registers users and verifies email/password pairs.

DESIGN DECISION: Duplicate detection is left to the storage backend's
UNIQUE constraints. Looking the email up first and inserting afterwards
would leave a window where two registrations both pass the check.
"""

from uuid import UUID

from ledger.models.user import User
from ledger.services.auth.errors import InvalidCredentialsError
from ledger.services.auth.passwords import PasswordHasher
from ledger.services.storage import UserStorageInterface


class CredentialStore:
    """Persists identities with bcrypt password hashes."""

    def __init__(self, storage: UserStorageInterface, hasher: PasswordHasher):
        self._storage = storage
        self._hasher = hasher

    def register(self, username: str, email: str, password: str) -> UUID:
        """
        Create a user and return its id.

        The user row is committed before this returns, so a token can
        never be issued for an identity that was not persisted.

        Raises:
            DuplicateError: If the username or email is already taken
        """
        user = User(
            username=username,
            email=email.strip().lower(),
            password_hash=self._hasher.hash(password),
        )
        self._storage.create_user(user)
        return user.id

    def verify(self, email: str, password: str) -> UUID:
        """
        Return the id of the user owning these credentials.

        Raises:
            InvalidCredentialsError: Unknown email or wrong password
        """
        user = self._storage.get_user_by_email(email.strip().lower())
        if user is None or not self._hasher.verify(password, user.password_hash):
            raise InvalidCredentialsError()
        return user.id
