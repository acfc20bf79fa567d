"""Salted one-way password hashing with bcrypt."""

import bcrypt


class PasswordHasher:
    """
    bcrypt hasher with a tunable cost factor.

    Plaintext passwords are never stored or compared directly;
    `bcrypt.checkpw` does the constant-time comparison.
    """

    def __init__(self, rounds: int = 12):
        self._rounds = rounds

    def hash(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self._rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
        except ValueError:
            # Corrupt stored hash, or a password bcrypt refuses (> 72 bytes)
            return False
