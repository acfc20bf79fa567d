"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap SQLite for PostgreSQL (or a document store) without touching flows
2. Keep ownership policy out of the transport layer
3. Keep business logic decoupled from storage implementation

OWNERSHIP: every transaction operation takes the owner id as an explicit
argument and conjoins it with the query. There is deliberately no method
that reads or deletes a transaction by id alone.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from ledger.models.transaction import PeriodFilter, Transaction, TransactionCreate
from ledger.models.user import User


class UserStorageInterface(ABC):
    """
    Abstract interface for user (credential) storage.

    Uniqueness of username and email is enforced by the backend itself,
    not by a lookup before the insert.
    """

    @abstractmethod
    def create_user(self, user: User) -> User:
        """
        Persist a new user.

        Args:
            user: The user to store, password already hashed

        Returns:
            The stored user

        Raises:
            DuplicateError: If the username or email is taken
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[User]:
        """
        Retrieve a user by email.

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        """
        Retrieve a user by id.

        Returns:
            The user if found, None otherwise
        """
        pass


class TransactionStorageInterface(ABC):
    """
    Abstract interface for ledger storage operations.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def create_transaction(
        self,
        owner_id: UUID,
        data: TransactionCreate,
    ) -> Transaction:
        """
        Store a new transaction for `owner_id`.

        The store assigns the id.

        Returns:
            The stored transaction, including its id

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def list_transactions(
        self,
        owner_id: UUID,
        period: Optional[PeriodFilter] = None,
    ) -> list[Transaction]:
        """
        List the owner's transactions, newest date first.

        Args:
            owner_id: Authenticated caller
            period: Optional year/month restriction

        Returns:
            Matching transactions (empty list when nothing matches)
        """
        pass

    @abstractmethod
    def delete_transaction(self, owner_id: UUID, transaction_id: UUID) -> None:
        """
        Delete a transaction if and only if it exists and belongs to `owner_id`.

        Raises:
            NotFoundError: If no such transaction is owned by the caller
            StorageError: If the delete fails
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage (or not visible to the caller)."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
