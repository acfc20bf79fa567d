"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Currently implements a SQL backend, but designed to be swappable.
"""

from ledger.services.storage.interface import (
    ConnectionError,
    DuplicateError,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
    UserStorageInterface,
)
from ledger.services.storage.sql import (
    Database,
    SqlTransactionStorage,
    SqlUserStorage,
)

__all__ = [
    # Interfaces
    "TransactionStorageInterface",
    "UserStorageInterface",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # SQL implementation
    "Database",
    "SqlTransactionStorage",
    "SqlUserStorage",
]
