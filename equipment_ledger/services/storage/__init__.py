"""
Storage Services Package

Provides abstract interfaces and concrete implementations for the
accounting history (an in-memory store and a JSON file store) and for
the purchase and sale history.
"""

from equipment_ledger.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    OperationStore,
    StorageError,
    TransactionStore,
)
from equipment_ledger.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryOperationStore,
    InMemoryTransactionStore,
)
from equipment_ledger.services.storage.json_file import JsonFileOperationStore

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "OperationStore",
    "TransactionStore",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryOperationStore",
    "InMemoryTransactionStore",
    "JsonFileOperationStore",
]
