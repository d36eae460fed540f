"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the ledger decoupled from how operations are persisted
2. Use in-memory storage for testing
3. Swap the JSON file store for a database later

The ledger only ever calls list_operations(). Writes come from the
orchestration layer, which owns any locking around them.
"""

from abc import ABC, abstractmethod
from typing import Sequence
from uuid import UUID

from equipment_ledger.models.audit import AuditEvent
from equipment_ledger.models.commerce import TransactionCommerce
from equipment_ledger.models.operation import OperationComptable


class OperationStore(ABC):
    """
    Abstract interface for the accounting history.

    Any storage implementation must implement these methods.
    """

    @abstractmethod
    def list_operations(self) -> Sequence[OperationComptable]:
        """
        List every stored operation.

        Returns:
            Operations in insertion order
        """
        pass

    @abstractmethod
    def add_operation(self, operation: OperationComptable) -> None:
        """
        Append an operation to the history.

        Raises:
            DuplicateError: If an operation with the same id exists
            StorageError: If the write fails
        """
        pass

    def add_operations(self, operations: Sequence[OperationComptable]) -> None:
        """
        Append several operations.

        Stores able to write a batch at once should override this.
        """
        for operation in operations:
            self.add_operation(operation)

    @abstractmethod
    def remove_operation(self, operation_id: UUID) -> None:
        """
        Remove an operation by id.

        Raises:
            NotFoundError: If no operation has this id
        """
        pass


class TransactionStore(ABC):
    """
    Abstract interface for the purchase and sale history.

    The commercial ledger only ever calls list_transactions().
    """

    @abstractmethod
    def list_transactions(self) -> Sequence[TransactionCommerce]:
        """
        List every stored transaction.

        Returns:
            Transactions in insertion order
        """
        pass

    @abstractmethod
    def add_transaction(self, transaction: TransactionCommerce) -> None:
        """
        Append a transaction.

        Raises:
            DuplicateError: If a transaction with the same id exists
        """
        pass

    @abstractmethod
    def remove_transaction(self, transaction_id: UUID) -> None:
        """
        Remove a transaction by id.

        Raises:
            NotFoundError: If no transaction has this id
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
