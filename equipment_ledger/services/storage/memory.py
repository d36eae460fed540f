"""
In-Memory Storage

Dictionary-backed stores used by tests and by callers that keep the
history in memory. Insertion order is preserved.
"""

from typing import Iterable, Optional, Sequence
from uuid import UUID

from equipment_ledger.models.audit import AuditEvent
from equipment_ledger.models.commerce import TransactionCommerce
from equipment_ledger.models.operation import OperationComptable
from equipment_ledger.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    OperationStore,
    TransactionStore,
)


class InMemoryOperationStore(OperationStore):
    """Operation store keeping everything in a dict keyed by id."""

    def __init__(self, operations: Optional[Iterable[OperationComptable]] = None):
        self._operations: dict[UUID, OperationComptable] = {}
        for operation in operations or []:
            self.add_operation(operation)

    def list_operations(self) -> Sequence[OperationComptable]:
        return list(self._operations.values())

    def add_operation(self, operation: OperationComptable) -> None:
        if operation.id in self._operations:
            raise DuplicateError(f"Operation {operation.id} already exists")
        self._operations[operation.id] = operation

    def remove_operation(self, operation_id: UUID) -> None:
        if operation_id not in self._operations:
            raise NotFoundError(f"Operation {operation_id} not found")
        del self._operations[operation_id]

    def __len__(self) -> int:
        return len(self._operations)


class InMemoryTransactionStore(TransactionStore):
    """Transaction store keeping everything in a dict keyed by id."""

    def __init__(self, transactions: Optional[Iterable[TransactionCommerce]] = None):
        self._transactions: dict[UUID, TransactionCommerce] = {}
        for transaction in transactions or []:
            self.add_transaction(transaction)

    def list_transactions(self) -> Sequence[TransactionCommerce]:
        return list(self._transactions.values())

    def add_transaction(self, transaction: TransactionCommerce) -> None:
        if transaction.id in self._transactions:
            raise DuplicateError(f"Transaction {transaction.id} already exists")
        self._transactions[transaction.id] = transaction

    def remove_transaction(self, transaction_id: UUID) -> None:
        if transaction_id not in self._transactions:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        del self._transactions[transaction_id]

    def __len__(self) -> int:
        return len(self._transactions)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        return list(reversed(self._events))[:limit]

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)
