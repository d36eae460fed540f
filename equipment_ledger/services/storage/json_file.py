"""
JSON File Storage Implementation

DESIGN DECISION: The accounting history is small (a few thousand
operations at most for one equipment owner), so it is kept as one JSON
array on disk and rewritten after each change.

TRADEOFFS:
- Every write rewrites the whole file (fine at this scale)
- Writes go to a temporary file first and are then renamed over the
  target, so a crash never leaves a half-written history
- No cross-process locking; one application instance owns the file

Records use the same field names as export documents.
"""

import json
import os
from pathlib import Path
from typing import Optional, Sequence
from uuid import UUID

import structlog
from pydantic import TypeAdapter, ValidationError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from equipment_ledger.models.operation import OperationComptable
from equipment_ledger.services.storage.interface import (
    DuplicateError,
    NotFoundError,
    OperationStore,
    StorageError,
)


_OPERATIONS = TypeAdapter(list[OperationComptable])

logger = structlog.get_logger(__name__)


class JsonFileOperationStore(OperationStore):
    """
    Operation store persisted as a JSON array.

    The file is read lazily on first access. A missing file is an empty
    history.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._operations: Optional[list[OperationComptable]] = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> list[OperationComptable]:
        if self._operations is not None:
            return self._operations

        if not self._path.exists():
            self._operations = []
            return self._operations

        try:
            raw = self._path.read_bytes()
        except OSError as e:
            raise StorageError(f"Failed to read {self._path}: {e}") from e

        try:
            self._operations = _OPERATIONS.validate_json(raw)
        except ValidationError as e:
            raise StorageError(f"Corrupted operation file {self._path}: {e}") from e

        logger.debug(
            "operations_loaded",
            path=str(self._path),
            count=len(self._operations),
        )
        return self._operations

    @retry(
        retry=retry_if_exception_type(OSError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
        reraise=True,
    )
    def _write(self, operations: list[OperationComptable]) -> None:
        data = _OPERATIONS.dump_python(operations, mode="json", by_alias=True)
        payload = json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False)

        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_name(self._path.name + ".tmp")
        try:
            tmp_path.write_text(payload + "\n", encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError:
            if tmp_path.exists():
                tmp_path.unlink()
            raise

    def _save(self, operations: list[OperationComptable]) -> None:
        try:
            self._write(operations)
        except OSError as e:
            raise StorageError(f"Failed to write {self._path}: {e}") from e
        self._operations = operations

    def list_operations(self) -> Sequence[OperationComptable]:
        return list(self._load())

    def add_operation(self, operation: OperationComptable) -> None:
        operations = self._load()
        if any(op.id == operation.id for op in operations):
            raise DuplicateError(f"Operation {operation.id} already exists")
        self._save([*operations, operation])

    def add_operations(self, new_operations: Sequence[OperationComptable]) -> None:
        """Append several operations with a single file write."""
        if not new_operations:
            return
        operations = self._load()
        known = {op.id for op in operations}
        for operation in new_operations:
            if operation.id in known:
                raise DuplicateError(f"Operation {operation.id} already exists")
            known.add(operation.id)
        self._save([*operations, *new_operations])

    def remove_operation(self, operation_id: UUID) -> None:
        operations = self._load()
        remaining = [op for op in operations if op.id != operation_id]
        if len(remaining) == len(operations):
            raise NotFoundError(f"Operation {operation_id} not found")
        self._save(remaining)
