"""
Main Orchestrator for Equipment Ledger

This module ties together the ledger, the operation store, the export
writers and the audit logger, and defines the end-to-end flows the
accounting screen uses:
1. Record / remove operations
2. Show a period (operations, day groups, totals)
3. Export a period (JSON snapshot or text report)
4. Import a JSON snapshot (de-duplicated by operation id)

DESIGN DECISION: Every dependency is passed in explicitly.
There is no shared "data manager" or "store manager" singleton; the
application builds its components once with create_app_components()
and hands them to whoever needs them.

An import is parsed and merged before anything is written: a bad file
leaves the store exactly as it was.
"""

from datetime import datetime, timezone, tzinfo
from pathlib import Path
from typing import Iterable, Optional
from uuid import UUID

from equipment_ledger.audit import AuditLogger, create_correlation_id
from equipment_ledger.config import Settings, get_settings
from equipment_ledger.exports import (
    AccessError,
    ExportError,
    ParseError,
    WriteError,
    read_export,
    write_export,
    write_report,
)
from equipment_ledger.ledger import AccountingLedger
from equipment_ledger.models.audit import AuditEventBuilder
from equipment_ledger.models.export import (
    DayGroup,
    ImportResult,
    Period,
    PeriodSummary,
)
from equipment_ledger.models.operation import OperationComptable, utc_now
from equipment_ledger.services.entitlements import (
    FeatureGate,
    FreeTierLimits,
    StaticEntitlementOracle,
)
from equipment_ledger.services.storage import (
    InMemoryOperationStore,
    JsonFileOperationStore,
    NotFoundError,
    OperationStore,
    StorageError,
)


class AccountingFlow:
    """
    Orchestrates the accounting screen.

    Reads go through the AccountingLedger; writes go to the store and
    are audited.
    """

    def __init__(
        self,
        store: OperationStore,
        audit_logger: Optional[AuditLogger] = None,
        tz: Optional[tzinfo] = None,
        export_directory: Optional[Path] = None,
        currency_symbol: str = "€",
        file_prefix: str = "comptabilite",
    ):
        self._store = store
        self._audit_logger = audit_logger
        self._tz = tz or timezone.utc
        self._ledger = AccountingLedger(store, tz=self._tz)
        self._export_directory = Path(export_directory) if export_directory else Path.cwd()
        self._currency_symbol = currency_symbol
        self._file_prefix = file_prefix

    @property
    def ledger(self) -> AccountingLedger:
        return self._ledger

    # -------------------------------------------------------------------------
    # History changes
    # -------------------------------------------------------------------------

    def record(
        self,
        operation: Optional[OperationComptable],
        correlation_id: Optional[UUID] = None,
    ) -> Optional[OperationComptable]:
        """
        Persist an operation built by OperationBuilder.

        Builders return None when there is nothing to record; that is
        passed through unchanged.

        Raises:
            StorageError: the store rejected the operation (audited)
        """
        if operation is None:
            return None

        try:
            self._store.add_operation(operation)
        except StorageError as e:
            self._audit_storage_failed(
                e,
                {"operation_id": str(operation.id)},
                correlation_id,
            )
            raise

        if self._audit_logger:
            self._audit_logger.log_operation_recorded(
                operation=operation,
                correlation_id=correlation_id,
            )
        return operation

    def remove(
        self,
        operation_ids: Iterable[UUID],
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Remove operations by id.

        All ids are checked first; if one is unknown, NotFoundError is
        raised and nothing is removed. Returns the number removed.
        """
        ids = list(dict.fromkeys(operation_ids))
        known = {op.id for op in self._store.list_operations()}
        missing = [op_id for op_id in ids if op_id not in known]
        if missing:
            raise NotFoundError(
                f"Unknown operation(s): {', '.join(str(op_id) for op_id in missing)}"
            )

        correlation_id = correlation_id or create_correlation_id()
        for op_id in ids:
            self._store.remove_operation(op_id)
            if self._audit_logger:
                self._audit_logger.log_operation_removed(
                    operation_id=op_id,
                    correlation_id=correlation_id,
                )
        return len(ids)

    # -------------------------------------------------------------------------
    # Reading a period
    # -------------------------------------------------------------------------

    def operations_for(self, period: Period) -> list[OperationComptable]:
        return self._ledger.operations_for(period)

    def summary_for(self, period: Period) -> PeriodSummary:
        return self._ledger.summarize(self.operations_for(period))

    def day_groups_for(self, period: Period) -> list[DayGroup]:
        return self._ledger.group_by_day(self.operations_for(period))

    # -------------------------------------------------------------------------
    # Export
    # -------------------------------------------------------------------------

    def export_json(
        self,
        period: Period,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Path:
        """
        Write the period's snapshot as a JSON file.

        Raises:
            WriteError: the export directory cannot be written
        """
        now = now or utc_now()
        export = self._ledger.build_export(
            period, self.operations_for(period), exported_at=now
        )

        try:
            path = write_export(
                export,
                self._export_directory,
                now=now.astimezone(self._tz),
                prefix=self._file_prefix,
            )
        except WriteError as e:
            self._audit_export_failed("json", e, correlation_id)
            raise

        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.export_written(
                path=path,
                file_format="json",
                operation_count=len(export.operations),
                correlation_id=correlation_id,
            ))
        return path

    def export_report(
        self,
        period: Period,
        now: Optional[datetime] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Path:
        """
        Write the period's human-readable report.

        Raises:
            WriteError: the export directory cannot be written
        """
        now = now or utc_now()
        export = self._ledger.build_export(
            period, self.operations_for(period), exported_at=now
        )

        try:
            path = write_report(
                export,
                period,
                self._export_directory,
                tz=self._tz,
                currency_symbol=self._currency_symbol,
                now=now.astimezone(self._tz),
                prefix=self._file_prefix,
            )
        except WriteError as e:
            self._audit_export_failed("report", e, correlation_id)
            raise

        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.export_written(
                path=path,
                file_format="report",
                operation_count=len(export.operations),
                correlation_id=correlation_id,
            ))
        return path

    def _audit_export_failed(
        self,
        file_format: str,
        error: ExportError,
        correlation_id: Optional[UUID],
    ) -> None:
        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.export_failed(
                file_format=file_format,
                error_message=str(error),
                correlation_id=correlation_id,
            ))

    def _audit_storage_failed(
        self,
        error: StorageError,
        details: dict,
        correlation_id: Optional[UUID],
    ) -> None:
        if self._audit_logger:
            self._audit_logger.log_error(
                error_type=type(error).__name__,
                error_message=str(error),
                details=details,
                correlation_id=correlation_id,
            )

    # -------------------------------------------------------------------------
    # Import
    # -------------------------------------------------------------------------

    def import_json(
        self,
        path: Path,
        correlation_id: Optional[UUID] = None,
    ) -> ImportResult:
        """
        Import a JSON snapshot into the store.

        New operations are added in document order; operations whose id
        is already known are counted as duplicates and skipped.

        Raises:
            AccessError: the file cannot be read
            ParseError: the file is not a valid export
            StorageError: the accepted operations could not be stored
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            export = read_export(path)
        except (AccessError, ParseError) as e:
            if self._audit_logger:
                self._audit_logger.log(AuditEventBuilder.import_failed(
                    path=Path(path),
                    error_code=type(e).__name__,
                    error_message=str(e),
                    correlation_id=correlation_id,
                ))
            raise

        result = self._ledger.merge_import(export)
        try:
            self._store.add_operations(result.accepted)
        except StorageError as e:
            self._audit_storage_failed(
                e,
                {"path": str(path), "accepted_count": result.imported_count},
                correlation_id,
            )
            raise

        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.import_completed(
                path=Path(path),
                imported_count=result.imported_count,
                duplicate_count=result.duplicate_count,
                correlation_id=correlation_id,
            ))
        return result


def create_app_components(
    settings: Optional[Settings] = None,
    use_file_store: bool = True,
) -> tuple[AccountingFlow, FeatureGate]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to use; defaults to get_settings().
        use_file_store: Whether to persist operations in the configured
                        JSON file. Set to False for an in-memory history.

    Returns:
        (accounting_flow, feature_gate)
    """
    settings = settings or get_settings()
    ledger_settings = settings.ledger
    entitlement_settings = settings.entitlements

    if use_file_store:
        store = JsonFileOperationStore(ledger_settings.store_path)
    else:
        store = InMemoryOperationStore()

    audit_logger = AuditLogger()  # Local-only logging

    flow = AccountingFlow(
        store=store,
        audit_logger=audit_logger,
        tz=ledger_settings.tzinfo,
        export_directory=ledger_settings.export_directory,
        currency_symbol=ledger_settings.currency_symbol,
        file_prefix=ledger_settings.file_prefix,
    )

    gate = FeatureGate(
        oracle=StaticEntitlementOracle(entitlement_settings.premium_unlocked),
        limits=FreeTierLimits.from_settings(entitlement_settings),
        audit_logger=audit_logger,
    )

    return flow, gate
