"""
Flow tests for the accounting orchestrator

All collaborators are in-memory; files only go to pytest's tmp_path.
"""

import json
import pytest
from decimal import Decimal
from uuid import uuid4

from conftest import utc
from equipment_ledger.audit import AuditLogger
from equipment_ledger.exports import AccessError, ParseError, WriteError
from equipment_ledger.models.audit import AuditEventType, AuditSeverity
from equipment_ledger.models.export import Period
from equipment_ledger.models.operation import OperationBuilder
from equipment_ledger.orchestrator import AccountingFlow
from equipment_ledger.services.storage import (
    InMemoryAuditStorage,
    InMemoryOperationStore,
    NotFoundError,
    StorageError,
)


class FailingStore(InMemoryOperationStore):
    """Store whose writes always fail."""

    def add_operation(self, operation):
        raise StorageError("disk full")

    def add_operations(self, operations):
        raise StorageError("disk full")


NOW = utc(2024, 4, 2, 14, 30)


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def flow(tmp_path, mixed_operations, audit_storage):
    return AccountingFlow(
        store=InMemoryOperationStore(mixed_operations),
        audit_logger=AuditLogger(storage=audit_storage),
        export_directory=tmp_path / "exports",
    )


def event_types(audit_storage):
    return [event.event_type for event in audit_storage.events]


class TestRecordAndRemove:
    """Tests for history changes."""

    def test_record(self, flow, audit_storage):
        op = OperationBuilder.rental_revenue(Decimal("25"), materiel_nom="Perceuse", when=NOW)
        assert flow.record(op) is op
        assert op in flow.ledger.all_operations()
        assert event_types(audit_storage) == [AuditEventType.OPERATION_RECORDED]

    def test_record_nothing(self, flow, audit_storage):
        """Builders return None when there is nothing to record."""
        assert flow.record(OperationBuilder.repair_expense(None)) is None
        assert len(flow.ledger.all_operations()) == 5
        assert audit_storage.events == []

    def test_remove(self, flow, op_a, op_b, audit_storage):
        assert flow.remove([op_a.id, op_b.id]) == 2
        assert op_a.id not in [op.id for op in flow.ledger.all_operations()]
        assert event_types(audit_storage) == [AuditEventType.OPERATION_REMOVED] * 2
        assert audit_storage.events[0].correlation_id == audit_storage.events[1].correlation_id

    def test_remove_unknown_removes_nothing(self, flow, op_a):
        with pytest.raises(NotFoundError):
            flow.remove([op_a.id, uuid4()])
        assert len(flow.ledger.all_operations()) == 5

    def test_record_storage_failure_is_audited(self, audit_storage):
        flow = AccountingFlow(store=FailingStore(), audit_logger=AuditLogger(storage=audit_storage))
        op = OperationBuilder.rental_revenue(Decimal("25"), when=NOW)

        with pytest.raises(StorageError):
            flow.record(op)

        assert event_types(audit_storage) == [AuditEventType.SYSTEM_ERROR]
        assert audit_storage.events[0].details == {"operation_id": str(op.id)}


class TestPeriodViews:
    def test_summary_for_month(self, flow):
        summary = flow.summary_for(Period.for_month(1, 2024))
        assert summary.total_revenue == Decimal("100.00")
        assert summary.total_expense == Decimal("30.00")
        assert summary.net_profit == Decimal("70.00")

    def test_day_groups_for_year(self, flow):
        groups = flow.day_groups_for(Period.for_year(2024))
        assert len(groups) == 4
        assert groups[0].day.isoformat() == "2024-03-01"


class TestExportFlow:
    """Tests for export flows."""

    def test_export_json(self, flow, tmp_path, audit_storage):
        path = flow.export_json(Period.for_month(1, 2024), now=NOW)

        assert path == tmp_path / "exports" / "comptabilite_2024-04-02_143000.json"
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["beneficeNet"] == "70.00"
        assert len(data["operations"]) == 2

        assert event_types(audit_storage) == [AuditEventType.EXPORT_WRITTEN]
        assert audit_storage.events[0].details["operation_count"] == 2

    def test_export_report(self, flow, tmp_path):
        path = flow.export_report(Period.all_time(), now=NOW)
        assert path.suffix == ".txt"
        assert "Période: Historique complet" in path.read_text(encoding="utf-8")

    def test_export_failure_is_audited(self, tmp_path, mixed_operations, audit_storage):
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")
        flow = AccountingFlow(
            store=InMemoryOperationStore(mixed_operations),
            audit_logger=AuditLogger(storage=audit_storage),
            export_directory=blocker,
        )

        with pytest.raises(WriteError):
            flow.export_json(Period.all_time(), now=NOW)

        assert event_types(audit_storage) == [AuditEventType.EXPORT_FAILED]
        assert audit_storage.events[0].severity == AuditSeverity.ERROR


class TestImportFlow:
    """Tests for import flows."""

    def test_export_then_import_into_new_history(self, flow, tmp_path, mixed_operations):
        path = flow.export_json(Period.all_time(), now=NOW)

        target = AccountingFlow(store=InMemoryOperationStore())
        result = target.import_json(path)

        assert result.imported_count == 5
        assert result.duplicate_count == 0
        assert [op.id for op in target.ledger.all_operations()] == [op.id for op in mixed_operations]
        assert target.ledger.net_profit() == Decimal("54.50")

    def test_import_skips_known_operations(self, flow, tmp_path, op_a, op_c, audit_storage):
        path = flow.export_json(Period.for_year(2024), now=NOW)

        target = AccountingFlow(
            store=InMemoryOperationStore([op_a, op_c]),
            audit_logger=AuditLogger(storage=audit_storage),
        )
        result = target.import_json(path)

        assert result.imported_count == 2
        assert result.duplicate_count == 2
        assert result.message == "2 opération(s) importée(s)\n2 doublon(s) ignoré(s)"
        assert len(target.ledger.all_operations()) == 4
        assert event_types(audit_storage)[-1] == AuditEventType.IMPORT_COMPLETED

    def test_import_twice_is_idempotent(self, flow):
        path = flow.export_json(Period.all_time(), now=NOW)
        target = AccountingFlow(store=InMemoryOperationStore())

        target.import_json(path)
        second = target.import_json(path)

        assert second.imported_count == 0
        assert second.duplicate_count == 5
        assert len(target.ledger.all_operations()) == 5

    def test_malformed_file_changes_nothing(self, flow, tmp_path, audit_storage):
        path = tmp_path / "broken.json"
        path.write_text('{"operations": [', encoding="utf-8")

        with pytest.raises(ParseError):
            flow.import_json(path)

        assert len(flow.ledger.all_operations()) == 5
        assert event_types(audit_storage) == [AuditEventType.IMPORT_FAILED]
        assert audit_storage.events[0].error_code == "ParseError"

    def test_partially_valid_file_changes_nothing(self, flow, tmp_path):
        document = {
            "dateExport": "2024-04-02T14:30:00Z",
            "totalRevenus": 10.0,
            "totalDepenses": 0.0,
            "beneficeNet": 10.0,
            "operations": [
                {
                    "id": str(uuid4()),
                    "date": "2024-04-01T10:00:00Z",
                    "typeOperation": "Location (Revenu)",
                    "montant": 10.0,
                },
                {"id": str(uuid4()), "typeOperation": "Location (Revenu)"},
            ],
        }
        path = tmp_path / "partial.json"
        path.write_text(json.dumps(document), encoding="utf-8")

        with pytest.raises(ParseError):
            flow.import_json(path)
        assert len(flow.ledger.all_operations()) == 5

    def test_storage_failure_is_audited(self, flow, audit_storage):
        path = flow.export_json(Period.all_time(), now=NOW)
        target = AccountingFlow(store=FailingStore(), audit_logger=AuditLogger(storage=audit_storage))

        with pytest.raises(StorageError, match="disk full"):
            target.import_json(path)

        failure = audit_storage.events[-1]
        assert failure.event_type == AuditEventType.SYSTEM_ERROR
        assert failure.error_code == "StorageError"
        assert failure.details["accepted_count"] == 5
        assert AuditEventType.IMPORT_COMPLETED not in event_types(audit_storage)

    def test_missing_file(self, flow, tmp_path, audit_storage):
        with pytest.raises(AccessError):
            flow.import_json(tmp_path / "absent.json")
        assert audit_storage.events[0].error_code == "AccessError"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
