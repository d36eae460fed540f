"""
Audit Models for Equipment Ledger

Every change to the accounting history and every export or import is
logged for audit purposes. This provides:
1. Traceability of imported and deleted operations
2. Debugging information when an export or import fails
3. A record of premium limit refusals

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from equipment_ledger.models.operation import OperationComptable, utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Operation history
    OPERATION_RECORDED = "operation_recorded"
    OPERATION_REMOVED = "operation_removed"

    # Export
    EXPORT_WRITTEN = "export_written"
    EXPORT_FAILED = "export_failed"

    # Import
    IMPORT_COMPLETED = "import_completed"
    IMPORT_FAILED = "import_failed"

    # Premium gating
    PREMIUM_LIMIT_REACHED = "premium_limit_reached"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'operation', 'export')"
    )
    entity_id: Optional[UUID] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one import)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.operation_recorded(operation)
        event = AuditEventBuilder.import_completed(path, 3, 1, correlation_id)
    """

    @staticmethod
    def operation_recorded(
        operation: OperationComptable,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_RECORDED,
            entity_type="operation",
            entity_id=operation.id,
            correlation_id=correlation_id,
            description=(
                f"Operation recorded: {operation.operation_type.key}"
                f" {operation.amount:.2f}"
            ),
            details={
                "operation_type": operation.operation_type.key,
                "amount": str(operation.amount),
                "date": operation.date.isoformat(),
            },
        )

    @staticmethod
    def operation_removed(
        operation_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.OPERATION_REMOVED,
            entity_type="operation",
            entity_id=operation_id,
            correlation_id=correlation_id,
            description="Operation removed from history",
            is_user_action=True,
        )

    @staticmethod
    def export_written(
        path: Path,
        file_format: str,
        operation_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_WRITTEN,
            entity_type="export",
            correlation_id=correlation_id,
            description=f"{file_format.upper()} export written with {operation_count} operations",
            details={
                "path": str(path),
                "format": file_format,
                "operation_count": operation_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def export_failed(
        file_format: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPORT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="export",
            correlation_id=correlation_id,
            description=f"{file_format.upper()} export failed",
            error_message=error_message,
            details={"format": file_format},
        )

    @staticmethod
    def import_completed(
        path: Path,
        imported_count: int,
        duplicate_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_COMPLETED,
            entity_type="import",
            correlation_id=correlation_id,
            description=(
                f"Import completed: {imported_count} imported,"
                f" {duplicate_count} duplicates skipped"
            ),
            details={
                "path": str(path),
                "imported_count": imported_count,
                "duplicate_count": duplicate_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def import_failed(
        path: Path,
        error_code: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="import",
            correlation_id=correlation_id,
            description=f"Import failed: {error_code}",
            error_code=error_code,
            error_message=error_message,
            details={"path": str(path)},
        )

    @staticmethod
    def premium_limit_reached(
        feature: str,
        limit: int,
        current_count: int,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PREMIUM_LIMIT_REACHED,
            severity=AuditSeverity.WARNING,
            entity_type="entitlement",
            description=f"Free limit reached for {feature} ({current_count}/{limit})",
            details={
                "feature": feature,
                "limit": limit,
                "current_count": current_count,
            },
            is_user_action=True,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_code=error_type,
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
