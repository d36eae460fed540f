"""
Data Models Package

This package contains all Pydantic models used in the Equipment Ledger.
All data flowing through the ledger must conform to these schemas.
"""

from equipment_ledger.models.operation import (
    Amount,
    Money,
    OperationBuilder,
    OperationComptable,
    OperationType,
    quantize_amount,
    utc_now,
)
from equipment_ledger.models.export import (
    ComptabiliteExport,
    DayGroup,
    ImportResult,
    Period,
    PeriodKind,
    PeriodSummary,
)
from equipment_ledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)
from equipment_ledger.models.commerce import (
    CommerceSummary,
    DiscountType,
    PaymentMethod,
    TransactionCommerce,
    TransactionType,
    VatBreakdown,
    VatRate,
)

__all__ = [
    # Operation models
    "Amount",
    "Money",
    "OperationBuilder",
    "OperationComptable",
    "OperationType",
    "quantize_amount",
    "utc_now",
    # Export models
    "ComptabiliteExport",
    "DayGroup",
    "ImportResult",
    "Period",
    "PeriodKind",
    "PeriodSummary",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
    # Commerce models
    "CommerceSummary",
    "DiscountType",
    "PaymentMethod",
    "TransactionCommerce",
    "TransactionType",
    "VatBreakdown",
    "VatRate",
]
