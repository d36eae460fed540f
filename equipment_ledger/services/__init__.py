"""Services package."""

from equipment_ledger.services.entitlements import (
    EntitlementOracle,
    Feature,
    FeatureGate,
    FreeTierLimits,
    PremiumLimitReachedError,
    StaticEntitlementOracle,
)
from equipment_ledger.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryOperationStore,
    JsonFileOperationStore,
    NotFoundError,
    OperationStore,
    StorageError,
)

__all__ = [
    # Entitlements
    "EntitlementOracle",
    "Feature",
    "FeatureGate",
    "FreeTierLimits",
    "PremiumLimitReachedError",
    "StaticEntitlementOracle",
    # Storage services
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryAuditStorage",
    "InMemoryOperationStore",
    "JsonFileOperationStore",
    "NotFoundError",
    "OperationStore",
    "StorageError",
]
