"""Premium entitlement package."""

from equipment_ledger.services.entitlements.gate import (
    EntitlementOracle,
    Feature,
    FeatureGate,
    FreeTierLimits,
    PremiumLimitReachedError,
    StaticEntitlementOracle,
)

__all__ = [
    "EntitlementOracle",
    "Feature",
    "FeatureGate",
    "FreeTierLimits",
    "PremiumLimitReachedError",
    "StaticEntitlementOracle",
]
