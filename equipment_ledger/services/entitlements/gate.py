"""
Premium Feature Gating

The free tier caps how many records of each kind a user may create.
Unlocking premium lifts every cap.

DESIGN DECISION: Whether premium is unlocked is answered by an injected
EntitlementOracle. There is no process-wide "store manager"; each
FeatureGate is built with the oracle and limits it should use.
The accounting ledger never consults the gate.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, Field

from equipment_ledger.config import EntitlementSettings
from equipment_ledger.models.audit import AuditEventBuilder

if TYPE_CHECKING:
    from equipment_ledger.audit import AuditLogger


class Feature(str, Enum):
    """Record kinds subject to a free-tier limit."""
    MATERIEL = "materiel"
    PRET = "pret"
    EMPRUNT = "emprunt"
    PERSONNE = "personne"
    LIEU = "lieu"
    COFFRE = "coffre"
    LOCATION = "location"
    REPARATION = "reparation"
    MA_LOCATION = "ma_location"


class EntitlementOracle(ABC):
    """Answers whether the user has unlocked premium."""

    @abstractmethod
    def is_premium_unlocked(self) -> bool:
        pass


class StaticEntitlementOracle(EntitlementOracle):
    """Oracle with a fixed answer, e.g. from configuration."""

    def __init__(self, premium_unlocked: bool = False):
        self._premium_unlocked = premium_unlocked

    def is_premium_unlocked(self) -> bool:
        return self._premium_unlocked


class FreeTierLimits(BaseModel):
    """Maximum number of records per feature while premium is locked."""

    materiel: int = Field(default=10, ge=0)
    pret: int = Field(default=10, ge=0)
    emprunt: int = Field(default=5, ge=0)
    personne: int = Field(default=5, ge=0)
    lieu: int = Field(default=5, ge=0)
    coffre: int = Field(default=5, ge=0)
    location: int = Field(default=5, ge=0)
    reparation: int = Field(default=5, ge=0)
    ma_location: int = Field(default=5, ge=0)

    @classmethod
    def from_settings(cls, settings: EntitlementSettings) -> 'FreeTierLimits':
        return cls(**{
            feature.value: getattr(settings, f"free_{feature.value}_limit")
            for feature in Feature
        })

    def limit_for(self, feature: Feature) -> int:
        return getattr(self, feature.value)


class PremiumLimitReachedError(Exception):
    """The free-tier limit for a feature is reached."""

    def __init__(self, feature: Feature, limit: int):
        self.feature = feature
        self.limit = limit
        super().__init__(
            f"Free limit of {limit} reached for {feature.value}; "
            "unlock premium to add more"
        )


class FeatureGate:
    """
    Applies free-tier limits unless premium is unlocked.

    Usage:
        gate = FeatureGate(oracle)
        gate.ensure_can_add(Feature.MATERIEL, current_count=len(items))
    """

    def __init__(
        self,
        oracle: EntitlementOracle,
        limits: Optional[FreeTierLimits] = None,
        audit_logger: Optional["AuditLogger"] = None,
    ):
        self._oracle = oracle
        self._limits = limits or FreeTierLimits()
        self._audit_logger = audit_logger

    @property
    def limits(self) -> FreeTierLimits:
        return self._limits

    def can_add(self, feature: Feature, current_count: int) -> bool:
        """True if one more record of this kind may be created."""
        if self._oracle.is_premium_unlocked():
            return True
        return current_count < self._limits.limit_for(feature)

    def remaining(self, feature: Feature, current_count: int) -> Optional[int]:
        """How many more records may be created; None when unlimited."""
        if self._oracle.is_premium_unlocked():
            return None
        return max(self._limits.limit_for(feature) - current_count, 0)

    def ensure_can_add(self, feature: Feature, current_count: int) -> None:
        """
        Raise PremiumLimitReachedError when the free limit is reached.
        """
        if self.can_add(feature, current_count):
            return

        limit = self._limits.limit_for(feature)
        if self._audit_logger:
            self._audit_logger.log(AuditEventBuilder.premium_limit_reached(
                feature=feature.value,
                limit=limit,
                current_count=current_count,
            ))
        raise PremiumLimitReachedError(feature, limit)
