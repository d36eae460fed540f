"""
Accounting Operation Models

An accounting operation is a single dated financial event: money received
for a rental, a deposit kept, a repair paid, and so on. Operations form a
permanent history; the ledger only reads, filters and aggregates them.

DESIGN DECISION: Field aliases match the keys of the portable export
document (typeOperation, montant, materielNom...). Python code uses the
snake_case names, the wire format uses the aliases.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Annotated, Optional
from uuid import UUID, uuid4

from pydantic import (
    AfterValidator,
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
)


CENT = Decimal("0.01")


def quantize_amount(value: Decimal) -> Decimal:
    """Normalize a monetary amount to two decimal places."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(value: Decimal) -> str:
    """Exact decimal text of an amount, e.g. "1234.50"."""
    return str(quantize_amount(value))


# Amounts are exact decimals in Python and decimal strings on the wire.
# Decoding also accepts JSON numbers.
Money = Annotated[
    Decimal,
    AfterValidator(quantize_amount),
    PlainSerializer(format_amount, return_type=str, when_used="json"),
]

# Non-negative amount (operation magnitudes and period totals).
Amount = Annotated[
    Decimal,
    Field(ge=0),
    AfterValidator(quantize_amount),
    PlainSerializer(format_amount, return_type=str, when_used="json"),
]


def utc_now() -> datetime:
    """Current instant as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class OperationType(str, Enum):
    """
    Kinds of accounting operations.

    Values are the labels stored in export documents. Each kind has a
    fixed polarity: revenue or expense.
    """
    LOCATION_REVENU = "Location (Revenu)"
    LOCATION_CAUTION = "Caution gardée"
    REPARATION_DEPENSE = "Réparation (Dépense)"
    MA_LOCATION_DEPENSE = "Je loue (Dépense)"
    MA_LOCATION_CAUTION_PERDUE = "Caution perdue"

    @property
    def is_revenue(self) -> bool:
        """True for revenue kinds, False for expense kinds."""
        return self in _REVENUE_TYPES

    @property
    def key(self) -> str:
        """Stable camelCase identifier of the kind."""
        return _TYPE_KEYS[self]

    @classmethod
    def _missing_(cls, value):
        # Documents may carry the identifier instead of the label
        if isinstance(value, str):
            for member, key in _TYPE_KEYS.items():
                if key == value:
                    return member
        return None


_REVENUE_TYPES = frozenset({
    OperationType.LOCATION_REVENU,
    OperationType.LOCATION_CAUTION,
})

_TYPE_KEYS = {
    OperationType.LOCATION_REVENU: "locationRevenu",
    OperationType.LOCATION_CAUTION: "locationCaution",
    OperationType.REPARATION_DEPENSE: "reparationDepense",
    OperationType.MA_LOCATION_DEPENSE: "maLocationDepense",
    OperationType.MA_LOCATION_CAUTION_PERDUE: "maLocationCautionPerdue",
}


# =============================================================================
# CORE OPERATION MODEL
# =============================================================================

class OperationComptable(BaseModel):
    """
    A single accounting operation.

    The amount is a magnitude; its sign comes from the operation type.
    Item and person names are denormalized display labels with no
    referential integrity.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
    )

    # Identity
    id: UUID = Field(
        default_factory=uuid4,
        description="Unique operation ID"
    )

    date: AwareDatetime = Field(
        default_factory=utc_now,
        description="When the operation happened"
    )
    operation_type: OperationType = Field(
        ...,
        alias="typeOperation",
        description="Kind of operation (fixes the polarity)"
    )
    amount: Amount = Field(
        ...,
        alias="montant",
        description="Non-negative amount"
    )
    description: str = Field(
        default="",
        description="Human-readable description"
    )

    # Optional display labels
    materiel_nom: Optional[str] = Field(
        default=None,
        alias="materielNom",
        description="Name of the equipment concerned"
    )
    personne_nom: Optional[str] = Field(
        default=None,
        alias="personneNom",
        description="Name of the person concerned"
    )
    reference_id: Optional[UUID] = Field(
        default=None,
        alias="referenceId",
        description="ID of the originating rental or repair"
    )

    @property
    def is_revenue(self) -> bool:
        return self.operation_type.is_revenue

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the sign of its polarity applied."""
        return self.amount if self.is_revenue else -self.amount


# =============================================================================
# BUILDERS
# =============================================================================

UNKNOWN_MATERIEL = "matériel inconnu"


class OperationBuilder:
    """
    Helper class to build operations from rental and repair events.

    Usage:
        op = OperationBuilder.rental_revenue(Decimal("50"), materiel_nom="Drill")
        op = OperationBuilder.repair_expense(final_cost, materiel_nom="Saw")

    Expense builders return None when there is nothing to record.
    """

    @staticmethod
    def rental_revenue(
        amount: Decimal,
        materiel_nom: Optional[str] = None,
        personne_nom: Optional[str] = None,
        reference_id: Optional[UUID] = None,
        when: Optional[datetime] = None,
    ) -> OperationComptable:
        return OperationComptable(
            date=when or utc_now(),
            operation_type=OperationType.LOCATION_REVENU,
            amount=amount,
            description=f"Location de {materiel_nom or UNKNOWN_MATERIEL}",
            materiel_nom=materiel_nom,
            personne_nom=personne_nom,
            reference_id=reference_id,
        )

    @staticmethod
    def kept_deposit(
        deposit: Decimal,
        kept_amount: Decimal = Decimal("0"),
        materiel_nom: Optional[str] = None,
        personne_nom: Optional[str] = None,
        reference_id: Optional[UUID] = None,
        when: Optional[datetime] = None,
    ) -> OperationComptable:
        """
        Record a deposit kept from a renter.

        A positive kept_amount records a partial retention, otherwise the
        whole deposit is kept.
        """
        amount = kept_amount if kept_amount > 0 else deposit
        label = materiel_nom or UNKNOWN_MATERIEL

        if amount < deposit:
            description = (
                f"Caution partielle gardée ({amount:.2f}€ sur {deposit:.2f}€)"
                f" - {label}"
            )
        else:
            description = f"Caution gardée - {label}"

        return OperationComptable(
            date=when or utc_now(),
            operation_type=OperationType.LOCATION_CAUTION,
            amount=amount,
            description=description,
            materiel_nom=materiel_nom,
            personne_nom=personne_nom,
            reference_id=reference_id,
        )

    @staticmethod
    def repair_expense(
        final_cost: Optional[Decimal],
        materiel_nom: Optional[str] = None,
        personne_nom: Optional[str] = None,
        reference_id: Optional[UUID] = None,
        when: Optional[datetime] = None,
    ) -> Optional[OperationComptable]:
        """Record the real cost of a repair, only once it is known."""
        if final_cost is None or final_cost <= 0:
            return None

        return OperationComptable(
            date=when or utc_now(),
            operation_type=OperationType.REPARATION_DEPENSE,
            amount=final_cost,
            description=f"Réparation de {materiel_nom or UNKNOWN_MATERIEL}",
            materiel_nom=materiel_nom,
            personne_nom=personne_nom,
            reference_id=reference_id,
        )

    @staticmethod
    def my_rental_expense(
        total: Decimal,
        object_name: str,
        lender_name: str,
        reference_id: Optional[UUID] = None,
        when: Optional[datetime] = None,
    ) -> Optional[OperationComptable]:
        if total <= 0:
            return None

        return OperationComptable(
            date=when or utc_now(),
            operation_type=OperationType.MA_LOCATION_DEPENSE,
            amount=total,
            description=f"Location de {object_name} auprès de {lender_name}",
            materiel_nom=object_name,
            personne_nom=lender_name,
            reference_id=reference_id,
        )

    @staticmethod
    def lost_deposit(
        amount: Decimal,
        deposit: Decimal,
        object_name: str,
        lender_name: str,
        reference_id: Optional[UUID] = None,
        when: Optional[datetime] = None,
    ) -> Optional[OperationComptable]:
        """Record (part of) a deposit withheld by a lender."""
        if amount <= 0:
            return None

        if amount < deposit:
            description = (
                f"Caution partielle perdue ({amount:.2f}€ sur {deposit:.2f}€)"
                f" - {object_name}"
            )
        else:
            description = f"Caution perdue - {object_name}"

        return OperationComptable(
            date=when or utc_now(),
            operation_type=OperationType.MA_LOCATION_CAUTION_PERDUE,
            amount=amount,
            description=description,
            materiel_nom=object_name,
            personne_nom=lender_name,
            reference_id=reference_id,
        )
