"""
Export, Period and Reporting Models

ComptabiliteExport is the portable snapshot written to and read from
export files. Its aliases are the on-disk keys; they must not change.

CRITICAL: The totals inside an export are informational only.
An import never trusts them; callers recompute from the operations.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    AwareDatetime,
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)

from equipment_ledger.models.operation import (
    Amount,
    Money,
    OperationComptable,
    OperationType,
    utc_now,
)


class PeriodKind(str, Enum):
    """Granularity of a reporting period."""
    MONTH = "month"
    YEAR = "year"
    TOTAL = "total"


class Period(BaseModel):
    """
    A reporting period: one calendar month, one calendar year, or the
    whole history.
    """
    model_config = ConfigDict(frozen=True)

    kind: PeriodKind
    year: Optional[int] = Field(default=None, ge=1, le=9999)
    month: Optional[int] = Field(default=None, ge=1, le=12)

    @model_validator(mode='after')
    def validate_components(self) -> 'Period':
        """Each kind needs exactly the calendar components it filters on."""
        if self.kind == PeriodKind.MONTH:
            if self.year is None or self.month is None:
                raise ValueError("A month period needs both year and month")
        elif self.kind == PeriodKind.YEAR:
            if self.year is None:
                raise ValueError("A year period needs a year")
            if self.month is not None:
                raise ValueError("A year period cannot have a month")
        elif self.year is not None or self.month is not None:
            raise ValueError("A total period has no year or month")
        return self

    @classmethod
    def for_month(cls, month: int, year: int) -> 'Period':
        return cls(kind=PeriodKind.MONTH, year=year, month=month)

    @classmethod
    def for_year(cls, year: int) -> 'Period':
        return cls(kind=PeriodKind.YEAR, year=year)

    @classmethod
    def all_time(cls) -> 'Period':
        return cls(kind=PeriodKind.TOTAL)


class ComptabiliteExport(BaseModel):
    """
    Portable accounting snapshot.

    periode_debut/periode_fin are inclusive bounds; both are absent for
    a whole-history export.
    """
    model_config = ConfigDict(populate_by_name=True)

    date_export: AwareDatetime = Field(
        default_factory=utc_now,
        alias="dateExport",
        description="When the snapshot was produced"
    )
    periode_debut: Optional[AwareDatetime] = Field(
        default=None,
        alias="periodeDebut",
        description="First instant of the exported period"
    )
    periode_fin: Optional[AwareDatetime] = Field(
        default=None,
        alias="periodeFin",
        description="Last instant of the exported period"
    )

    # Aggregates at export time (never re-validated)
    total_revenus: Amount = Field(..., alias="totalRevenus")
    total_depenses: Amount = Field(..., alias="totalDepenses")
    benefice_net: Money = Field(..., alias="beneficeNet")

    operations: list[OperationComptable] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_period(self) -> 'ComptabiliteExport':
        if self.periode_debut and self.periode_fin:
            if self.periode_fin < self.periode_debut:
                raise ValueError("Period end cannot be before period start")
        return self


class ImportResult(BaseModel):
    """
    Outcome of merging an export into an existing collection.

    accepted keeps the order of the imported document; the caller is
    responsible for persisting those operations.
    """

    accepted: list[OperationComptable] = Field(default_factory=list)
    duplicate_count: int = Field(default=0, ge=0)

    @property
    def imported_count(self) -> int:
        return len(self.accepted)

    @property
    def message(self) -> str:
        """Summary shown to the user after an import."""
        text = f"{self.imported_count} opération(s) importée(s)"
        if self.duplicate_count > 0:
            text += f"\n{self.duplicate_count} doublon(s) ignoré(s)"
        return text


class DayGroup(BaseModel):
    """Operations sharing the same calendar day."""

    day: date
    operations: list[OperationComptable] = Field(default_factory=list)

    @property
    def latest(self) -> datetime:
        return max(op.date for op in self.operations)


class PeriodSummary(BaseModel):
    """Totals and per-kind breakdown of a list of operations."""

    total_revenue: Decimal
    total_expense: Decimal
    net_profit: Decimal
    operation_count: int = Field(ge=0)
    by_type: dict[OperationType, Decimal] = Field(default_factory=dict)
