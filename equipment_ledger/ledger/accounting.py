"""
Accounting Ledger

DESIGN DECISION: The ledger is a pure read-side component.
It filters, aggregates and snapshots the operations it is given and
never writes to the store. Merging an import only *decides* which
operations are new; persisting them is the caller's job.

GUARANTEES:
- net_profit(ops) == total_revenue(ops) - total_expense(ops), exactly
  (Decimal arithmetic, no floats)
- merge_import never accepts an id twice, whether the duplicate is
  already stored or appears earlier in the same document
- Filtering and export never reorder operations
"""

from datetime import date, datetime, timezone, tzinfo
from decimal import Decimal
from typing import Iterable, Optional

from equipment_ledger.ledger.periods import (
    calendar_day,
    distinct_years,
    month_bounds,
    period_bounds,
    within,
    year_bounds,
)
from equipment_ledger.models.export import (
    ComptabiliteExport,
    DayGroup,
    ImportResult,
    Period,
    PeriodSummary,
)
from equipment_ledger.models.operation import (
    OperationComptable,
    OperationType,
    utc_now,
)
from equipment_ledger.services.storage.interface import OperationStore


ZERO = Decimal("0.00")


# =============================================================================
# AGGREGATION
# =============================================================================

def total_revenue(operations: Iterable[OperationComptable]) -> Decimal:
    """Sum of amounts over revenue operations."""
    return sum((op.amount for op in operations if op.is_revenue), ZERO)


def total_expense(operations: Iterable[OperationComptable]) -> Decimal:
    """Sum of amounts over expense operations."""
    return sum((op.amount for op in operations if not op.is_revenue), ZERO)


def net_profit(operations: Iterable[OperationComptable]) -> Decimal:
    """Revenue minus expense."""
    ops = list(operations)
    return total_revenue(ops) - total_expense(ops)


def summarize(operations: Iterable[OperationComptable]) -> PeriodSummary:
    """Totals plus a per-kind breakdown."""
    ops = list(operations)

    by_type: dict[OperationType, Decimal] = {}
    for op in ops:
        by_type[op.operation_type] = by_type.get(op.operation_type, ZERO) + op.amount

    return PeriodSummary(
        total_revenue=total_revenue(ops),
        total_expense=total_expense(ops),
        net_profit=net_profit(ops),
        operation_count=len(ops),
        by_type=by_type,
    )


def group_by_day(
    operations: Iterable[OperationComptable],
    tz: tzinfo,
) -> list[DayGroup]:
    """
    Partition operations by calendar day.

    Groups are ordered by the date of their most recent member, newest
    first. Inside a group the input order is kept.
    """
    groups: dict[date, list[OperationComptable]] = {}
    for op in operations:
        groups.setdefault(calendar_day(op.date, tz), []).append(op)

    return sorted(
        (DayGroup(day=day, operations=ops) for day, ops in groups.items()),
        key=lambda group: group.latest,
        reverse=True,
    )


# =============================================================================
# IMPORT / MERGE
# =============================================================================

def merge_import(
    export: ComptabiliteExport,
    existing_operations: Iterable[OperationComptable],
) -> ImportResult:
    """
    Decide which operations of an export are new.

    An operation is a duplicate when its id is already in
    existing_operations or was accepted earlier in the same export.
    The export's totals are ignored.
    """
    seen = {op.id for op in existing_operations}
    accepted = []
    duplicate_count = 0

    for op in export.operations:
        if op.id in seen:
            duplicate_count += 1
            continue
        seen.add(op.id)
        accepted.append(op)

    return ImportResult(accepted=accepted, duplicate_count=duplicate_count)


# =============================================================================
# LEDGER
# =============================================================================

class AccountingLedger:
    """
    Period filtering, totals and export snapshots over an operation store.

    The store is only read through list_operations(). Calendar months,
    years and days are evaluated in the ledger's timezone.
    """

    def __init__(
        self,
        store: OperationStore,
        tz: Optional[tzinfo] = None,
    ):
        self._store = store
        self._tz = tz or timezone.utc

    @property
    def tz(self) -> tzinfo:
        return self._tz

    # -------------------------------------------------------------------------
    # Filtering
    # -------------------------------------------------------------------------

    def all_operations(self) -> list[OperationComptable]:
        """Every operation, in store order."""
        return list(self._store.list_operations())

    def operations_for_month(self, month: int, year: int) -> list[OperationComptable]:
        bounds = month_bounds(year, month, self._tz)
        return [op for op in self.all_operations() if within(op.date, bounds)]

    def operations_for_year(self, year: int) -> list[OperationComptable]:
        bounds = year_bounds(year, self._tz)
        return [op for op in self.all_operations() if within(op.date, bounds)]

    def operations_for(self, period: Period) -> list[OperationComptable]:
        bounds = period_bounds(period, self._tz)
        return [op for op in self.all_operations() if within(op.date, bounds)]

    def available_years(self, today: Optional[date] = None) -> list[int]:
        """
        Distinct years present in the history, newest first.

        Falls back to the current year when the history is empty so that
        year pickers are never blank.
        """
        return distinct_years((op.date for op in self.all_operations()), self._tz, today)

    def available_months(self, year: int) -> list[int]:
        """Distinct months of the given year present in the history, newest first."""
        months = set()
        for op in self.all_operations():
            day = calendar_day(op.date, self._tz)
            if day.year == year:
                months.add(day.month)
        return sorted(months, reverse=True)

    # -------------------------------------------------------------------------
    # Aggregation
    # -------------------------------------------------------------------------

    def total_revenue(self, operations: Optional[Iterable[OperationComptable]] = None) -> Decimal:
        return total_revenue(self._or_all(operations))

    def total_expense(self, operations: Optional[Iterable[OperationComptable]] = None) -> Decimal:
        return total_expense(self._or_all(operations))

    def net_profit(self, operations: Optional[Iterable[OperationComptable]] = None) -> Decimal:
        return net_profit(self._or_all(operations))

    def summarize(self, operations: Optional[Iterable[OperationComptable]] = None) -> PeriodSummary:
        return summarize(self._or_all(operations))

    def group_by_day(self, operations: Optional[Iterable[OperationComptable]] = None) -> list[DayGroup]:
        return group_by_day(self._or_all(operations), self._tz)

    # -------------------------------------------------------------------------
    # Export / import
    # -------------------------------------------------------------------------

    def build_export(
        self,
        period: Period,
        operations: Optional[Iterable[OperationComptable]] = None,
        exported_at: Optional[datetime] = None,
    ) -> ComptabiliteExport:
        """
        Snapshot a list of operations for a period.

        When operations is None the period filter is applied to the store.
        The given order is kept as is.
        """
        ops = list(operations) if operations is not None else self.operations_for(period)
        bounds = period_bounds(period, self._tz)
        start, end = bounds if bounds else (None, None)

        return ComptabiliteExport(
            date_export=exported_at or utc_now(),
            periode_debut=start,
            periode_fin=end,
            total_revenus=total_revenue(ops),
            total_depenses=total_expense(ops),
            benefice_net=net_profit(ops),
            operations=ops,
        )

    def merge_import(
        self,
        export: ComptabiliteExport,
        existing_operations: Optional[Iterable[OperationComptable]] = None,
    ) -> ImportResult:
        """Merge an export against the given operations (default: the store)."""
        return merge_import(export, self._or_all(existing_operations))

    def _or_all(
        self,
        operations: Optional[Iterable[OperationComptable]],
    ) -> list[OperationComptable]:
        if operations is None:
            return self.all_operations()
        return list(operations)
