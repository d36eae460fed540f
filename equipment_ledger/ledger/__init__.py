"""Accounting ledger package."""

from equipment_ledger.ledger.accounting import (
    AccountingLedger,
    group_by_day,
    merge_import,
    net_profit,
    summarize,
    total_expense,
    total_revenue,
)
from equipment_ledger.ledger.commerce import (
    CommercialLedger,
    summarize_commerce,
    vat_breakdown,
)
from equipment_ledger.ledger.periods import (
    calendar_day,
    distinct_years,
    month_bounds,
    period_bounds,
    within,
    year_bounds,
)

__all__ = [
    "AccountingLedger",
    "CommercialLedger",
    "calendar_day",
    "distinct_years",
    "group_by_day",
    "merge_import",
    "month_bounds",
    "net_profit",
    "period_bounds",
    "summarize",
    "summarize_commerce",
    "total_expense",
    "total_revenue",
    "vat_breakdown",
    "within",
    "year_bounds",
]
