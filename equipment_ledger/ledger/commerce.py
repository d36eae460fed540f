"""
Commercial Ledger

Sales, purchases and the VAT position of the shop side of the business.

Sales HT and TTC use the discounted amounts (net_ht, ttc). VAT collected
comes from sales and VAT deductible from purchases; the difference is
the VAT to pay back. Like AccountingLedger, this is read-only over its
store and evaluates calendar periods in its own timezone.
"""

from datetime import date, timezone, tzinfo
from decimal import Decimal
from typing import Iterable, Optional

from equipment_ledger.ledger.periods import distinct_years, period_bounds, within
from equipment_ledger.models.commerce import (
    CommerceSummary,
    TransactionCommerce,
    VatBreakdown,
    VatRate,
)
from equipment_ledger.models.export import Period
from equipment_ledger.models.operation import quantize_amount
from equipment_ledger.services.storage.interface import TransactionStore


ZERO = Decimal("0.00")


def _total(amounts: Iterable[Decimal]) -> Decimal:
    return sum(amounts, ZERO)


def vat_breakdown(transactions: Iterable[TransactionCommerce]) -> list[VatBreakdown]:
    """VAT collected and deductible per rate, for the rates actually used."""
    collected: dict[VatRate, Decimal] = {}
    deductible: dict[VatRate, Decimal] = {}
    for tx in transactions:
        side = collected if tx.is_sale else deductible
        side[tx.vat_rate] = side.get(tx.vat_rate, ZERO) + tx.vat_amount

    return [
        VatBreakdown(
            vat_rate=rate,
            collected=collected.get(rate, ZERO),
            deductible=deductible.get(rate, ZERO),
        )
        for rate in VatRate
        if rate in collected or rate in deductible
    ]


def summarize_commerce(transactions: Iterable[TransactionCommerce]) -> CommerceSummary:
    """Totals, VAT position and margins over a list of transactions."""
    txs = list(transactions)
    sales = [tx for tx in txs if tx.is_sale]
    purchases = [tx for tx in txs if not tx.is_sale]

    sales_ht = _total(tx.net_ht for tx in sales)
    sales_ttc = _total(tx.ttc for tx in sales)
    purchases_ht = _total(tx.net_ht for tx in purchases)
    purchases_ttc = _total(tx.ttc for tx in purchases)
    vat_collected = _total(tx.vat_amount for tx in sales)
    vat_deductible = _total(tx.vat_amount for tx in purchases)

    margin_ht = sales_ht - purchases_ht
    if purchases_ht > 0:
        margin_percent = quantize_amount(margin_ht / purchases_ht * 100)
    else:
        margin_percent = ZERO

    return CommerceSummary(
        sales_ht=sales_ht,
        sales_ttc=sales_ttc,
        purchases_ht=purchases_ht,
        purchases_ttc=purchases_ttc,
        vat_collected=vat_collected,
        vat_deductible=vat_deductible,
        vat_due=vat_collected - vat_deductible,
        margin_ht=margin_ht,
        margin_ttc=sales_ttc - purchases_ttc,
        margin_percent=margin_percent,
        total_discounts=_total(tx.discount_amount for tx in txs),
        transaction_count=len(txs),
        unpaid=[tx for tx in txs if not tx.is_paid],
        by_rate=vat_breakdown(txs),
    )


class CommercialLedger:
    """Period filtering and summaries over a transaction store."""

    def __init__(
        self,
        store: TransactionStore,
        tz: Optional[tzinfo] = None,
    ):
        self._store = store
        self._tz = tz or timezone.utc

    def all_transactions(self) -> list[TransactionCommerce]:
        return list(self._store.list_transactions())

    def transactions_for(self, period: Period) -> list[TransactionCommerce]:
        bounds = period_bounds(period, self._tz)
        return [tx for tx in self.all_transactions() if within(tx.date, bounds)]

    def available_years(self, today: Optional[date] = None) -> list[int]:
        """Distinct transaction years, newest first (current year when empty)."""
        return distinct_years((tx.date for tx in self.all_transactions()), self._tz, today)

    def summarize(self, period: Period) -> CommerceSummary:
        return summarize_commerce(self.transactions_for(period))
