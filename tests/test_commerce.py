"""
Tests for commercial transactions: pricing with VAT and discounts,
payment deadlines, and the sales / purchases / VAT summary.
"""

import pytest
from datetime import date, timedelta, timezone
from decimal import Decimal
from uuid import uuid4

from conftest import utc
from equipment_ledger.ledger import CommercialLedger, summarize_commerce, vat_breakdown
from equipment_ledger.models.commerce import (
    DiscountType,
    PaymentMethod,
    TransactionCommerce,
    TransactionType,
    VatRate,
)
from equipment_ledger.models.export import Period
from equipment_ledger.services.storage import (
    DuplicateError,
    InMemoryTransactionStore,
    NotFoundError,
)


NOW = utc(2024, 6, 10, 12, 0)
PLUS_ONE = timezone(timedelta(hours=1))


def make_tx(
    transaction_type: TransactionType,
    price: str,
    quantity: int = 1,
    vat_rate: VatRate = VatRate.TVA_20,
    **kwargs,
) -> TransactionCommerce:
    kwargs.setdefault("date", NOW)
    return TransactionCommerce(
        transaction_type=transaction_type,
        article_name=kwargs.pop("article_name", "Article"),
        quantity=quantity,
        unit_price_ht=Decimal(price),
        vat_rate=vat_rate,
        **kwargs,
    )


@pytest.fixture
def discounted_sale():
    return make_tx(
        TransactionType.VENTE, "10.00", quantity=2,
        discount_type=DiscountType.PERCENTAGE, discount_value=Decimal("10"),
    )


@pytest.fixture
def reduced_rate_sale():
    return make_tx(TransactionType.VENTE, "100.00", vat_rate=VatRate.TVA_5_5)


@pytest.fixture
def stock_purchase():
    return make_tx(TransactionType.ACHAT, "6.00", quantity=10)


@pytest.fixture
def unpaid_purchase():
    return make_tx(
        TransactionType.ACHAT, "5.00",
        discount_type=DiscountType.FIXED_AMOUNT, discount_value=Decimal("1"),
        is_paid=False, payment_due=NOW + timedelta(days=30),
    )


@pytest.fixture
def shop_transactions(discounted_sale, reduced_rate_sale, stock_purchase, unpaid_purchase):
    return [discounted_sale, reduced_rate_sale, stock_purchase, unpaid_purchase]


class TestVatRate:
    def test_rates(self):
        assert VatRate.TVA_0.rate == Decimal("0")
        assert VatRate.TVA_5_5.rate == Decimal("0.055")
        assert VatRate.TVA_10.rate == Decimal("0.10")
        assert VatRate.TVA_20.rate == Decimal("0.20")

    def test_stored_as_label(self):
        assert VatRate("5.5%") == VatRate.TVA_5_5


class TestTransactionPricing:
    """Tests for HT / VAT / TTC amounts."""

    def test_percentage_discount_on_ttc(self, discounted_sale):
        assert discounted_sale.gross_ht == Decimal("20.00")
        assert discounted_sale.gross_vat == Decimal("4.00")
        assert discounted_sale.gross_ttc == Decimal("24.00")
        assert discounted_sale.discount_amount == Decimal("2.40")
        assert discounted_sale.ttc == Decimal("21.60")
        assert discounted_sale.net_ht == Decimal("18.00")
        assert discounted_sale.vat_amount == Decimal("3.60")

    def test_no_discount(self, stock_purchase):
        assert stock_purchase.discount_amount == Decimal("0.00")
        assert stock_purchase.ttc == Decimal("72.00")
        assert stock_purchase.net_ht == Decimal("60.00")

    def test_fixed_discount_capped_at_ttc(self):
        tx = make_tx(
            TransactionType.VENTE, "10.00", vat_rate=VatRate.TVA_5_5,
            discount_type=DiscountType.FIXED_AMOUNT, discount_value=Decimal("50"),
        )
        assert tx.gross_ttc == Decimal("10.55")
        assert tx.discount_amount == Decimal("10.55")
        assert tx.ttc == Decimal("0.00")
        assert tx.net_ht == Decimal("0.00")
        assert tx.vat_amount == Decimal("0.00")

    def test_net_ht_derived_from_discounted_ttc(self, unpaid_purchase):
        assert unpaid_purchase.ttc == Decimal("5.00")
        assert unpaid_purchase.net_ht == Decimal("4.17")
        assert unpaid_purchase.vat_amount == Decimal("0.83")

    def test_sold_by_weight(self):
        """The unit price is per kilogram and the quantity is ignored."""
        tx = make_tx(
            TransactionType.VENTE, "8.00", quantity=0, vat_rate=VatRate.TVA_5_5,
            sold_by_weight=True, weight_kg=Decimal("1.250"),
        )
        assert tx.gross_ht == Decimal("10.00")
        assert tx.ttc == Decimal("10.55")
        assert tx.net_ht == Decimal("10.00")
        assert tx.vat_amount == Decimal("0.55")

    def test_cents_round_half_up(self):
        tx = make_tx(TransactionType.VENTE, "0.05", vat_rate=VatRate.TVA_10)
        assert tx.gross_vat == Decimal("0.01")
        assert tx.ttc == Decimal("0.06")

    def test_parts_add_up_to_ttc(self, shop_transactions):
        for tx in shop_transactions:
            assert tx.net_ht + tx.vat_amount == tx.ttc

    def test_decode_wire_names(self):
        tx = TransactionCommerce.model_validate({
            "id": str(uuid4()),
            "typeTransaction": "Vente",
            "nomArticle": "Sac de ciment",
            "quantite": 3,
            "prixUnitaireHT": 7.5,
            "tauxTVA": "10%",
            "typeRemise": "Aucune",
            "valeurRemise": 0,
            "modePaiement": "Carte bancaire",
            "clientFournisseur": "Mme Martin",
            "dateTransaction": "2024-06-10T12:00:00+02:00",
            "notes": "",
            "estPaye": True,
        })
        assert tx.is_sale
        assert tx.payment_method == PaymentMethod.CARD
        assert tx.vat_rate == VatRate.TVA_10
        assert tx.ttc == Decimal("24.75")

    def test_rejects_negative_price(self):
        with pytest.raises(ValueError):
            make_tx(TransactionType.VENTE, "-1")

    def test_rejects_naive_date(self):
        with pytest.raises(ValueError):
            make_tx(TransactionType.VENTE, "1", date=NOW.replace(tzinfo=None))


class TestPaymentDeadline:
    """Tests for unpaid transactions and their settlement date."""

    def test_due_soon(self):
        tx = make_tx(TransactionType.VENTE, "1", is_paid=False, payment_due=NOW + timedelta(days=2))
        assert tx.is_due_soon(NOW)
        assert not tx.is_overdue(NOW)
        assert tx.days_until_payment(NOW) == 2

    def test_not_yet_due_soon(self):
        tx = make_tx(TransactionType.VENTE, "1", is_paid=False, payment_due=NOW + timedelta(days=5))
        assert not tx.is_due_soon(NOW)
        assert tx.days_until_payment(NOW) == 5

    def test_overdue(self):
        tx = make_tx(TransactionType.VENTE, "1", is_paid=False, payment_due=NOW - timedelta(days=1))
        assert tx.is_overdue(NOW)
        assert not tx.is_due_soon(NOW)
        assert tx.days_until_payment(NOW) == -1

    def test_paid_has_no_deadline(self):
        tx = make_tx(TransactionType.VENTE, "1", payment_due=NOW - timedelta(days=1))
        assert not tx.is_overdue(NOW)
        assert not tx.is_due_soon(NOW)
        assert tx.days_until_payment(NOW) is None

    def test_unpaid_without_date(self):
        tx = make_tx(TransactionType.VENTE, "1", is_paid=False)
        assert not tx.is_overdue(NOW)
        assert tx.days_until_payment(NOW) is None


class TestCommerceSummary:
    """Tests for sales, purchases, VAT and margins."""

    def test_totals(self, shop_transactions):
        summary = summarize_commerce(shop_transactions)
        assert summary.sales_ht == Decimal("118.00")
        assert summary.sales_ttc == Decimal("127.10")
        assert summary.purchases_ht == Decimal("64.17")
        assert summary.purchases_ttc == Decimal("77.00")
        assert summary.transaction_count == 4

    def test_vat_position(self, shop_transactions):
        summary = summarize_commerce(shop_transactions)
        assert summary.vat_collected == Decimal("9.10")
        assert summary.vat_deductible == Decimal("12.83")
        assert summary.vat_due == Decimal("-3.73")

    def test_margins(self, shop_transactions):
        summary = summarize_commerce(shop_transactions)
        assert summary.margin_ht == Decimal("53.83")
        assert summary.margin_ttc == Decimal("50.10")
        assert summary.margin_percent == Decimal("83.89")
        assert summary.total_discounts == Decimal("3.40")

    def test_no_purchases_means_no_margin_percent(self, discounted_sale):
        summary = summarize_commerce([discounted_sale])
        assert summary.margin_ht == Decimal("18.00")
        assert summary.margin_percent == Decimal("0.00")

    def test_unpaid(self, shop_transactions, unpaid_purchase):
        assert summarize_commerce(shop_transactions).unpaid == [unpaid_purchase]

    def test_breakdown_by_rate(self, shop_transactions):
        rows = vat_breakdown(shop_transactions)
        assert [row.vat_rate for row in rows] == [VatRate.TVA_5_5, VatRate.TVA_20]
        assert rows[0].collected == Decimal("5.50")
        assert rows[0].deductible == Decimal("0.00")
        assert rows[1].collected == Decimal("3.60")
        assert rows[1].deductible == Decimal("12.83")
        assert rows[1].due == Decimal("-9.23")

    def test_empty(self):
        summary = summarize_commerce([])
        assert summary.vat_due == Decimal("0.00")
        assert summary.by_rate == []
        assert summary.unpaid == []


class TestCommercialLedger:
    """Tests for period filtering over a transaction store."""

    def test_month_and_year(self, discounted_sale, stock_purchase):
        january = make_tx(TransactionType.VENTE, "50.00", date=utc(2024, 1, 5, 9, 0))
        last_year = make_tx(TransactionType.VENTE, "50.00", date=utc(2023, 6, 5, 9, 0))
        ledger = CommercialLedger(InMemoryTransactionStore(
            [discounted_sale, january, stock_purchase, last_year]
        ))

        assert ledger.transactions_for(Period.for_month(6, 2024)) == [discounted_sale, stock_purchase]
        assert ledger.transactions_for(Period.for_year(2024)) == [discounted_sale, january, stock_purchase]
        assert len(ledger.transactions_for(Period.all_time())) == 4
        assert ledger.summarize(Period.for_month(1, 2024)).sales_ttc == Decimal("60.00")

    def test_months_follow_ledger_timezone(self):
        """23:30 UTC on 31 January is already February at UTC+1."""
        tx = make_tx(TransactionType.VENTE, "1", date=utc(2024, 1, 31, 23, 30))
        ledger = CommercialLedger(InMemoryTransactionStore([tx]), tz=PLUS_ONE)
        assert ledger.transactions_for(Period.for_month(1, 2024)) == []
        assert ledger.transactions_for(Period.for_month(2, 2024)) == [tx]

    def test_available_years(self):
        txs = [
            make_tx(TransactionType.VENTE, "1", date=utc(2023, 3, 1)),
            make_tx(TransactionType.ACHAT, "1", date=utc(2024, 3, 1)),
            make_tx(TransactionType.VENTE, "1", date=utc(2023, 9, 1)),
        ]
        ledger = CommercialLedger(InMemoryTransactionStore(txs))
        assert ledger.available_years() == [2024, 2023]

    def test_available_years_when_empty(self):
        ledger = CommercialLedger(InMemoryTransactionStore())
        assert ledger.available_years(today=date(2025, 3, 1)) == [2025]


class TestInMemoryTransactionStore:
    def test_duplicate_rejected(self, discounted_sale):
        store = InMemoryTransactionStore([discounted_sale])
        with pytest.raises(DuplicateError):
            store.add_transaction(discounted_sale)

    def test_remove(self, discounted_sale, stock_purchase):
        store = InMemoryTransactionStore([discounted_sale, stock_purchase])
        store.remove_transaction(discounted_sale.id)
        assert store.list_transactions() == [stock_purchase]
        with pytest.raises(NotFoundError):
            store.remove_transaction(discounted_sale.id)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
