"""
Commercial Transaction Models

A commercial transaction is a purchase from a supplier or a sale to a
customer of a stocked article, priced excluding VAT (HT) with a French
VAT rate and an optional discount.

DESIGN DECISION: The discount applies to the VAT-inclusive (TTC) total.
Net HT and VAT are then derived back from the discounted TTC, so
net_ht + vat_amount == ttc always holds. Every intermediate amount is
rounded to the cent, half up.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from equipment_ledger.models.operation import Amount, quantize_amount, utc_now


DUE_SOON_DAYS = 3


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Purchase or sale."""
    ACHAT = "Achat"
    VENTE = "Vente"


class VatRate(str, Enum):
    """French VAT rates, stored as their percentage label."""
    TVA_0 = "0%"
    TVA_5_5 = "5.5%"
    TVA_10 = "10%"
    TVA_20 = "20%"

    @property
    def rate(self) -> Decimal:
        """Rate as a fraction, e.g. Decimal("0.20")."""
        return _VAT_RATES[self]


_VAT_RATES = {
    VatRate.TVA_0: Decimal("0"),
    VatRate.TVA_5_5: Decimal("0.055"),
    VatRate.TVA_10: Decimal("0.10"),
    VatRate.TVA_20: Decimal("0.20"),
}


class DiscountType(str, Enum):
    NONE = "Aucune"
    PERCENTAGE = "Pourcentage"
    FIXED_AMOUNT = "Montant fixe"


class PaymentMethod(str, Enum):
    CASH = "Espèces"
    CARD = "Carte bancaire"
    CHEQUE = "Chèque"
    TRANSFER = "Virement"
    OTHER = "Autre"


# =============================================================================
# TRANSACTION
# =============================================================================

class TransactionCommerce(BaseModel):
    """
    A purchase or sale of an article.

    Articles sold by weight use weight_kg instead of quantity; the unit
    price is then a price per kilogram. The article name is copied so the
    history survives the article being deleted.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
    )

    id: UUID = Field(default_factory=uuid4)
    transaction_type: TransactionType = Field(..., alias="typeTransaction")
    article_id: Optional[UUID] = Field(default=None, alias="articleId")
    article_name: str = Field(..., alias="nomArticle")

    quantity: int = Field(default=0, ge=0, alias="quantite")
    weight_kg: Decimal = Field(default=Decimal("0"), ge=0, alias="poids")
    sold_by_weight: bool = Field(default=False, alias="venteAuPoids")
    unit_price_ht: Amount = Field(..., alias="prixUnitaireHT")
    vat_rate: VatRate = Field(default=VatRate.TVA_20, alias="tauxTVA")

    discount_type: DiscountType = Field(default=DiscountType.NONE, alias="typeRemise")
    discount_value: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        alias="valeurRemise",
        description="Percentage or euro amount, depending on discount_type"
    )

    payment_method: PaymentMethod = Field(default=PaymentMethod.CASH, alias="modePaiement")
    counterparty: str = Field(
        default="",
        alias="clientFournisseur",
        description="Customer for a sale, supplier for a purchase"
    )
    date: AwareDatetime = Field(default_factory=utc_now, alias="dateTransaction")
    notes: str = ""
    is_paid: bool = Field(default=True, alias="estPaye")
    payment_due: Optional[AwareDatetime] = Field(
        default=None,
        alias="dateReglement",
        description="Expected settlement date of an unpaid transaction"
    )

    # -------------------------------------------------------------------------
    # Amounts
    # -------------------------------------------------------------------------

    @property
    def is_sale(self) -> bool:
        return self.transaction_type == TransactionType.VENTE

    @property
    def gross_ht(self) -> Decimal:
        """Price before discount, excluding VAT."""
        units = self.weight_kg if self.sold_by_weight else Decimal(self.quantity)
        return quantize_amount(self.unit_price_ht * units)

    @property
    def gross_vat(self) -> Decimal:
        return quantize_amount(self.gross_ht * self.vat_rate.rate)

    @property
    def gross_ttc(self) -> Decimal:
        return quantize_amount(self.gross_ht + self.gross_vat)

    @property
    def discount_amount(self) -> Decimal:
        """Discount taken off the TTC total; a fixed discount never exceeds it."""
        if self.discount_type == DiscountType.PERCENTAGE:
            return quantize_amount(self.gross_ttc * self.discount_value / 100)
        if self.discount_type == DiscountType.FIXED_AMOUNT:
            return quantize_amount(min(self.discount_value, self.gross_ttc))
        return Decimal("0.00")

    @property
    def ttc(self) -> Decimal:
        """Amount actually paid, VAT included."""
        return quantize_amount(self.gross_ttc - self.discount_amount)

    @property
    def net_ht(self) -> Decimal:
        return quantize_amount(self.ttc / (1 + self.vat_rate.rate))

    @property
    def vat_amount(self) -> Decimal:
        return quantize_amount(self.ttc - self.net_ht)

    # -------------------------------------------------------------------------
    # Payment
    # -------------------------------------------------------------------------

    def is_overdue(self, now: Optional[datetime] = None) -> bool:
        """Unpaid and past its settlement date."""
        if self.is_paid or self.payment_due is None:
            return False
        return (now or utc_now()) > self.payment_due

    def is_due_soon(self, now: Optional[datetime] = None) -> bool:
        """Unpaid and due within the next three days."""
        if self.is_paid or self.payment_due is None:
            return False
        now = now or utc_now()
        return now <= self.payment_due <= now + timedelta(days=DUE_SOON_DAYS)

    def days_until_payment(self, now: Optional[datetime] = None) -> Optional[int]:
        """Whole days left before the settlement date (negative when late)."""
        if self.is_paid or self.payment_due is None:
            return None
        return int((self.payment_due - (now or utc_now())) / timedelta(days=1))


# =============================================================================
# SUMMARY
# =============================================================================

class VatBreakdown(BaseModel):
    """VAT collected and deductible at one rate."""

    vat_rate: VatRate
    collected: Decimal
    deductible: Decimal

    @property
    def due(self) -> Decimal:
        return self.collected - self.deductible


class CommerceSummary(BaseModel):
    """Sales, purchases, VAT position and margins over a list of transactions."""

    sales_ht: Decimal
    sales_ttc: Decimal
    purchases_ht: Decimal
    purchases_ttc: Decimal
    vat_collected: Decimal
    vat_deductible: Decimal
    vat_due: Decimal
    margin_ht: Decimal
    margin_ttc: Decimal
    margin_percent: Decimal = Field(
        description="Margin HT over purchases HT, in percent (0 without purchases)"
    )
    total_discounts: Decimal
    transaction_count: int = Field(ge=0)
    unpaid: list[TransactionCommerce] = Field(default_factory=list)
    by_rate: list[VatBreakdown] = Field(default_factory=list)
