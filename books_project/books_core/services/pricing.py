import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from django.core.exceptions import ValidationError

from ..exceptions import EntryModeError, ReferenceNotFound
from ..models import Product
from ..money import ZERO, get_vat_rate, round_money, to_decimal, vat_divisor

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")
# matches SaleItem.quantity (max_digits=14, decimal_places=4)
QUANTITY_PLACES = 4
MAX_QUANTITY = Decimal("1E10")


@dataclass(frozen=True)
class Totals:
    sub_total: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    vat_amount: Decimal
    grand_total: Decimal

    def as_dict(self):
        return {
            "sub_total": self.sub_total,
            "discount_amount": self.discount_amount,
            "taxable_amount": self.taxable_amount,
            "vat_amount": self.vat_amount,
            "grand_total": self.grand_total,
        }


@dataclass(frozen=True)
class PricedItem:
    product_id: int
    name: str
    quantity: Decimal
    rate: Decimal
    amount: Decimal


@dataclass(frozen=True)
class PricingResult:
    totals: Totals
    items: List[PricedItem] = field(default_factory=list)


# ----------------------------------------------
# Input validation (runs before any computation)
# ----------------------------------------------
def finite_number(value, label) -> Decimal:
    try:
        number = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{label} must be a number.")
    # NaN, sNaN and Infinity parse but cannot be compared or rounded
    if not number.is_finite():
        raise ValidationError(f"{label} must be a number.")
    return number


def validate_discount(discount_percentage) -> Decimal:
    pct = finite_number(discount_percentage or 0, "Discount percentage")
    if pct < 0:
        raise ValidationError("Discount percentage must be at least 0%")
    if pct > 100:
        raise ValidationError("Discount percentage cannot exceed 100%")
    return pct


def positive_number(value, label) -> Decimal:
    number = finite_number(value, label)
    if number <= 0:
        raise ValidationError(f"{label} must be a positive number")
    return number


def validate_quantity(value) -> Decimal:
    """Quantities are stored with 4 decimal places; finer input is refused."""
    quantity = positive_number(value, "Quantity")
    if quantity.normalize().as_tuple().exponent < -QUANTITY_PLACES:
        raise ValidationError(
            f"Quantity cannot have more than {QUANTITY_PLACES} decimal places")
    if quantity >= MAX_QUANTITY:
        raise ValidationError("Quantity is too large")
    return quantity


def normalize_items(items):
    """Turn raw item dicts into (product_id, quantity) pairs."""
    pairs = []
    for raw in items:
        product_id = raw.get("product_id")
        if product_id in (None, ""):
            raise ValidationError("Product ID is required")
        pairs.append((product_id, validate_quantity(raw.get("quantity"))))
    return pairs


def check_entry_mode(items, direct_amount):
    """An invoice is either item based or a single direct entry."""
    has_items = bool(items)
    has_direct = direct_amount is not None
    if has_items == has_direct:
        raise EntryModeError(
            "Either add items or provide a direct entry, not both.")


# ----------------------------------------------
# Formulas
# ----------------------------------------------
def rate_excluding_vat(list_price, vat_rate) -> Decimal:
    return round_money(to_decimal(list_price) / vat_divisor(vat_rate))


def totals_from_sub_total(sub_total, discount_percentage, vat_rate) -> Totals:
    """Shared tail of every pricing path: discount, VAT, grand total."""
    sub_total = round_money(sub_total)
    discount_amount = round_money(
        sub_total * to_decimal(discount_percentage) / HUNDRED)
    taxable_amount = round_money(sub_total - discount_amount)
    vat_amount = round_money(taxable_amount * to_decimal(vat_rate))
    grand_total = round_money(taxable_amount + vat_amount)
    return Totals(
        sub_total=sub_total,
        discount_amount=discount_amount,
        taxable_amount=taxable_amount,
        vat_amount=vat_amount,
        grand_total=grand_total,
    )


def item_totals(priced_items, discount_percentage, vat_rate) -> Totals:
    sub_total = round_money(sum((i.amount for i in priced_items), ZERO))
    return totals_from_sub_total(sub_total, discount_percentage, vat_rate)


def direct_totals(direct_amount, discount_percentage, vat_rate) -> Totals:
    # VAT-inclusive amount back to VAT-exclusive, rounded before discount
    sub_total = round_money(to_decimal(direct_amount) / vat_divisor(vat_rate))
    return totals_from_sub_total(sub_total, discount_percentage, vat_rate)


def backsolve_grand_total(grand_total, vat_rate) -> Totals:
    """Derive totals from a final VAT-inclusive grand total (no discount)."""
    grand_total = round_money(grand_total)
    taxable_amount = round_money(grand_total / vat_divisor(vat_rate))
    vat_amount = round_money(grand_total - taxable_amount)
    return Totals(
        sub_total=taxable_amount,
        discount_amount=ZERO,
        taxable_amount=taxable_amount,
        vat_amount=vat_amount,
        grand_total=grand_total,
    )


# ----------------------------------------------
# Product lookup
# ----------------------------------------------
def resolve_products(company, product_ids):
    """Fetch every referenced product in one query.

    All ids must resolve before anything is priced; a single missing
    product aborts the whole invoice.
    """
    wanted = {str(pid) for pid in product_ids}
    # malformed ids can never match, so they are simply reported missing
    lookup = [pid for pid in wanted if pid.isdigit()]
    products = {
        str(p.pk): p
        for p in Product.objects.for_company(company).filter(pk__in=lookup)
    }
    missing = sorted(wanted - set(products))
    if missing:
        logger.warning(
            "Products not found for company %s: %s", company.pk, missing)
        raise ReferenceNotFound("Product", missing)
    return products


def price_items(company, items, vat_rate) -> List[PricedItem]:
    pairs = normalize_items(items)
    products = resolve_products(company, [pid for pid, _ in pairs])
    priced = []
    for product_id, quantity in pairs:
        product = products[str(product_id)]
        rate = rate_excluding_vat(product.mrp, vat_rate)
        priced.append(
            PricedItem(
                product_id=product.pk,
                name=product.name,
                quantity=quantity,
                rate=rate,
                amount=round_money(rate * quantity),
            )
        )
    return priced


def compute_invoice_totals(
    company,
    items=None,
    direct_amount=None,
    discount_percentage=0,
    vat_rate: Optional[Decimal] = None,
) -> PricingResult:
    """
    Price a sale invoice from either its items or one direct amount.

    items: list of {"product_id": ..., "quantity": ...}
    direct_amount: VAT-inclusive amount of a direct entry
    Raises ValidationError (bad input) or ReferenceNotFound (unknown product).
    """
    check_entry_mode(items, direct_amount)
    pct = validate_discount(discount_percentage)
    if vat_rate is None:
        vat_rate = get_vat_rate()

    if items:
        priced = price_items(company, items, vat_rate)
        return PricingResult(
            totals=item_totals(priced, pct, vat_rate), items=priced)

    amount = positive_number(direct_amount, "Amount")
    return PricingResult(totals=direct_totals(amount, pct, vat_rate))
