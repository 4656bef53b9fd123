import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Optional

from django.core.exceptions import ValidationError
from django.db import transaction

from ..exceptions import EntryModeError, ReferenceNotFound
from ..models import Party, Sale, SaleItem
from ..models.sale import validate_bill_photos
from ..money import ZERO, get_vat_rate, round_money, to_decimal
from .dates import coerce_date
from .edit_history import (EditLogEntry, SaleSnapshot, append_edit_log,
                           diff_sale, edit_history, item_signature,
                           party_display_name, snapshot_sale)
from .pricing import (backsolve_grand_total, positive_number,
                      compute_invoice_totals, direct_totals, item_totals,
                      price_items, validate_discount)

logger = logging.getLogger(__name__)

DEFAULT_DIRECT_DESCRIPTION = "Direct Entry"
TOTAL_FIELDS = (
    "sub_total", "discount_amount", "taxable_amount", "vat_amount", "grand_total"
)


class _Unset:
    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


# "field not supplied" marker, distinct from an explicit None
UNSET = _Unset()


def _given(value):
    return value is not UNSET and value is not None


@dataclass
class SalePatch:
    """A partial update to a sale. Fields left UNSET are not touched."""
    invoice_number: Any = UNSET
    invoice_date: Any = UNSET
    billing_party: Any = UNSET
    items: Any = UNSET           # [{"product_id": ..., "quantity": ...}]
    direct_entry: Any = UNSET    # {"description": ..., "amount": ...}
    grand_total: Any = UNSET     # VAT-inclusive override for direct entries
    discount_percentage: Any = UNSET
    note: Any = UNSET            # None clears the note
    bill_photos: Any = UNSET

    @classmethod
    def from_dict(cls, data: dict) -> "SalePatch":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValidationError(f"Unknown sale fields: {', '.join(unknown)}")
        return cls(**data)


@dataclass
class SaleUpdateResult:
    sale: Sale
    log_entry: Optional[EditLogEntry]

    @property
    def changed(self):
        return self.log_entry is not None

    @property
    def message(self):
        if self.changed:
            return "Sale updated successfully"
        return "No changes detected"


# ----------------------------------------------
# Shared lookups / validation
# ----------------------------------------------
def resolve_party(company, party_ref) -> Party:
    """Billing party must exist and belong to the same company."""
    if isinstance(party_ref, Party):
        if party_ref.company_id != company.pk:
            raise ReferenceNotFound("Party", [party_ref.pk])
        return party_ref
    try:
        return Party.objects.for_company(company).get(pk=party_ref)
    except (Party.DoesNotExist, ValueError, TypeError):
        logger.warning("Party %s not found for company %s", party_ref, company.pk)
        raise ReferenceNotFound("Party", [party_ref])


def ensure_unique_invoice_number(company, invoice_number, exclude_pk=None):
    qs = Sale.objects.for_company(company).filter(invoice_number=invoice_number)
    if exclude_pk:
        qs = qs.exclude(pk=exclude_pk)
    if qs.exists():
        raise ValidationError(
            f"Invoice number {invoice_number} already exists for this company.")


def _clean_invoice_number(value):
    number = str(value or "").strip()
    if not number:
        raise ValidationError("Invoice number is required")
    return number


def _direct_amount(direct_entry):
    if not direct_entry:
        return None
    amount = direct_entry.get("amount")
    return None if amount in (None, "") else amount


def _apply_totals(sale, totals):
    for name in TOTAL_FIELDS:
        setattr(sale, name, getattr(totals, name))


def _build_items(sale, priced_items):
    return [
        SaleItem(
            sale=sale,
            product_id=p.product_id,
            name=p.name,
            quantity=p.quantity,
            rate=p.rate,
            amount=p.amount,
        )
        for p in priced_items
    ]


# ----------------------------------------------
# Create
# ----------------------------------------------
def create_sale(
    company,
    *,
    invoice_number,
    invoice_date,
    billing_party,
    items=None,
    direct_entry=None,
    discount_percentage=0,
    note=None,
    bill_photos=None,
    created_by=None,
    vat_rate=None,
) -> Sale:
    """
    Price and persist a new sale invoice.
    Nothing is written unless every reference resolves and the totals compute.
    """
    invoice_number = _clean_invoice_number(invoice_number)
    invoice_date = coerce_date(invoice_date, "Invoice date")
    validate_bill_photos(bill_photos)
    if direct_entry and not direct_entry.get("description"):
        raise ValidationError("Description is required")
    party = resolve_party(company, billing_party)
    ensure_unique_invoice_number(company, invoice_number)

    pricing = compute_invoice_totals(
        company,
        items=items or None,
        direct_amount=_direct_amount(direct_entry),
        discount_percentage=discount_percentage,
        vat_rate=vat_rate,
    )

    sale = Sale(
        company=company,
        billing_party=party,
        invoice_number=invoice_number,
        invoice_date=invoice_date,
        discount_percentage=validate_discount(discount_percentage),
        note=note,
        bill_photos=list(bill_photos or []),
        created_by=created_by,
    )
    if direct_entry:
        sale.direct_description = direct_entry["description"]
        sale.direct_amount = round_money(direct_entry["amount"])
    _apply_totals(sale, pricing.totals)
    sale.pending_item_count = len(pricing.items)

    with transaction.atomic():
        sale.save()
        SaleItem.objects.bulk_create(_build_items(sale, pricing.items))

    logger.info(
        "Sale %s created for company %s",
        sale.invoice_number,
        company.pk,
        extra={"sale_id": sale.pk, "grand_total": str(sale.grand_total)},
    )
    return sale


# ----------------------------------------------
# Update
# ----------------------------------------------
def stored_basis_totals(sale, discount_percentage, vat_rate):
    """Re-derive totals from what the sale already holds."""
    items = list(sale.items.order_by("pk"))
    if items:
        return item_totals(items, discount_percentage, vat_rate)
    if sale.direct_amount is None:
        raise EntryModeError("Either items or direct entry must be provided.")
    return direct_totals(sale.direct_amount, discount_percentage, vat_rate)


def resolve_sale_update(sale: Sale, patch: SalePatch, editor=None, now=None,
                        vat_rate=None) -> SaleUpdateResult:
    """
    Apply a partial update to a sale.

    Items supplied -> items-mode recompute (direct entry dropped).
    Grand total supplied -> back-solved direct entry, discount forced to 0.
    Direct amount supplied -> direct-mode recompute (items dropped).
    Only discount changed -> totals re-derived from the stored basis.
    Otherwise only non-financial fields change.

    When no watched field changes nothing is written and the result
    carries no log entry.
    """
    if isinstance(patch, dict):
        patch = SalePatch.from_dict(patch)
    if vat_rate is None:
        vat_rate = get_vat_rate()
    company = sale.company
    before = snapshot_sale(sale)

    # --- non-financial fields, validated before any pricing ---
    invoice_number = sale.invoice_number
    if _given(patch.invoice_number):
        invoice_number = _clean_invoice_number(patch.invoice_number)
        if invoice_number != sale.invoice_number:
            ensure_unique_invoice_number(company, invoice_number, sale.pk)

    invoice_date = sale.invoice_date
    if _given(patch.invoice_date):
        invoice_date = coerce_date(patch.invoice_date, "Invoice date")

    party = sale.billing_party
    if _given(patch.billing_party):
        party = resolve_party(company, patch.billing_party)

    bill_photos = sale.bill_photos or []
    if _given(patch.bill_photos):
        validate_bill_photos(patch.bill_photos)
        bill_photos = list(patch.bill_photos)

    note = sale.note if patch.note is UNSET else patch.note

    # --- financial fields ---
    pct = to_decimal(sale.discount_percentage)
    if _given(patch.discount_percentage):
        pct = validate_discount(patch.discount_percentage)

    direct = patch.direct_entry if _given(patch.direct_entry) else {}
    direct_description = sale.direct_description
    direct_amount = sale.direct_amount
    # None keeps the stored item rows; a list replaces them
    priced_items = None
    totals = None

    if _given(patch.items) and len(patch.items) > 0:
        priced_items = price_items(company, patch.items, vat_rate)
        totals = item_totals(priced_items, pct, vat_rate)
        direct_description = direct_amount = None
    elif _given(patch.grand_total):
        totals = backsolve_grand_total(
            positive_number(patch.grand_total, "Grand total"), vat_rate)
        pct = ZERO
        direct_amount = totals.grand_total
        direct_description = (direct.get("description")
                              or sale.direct_description
                              or DEFAULT_DIRECT_DESCRIPTION)
        priced_items = []
    elif _direct_amount(direct) is not None:
        amount = positive_number(direct["amount"], "Amount")
        totals = direct_totals(amount, pct, vat_rate)
        direct_amount = round_money(amount)
        direct_description = (direct.get("description")
                              or sale.direct_description
                              or DEFAULT_DIRECT_DESCRIPTION)
        priced_items = []
    else:
        if direct.get("description"):
            if sale.direct_amount is None:
                raise EntryModeError(
                    "Cannot add a direct entry to an item based sale without an amount.")
            direct_description = direct["description"]
        if pct != to_decimal(sale.discount_percentage):
            totals = stored_basis_totals(sale, pct, vat_rate)

    has_items_after = bool(priced_items) if priced_items is not None else bool(before.items)
    if has_items_after == (direct_amount is not None):
        raise EntryModeError(
            "Either add items or provide a direct entry, not both.")

    after = SaleSnapshot(
        invoice_number=invoice_number,
        invoice_date=invoice_date,
        billing_party_id=party.pk,
        billing_party_name=party_display_name(party),
        items=item_signature(priced_items) if priced_items is not None else before.items,
        direct_amount=direct_amount,
        direct_description=direct_description,
        note=note,
        discount_percentage=pct,
        grand_total=totals.grand_total if totals else before.grand_total,
        bill_photo_count=len(bill_photos),
    )

    entry = diff_sale(before, after, editor=editor, now=now)
    if entry is None:
        logger.debug("No changes detected for sale %s", sale.pk)
        return SaleUpdateResult(sale=sale, log_entry=None)

    with transaction.atomic():
        # Row lock only; concurrent edits resolve as last write wins
        Sale.objects.select_for_update().filter(pk=sale.pk).first()
        if priced_items is not None:
            sale.items.all().delete()

        sale.invoice_number = invoice_number
        sale.invoice_date = invoice_date
        sale.billing_party = party
        sale.bill_photos = bill_photos
        sale.note = note
        sale.discount_percentage = pct
        sale.direct_description = direct_description
        sale.direct_amount = direct_amount
        sale.pending_item_count = (
            len(priced_items) if priced_items is not None else None)
        if totals is not None:
            _apply_totals(sale, totals)
        sale.save()

        if priced_items:
            SaleItem.objects.bulk_create(_build_items(sale, priced_items))
        append_edit_log(sale, entry)

    logger.info(
        "Sale %s updated: %s",
        sale.pk,
        entry.description,
        extra={"sale_id": sale.pk, "grand_total": str(sale.grand_total)},
    )
    return SaleUpdateResult(sale=sale, log_entry=entry)


# ----------------------------------------------
# Recalculation
# ----------------------------------------------
def recalculate_sale(sale: Sale, vat_rate=None, editor=None, now=None) -> SaleUpdateResult:
    """
    Re-derive a sale's totals from its stored rates and amounts.
    Running it twice in a row changes nothing the second time.
    """
    if vat_rate is None:
        vat_rate = get_vat_rate()
    before = snapshot_sale(sale)
    pct = to_decimal(sale.discount_percentage)

    items = list(sale.items.order_by("pk"))
    if items:
        for item in items:
            item.amount = round_money(item.rate * item.quantity)
        totals = item_totals(items, pct, vat_rate)
    elif sale.direct_amount is None:
        raise EntryModeError("Either items or direct entry must be provided.")
    elif pct == 0 and to_decimal(sale.grand_total) == to_decimal(sale.direct_amount):
        # direct amount was entered as the final grand total
        totals = backsolve_grand_total(sale.direct_amount, vat_rate)
    else:
        totals = direct_totals(sale.direct_amount, pct, vat_rate)

    after = replace(before, grand_total=totals.grand_total)
    entry = diff_sale(before, after, editor=editor, now=now)
    if entry is None:
        return SaleUpdateResult(sale=sale, log_entry=None)

    with transaction.atomic():
        _apply_totals(sale, totals)
        sale.save()
        if items:
            SaleItem.objects.bulk_update(items, ["amount"])
        append_edit_log(sale, entry)

    logger.info("Sale %s recalculated", sale.pk, extra={"sale_id": sale.pk})
    return SaleUpdateResult(sale=sale, log_entry=entry)


# ----------------------------------------------
# Read model
# ----------------------------------------------
def sale_detail(sale: Sale) -> dict:
    """Sale as shown to readers: party name resolved, edit log newest first."""
    return {
        "id": sale.pk,
        "invoice_number": sale.invoice_number,
        "invoice_date": sale.invoice_date,
        "billing_party": party_display_name(sale.billing_party),
        "items": [
            {
                "product_id": item.product_id,
                "name": item.name,
                "quantity": item.quantity,
                "rate": item.rate,
                "amount": item.amount,
            }
            for item in sale.items.order_by("pk")
        ],
        "direct_entry": (
            {"description": sale.direct_description, "amount": sale.direct_amount}
            if sale.has_direct_entry else None
        ),
        "discount_percentage": sale.discount_percentage,
        **{name: getattr(sale, name) for name in TOTAL_FIELDS},
        "note": sale.note,
        "bill_photos": list(sale.bill_photos or []),
        "edit_history_logs": [
            {
                "description": log.description,
                "edited_by": log.edited_by_id,
                "edited_at": log.edited_at,
            }
            for log in edit_history(sale)
        ],
    }
