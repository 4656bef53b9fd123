from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple

from django.utils import timezone

from ..models import Party, Sale, SaleEditLog
from ..money import to_decimal

SYSTEM_EDITOR = "System"


@dataclass(frozen=True)
class SaleSnapshot:
    """The watched fields of a sale, before or after an edit."""
    invoice_number: str
    invoice_date: Optional[date]
    billing_party_id: Optional[int]
    billing_party_name: str
    items: Tuple[Tuple[int, Decimal], ...]
    direct_amount: Optional[Decimal]
    direct_description: Optional[str]
    note: Optional[str]
    discount_percentage: Decimal
    grand_total: Decimal
    bill_photo_count: int


@dataclass(frozen=True)
class EditLogEntry:
    description: str
    edited_by: object
    edited_at: datetime


def party_display_name(party) -> str:
    """Resolve a party reference (instance or id) to its name."""
    if party is None:
        return ""
    if isinstance(party, Party):
        return party.name
    name = Party.objects.filter(pk=party).values_list("name", flat=True).first()
    return name or str(party)


def item_signature(items) -> Tuple[Tuple[int, Decimal], ...]:
    # items may be SaleItem rows or PricedItem values
    return tuple(
        (int(i.product_id), to_decimal(i.quantity).normalize()) for i in items
    )


def snapshot_sale(sale: Sale) -> SaleSnapshot:
    party = sale.billing_party if sale.billing_party_id else None
    return SaleSnapshot(
        invoice_number=sale.invoice_number,
        invoice_date=sale.invoice_date,
        billing_party_id=sale.billing_party_id,
        billing_party_name=party_display_name(party),
        items=item_signature(sale.items.order_by("pk")) if sale.pk else (),
        direct_amount=sale.direct_amount,
        direct_description=sale.direct_description,
        note=sale.note,
        discount_percentage=to_decimal(sale.discount_percentage),
        grand_total=to_decimal(sale.grand_total),
        bill_photo_count=len(sale.bill_photos or []),
    )


def display_number(value) -> str:
    """Render numbers without trailing zeros: 1000.00 -> 1000, 12.50 -> 12.5"""
    if value is None:
        return "0"
    number = to_decimal(value)
    if number == number.to_integral_value():
        return str(number.quantize(Decimal("1")))
    return format(number.normalize(), "f")


def display_date(value) -> str:
    return value.isoformat() if value else ""


def editor_name(editor) -> str:
    if editor is None:
        return SYSTEM_EDITOR
    full_name = getattr(editor, "get_full_name", lambda: "")()
    return full_name or editor.get_username()


def changed_clauses(before: SaleSnapshot, after: SaleSnapshot):
    clauses = []

    if before.invoice_number != after.invoice_number:
        clauses.append(
            f"Invoice Number from {before.invoice_number} to {after.invoice_number}")

    if before.invoice_date != after.invoice_date:
        clauses.append(
            f"Invoice Date from {display_date(before.invoice_date)} "
            f"to {display_date(after.invoice_date)}")

    if before.billing_party_id != after.billing_party_id:
        clauses.append(
            f"Billing Party from {before.billing_party_name} "
            f"to {after.billing_party_name}")

    # Count changes are reported with numbers; same-size edits as a plain clause
    if len(before.items) != len(after.items):
        clauses.append(
            f"Items list (count changed from {len(before.items)} to {len(after.items)})")
    elif before.items != after.items:
        clauses.append("Items list")

    if before.direct_amount != after.direct_amount:
        clauses.append(
            f"Direct Entry Amount from {display_number(before.direct_amount)} "
            f"to {display_number(after.direct_amount)}")

    if (before.direct_description or "") != (after.direct_description or ""):
        clauses.append("Direct Entry Description")

    if (before.note or "") != (after.note or ""):
        clauses.append("Note")

    if before.discount_percentage != after.discount_percentage:
        clauses.append(
            f"Discount Percentage from {display_number(before.discount_percentage)}% "
            f"to {display_number(after.discount_percentage)}%")

    if before.grand_total != after.grand_total:
        clauses.append(
            f"Grand Total from {display_number(before.grand_total)} "
            f"to {display_number(after.grand_total)}")

    if before.bill_photo_count != after.bill_photo_count:
        clauses.append(
            f"Bill Photos (count changed from {before.bill_photo_count} "
            f"to {after.bill_photo_count})")

    return clauses


def diff_sale(before: SaleSnapshot, after: SaleSnapshot, editor=None, now=None):
    """
    Describe an edit as one readable sentence.
    Returns None when no watched field changed.
    """
    clauses = changed_clauses(before, after)
    if not clauses:
        return None
    return EditLogEntry(
        description=f"{editor_name(editor)} has changed {', '.join(clauses)}",
        edited_by=editor,
        edited_at=now or timezone.now(),
    )


def append_edit_log(sale: Sale, entry: EditLogEntry) -> SaleEditLog:
    return SaleEditLog.objects.create(
        sale=sale,
        description=entry.description,
        edited_by=entry.edited_by,
        edited_at=entry.edited_at,
    )


def edit_history(sale: Sale):
    """Edit log, newest first."""
    return list(sale.edit_history_logs.order_by("-edited_at", "-pk"))
