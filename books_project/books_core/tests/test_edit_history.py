import datetime
from dataclasses import replace
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from ..services.edit_history import (SaleSnapshot, diff_sale, display_number,
                                     editor_name)

BEFORE = SaleSnapshot(
    invoice_number="S-1",
    invoice_date=datetime.date(2025, 1, 10),
    billing_party_id=1,
    billing_party_name="Himal Traders",
    items=((1, Decimal("2")), (2, Decimal("3"))),
    direct_amount=None,
    direct_description=None,
    note=None,
    discount_percentage=Decimal("10.00"),
    grand_total=Decimal("1000.00"),
    bill_photo_count=0,
)


def test_unchanged_snapshot_produces_no_entry():
    assert diff_sale(BEFORE, replace(BEFORE)) is None


def test_each_changed_field_gets_a_clause_in_order():
    after = replace(
        BEFORE,
        invoice_number="S-2",
        billing_party_id=2,
        billing_party_name="Everest Suppliers",
        items=BEFORE.items + ((3, Decimal("1")),),
        note="Deliver Friday",
        grand_total=Decimal("1200.00"),
        bill_photo_count=1,
    )
    entry = diff_sale(BEFORE, after)
    assert entry.description == (
        "System has changed Invoice Number from S-1 to S-2, "
        "Billing Party from Himal Traders to Everest Suppliers, "
        "Items list (count changed from 2 to 3), Note, "
        "Grand Total from 1000 to 1200, "
        "Bill Photos (count changed from 0 to 1)"
    )


def test_same_count_item_edit_is_still_reported():
    after = replace(BEFORE, items=((1, Decimal("5")), (2, Decimal("3"))))
    entry = diff_sale(BEFORE, after)
    assert entry.description == "System has changed Items list"


def test_date_clause_uses_iso_dates():
    after = replace(BEFORE, invoice_date=datetime.date(2025, 2, 1))
    entry = diff_sale(BEFORE, after)
    assert entry.description == (
        "System has changed Invoice Date from 2025-01-10 to 2025-02-01")


def test_entry_carries_editor_and_time():
    now = datetime.datetime(2025, 1, 10, 12, 0, tzinfo=datetime.timezone.utc)
    entry = diff_sale(BEFORE, replace(BEFORE, note="x"), editor=None, now=now)
    assert entry.edited_at == now
    assert entry.edited_by is None


@pytest.mark.parametrize(
    "value, expected",
    [
        (Decimal("1000.00"), "1000"),
        (Decimal("12.50"), "12.5"),
        (Decimal("0.00"), "0"),
        (None, "0"),
        (Decimal("395.50"), "395.5"),
    ],
)
def test_display_number_drops_trailing_zeros(value, expected):
    assert display_number(value) == expected


@pytest.mark.django_db
def test_editor_name_falls_back_to_username():
    user = get_user_model().objects.create_user(username="sita", password="pw")
    assert editor_name(user) == "sita"
    user.first_name, user.last_name = "Sita", "Rai"
    assert editor_name(user) == "Sita Rai"
    assert editor_name(None) == "System"
