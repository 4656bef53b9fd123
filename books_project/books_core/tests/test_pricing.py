from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.test import TestCase, override_settings

from ..exceptions import EntryModeError, ReferenceNotFound
from ..services.pricing import (backsolve_grand_total, compute_invoice_totals,
                                direct_totals, validate_quantity)
from .helpers import make_company, make_product


class InvoicePricingTests(TestCase):
    def setUp(self):
        self.company = make_company()
        # 113.00 and 56.50 are 100.00 and 50.00 before VAT
        self.p1 = make_product(self.company, "113.00", name="Rice")
        self.p2 = make_product(self.company, "56.50", name="Oil")

    def test_items_mode_with_discount(self):
        result = compute_invoice_totals(
            self.company,
            items=[
                {"product_id": self.p1.pk, "quantity": 2},
                {"product_id": self.p2.pk, "quantity": 3},
            ],
            discount_percentage=10,
        )
        totals = result.totals
        self.assertEqual(totals.sub_total, Decimal("350.00"))
        self.assertEqual(totals.discount_amount, Decimal("35.00"))
        self.assertEqual(totals.taxable_amount, Decimal("315.00"))
        self.assertEqual(totals.vat_amount, Decimal("40.95"))
        self.assertEqual(totals.grand_total, Decimal("355.95"))

        # rate and amount per item, with the product name captured
        self.assertEqual(
            [(i.name, i.rate, i.amount) for i in result.items],
            [("Rice", Decimal("100.00"), Decimal("200.00")),
             ("Oil", Decimal("50.00"), Decimal("150.00"))],
        )

    def test_rounding_closure(self):
        # 100 / 1.13 = 88.4955... -> 88.50, vat 34.515 -> 34.52
        product = make_product(self.company, "100.00")
        totals = compute_invoice_totals(
            self.company, items=[{"product_id": product.pk, "quantity": 3}]
        ).totals
        self.assertEqual(totals.sub_total, Decimal("265.50"))
        self.assertEqual(totals.vat_amount, Decimal("34.52"))
        self.assertEqual(totals.grand_total, totals.taxable_amount + totals.vat_amount)
        self.assertEqual(
            totals.taxable_amount, totals.sub_total - totals.discount_amount)
        for value in totals.as_dict().values():
            self.assertEqual(value, value.quantize(Decimal("0.01")))

    def test_direct_mode_backs_out_vat(self):
        totals = compute_invoice_totals(
            self.company, direct_amount="1130", discount_percentage=10
        ).totals
        self.assertEqual(totals.sub_total, Decimal("1000.00"))
        self.assertEqual(totals.discount_amount, Decimal("100.00"))
        self.assertEqual(totals.taxable_amount, Decimal("900.00"))
        self.assertEqual(totals.vat_amount, Decimal("117.00"))
        self.assertEqual(totals.grand_total, Decimal("1017.00"))

    def test_direct_mode_rounds_sub_total_before_discount(self):
        # 1000 / 1.13 = 884.955... is rounded first
        totals = direct_totals(Decimal("1000"), Decimal("0"), Decimal("0.13"))
        self.assertEqual(totals.sub_total, Decimal("884.96"))
        self.assertEqual(totals.vat_amount, Decimal("115.04"))
        self.assertEqual(totals.grand_total, Decimal("1000.00"))

    def test_items_and_direct_amount_are_exclusive(self):
        with self.assertRaises(EntryModeError):
            compute_invoice_totals(
                self.company,
                items=[{"product_id": self.p1.pk, "quantity": 1}],
                direct_amount="100",
            )
        with self.assertRaises(EntryModeError):
            compute_invoice_totals(self.company)

    def test_missing_product_names_the_missing_ids(self):
        with self.assertRaises(ReferenceNotFound) as ctx:
            compute_invoice_totals(
                self.company,
                items=[
                    {"product_id": self.p1.pk, "quantity": 1},
                    {"product_id": 999999, "quantity": 1},
                ],
            )
        self.assertEqual(ctx.exception.model, "Product")
        self.assertEqual(ctx.exception.ids, ["999999"])

    def test_products_of_other_company_are_not_found(self):
        other = make_company(name="Other Co")
        foreign = make_product(other, "113.00")
        with self.assertRaises(ReferenceNotFound):
            compute_invoice_totals(
                self.company, items=[{"product_id": foreign.pk, "quantity": 1}])

    @override_settings(BOOKS_VAT_RATE=Decimal("0.10"))
    def test_vat_rate_is_configurable(self):
        totals = compute_invoice_totals(self.company, direct_amount="1100").totals
        self.assertEqual(totals.sub_total, Decimal("1000.00"))
        self.assertEqual(totals.vat_amount, Decimal("100.00"))

    def test_four_place_quantity_is_priced_as_given(self):
        result = compute_invoice_totals(
            self.company, items=[{"product_id": self.p1.pk, "quantity": "1.2345"}])
        # 100.00 x 1.2345
        self.assertEqual(result.items[0].quantity, Decimal("1.2345"))
        self.assertEqual(result.items[0].amount, Decimal("123.45"))


@pytest.mark.parametrize("pct", [-1, 100.01, "abc"])
def test_discount_outside_range_is_rejected(pct):
    # validation runs before any product lookup, so no database needed
    with pytest.raises(ValidationError):
        compute_invoice_totals(None, direct_amount="100", discount_percentage=pct)


@pytest.mark.parametrize("amount", ["0", "-5", "ten"])
def test_direct_amount_must_be_positive(amount):
    with pytest.raises(ValidationError):
        compute_invoice_totals(None, direct_amount=amount)


def test_backsolve_grand_total():
    totals = backsolve_grand_total(Decimal("1130"), Decimal("0.13"))
    assert totals.taxable_amount == Decimal("1000.00")
    assert totals.sub_total == Decimal("1000.00")
    assert totals.vat_amount == Decimal("130.00")
    assert totals.discount_amount == Decimal("0.00")
    assert totals.grand_total == Decimal("1130.00")


@pytest.mark.parametrize("value", ["NaN", "sNaN", "Infinity", "-Infinity"])
def test_non_finite_direct_amount_is_rejected(value):
    with pytest.raises(ValidationError):
        compute_invoice_totals(None, direct_amount=value)


@pytest.mark.parametrize("value", ["NaN", "sNaN", "Infinity", Decimal("NaN")])
def test_non_finite_discount_is_rejected(value):
    with pytest.raises(ValidationError):
        compute_invoice_totals(None, direct_amount="100", discount_percentage=value)


@pytest.mark.parametrize("quantity", ["1.00005", "0.00001", "NaN", "Infinity"])
def test_quantity_finer_than_storage_is_rejected(quantity):
    # quantities are checked before products are looked up
    with pytest.raises(ValidationError):
        compute_invoice_totals(
            None, items=[{"product_id": 1, "quantity": quantity}])


def test_quantity_trailing_zeros_are_not_extra_places():
    assert validate_quantity("1.500000") == Decimal("1.5")
    assert validate_quantity("2.0001") == Decimal("2.0001")
