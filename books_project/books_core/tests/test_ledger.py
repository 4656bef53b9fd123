import datetime
from decimal import Decimal

import pytest
from django.test import TestCase

from ..exceptions import InvalidDateRange, NoTransactions, ReferenceNotFound
from ..models import Payment, Purchase, Sale, SalesReturn
from ..services.ledger import build_party_ledger, parse_date_range
from .helpers import make_company, make_party


def jan(day):
    return datetime.date(2025, 1, day)


class PartyLedgerTests(TestCase):
    def setUp(self):
        self.company = make_company()
        self.party = make_party(self.company)

    def add_sale(self, day, amount, number=None, **kwargs):
        return Sale.objects.create(
            company=self.company,
            billing_party=self.party,
            invoice_number=number or f"S-{Sale.objects.count() + 1}",
            invoice_date=jan(day),
            direct_description="Goods",
            direct_amount=Decimal(amount),
            grand_total=Decimal(amount),
            **kwargs,
        )

    def add_purchase(self, day, amount, **kwargs):
        return Purchase.objects.create(
            company=self.company,
            supplied_by=self.party,
            invoice_number=f"P-{day}",
            invoice_date=jan(day),
            amount=Decimal(amount),
            description="Stock",
            **kwargs,
        )

    def add_payment(self, day, amount, received=True, **kwargs):
        return Payment.objects.create(
            company=self.company,
            paid_by=self.party,
            type="cash",
            amount=Decimal(amount),
            received_or_paid=received,
            invoice_date=jan(day),
            **kwargs,
        )

    def ledger(self, date_from="2025-01-01", date_to="2025-01-31"):
        return build_party_ledger(self.company, self.party.pk, date_from, date_to)

    def test_running_balance_sign(self):
        self.add_sale(1, "1000")
        self.add_purchase(2, "400")
        self.add_payment(3, "300")

        ledger = self.ledger()
        self.assertEqual(
            [(r.dr_amount, r.cr_amount) for r in ledger.rows],
            [(Decimal("1000.00"), Decimal("0.00")),
             (Decimal("0.00"), Decimal("400.00")),
             (Decimal("0.00"), Decimal("300.00"))],
        )
        self.assertEqual(
            [r.balance for r in ledger.rows],
            [Decimal("-1000.00"), Decimal("-600.00"), Decimal("-300.00")],
        )
        self.assertEqual([r.balance_side for r in ledger.rows], ["DR", "DR", "DR"])

        totals = ledger.totals
        self.assertEqual(totals["sales"], Decimal("1000.00"))
        self.assertEqual(totals["purchases"], Decimal("400.00"))
        self.assertEqual(totals["payments"], Decimal("300.00"))
        self.assertEqual(totals["total_dr"], Decimal("1000.00"))
        self.assertEqual(totals["total_cr"], Decimal("700.00"))
        self.assertEqual(totals["closing_balance"], Decimal("-300.00"))

    def test_same_day_rows_follow_source_priority(self):
        # inserted in reverse order on purpose
        self.add_payment(5, "300")
        self.add_purchase(5, "400")
        self.add_sale(5, "1000")

        ledger = self.ledger()
        self.assertEqual(
            [r.source_type for r in ledger.rows], ["sale", "purchase", "payment"])
        self.assertEqual(
            [r.balance for r in ledger.rows],
            [Decimal("-1000.00"), Decimal("-600.00"), Decimal("-300.00")],
        )

    def test_rows_are_chronological_across_sources(self):
        self.add_payment(2, "50", received=False)
        self.add_sale(9, "200")
        self.add_purchase(4, "80")

        ledger = self.ledger()
        self.assertEqual([r.date for r in ledger.rows], [jan(2), jan(4), jan(9)])
        self.assertEqual(ledger.rows[0].narration, "PAYMENT SENT")
        self.assertEqual(ledger.rows[0].dr_amount, Decimal("50.00"))
        self.assertEqual(ledger.rows[1].balance, Decimal("30.00"))
        self.assertEqual(ledger.rows[1].balance_side, "CR")

    def test_purchases_only_party_still_gets_rows(self):
        self.add_purchase(3, "250")
        ledger = self.ledger()
        self.assertEqual(len(ledger.rows), 1)
        self.assertEqual(ledger.rows[0].balance, Decimal("250.00"))
        self.assertEqual(ledger.totals["sales"], Decimal("0.00"))

    def test_cancelled_and_out_of_range_rows_are_excluded(self):
        self.add_sale(1, "1000", is_cancelled=True)
        self.add_purchase(15, "400")
        Purchase.objects.create(
            company=self.company,
            supplied_by=self.party,
            invoice_number="P-FEB",
            invoice_date=datetime.date(2025, 2, 1),
            amount=Decimal("999"),
            description="Later",
        )

        ledger = self.ledger()
        self.assertEqual([r.source_type for r in ledger.rows], ["purchase"])
        self.assertEqual(ledger.closing_balance, Decimal("400.00"))

    def test_date_bounds_are_inclusive(self):
        self.add_sale(1, "100")
        self.add_sale(31, "200")
        ledger = self.ledger()
        self.assertEqual(len(ledger.rows), 2)

    def test_returns_are_a_ledger_source(self):
        self.add_sale(1, "1000")
        SalesReturn.objects.create(
            company=self.company,
            returned_by=self.party,
            invoice_number="CN-1",
            invoice_date=jan(2),
            amount=Decimal("200"),
            description="Damaged",
        )
        SalesReturn.objects.create(
            company=self.company,
            returned_by=self.party,
            invoice_number="DN-1",
            invoice_date=jan(3),
            type="debit_note",
            amount=Decimal("50"),
        )

        ledger = self.ledger()
        self.assertEqual(
            [r.balance for r in ledger.rows],
            [Decimal("-1000.00"), Decimal("-800.00"), Decimal("-850.00")],
        )
        self.assertEqual(ledger.rows[1].narration, "RETURN: Damaged")
        self.assertEqual(ledger.totals["returns"], Decimal("250.00"))

    def test_no_activity_is_reported(self):
        with self.assertRaises(NoTransactions):
            self.ledger()

    def test_only_cancelled_activity_is_reported_as_none(self):
        self.add_sale(1, "1000", is_cancelled=True)
        with self.assertRaises(NoTransactions):
            self.ledger()

    def test_party_of_another_company_is_not_found(self):
        stranger = make_party(make_company(name="Other Co"))
        with self.assertRaises(ReferenceNotFound):
            build_party_ledger(self.company, stranger.pk, "2025-01-01", "2025-01-31")

    def test_inverted_range_is_rejected(self):
        self.add_sale(1, "1000")
        with self.assertRaises(InvalidDateRange):
            self.ledger("2025-01-31", "2025-01-01")


@pytest.mark.django_db
@pytest.mark.parametrize(
    "date_from, date_to",
    [
        ("2025-13-01", "2025-12-31"),
        ("2025-02-30", "2025-03-01"),
        ("yesterday", "2025-01-01"),
        (None, "2025-01-01"),
        ("2025-01-01", ""),
    ],
)
def test_malformed_dates_rejected_before_any_query(
        date_from, date_to, django_assert_num_queries):
    with django_assert_num_queries(0):
        with pytest.raises(InvalidDateRange):
            build_party_ledger(None, 1, date_from, date_to)


def test_parse_date_range_accepts_dates_and_strings():
    start, end = parse_date_range(datetime.date(2025, 1, 1), "2025-01-31")
    assert start == datetime.date(2025, 1, 1)
    assert end == datetime.date(2025, 1, 31)
