from decimal import Decimal

from django.contrib.admin.sites import AdminSite
from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase

from ..admin import SaleAdmin, SaleItemInline
from ..models import Sale
from ..services.sales import create_sale
from .helpers import make_company, make_party, make_product


class SaleAdminTests(TestCase):
    def setUp(self):
        self.site = AdminSite()
        self.admin = SaleAdmin(Sale, self.site)
        self.user = get_user_model().objects.create_superuser(
            username="admin", email="admin@example.com", password="pw")
        self.request = RequestFactory().post("/")
        self.request.user = self.user

        self.company = make_company()
        self.party = make_party(self.company)
        self.product = make_product(self.company, "113.00", name="Rice")
        self.sale = create_sale(
            self.company,
            invoice_number="S-1",
            invoice_date="2025-01-11",
            billing_party=self.party,
            direct_entry={"description": "Consulting", "amount": "1130"},
            discount_percentage=10,
        )

    def submit(self, **changes):
        data = {
            "billing_party": str(self.party.pk),
            "invoice_number": "S-1",
            "invoice_date": "2025-01-11",
            "bill_photos": "[]",
            "note": "",
            "is_vatable": "on",
        }
        data.update(changes)
        form_class = self.admin.get_form(self.request, self.sale, change=True)
        form = form_class(data, instance=self.sale)
        self.assertTrue(form.is_valid(), form.errors)
        obj = form.save(commit=False)
        self.admin.save_model(self.request, obj, form, change=True)
        return obj

    def test_sales_cannot_be_added_from_admin(self):
        self.assertFalse(self.admin.has_add_permission(self.request))
        inline = SaleItemInline(Sale, self.site)
        self.assertFalse(inline.has_add_permission(self.request, self.sale))

    def test_pricing_inputs_and_totals_are_read_only(self):
        readonly = self.admin.get_readonly_fields(self.request, self.sale)
        for name in ("direct_amount", "direct_description",
                     "discount_percentage", "grand_total", "company"):
            self.assertIn(name, readonly)

        form_class = self.admin.get_form(self.request, self.sale, change=True)
        self.assertNotIn("direct_amount", form_class.base_fields)
        self.assertNotIn("discount_percentage", form_class.base_fields)

    def test_change_goes_through_edit_log(self):
        obj = self.submit(note="Paid in cash")

        self.sale.refresh_from_db()
        self.assertEqual(self.sale.note, "Paid in cash")
        self.assertEqual(self.sale.grand_total, Decimal("1017.00"))
        log = self.sale.edit_history_logs.get()
        self.assertIn("Note", log.description)
        self.assertEqual(log.edited_by, self.user)
        self.assertEqual(obj.note, "Paid in cash")

    def test_unchanged_form_writes_no_log(self):
        self.submit()
        self.assertFalse(self.sale.edit_history_logs.exists())

    def test_cancel_flag_is_saved_without_log(self):
        self.submit(is_cancelled="on")
        self.sale.refresh_from_db()
        self.assertTrue(self.sale.is_cancelled)
        self.assertFalse(self.sale.edit_history_logs.exists())
