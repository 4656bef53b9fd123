import re
from decimal import Decimal
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from ..exceptions import EntryModeError
from ..managers import TenantManager
from .company import Company
from .party import Party
from .product import Product

MAX_BILL_PHOTOS = 5
IMAGE_URL_RE = re.compile(r"^https?://\S+\.(jpg|jpeg|png|gif)$", re.IGNORECASE)


def validate_bill_photos(photos):
    """Bill photos are a short list of image URLs."""
    if photos is None:
        return
    if not isinstance(photos, (list, tuple)):
        raise ValidationError("Bill photos must be a list of image URLs.")
    if len(photos) > MAX_BILL_PHOTOS:
        raise ValidationError(
            f"You can upload a maximum of {MAX_BILL_PHOTOS} photos")
    for url in photos:
        if not isinstance(url, str) or not IMAGE_URL_RE.match(url):
            raise ValidationError(
                f"Each bill photo must be a valid image URL (jpg, jpeg, png, gif): {url}")


def money_field(**kwargs):
    kwargs.setdefault("default", Decimal("0.00"))
    return models.DecimalField(max_digits=18, decimal_places=2, **kwargs)


class Sale(models.Model):  # Represents a sales invoice

    # Sale belongs to one company (multi-tenant)
    company = models.ForeignKey(Company, on_delete=models.CASCADE)

    # prevent deleting a party who has been invoiced
    billing_party = models.ForeignKey(
        Party, on_delete=models.PROTECT, related_name="sales")

    # human-readable (e.g. "INV-2025-001"), unique per company
    invoice_number = models.CharField(max_length=64)
    invoice_date = models.DateField()

    """ An invoice is either item based (rows in `items`) or a
        single direct entry (description + VAT-inclusive amount). """
    direct_description = models.CharField(max_length=255, null=True, blank=True)
    direct_amount = models.DecimalField(
        max_digits=18, decimal_places=2, null=True, blank=True)

    discount_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, default=Decimal("0.00"))

    # Derived totals, always written by the pricing service
    discount_amount = money_field()
    sub_total = money_field()
    taxable_amount = money_field()
    vat_amount = money_field()
    grand_total = money_field()

    bill_photos = models.JSONField(default=list, blank=True)
    note = models.TextField(null=True, blank=True)
    is_vatable = models.BooleanField(default=True)
    # void invoices stay on file but leave the ledger
    is_cancelled = models.BooleanField(default=False)

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Enforce tenant scoping
    objects = TenantManager()

    # item rows about to be written alongside this save; None = count stored rows
    pending_item_count = None

    class Meta:
        indexes = [
            models.Index(fields=["company", "invoice_date"], name="sale_company_date_idx"),
            models.Index(fields=["company", "billing_party"], name="sale_company_party_idx"),
        ]

        constraints = [
            # Within one company, each invoice number must be unique
            # Across companies, duplicates are allowed
            models.UniqueConstraint(
                fields=["company", "invoice_number"],
                name="uq_sale_company_number"
            ),
            models.CheckConstraint(
                condition=models.Q(discount_percentage__gte=0) &
                models.Q(discount_percentage__lte=100),
                name="sale_discount_percentage_range",
            ),
        ]

    def __str__(self):
        return f"Sale {self.invoice_number or self.pk}"

    @property
    def has_direct_entry(self):
        return bool(self.direct_description) or self.direct_amount is not None

    def entry_item_count(self):
        # set by the sale service when item rows are written after the sale row
        if self.pending_item_count is not None:
            return self.pending_item_count
        if not self.pk:
            return 0
        return self.items.count()

    @property
    def has_items(self):
        return self.entry_item_count() > 0

    def clean(self):
        pct = self.discount_percentage
        if pct is not None and not (0 <= pct <= 100):
            raise ValidationError(
                "Discount percentage must be between 0 and 100.")
        validate_bill_photos(self.bill_photos)

        # Ensure the billing party belongs to the same company
        if self.billing_party_id and self.company_id:
            if self.billing_party.company_id != self.company_id:
                raise ValidationError(
                    "Billing party must belong to the same company.")

        # An invoice is item based or a direct entry, never both or neither
        has_items = self.has_items
        has_direct = self.direct_amount is not None
        if has_items and has_direct:
            raise EntryModeError(
                "A sale cannot have both items and a direct entry.")
        if not has_items and not has_direct:
            raise EntryModeError("Either add items or provide a direct entry.")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        result = super().save(*args, **kwargs)
        self.pending_item_count = None
        return result


class SaleItem(models.Model):  # One priced product row on a sale

    sale = models.ForeignKey(
        Sale, on_delete=models.CASCADE, related_name="items")
    # Prevent deleting a product which has been invoiced
    product = models.ForeignKey(Product, on_delete=models.PROTECT)

    # product name at the time of invoicing
    name = models.CharField(max_length=200, blank=True, default="")
    quantity = models.DecimalField(max_digits=14, decimal_places=4)
    # VAT-exclusive rate derived from the product's MRP
    rate = money_field()
    # rate × quantity
    amount = money_field()

    class Meta:
        indexes = [models.Index(fields=["sale"], name="sale_item_sale_idx")]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="sale_item_positive_quantity",
            ),
        ]

    def __str__(self):
        return f"{self.name} × {self.quantity} = {self.amount}"
