from decimal import Decimal
from django.core.exceptions import ValidationError
from django.db import models
from ..managers import TenantManager
from .company import Company


# ---------- Products ----------
class Product(models.Model):  # Something the company sells on invoices

    # Multi-tenant: each product belongs to a company
    company = models.ForeignKey(Company, on_delete=models.CASCADE)

    name = models.CharField(max_length=200)
    # Stock Keeping Unit, unique per company
    sku = models.CharField(max_length=80)
    category = models.CharField(max_length=120, blank=True, default="")

    # Maximum retail price, VAT inclusive.
    # Invoice rates are derived from it by stripping VAT.
    mrp = models.DecimalField(
        max_digits=18, decimal_places=2, default=Decimal("0.00")
    )

    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        indexes = [
            models.Index(fields=["company", "name"], name="product_company_name_idx"),
        ]

        # Ensure each SKU is unique within a company
        constraints = [
            models.UniqueConstraint(
                fields=["company", "sku"], name="uq_company_product_sku"
            )
        ]

    def __str__(self):
        return self.name

    def clean(self):
        if self.mrp is not None and self.mrp < 0:
            raise ValidationError("MRP must be >= 0")

    def save(self, *args, **kwargs):
        self.full_clean()  # run validations before saving
        return super().save(*args, **kwargs)
