from django.conf import settings
from django.db import models
from ..managers import TenantManager
from .company import Company
from .party import Party
from .sale import money_field


# ---------- Purchases ----------
# Supplier bill: the business owes the supplying party
class Purchase(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    # prevent deleting a party who supplied goods
    supplied_by = models.ForeignKey(
        Party, on_delete=models.PROTECT, related_name="purchases")

    # Supplier's bill number (e.g. "BILL-4567")
    invoice_number = models.CharField(max_length=64)
    invoice_date = models.DateField()
    amount = money_field()
    description = models.CharField(max_length=255)
    note = models.TextField(null=True, blank=True)
    is_vatable = models.BooleanField(default=True)
    bill_photos = models.JSONField(default=list, blank=True)
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

    class Meta:
        indexes = [
            models.Index(
                fields=["company", "supplied_by", "invoice_date"],
                name="purchase_party_date_idx",
            ),
        ]

    def __str__(self):
        return f"Purchase {self.invoice_number or self.pk}"
