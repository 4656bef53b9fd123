from django.conf import settings
from django.db import models
from ..managers import TenantManager
from .company import Company
from .party import Party
from .sale import money_field

RETURN_TYPES = [
    ("credit_note", "Credit Note"),
    ("debit_note", "Debit Note"),
]


# ---------- Returns ----------
# Credit note: goods came back from the party, reducing what they owe.
# Debit note: goods went back to the party, reducing what we owe.
class SalesReturn(models.Model):
    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    returned_by = models.ForeignKey(
        Party, on_delete=models.PROTECT, related_name="returns")

    invoice_number = models.CharField(max_length=64)
    invoice_date = models.DateField()
    type = models.CharField(
        max_length=20, choices=RETURN_TYPES, default="credit_note")
    amount = money_field()
    description = models.TextField(null=True, blank=True)
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
                fields=["company", "returned_by", "invoice_date"],
                name="return_party_date_idx",
            ),
        ]

    def __str__(self):
        return f"Return {self.invoice_number or self.pk} ({self.get_type_display()})"
