from django.conf import settings
from django.db import models
from ..managers import TenantManager
from .company import Company
from .party import Party
from .sale import money_field

PAYMENT_TYPES = [
    # Keeps payment method standardized across records
    ("cheque", "Cheque"),
    ("fonepay", "Fonepay"),
    ("cash", "Cash"),
    ("bank_transfer", "Bank Transfer"),
]


# ---------- Payments ----------
class Payment(models.Model):  # Money moving between the business and a party
    company = models.ForeignKey(Company, on_delete=models.CASCADE)
    paid_by = models.ForeignKey(
        Party, on_delete=models.PROTECT, related_name="payments")

    type = models.CharField(max_length=20, choices=PAYMENT_TYPES)
    amount = money_field()
    # True = received by the business, False = paid out to the party
    received_or_paid = models.BooleanField(default=True)

    invoice_number = models.CharField(max_length=64, null=True, blank=True)
    # date the payment was received or sent
    invoice_date = models.DateField()
    payment_deposited_date = models.DateField(null=True, blank=True)
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
                fields=["company", "paid_by", "invoice_date"],
                name="payment_party_date_idx",
            ),
        ]

    def __str__(self):
        direction = "received" if self.received_or_paid else "paid"
        return f"Payment {direction} {self.amount} ({self.get_type_display()})"
