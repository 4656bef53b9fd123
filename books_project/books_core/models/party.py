from django.db import models
from ..managers import TenantManager
from .company import Company

PARTY_ROLE_CHOICES = [
    ("vendor", "Vendor"),
    ("supplier", "Supplier"),
]


# ---------- Party ----------
# Anyone the business trades with: billed on sales,
# supplies purchases, sends or receives payments
class Party(models.Model):
    # Multi-tenant: every party belongs to a single company.
    company = models.ForeignKey(Company, on_delete=models.CASCADE)

    # The party's legal or trade name
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=32)
    email = models.EmailField(null=True, blank=True)
    address = models.CharField(max_length=255)

    # Permanent Account Number (tax registration)
    pan_number = models.CharField(max_length=32)
    is_vatable = models.BooleanField(default=True)
    role = models.CharField(max_length=10, choices=PARTY_ROLE_CHOICES)

    created_at = models.DateTimeField(auto_now_add=True)

    # Enforce tenant scoping
    objects = TenantManager()

    class Meta:
        verbose_name_plural = "parties"
        indexes = [
            models.Index(fields=["company", "role"], name="party_company_role_idx"),
            models.Index(fields=["company", "name"], name="party_company_name_idx"),
        ]

        # PAN is unique per tenant
        constraints = [
            models.UniqueConstraint(
                fields=["company", "pan_number"], name="uq_company_party_pan"
            ),
        ]

    def __str__(self):
        return self.name
