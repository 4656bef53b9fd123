from django.db import models

# -----------------------------------------
# Enforce tenant scoping across all models
# that belong to a company
# -----------------------------------------
class TenantQuerySet(models.QuerySet):
    def for_company(self, company):         # Add queryset helper
        return self.filter(company=company) # Apply filter

    def active(self, company):
        # Cancelled/void records never reach totals or ledgers
        return self.filter(company=company, is_cancelled=False)
    # Enables query:
    # Sale.objects.active(company)


# Attach TenantQuerySet to .objects
class TenantManager(models.Manager.from_queryset(TenantQuerySet)):
    pass
