from django.contrib import admin, messages
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from ..services.sales import recalculate_sale

# ---------- Admin actions ----------


@admin.action(description="Recompute totals for selected sales")
def recompute_sale_totals(modeladmin, request, queryset):
    """
    Re-derive totals from the stored rates and amounts.
    Unchanged sales are left alone and get no edit-log row.
    """
    changed = 0
    failures = 0
    total = queryset.count()
    for sale in queryset.select_related("billing_party"):
        try:
            if recalculate_sale(sale, editor=request.user).changed:
                changed += 1
        except ValidationError as exc:
            failures += 1
            modeladmin.message_user(
                request,
                _("Could not recompute sale %(number)s: %(err)s") % {
                    "number": sale.invoice_number,
                    "err": "; ".join(exc.messages),
                },
                level=messages.ERROR,
            )

    modeladmin.message_user(
        request,
        _("Recomputed %(total)d sales, %(changed)d changed, %(failures)d failed.") % {
            "total": total,
            "changed": changed,
            "failures": failures,
        },
        level=messages.SUCCESS if failures == 0 else messages.WARNING,
    )
