from django.contrib import admin
from django.db.models import Prefetch

from books_core.models import Sale, SaleItem
from books_core.services.sales import SalePatch, resolve_sale_update

from .actions import recompute_sale_totals
from .inlines import SaleEditLogInline, SaleItemInline

# Totals are only ever written by the pricing service
FINANCIAL_FIELDS = (
    "sub_total",
    "discount_amount",
    "taxable_amount",
    "vat_amount",
    "grand_total",
)
# Pricing inputs; changing them here would leave the totals stale
ENTRY_FIELDS = ("direct_description", "direct_amount", "discount_percentage")

# Form fields that go through the sale service (and its edit log)
PATCH_FIELDS = ("invoice_number", "invoice_date", "billing_party", "note", "bill_photos")
FLAG_FIELDS = ("is_vatable", "is_cancelled")


# Register `Sale` model
@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "company",
        "invoice_number",
        "invoice_date",
        "billing_party",
        "discount_percentage",
        "grand_total",
        "is_cancelled",
    )
    list_filter = ("company", "is_cancelled", "invoice_date")
    search_fields = ("invoice_number", "billing_party__name")
    date_hierarchy = "invoice_date"
    actions = [recompute_sale_totals]
    inlines = [SaleItemInline, SaleEditLogInline]
    readonly_fields = (
        FINANCIAL_FIELDS + ENTRY_FIELDS + ("created_by", "created_at", "updated_at")
    )

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        # Fetch item rows with their products in one extra query
        return qs.select_related("company", "billing_party").prefetch_related(
            Prefetch(
                "items",
                queryset=SaleItem.objects.select_related("product"),
            )
        )

    # Sales are priced and created by the sale service only
    def has_add_permission(self, request):
        return False

    def get_readonly_fields(self, request, obj=None):
        # A cancelled sale is frozen
        if obj and obj.is_cancelled:
            return [f.name for f in self.model._meta.fields]
        readonly = list(super().get_readonly_fields(request, obj))
        if obj:
            readonly.append("company")
        return readonly

    def save_model(self, request, obj, form, change):
        # `obj` already carries the form values; diff against the stored row
        stored = Sale.objects.select_related("company", "billing_party").get(pk=obj.pk)

        flags = [name for name in FLAG_FIELDS if name in form.changed_data]
        for name in flags:
            setattr(stored, name, form.cleaned_data[name])

        patch = SalePatch(**{
            name: form.cleaned_data[name]
            for name in PATCH_FIELDS
            if name in form.changed_data
        })
        result = resolve_sale_update(stored, patch, editor=request.user)
        if flags and not result.changed:
            stored.save(update_fields=flags + ["updated_at"])
        obj.refresh_from_db()
