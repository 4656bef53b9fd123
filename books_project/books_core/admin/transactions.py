from django.contrib import admin

from books_core.models import Payment, Purchase, SalesReturn


class PartyTransactionAdmin(admin.ModelAdmin):
    """Shared config for the purchase, payment and return tables."""
    party_field = None
    list_filter = ("company", "is_cancelled", "invoice_date")
    date_hierarchy = "invoice_date"
    readonly_fields = ("created_by", "created_at", "updated_at")

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("company", self.party_field)

    def save_model(self, request, obj, form, change):
        if not change and obj.created_by_id is None:
            obj.created_by = request.user
        super().save_model(request, obj, form, change)


@admin.register(Purchase)
class PurchaseAdmin(PartyTransactionAdmin):
    party_field = "supplied_by"
    list_display = (
        "id", "company", "invoice_number", "invoice_date", "supplied_by",
        "amount", "is_cancelled")
    search_fields = ("invoice_number", "supplied_by__name", "description")


@admin.register(Payment)
class PaymentAdmin(PartyTransactionAdmin):
    party_field = "paid_by"
    list_display = (
        "id", "company", "invoice_date", "paid_by", "type", "amount",
        "received_or_paid", "is_cancelled")
    list_filter = PartyTransactionAdmin.list_filter + ("type", "received_or_paid")
    search_fields = ("invoice_number", "paid_by__name")


@admin.register(SalesReturn)
class SalesReturnAdmin(PartyTransactionAdmin):
    party_field = "returned_by"
    list_display = (
        "id", "company", "invoice_number", "invoice_date", "returned_by",
        "type", "amount", "is_cancelled")
    list_filter = PartyTransactionAdmin.list_filter + ("type",)
    search_fields = ("invoice_number", "returned_by__name")
