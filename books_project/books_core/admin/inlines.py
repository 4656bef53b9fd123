from books_core.models import SaleEditLog, SaleItem

from .ReadOnly import ReadOnlyInline


class SaleItemInline(ReadOnlyInline):
    """Shows item rows under a Sale page. Items change through the sale service."""

    model = SaleItem
    fields = ("product", "name", "quantity", "rate", "amount")
    ordering = ("id",)

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("product")


class SaleEditLogInline(ReadOnlyInline):
    """Edit history, newest first. Written only by the sale service."""

    model = SaleEditLog
    fields = ("edited_at", "edited_by", "description")
    ordering = ("-edited_at", "-id")
