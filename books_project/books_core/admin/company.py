from django.contrib import admin

from books_core.models import Company, Party, Product


# Register `Company` model in admin with this custom config
@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    """a clean admin table for browsing companies"""

    list_display = ("id", "name", "slug", "currency_code", "created_at")
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}
    ordering = ("name",)


@admin.register(Party)
class PartyAdmin(admin.ModelAdmin):
    list_display = (
        "id", "company", "name", "role", "phone", "pan_number", "is_vatable")
    list_filter = ("company", "role", "is_vatable")
    search_fields = ("name", "pan_number", "phone", "email")

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("company")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "company", "sku", "name", "category", "mrp")
    list_filter = ("company", "category")
    search_fields = ("sku", "name")

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related("company")
