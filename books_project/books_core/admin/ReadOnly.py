from django.contrib import admin


class ReadOnlyInline(admin.TabularInline):
    """Inline whose rows can be viewed but never added, changed or deleted."""
    extra = 0
    can_delete = False

    # make every model field readonly
    def get_readonly_fields(self, request, obj=None):
        return [f.name for f in self.model._meta.fields]

    def has_add_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
