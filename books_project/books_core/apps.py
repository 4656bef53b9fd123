from django.apps import AppConfig


class BooksCoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "books_core"
    verbose_name = "Books"
