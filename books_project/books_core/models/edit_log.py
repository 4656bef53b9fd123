from django.conf import settings
from django.db import models
from django.utils import timezone
from .sale import Sale


# ---------- Sale edit history ----------
class SaleEditLog(models.Model):
    """Append-only, human-readable record of one edit to a sale.

    Rows are written oldest first; readers sort newest first.
    """
    sale = models.ForeignKey(
        Sale, on_delete=models.CASCADE, related_name="edit_history_logs")
    # e.g. "Ram has changed Grand Total from 1000 to 1200"
    description = models.TextField()
    # Nullable for system recomputations (background jobs)
    edited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )
    edited_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [
            models.Index(fields=["sale", "edited_at"], name="sale_edit_log_sale_idx"),
        ]

    def __str__(self):
        return f"[{self.edited_at:%Y-%m-%d %H:%M}] {self.description}"
