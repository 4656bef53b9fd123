import logging

from celery import shared_task
from django.contrib.auth import get_user_model

logger = logging.getLogger(__name__)


@shared_task  # register this function as a Celery task
def recompute_company_sales(company_id, editor_id=None):
    """Recalculate every live sale of a company; returns how many changed."""
    # import lazily to avoid circular imports at module import time
    from .models import Sale
    from .services.sales import recalculate_sale

    editor = None
    if editor_id is not None:
        editor = get_user_model().objects.filter(pk=editor_id).first()

    changed = 0
    sales = (
        Sale.objects.filter(company_id=company_id, is_cancelled=False)
        .select_related("company", "billing_party")
        .order_by("pk")
    )
    for sale in sales:
        if recalculate_sale(sale, editor=editor).changed:
            changed += 1

    logger.info(
        "Recomputed sales for company %s: %d changed",
        company_id,
        changed,
        extra={"company_id": company_id, "changed": changed},
    )
    return changed
