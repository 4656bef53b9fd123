import datetime

from django.core.exceptions import ValidationError
from django.utils.dateparse import parse_date


def coerce_date(value, label="Date") -> datetime.date:
    """Accept a date, a datetime or an ISO "YYYY-MM-DD" string."""
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if not value:
        raise ValidationError(f"{label} is required")
    try:
        parsed = parse_date(str(value).strip())
    except ValueError:
        # well formed but impossible, e.g. 2025-02-30
        parsed = None
    if parsed is None:
        raise ValidationError(
            f"{label} must be a valid date in YYYY-MM-DD format")
    return parsed
