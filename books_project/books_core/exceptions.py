from django.core.exceptions import ValidationError


class ReferenceNotFound(Exception):
    """Raised when a referenced product or party does not exist in the company."""

    def __init__(self, model, ids):
        self.model = model
        self.ids = list(ids)
        joined = ", ".join(str(i) for i in self.ids)
        super().__init__(f"{model} not found: {joined}")


class EntryModeError(ValidationError):
    """Raised when a sale has both items and a direct entry, or neither."""
    pass


class InvalidDateRange(ValidationError):
    """Raised when a ledger date range is missing, malformed or inverted."""
    pass


class NoTransactions(Exception):
    """Raised when a party has no ledger activity in the requested range."""

    def __init__(self, party, date_from, date_to):
        self.party = party
        self.date_from = date_from
        self.date_to = date_to
        super().__init__(
            f"No transactions found for {party} between {date_from} and {date_to}"
        )
