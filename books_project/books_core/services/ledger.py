import datetime
import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Dict, List

from django.core.exceptions import ValidationError

from ..exceptions import InvalidDateRange, NoTransactions, ReferenceNotFound
from ..models import Party, Payment, Purchase, Sale, SalesReturn
from ..money import ZERO, round_money
from .dates import coerce_date

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerRow:
    date: datetime.date
    voucher_number: str
    counterparty_label: str
    narration: str
    dr_amount: Decimal
    cr_amount: Decimal
    source_type: str
    source_id: int
    balance: Decimal = ZERO

    @property
    def balance_side(self):
        # positive running balance is labelled CR, negative DR
        if self.balance > 0:
            return "CR"
        if self.balance < 0:
            return "DR"
        return ""


@dataclass
class PartyLedger:
    party: Party
    date_from: datetime.date
    date_to: datetime.date
    rows: List[LedgerRow] = field(default_factory=list)
    totals: Dict[str, Decimal] = field(default_factory=dict)

    @property
    def closing_balance(self):
        return self.rows[-1].balance if self.rows else ZERO


# ----------------------------------------------
# Ledger sources
# ----------------------------------------------
class LedgerSource:
    """
    One kind of party transaction and how it lands on the ledger.
    Subclasses fix the model, party field, sign rule and sort priority.
    """
    source_type = ""
    totals_key = ""
    model = None
    party_field = ""
    # tie-break between sources on the same date (lower first)
    priority = 0

    def fetch(self, company, party, date_from, date_to):
        return (
            self.model.objects.active(company)
            .filter(**{
                self.party_field: party,
                "invoice_date__gte": date_from,
                "invoice_date__lte": date_to,
            })
            .order_by("invoice_date", "pk")
        )

    def amount(self, record) -> Decimal:
        return record.amount

    def to_row(self, record, party) -> LedgerRow:
        raise NotImplementedError

    def _row(self, record, party, narration, dr=ZERO, cr=ZERO):
        return LedgerRow(
            date=record.invoice_date,
            voucher_number=record.invoice_number or "",
            counterparty_label=party.name,
            narration=narration,
            dr_amount=round_money(dr),
            cr_amount=round_money(cr),
            source_type=self.source_type,
            source_id=record.pk,
        )


class SaleSource(LedgerSource):
    # the party owes the business
    source_type = "sale"
    totals_key = "sales"
    model = Sale
    party_field = "billing_party"
    priority = 0

    def amount(self, record):
        return record.grand_total

    def to_row(self, record, party):
        return self._row(record, party, "SALES", dr=record.grand_total)


class PurchaseSource(LedgerSource):
    # the business owes the party
    source_type = "purchase"
    totals_key = "purchases"
    model = Purchase
    party_field = "supplied_by"
    priority = 1

    def to_row(self, record, party):
        return self._row(record, party, "PURCHASE", cr=record.amount)


class PaymentSource(LedgerSource):
    source_type = "payment"
    totals_key = "payments"
    model = Payment
    party_field = "paid_by"
    priority = 2

    def to_row(self, record, party):
        if record.received_or_paid:
            return self._row(record, party, "PAYMENT RECEIVED", cr=record.amount)
        return self._row(record, party, "PAYMENT SENT", dr=record.amount)


class ReturnSource(LedgerSource):
    source_type = "return"
    totals_key = "returns"
    model = SalesReturn
    party_field = "returned_by"
    priority = 3

    def to_row(self, record, party):
        narration = "RETURN"
        if record.description:
            narration = f"RETURN: {record.description}"
        if record.type == "debit_note":
            return self._row(record, party, narration, dr=record.amount)
        return self._row(record, party, narration, cr=record.amount)


LEDGER_SOURCES = (SaleSource(), PurchaseSource(), PaymentSource(), ReturnSource())


# ----------------------------------------------
# Aggregation
# ----------------------------------------------
def parse_date_range(date_from, date_to):
    """Validate both bounds before anything touches the database."""
    try:
        start = coerce_date(date_from, "From date")
        end = coerce_date(date_to, "To date")
    except ValidationError as exc:
        raise InvalidDateRange(exc.messages)
    if start > end:
        raise InvalidDateRange("Start date cannot be later than end date.")
    return start, end


def resolve_ledger_party(company, party_id) -> Party:
    try:
        return Party.objects.for_company(company).get(pk=party_id)
    except (Party.DoesNotExist, ValueError, TypeError):
        raise ReferenceNotFound("Party", [party_id])


def merge_rows(batches):
    """
    Merge per-source rows into one chronological sequence.
    batches: [(source, [rows in fetch order])]
    Same-day rows order by source priority, then fetch order.
    """
    keyed = []
    for source, rows in batches:
        for index, row in enumerate(rows):
            keyed.append(((row.date, source.priority, index), row))
    keyed.sort(key=lambda pair: pair[0])
    return [row for _, row in keyed]


def apply_running_balance(rows):
    """balance_i = balance_(i-1) + cr_i - dr_i, starting from 0."""
    balance = ZERO
    out = []
    for row in rows:
        balance = round_money(balance + row.cr_amount - row.dr_amount)
        out.append(replace(row, balance=balance))
    return out


def build_party_ledger(company, party_id, date_from, date_to,
                       sources=LEDGER_SOURCES) -> PartyLedger:
    """
    Chronological debit/credit statement for one party.

    Raises InvalidDateRange, ReferenceNotFound, or NoTransactions when the
    party has no activity in the range.
    """
    start, end = parse_date_range(date_from, date_to)
    party = resolve_ledger_party(company, party_id)

    batches = []
    totals = {}
    for source in sources:
        records = list(source.fetch(company, party, start, end))
        batches.append((source, [source.to_row(r, party) for r in records]))
        totals[source.totals_key] = round_money(
            sum((source.amount(r) for r in records), ZERO))

    rows = apply_running_balance(merge_rows(batches))
    if not rows:
        logger.info(
            "No ledger activity for party %s between %s and %s",
            party.pk, start, end,
        )
        raise NoTransactions(party, start, end)

    totals["total_dr"] = round_money(sum((r.dr_amount for r in rows), ZERO))
    totals["total_cr"] = round_money(sum((r.cr_amount for r in rows), ZERO))
    totals["closing_balance"] = rows[-1].balance

    logger.info(
        "Built ledger for party %s with %d rows",
        party.pk,
        len(rows),
        extra={"party_id": party.pk, "rows": len(rows)},
    )
    return PartyLedger(
        party=party, date_from=start, date_to=end, rows=rows, totals=totals)
