from django.core.management.base import BaseCommand, CommandError

from books_core.exceptions import (InvalidDateRange, NoTransactions,
                                   ReferenceNotFound)
from books_core.models import Company
from books_core.services.ledger import build_party_ledger

ROW_FORMAT = "{:<10}  {:<14}  {:<24}  {:>12}  {:>12}  {:>14}"


class Command(BaseCommand):
    help = "Print a party's ledger with running balance for a date range."

    def add_arguments(self, parser):
        parser.add_argument("--company", required=True, help="Company slug")
        parser.add_argument("--party", required=True, help="Party id")
        parser.add_argument(
            "--from", dest="date_from", required=True, help="Start date (YYYY-MM-DD)")
        parser.add_argument(
            "--to", dest="date_to", required=True, help="End date (YYYY-MM-DD)")

    def handle(self, *args, **options):
        try:
            company = Company.objects.get(slug=options["company"])
        except Company.DoesNotExist:
            raise CommandError(f"Company {options['company']} not found")

        try:
            ledger = build_party_ledger(
                company, options["party"], options["date_from"], options["date_to"])
        except InvalidDateRange as exc:
            raise CommandError("; ".join(exc.messages))
        except (ReferenceNotFound, NoTransactions) as exc:
            raise CommandError(str(exc))

        self.stdout.write(self.style.MIGRATE_HEADING(
            f"Ledger for {ledger.party.name}: {ledger.date_from} to {ledger.date_to}"))
        self.stdout.write(ROW_FORMAT.format(
            "Date", "Voucher", "Particulars", "Debit", "Credit", "Balance"))
        for row in ledger.rows:
            balance = f"{abs(row.balance)} {row.balance_side}".strip()
            self.stdout.write(ROW_FORMAT.format(
                row.date.isoformat(),
                row.voucher_number[:14],
                row.narration[:24],
                row.dr_amount or "",
                row.cr_amount or "",
                balance,
            ))

        totals = ledger.totals
        self.stdout.write(ROW_FORMAT.format(
            "", "", "Total", totals["total_dr"], totals["total_cr"], ""))
        self.stdout.write(
            f"Sales {totals['sales']} | Purchases {totals['purchases']} | "
            f"Payments {totals['payments']} | Returns {totals['returns']}")
        self.stdout.write(self.style.SUCCESS(
            f"Closing balance: {totals['closing_balance']}"))
