import datetime
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils.text import slugify

from books_core.models import (Company, Party, Payment, Product, Purchase,
                               Sale)
from books_core.services.sales import create_sale

PARTIES = [
    # name, role, pan
    ("Himal Traders", "vendor", "301000001"),
    ("Everest Suppliers", "supplier", "301000002"),
]

PRODUCTS = [
    # sku, name, category, mrp (VAT inclusive)
    ("RICE-25", "Rice 25kg", "Grocery", Decimal("2260.00")),
    ("OIL-1L", "Sunflower Oil 1L", "Grocery", Decimal("339.00")),
    ("TEA-500", "Tea 500g", "Beverage", Decimal("565.00")),
]


def unique_slug_for_company(name, max_tries=100):
    # "Demo Ltd" -> "demo-ltd", then "demo-ltd-1", "demo-ltd-2" if taken
    base = slugify(name) or "company"
    slug = base
    i = 1
    while Company.objects.filter(slug=slug).exists():
        slug = f"{base}-{i}"
        i += 1
        if i > max_tries:
            raise RuntimeError("Couldn't generate unique slug")
    return slug


class Command(BaseCommand):
    help = "Seeds the database with a demo company, parties, products and transactions."

    # Define command-line argument
    def add_arguments(self, parser):
        parser.add_argument(
            "--company",
            type=str,
            default="Demo Ltd",
            help="Name of the demo company (default: Demo Ltd)",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        com_name = options["company"]
        self.stdout.write(self.style.NOTICE(
            f"Seeding demo data for {com_name}..."))

        company = Company.objects.filter(name=com_name).first()
        if company is None:
            company = Company.objects.create(
                name=com_name, slug=unique_slug_for_company(com_name))
        self.stdout.write(f"Company: {company} ({company.slug})")

        if Sale.objects.for_company(company).exists():
            self.stdout.write(self.style.WARNING(
                "Company already has sales; nothing seeded."))
            return

        parties = []
        for name, role, pan in PARTIES:
            party, _ = Party.objects.get_or_create(
                company=company,
                pan_number=pan,
                defaults={
                    "name": name,
                    "role": role,
                    "phone": "01-4000000",
                    "address": "Kathmandu",
                },
            )
            parties.append(party)
        vendor, supplier = parties

        products = []
        for sku, name, category, mrp in PRODUCTS:
            product, _ = Product.objects.get_or_create(
                company=company,
                sku=sku,
                defaults={"name": name, "category": category, "mrp": mrp},
            )
            products.append(product)

        today = datetime.date.today()
        start = today - datetime.timedelta(days=10)

        create_sale(
            company,
            invoice_number="S-0001",
            invoice_date=start,
            billing_party=vendor,
            items=[
                {"product_id": products[0].pk, "quantity": 2},
                {"product_id": products[1].pk, "quantity": 5},
            ],
            discount_percentage=5,
        )
        create_sale(
            company,
            invoice_number="S-0002",
            invoice_date=start + datetime.timedelta(days=3),
            billing_party=vendor,
            direct_entry={"description": "Catering service", "amount": "11300"},
        )
        Purchase.objects.create(
            company=company,
            supplied_by=supplier,
            invoice_number="P-0001",
            invoice_date=start + datetime.timedelta(days=1),
            amount=Decimal("4520.00"),
            description="Packaging material",
        )
        Payment.objects.create(
            company=company,
            paid_by=vendor,
            type="cash",
            amount=Decimal("5000.00"),
            received_or_paid=True,
            invoice_date=start + datetime.timedelta(days=5),
            description="Part payment",
        )

        self.stdout.write(self.style.SUCCESS("Demo data seeded successfully!"))
