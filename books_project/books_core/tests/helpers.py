import itertools
from decimal import Decimal

from ..models import Company, Party, Product

_seq = itertools.count(1)


def make_company(name="Test Co", slug=None):
    return Company.objects.create(name=name, slug=slug or f"co-{next(_seq)}")


def make_party(company, name="Himal Traders", role="vendor", pan=None):
    return Party.objects.create(
        company=company,
        name=name,
        role=role,
        phone="01-4000000",
        address="Kathmandu",
        pan_number=pan or f"PAN-{next(_seq)}",
    )


def make_product(company, mrp, name="Widget", sku=None):
    return Product.objects.create(
        company=company,
        name=name,
        sku=sku or f"SKU-{next(_seq)}",
        mrp=Decimal(mrp),
    )
