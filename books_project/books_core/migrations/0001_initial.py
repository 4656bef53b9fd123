import decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Company",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("slug", models.SlugField(max_length=80, unique=True)),
                ("currency_code", models.CharField(default="NPR", max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name_plural": "companies",
            },
        ),
        migrations.CreateModel(
            name="Party",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("phone", models.CharField(max_length=32)),
                ("email", models.EmailField(blank=True, max_length=254, null=True)),
                ("address", models.CharField(max_length=255)),
                ("pan_number", models.CharField(max_length=32)),
                ("is_vatable", models.BooleanField(default=True)),
                ("role", models.CharField(choices=[("vendor", "Vendor"), ("supplier", "Supplier")], max_length=10)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="books_core.company")),
            ],
            options={
                "verbose_name_plural": "parties",
                "indexes": [
                    models.Index(fields=["company", "role"], name="party_company_role_idx"),
                    models.Index(fields=["company", "name"], name="party_company_name_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "pan_number"), name="uq_company_party_pan"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200)),
                ("sku", models.CharField(max_length=80)),
                ("category", models.CharField(blank=True, default="", max_length=120)),
                ("mrp", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="books_core.company")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "name"], name="product_company_name_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "sku"), name="uq_company_product_sku"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Sale",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("invoice_number", models.CharField(max_length=64)),
                ("invoice_date", models.DateField()),
                ("direct_description", models.CharField(blank=True, max_length=255, null=True)),
                ("direct_amount", models.DecimalField(blank=True, decimal_places=2, max_digits=18, null=True)),
                ("discount_percentage", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=5)),
                ("discount_amount", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("sub_total", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("taxable_amount", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("vat_amount", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("grand_total", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("bill_photos", models.JSONField(blank=True, default=list)),
                ("note", models.TextField(blank=True, null=True)),
                ("is_vatable", models.BooleanField(default=True)),
                ("is_cancelled", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("billing_party", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="sales", to="books_core.party")),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="books_core.company")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "invoice_date"], name="sale_company_date_idx"),
                    models.Index(fields=["company", "billing_party"], name="sale_company_party_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(fields=("company", "invoice_number"), name="uq_sale_company_number"),
                    models.CheckConstraint(
                        condition=models.Q(("discount_percentage__gte", 0), ("discount_percentage__lte", 100)),
                        name="sale_discount_percentage_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(blank=True, default="", max_length=200)),
                ("quantity", models.DecimalField(decimal_places=4, max_digits=14)),
                ("rate", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("amount", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, to="books_core.product")),
                ("sale", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="books_core.sale")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["sale"], name="sale_item_sale_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("quantity__gt", 0)), name="sale_item_positive_quantity"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SaleEditLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("description", models.TextField()),
                ("edited_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("edited_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("sale", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="edit_history_logs", to="books_core.sale")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["sale", "edited_at"], name="sale_edit_log_sale_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Purchase",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("invoice_number", models.CharField(max_length=64)),
                ("invoice_date", models.DateField()),
                ("amount", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("description", models.CharField(max_length=255)),
                ("note", models.TextField(blank=True, null=True)),
                ("is_vatable", models.BooleanField(default=True)),
                ("bill_photos", models.JSONField(blank=True, default=list)),
                ("is_cancelled", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="books_core.company")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("supplied_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="purchases", to="books_core.party")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "supplied_by", "invoice_date"], name="purchase_party_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Payment",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("type", models.CharField(choices=[("cheque", "Cheque"), ("fonepay", "Fonepay"), ("cash", "Cash"), ("bank_transfer", "Bank Transfer")], max_length=20)),
                ("amount", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("received_or_paid", models.BooleanField(default=True)),
                ("invoice_number", models.CharField(blank=True, max_length=64, null=True)),
                ("invoice_date", models.DateField()),
                ("payment_deposited_date", models.DateField(blank=True, null=True)),
                ("description", models.TextField(blank=True, null=True)),
                ("bill_photos", models.JSONField(blank=True, default=list)),
                ("is_cancelled", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="books_core.company")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("paid_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="payments", to="books_core.party")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "paid_by", "invoice_date"], name="payment_party_date_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SalesReturn",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("invoice_number", models.CharField(max_length=64)),
                ("invoice_date", models.DateField()),
                ("type", models.CharField(choices=[("credit_note", "Credit Note"), ("debit_note", "Debit Note")], default="credit_note", max_length=20)),
                ("amount", models.DecimalField(decimal_places=2, default=decimal.Decimal("0.00"), max_digits=18)),
                ("description", models.TextField(blank=True, null=True)),
                ("bill_photos", models.JSONField(blank=True, default=list)),
                ("is_cancelled", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("company", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, to="books_core.company")),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("returned_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="returns", to="books_core.party")),
            ],
            options={
                "indexes": [
                    models.Index(fields=["company", "returned_by", "invoice_date"], name="return_party_date_idx"),
                ],
            },
        ),
    ]
