"""
MIGRATION: CREATE accounting core tables

- Bank / BankAccount / ExpenseCategory (master data)
- AppSetting / Treasury (single-row tables)
- Voucher / Invoice (documents)
- LedgerEntry / TreasuryTransaction (append-only)
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.db import migrations, models
import django.core.validators
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="AppSetting",
            fields=[
                (
                    "id",
                    models.CharField(
                        default="single_row",
                        editable=False,
                        max_length=20,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("prevent_negative_treasury", models.BooleanField(default=False)),
                ("prevent_negative_bank", models.BooleanField(default=False)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Application Setting",
                "verbose_name_plural": "Application Settings",
            },
        ),
        migrations.CreateModel(
            name="Bank",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=150, unique=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="ExpenseCategory",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(max_length=150, unique=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "ordering": ["name"],
                "verbose_name_plural": "Expense Categories",
            },
        ),
        migrations.CreateModel(
            name="BankAccount",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("account_no", models.CharField(max_length=64, unique=True)),
                (
                    "opening_balance",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14),
                ),
                (
                    "current_balance",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "bank",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="accounts",
                        to="accounting.bank",
                    ),
                ),
            ],
            options={
                "ordering": ["bank__name", "account_no"],
            },
        ),
        migrations.CreateModel(
            name="Treasury",
            fields=[
                (
                    "id",
                    models.CharField(
                        default="single_row",
                        editable=False,
                        max_length=20,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "opening_balance",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True),
                ),
                (
                    "current_balance",
                    models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14),
                ),
                ("opening_set_at", models.DateTimeField(blank=True, null=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "opening_set_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="+",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Treasury",
                "verbose_name_plural": "Treasury",
            },
        ),
        migrations.CreateModel(
            name="Voucher",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("code", models.CharField(max_length=32, unique=True)),
                (
                    "type",
                    models.CharField(
                        choices=[("RECEIPT", "Receipt"), ("PAYMENT", "Payment")],
                        max_length=10,
                    ),
                ),
                (
                    "party_type",
                    models.CharField(
                        choices=[
                            ("CUSTOMER", "Customer"),
                            ("EMPLOYEE", "Employee"),
                            ("AGENT", "Agent"),
                            ("OTHER", "Other"),
                        ],
                        max_length=10,
                    ),
                ),
                ("party_id", models.CharField(blank=True, default="", max_length=64)),
                ("party_name", models.CharField(blank=True, default="", max_length=200)),
                (
                    "method",
                    models.CharField(
                        choices=[("CASH", "Cash"), ("BANK_TRANSFER", "Bank Transfer")],
                        default="CASH",
                        max_length=16,
                    ),
                ),
                ("reference_number", models.CharField(blank=True, default="", max_length=100)),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("note", models.TextField(blank=True, default="")),
                ("date", models.DateField(default=django.utils.timezone.localdate)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "bank_account",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="vouchers",
                        to="accounting.bankaccount",
                    ),
                ),
                (
                    "category",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="vouchers",
                        to="accounting.expensecategory",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="vouchers",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "-created_at"],
                "indexes": [
                    models.Index(fields=["type", "date"], name="voucher_type_date_idx"),
                    models.Index(fields=["party_type", "party_id"], name="voucher_party_idx"),
                    models.Index(fields=["method"], name="voucher_method_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        primary_key=True,
                        default=uuid.uuid4,
                        editable=False,
                        serialize=False,
                    ),
                ),
                ("code", models.CharField(max_length=32, unique=True)),
                (
                    "type",
                    models.CharField(
                        choices=[
                            ("EXPORT", "Export"),
                            ("IMPORT", "Import"),
                            ("TRANSIT", "Transit"),
                            ("FREE", "Free"),
                        ],
                        max_length=10,
                    ),
                ),
                ("customer_id", models.CharField(max_length=64)),
                ("customs_no", models.CharField(blank=True, default="", max_length=100)),
                ("date", models.DateField(default=django.utils.timezone.localdate)),
                (
                    "total",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="invoices",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-date", "-created_at"],
                "indexes": [
                    models.Index(fields=["type", "date"], name="invoice_type_date_idx"),
                    models.Index(fields=["customer_id"], name="invoice_customer_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "source_type",
                    models.CharField(
                        choices=[
                            ("VOUCHER", "Voucher"),
                            ("INVOICE", "Invoice"),
                            ("TRIP", "Trip"),
                            ("ADDITIONAL_FEE", "Additional Fee"),
                            ("PAYROLL", "Payroll"),
                        ],
                        max_length=20,
                    ),
                ),
                ("source_id", models.CharField(max_length=64)),
                ("debit_account", models.CharField(max_length=128)),
                ("credit_account", models.CharField(max_length=128)),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Positive monetary value",
                        max_digits=14,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                ("currency", models.CharField(default="SAR", max_length=3)),
                (
                    "exchange_rate",
                    models.DecimalField(decimal_places=6, default=Decimal("1"), max_digits=12),
                ),
                ("description", models.TextField(blank=True, default="")),
                (
                    "created_at",
                    models.DateTimeField(default=django.utils.timezone.now, editable=False),
                ),
            ],
            options={
                "verbose_name": "Ledger Entry",
                "verbose_name_plural": "Ledger Entries",
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["debit_account"], name="ledger_debit_idx"),
                    models.Index(fields=["credit_account"], name="ledger_credit_idx"),
                    models.Index(fields=["source_type", "source_id"], name="ledger_source_idx"),
                    models.Index(fields=["created_at"], name="ledger_created_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="ledger_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("debit_account", models.F("credit_account")), _negated=True),
                        name="ledger_debit_ne_credit",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="TreasuryTransaction",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("date", models.DateField(default=django.utils.timezone.localdate)),
                (
                    "type",
                    models.CharField(choices=[("IN", "In"), ("OUT", "Out")], max_length=3),
                ),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("note", models.CharField(blank=True, default="", max_length=255)),
                ("balance_after", models.DecimalField(decimal_places=2, max_digits=14)),
                (
                    "created_at",
                    models.DateTimeField(default=django.utils.timezone.now, editable=False),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="treasury_transactions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "voucher",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="treasury_transactions",
                        to="accounting.voucher",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at", "-id"],
                "indexes": [
                    models.Index(fields=["date"], name="treasury_txn_date_idx"),
                    models.Index(fields=["created_at"], name="treasury_txn_created_idx"),
                ],
            },
        ),
    ]
