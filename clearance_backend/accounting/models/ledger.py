# accounting/models/ledger.py

"""
======================================================
PATH: accounting/models/ledger.py
======================================================
LEDGER ENTRY MODEL

One double-entry posting: a single row carries both the debit and the
credit side of a financial event.

Guarantees:
- Immutable once created (no updates, no deletes)
- Amount is always positive
- debit_account != credit_account (model validation + DB check constraint)
- Account codes are opaque strings (see accounting.account_codes)
"""

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone


class LedgerEntry(models.Model):
    SOURCE_VOUCHER = "VOUCHER"
    SOURCE_INVOICE = "INVOICE"
    SOURCE_TRIP = "TRIP"
    SOURCE_ADDITIONAL_FEE = "ADDITIONAL_FEE"
    SOURCE_PAYROLL = "PAYROLL"

    SOURCE_TYPES = [
        (SOURCE_VOUCHER, "Voucher"),
        (SOURCE_INVOICE, "Invoice"),
        (SOURCE_TRIP, "Trip"),
        (SOURCE_ADDITIONAL_FEE, "Additional Fee"),
        (SOURCE_PAYROLL, "Payroll"),
    ]

    source_type = models.CharField(max_length=20, choices=SOURCE_TYPES)
    source_id = models.CharField(max_length=64)

    debit_account = models.CharField(max_length=128)
    credit_account = models.CharField(max_length=128)

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Positive monetary value",
    )
    currency = models.CharField(max_length=3, default="SAR")
    exchange_rate = models.DecimalField(max_digits=12, decimal_places=6, default=Decimal("1"))

    description = models.TextField(blank=True, default="")

    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        verbose_name = "Ledger Entry"
        verbose_name_plural = "Ledger Entries"
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["debit_account"], name="ledger_debit_idx"),
            models.Index(fields=["credit_account"], name="ledger_credit_idx"),
            models.Index(fields=["source_type", "source_id"], name="ledger_source_idx"),
            models.Index(fields=["created_at"], name="ledger_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(amount__gt=0),
                name="ledger_amount_positive",
            ),
            models.CheckConstraint(
                condition=~Q(debit_account=F("credit_account")),
                name="ledger_debit_ne_credit",
            ),
        ]

    def __str__(self):
        return f"{self.debit_account} / {self.credit_account} {self.amount}"

    def clean(self):
        self.debit_account = (self.debit_account or "").strip()
        self.credit_account = (self.credit_account or "").strip()

        if not self.debit_account or not self.credit_account:
            raise ValidationError("Both debit_account and credit_account are required")

        if self.debit_account == self.credit_account:
            raise ValidationError("debit_account and credit_account must differ")

        if self.amount is None or self.amount <= 0:
            raise ValidationError("Ledger amount must be > 0")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("LedgerEntry records are immutable and cannot be modified")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("LedgerEntry records are immutable and cannot be deleted")
