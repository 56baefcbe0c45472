# accounting/models/voucher.py

"""
======================================================
PATH: accounting/models/voucher.py
======================================================
VOUCHER MODEL

A receipt (money in) or payment (money out) document.

Invariants (enforced in clean()):
- OTHER parties carry party_name; every other party type carries party_id
- bank_account is required iff method == BANK_TRANSFER
- category is required for OTHER-party payments
- amount > 0

Balance and ledger side effects are NOT applied here; they belong to
accounting.services.voucher_service.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from accounting.models.banking import BankAccount
from accounting.models.expense_category import ExpenseCategory


class Voucher(models.Model):
    # ---------------- TYPE ----------------
    TYPE_RECEIPT = "RECEIPT"
    TYPE_PAYMENT = "PAYMENT"

    TYPE_CHOICES = [
        (TYPE_RECEIPT, "Receipt"),
        (TYPE_PAYMENT, "Payment"),
    ]

    # ---------------- PARTY ----------------
    PARTY_CUSTOMER = "CUSTOMER"
    PARTY_EMPLOYEE = "EMPLOYEE"
    PARTY_AGENT = "AGENT"
    PARTY_OTHER = "OTHER"

    PARTY_CHOICES = [
        (PARTY_CUSTOMER, "Customer"),
        (PARTY_EMPLOYEE, "Employee"),
        (PARTY_AGENT, "Agent"),
        (PARTY_OTHER, "Other"),
    ]

    # ---------------- METHOD ----------------
    METHOD_CASH = "CASH"
    METHOD_BANK_TRANSFER = "BANK_TRANSFER"

    METHOD_CHOICES = [
        (METHOD_CASH, "Cash"),
        (METHOD_BANK_TRANSFER, "Bank Transfer"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=32, unique=True)

    type = models.CharField(max_length=10, choices=TYPE_CHOICES)

    party_type = models.CharField(max_length=10, choices=PARTY_CHOICES)
    party_id = models.CharField(max_length=64, blank=True, default="")
    party_name = models.CharField(max_length=200, blank=True, default="")

    method = models.CharField(max_length=16, choices=METHOD_CHOICES, default=METHOD_CASH)
    bank_account = models.ForeignKey(
        BankAccount,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="vouchers",
    )
    reference_number = models.CharField(max_length=100, blank=True, default="")

    amount = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    note = models.TextField(blank=True, default="")
    date = models.DateField(default=timezone.localdate)

    category = models.ForeignKey(
        ExpenseCategory,
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="vouchers",
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="vouchers",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["type", "date"], name="voucher_type_date_idx"),
            models.Index(fields=["party_type", "party_id"], name="voucher_party_idx"),
            models.Index(fields=["method"], name="voucher_method_idx"),
        ]

    def __str__(self):
        return f"{self.code} {self.type} {self.amount}"

    @property
    def is_cash(self) -> bool:
        return self.method == self.METHOD_CASH

    def clean(self):
        self.party_id = (self.party_id or "").strip()
        self.party_name = (self.party_name or "").strip()

        if self.party_type == self.PARTY_OTHER:
            if not self.party_name:
                raise ValidationError({"party_name": "party_name is required for OTHER parties"})
        elif not self.party_id:
            raise ValidationError({"party_id": "party_id is required for this party type"})

        if self.method == self.METHOD_BANK_TRANSFER and not self.bank_account_id:
            raise ValidationError({"bank_account": "A bank account is required for bank transfers"})

        if self.method == self.METHOD_CASH and self.bank_account_id:
            raise ValidationError({"bank_account": "Cash vouchers cannot reference a bank account"})

        if (
            self.type == self.TYPE_PAYMENT
            and self.party_type == self.PARTY_OTHER
            and not self.category_id
        ):
            raise ValidationError({"category": "An expense category is required for this payment"})

        if self.amount is None or self.amount <= 0:
            raise ValidationError({"amount": "Amount must be > 0"})
