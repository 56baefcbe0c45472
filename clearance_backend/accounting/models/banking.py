# accounting/models/banking.py

"""
BANKS AND BANK ACCOUNTS

BankAccount.current_balance is only ever moved by voucher and payroll
postings (accounting.services.balance_service). opening_balance is fixed
at creation.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models


class Bank(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=150, unique=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class BankAccount(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    bank = models.ForeignKey(Bank, on_delete=models.PROTECT, related_name="accounts")
    account_no = models.CharField(max_length=64, unique=True)

    opening_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))
    current_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["bank__name", "account_no"]

    def __str__(self):
        return f"{self.bank.name} - {self.account_no}"

    def save(self, *args, **kwargs):
        if not self._state.adding:
            stored = (
                BankAccount.objects.filter(pk=self.pk)
                .values_list("opening_balance", flat=True)
                .first()
            )
            if stored is not None and stored != self.opening_balance:
                raise ValidationError("Bank account opening balance cannot be changed")
        return super().save(*args, **kwargs)
