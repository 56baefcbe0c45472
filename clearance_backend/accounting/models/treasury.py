# accounting/models/treasury.py

"""
TREASURY (CASH) MODELS

Treasury:
- Single-row table keyed by SINGLETON_ID
- opening_balance is set exactly once (opening_set_at guards it)
- current_balance moves with every cash voucher

TreasuryTransaction:
- Append-only cash subledger
- balance_after is the treasury balance right after the row was written;
  rows in (created_at, id) order reconstruct the full balance history
"""

from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone


class Treasury(models.Model):
    SINGLETON_ID = "single_row"

    id = models.CharField(primary_key=True, max_length=20, default=SINGLETON_ID, editable=False)

    opening_balance = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    current_balance = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    opening_set_at = models.DateTimeField(null=True, blank=True)
    opening_set_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Treasury"
        verbose_name_plural = "Treasury"

    def __str__(self):
        return f"Treasury balance {self.current_balance}"

    @property
    def is_opening_set(self) -> bool:
        return self.opening_set_at is not None

    @classmethod
    def load(cls) -> "Treasury":
        obj, _ = cls.objects.get_or_create(id=cls.SINGLETON_ID)
        return obj


class TreasuryTransaction(models.Model):
    IN = "IN"
    OUT = "OUT"

    TYPES = [
        (IN, "In"),
        (OUT, "Out"),
    ]

    date = models.DateField(default=timezone.localdate)
    type = models.CharField(max_length=3, choices=TYPES)
    amount = models.DecimalField(max_digits=14, decimal_places=2)
    note = models.CharField(max_length=255, blank=True, default="")
    balance_after = models.DecimalField(max_digits=14, decimal_places=2)

    voucher = models.ForeignKey(
        "accounting.Voucher",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="treasury_transactions",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="treasury_transactions",
    )

    created_at = models.DateTimeField(default=timezone.now, editable=False)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["date"], name="treasury_txn_date_idx"),
            models.Index(fields=["created_at"], name="treasury_txn_created_idx"),
        ]

    def __str__(self):
        return f"{self.type} {self.amount} (balance {self.balance_after})"

    def clean(self):
        if self.type not in (self.IN, self.OUT):
            raise ValidationError("Invalid treasury transaction type")
        if self.amount is None or self.amount <= 0:
            raise ValidationError("Treasury transaction amount must be > 0")

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValidationError("TreasuryTransaction records are append-only")

        self.full_clean()
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("TreasuryTransaction records are append-only and cannot be deleted")
