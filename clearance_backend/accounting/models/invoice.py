# accounting/models/invoice.py

"""
INVOICE (ledger-relevant header only)

Invoice lines, templates and printing live outside the accounting core.
Customers are referenced by opaque id.
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class Invoice(models.Model):
    TYPE_EXPORT = "EXPORT"
    TYPE_IMPORT = "IMPORT"
    TYPE_TRANSIT = "TRANSIT"
    TYPE_FREE = "FREE"

    TYPE_CHOICES = [
        (TYPE_EXPORT, "Export"),
        (TYPE_IMPORT, "Import"),
        (TYPE_TRANSIT, "Transit"),
        (TYPE_FREE, "Free"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    code = models.CharField(max_length=32, unique=True)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES)

    customer_id = models.CharField(max_length=64)
    customs_no = models.CharField(max_length=100, blank=True, default="")

    date = models.DateField(default=timezone.localdate)
    total = models.DecimalField(
        max_digits=14,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="invoices",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date", "-created_at"]
        indexes = [
            models.Index(fields=["type", "date"], name="invoice_type_date_idx"),
            models.Index(fields=["customer_id"], name="invoice_customer_idx"),
        ]

    def __str__(self):
        return f"{self.code} {self.total}"
