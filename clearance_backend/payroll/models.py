# payroll/models.py

"""
PAYROLL MODELS

Employee      master data read by payroll run generation
PayrollRun    one per month: DRAFT -> APPROVED -> DRAFT (unapprove)
PayrollItem   one employee line; net = base + allowances - deductions;
              voucher is filled in when the run is approved
"""

from __future__ import annotations

import uuid
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q


class Employee(models.Model):
    STATUS_ACTIVE = "ACTIVE"
    STATUS_INACTIVE = "INACTIVE"

    STATUS_CHOICES = [
        (STATUS_ACTIVE, "Active"),
        (STATUS_INACTIVE, "Inactive"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(max_length=150)
    department = models.CharField(max_length=100, blank=True, default="")
    start_date = models.DateField(null=True, blank=True)

    base_salary = models.DecimalField(max_digits=12, decimal_places=2)
    allowances = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))

    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_ACTIVE)
    deleted_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["name"],
                condition=Q(deleted_at__isnull=True),
                name="uniq_employee_name_not_deleted",
            )
        ]

    def __str__(self):
        return self.name


class PayrollRun(models.Model):
    STATUS_DRAFT = "DRAFT"
    STATUS_APPROVED = "APPROVED"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_APPROVED, "Approved"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    month = models.DateField(unique=True, help_text="First day of the payroll month")
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_DRAFT)
    total_net = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal("0.00"))

    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="approved_payroll_runs",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-month"]

    def __str__(self):
        return f"Payroll {self.month:%m/%Y} ({self.status})"

    def clean(self):
        if self.month and self.month.day != 1:
            raise ValidationError({"month": "month must be the first day of the month"})


class PayrollItem(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    run = models.ForeignKey(PayrollRun, on_delete=models.CASCADE, related_name="items")
    employee = models.ForeignKey(Employee, on_delete=models.PROTECT, related_name="payroll_items")

    base = models.DecimalField(max_digits=12, decimal_places=2)
    allowances = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    deductions = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal("0.00"))
    net = models.DecimalField(max_digits=12, decimal_places=2)

    voucher = models.ForeignKey(
        "accounting.Voucher",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="payroll_items",
    )

    class Meta:
        ordering = ["employee__name"]
        constraints = [
            models.UniqueConstraint(fields=["run", "employee"], name="uniq_payroll_item_employee"),
        ]

    def __str__(self):
        return f"{self.employee} {self.net}"
