# payroll/services/payroll_service.py

"""
======================================================
PATH: payroll/services/payroll_service.py
======================================================
PAYROLL SETTLEMENT ENGINE

Run lifecycle: DRAFT --approve--> APPROVED --unapprove--> DRAFT

approve_payroll_run():
    1. reject unless DRAFT
    2. payment method defaults to CASH
    3. negative-balance guard checked ONCE against the run total
    4. one PAYMENT / EMPLOYEE voucher per item with net > 0, through the
       voucher engine (balance delta + ledger post, source PAYROLL)
    5. status APPROVED, approved_at / approved_by stamped
    All inside one atomic transaction with the run row locked: a failure
    at any employee rolls back every voucher and balance change.

unapprove_payroll_run():
    Status flip only. Vouchers and balance deltas created at approval are
    NOT reversed; re-approving pays the run again.
"""

from __future__ import annotations

import logging
from datetime import date as date_type
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from accounting.models.ledger import LedgerEntry
from accounting.models.voucher import Voucher
from accounting.services.balance_service import assert_can_pay
from accounting.services.exceptions import (
    AccountingServiceError,
    AccountingValidationError,
    RecordNotFoundError,
    StateConflictError,
)
from accounting.services.settings_service import get_accounting_settings
from accounting.services.voucher_service import VoucherInput, create_voucher
from payroll.models import Employee, PayrollItem, PayrollRun
from payroll.services.payroll_lifecycle import validate_editable, validate_transition

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(value, name: str = "amount") -> Decimal:
    try:
        return Decimal(str(value if value is not None else "0")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise AccountingValidationError(f"Invalid {name}: {value!r}") from exc


def normalize_month(value) -> date_type:
    """Accepts a date, 'YYYY-MM' or 'YYYY-MM-DD'; returns the first day of that month."""
    if isinstance(value, date_type):
        return value.replace(day=1)

    raw = (str(value) if value is not None else "").strip()
    parsed = parse_date(raw) or parse_date(f"{raw}-01")
    if parsed is None:
        raise AccountingValidationError(f"Invalid month: {value!r}")
    return parsed.replace(day=1)


# ============================================================
# EMPLOYEES
# ============================================================


def get_employee(employee_id) -> Employee:
    try:
        return Employee.objects.get(id=employee_id, deleted_at__isnull=True)
    except (Employee.DoesNotExist, ValueError, ValidationError) as exc:
        raise RecordNotFoundError("Employee not found") from exc


@transaction.atomic
def create_employee(
    *,
    name: str,
    base_salary,
    allowances=0,
    department: str = "",
    start_date=None,
    status: str = Employee.STATUS_ACTIVE,
) -> Employee:
    name = (name or "").strip()
    if not name:
        raise AccountingValidationError("Employee name is required")

    if Employee.objects.filter(name=name, deleted_at__isnull=True).exists():
        raise AccountingValidationError("An employee with this name already exists")

    base = _money(base_salary, "base_salary")
    extra = _money(allowances, "allowances")
    if base < ZERO or extra < ZERO:
        raise AccountingValidationError("Salary amounts cannot be negative")

    return Employee.objects.create(
        name=name,
        department=(department or "").strip(),
        start_date=start_date,
        base_salary=base,
        allowances=extra,
        status=status,
    )


@transaction.atomic
def deactivate_employee(employee_id) -> Employee:
    employee = get_employee(employee_id)
    if employee.status != Employee.STATUS_INACTIVE:
        employee.status = Employee.STATUS_INACTIVE
        employee.save(update_fields=["status", "updated_at"])
    return employee


@transaction.atomic
def remove_employee(employee_id) -> None:
    """Soft delete; payroll history keeps pointing at the row."""
    employee = get_employee(employee_id)
    employee.deleted_at = timezone.now()
    employee.save(update_fields=["deleted_at", "updated_at"])


# ============================================================
# RUN ITEMS
# ============================================================


def _items_from_active_employees() -> list[dict]:
    employees = list(Employee.objects.filter(status=Employee.STATUS_ACTIVE, deleted_at__isnull=True))
    if not employees:
        raise AccountingValidationError("No active employees to build a payroll run from")

    return [
        {
            "employee_id": emp.id,
            "base": emp.base_salary,
            "allowances": emp.allowances,
            "deductions": ZERO,
        }
        for emp in employees
    ]


def _build_items(raw_items) -> list[PayrollItem]:
    built: list[PayrollItem] = []
    seen = set()

    for raw in raw_items:
        employee = get_employee(raw.get("employee_id"))
        if employee.id in seen:
            raise AccountingValidationError(f"Employee {employee.name} appears more than once")
        seen.add(employee.id)

        base = _money(raw.get("base"), "base")
        allowances = _money(raw.get("allowances"), "allowances")
        deductions = _money(raw.get("deductions"), "deductions")
        if base < ZERO or allowances < ZERO or deductions < ZERO:
            raise AccountingValidationError("Payroll amounts cannot be negative")

        net = base + allowances - deductions
        if net < ZERO:
            raise AccountingValidationError(f"Net pay for {employee.name} cannot be negative")

        built.append(
            PayrollItem(
                employee=employee,
                base=base,
                allowances=allowances,
                deductions=deductions,
                net=net,
            )
        )

    return built


def _replace_items(run: PayrollRun, items: list[PayrollItem]) -> None:
    run.items.all().delete()
    for item in items:
        item.run = run
    PayrollItem.objects.bulk_create(items)
    run.total_net = sum((i.net for i in items), ZERO)


# ============================================================
# RUN CRUD
# ============================================================


def get_payroll_run(run_id) -> PayrollRun:
    try:
        return PayrollRun.objects.prefetch_related("items__employee").get(id=run_id)
    except (PayrollRun.DoesNotExist, ValueError, ValidationError) as exc:
        raise RecordNotFoundError("Payroll run not found") from exc


def _lock_run(run_id) -> PayrollRun:
    try:
        return PayrollRun.objects.select_for_update().get(id=run_id)
    except (PayrollRun.DoesNotExist, ValueError, ValidationError) as exc:
        raise RecordNotFoundError("Payroll run not found") from exc


def list_payroll_runs(*, status: str | None = None, month=None):
    qs = PayrollRun.objects.prefetch_related("items__employee").order_by("-month")
    if status:
        qs = qs.filter(status=status)
    if month:
        qs = qs.filter(month=normalize_month(month))
    return qs


@transaction.atomic
def create_payroll_run(*, month, items=None) -> PayrollRun:
    month = normalize_month(month)

    if PayrollRun.objects.filter(month=month).exists():
        raise StateConflictError(f"A payroll run already exists for {month:%m/%Y}")

    built = _build_items(items or _items_from_active_employees())

    try:
        with transaction.atomic():
            run = PayrollRun.objects.create(month=month, status=PayrollRun.STATUS_DRAFT)
    except IntegrityError as exc:
        raise StateConflictError(f"A payroll run already exists for {month:%m/%Y}") from exc

    _replace_items(run, built)
    run.save(update_fields=["total_net", "updated_at"])

    logger.info(
        "Payroll run created",
        extra={"run_id": str(run.id), "month": month.isoformat(), "items": len(built), "total_net": str(run.total_net)},
    )
    return get_payroll_run(run.id)


@transaction.atomic
def update_payroll_run(run_id, *, month=None, items=None) -> PayrollRun:
    run = _lock_run(run_id)
    validate_editable(run=run)

    update_fields = ["updated_at"]

    if month is not None:
        new_month = normalize_month(month)
        if new_month != run.month:
            if PayrollRun.objects.filter(month=new_month).exclude(id=run.id).exists():
                raise StateConflictError(f"A payroll run already exists for {new_month:%m/%Y}")
            run.month = new_month
            update_fields.append("month")

    if items is not None:
        _replace_items(run, _build_items(items))
        update_fields.append("total_net")

    run.save(update_fields=update_fields)
    return get_payroll_run(run.id)


@transaction.atomic
def delete_payroll_run(run_id) -> None:
    run = _lock_run(run_id)
    validate_editable(run=run)
    run.delete()
    logger.info("Payroll run deleted", extra={"run_id": str(run_id)})


# ============================================================
# APPROVE / UNAPPROVE
# ============================================================


@transaction.atomic
def approve_payroll_run(run_id, *, payment_method: str | None = None, bank_account_id=None, actor=None) -> PayrollRun:
    run = _lock_run(run_id)
    validate_transition(run=run, target_status=PayrollRun.STATUS_APPROVED)

    method = (payment_method or Voucher.METHOD_CASH).strip().upper()
    if method not in {Voucher.METHOD_CASH, Voucher.METHOD_BANK_TRANSFER}:
        raise AccountingValidationError(f"Invalid payment method: {method}")

    bank_account_id = bank_account_id if method == Voucher.METHOD_BANK_TRANSFER else None
    if method == Voucher.METHOD_BANK_TRANSFER and not bank_account_id:
        raise AccountingValidationError("A bank account is required for bank transfers")

    settings = get_accounting_settings()
    assert_can_pay(
        method=method,
        amount=run.total_net,
        bank_account_id=bank_account_id,
        settings=settings,
    )

    items = list(run.items.select_related("employee").order_by("employee__name", "id"))
    month_label = f"{run.month:%m/%Y}"
    today = timezone.localdate()

    logger.info(
        "Payroll approval started",
        extra={"run_id": str(run.id), "month": month_label, "method": method, "items": len(items)},
    )

    paid = 0
    try:
        for item in items:
            if item.net <= ZERO:
                continue

            voucher = create_voucher(
                data=VoucherInput(
                    type=Voucher.TYPE_PAYMENT,
                    party_type=Voucher.PARTY_EMPLOYEE,
                    party_id=str(item.employee_id),
                    party_name=item.employee.name,
                    method=method,
                    bank_account_id=str(bank_account_id or ""),
                    amount=item.net,
                    date=today,
                    note=f"Salary {month_label}",
                ),
                actor=actor,
                enforce_guard=False,
                ledger_source_type=LedgerEntry.SOURCE_PAYROLL,
                ledger_description=f"Salary {month_label} - {item.employee.name}",
                settings=settings,
            )

            item.voucher = voucher
            item.save(update_fields=["voucher"])
            paid += 1
    except AccountingServiceError:
        raise
    except Exception:
        logger.exception(
            "Payroll approval failed, rolling back",
            extra={"run_id": str(run.id), "paid_before_failure": paid},
        )
        raise

    run.status = PayrollRun.STATUS_APPROVED
    run.approved_at = timezone.now()
    run.approved_by = actor
    run.save(update_fields=["status", "approved_at", "approved_by", "updated_at"])

    logger.info(
        "Payroll run approved",
        extra={"run_id": str(run.id), "vouchers": paid, "total_net": str(run.total_net)},
    )
    return get_payroll_run(run.id)


@transaction.atomic
def unapprove_payroll_run(run_id, *, actor=None) -> PayrollRun:
    run = _lock_run(run_id)
    validate_transition(run=run, target_status=PayrollRun.STATUS_DRAFT)

    run.status = PayrollRun.STATUS_DRAFT
    run.approved_at = None
    run.approved_by = None
    run.save(update_fields=["status", "approved_at", "approved_by", "updated_at"])

    logger.warning(
        "Payroll run unapproved without reversing vouchers or balances",
        extra={
            "run_id": str(run.id),
            "actor_id": str(actor.pk) if actor is not None else None,
            "vouchers_left_standing": run.items.filter(voucher__isnull=False).count(),
        },
    )
    return get_payroll_run(run.id)
