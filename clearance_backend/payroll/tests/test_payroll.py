# payroll/tests/test_payroll.py

from __future__ import annotations

from datetime import date
from decimal import Decimal
from unittest import mock

from django.contrib.auth import get_user_model
from django.test import TestCase

from accounting.models.ledger import LedgerEntry
from accounting.models.treasury import Treasury
from accounting.models.voucher import Voucher
from accounting.services.exceptions import (
    AccountingValidationError,
    InsufficientBalanceError,
    RecordNotFoundError,
    StateConflictError,
)
from accounting.services.settings_service import update_accounting_settings
from accounting.tests.helpers import make_bank_account, open_treasury
from payroll.models import Employee, PayrollItem, PayrollRun
from payroll.services import payroll_service
from payroll.services.payroll_lifecycle import (
    InvalidPayrollTransitionError,
    can_transition,
)
from payroll.services.payroll_service import (
    approve_payroll_run,
    create_employee,
    create_payroll_run,
    deactivate_employee,
    delete_payroll_run,
    normalize_month,
    remove_employee,
    unapprove_payroll_run,
    update_payroll_run,
)

User = get_user_model()


def _treasury_balance() -> Decimal:
    return Treasury.load().current_balance


class PayrollFixtureMixin:
    def setUp(self):
        self.user = User.objects.create_user(username="hr", password="pass")
        open_treasury("5000.00")

        self.ali = create_employee(name="Ali", base_salary="100.00")
        self.badr = create_employee(name="Badr", base_salary="150.00", allowances="50.00")
        self.sami = create_employee(name="Sami", base_salary="300.00")

    def _items(self, *pairs):
        return [
            {"employee_id": emp.id, "base": base, "allowances": "0", "deductions": deductions}
            for emp, base, deductions in pairs
        ]

    def _run(self, month="2025-03"):
        # nets: 100, 200, 300
        return create_payroll_run(month=month)


class PayrollLifecycleTests(TestCase):
    def test_transitions(self):
        self.assertTrue(can_transition(from_status="DRAFT", to_status="APPROVED"))
        self.assertTrue(can_transition(from_status="APPROVED", to_status="DRAFT"))
        self.assertFalse(can_transition(from_status="APPROVED", to_status="APPROVED"))
        self.assertFalse(can_transition(from_status="DRAFT", to_status="DRAFT"))

    def test_normalize_month(self):
        self.assertEqual(normalize_month("2025-03"), date(2025, 3, 1))
        self.assertEqual(normalize_month("2025-03-17"), date(2025, 3, 1))
        self.assertEqual(normalize_month(date(2025, 3, 17)), date(2025, 3, 1))
        with self.assertRaises(AccountingValidationError):
            normalize_month("March")


class PayrollRunTests(PayrollFixtureMixin, TestCase):
    """
    GUARANTEES:
    - One run per month
    - Items default to active employees; net = base + allowances - deductions
    - Items can only be replaced while DRAFT
    """

    def test_items_generated_from_active_employees(self):
        deactivate_employee(self.sami.id)
        departed = create_employee(name="Nawaf", base_salary="999.00")
        remove_employee(departed.id)

        run = self._run()

        self.assertEqual(run.month, date(2025, 3, 1))
        self.assertEqual(run.status, PayrollRun.STATUS_DRAFT)
        self.assertEqual(sorted(i.net for i in run.items.all()), [Decimal("100.00"), Decimal("200.00")])
        self.assertEqual(run.total_net, Decimal("300.00"))

    def test_explicit_items(self):
        run = create_payroll_run(
            month="2025-04-01",
            items=self._items((self.ali, "100.00", "10.00"), (self.badr, "150.00", "0")),
        )

        nets = {i.employee_id: i.net for i in run.items.all()}
        self.assertEqual(nets[self.ali.id], Decimal("90.00"))
        self.assertEqual(nets[self.badr.id], Decimal("150.00"))
        self.assertEqual(run.total_net, Decimal("240.00"))

    def test_duplicate_month_is_conflict(self):
        self._run("2025-03")
        with self.assertRaises(StateConflictError):
            self._run("2025-03-15")
        self.assertEqual(PayrollRun.objects.count(), 1)

    def test_no_active_employees(self):
        for emp in (self.ali, self.badr, self.sami):
            remove_employee(emp.id)
        with self.assertRaises(AccountingValidationError):
            self._run()

    def test_negative_net_rejected(self):
        with self.assertRaises(AccountingValidationError):
            create_payroll_run(month="2025-05", items=self._items((self.ali, "100.00", "150.00")))
        self.assertFalse(PayrollRun.objects.exists())

    def test_duplicate_employee_rejected(self):
        with self.assertRaises(AccountingValidationError):
            create_payroll_run(
                month="2025-05",
                items=self._items((self.ali, "1", "0"), (self.ali, "2", "0")),
            )

    def test_unknown_employee_is_not_found(self):
        with self.assertRaises(RecordNotFoundError):
            create_payroll_run(
                month="2025-05",
                items=[{"employee_id": "7d5e7c5e-0000-4000-8000-000000000000", "base": "1"}],
            )

    def test_update_replaces_items_while_draft(self):
        run = self._run()

        updated = update_payroll_run(run.id, items=self._items((self.sami, "300.00", "0")))

        self.assertEqual(updated.items.count(), 1)
        self.assertEqual(updated.total_net, Decimal("300.00"))

    def test_update_and_delete_blocked_when_approved(self):
        run = self._run()
        approve_payroll_run(run.id, actor=self.user)

        with self.assertRaises(InvalidPayrollTransitionError):
            update_payroll_run(run.id, items=self._items((self.ali, "1", "0")))
        with self.assertRaises(InvalidPayrollTransitionError):
            delete_payroll_run(run.id)

    def test_delete_draft(self):
        run = self._run()
        delete_payroll_run(run.id)
        self.assertFalse(PayrollRun.objects.exists())
        self.assertFalse(PayrollItem.objects.exists())


class PayrollApprovalTests(PayrollFixtureMixin, TestCase):
    """
    GUARANTEES:
    - Approval fans out into one PAYMENT / EMPLOYEE voucher per paid item
    - Balances and ledger move per employee; status and stamps are set
    - The guard is checked once against the run total
    - Any failure rolls the whole approval back
    """

    def test_cash_fan_out(self):
        run = self._run()
        before = _treasury_balance()

        approved = approve_payroll_run(run.id, actor=self.user)

        vouchers = list(Voucher.objects.filter(party_type=Voucher.PARTY_EMPLOYEE))
        self.assertEqual(len(vouchers), 3)
        self.assertTrue(all(v.type == Voucher.TYPE_PAYMENT and v.is_cash for v in vouchers))
        self.assertEqual(sum(v.amount for v in vouchers), Decimal("600.00"))
        self.assertEqual(_treasury_balance(), before - Decimal("600.00"))

        self.assertEqual(approved.status, PayrollRun.STATUS_APPROVED)
        self.assertIsNotNone(approved.approved_at)
        self.assertEqual(approved.approved_by, self.user)

        voucher_ids = [i.voucher_id for i in approved.items.all()]
        self.assertNotIn(None, voucher_ids)
        self.assertEqual(len(set(voucher_ids)), 3)

        entries = LedgerEntry.objects.filter(source_type=LedgerEntry.SOURCE_PAYROLL)
        self.assertEqual(entries.count(), 3)
        self.assertEqual(
            {e.debit_account for e in entries},
            {f"employee:{emp.id}" for emp in (self.ali, self.badr, self.sami)},
        )
        self.assertTrue(all(e.credit_account == "treasury" for e in entries))

    def test_zero_net_items_get_no_voucher(self):
        run = create_payroll_run(
            month="2025-06",
            items=self._items((self.ali, "100.00", "100.00"), (self.badr, "150.00", "0")),
        )

        approved = approve_payroll_run(run.id)

        items = {i.employee_id: i for i in approved.items.all()}
        self.assertIsNone(items[self.ali.id].voucher_id)
        self.assertIsNotNone(items[self.badr.id].voucher_id)
        self.assertEqual(Voucher.objects.count(), 1)

    def test_bank_transfer_fan_out(self):
        account = make_bank_account(opening_balance="1000.00")
        run = self._run()

        approve_payroll_run(run.id, payment_method="BANK_TRANSFER", bank_account_id=account.id)

        account.refresh_from_db()
        self.assertEqual(account.current_balance, Decimal("400.00"))
        self.assertEqual(_treasury_balance(), Decimal("5000.00"))
        self.assertEqual(Voucher.objects.filter(bank_account=account).count(), 3)

    def test_bank_transfer_requires_account(self):
        run = self._run()
        with self.assertRaises(AccountingValidationError):
            approve_payroll_run(run.id, payment_method="BANK_TRANSFER")

    def test_malformed_bank_account_id_is_not_found(self):
        run = self._run()

        with self.assertRaises(RecordNotFoundError):
            approve_payroll_run(run.id, payment_method="BANK_TRANSFER", bank_account_id="not-a-uuid")

        run.refresh_from_db()
        self.assertEqual(run.status, PayrollRun.STATUS_DRAFT)
        self.assertFalse(Voucher.objects.exists())
        self.assertEqual(_treasury_balance(), Decimal("5000.00"))

    def test_already_approved_is_conflict(self):
        run = self._run()
        approve_payroll_run(run.id)

        with self.assertRaises(StateConflictError):
            approve_payroll_run(run.id)
        self.assertEqual(Voucher.objects.count(), 3)

    def test_guard_checked_against_run_total(self):
        update_accounting_settings(prevent_negative_treasury=True)
        create_employee(name="Zaid", base_salary="4500.00")
        run = self._run()
        self.assertGreater(run.total_net, _treasury_balance())

        with self.assertRaises(InsufficientBalanceError):
            approve_payroll_run(run.id)

        run.refresh_from_db()
        self.assertEqual(run.status, PayrollRun.STATUS_DRAFT)
        self.assertEqual(Voucher.objects.count(), 0)
        self.assertEqual(_treasury_balance(), Decimal("5000.00"))

    def test_failure_mid_loop_rolls_back_everything(self):
        run = self._run()
        real_create = payroll_service.create_voucher
        calls = {"n": 0}

        def flaky(**kwargs):
            calls["n"] += 1
            if calls["n"] == 2:
                raise RuntimeError("disk full")
            return real_create(**kwargs)

        with mock.patch.object(payroll_service, "create_voucher", side_effect=flaky):
            with self.assertRaises(RuntimeError):
                approve_payroll_run(run.id, actor=self.user)

        run.refresh_from_db()
        self.assertEqual(run.status, PayrollRun.STATUS_DRAFT)
        self.assertIsNone(run.approved_at)
        self.assertEqual(Voucher.objects.count(), 0)
        self.assertEqual(LedgerEntry.objects.count(), 0)
        self.assertFalse(run.items.filter(voucher__isnull=False).exists())
        self.assertEqual(_treasury_balance(), Decimal("5000.00"))

    def test_unapprove_is_status_flip_only(self):
        run = self._run()
        approve_payroll_run(run.id, actor=self.user)

        with self.assertLogs("payroll.services.payroll_service", level="WARNING"):
            draft = unapprove_payroll_run(run.id, actor=self.user)

        self.assertEqual(draft.status, PayrollRun.STATUS_DRAFT)
        self.assertIsNone(draft.approved_at)
        self.assertIsNone(draft.approved_by)
        self.assertEqual(Voucher.objects.count(), 3)
        self.assertEqual(_treasury_balance(), Decimal("4400.00"))

    def test_unapprove_requires_approved(self):
        run = self._run()
        with self.assertRaises(StateConflictError):
            unapprove_payroll_run(run.id)

    def test_missing_run(self):
        with self.assertRaises(RecordNotFoundError):
            approve_payroll_run("7d5e7c5e-0000-4000-8000-000000000000")


class EmployeeTests(TestCase):
    def test_create_and_soft_delete(self):
        emp = create_employee(name="Huda", base_salary="900", department="Ops")
        remove_employee(emp.id)

        emp.refresh_from_db()
        self.assertIsNotNone(emp.deleted_at)
        with self.assertRaises(RecordNotFoundError):
            deactivate_employee(emp.id)

        again = create_employee(name="Huda", base_salary="950")
        self.assertNotEqual(again.id, emp.id)
        self.assertEqual(Employee.objects.filter(name="Huda").count(), 2)

    def test_duplicate_active_name(self):
        create_employee(name="Omar", base_salary="1")
        with self.assertRaises(AccountingValidationError):
            create_employee(name="Omar", base_salary="2")
