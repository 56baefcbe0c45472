# accounting/tests/test_ledger.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.test import TestCase

from accounting.account_codes import AccountRef
from accounting.models.ledger import LedgerEntry
from accounting.services import ledger_service
from accounting.services.exceptions import LedgerPostingError


def _post(debit, credit, amount, source_id="S-1", source_type=LedgerEntry.SOURCE_VOUCHER):
    return ledger_service.post(
        source_type=source_type,
        source_id=source_id,
        debit_account=debit,
        credit_account=credit,
        amount=amount,
        description="test posting",
    )


class LedgerImmutabilityTests(TestCase):
    """
    GUARANTEES:
    - A posted entry can never be modified or deleted
    - debit != credit and amount > 0, at service, model and DB level
    """

    def test_post_creates_single_row_with_both_sides(self):
        entry = _post(AccountRef.treasury(), AccountRef.customer("C-1"), "150.005")

        self.assertEqual(LedgerEntry.objects.count(), 1)
        self.assertEqual(entry.debit_account, "treasury")
        self.assertEqual(entry.credit_account, "customer:C-1")
        self.assertEqual(entry.amount, Decimal("150.01"))
        self.assertEqual(entry.currency, "SAR")
        self.assertEqual(entry.exchange_rate, Decimal("1"))

    def test_entry_cannot_be_updated(self):
        entry = _post("treasury", "customer:C-1", "100.00")
        entry.amount = Decimal("1.00")

        with self.assertRaises(ValidationError):
            entry.save()

        entry.refresh_from_db()
        self.assertEqual(entry.amount, Decimal("100.00"))

    def test_entry_cannot_be_deleted(self):
        entry = _post("treasury", "customer:C-1", "100.00")

        with self.assertRaises(ValidationError):
            entry.delete()

        self.assertTrue(LedgerEntry.objects.filter(id=entry.id).exists())

    def test_rejects_same_debit_and_credit(self):
        with self.assertRaises(LedgerPostingError):
            _post("treasury", "treasury", "10.00")
        self.assertEqual(LedgerEntry.objects.count(), 0)

    def test_rejects_non_positive_amounts(self):
        for amount in ("0", "-5.00", "0.001"):
            with self.assertRaises(LedgerPostingError):
                _post("treasury", "customer:C-1", amount)
        self.assertEqual(LedgerEntry.objects.count(), 0)

    def test_rejects_blank_accounts(self):
        with self.assertRaises(LedgerPostingError):
            _post("", "customer:C-1", "10.00")

    def test_database_rejects_same_debit_and_credit(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                LedgerEntry.objects.bulk_create(
                    [
                        LedgerEntry(
                            source_type=LedgerEntry.SOURCE_VOUCHER,
                            source_id="X",
                            debit_account="treasury",
                            credit_account="treasury",
                            amount=Decimal("5.00"),
                        )
                    ]
                )


class LedgerBalanceTests(TestCase):
    """
    GUARANTEES:
    - account_balance == sum(debits) - sum(credits)
    - A single posting moves its two accounts by equal and opposite amounts
    - account_entries returns both sides, newest first, with a total
    """

    def test_balance_identity(self):
        _post("treasury", "customer:C-1", "500.00", source_id="A")
        _post("customer:C-1", "revenue:export", "800.00", source_id="B")
        _post("expense:shipping", "treasury", "120.00", source_id="C")

        self.assertEqual(ledger_service.account_balance("treasury"), Decimal("380.00"))
        self.assertEqual(ledger_service.account_balance("customer:C-1"), Decimal("300.00"))
        self.assertEqual(ledger_service.account_balance("revenue:export"), Decimal("-800.00"))
        self.assertEqual(ledger_service.account_balance(AccountRef.expense("shipping")), Decimal("120.00"))
        self.assertEqual(ledger_service.account_balance("unused"), Decimal("0.00"))

    def test_single_posting_nets_to_zero(self):
        before_debit = ledger_service.account_balance("agent:A-1")
        before_credit = ledger_service.account_balance("treasury")

        _post("agent:A-1", "treasury", "75.50")

        delta_debit = ledger_service.account_balance("agent:A-1") - before_debit
        delta_credit = ledger_service.account_balance("treasury") - before_credit
        self.assertEqual(delta_debit, Decimal("75.50"))
        self.assertEqual(delta_debit + delta_credit, Decimal("0.00"))

    def test_account_entries_both_sides_newest_first(self):
        first = _post("treasury", "customer:C-1", "10.00", source_id="1")
        _post("revenue:other", "expense:other", "99.00", source_id="2")
        second = _post("customer:C-1", "revenue:export", "20.00", source_id="3")

        entries, total = ledger_service.account_entries("customer:C-1")
        self.assertEqual(total, 2)
        self.assertEqual([e.id for e in entries], [second.id, first.id])

        page, total = ledger_service.account_entries("customer:C-1", limit=1, offset=1)
        self.assertEqual(total, 2)
        self.assertEqual([e.id for e in page], [first.id])

    def test_entries_by_source(self):
        _post("treasury", "customer:C-1", "10.00", source_id="V-1")
        _post("treasury", "customer:C-2", "10.00", source_id="V-2")

        rows = ledger_service.entries_by_source(LedgerEntry.SOURCE_VOUCHER, "V-1")
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].credit_account, "customer:C-1")
