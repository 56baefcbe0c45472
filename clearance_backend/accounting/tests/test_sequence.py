# accounting/tests/test_sequence.py

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from unittest import mock

from django.test import TestCase

from accounting.models.ledger import LedgerEntry
from accounting.models.treasury import Treasury
from accounting.models.voucher import Voucher
from accounting.services import sequence_service
from accounting.services.sequence_service import format_code, generate_document_code
from accounting.tests.helpers import cash_payment, cash_receipt, open_treasury


class DocumentCodeTests(TestCase):
    """
    GUARANTEES:
    - Codes are <PREFIX>-<YY>-<NNNN>
    - Sequential use gives unique, strictly increasing, gapless codes
    - Sequences are scoped by document type and year
    - Taken codes are skipped; an exhausted budget falls back to a timestamp suffix
    """

    def setUp(self):
        open_treasury("5000.00")

    def test_format_code(self):
        self.assertEqual(format_code("RC", date(2025, 3, 1), 7), "RC-25-0007")
        self.assertEqual(format_code("EX", date(2009, 1, 1), 12345), "EX-09-12345")

    def test_sequential_codes_are_unique_and_gapless(self):
        codes = [cash_receipt("10.00", date=date(2025, 5, 1)).code for _ in range(5)]

        self.assertEqual(len(set(codes)), 5)
        self.assertEqual(codes, [f"RC-25-{n:04d}" for n in range(1, 6)])

    def test_sequence_is_scoped_by_type(self):
        cash_receipt("10.00", date=date(2025, 5, 1))

        payment = cash_payment("5.00", date=date(2025, 5, 2))
        self.assertEqual(payment.code, "PY-25-0001")

    def test_sequence_is_scoped_by_year(self):
        cash_receipt("10.00", date=date(2025, 12, 31))
        v = cash_receipt("10.00", date=date(2026, 1, 1))
        self.assertEqual(v.code, "RC-26-0001")

    def test_taken_code_is_skipped(self):
        Voucher.objects.create(
            code="RC-25-0002",
            type=Voucher.TYPE_RECEIPT,
            party_type=Voucher.PARTY_CUSTOMER,
            party_id="C-1",
            amount=Decimal("1.00"),
            date=date(2025, 1, 1),
        )

        code = generate_document_code(
            queryset=Voucher.objects.filter(type=Voucher.TYPE_RECEIPT),
            prefix="RC",
            doc_date=date(2025, 6, 1),
        )
        self.assertEqual(code, "RC-25-0003")

    def test_exhausted_budget_falls_back_to_timestamp_suffix(self):
        Voucher.objects.create(
            code="RC-25-0002",
            type=Voucher.TYPE_RECEIPT,
            party_type=Voucher.PARTY_CUSTOMER,
            party_id="C-1",
            amount=Decimal("1.00"),
            date=date(2025, 1, 1),
        )

        with self.assertLogs("accounting.services.sequence_service", level="WARNING"):
            code = generate_document_code(
                queryset=Voucher.objects.filter(type=Voucher.TYPE_RECEIPT),
                prefix="RC",
                doc_date=date(2025, 6, 1),
                max_attempts=1,
            )

        self.assertRegex(code, re.compile(r"^RC-25-\d{6}$"))


class CodeCollisionRetryTests(TestCase):
    """
    GUARANTEES:
    - A code taken between generation and insert is regenerated
    - The collision rolls back only its savepoint; the voucher's treasury
      and ledger writes still land
    """

    def setUp(self):
        open_treasury("1000.00")

    def test_insert_collision_regenerates_code(self):
        first = cash_receipt("10.00", date=date(2025, 5, 1))
        self.assertEqual(first.code, "RC-25-0001")

        real_generate = sequence_service.generate_document_code
        calls = []

        def stale_then_real(**kwargs):
            calls.append(kwargs["prefix"])
            if len(calls) == 1:
                return first.code
            return real_generate(**kwargs)

        with mock.patch.object(sequence_service, "generate_document_code", side_effect=stale_then_real):
            with self.assertLogs("accounting.services.sequence_service", level="WARNING") as logs:
                second = cash_receipt("20.00", date=date(2025, 5, 2))

        self.assertEqual(len(calls), 2)
        self.assertTrue(any("Code collision on insert" in line for line in logs.output))
        self.assertEqual(second.code, "RC-25-0002")
        self.assertEqual(Voucher.objects.filter(type=Voucher.TYPE_RECEIPT).count(), 2)

        self.assertEqual(Treasury.load().current_balance, Decimal("1030.00"))
        self.assertEqual(second.treasury_transactions.count(), 1)
        entries = LedgerEntry.objects.filter(source_id=str(second.id))
        self.assertEqual(entries.count(), 1)
        self.assertEqual(entries.get().amount, Decimal("20.00"))
