# accounting/tests/test_reports.py

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone

from accounting.models.ledger import LedgerEntry
from accounting.services import ledger_service
from accounting.services.account_names import translate_account, translate_accounts
from accounting.services.exceptions import AccountingValidationError, RecordNotFoundError
from accounting.services.posting import (
    create_invoice,
    post_additional_fee_to_ledger,
    post_trip_to_ledger,
)
from accounting.services.report_service import (
    account_statement,
    bank_account_report,
    general_journal,
    income_expense_report,
    trial_balance,
    treasury_report,
)
from accounting.services.voucher_service import create_voucher
from accounting.tests.helpers import (
    cash_receipt,
    make_bank_account,
    make_category,
    open_treasury,
)


class PostingTests(TestCase):
    """
    GUARANTEES:
    - Invoices mint a typed code and post Dr customer / Cr revenue
    - Trips and agent fees credit the agent against an expense account
    """

    def test_invoice_posting(self):
        invoice = create_invoice(
            customer_id="C-1",
            invoice_type="export",
            invoice_date=date(2025, 4, 1),
            total="1500.00",
            customs_no="CN-77",
        )

        self.assertEqual(invoice.code, "EX-25-0001")
        entry = LedgerEntry.objects.get(source_id=str(invoice.id))
        self.assertEqual(entry.source_type, LedgerEntry.SOURCE_INVOICE)
        self.assertEqual(entry.debit_account, "customer:C-1")
        self.assertEqual(entry.credit_account, "revenue:export")
        self.assertEqual(ledger_service.account_balance("customer:C-1"), Decimal("1500.00"))

    def test_invoice_codes_per_type(self):
        create_invoice(customer_id="C-1", invoice_type="IMPORT", invoice_date=date(2025, 1, 1), total="1")
        second = create_invoice(customer_id="C-1", invoice_type="IMPORT", invoice_date=date(2025, 1, 2), total="1")
        transit = create_invoice(customer_id="C-1", invoice_type="TRANSIT", invoice_date=date(2025, 1, 2), total="1")

        self.assertEqual(second.code, "IM-25-0002")
        self.assertEqual(transit.code, "TR-25-0001")

    def test_invoice_validation(self):
        with self.assertRaises(AccountingValidationError):
            create_invoice(customer_id="C-1", invoice_type="BARTER", total="10")
        with self.assertRaises(AccountingValidationError):
            create_invoice(customer_id="", invoice_type="FREE", total="10")
        with self.assertRaises(AccountingValidationError):
            create_invoice(customer_id="C-1", invoice_type="FREE", total="0")
        self.assertEqual(LedgerEntry.objects.count(), 0)

    def test_trip_and_fee_postings(self):
        trip = post_trip_to_ledger(trip_id="T-1", agent_id="A-1", amount="200.00", agent_name="Gulf Lines")
        fee = post_additional_fee_to_ledger(
            fee_id="F-1", agent_id="A-1", amount="35.00", fee_type="Demurrage", agent_name="Gulf Lines"
        )

        self.assertEqual((trip.debit_account, trip.credit_account), ("expense:shipping", "agent:A-1"))
        self.assertEqual(trip.source_type, LedgerEntry.SOURCE_TRIP)
        self.assertEqual((fee.debit_account, fee.credit_account), ("expense:agent_fees", "agent:A-1"))
        self.assertEqual(fee.source_type, LedgerEntry.SOURCE_ADDITIONAL_FEE)
        self.assertEqual(fee.description, "Demurrage - Gulf Lines")
        self.assertEqual(ledger_service.account_balance("agent:A-1"), Decimal("-235.00"))


class ReportTests(TestCase):
    """
    GUARANTEES:
    - Reports are pure aggregations over the journal and subledgers
    - The trial balance always balances
    """

    def setUp(self):
        open_treasury("1000.00")
        create_invoice(customer_id="C-1", invoice_type="EXPORT", total="900.00")
        cash_receipt("400.00", party_id="C-1")
        post_trip_to_ledger(trip_id="T-1", agent_id="A-1", amount="200.00")
        create_voucher(
            data={
                "type": "PAYMENT",
                "party_type": "AGENT",
                "party_id": "A-1",
                "method": "CASH",
                "amount": "150.00",
            }
        )

    def test_trial_balance_balances(self):
        report = trial_balance()
        totals = report["totals"]

        self.assertTrue(totals["is_balanced"])
        self.assertEqual(totals["difference"], Decimal("0.00"))
        self.assertEqual(totals["total_debits"], Decimal("1650.00"))

        rows = {a["account_code"]: a for a in report["accounts"]}
        self.assertEqual(rows["treasury"]["balance"], Decimal("250.00"))
        self.assertEqual(rows["treasury"]["balance_type"], "debit")
        self.assertEqual(rows["revenue:export"]["balance_type"], "credit")
        self.assertEqual(rows["revenue:export"]["account_name"], "Export Revenue")

    def test_general_journal(self):
        journal = general_journal()
        self.assertEqual(journal["summary"]["entry_count"], 4)
        self.assertEqual(journal["summary"]["total_debits"], journal["summary"]["total_credits"])
        self.assertEqual(journal["entries"][0]["type"], LedgerEntry.SOURCE_INVOICE)

    def test_income_expense(self):
        summary = income_expense_report()["summary"]
        self.assertEqual(summary["total_income"], Decimal("900.00"))
        self.assertEqual(summary["total_expenses"], Decimal("200.00"))
        self.assertEqual(summary["net_profit"], Decimal("700.00"))

    def test_agent_statement_running_balance(self):
        statement = account_statement("agent:A-1")

        self.assertEqual([row["credit"] for row in statement["entries"]], [Decimal("200.00"), Decimal("0.00")])
        self.assertEqual([row["balance"] for row in statement["entries"]], [Decimal("-200.00"), Decimal("-50.00")])
        self.assertEqual(statement["closing_balance"], Decimal("-50.00"))
        self.assertEqual(statement["current_balance"], Decimal("-50.00"))
        self.assertEqual(statement["account_name"], "Agent A-1")

    def test_statement_date_window(self):
        tomorrow = timezone.localdate() + timedelta(days=1)
        statement = account_statement("customer:C-1", date_from=tomorrow)

        self.assertEqual(statement["entries"], [])
        self.assertEqual(statement["opening_balance"], Decimal("500.00"))
        self.assertEqual(statement["closing_balance"], Decimal("500.00"))

    def test_treasury_report(self):
        summary = treasury_report()["summary"]
        self.assertEqual(summary["total_in"], Decimal("400.00"))
        self.assertEqual(summary["total_out"], Decimal("150.00"))
        self.assertEqual(summary["net"], Decimal("250.00"))

    def test_reports_do_not_write(self):
        before = LedgerEntry.objects.count()
        trial_balance()
        general_journal()
        income_expense_report()
        account_statement("treasury")
        self.assertEqual(LedgerEntry.objects.count(), before)


class BankReportTests(TestCase):
    def test_running_balance_from_opening(self):
        account = make_bank_account(opening_balance="1000.00")
        for kind, amount, day in (("RECEIPT", "200.00", 1), ("PAYMENT", "50.00", 2)):
            create_voucher(
                data={
                    "type": kind,
                    "party_type": "CUSTOMER",
                    "party_id": "C-1",
                    "method": "BANK_TRANSFER",
                    "bank_account_id": str(account.id),
                    "amount": amount,
                    "date": date(2025, 3, day),
                }
            )

        report = bank_account_report(account.id)
        self.assertEqual(report["opening_balance"], Decimal("1000.00"))
        self.assertEqual([t["balance"] for t in report["transactions"]], [Decimal("1200.00"), Decimal("1150.00")])
        self.assertEqual(report["closing_balance"], Decimal("1150.00"))
        self.assertEqual(report["account"]["current_balance"], Decimal("1150.00"))

        windowed = bank_account_report(account.id, date_from=date(2025, 3, 2))
        self.assertEqual(windowed["opening_balance"], Decimal("1200.00"))
        self.assertEqual(len(windowed["transactions"]), 1)

    def test_missing_account(self):
        with self.assertRaises(RecordNotFoundError):
            bank_account_report("7d5e7c5e-0000-4000-8000-000000000000")
        with self.assertRaises(RecordNotFoundError):
            bank_account_report("not-a-uuid")


class AccountNameTests(TestCase):
    def test_translation(self):
        account = make_bank_account(account_no="SA-42", bank_name="SNB")
        category = make_category("Fuel")

        self.assertEqual(translate_account("treasury"), "Treasury")
        self.assertEqual(translate_account(f"bank:{account.id}"), "Bank: SNB - SA-42")
        self.assertEqual(translate_account(f"expense:{category.id}"), "Expense: Fuel")
        self.assertEqual(translate_account("expense:shipping"), "Shipping Expense")
        self.assertEqual(translate_account("customer:C-1"), "Customer C-1")
        self.assertEqual(translate_account("mystery"), "mystery")

        names = translate_accounts(["treasury", "treasury", "agent:A-1"])
        self.assertEqual(names, {"treasury": "Treasury", "agent:A-1": "Agent A-1"})
