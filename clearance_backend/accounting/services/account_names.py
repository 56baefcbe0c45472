# accounting/services/account_names.py

"""
ACCOUNT NAME TRANSLATION

Turns stored account codes into display names for reports.
Unknown codes come back unchanged.
"""

from __future__ import annotations

import uuid
from typing import Iterable

from django.apps import apps

from accounting.account_codes import AccountKind, AccountRef
from accounting.models.banking import BankAccount
from accounting.models.expense_category import ExpenseCategory

STATIC_NAMES = {
    "cash": "Cash",
    "treasury": "Treasury",
    "bank": "Bank",
    "accounts_receivable": "Accounts Receivable",
    "accounts_payable": "Accounts Payable",
    "revenue": "Revenue",
    "revenue:customs": "Customs Clearance Revenue",
    "revenue:services": "Services Revenue",
    "revenue:import": "Import Revenue",
    "revenue:export": "Export Revenue",
    "revenue:transit": "Transit Revenue",
    "revenue:free": "Free Zone Revenue",
    "revenue:other": "Other Revenue",
    "expense": "Expenses",
    "expense:salaries": "Salaries Expense",
    "expense:rent": "Rent Expense",
    "expense:utilities": "Utilities Expense",
    "expense:maintenance": "Maintenance Expense",
    "expense:shipping": "Shipping Expense",
    "expense:agent_fees": "Agent Fees",
    "expense:other": "Other Expenses",
    "assets": "Assets",
    "liabilities": "Liabilities",
    "equity": "Equity",
}


def _as_uuid(value: str):
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None


def _bank_name(key: str) -> str:
    pk = _as_uuid(key)
    account = BankAccount.objects.select_related("bank").filter(id=pk).first() if pk else None
    return f"Bank: {account.bank.name} - {account.account_no}" if account else "Bank"


def _category_name(key: str) -> str | None:
    pk = _as_uuid(key)
    if pk is None:
        return None
    category = ExpenseCategory.objects.filter(id=pk).first()
    return f"Expense: {category.name}" if category else "Expense"


def _employee_name(key: str) -> str:
    Employee = apps.get_model("payroll", "Employee")
    pk = _as_uuid(key)
    employee = Employee.objects.filter(id=pk).first() if pk else None
    return f"Employee: {employee.name}" if employee else "Employee"


def translate_account(code: str) -> str:
    if code in STATIC_NAMES:
        return STATIC_NAMES[code]

    ref = AccountRef.parse(code)

    if ref.kind == AccountKind.BANK:
        return _bank_name(ref.key)
    if ref.kind == AccountKind.EXPENSE:
        return _category_name(ref.key) or code
    if ref.kind == AccountKind.EMPLOYEE:
        return _employee_name(ref.key)
    if ref.kind == AccountKind.CUSTOMER:
        return f"Customer {ref.key}"
    if ref.kind == AccountKind.AGENT:
        return f"Agent {ref.key}"

    return code


def translate_accounts(codes: Iterable[str]) -> dict[str, str]:
    """Translate each distinct code once."""
    return {code: translate_account(code) for code in dict.fromkeys(codes)}
