# accounting/models/__init__.py

"""
ACCOUNTING MODELS PACKAGE EXPORTS

Note:
- Keep this file *imports-only* (no business logic).
- Do NOT import services from models anywhere (models must stay pure).
"""

from accounting.models.app_setting import AppSetting
from accounting.models.banking import Bank, BankAccount
from accounting.models.expense_category import ExpenseCategory
from accounting.models.invoice import Invoice
from accounting.models.ledger import LedgerEntry
from accounting.models.treasury import Treasury, TreasuryTransaction
from accounting.models.voucher import Voucher

__all__ = [
    "AppSetting",
    "Bank",
    "BankAccount",
    "ExpenseCategory",
    "Invoice",
    "LedgerEntry",
    "Treasury",
    "TreasuryTransaction",
    "Voucher",
]
