# accounting/tests/helpers.py

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model

from accounting.models.banking import Bank
from accounting.models.expense_category import ExpenseCategory
from accounting.services.balance_service import create_bank_account, set_opening_balance
from accounting.services.voucher_service import create_voucher

User = get_user_model()


def make_user(username="accountant", **extra):
    return User.objects.create_user(username=username, password="pass", **extra)


def make_bank_account(account_no="SA-0001", opening_balance="0", bank_name="Al Rajhi"):
    bank, _ = Bank.objects.get_or_create(name=bank_name)
    return create_bank_account(bank=bank, account_no=account_no, opening_balance=opening_balance)


def make_category(name="Office Supplies"):
    return ExpenseCategory.objects.create(name=name)


def open_treasury(amount="1000.00", actor=None):
    return set_opening_balance(amount=Decimal(str(amount)), actor=actor)


def cash_receipt(amount, *, party_id="CUST-1", actor=None, **extra):
    data = {
        "type": "RECEIPT",
        "party_type": "CUSTOMER",
        "party_id": party_id,
        "method": "CASH",
        "amount": amount,
        **extra,
    }
    return create_voucher(data=data, actor=actor)


def cash_payment(amount, *, party_id="CUST-1", actor=None, **extra):
    data = {
        "type": "PAYMENT",
        "party_type": "CUSTOMER",
        "party_id": party_id,
        "method": "CASH",
        "amount": amount,
        **extra,
    }
    return create_voucher(data=data, actor=actor)
