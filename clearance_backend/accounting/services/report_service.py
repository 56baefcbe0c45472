# accounting/services/report_service.py

"""
STATEMENT / REPORT ENGINE (READ-ONLY)

Pure aggregations over:
- LedgerEntry (general journal, trial balance, income/expense, statements)
- TreasuryTransaction (treasury report)
- Voucher rows per bank account (bank report)

RULES:
- READ-ONLY: no writes, ever
- Ledger timeline is LedgerEntry.created_at; plain dates cover whole days
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

from django.core.exceptions import ValidationError
from django.db.models import Q, Sum
from django.utils import timezone

from accounting.models.banking import BankAccount
from accounting.models.ledger import LedgerEntry
from accounting.models.treasury import TreasuryTransaction
from accounting.models.voucher import Voucher
from accounting.services.account_names import translate_account, translate_accounts
from accounting.services.exceptions import RecordNotFoundError
from accounting.services.ledger_service import account_balance, created_between, day_start

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _q2(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _entry_row(entry: LedgerEntry, names: dict[str, str]) -> dict:
    return {
        "id": entry.id,
        "date": entry.created_at,
        "description": entry.description or "Journal entry",
        "debit_account": entry.debit_account,
        "debit_account_name": names.get(entry.debit_account, entry.debit_account),
        "credit_account": entry.credit_account,
        "credit_account_name": names.get(entry.credit_account, entry.credit_account),
        "amount": _q2(entry.amount),
        "currency": entry.currency,
        "reference": entry.source_id,
        "type": entry.source_type,
    }


def _names_for(entries) -> dict[str, str]:
    codes = []
    for e in entries:
        codes.append(e.debit_account)
        codes.append(e.credit_account)
    return translate_accounts(codes)


# ============================================================
# GENERAL JOURNAL
# ============================================================


def general_journal(date_from: date | None = None, date_to: date | None = None) -> dict:
    entries = list(
        created_between(LedgerEntry.objects.all(), date_from, date_to).order_by("created_at", "id")
    )
    names = _names_for(entries)
    total = _q2(sum((e.amount for e in entries), ZERO))

    return {
        "period": {"from": date_from, "to": date_to},
        "entries": [_entry_row(e, names) for e in entries],
        "summary": {
            "total_debits": total,
            "total_credits": total,
            "entry_count": len(entries),
        },
    }


# ============================================================
# TRIAL BALANCE
# ============================================================


def trial_balance(as_of: date | None = None) -> dict:
    qs = created_between(LedgerEntry.objects.all(), None, as_of)

    sides: dict[str, dict[str, Decimal]] = defaultdict(lambda: {"debit": ZERO, "credit": ZERO})
    for row in qs.values("debit_account").annotate(total=Sum("amount")):
        sides[row["debit_account"]]["debit"] += _q2(row["total"])
    for row in qs.values("credit_account").annotate(total=Sum("amount")):
        sides[row["credit_account"]]["credit"] += _q2(row["total"])

    names = translate_accounts(sides.keys())

    accounts = []
    for code in sorted(sides):
        debit = sides[code]["debit"]
        credit = sides[code]["credit"]
        balance = debit - credit
        accounts.append(
            {
                "account_code": code,
                "account_name": names[code],
                "debit": debit,
                "credit": credit,
                "balance": abs(balance),
                "balance_type": "debit" if balance >= 0 else "credit",
            }
        )

    total_debits = sum((a["debit"] for a in accounts), ZERO)
    total_credits = sum((a["credit"] for a in accounts), ZERO)
    difference = abs(total_debits - total_credits)

    return {
        "as_of_date": as_of or timezone.localdate(),
        "accounts": accounts,
        "totals": {
            "total_debits": total_debits,
            "total_credits": total_credits,
            "is_balanced": difference == ZERO,
            "difference": difference,
        },
    }


# ============================================================
# INCOME / EXPENSE
# ============================================================


def income_expense_report(date_from: date | None = None, date_to: date | None = None) -> dict:
    qs = created_between(LedgerEntry.objects.all(), date_from, date_to)

    income = qs.filter(credit_account__startswith="revenue:").aggregate(t=Sum("amount"))["t"]
    expenses = qs.filter(debit_account__startswith="expense:").aggregate(t=Sum("amount"))["t"]
    income = _q2(income)
    expenses = _q2(expenses)

    entries = list(qs.order_by("created_at", "id"))
    names = _names_for(entries)

    return {
        "period": {"from": date_from, "to": date_to},
        "entries": [_entry_row(e, names) for e in entries],
        "summary": {
            "total_income": income,
            "total_expenses": expenses,
            "net_profit": income - expenses,
        },
    }


# ============================================================
# TREASURY
# ============================================================


def treasury_report(date_from: date | None = None, date_to: date | None = None) -> dict:
    qs = TreasuryTransaction.objects.select_related("voucher")
    if date_from:
        qs = qs.filter(date__gte=date_from)
    if date_to:
        qs = qs.filter(date__lte=date_to)

    total_in = _q2(qs.filter(type=TreasuryTransaction.IN).aggregate(t=Sum("amount"))["t"])
    total_out = _q2(qs.filter(type=TreasuryTransaction.OUT).aggregate(t=Sum("amount"))["t"])

    transactions = [
        {
            "id": t.id,
            "date": t.date,
            "type": t.type,
            "amount": _q2(t.amount),
            "note": t.note,
            "balance_after": _q2(t.balance_after),
            "voucher_code": t.voucher.code if t.voucher_id else None,
        }
        for t in qs.order_by("created_at", "id")
    ]

    return {
        "transactions": transactions,
        "summary": {
            "total_in": total_in,
            "total_out": total_out,
            "net": total_in - total_out,
        },
    }


# ============================================================
# BANK ACCOUNT
# ============================================================


def bank_account_report(bank_account_id, date_from: date | None = None, date_to: date | None = None) -> dict:
    try:
        account = BankAccount.objects.select_related("bank").get(id=bank_account_id)
    except (BankAccount.DoesNotExist, ValueError, ValidationError) as exc:
        raise RecordNotFoundError("Bank account not found") from exc

    vouchers = Voucher.objects.filter(bank_account=account)

    opening = _q2(account.opening_balance)
    if date_from:
        before = vouchers.filter(date__lt=date_from)
        receipts = _q2(before.filter(type=Voucher.TYPE_RECEIPT).aggregate(t=Sum("amount"))["t"])
        payments = _q2(before.filter(type=Voucher.TYPE_PAYMENT).aggregate(t=Sum("amount"))["t"])
        opening = opening + receipts - payments

    in_range = vouchers
    if date_from:
        in_range = in_range.filter(date__gte=date_from)
    if date_to:
        in_range = in_range.filter(date__lte=date_to)

    running = opening
    transactions = []
    for v in in_range.order_by("date", "created_at"):
        amount = _q2(v.amount)
        running = running + amount if v.type == Voucher.TYPE_RECEIPT else running - amount
        transactions.append(
            {
                "id": str(v.id),
                "type": v.type.lower(),
                "amount": amount,
                "note": v.note,
                "date": v.date,
                "code": v.code,
                "party_name": v.party_name,
                "balance": running,
            }
        )

    return {
        "account": {
            "id": str(account.id),
            "bank": account.bank.name,
            "account_no": account.account_no,
            "current_balance": _q2(account.current_balance),
        },
        "opening_balance": opening,
        "closing_balance": running,
        "transactions": transactions,
    }


# ============================================================
# ACCOUNT STATEMENT (customer / agent / any code)
# ============================================================


def account_statement(account, date_from: date | None = None, date_to: date | None = None) -> dict:
    code = str(account).strip()
    touching = LedgerEntry.objects.filter(Q(debit_account=code) | Q(credit_account=code))

    opening = ZERO
    start = day_start(date_from)
    if start is not None:
        before = touching.filter(created_at__lt=start)
        debits = before.filter(debit_account=code).aggregate(t=Sum("amount"))["t"]
        credits = before.filter(credit_account=code).aggregate(t=Sum("amount"))["t"]
        opening = _q2(debits) - _q2(credits)

    running = opening
    rows = []
    for e in created_between(touching, date_from, date_to).order_by("created_at", "id"):
        is_debit = e.debit_account == code
        amount = _q2(e.amount)
        running = running + amount if is_debit else running - amount
        rows.append(
            {
                "id": e.id,
                "date": e.created_at,
                "description": e.description,
                "type": e.source_type,
                "reference": e.source_id,
                "counter_account": e.credit_account if is_debit else e.debit_account,
                "debit": amount if is_debit else ZERO,
                "credit": ZERO if is_debit else amount,
                "balance": running,
            }
        )

    return {
        "account": code,
        "account_name": translate_account(code),
        "opening_balance": opening,
        "entries": rows,
        "closing_balance": running,
        "current_balance": account_balance(code),
    }
