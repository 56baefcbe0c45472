# accounting/account_codes.py

"""
PATH: accounting/account_codes.py

ACCOUNT REFERENCES (FRAMEWORK-AGNOSTIC)

Ledger accounts are stored as flat strings:
- static labels:   "treasury", "expense:shipping", "revenue:export", ...
- entity refs:     "customer:<id>", "agent:<id>", "employee:<id>",
                   "bank:<bankAccountId>", "expense:<categoryId>"

AccountRef is the typed form used by services. str(ref) gives the storage
string and AccountRef.parse(code) reads it back. parse() never fails:
anything unrecognised becomes OTHER and keeps the raw code.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class AccountKind(str, Enum):
    TREASURY = "treasury"
    BANK = "bank"
    CUSTOMER = "customer"
    AGENT = "agent"
    EMPLOYEE = "employee"
    EXPENSE = "expense"
    REVENUE = "revenue"
    OTHER = "other"


# Kinds written as "<kind>:<key>"
_KEYED_KINDS = {
    AccountKind.BANK,
    AccountKind.CUSTOMER,
    AccountKind.AGENT,
    AccountKind.EMPLOYEE,
    AccountKind.EXPENSE,
    AccountKind.REVENUE,
}

TREASURY_CODE = "treasury"
EXPENSE_OTHER = "other"
EXPENSE_SHIPPING = "shipping"
EXPENSE_AGENT_FEES = "agent_fees"
REVENUE_OTHER = "other"


class AccountCodeError(ValueError):
    """Raised when an account reference cannot be built."""


@dataclass(frozen=True)
class AccountRef:
    kind: AccountKind
    key: str = ""

    def __post_init__(self):
        if self.kind in _KEYED_KINDS and not str(self.key or "").strip():
            raise AccountCodeError(f"{self.kind.value} account requires a key")

    def __str__(self) -> str:
        if self.kind == AccountKind.TREASURY:
            return TREASURY_CODE
        if self.kind == AccountKind.OTHER:
            return self.key
        return f"{self.kind.value}:{self.key}"

    @property
    def code(self) -> str:
        return str(self)

    # ---------------- constructors ----------------
    @classmethod
    def treasury(cls) -> "AccountRef":
        return cls(AccountKind.TREASURY)

    @classmethod
    def bank(cls, bank_account_id) -> "AccountRef":
        return cls(AccountKind.BANK, str(bank_account_id or ""))

    @classmethod
    def customer(cls, customer_id) -> "AccountRef":
        return cls(AccountKind.CUSTOMER, str(customer_id or ""))

    @classmethod
    def agent(cls, agent_id) -> "AccountRef":
        return cls(AccountKind.AGENT, str(agent_id or ""))

    @classmethod
    def employee(cls, employee_id) -> "AccountRef":
        return cls(AccountKind.EMPLOYEE, str(employee_id or ""))

    @classmethod
    def expense(cls, key) -> "AccountRef":
        return cls(AccountKind.EXPENSE, str(key or ""))

    @classmethod
    def revenue(cls, key) -> "AccountRef":
        return cls(AccountKind.REVENUE, str(key or ""))

    # ---------------- parsing ----------------
    @classmethod
    def parse(cls, code: str) -> "AccountRef":
        raw = (code or "").strip()
        if raw == TREASURY_CODE:
            return cls.treasury()

        prefix, sep, key = raw.partition(":")
        if sep and key:
            try:
                kind = AccountKind(prefix)
            except ValueError:
                kind = None
            if kind in _KEYED_KINDS:
                return cls(kind, key)

        return cls(AccountKind.OTHER, raw)


def money_account(method: str, bank_account_id=None) -> AccountRef:
    """Cash side of a voucher: the treasury, or the chosen bank account."""
    if method == "CASH":
        return AccountRef.treasury()
    if method == "BANK_TRANSFER":
        if not bank_account_id:
            raise AccountCodeError("Bank transfers require a bank account")
        return AccountRef.bank(bank_account_id)
    raise AccountCodeError(f"Unknown payment method: {method!r}")


def party_account(party_type: str, party_id=None, category_id=None, *, side: str) -> AccountRef:
    """
    Counter-account of a voucher.

    side is "PAYMENT" (the account being debited) or "RECEIPT" (the
    account being credited). Customers, employees and agents always use
    their own account; OTHER parties fall back to an expense category on
    payments and to revenue:other on receipts.
    """
    if party_type == "CUSTOMER":
        return AccountRef.customer(party_id)
    if party_type == "EMPLOYEE":
        return AccountRef.employee(party_id)
    if party_type == "AGENT":
        return AccountRef.agent(party_id)

    if side == "PAYMENT":
        return AccountRef.expense(category_id or EXPENSE_OTHER)
    return AccountRef.revenue(REVENUE_OTHER)
