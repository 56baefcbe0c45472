# accounting/services/balance_service.py

"""
BALANCE STORE

Mutable running balances for the treasury (cash) and each bank account,
kept in lockstep with ledger postings.

RULES:
- Every read-check-write happens under a row lock (select_for_update)
  inside the caller's transaction
- Cash movements append a TreasuryTransaction carrying balance_after
- Bank balances move only through voucher and payroll postings
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models.banking import Bank, BankAccount
from accounting.models.treasury import Treasury, TreasuryTransaction
from accounting.services.exceptions import (
    AccountingValidationError,
    InsufficientBalanceError,
    OpeningBalanceAlreadySetError,
    RecordNotFoundError,
)
from accounting.services.settings_service import AccountingSettings, get_accounting_settings

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

DIRECTION_IN = TreasuryTransaction.IN
DIRECTION_OUT = TreasuryTransaction.OUT


def _q2(value) -> Decimal:
    try:
        return Decimal(str(value if value is not None else "0.00")).quantize(
            TWOPLACES, rounding=ROUND_HALF_UP
        )
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise AccountingValidationError(f"Invalid amount: {value!r}") from exc


def _signed(direction: str, amount: Decimal) -> Decimal:
    if direction == DIRECTION_IN:
        return amount
    if direction == DIRECTION_OUT:
        return -amount
    raise AccountingValidationError(f"Invalid direction: {direction!r}")


# ============================================================
# LOCKS
# ============================================================


def lock_treasury() -> Treasury:
    Treasury.load()
    return Treasury.objects.select_for_update().get(id=Treasury.SINGLETON_ID)


def lock_bank_account(bank_account_id) -> BankAccount:
    try:
        return BankAccount.objects.select_for_update().get(id=bank_account_id)
    except (BankAccount.DoesNotExist, ValueError, ValidationError) as exc:
        raise RecordNotFoundError("Bank account not found") from exc


# ============================================================
# MUTATIONS
# ============================================================


def apply_treasury_delta(*, direction: str, amount, note: str = "", voucher=None, actor=None) -> TreasuryTransaction:
    amt = _q2(amount)
    if amt <= 0:
        raise AccountingValidationError("Amount must be > 0")

    treasury = lock_treasury()
    treasury.current_balance = _q2(treasury.current_balance) + _signed(direction, amt)
    treasury.save(update_fields=["current_balance", "updated_at"])

    txn = TreasuryTransaction(
        date=timezone.localdate(),
        type=direction,
        amount=amt,
        note=(note or "")[:255],
        balance_after=treasury.current_balance,
        voucher=voucher,
        created_by=actor,
    )
    txn.save()

    logger.info(
        "Treasury balance updated",
        extra={
            "direction": direction,
            "amount": str(amt),
            "balance_after": str(treasury.current_balance),
            "voucher_id": str(voucher.pk) if voucher is not None else None,
        },
    )
    return txn


def apply_bank_delta(*, bank_account_id, direction: str, amount) -> BankAccount:
    amt = _q2(amount)
    if amt <= 0:
        raise AccountingValidationError("Amount must be > 0")

    account = lock_bank_account(bank_account_id)
    account.current_balance = _q2(account.current_balance) + _signed(direction, amt)
    account.save(update_fields=["current_balance", "updated_at"])

    logger.info(
        "Bank balance updated",
        extra={
            "bank_account_id": str(account.id),
            "direction": direction,
            "amount": str(amt),
            "balance_after": str(account.current_balance),
        },
    )
    return account


# ============================================================
# NEGATIVE-BALANCE GUARD
# ============================================================


def assert_can_pay(
    *,
    method: str,
    amount,
    bank_account_id=None,
    settings: AccountingSettings | None = None,
) -> None:
    """
    Reject a payment that would overdraw a guarded balance.

    Must run inside the same transaction as the balance write: the row
    lock taken here is held until commit.
    """
    amt = _q2(amount)
    settings = settings or get_accounting_settings()

    if method == "CASH":
        if not settings.prevent_negative_treasury:
            return
        treasury = lock_treasury()
        if _q2(treasury.current_balance) < amt:
            logger.warning(
                "Payment rejected: insufficient treasury balance",
                extra={"amount": str(amt), "balance": str(treasury.current_balance)},
            )
            raise InsufficientBalanceError("Insufficient treasury balance")
        return

    if method == "BANK_TRANSFER":
        if not bank_account_id:
            raise AccountingValidationError("A bank account is required for bank transfers")
        account = lock_bank_account(bank_account_id)
        if not settings.prevent_negative_bank:
            return
        if _q2(account.current_balance) < amt:
            logger.warning(
                "Payment rejected: insufficient bank balance",
                extra={
                    "bank_account_id": str(account.id),
                    "amount": str(amt),
                    "balance": str(account.current_balance),
                },
            )
            raise InsufficientBalanceError("Insufficient bank account balance")
        return

    raise AccountingValidationError(f"Unknown payment method: {method!r}")


# ============================================================
# TREASURY OPENING BALANCE
# ============================================================


@transaction.atomic
def set_opening_balance(*, amount, actor=None) -> Treasury:
    """
    Set the treasury opening balance once; current_balance is reset to it.

    Cash vouchers recorded before this call are overwritten, not carried
    over, and no TreasuryTransaction is written for the reset. Their
    balance_after values then describe the pre-opening treasury only.
    """
    amt = _q2(amount)

    treasury = lock_treasury()
    if treasury.is_opening_set:
        logger.warning(
            "Opening balance already set",
            extra={"opening_set_at": treasury.opening_set_at.isoformat()},
        )
        raise OpeningBalanceAlreadySetError("Treasury opening balance has already been set")

    treasury.opening_balance = amt
    treasury.current_balance = amt
    treasury.opening_set_at = timezone.now()
    treasury.opening_set_by = actor
    treasury.save()

    logger.info("Treasury opening balance set", extra={"amount": str(amt)})
    return treasury


def get_treasury_balance() -> dict:
    treasury = Treasury.load()
    settings = get_accounting_settings()
    return {
        "current_balance": _q2(treasury.current_balance),
        "opening_balance": _q2(treasury.opening_balance) if treasury.opening_balance is not None else None,
        "opening_set_at": treasury.opening_set_at,
        "opening_set_by": str(treasury.opening_set_by_id) if treasury.opening_set_by_id else None,
        "prevent_negative_treasury": settings.prevent_negative_treasury,
    }


# ============================================================
# BANK ACCOUNT MASTER DATA
# ============================================================


@transaction.atomic
def create_bank_account(*, bank: Bank, account_no: str, opening_balance=0) -> BankAccount:
    account_no = (account_no or "").strip()
    if not account_no:
        raise AccountingValidationError("account_no is required")

    opening = _q2(opening_balance)
    try:
        with transaction.atomic():
            return BankAccount.objects.create(
                bank=bank,
                account_no=account_no,
                opening_balance=opening,
                current_balance=opening,
            )
    except IntegrityError as exc:
        raise AccountingValidationError(f"Account number {account_no} is already registered") from exc
