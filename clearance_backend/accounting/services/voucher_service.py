# accounting/services/voucher_service.py

"""
======================================================
PATH: accounting/services/voucher_service.py
======================================================
VOUCHER ENGINE

create_voucher():
    validate -> negative-balance guard -> mint code -> voucher row
    -> balance delta (+ treasury subledger row for cash) -> ledger post
    One atomic transaction; any failure rolls back every write.

update_voucher():
    Field patch only. Balances and the ledger are NOT re-posted, even
    when amount / method / bank account change (logged as a warning).

remove_voucher():
    Reverses the balance delta on the voucher's current method/account,
    then deletes the row. The ledger entry stays in the journal.

Accounting effect:
- RECEIPT: Dr money account (treasury | bank:<id>)  Cr party account
- PAYMENT: Dr party account                          Cr money account
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date as date_type
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone
from django.utils.dateparse import parse_date

from accounting.account_codes import AccountRef, money_account, party_account
from accounting.filters import VoucherFilter
from accounting.models.banking import BankAccount
from accounting.models.expense_category import ExpenseCategory
from accounting.models.ledger import LedgerEntry
from accounting.models.voucher import Voucher
from accounting.services import balance_service, ledger_service
from accounting.services.exceptions import (
    AccountingServiceError,
    AccountingValidationError,
    RecordNotFoundError,
)
from accounting.services.sequence_service import VOUCHER_PREFIXES, create_with_code
from accounting.services.settings_service import AccountingSettings

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")

UPDATABLE_FIELDS = (
    "party_type",
    "party_id",
    "party_name",
    "method",
    "bank_account_id",
    "reference_number",
    "amount",
    "category_id",
    "note",
    "date",
)
MONEY_FIELDS = {"amount", "method", "bank_account_id"}

_LABELS = {
    Voucher.TYPE_RECEIPT: "Receipt voucher",
    Voucher.TYPE_PAYMENT: "Payment voucher",
}


def _money(value) -> Decimal:
    try:
        return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise AccountingValidationError(f"Invalid amount: {value!r}") from exc


def _to_date(value) -> date_type:
    if value is None or value == "":
        return timezone.localdate()
    if isinstance(value, date_type):
        return value
    parsed = parse_date(str(value))
    if parsed is None:
        raise AccountingValidationError(f"Invalid date: {value!r}")
    return parsed


def _choice(value, allowed, name: str) -> str:
    value = (str(value) if value is not None else "").strip().upper()
    if value not in allowed:
        raise AccountingValidationError(f"Invalid {name}: {value or '<empty>'}")
    return value


def _opt_str(value) -> str:
    return (str(value) if value is not None else "").strip()


# ============================================================
# INPUT
# ============================================================


@dataclass(frozen=True)
class VoucherInput:
    """
    Normalized voucher payload.

    - type / party_type / method are upper-cased choice values
    - amount is Decimal money (2dp, > 0)
    - party_id for CUSTOMER/EMPLOYEE/AGENT, party_name for OTHER
    - bank_account_id iff method == BANK_TRANSFER
    - category_id for OTHER-party payments
    """

    type: str
    party_type: str
    amount: Decimal
    date: date_type
    method: str = Voucher.METHOD_CASH
    party_id: str = ""
    party_name: str = ""
    bank_account_id: str = ""
    category_id: str = ""
    reference_number: str = ""
    note: str = ""

    @classmethod
    def from_raw(cls, data: dict) -> "VoucherInput":
        data = dict(data or {})

        payload = cls(
            type=_choice(data.get("type"), {Voucher.TYPE_RECEIPT, Voucher.TYPE_PAYMENT}, "type"),
            party_type=_choice(
                data.get("party_type"),
                {c for c, _ in Voucher.PARTY_CHOICES},
                "party_type",
            ),
            method=_choice(
                data.get("method") or Voucher.METHOD_CASH,
                {c for c, _ in Voucher.METHOD_CHOICES},
                "method",
            ),
            amount=_money(data.get("amount")),
            date=_to_date(data.get("date")),
            party_id=_opt_str(data.get("party_id")),
            party_name=_opt_str(data.get("party_name")),
            bank_account_id=_opt_str(data.get("bank_account_id") or data.get("bank_account")),
            category_id=_opt_str(data.get("category_id") or data.get("category")),
            reference_number=_opt_str(data.get("reference_number")),
            note=_opt_str(data.get("note")),
        )
        payload.validate()
        return payload

    def validate(self) -> None:
        if self.amount <= 0:
            raise AccountingValidationError("Amount must be > 0")

        if self.party_type == Voucher.PARTY_OTHER:
            if not self.party_name:
                raise AccountingValidationError("party_name is required for OTHER parties")
        elif not self.party_id:
            raise AccountingValidationError("party_id is required for this party type")

        if self.method == Voucher.METHOD_BANK_TRANSFER and not self.bank_account_id:
            raise AccountingValidationError("A bank account is required for bank transfers")

        if (
            self.type == Voucher.TYPE_PAYMENT
            and self.party_type == Voucher.PARTY_OTHER
            and not self.category_id
        ):
            raise AccountingValidationError("An expense category is required for this payment")


# ============================================================
# LOOKUPS
# ============================================================


def _get_bank_account(bank_account_id) -> BankAccount:
    try:
        return BankAccount.objects.get(id=bank_account_id)
    except (BankAccount.DoesNotExist, ValueError, ValidationError) as exc:
        raise RecordNotFoundError("Bank account not found") from exc


def _get_category(category_id) -> ExpenseCategory:
    try:
        return ExpenseCategory.objects.get(id=category_id)
    except (ExpenseCategory.DoesNotExist, ValueError, ValidationError) as exc:
        raise RecordNotFoundError("Expense category not found") from exc


def get_voucher(voucher_id, *, for_update: bool = False) -> Voucher:
    qs = Voucher.objects.select_related("bank_account__bank", "category", "created_by")
    if for_update:
        qs = Voucher.objects.select_for_update()
    try:
        return qs.get(id=voucher_id)
    except (Voucher.DoesNotExist, ValueError, ValidationError) as exc:
        raise RecordNotFoundError("Voucher not found") from exc


def list_vouchers(filters: dict | None = None):
    filterset = VoucherFilter(
        data=filters or {},
        queryset=Voucher.objects.select_related("bank_account__bank", "category", "created_by"),
    )
    if not filterset.is_valid():
        raise AccountingValidationError(str(dict(filterset.errors)))
    return filterset.qs.order_by("-date", "-created_at")


def voucher_accounts(voucher: Voucher) -> tuple[AccountRef, AccountRef]:
    """(debit, credit) pair for a voucher's ledger posting."""
    cash_side = money_account(voucher.method, voucher.bank_account_id)
    party_side = party_account(
        voucher.party_type,
        voucher.party_id,
        voucher.category_id,
        side=voucher.type,
    )
    if voucher.type == Voucher.TYPE_RECEIPT:
        return cash_side, party_side
    return party_side, cash_side


def _direction(voucher_type: str) -> str:
    if voucher_type == Voucher.TYPE_RECEIPT:
        return balance_service.DIRECTION_IN
    return balance_service.DIRECTION_OUT


def _reverse(direction: str) -> str:
    if direction == balance_service.DIRECTION_IN:
        return balance_service.DIRECTION_OUT
    return balance_service.DIRECTION_IN


# ============================================================
# CREATE
# ============================================================


@transaction.atomic
def create_voucher(
    *,
    data,
    actor=None,
    enforce_guard: bool = True,
    ledger_source_type: str = LedgerEntry.SOURCE_VOUCHER,
    ledger_description: str | None = None,
    settings: AccountingSettings | None = None,
) -> Voucher:
    if isinstance(data, VoucherInput):
        payload = data
        payload.validate()
    else:
        payload = VoucherInput.from_raw(data)

    bank_account = None
    if payload.method == Voucher.METHOD_BANK_TRANSFER:
        bank_account = _get_bank_account(payload.bank_account_id)

    category = _get_category(payload.category_id) if payload.category_id else None

    if enforce_guard and payload.type == Voucher.TYPE_PAYMENT:
        balance_service.assert_can_pay(
            method=payload.method,
            amount=payload.amount,
            bank_account_id=bank_account.id if bank_account else None,
            settings=settings,
        )

    fields = {
        "type": payload.type,
        "party_type": payload.party_type,
        "party_id": payload.party_id,
        "party_name": payload.party_name,
        "method": payload.method,
        "bank_account": bank_account,
        "reference_number": payload.reference_number,
        "amount": payload.amount,
        "note": payload.note,
        "date": payload.date,
        "category": category,
        "created_by": actor,
    }

    try:
        Voucher(code="PENDING", **fields).full_clean(exclude=["code"], validate_unique=False)
    except ValidationError as exc:
        raise AccountingValidationError(str(exc)) from exc

    try:
        voucher = create_with_code(
            model=Voucher,
            queryset=Voucher.objects.filter(type=payload.type),
            prefix=VOUCHER_PREFIXES[payload.type],
            doc_date=payload.date,
            fields=fields,
        )

        label = f"{_LABELS[voucher.type]} {voucher.code}"
        direction = _direction(voucher.type)

        if voucher.is_cash:
            balance_service.apply_treasury_delta(
                direction=direction,
                amount=voucher.amount,
                note=label,
                voucher=voucher,
                actor=actor,
            )
        else:
            balance_service.apply_bank_delta(
                bank_account_id=voucher.bank_account_id,
                direction=direction,
                amount=voucher.amount,
            )

        debit, credit = voucher_accounts(voucher)
        ledger_service.post(
            source_type=ledger_source_type,
            source_id=voucher.id,
            debit_account=debit,
            credit_account=credit,
            amount=voucher.amount,
            description=ledger_description or label,
        )
    except AccountingServiceError:
        raise
    except Exception:
        logger.exception("Voucher creation failed, rolling back", extra={"type": payload.type})
        raise

    logger.info(
        "Voucher created",
        extra={
            "voucher_id": str(voucher.id),
            "code": voucher.code,
            "type": voucher.type,
            "method": voucher.method,
            "amount": str(voucher.amount),
        },
    )
    return voucher


# ============================================================
# UPDATE (no reposting)
# ============================================================


@transaction.atomic
def update_voucher(voucher_id, *, changes: dict) -> Voucher:
    voucher = get_voucher(voucher_id, for_update=True)
    changes = dict(changes or {})

    unknown = set(changes) - set(UPDATABLE_FIELDS) - {"bank_account", "category"}
    if unknown:
        raise AccountingValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    if "bank_account" in changes:
        changes["bank_account_id"] = changes.pop("bank_account")
    if "category" in changes:
        changes["category_id"] = changes.pop("category")

    applied = []
    for name, value in changes.items():
        if name == "amount":
            value = _money(value)
        elif name == "date":
            value = _to_date(value)
        elif name in ("party_type", "method"):
            value = _opt_str(value).upper()
        elif name == "bank_account_id":
            value = _get_bank_account(value).id if value else None
        elif name == "category_id":
            value = _get_category(value).id if value else None
        else:
            value = _opt_str(value)

        if getattr(voucher, name) != value:
            setattr(voucher, name, value)
            applied.append(name)

    if not applied:
        return voucher

    try:
        voucher.full_clean()
    except ValidationError as exc:
        raise AccountingValidationError(str(exc)) from exc

    voucher.save(update_fields=[*applied, "updated_at"])

    money_changes = sorted(MONEY_FIELDS.intersection(applied))
    if money_changes:
        logger.warning(
            "Voucher money fields changed without reposting balances or ledger",
            extra={"voucher_id": str(voucher.id), "code": voucher.code, "fields": money_changes},
        )
    else:
        logger.info("Voucher updated", extra={"voucher_id": str(voucher.id), "fields": applied})

    return get_voucher(voucher.id)


# ============================================================
# DELETE (balance reversal only)
# ============================================================


@transaction.atomic
def remove_voucher(voucher_id, *, actor=None) -> None:
    voucher = get_voucher(voucher_id, for_update=True)

    direction = _reverse(_direction(voucher.type))
    note = f"Reversal of {_LABELS[voucher.type].lower()} {voucher.code}"

    try:
        if voucher.is_cash:
            balance_service.apply_treasury_delta(
                direction=direction,
                amount=voucher.amount,
                note=note,
                voucher=None,
                actor=actor,
            )
        elif voucher.bank_account_id:
            balance_service.apply_bank_delta(
                bank_account_id=voucher.bank_account_id,
                direction=direction,
                amount=voucher.amount,
            )

        code = voucher.code
        voucher.delete()
    except AccountingServiceError:
        raise
    except Exception:
        logger.exception("Voucher removal failed, rolling back", extra={"voucher_id": str(voucher_id)})
        raise

    logger.info(
        "Voucher removed; ledger entry left standing",
        extra={"voucher_id": str(voucher_id), "code": code},
    )
