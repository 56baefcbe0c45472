# accounting/services/ledger_service.py

"""
======================================================
PATH: accounting/services/ledger_service.py
======================================================
LEDGER JOURNAL

The append-only double-entry journal and the single source of truth for
account balances.

- post() appends one immutable LedgerEntry (both sides in one row)
- account_balance(code) = sum(debits) - sum(credits)
- account_entries(code) lists rows touching the account on either side,
  newest first

Reports aggregate over this journal and never write to it.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db.models import Q, Sum
from django.utils import timezone

from accounting.account_codes import AccountRef
from accounting.models.ledger import LedgerEntry
from accounting.services.exceptions import LedgerPostingError

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
ZERO = Decimal("0.00")


def _money(value) -> Decimal:
    try:
        return Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise LedgerPostingError(f"Invalid amount: {value!r}") from exc


def _code(account) -> str:
    if isinstance(account, AccountRef):
        return str(account)
    return (str(account) if account is not None else "").strip()


def day_start(value):
    if value is None or isinstance(value, datetime):
        return value
    return timezone.make_aware(datetime.combine(value, time.min), timezone.get_current_timezone())


def day_end(value):
    if value is None or isinstance(value, datetime):
        return value
    return timezone.make_aware(datetime.combine(value, time.max), timezone.get_current_timezone())


def created_between(queryset, date_from: date | datetime | None = None, date_to: date | datetime | None = None):
    """Filter ledger rows by created_at; plain dates cover the whole day."""
    start = day_start(date_from)
    end = day_end(date_to)
    if start is not None:
        queryset = queryset.filter(created_at__gte=start)
    if end is not None:
        queryset = queryset.filter(created_at__lte=end)
    return queryset


def post(
    *,
    source_type: str,
    source_id,
    debit_account,
    credit_account,
    amount,
    description: str = "",
    currency: str | None = None,
    exchange_rate=1,
) -> LedgerEntry:
    debit = _code(debit_account)
    credit = _code(credit_account)
    amt = _money(amount)

    if not debit or not credit:
        raise LedgerPostingError("Both debit and credit accounts are required")
    if debit == credit:
        raise LedgerPostingError(f"Debit and credit accounts must differ ({debit})")
    if amt <= ZERO:
        raise LedgerPostingError("Ledger amount must be > 0")
    if source_id is None or str(source_id).strip() == "":
        raise LedgerPostingError("source_id is required")

    entry = LedgerEntry(
        source_type=source_type,
        source_id=str(source_id),
        debit_account=debit,
        credit_account=credit,
        amount=amt,
        currency=(currency or settings.ACCOUNTING_DEFAULT_CURRENCY),
        exchange_rate=Decimal(str(exchange_rate or 1)),
        description=(description or "").strip(),
    )

    try:
        entry.save()
    except ValidationError as exc:
        raise LedgerPostingError(str(exc)) from exc

    logger.info(
        "Ledger entry posted",
        extra={
            "ledger_entry_id": entry.id,
            "source_type": source_type,
            "source_id": entry.source_id,
            "debit_account": debit,
            "credit_account": credit,
            "amount": str(amt),
        },
    )
    return entry


def account_balance(account) -> Decimal:
    code = _code(account)
    debits = LedgerEntry.objects.filter(debit_account=code).aggregate(total=Sum("amount"))["total"]
    credits = LedgerEntry.objects.filter(credit_account=code).aggregate(total=Sum("amount"))["total"]
    return (debits or ZERO) - (credits or ZERO)


def account_entries(
    account,
    *,
    date_from=None,
    date_to=None,
    limit: int | None = None,
    offset: int = 0,
):
    """Returns (entries, total) for rows touching `account`, newest first."""
    code = _code(account)
    qs = LedgerEntry.objects.filter(Q(debit_account=code) | Q(credit_account=code))
    qs = created_between(qs, date_from, date_to).order_by("-created_at", "-id")

    total = qs.count()
    offset = max(0, int(offset or 0))
    if limit is None:
        entries = list(qs[offset:])
    else:
        entries = list(qs[offset : offset + max(0, int(limit))])
    return entries, total


def entries_by_source(source_type: str, source_id) -> list[LedgerEntry]:
    return list(
        LedgerEntry.objects.filter(source_type=source_type, source_id=str(source_id)).order_by(
            "-created_at", "-id"
        )
    )
