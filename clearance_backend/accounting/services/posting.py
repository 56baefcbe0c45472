# accounting/services/posting.py

"""
======================================================
PATH: accounting/services/posting.py
======================================================
POSTING ADAPTER

Maps non-voucher business events to ledger postings.

This module should remain a thin adapter:
- It DOES NOT do document CRUD (invoice lines, trips, fees live elsewhere).
- It DOES map business events -> accounting postings.
- It ALWAYS goes through ledger_service.post() (immutability + validation).

Accounting effect:
- Invoice:        Dr customer:<id>        Cr revenue:<type>
- Shipping trip:  Dr expense:shipping     Cr agent:<id>
- Agent fee:      Dr expense:agent_fees   Cr agent:<id>
"""

from __future__ import annotations

import logging
from datetime import date as date_type
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone

from accounting.account_codes import EXPENSE_AGENT_FEES, EXPENSE_SHIPPING, AccountRef
from accounting.models.invoice import Invoice
from accounting.models.ledger import LedgerEntry
from accounting.services import ledger_service
from accounting.services.exceptions import AccountingValidationError
from accounting.services.sequence_service import INVOICE_PREFIXES, create_with_code

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")


def _money(value) -> Decimal:
    try:
        amt = Decimal(str(value)).quantize(TWOPLACES, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise AccountingValidationError(f"Invalid amount: {value!r}") from exc
    if amt <= 0:
        raise AccountingValidationError("Amount must be > 0")
    return amt


def _required(value, name: str) -> str:
    value = (str(value) if value is not None else "").strip()
    if not value:
        raise AccountingValidationError(f"{name} is required")
    return value


# ============================================================
# INVOICES
# ============================================================


@transaction.atomic
def create_invoice(
    *,
    customer_id,
    invoice_type: str,
    invoice_date: date_type | None = None,
    total,
    customs_no: str = "",
    actor=None,
) -> Invoice:
    customer_id = _required(customer_id, "customer_id")
    invoice_type = (invoice_type or "").strip().upper()
    if invoice_type not in INVOICE_PREFIXES:
        raise AccountingValidationError(f"Invalid invoice type: {invoice_type or '<empty>'}")

    amount = _money(total)
    invoice_date = invoice_date or timezone.localdate()

    try:
        invoice = create_with_code(
            model=Invoice,
            queryset=Invoice.objects.filter(type=invoice_type),
            prefix=INVOICE_PREFIXES[invoice_type],
            doc_date=invoice_date,
            fields={
                "type": invoice_type,
                "customer_id": customer_id,
                "customs_no": (customs_no or "").strip(),
                "date": invoice_date,
                "total": amount,
                "created_by": actor,
            },
        )
    except ValidationError as exc:
        raise AccountingValidationError(str(exc)) from exc

    ledger_service.post(
        source_type=LedgerEntry.SOURCE_INVOICE,
        source_id=invoice.id,
        debit_account=AccountRef.customer(customer_id),
        credit_account=AccountRef.revenue(invoice_type.lower()),
        amount=amount,
        description=f"{invoice.get_type_display()} invoice {invoice.code}",
    )

    logger.info(
        "Invoice created",
        extra={"invoice_id": str(invoice.id), "code": invoice.code, "total": str(amount)},
    )
    return invoice


# ============================================================
# AGENTS: TRIPS & ADDITIONAL FEES
# ============================================================


def post_trip_to_ledger(*, trip_id, agent_id, amount, agent_name: str = "") -> LedgerEntry:
    agent_id = _required(agent_id, "agent_id")
    return ledger_service.post(
        source_type=LedgerEntry.SOURCE_TRIP,
        source_id=_required(trip_id, "trip_id"),
        debit_account=AccountRef.expense(EXPENSE_SHIPPING),
        credit_account=AccountRef.agent(agent_id),
        amount=_money(amount),
        description=f"Trip {agent_name or agent_id}".strip(),
    )


def post_additional_fee_to_ledger(
    *,
    fee_id,
    agent_id,
    amount,
    fee_type: str,
    agent_name: str = "",
) -> LedgerEntry:
    agent_id = _required(agent_id, "agent_id")
    return ledger_service.post(
        source_type=LedgerEntry.SOURCE_ADDITIONAL_FEE,
        source_id=_required(fee_id, "fee_id"),
        debit_account=AccountRef.expense(EXPENSE_AGENT_FEES),
        credit_account=AccountRef.agent(agent_id),
        amount=_money(amount),
        description=f"{fee_type} - {agent_name or agent_id}",
    )
