# accounting/services/sequence_service.py

"""
======================================================
PATH: accounting/services/sequence_service.py
======================================================
DOCUMENT CODE SEQUENCES

Codes look like  <PREFIX>-<YY>-<NNNN>  e.g. RC-25-0007.

- NNNN is scoped to (document type, calendar year of the document date)
- candidate = rows of that type in that year + 1
- a taken candidate is skipped (concurrent creation, historical gaps)
- after max_attempts collisions the code falls back to a timestamp-derived
  suffix so creation always makes progress

create_with_code() inserts inside a savepoint and regenerates on a unique
constraint race, so a collision never aborts the caller's transaction.
"""

from __future__ import annotations

import logging
import time
from datetime import date

from django.conf import settings
from django.db import IntegrityError, transaction

logger = logging.getLogger(__name__)

VOUCHER_PREFIXES = {
    "RECEIPT": "RC",
    "PAYMENT": "PY",
}

INVOICE_PREFIXES = {
    "EXPORT": "EX",
    "IMPORT": "IM",
    "TRANSIT": "TR",
    "FREE": "FR",
}

DEFAULT_MAX_ATTEMPTS = 100
INSERT_RETRIES = 5


def _max_attempts(value: int | None) -> int:
    if value is not None:
        return max(1, int(value))
    return max(1, int(getattr(settings, "ACCOUNTING_CODE_MAX_ATTEMPTS", DEFAULT_MAX_ATTEMPTS)))


def format_code(prefix: str, doc_date: date, sequence: int) -> str:
    return f"{prefix}-{doc_date.year % 100:02d}-{int(sequence):04d}"


def _fallback_code(prefix: str, doc_date: date) -> str:
    suffix = str(int(time.time() * 1000))[-6:]
    return f"{prefix}-{doc_date.year % 100:02d}-{suffix}"


def generate_document_code(
    *,
    queryset,
    prefix: str,
    doc_date: date,
    date_field: str = "date",
    code_field: str = "code",
    max_attempts: int | None = None,
) -> str:
    """
    Next code for the documents in `queryset` (already filtered by type).

    Existence is checked against the whole model, since codes are unique
    across every type and year.
    """
    if not isinstance(doc_date, date):
        raise ValueError("doc_date must be a date")

    year_filter = {f"{date_field}__year": doc_date.year}
    sequence = queryset.filter(**year_filter).count() + 1

    model_manager = queryset.model._default_manager
    attempts = _max_attempts(max_attempts)

    for _ in range(attempts):
        code = format_code(prefix, doc_date, sequence)
        if not model_manager.filter(**{code_field: code}).exists():
            return code
        sequence += 1

    code = _fallback_code(prefix, doc_date)
    logger.warning(
        "Code sequence exhausted, using timestamp suffix",
        extra={"prefix": prefix, "year": doc_date.year, "attempts": attempts, "code": code},
    )
    return code


def create_with_code(
    *,
    model,
    queryset,
    prefix: str,
    doc_date: date,
    fields: dict,
    date_field: str = "date",
    code_field: str = "code",
):
    """
    Create `model(**fields)` with a freshly generated code.

    Each insert runs in its own savepoint; a unique-constraint race on the
    code rolls back only that savepoint and the code is regenerated.
    """
    last_exc: IntegrityError | None = None

    for _ in range(INSERT_RETRIES):
        code = generate_document_code(
            queryset=queryset,
            prefix=prefix,
            doc_date=doc_date,
            date_field=date_field,
            code_field=code_field,
        )
        obj = model(**{**fields, code_field: code})
        obj.full_clean(validate_unique=False)
        try:
            with transaction.atomic():
                obj.save(force_insert=True)
            return obj
        except IntegrityError as exc:
            last_exc = exc
            logger.warning(
                "Code collision on insert, regenerating",
                extra={"prefix": prefix, "code": code},
            )

    raise last_exc
