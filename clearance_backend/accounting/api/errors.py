# accounting/api/errors.py

"""
SERVICE ERROR -> HTTP RESPONSE

Views catch AccountingServiceError and hand it here; the response body is
always {"detail": "<message>"}.
"""

from __future__ import annotations

import logging

from django.utils.dateparse import parse_date
from rest_framework import status
from rest_framework.response import Response

from accounting.services.exceptions import (
    AccountingServiceError,
    AccountingValidationError,
    RecordNotFoundError,
    StateConflictError,
)

logger = logging.getLogger(__name__)

# Most specific first
STATUS_BY_ERROR = (
    (RecordNotFoundError, status.HTTP_404_NOT_FOUND),
    (StateConflictError, status.HTTP_409_CONFLICT),
    (AccountingServiceError, status.HTTP_400_BAD_REQUEST),
)


def status_for(exc: AccountingServiceError) -> int:
    for error_cls, code in STATUS_BY_ERROR:
        if isinstance(exc, error_cls):
            return code
    return status.HTTP_400_BAD_REQUEST


def service_error_response(exc: AccountingServiceError) -> Response:
    code = status_for(exc)
    logger.info(
        "Request rejected by accounting service",
        extra={"error": exc.__class__.__name__, "status": code, "detail": str(exc)},
    )
    return Response({"detail": str(exc)}, status=code)


def forbidden(message: str) -> Response:
    return Response({"detail": message}, status=status.HTTP_403_FORBIDDEN)


def date_param(request, name: str):
    """Optional YYYY-MM-DD query parameter."""
    raw = (request.query_params.get(name) or "").strip()
    if not raw:
        return None
    parsed = parse_date(raw)
    if parsed is None:
        raise AccountingValidationError(f"{name} must be YYYY-MM-DD")
    return parsed
