# accounting/api/views/ledger.py

"""
LEDGER JOURNAL API (READ-ONLY)

GET /api/accounting/ledger/entries/?account=<code>&date_from=&date_to=&limit=&offset=
GET /api/accounting/ledger/balance/?account=<code>

Both require accounting.view_ledgerentry.
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.errors import date_param, forbidden, service_error_response
from accounting.api.serializers.ledger import LedgerEntrySerializer
from accounting.services.account_names import translate_account
from accounting.services.exceptions import AccountingServiceError, AccountingValidationError
from accounting.services.ledger_service import account_balance, account_entries

LEDGER_VIEW_PERMISSION = "accounting.view_ledgerentry"
DEFAULT_LIMIT = 50
MAX_LIMIT = 500

ACCOUNT_PARAM = OpenApiParameter(
    name="account",
    type=str,
    location=OpenApiParameter.QUERY,
    required=True,
    description="Account code, e.g. treasury, bank:<id>, customer:<id>",
)


def _account_param(request) -> str:
    account = (request.query_params.get("account") or "").strip()
    if not account:
        raise AccountingValidationError("account query parameter is required")
    return account


def _int_param(request, name: str, default: int) -> int:
    raw = request.query_params.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except (TypeError, ValueError) as exc:
        raise AccountingValidationError(f"{name} must be an integer") from exc
    if value < 0:
        raise AccountingValidationError(f"{name} must be >= 0")
    return value


class LedgerEntriesView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["ledger"],
        parameters=[
            ACCOUNT_PARAM,
            OpenApiParameter(name="date_from", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="date_to", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="limit", type=int, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="offset", type=int, location=OpenApiParameter.QUERY, required=False),
        ],
        responses={200: dict},
    )
    def get(self, request):
        if not request.user.has_perm(LEDGER_VIEW_PERMISSION):
            return forbidden("You do not have permission to view the ledger.")

        try:
            account = _account_param(request)
            limit = min(_int_param(request, "limit", DEFAULT_LIMIT), MAX_LIMIT)
            offset = _int_param(request, "offset", 0)
            entries, total = account_entries(
                account,
                date_from=date_param(request, "date_from"),
                date_to=date_param(request, "date_to"),
                limit=limit,
                offset=offset,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(
            {
                "account": account,
                "account_name": translate_account(account),
                "total": total,
                "limit": limit,
                "offset": offset,
                "entries": LedgerEntrySerializer(entries, many=True).data,
            },
            status=status.HTTP_200_OK,
        )


class LedgerBalanceView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["ledger"], parameters=[ACCOUNT_PARAM], responses={200: dict})
    def get(self, request):
        if not request.user.has_perm(LEDGER_VIEW_PERMISSION):
            return forbidden("You do not have permission to view the ledger.")

        try:
            account = _account_param(request)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(
            {
                "account": account,
                "account_name": translate_account(account),
                "balance": account_balance(account),
            },
            status=status.HTTP_200_OK,
        )
