# accounting/api/views/reports.py

"""
REPORT API VIEWS (READ-ONLY)

All require accounting.view_ledgerentry.

GET /api/accounting/reports/trial-balance/?as_of=YYYY-MM-DD
GET /api/accounting/reports/general-journal/?date_from=&date_to=
GET /api/accounting/reports/income-expense/?date_from=&date_to=
GET /api/accounting/reports/statement/?account=<code>&date_from=&date_to=
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.errors import date_param, forbidden, service_error_response
from accounting.api.views.treasury import DATE_RANGE_PARAMS
from accounting.services.exceptions import AccountingServiceError, AccountingValidationError
from accounting.services.report_service import (
    account_statement,
    general_journal,
    income_expense_report,
    trial_balance,
)

REPORT_PERMISSION = "accounting.view_ledgerentry"


class _ReportView(APIView):
    permission_classes = [IsAuthenticated]

    def build(self, request) -> dict:
        raise NotImplementedError

    def get(self, request):
        if not request.user.has_perm(REPORT_PERMISSION):
            return forbidden("You do not have permission to view accounting reports.")

        try:
            report = self.build(request)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(report, status=status.HTTP_200_OK)


@extend_schema(
    tags=["reports"],
    parameters=[OpenApiParameter(name="as_of", type=str, location=OpenApiParameter.QUERY, required=False)],
    responses={200: dict},
)
class TrialBalanceView(_ReportView):
    def build(self, request):
        return trial_balance(date_param(request, "as_of"))


@extend_schema(tags=["reports"], parameters=DATE_RANGE_PARAMS, responses={200: dict})
class GeneralJournalView(_ReportView):
    def build(self, request):
        return general_journal(date_param(request, "date_from"), date_param(request, "date_to"))


@extend_schema(tags=["reports"], parameters=DATE_RANGE_PARAMS, responses={200: dict})
class IncomeExpenseView(_ReportView):
    def build(self, request):
        return income_expense_report(date_param(request, "date_from"), date_param(request, "date_to"))


@extend_schema(
    tags=["reports"],
    parameters=[
        OpenApiParameter(name="account", type=str, location=OpenApiParameter.QUERY, required=True),
        *DATE_RANGE_PARAMS,
    ],
    responses={200: dict},
)
class AccountStatementView(_ReportView):
    def build(self, request):
        account = (request.query_params.get("account") or "").strip()
        if not account:
            raise AccountingValidationError("account query parameter is required")
        return account_statement(
            account,
            date_param(request, "date_from"),
            date_param(request, "date_to"),
        )
