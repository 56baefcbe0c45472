# accounting/api/views/treasury.py

"""
TREASURY & BANK API

GET  /api/accounting/treasury/                      accounting.view_treasury
POST /api/accounting/treasury/opening-balance/      accounting.change_treasury (set once)
GET  /api/accounting/treasury/transactions/         accounting.view_treasurytransaction
GET  /api/accounting/treasury/report/               accounting.view_treasurytransaction
GET  /api/accounting/bank-accounts/<id>/report/     accounting.view_bankaccount
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.errors import date_param, forbidden, service_error_response
from accounting.api.serializers.treasury import (
    OpeningBalanceSerializer,
    TreasuryBalanceSerializer,
    TreasuryTransactionSerializer,
)
from accounting.filters import TreasuryTransactionFilter
from accounting.models.treasury import TreasuryTransaction
from accounting.services.balance_service import get_treasury_balance, set_opening_balance
from accounting.services.exceptions import AccountingServiceError
from accounting.services.report_service import bank_account_report, treasury_report

DATE_RANGE_PARAMS = [
    OpenApiParameter(name="date_from", type=str, location=OpenApiParameter.QUERY, required=False),
    OpenApiParameter(name="date_to", type=str, location=OpenApiParameter.QUERY, required=False),
]


class TreasuryBalanceView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["treasury"], responses=TreasuryBalanceSerializer)
    def get(self, request):
        if not request.user.has_perm("accounting.view_treasury"):
            return forbidden("You do not have permission to view the treasury.")

        data = get_treasury_balance()
        return Response(TreasuryBalanceSerializer(data).data, status=status.HTTP_200_OK)


class TreasuryOpeningBalanceView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = OpeningBalanceSerializer

    @extend_schema(
        tags=["treasury"],
        request=OpeningBalanceSerializer,
        responses={200: TreasuryBalanceSerializer, 403: dict, 409: dict},
    )
    def post(self, request):
        if not request.user.has_perm("accounting.change_treasury"):
            return forbidden("You do not have permission to set the opening balance.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            set_opening_balance(amount=s.validated_data["opening_balance"], actor=request.user)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(TreasuryBalanceSerializer(get_treasury_balance()).data, status=status.HTTP_200_OK)


class TreasuryTransactionListView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = TreasuryTransactionSerializer
    filterset_class = TreasuryTransactionFilter

    def get_queryset(self):
        return TreasuryTransaction.objects.select_related("voucher").order_by("-date", "-created_at", "-id")

    @extend_schema(tags=["treasury"], responses=TreasuryTransactionSerializer(many=True))
    def get(self, request):
        if not request.user.has_perm("accounting.view_treasurytransaction"):
            return forbidden("You do not have permission to view treasury transactions.")

        qs = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data, status=status.HTTP_200_OK)


class TreasuryReportView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["reports"], parameters=DATE_RANGE_PARAMS, responses={200: dict})
    def get(self, request):
        if not request.user.has_perm("accounting.view_treasurytransaction"):
            return forbidden("You do not have permission to view the treasury report.")

        try:
            report = treasury_report(date_param(request, "date_from"), date_param(request, "date_to"))
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(report, status=status.HTTP_200_OK)


class BankAccountReportView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(tags=["reports"], parameters=DATE_RANGE_PARAMS, responses={200: dict, 404: dict})
    def get(self, request, bank_account_id):
        if not request.user.has_perm("accounting.view_bankaccount"):
            return forbidden("You do not have permission to view bank reports.")

        try:
            report = bank_account_report(
                bank_account_id,
                date_param(request, "date_from"),
                date_param(request, "date_to"),
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(report, status=status.HTTP_200_OK)
