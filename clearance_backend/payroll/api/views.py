# payroll/api/views.py

"""
PAYROLL API

GET    /api/payroll/runs/                   payroll.view_payrollrun
POST   /api/payroll/runs/                   payroll.add_payrollrun
GET    /api/payroll/runs/<id>/              payroll.view_payrollrun
PUT    /api/payroll/runs/<id>/              payroll.change_payrollrun (DRAFT only)
DELETE /api/payroll/runs/<id>/              payroll.delete_payrollrun (DRAFT only)
POST   /api/payroll/runs/<id>/approve/      payroll.change_payrollrun
POST   /api/payroll/runs/<id>/unapprove/    payroll.change_payrollrun
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import forbidden, service_error_response
from accounting.services.exceptions import AccountingServiceError
from payroll.api.serializers import (
    PayrollApproveSerializer,
    PayrollRunCreateSerializer,
    PayrollRunSerializer,
    PayrollRunUpdateSerializer,
)
from payroll.services.payroll_service import (
    approve_payroll_run,
    create_payroll_run,
    delete_payroll_run,
    get_payroll_run,
    list_payroll_runs,
    unapprove_payroll_run,
    update_payroll_run,
)

VIEW_PERMISSION = "payroll.view_payrollrun"
ADD_PERMISSION = "payroll.add_payrollrun"
CHANGE_PERMISSION = "payroll.change_payrollrun"
DELETE_PERMISSION = "payroll.delete_payrollrun"


def _items(validated: dict):
    items = validated.get("items")
    if items is None:
        return None
    return [dict(i) for i in items]


class PayrollRunListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PayrollRunCreateSerializer

    @extend_schema(
        tags=["payroll"],
        parameters=[
            OpenApiParameter(name="status", type=str, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="month", type=str, location=OpenApiParameter.QUERY, required=False),
        ],
        responses=PayrollRunSerializer(many=True),
    )
    def get(self, request):
        if not request.user.has_perm(VIEW_PERMISSION):
            return forbidden("You do not have permission to view payroll.")

        try:
            qs = list_payroll_runs(
                status=request.query_params.get("status") or None,
                month=request.query_params.get("month") or None,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(PayrollRunSerializer(page, many=True).data)
        return Response(PayrollRunSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["payroll"],
        request=PayrollRunCreateSerializer,
        responses={201: PayrollRunSerializer, 400: dict, 404: dict, 409: dict},
    )
    def post(self, request):
        if not request.user.has_perm(ADD_PERMISSION):
            return forbidden("You do not have permission to create payroll runs.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            run = create_payroll_run(month=s.validated_data["month"], items=_items(s.validated_data))
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(PayrollRunSerializer(run).data, status=status.HTTP_201_CREATED)


class PayrollRunDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PayrollRunUpdateSerializer

    @extend_schema(tags=["payroll"], responses={200: PayrollRunSerializer, 404: dict})
    def get(self, request, run_id):
        if not request.user.has_perm(VIEW_PERMISSION):
            return forbidden("You do not have permission to view payroll.")

        try:
            run = get_payroll_run(run_id)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(PayrollRunSerializer(run).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["payroll"],
        request=PayrollRunUpdateSerializer,
        responses={200: PayrollRunSerializer, 400: dict, 404: dict, 409: dict},
    )
    def put(self, request, run_id):
        if not request.user.has_perm(CHANGE_PERMISSION):
            return forbidden("You do not have permission to edit payroll runs.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            run = update_payroll_run(
                run_id,
                month=s.validated_data.get("month"),
                items=_items(s.validated_data),
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(PayrollRunSerializer(run).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["payroll"], responses={204: None, 404: dict, 409: dict})
    def delete(self, request, run_id):
        if not request.user.has_perm(DELETE_PERMISSION):
            return forbidden("You do not have permission to delete payroll runs.")

        try:
            delete_payroll_run(run_id)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(status=status.HTTP_204_NO_CONTENT)


class PayrollRunApproveView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = PayrollApproveSerializer

    @extend_schema(
        tags=["payroll"],
        request=PayrollApproveSerializer,
        responses={200: PayrollRunSerializer, 400: dict, 404: dict, 409: dict},
    )
    def post(self, request, run_id):
        if not request.user.has_perm(CHANGE_PERMISSION):
            return forbidden("You do not have permission to approve payroll runs.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            run = approve_payroll_run(
                run_id,
                payment_method=s.validated_data.get("payment_method"),
                bank_account_id=s.validated_data.get("bank_account_id"),
                actor=request.user,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(PayrollRunSerializer(run).data, status=status.HTTP_200_OK)


class PayrollRunUnapproveView(GenericAPIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(
        tags=["payroll"],
        request=None,
        responses={200: PayrollRunSerializer, 404: dict, 409: dict},
        description="Returns the run to DRAFT. Vouchers and balances from approval are not reversed.",
    )
    def post(self, request, run_id):
        if not request.user.has_perm(CHANGE_PERMISSION):
            return forbidden("You do not have permission to unapprove payroll runs.")

        try:
            run = unapprove_payroll_run(run_id, actor=request.user)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(PayrollRunSerializer(run).data, status=status.HTTP_200_OK)
