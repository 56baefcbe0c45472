# accounting/api/views/vouchers.py

"""
PATH: accounting/api/views/vouchers.py

VOUCHERS API

GET    /api/accounting/vouchers/          accounting.view_voucher
POST   /api/accounting/vouchers/          accounting.add_voucher
GET    /api/accounting/vouchers/<id>/     accounting.view_voucher
PATCH  /api/accounting/vouchers/<id>/     accounting.change_voucher
DELETE /api/accounting/vouchers/<id>/     accounting.delete_voucher

List filters (django-filter): type, method, party_type, party_id,
bank_account, date_from, date_to, q.
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import forbidden, service_error_response
from accounting.api.serializers.vouchers import (
    VoucherCreateSerializer,
    VoucherSerializer,
    VoucherUpdateSerializer,
)
from accounting.filters import VoucherFilter
from accounting.models.voucher import Voucher
from accounting.services.exceptions import AccountingServiceError
from accounting.services.voucher_service import (
    create_voucher,
    get_voucher,
    list_vouchers,
    remove_voucher,
    update_voucher,
)

VOUCHER_VIEW_PERMISSION = "accounting.view_voucher"
VOUCHER_ADD_PERMISSION = "accounting.add_voucher"
VOUCHER_CHANGE_PERMISSION = "accounting.change_voucher"
VOUCHER_DELETE_PERMISSION = "accounting.delete_voucher"


class VoucherListCreateView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = VoucherCreateSerializer
    filterset_class = VoucherFilter
    queryset = Voucher.objects.all()

    @extend_schema(tags=["accounting"], responses=VoucherSerializer(many=True))
    def get(self, request, *args, **kwargs):
        if not request.user.has_perm(VOUCHER_VIEW_PERMISSION):
            return forbidden("You do not have permission to view vouchers.")

        try:
            qs = list_vouchers(request.query_params)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(VoucherSerializer(page, many=True).data)
        return Response(VoucherSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=VoucherCreateSerializer,
        responses={201: VoucherSerializer, 400: dict, 403: dict, 404: dict},
    )
    def post(self, request, *args, **kwargs):
        if not request.user.has_perm(VOUCHER_ADD_PERMISSION):
            return forbidden("You do not have permission to create vouchers.")

        s = self.get_serializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            voucher = create_voucher(data=s.validated_data, actor=request.user)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(VoucherSerializer(voucher).data, status=status.HTTP_201_CREATED)


class VoucherDetailView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = VoucherUpdateSerializer

    @extend_schema(tags=["accounting"], responses={200: VoucherSerializer, 404: dict})
    def get(self, request, voucher_id, *args, **kwargs):
        if not request.user.has_perm(VOUCHER_VIEW_PERMISSION):
            return forbidden("You do not have permission to view vouchers.")

        try:
            voucher = get_voucher(voucher_id)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(VoucherSerializer(voucher).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["accounting"],
        request=VoucherUpdateSerializer,
        responses={200: VoucherSerializer, 400: dict, 404: dict},
        description="Field patch only: balances and ledger are not re-posted.",
    )
    def patch(self, request, voucher_id, *args, **kwargs):
        if not request.user.has_perm(VOUCHER_CHANGE_PERMISSION):
            return forbidden("You do not have permission to edit vouchers.")

        s = self.get_serializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        try:
            voucher = update_voucher(voucher_id, changes=s.validated_data)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(VoucherSerializer(voucher).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], responses={204: None, 404: dict})
    def delete(self, request, voucher_id, *args, **kwargs):
        if not request.user.has_perm(VOUCHER_DELETE_PERMISSION):
            return forbidden("You do not have permission to delete vouchers.")

        try:
            remove_voucher(voucher_id, actor=request.user)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(status=status.HTTP_204_NO_CONTENT)
