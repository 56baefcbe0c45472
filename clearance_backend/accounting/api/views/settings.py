# accounting/api/views/settings.py

"""
GET   /api/accounting/settings/   accounting.view_appsetting
PATCH /api/accounting/settings/   accounting.change_appsetting
"""

from __future__ import annotations

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounting.api.errors import forbidden, service_error_response
from accounting.api.serializers.settings import AccountingSettingsSerializer
from accounting.services.exceptions import AccountingServiceError
from accounting.services.settings_service import (
    get_accounting_settings,
    update_accounting_settings,
)


class AccountingSettingsView(GenericAPIView):
    permission_classes = [IsAuthenticated]
    serializer_class = AccountingSettingsSerializer

    @extend_schema(tags=["accounting"], responses=AccountingSettingsSerializer)
    def get(self, request):
        if not request.user.has_perm("accounting.view_appsetting"):
            return forbidden("You do not have permission to view settings.")

        return Response(get_accounting_settings().as_dict(), status=status.HTTP_200_OK)

    @extend_schema(tags=["accounting"], request=AccountingSettingsSerializer, responses=AccountingSettingsSerializer)
    def patch(self, request):
        if not request.user.has_perm("accounting.change_appsetting"):
            return forbidden("You do not have permission to change settings.")

        s = self.get_serializer(data=request.data, partial=True)
        s.is_valid(raise_exception=True)

        try:
            current = update_accounting_settings(**s.validated_data)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(current.as_dict(), status=status.HTTP_200_OK)
