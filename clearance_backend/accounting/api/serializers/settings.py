# accounting/api/serializers/settings.py

from rest_framework import serializers


class AccountingSettingsSerializer(serializers.Serializer):
    prevent_negative_treasury = serializers.BooleanField(required=False)
    prevent_negative_bank = serializers.BooleanField(required=False)
