# accounting/api/serializers/treasury.py

from decimal import Decimal

from rest_framework import serializers

from accounting.models.treasury import TreasuryTransaction


class TreasuryBalanceSerializer(serializers.Serializer):
    current_balance = serializers.DecimalField(max_digits=14, decimal_places=2)
    opening_balance = serializers.DecimalField(max_digits=14, decimal_places=2, allow_null=True)
    opening_set_at = serializers.DateTimeField(allow_null=True)
    opening_set_by = serializers.CharField(allow_null=True)
    prevent_negative_treasury = serializers.BooleanField()


class OpeningBalanceSerializer(serializers.Serializer):
    opening_balance = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0"))


class TreasuryTransactionSerializer(serializers.ModelSerializer):
    voucher_code = serializers.CharField(source="voucher.code", read_only=True, default=None)

    class Meta:
        model = TreasuryTransaction
        fields = [
            "id",
            "date",
            "type",
            "amount",
            "note",
            "balance_after",
            "voucher_code",
            "created_at",
        ]
        read_only_fields = fields
