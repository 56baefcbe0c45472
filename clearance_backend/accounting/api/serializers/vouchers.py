# accounting/api/serializers/vouchers.py

from decimal import Decimal

from rest_framework import serializers

from accounting.models.voucher import Voucher


class VoucherSerializer(serializers.ModelSerializer):
    """
    Output serializer (DB truth).
    """

    bank_account_id = serializers.UUIDField(read_only=True, allow_null=True)
    bank_account_label = serializers.SerializerMethodField()
    category_id = serializers.UUIDField(read_only=True, allow_null=True)
    category_name = serializers.CharField(source="category.name", read_only=True, default=None)
    created_by_username = serializers.CharField(source="created_by.username", read_only=True, default=None)

    class Meta:
        model = Voucher
        fields = [
            "id",
            "code",
            "type",
            "party_type",
            "party_id",
            "party_name",
            "method",
            "bank_account_id",
            "bank_account_label",
            "reference_number",
            "amount",
            "note",
            "date",
            "category_id",
            "category_name",
            "created_by_username",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_bank_account_label(self, obj):
        if not obj.bank_account_id:
            return None
        return str(obj.bank_account)


class VoucherCreateSerializer(serializers.Serializer):
    """
    Input serializer (Swagger-visible). Business rules are enforced by
    voucher_service; this layer only checks shapes.
    """

    type = serializers.ChoiceField(choices=Voucher.TYPE_CHOICES)
    party_type = serializers.ChoiceField(choices=Voucher.PARTY_CHOICES)
    party_id = serializers.CharField(required=False, allow_blank=True, default="")
    party_name = serializers.CharField(required=False, allow_blank=True, default="")
    method = serializers.ChoiceField(choices=Voucher.METHOD_CHOICES, default=Voucher.METHOD_CASH)
    bank_account_id = serializers.UUIDField(required=False, allow_null=True, default=None)
    reference_number = serializers.CharField(required=False, allow_blank=True, default="")
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    note = serializers.CharField(required=False, allow_blank=True, default="")
    date = serializers.DateField(required=False, allow_null=True, default=None)
    category_id = serializers.UUIDField(required=False, allow_null=True, default=None)


class VoucherUpdateSerializer(serializers.Serializer):
    party_type = serializers.ChoiceField(choices=Voucher.PARTY_CHOICES, required=False)
    party_id = serializers.CharField(required=False, allow_blank=True)
    party_name = serializers.CharField(required=False, allow_blank=True)
    method = serializers.ChoiceField(choices=Voucher.METHOD_CHOICES, required=False)
    bank_account_id = serializers.UUIDField(required=False, allow_null=True)
    reference_number = serializers.CharField(required=False, allow_blank=True)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"), required=False)
    note = serializers.CharField(required=False, allow_blank=True)
    date = serializers.DateField(required=False)
    category_id = serializers.UUIDField(required=False, allow_null=True)
