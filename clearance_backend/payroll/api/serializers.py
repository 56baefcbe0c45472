# payroll/api/serializers.py

from decimal import Decimal

from rest_framework import serializers

from accounting.models.voucher import Voucher
from payroll.models import PayrollItem, PayrollRun


class PayrollItemSerializer(serializers.ModelSerializer):
    employee_id = serializers.UUIDField(read_only=True)
    employee_name = serializers.CharField(source="employee.name", read_only=True)
    voucher_id = serializers.UUIDField(read_only=True, allow_null=True)
    voucher_code = serializers.CharField(source="voucher.code", read_only=True, default=None)

    class Meta:
        model = PayrollItem
        fields = [
            "id",
            "employee_id",
            "employee_name",
            "base",
            "allowances",
            "deductions",
            "net",
            "voucher_id",
            "voucher_code",
        ]
        read_only_fields = fields


class PayrollRunSerializer(serializers.ModelSerializer):
    items = PayrollItemSerializer(many=True, read_only=True)
    approved_by_username = serializers.CharField(source="approved_by.username", read_only=True, default=None)

    class Meta:
        model = PayrollRun
        fields = [
            "id",
            "month",
            "status",
            "total_net",
            "approved_at",
            "approved_by_username",
            "items",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class PayrollItemInputSerializer(serializers.Serializer):
    employee_id = serializers.UUIDField()
    base = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"))
    allowances = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"), default=Decimal("0"))
    deductions = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0"), default=Decimal("0"))


class PayrollRunCreateSerializer(serializers.Serializer):
    """
    month: YYYY-MM or YYYY-MM-DD (normalized to the first day).
    items: omitted or empty -> generated from active employees.
    """

    month = serializers.CharField()
    items = PayrollItemInputSerializer(many=True, required=False)


class PayrollRunUpdateSerializer(serializers.Serializer):
    month = serializers.CharField(required=False)
    items = PayrollItemInputSerializer(many=True, required=False)


class PayrollApproveSerializer(serializers.Serializer):
    payment_method = serializers.ChoiceField(
        choices=Voucher.METHOD_CHOICES,
        required=False,
        allow_null=True,
        default=None,
    )
    bank_account_id = serializers.UUIDField(required=False, allow_null=True, default=None)
