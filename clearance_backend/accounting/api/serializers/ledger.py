# accounting/api/serializers/ledger.py

from rest_framework import serializers

from accounting.models.ledger import LedgerEntry


class LedgerEntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = LedgerEntry
        fields = [
            "id",
            "source_type",
            "source_id",
            "debit_account",
            "credit_account",
            "amount",
            "currency",
            "exchange_rate",
            "description",
            "created_at",
        ]
        read_only_fields = fields
