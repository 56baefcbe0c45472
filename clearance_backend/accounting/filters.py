# accounting/filters.py

"""
QUERY FILTERS (django-filter)

Shared by the services (list_vouchers) and the DRF views.
"""

from __future__ import annotations

import django_filters
from django.db.models import Q

from accounting.models.treasury import TreasuryTransaction
from accounting.models.voucher import Voucher


class VoucherFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(choices=Voucher.TYPE_CHOICES)
    method = django_filters.ChoiceFilter(choices=Voucher.METHOD_CHOICES)
    party_type = django_filters.ChoiceFilter(choices=Voucher.PARTY_CHOICES)
    party_id = django_filters.CharFilter()
    bank_account = django_filters.UUIDFilter(field_name="bank_account_id")
    date_from = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="date", lookup_expr="lte")
    q = django_filters.CharFilter(method="filter_search")

    class Meta:
        model = Voucher
        fields = ["type", "method", "party_type", "party_id", "bank_account"]

    def filter_search(self, queryset, name, value):
        value = (value or "").strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(code__icontains=value) | Q(note__icontains=value) | Q(party_name__icontains=value)
        )


class TreasuryTransactionFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(choices=TreasuryTransaction.TYPES)
    date_from = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="date", lookup_expr="lte")

    class Meta:
        model = TreasuryTransaction
        fields = ["type"]
