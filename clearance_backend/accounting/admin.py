# accounting/admin.py

from django.contrib import admin

from accounting.models import (
    AppSetting,
    Bank,
    BankAccount,
    ExpenseCategory,
    Invoice,
    LedgerEntry,
    Treasury,
    TreasuryTransaction,
    Voucher,
)


class ReadOnlyAdmin(admin.ModelAdmin):
    """Append-only records: browse only."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# LEDGER (READ-ONLY)
# ============================================================


@admin.register(LedgerEntry)
class LedgerEntryAdmin(ReadOnlyAdmin):
    list_display = (
        "id",
        "created_at",
        "source_type",
        "debit_account",
        "credit_account",
        "amount",
        "currency",
    )
    list_filter = ("source_type", "currency")
    search_fields = ("debit_account", "credit_account", "source_id", "description")
    ordering = ("-created_at", "-id")
    date_hierarchy = "created_at"


# ============================================================
# TREASURY
# ============================================================


@admin.register(Treasury)
class TreasuryAdmin(admin.ModelAdmin):
    list_display = ("id", "opening_balance", "current_balance", "opening_set_at", "opening_set_by")
    readonly_fields = ("opening_balance", "current_balance", "opening_set_at", "opening_set_by", "updated_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(TreasuryTransaction)
class TreasuryTransactionAdmin(ReadOnlyAdmin):
    list_display = ("id", "date", "type", "amount", "balance_after", "voucher", "created_by")
    list_filter = ("type",)
    search_fields = ("note", "voucher__code")
    ordering = ("-created_at", "-id")


# ============================================================
# BANKS
# ============================================================


@admin.register(Bank)
class BankAdmin(admin.ModelAdmin):
    list_display = ("name", "created_at")
    search_fields = ("name",)


@admin.register(BankAccount)
class BankAccountAdmin(admin.ModelAdmin):
    list_display = ("account_no", "bank", "opening_balance", "current_balance")
    list_filter = ("bank",)
    search_fields = ("account_no", "bank__name")
    readonly_fields = ("current_balance", "created_at", "updated_at")

    def get_readonly_fields(self, request, obj=None):
        fields = list(super().get_readonly_fields(request, obj))
        if obj is not None:
            fields.append("opening_balance")
        return fields


@admin.register(ExpenseCategory)
class ExpenseCategoryAdmin(admin.ModelAdmin):
    list_display = ("name", "is_active", "created_at")
    list_filter = ("is_active",)
    search_fields = ("name",)


# ============================================================
# DOCUMENTS
# ============================================================


@admin.register(Voucher)
class VoucherAdmin(admin.ModelAdmin):
    list_display = ("code", "type", "party_type", "party_name", "method", "amount", "date")
    list_filter = ("type", "method", "party_type")
    search_fields = ("code", "party_name", "note", "reference_number")
    ordering = ("-date", "-created_at")

    # Vouchers move balances: create/delete through the API (voucher_service).
    readonly_fields = [f.name for f in Voucher._meta.fields]

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Invoice)
class InvoiceAdmin(ReadOnlyAdmin):
    list_display = ("code", "type", "customer_id", "total", "date")
    list_filter = ("type",)
    search_fields = ("code", "customer_id", "customs_no")


@admin.register(AppSetting)
class AppSettingAdmin(admin.ModelAdmin):
    list_display = ("id", "prevent_negative_treasury", "prevent_negative_bank", "updated_at")

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
