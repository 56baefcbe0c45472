# payroll/admin.py

from django.contrib import admin

from payroll.models import Employee, PayrollItem, PayrollRun


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ("name", "department", "base_salary", "allowances", "status", "deleted_at")
    list_filter = ("status", "department")
    search_fields = ("name", "department")


class PayrollItemInline(admin.TabularInline):
    model = PayrollItem
    extra = 0
    can_delete = False
    readonly_fields = ("employee", "base", "allowances", "deductions", "net", "voucher")

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(PayrollRun)
class PayrollRunAdmin(admin.ModelAdmin):
    list_display = ("month", "status", "total_net", "approved_at", "approved_by")
    list_filter = ("status",)
    inlines = [PayrollItemInline]

    # Approval moves money: use the API (payroll_service).
    readonly_fields = ("month", "status", "total_net", "approved_at", "approved_by", "created_at", "updated_at")

    def has_add_permission(self, request):
        return False
