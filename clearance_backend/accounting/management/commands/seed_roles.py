# accounting/management/commands/seed_roles.py

"""
Seed one auth Group per user role with the model permissions the
accounting and payroll APIs check, then put every user in their role's
group. Safe to re-run.

    python manage.py seed_roles
    python manage.py seed_roles --categories "Rent" "Fuel"
"""

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group, Permission
from django.core.management.base import BaseCommand
from django.db import transaction

from accounting.models.expense_category import ExpenseCategory

User = get_user_model()

CLERK_PERMISSIONS = [
    "accounting.view_voucher",
    "accounting.add_voucher",
    "accounting.view_treasury",
    "accounting.view_treasurytransaction",
    "accounting.view_appsetting",
]

ACCOUNTANT_PERMISSIONS = CLERK_PERMISSIONS + [
    "accounting.change_voucher",
    "accounting.delete_voucher",
    "accounting.change_treasury",
    "accounting.view_bankaccount",
    "accounting.view_ledgerentry",
    "payroll.view_payrollrun",
    "payroll.add_payrollrun",
    "payroll.change_payrollrun",
    "payroll.delete_payrollrun",
]

ADMIN_PERMISSIONS = ACCOUNTANT_PERMISSIONS + [
    "accounting.change_appsetting",
]

ROLE_PERMISSIONS = {
    User.ROLE_CLERK: CLERK_PERMISSIONS,
    User.ROLE_ACCOUNTANT: ACCOUNTANT_PERMISSIONS,
    User.ROLE_ADMIN: ADMIN_PERMISSIONS,
}

DEFAULT_CATEGORIES = ["Rent", "Utilities", "Maintenance", "Office Supplies", "Government Fees"]


def _permissions(labels):
    perms = []
    for label in labels:
        app_label, codename = label.split(".", 1)
        perms.append(Permission.objects.get(content_type__app_label=app_label, codename=codename))
    return perms


class Command(BaseCommand):
    help = "Create role groups with accounting/payroll permissions and seed expense categories."

    def add_arguments(self, parser):
        parser.add_argument(
            "--categories",
            nargs="*",
            default=DEFAULT_CATEGORIES,
            help="Expense category names to ensure exist.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        for role, labels in ROLE_PERMISSIONS.items():
            group, created = Group.objects.get_or_create(name=role)
            group.permissions.set(_permissions(labels))

            members = User.objects.filter(role=role)
            for user in members:
                user.groups.add(group)

            self.stdout.write(
                f"{'Created' if created else 'Updated'} group {role}: "
                f"{len(labels)} permissions, {members.count()} users"
            )

        categories = 0
        for name in options["categories"]:
            _, created = ExpenseCategory.objects.get_or_create(name=name.strip())
            categories += int(created)

        self.stdout.write(self.style.SUCCESS(f"Roles seeded. {categories} expense categories created."))
