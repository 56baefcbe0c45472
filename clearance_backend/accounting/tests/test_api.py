# accounting/tests/test_api.py

from __future__ import annotations

from decimal import Decimal

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Permission
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from accounting.models.treasury import Treasury
from accounting.models.voucher import Voucher
from accounting.tests.helpers import cash_receipt, make_bank_account, open_treasury

User = get_user_model()


def _grant(user, *codenames):
    perms = Permission.objects.filter(content_type__app_label="accounting", codename__in=codenames)
    user.user_permissions.add(*perms)
    # has_perm caches per instance
    return User.objects.get(pk=user.pk)


class AccountingApiTests(TestCase):
    """
    GUARANTEES:
    - Anonymous requests are rejected
    - Every operation checks its model permission
    - Service errors map to 400 / 404 / 409 with {"detail": ...}
    """

    def setUp(self):
        self.client = APIClient()
        self.clerk = User.objects.create_user(username="clerk", password="pass")
        self.admin = User.objects.create_superuser(username="root", password="pass")
        open_treasury("1000.00")

    # --------------------------------------------------
    # AUTH / PERMISSIONS
    # --------------------------------------------------

    def test_anonymous_is_rejected(self):
        res = self.client.get(reverse("vouchers"))
        self.assertEqual(res.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_missing_permission_is_forbidden(self):
        self.client.force_authenticate(self.clerk)

        res = self.client.post(
            reverse("vouchers"),
            {"type": "RECEIPT", "party_type": "CUSTOMER", "party_id": "C-1", "amount": "10.00"},
            format="json",
        )

        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(Voucher.objects.count(), 0)

    def test_granted_permission_allows_create(self):
        clerk = _grant(self.clerk, "add_voucher", "view_voucher")
        self.client.force_authenticate(clerk)

        res = self.client.post(
            reverse("vouchers"),
            {"type": "RECEIPT", "party_type": "CUSTOMER", "party_id": "C-1", "amount": "10.00"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_201_CREATED)
        self.assertEqual(res.data["created_by_username"], "clerk")

        listing = self.client.get(reverse("vouchers"))
        self.assertEqual(listing.status_code, status.HTTP_200_OK)
        self.assertEqual(listing.data["count"], 1)

    # --------------------------------------------------
    # VOUCHERS
    # --------------------------------------------------

    def test_voucher_lifecycle(self):
        self.client.force_authenticate(self.admin)

        created = self.client.post(
            reverse("vouchers"),
            {"type": "PAYMENT", "party_type": "CUSTOMER", "party_id": "C-1", "amount": "250.00"},
            format="json",
        )
        self.assertEqual(created.status_code, status.HTTP_201_CREATED)
        self.assertTrue(created.data["code"].startswith("PY-"))
        self.assertEqual(Treasury.load().current_balance, Decimal("750.00"))

        url = reverse("voucher-detail", args=[created.data["id"]])

        patched = self.client.patch(url, {"note": "Port handling"}, format="json")
        self.assertEqual(patched.status_code, status.HTTP_200_OK)
        self.assertEqual(patched.data["note"], "Port handling")

        deleted = self.client.delete(url)
        self.assertEqual(deleted.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(Treasury.load().current_balance, Decimal("1000.00"))

        missing = self.client.get(url)
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)

    def test_validation_error_is_400(self):
        self.client.force_authenticate(self.admin)

        res = self.client.post(
            reverse("vouchers"),
            {"type": "PAYMENT", "party_type": "OTHER", "party_name": "Cleaner", "amount": "10.00"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("category", res.data["detail"])

    def test_guard_rejection_is_400(self):
        self.client.force_authenticate(self.admin)
        self.client.patch(reverse("accounting-settings"), {"prevent_negative_treasury": True}, format="json")

        res = self.client.post(
            reverse("vouchers"),
            {"type": "PAYMENT", "party_type": "CUSTOMER", "party_id": "C-1", "amount": "5000.00"},
            format="json",
        )
        self.assertEqual(res.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(res.data["detail"], "Insufficient treasury balance")

    def test_voucher_list_filters(self):
        cash_receipt("10.00", note="deposit")
        cash_receipt("20.00")
        self.client.force_authenticate(self.admin)

        res = self.client.get(reverse("vouchers"), {"q": "deposit"})
        self.assertEqual(res.data["count"], 1)

    # --------------------------------------------------
    # TREASURY / LEDGER / REPORTS
    # --------------------------------------------------

    def test_opening_balance_twice_is_409(self):
        self.client.force_authenticate(self.admin)

        res = self.client.post(reverse("treasury-opening-balance"), {"opening_balance": "5.00"}, format="json")
        self.assertEqual(res.status_code, status.HTTP_409_CONFLICT)

        balance = self.client.get(reverse("treasury"))
        self.assertEqual(Decimal(balance.data["current_balance"]), Decimal("1000.00"))

    def test_treasury_transactions_and_report(self):
        cash_receipt("10.00")
        self.client.force_authenticate(self.admin)

        txns = self.client.get(reverse("treasury-transactions"))
        self.assertEqual(txns.status_code, status.HTTP_200_OK)
        self.assertEqual(txns.data["count"], 1)

        report = self.client.get(reverse("treasury-report"), {"date_from": "2000-01-01"})
        self.assertEqual(report.data["summary"]["total_in"], Decimal("10.00"))

    def test_bank_account_report(self):
        account = make_bank_account(opening_balance="100.00")
        self.client.force_authenticate(self.admin)

        res = self.client.get(reverse("bank-account-report", args=[account.id]))
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertEqual(res.data["closing_balance"], Decimal("100.00"))

    def test_ledger_endpoints(self):
        cash_receipt("40.00", party_id="C-7")
        self.client.force_authenticate(self.admin)

        entries = self.client.get(reverse("ledger-entries"), {"account": "customer:C-7"})
        self.assertEqual(entries.status_code, status.HTTP_200_OK)
        self.assertEqual(entries.data["total"], 1)

        balance = self.client.get(reverse("ledger-balance"), {"account": "treasury"})
        self.assertEqual(balance.data["balance"], Decimal("40.00"))

        missing = self.client.get(reverse("ledger-entries"))
        self.assertEqual(missing.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reports(self):
        cash_receipt("40.00")
        self.client.force_authenticate(self.admin)

        trial = self.client.get(reverse("trial-balance"))
        self.assertTrue(trial.data["totals"]["is_balanced"])

        bad_date = self.client.get(reverse("general-journal"), {"date_from": "01/02/2025"})
        self.assertEqual(bad_date.status_code, status.HTTP_400_BAD_REQUEST)

        statement = self.client.get(reverse("account-statement"), {"account": "customer:C-1"})
        self.assertEqual(statement.data["closing_balance"], Decimal("-40.00"))

    def test_reports_require_ledger_permission(self):
        self.client.force_authenticate(self.clerk)
        res = self.client.get(reverse("trial-balance"))
        self.assertEqual(res.status_code, status.HTTP_403_FORBIDDEN)

    def test_settings_roundtrip(self):
        self.client.force_authenticate(self.admin)

        res = self.client.patch(reverse("accounting-settings"), {"prevent_negative_bank": True}, format="json")
        self.assertEqual(res.status_code, status.HTTP_200_OK)
        self.assertTrue(res.data["prevent_negative_bank"])

        res = self.client.get(reverse("accounting-settings"))
        self.assertEqual(res.data, {"prevent_negative_treasury": False, "prevent_negative_bank": True})
