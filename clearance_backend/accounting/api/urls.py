# accounting/api/urls.py

from django.urls import path

from accounting.api.views.ledger import LedgerBalanceView, LedgerEntriesView
from accounting.api.views.reports import (
    AccountStatementView,
    GeneralJournalView,
    IncomeExpenseView,
    TrialBalanceView,
)
from accounting.api.views.settings import AccountingSettingsView
from accounting.api.views.treasury import (
    BankAccountReportView,
    TreasuryBalanceView,
    TreasuryOpeningBalanceView,
    TreasuryReportView,
    TreasuryTransactionListView,
)
from accounting.api.views.vouchers import VoucherDetailView, VoucherListCreateView

urlpatterns = [
    # Vouchers
    path("vouchers/", VoucherListCreateView.as_view(), name="vouchers"),
    path("vouchers/<uuid:voucher_id>/", VoucherDetailView.as_view(), name="voucher-detail"),
    # Treasury & banks
    path("treasury/", TreasuryBalanceView.as_view(), name="treasury"),
    path(
        "treasury/opening-balance/",
        TreasuryOpeningBalanceView.as_view(),
        name="treasury-opening-balance",
    ),
    path(
        "treasury/transactions/",
        TreasuryTransactionListView.as_view(),
        name="treasury-transactions",
    ),
    path("treasury/report/", TreasuryReportView.as_view(), name="treasury-report"),
    path(
        "bank-accounts/<uuid:bank_account_id>/report/",
        BankAccountReportView.as_view(),
        name="bank-account-report",
    ),
    # Ledger
    path("ledger/entries/", LedgerEntriesView.as_view(), name="ledger-entries"),
    path("ledger/balance/", LedgerBalanceView.as_view(), name="ledger-balance"),
    # Reports
    path("reports/trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
    path("reports/general-journal/", GeneralJournalView.as_view(), name="general-journal"),
    path("reports/income-expense/", IncomeExpenseView.as_view(), name="income-expense"),
    path("reports/statement/", AccountStatementView.as_view(), name="account-statement"),
    # Settings
    path("settings/", AccountingSettingsView.as_view(), name="accounting-settings"),
]
