# accounting/api/urls.py

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from accounting.api.view import JournalEntryViewSet
from accounting.api.views.accounts import (
    AccountBalanceView,
    AccountListCreateView,
    AccountTreeView,
    SeedChartView,
)
from accounting.api.views.balance_sheet import BalanceSheetView
from accounting.api.views.expenses import (
    ExpenseApproveView,
    ExpenseListCreateView,
    ExpensePayView,
    ExpenseRejectView,
)
from accounting.api.views.income_statement import IncomeStatementView
from accounting.api.views.invoices import (
    InvoiceDetailView,
    InvoiceIssueView,
    InvoiceListCreateView,
    InvoicePaymentView,
    InvoiceVoidView,
)
from accounting.api.views.overview import AccountingOverviewView
from accounting.api.views.trial_balance import TrialBalanceView

router = DefaultRouter()
router.register("journal-entries", JournalEntryViewSet, basename="journal-entry")

urlpatterns = [
    # Router endpoints
    path("", include(router.urls)),
    # Reports
    path("trial-balance/", TrialBalanceView.as_view(), name="trial-balance"),
    path("balance-sheet/", BalanceSheetView.as_view(), name="balance-sheet"),
    path("income-statement/", IncomeStatementView.as_view(), name="income-statement"),
    path("overview/", AccountingOverviewView.as_view(), name="accounting-overview"),
    # Chart of accounts
    path("accounts/", AccountListCreateView.as_view(), name="accounts"),
    path("accounts/tree/", AccountTreeView.as_view(), name="account-tree"),
    path("accounts/seed/", SeedChartView.as_view(), name="account-seed"),
    path("accounts/<int:pk>/balance/", AccountBalanceView.as_view(), name="account-balance"),
    # Invoices (AR)
    path("invoices/", InvoiceListCreateView.as_view(), name="invoices"),
    path("invoices/<int:pk>/", InvoiceDetailView.as_view(), name="invoice-detail"),
    path("invoices/<int:pk>/issue/", InvoiceIssueView.as_view(), name="invoice-issue"),
    path("invoices/<int:pk>/payments/", InvoicePaymentView.as_view(), name="invoice-payment"),
    path("invoices/<int:pk>/void/", InvoiceVoidView.as_view(), name="invoice-void"),
    # Expenses (AP)
    path("expenses/", ExpenseListCreateView.as_view(), name="expenses"),
    path("expenses/<int:pk>/approve/", ExpenseApproveView.as_view(), name="expense-approve"),
    path("expenses/<int:pk>/pay/", ExpensePayView.as_view(), name="expense-pay"),
    path("expenses/<int:pk>/reject/", ExpenseRejectView.as_view(), name="expense-reject"),
]
