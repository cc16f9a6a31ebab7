# accounting/api/serializers/__init__.py

from accounting.api.serializers.accounts import AccountCreateSerializer, AccountSerializer
from accounting.api.serializers.expenses import (
    ExpenseCreateSerializer,
    ExpenseSerializer,
)
from accounting.api.serializers.invoices import (
    InvoiceCreateSerializer,
    InvoicePaymentSerializer,
    InvoiceSerializer,
)
from accounting.api.serializers.journal_entries import (
    JournalEntryCreateSerializer,
    JournalEntrySerializer,
    JournalLineSerializer,
)

__all__ = [
    "AccountSerializer",
    "AccountCreateSerializer",
    "JournalEntrySerializer",
    "JournalEntryCreateSerializer",
    "JournalLineSerializer",
    "InvoiceSerializer",
    "InvoiceCreateSerializer",
    "InvoicePaymentSerializer",
    "ExpenseSerializer",
    "ExpenseCreateSerializer",
]
