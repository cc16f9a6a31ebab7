# accounting/services/exceptions.py

"""
ACCOUNTING SERVICE ERRORS

Centralized domain errors for accounting services.
"""


class AccountingServiceError(Exception):
    """Base exception for all accounting service failures."""


class AccountResolutionError(AccountingServiceError):
    """Raised when an expected account cannot be resolved."""


class ChartOfAccountsError(AccountingServiceError):
    """Raised when an account cannot be created or moved in the chart."""


class JournalEntryCreationError(AccountingServiceError):
    """Raised when a journal entry is unbalanced or has invalid lines."""


class JournalEntryStateError(AccountingServiceError):
    """Raised on an illegal journal status transition."""


class IdempotencyError(AccountingServiceError):
    """Raised on duplicate or retried accounting events."""


class InvoiceError(AccountingServiceError):
    """Raised when an invoice operation is not allowed."""


class PaymentExceedsTotalError(InvoiceError):
    """Raised when amount paid would exceed the invoice total."""


class ExpenseError(AccountingServiceError):
    """Raised when an expense operation is not allowed."""


class InvoiceStateError(InvoiceError):
    """Raised when an invoice is not in a state that allows the transition."""


class ExpenseStateError(ExpenseError):
    """Raised when an expense is not in a state that allows the transition."""
