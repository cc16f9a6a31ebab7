# accounting/api/errors.py

"""
Shared request helpers for the accounting API.

- domain_error_response(): maps service errors to HTTP
    state conflicts (illegal transition, duplicate reference) -> 409
    everything else raised by the services (invariants)       -> 400
"""

from __future__ import annotations

from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import status
from rest_framework.response import Response

from accounting.services.exceptions import (
    AccountingServiceError,
    ExpenseStateError,
    IdempotencyError,
    InvoiceStateError,
    JournalEntryStateError,
)

CONFLICT_ERRORS = (JournalEntryStateError, IdempotencyError, InvoiceStateError, ExpenseStateError)


def forbidden(detail: str) -> Response:
    return Response({"detail": detail}, status=status.HTTP_403_FORBIDDEN)


def domain_error_response(exc: Exception) -> Response:
    if isinstance(exc, CONFLICT_ERRORS):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, (AccountingServiceError, DjangoValidationError)):
        code = status.HTTP_400_BAD_REQUEST
    else:
        raise exc

    detail = "; ".join(exc.messages) if isinstance(exc, DjangoValidationError) else str(exc)
    return Response({"detail": detail}, status=code)
