# accounting/services/invoice_service.py

"""
INVOICE SERVICE (ACCOUNTS RECEIVABLE SUBLEDGER)

Responsibilities:
- Compute invoice totals server-side from lines
- Issue: draft -> issued, posts Dr AR / Cr Sales, Cr VAT Payable
- Payments: validated against total; posts Dr Cash|Bank / Cr AR
- Void: drafts, or issued invoices with nothing paid (issue entry reversed)

Status rule once issued:
- amount_paid == total_amount -> paid
- 0 < amount_paid < total     -> partially_paid
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone

from accounting.models import Invoice, InvoiceLine
from accounting.services.exceptions import (
    InvoiceError,
    InvoiceStateError,
    PaymentExceedsTotalError,
)
from accounting.services.journal_entry_service import reverse_journal_entry
from accounting.services.posting import (
    post_invoice_payment_to_ledger,
    post_invoice_to_ledger,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
HUNDRED = Decimal("100")
NUMBER_ATTEMPTS = 5

PAYABLE_STATUSES = (Invoice.Status.ISSUED, Invoice.Status.PARTIALLY_PAID)


def _money(v) -> Decimal:
    return Decimal(str(v or "0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _decimal(value, *, field: str) -> Decimal:
    try:
        d = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise InvoiceError(f"Invalid {field}: {value!r}") from exc
    if not d.is_finite():
        raise InvoiceError(f"Invalid {field}: {value!r}")
    return d


def _next_invoice_number(*, tenant_id: str, on: date) -> str:
    prefix = f"INV-{on.year}-"
    last = (
        Invoice.objects.filter(tenant_id=tenant_id, invoice_number__startswith=prefix)
        .order_by("-invoice_number")
        .values_list("invoice_number", flat=True)
        .first()
    )
    seq = int(last[len(prefix):]) + 1 if last else 1
    return f"{prefix}{seq:06d}"


def _build_line(data: dict) -> dict:
    description = str(data.get("description") or "").strip()
    if not description:
        raise InvoiceError("Invoice line description is required")

    quantity = _decimal(data.get("quantity"), field="quantity")
    unit_price = _decimal(data.get("unit_price"), field="unit_price")
    discount_percent = _decimal(data.get("discount_percent", 0), field="discount_percent")
    tax_rate = _decimal(
        data.get("tax_rate", getattr(settings, "CAFE_VAT_RATE", "0.15")), field="tax_rate"
    )

    if quantity <= 0:
        raise InvoiceError("Invoice line quantity must be positive")
    if unit_price < 0:
        raise InvoiceError("unit_price cannot be negative")
    if not (0 <= discount_percent <= 100):
        raise InvoiceError("discount_percent must be between 0 and 100")
    if tax_rate < 0:
        raise InvoiceError("tax_rate cannot be negative")

    subtotal = _money(quantity * unit_price)
    discount = _money(subtotal * discount_percent / HUNDRED)
    tax = _money((subtotal - discount) * tax_rate)

    return {
        "description": description[:255],
        "quantity": quantity,
        "unit_price": _money(unit_price),
        "discount_percent": discount_percent,
        "tax_rate": tax_rate,
        "line_subtotal": subtotal,
        "line_discount": discount,
        "line_tax": tax,
        "line_total": _money(subtotal - discount + tax),
    }


@transaction.atomic
def create_invoice(
    *,
    tenant_id: str,
    customer_name: str,
    lines: list[dict],
    branch_id: str = "",
    customer_tax_number: str = "",
    issue_date: date | None = None,
    due_date: date | None = None,
    notes: str = "",
    created_by: str = "",
) -> Invoice:
    customer_name = (customer_name or "").strip()
    if not customer_name:
        raise InvoiceError("customer_name is required")
    if not lines:
        raise InvoiceError("Invoice must contain at least one line")

    built = [_build_line(line) for line in lines]
    issue_date = issue_date or timezone.localdate()

    subtotal = _money(sum((b["line_subtotal"] for b in built), Decimal("0")))
    discount = _money(sum((b["line_discount"] for b in built), Decimal("0")))
    tax = _money(sum((b["line_tax"] for b in built), Decimal("0")))

    invoice = None
    for _ in range(NUMBER_ATTEMPTS):
        try:
            with transaction.atomic():
                invoice = Invoice.objects.create(
                    tenant_id=tenant_id,
                    branch_id=branch_id or "",
                    invoice_number=_next_invoice_number(tenant_id=tenant_id, on=issue_date),
                    customer_name=customer_name,
                    customer_tax_number=customer_tax_number or "",
                    issue_date=issue_date,
                    due_date=due_date,
                    subtotal=subtotal,
                    discount_amount=discount,
                    tax_amount=tax,
                    total_amount=_money(subtotal - discount + tax),
                    notes=notes or "",
                    created_by=created_by or "",
                )
            break
        except IntegrityError:
            continue
    if invoice is None:
        raise InvoiceError("Could not allocate an invoice number; retry")

    InvoiceLine.objects.bulk_create([InvoiceLine(invoice=invoice, **b) for b in built])
    return invoice


@transaction.atomic
def issue_invoice(*, invoice: Invoice, issued_by: str = "") -> Invoice:
    locked = Invoice.objects.select_for_update().get(pk=invoice.pk)
    if locked.status != Invoice.Status.DRAFT:
        raise InvoiceStateError(f"Only draft invoices can be issued (status={locked.status})")
    if locked.total_amount <= 0:
        raise InvoiceError("Cannot issue an invoice with a zero total")

    entry = post_invoice_to_ledger(invoice=locked, posted_by=issued_by)

    locked.status = Invoice.Status.ISSUED
    locked.journal_entry = entry
    locked.save(update_fields=["status", "journal_entry", "updated_at"])

    logger.info("Invoice issued", extra={"invoice": locked.invoice_number, "entry_id": entry.pk})
    return locked


@transaction.atomic
def record_payment(
    *,
    invoice: Invoice,
    amount,
    payment_method: str = "cash",
    recorded_by: str = "",
) -> Invoice:
    locked = Invoice.objects.select_for_update().get(pk=invoice.pk)
    if locked.status not in PAYABLE_STATUSES:
        raise InvoiceStateError(f"Invoice {locked.invoice_number} cannot receive payments (status={locked.status})")

    received = _money(_decimal(amount, field="amount"))
    if received <= 0:
        raise InvoiceError("Payment amount must be positive")

    new_paid = _money(locked.amount_paid + received)
    if new_paid > locked.total_amount:
        raise PaymentExceedsTotalError(
            f"Payment of {received} would exceed invoice total "
            f"(paid={locked.amount_paid} total={locked.total_amount})"
        )

    post_invoice_payment_to_ledger(
        invoice=locked,
        amount=received,
        new_amount_paid=new_paid,
        payment_method=payment_method,
        posted_by=recorded_by,
    )

    locked.amount_paid = new_paid
    locked.status = (
        Invoice.Status.PAID if new_paid == locked.total_amount else Invoice.Status.PARTIALLY_PAID
    )
    locked.save(update_fields=["amount_paid", "status", "updated_at"])
    return locked


def set_amount_paid(
    *,
    invoice: Invoice,
    amount_paid,
    payment_method: str = "cash",
    recorded_by: str = "",
) -> Invoice:
    """
    Absolute form of record_payment: move amount_paid to a new total.
    Lowering amount_paid is not allowed (refunds are separate entries).
    """
    target = _money(_decimal(amount_paid, field="amount_paid"))

    with transaction.atomic():
        current = Invoice.objects.select_for_update().get(pk=invoice.pk)
        if target > current.total_amount:
            raise PaymentExceedsTotalError(
                f"amount_paid {target} exceeds invoice total {current.total_amount}"
            )
        if target < current.amount_paid:
            raise InvoiceError("amount_paid cannot decrease")
        if target == current.amount_paid:
            return current

        return record_payment(
            invoice=current,
            amount=target - current.amount_paid,
            payment_method=payment_method,
            recorded_by=recorded_by,
        )


@transaction.atomic
def void_invoice(*, invoice: Invoice, voided_by: str = "") -> Invoice:
    locked = Invoice.objects.select_for_update().get(pk=invoice.pk)

    if locked.status == Invoice.Status.DRAFT:
        pass
    elif locked.status == Invoice.Status.ISSUED and locked.amount_paid == 0:
        if locked.journal_entry_id:
            reverse_journal_entry(
                entry=locked.journal_entry,
                reversed_by=voided_by,
                description=f"Void invoice {locked.invoice_number}",
            )
    else:
        raise InvoiceStateError(f"Invoice {locked.invoice_number} cannot be voided (status={locked.status})")

    locked.status = Invoice.Status.VOID
    locked.save(update_fields=["status", "updated_at"])
    return locked
