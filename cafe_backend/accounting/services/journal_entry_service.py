# accounting/services/journal_entry_service.py

"""
======================================================
PATH: accounting/services/journal_entry_service.py
======================================================
JOURNAL ENTRY SERVICE (ACCOUNTING ENGINE)

This module is the ONLY place allowed to:
- Create JournalEntry / JournalLine
- Enforce debit == credit
- Move entries draft -> posted / draft -> void
- Guarantee atomicity
- Enforce idempotency via (tenant_id, reference_type, reference_id)

Everything else (order COGS, sales, invoices, expenses, purchases) must pass
through here, usually via post_if_absent().

Concurrency:
- post/void lock the entry row (select_for_update)
- post_if_absent relies on the partial unique constraint on
  (tenant_id, reference_type, reference_id) WHERE status != 'void';
  the loser of an insert race fetches and returns the winner's entry
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Callable

from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.utils import timezone

from accounting.models import Account, JournalEntry, JournalLine
from accounting.services.exceptions import (
    IdempotencyError,
    JournalEntryCreationError,
    JournalEntryStateError,
)

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
MIN_LINE_AMOUNT = Decimal("0.01")

REVERSAL_REFERENCE_TYPE = "reversal"

# Reference types owned by the posting adapters; manual entries may not use them.
SYSTEM_REFERENCE_TYPES = frozenset(
    {
        "order_cogs",
        "order_sale",
        "purchase_receipt",
        "invoice",
        "invoice_payment",
        "expense",
        "expense_payment",
        REVERSAL_REFERENCE_TYPE,
    }
)


def _money(value) -> Decimal:
    if value is None or value == "":
        return Decimal("0.00")

    if isinstance(value, Decimal):
        amt = value
    else:
        try:
            amt = Decimal(str(value))
        except (InvalidOperation, ValueError, TypeError) as exc:
            raise JournalEntryCreationError(f"Invalid money value: {value!r}") from exc

    if not amt.is_finite():
        raise JournalEntryCreationError(f"Invalid money value: {value!r}")

    return amt.quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _normalize_reference(reference_type, reference_id) -> tuple[str, str]:
    rt = str(reference_type or "").strip()
    rid = str(reference_id or "").strip()
    if bool(rt) != bool(rid):
        raise JournalEntryCreationError("reference_type and reference_id must be given together")
    return rt, rid


def _normalize_lines(*, tenant_id: str, lines: list) -> list[dict]:
    if not lines or len(lines) < 2:
        raise JournalEntryCreationError("Journal entry must contain at least two lines")

    total_debits = Decimal("0.00")
    total_credits = Decimal("0.00")
    normalized: list[dict] = []

    for line in lines:
        if not isinstance(line, dict):
            raise JournalEntryCreationError("Each line must be an object/dict")

        account = line.get("account")
        if not isinstance(account, Account):
            raise JournalEntryCreationError("Line missing account")

        if account.tenant_id != tenant_id:
            raise JournalEntryCreationError(
                f"Account {account.account_number} does not belong to tenant {tenant_id}"
            )

        if not account.is_active:
            raise JournalEntryCreationError(f"Account {account.account_number} is inactive")

        debit = _money(line.get("debit"))
        credit = _money(line.get("credit"))

        if debit < 0 or credit < 0:
            raise JournalEntryCreationError("Debit or credit cannot be negative")

        if debit > 0 and credit > 0:
            raise JournalEntryCreationError("A line cannot have both debit and credit")

        if debit < MIN_LINE_AMOUNT and credit < MIN_LINE_AMOUNT:
            raise JournalEntryCreationError("A line must have either a debit or a credit")

        total_debits += debit
        total_credits += credit

        normalized.append(
            {
                "account": account,
                "debit": debit,
                "credit": credit,
                "description": str(line.get("description") or "")[:255],
                "branch_id": str(line.get("branch_id") or "")[:64],
            }
        )

    if total_debits != total_credits:
        raise JournalEntryCreationError(
            f"Journal entry not balanced: debits={total_debits} credits={total_credits}"
        )

    return normalized


def _find_live_entry(*, tenant_id: str, reference_type: str, reference_id: str) -> JournalEntry | None:
    return (
        JournalEntry.objects.filter(
            tenant_id=tenant_id,
            reference_type=reference_type,
            reference_id=reference_id,
        )
        .exclude(status=JournalEntry.Status.VOID)
        .first()
    )


@transaction.atomic
def create_journal_entry(
    *,
    tenant_id: str,
    description: str,
    lines: list,
    entry_date: date | None = None,
    reference_type: str | None = None,
    reference_id: str | None = None,
    branch_id: str | None = None,
    created_by: str = "",
    reversal_of: JournalEntry | None = None,
) -> JournalEntry:
    """
    Create a balanced DRAFT entry.

    lines: [{"account": Account, "debit": "10.00", "credit": "0", "description"?, "branch_id"?}]
    branch_id: default branch for lines that do not carry their own
    """
    tenant_id = str(tenant_id or "").strip()
    if not tenant_id:
        raise JournalEntryCreationError("tenant_id is required")

    description = (description or "").strip()
    if not description:
        raise JournalEntryCreationError("Journal entry description is required")

    rt, rid = _normalize_reference(reference_type, reference_id)
    normalized = _normalize_lines(tenant_id=tenant_id, lines=lines)

    # Clear error before DB constraint race handling
    if rt and _find_live_entry(tenant_id=tenant_id, reference_type=rt, reference_id=rid):
        raise IdempotencyError(f"Journal entry already exists for reference {rt}:{rid}")

    try:
        with transaction.atomic():
            entry = JournalEntry.objects.create(
                tenant_id=tenant_id,
                description=description,
                entry_date=entry_date or timezone.localdate(),
                reference_type=rt,
                reference_id=rid,
                created_by=str(created_by or "")[:100],
                reversal_of=reversal_of,
            )
    except IntegrityError as exc:
        if rt and _find_live_entry(tenant_id=tenant_id, reference_type=rt, reference_id=rid):
            raise IdempotencyError(f"Journal entry already exists for reference {rt}:{rid}") from exc
        raise JournalEntryCreationError(f"Failed to create journal entry: {exc}") from exc

    default_branch = str(branch_id or "")[:64]
    JournalLine.objects.bulk_create(
        [
            JournalLine(
                entry=entry,
                account=line["account"],
                debit=line["debit"],
                credit=line["credit"],
                description=line["description"],
                branch_id=line["branch_id"] or default_branch,
            )
            for line in normalized
        ]
    )
    return entry


@transaction.atomic
def post_journal_entry(*, entry: JournalEntry, posted_by: str = "") -> JournalEntry:
    """draft -> posted. Balances are derived live from posted lines."""
    locked = JournalEntry.objects.select_for_update().get(pk=entry.pk)

    if locked.status != JournalEntry.Status.DRAFT:
        raise JournalEntryStateError(
            f"Only draft entries can be posted (entry #{locked.pk} is {locked.status})"
        )

    totals = locked.lines.aggregate(debit=Sum("debit"), credit=Sum("credit"))
    if totals["debit"] is None or _money(totals["debit"]) != _money(totals["credit"]):
        raise JournalEntryCreationError(f"Entry #{locked.pk} is not balanced; refusing to post")

    locked.status = JournalEntry.Status.POSTED
    locked.posted_by = str(posted_by or "")[:100]
    locked.posted_at = timezone.now()
    locked.save(update_fields=["status", "posted_by", "posted_at"])

    logger.info(
        "Journal entry posted",
        extra={"entry_id": locked.pk, "tenant_id": locked.tenant_id, "reference": locked.reference},
    )
    return locked


@transaction.atomic
def void_journal_entry(*, entry: JournalEntry, voided_by: str = "") -> JournalEntry:
    """draft -> void. Posted entries are corrected with reverse_journal_entry()."""
    locked = JournalEntry.objects.select_for_update().get(pk=entry.pk)

    if locked.status != JournalEntry.Status.DRAFT:
        raise JournalEntryStateError(
            f"Only draft entries can be voided (entry #{locked.pk} is {locked.status}); "
            "post a reversing entry instead"
        )

    locked.status = JournalEntry.Status.VOID
    locked.voided_by = str(voided_by or "")[:100]
    locked.voided_at = timezone.now()
    locked.save(update_fields=["status", "voided_by", "voided_at"])

    logger.info("Journal entry voided", extra={"entry_id": locked.pk, "tenant_id": locked.tenant_id})
    return locked


def create_and_post_journal_entry(*, posted_by: str = "", **kwargs) -> JournalEntry:
    with transaction.atomic():
        entry = create_journal_entry(created_by=posted_by, **kwargs)
        return post_journal_entry(entry=entry, posted_by=posted_by)


def _posted_or_raise(existing: JournalEntry) -> JournalEntry:
    if existing.status != JournalEntry.Status.POSTED:
        logger.error(
            "Reference is held by an unposted entry",
            extra={"entry_id": existing.pk, "reference": existing.reference, "status": existing.status},
        )
        raise IdempotencyError(
            f"Reference {existing.reference} is held by {existing.status} entry #{existing.pk}; "
            "post or void it first"
        )
    logger.info(
        "Journal entry already exists for reference; not posting again",
        extra={"entry_id": existing.pk, "reference": existing.reference},
    )
    return existing


def post_if_absent(
    *,
    tenant_id: str,
    reference_type: str,
    reference_id: str,
    builder: Callable[[], dict | None],
    posted_by: str = "",
) -> JournalEntry | None:
    """
    Idempotent posting keyed by (tenant_id, reference_type, reference_id).

    - existing posted entry -> returned unchanged, builder not called
    - existing DRAFT entry -> IdempotencyError, never reported as posted
    - otherwise builder() -> {"description", "lines", "entry_date"?, "branch_id"?}
      is created AND posted; builder returning None means nothing to post
    - concurrent callers: exactly one entry is created; the others get it
    """
    tenant_id = str(tenant_id or "").strip()
    rt, rid = _normalize_reference(reference_type, reference_id)
    if not rt:
        raise JournalEntryCreationError("post_if_absent requires a reference")

    existing = _find_live_entry(tenant_id=tenant_id, reference_type=rt, reference_id=rid)
    if existing is not None:
        return _posted_or_raise(existing)

    payload = builder()
    if payload is None:
        return None

    try:
        with transaction.atomic():
            return create_and_post_journal_entry(
                tenant_id=tenant_id,
                reference_type=rt,
                reference_id=rid,
                posted_by=posted_by,
                **payload,
            )
    except IdempotencyError:
        existing = _find_live_entry(tenant_id=tenant_id, reference_type=rt, reference_id=rid)
        if existing is None:
            raise
        return _posted_or_raise(existing)


def reverse_journal_entry(
    *,
    entry: JournalEntry,
    reversed_by: str = "",
    description: str | None = None,
    entry_date: date | None = None,
) -> JournalEntry:
    """
    Post the mirror image of a POSTED entry (debits <-> credits).
    Reversing the same entry twice returns the first reversal.
    """
    if entry.status != JournalEntry.Status.POSTED:
        raise JournalEntryStateError("Only posted entries can be reversed; void drafts instead")

    def build() -> dict:
        lines = [
            {
                "account": line.account,
                "debit": line.credit,
                "credit": line.debit,
                "description": line.description,
                "branch_id": line.branch_id,
            }
            for line in entry.lines.select_related("account")
        ]
        return {
            "description": description or f"Reversal of entry #{entry.pk}: {entry.description}",
            "lines": lines,
            "entry_date": entry_date,
            "reversal_of": entry,
        }

    return post_if_absent(
        tenant_id=entry.tenant_id,
        reference_type=REVERSAL_REFERENCE_TYPE,
        reference_id=str(entry.pk),
        builder=build,
        posted_by=reversed_by,
    )
