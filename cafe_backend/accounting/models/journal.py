# accounting/models/journal.py

"""
======================================================
PATH: accounting/models/journal.py
======================================================
JOURNAL ENTRY MODEL

Represents a single accounting transaction (journal header).

Lifecycle:
- draft  -> posted (immutable forever after)
- draft  -> void   (never contributes to balances)

Guarantees:
- Only POSTED entries count toward balances and reports
- Idempotency: at most one non-void entry per
  (tenant_id, reference_type, reference_id) when a reference is given
- entry_date is the accounting effective date (used by reports)
- Corrections of posted entries are new reversing entries, never edits
"""

from __future__ import annotations

from django.core.exceptions import ValidationError
from django.db import models
from django.db.models import Q
from django.utils import timezone


class JournalEntry(models.Model):
    class Status(models.TextChoices):
        DRAFT = "draft", "Draft"
        POSTED = "posted", "Posted"
        VOID = "void", "Void"

    tenant_id = models.CharField(max_length=64, db_index=True)

    entry_date = models.DateField(
        default=timezone.localdate,
        help_text="Accounting effective date",
    )

    description = models.TextField(help_text="Narrative description of the journal entry")

    status = models.CharField(
        max_length=10,
        choices=Status.choices,
        default=Status.DRAFT,
    )

    reference_type = models.CharField(
        max_length=50,
        blank=True,
        default="",
        help_text="Business event type (order_cogs, invoice, expense, ...)",
    )
    reference_id = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Business event id (order id, invoice id, ...)",
    )

    reversal_of = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="reversals",
    )

    created_by = models.CharField(max_length=100, blank=True, default="")
    posted_by = models.CharField(max_length=100, blank=True, default="")
    posted_at = models.DateTimeField(null=True, blank=True)
    voided_by = models.CharField(max_length=100, blank=True, default="")
    voided_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-entry_date", "-created_at"]
        indexes = [
            models.Index(fields=["tenant_id", "status", "entry_date"], name="acct_je_tenant_status_date_idx"),
            models.Index(fields=["reference_type", "reference_id"], name="acct_je_reference_idx"),
            models.Index(fields=["created_at"], name="acct_je_created_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["tenant_id", "reference_type", "reference_id"],
                condition=~Q(status="void") & ~Q(reference_type="") & ~Q(reference_id=""),
                name="uniq_live_journal_reference",
            ),
            models.CheckConstraint(
                condition=Q(status="draft") | Q(status="void") | Q(posted_at__isnull=False),
                name="chk_posted_journal_has_posted_at",
            ),
        ]
        verbose_name = "Journal Entry"
        verbose_name_plural = "Journal Entries"

    def __str__(self):
        return f"JournalEntry #{self.id} - {self.entry_date} ({self.status})"

    @property
    def is_posted(self) -> bool:
        return self.status == self.Status.POSTED

    @property
    def reference(self) -> str | None:
        if not self.reference_type or not self.reference_id:
            return None
        return f"{self.reference_type}:{self.reference_id}"

    def clean(self):
        self.reference_type = (self.reference_type or "").strip()
        self.reference_id = (self.reference_id or "").strip()

        if bool(self.reference_type) != bool(self.reference_id):
            raise ValidationError("reference_type and reference_id must be given together")

        self.description = (self.description or "").strip()
        if not self.description:
            raise ValidationError("Journal entry description is required")

    def save(self, *args, **kwargs):
        # Status transitions are allowed only while the stored row is still a draft.
        if self.pk and type(self).objects.filter(pk=self.pk).exclude(status=self.Status.DRAFT).exists():
            raise ValidationError("Posted or void journal entries are immutable")

        self.full_clean(validate_constraints=False)
        return super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ValidationError("JournalEntry records cannot be deleted; void drafts instead")
