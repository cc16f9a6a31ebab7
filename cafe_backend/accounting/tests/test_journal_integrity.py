# accounting/tests/test_journal_integrity.py

from __future__ import annotations

from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase

from accounting.models import Account, JournalEntry, JournalLine
from accounting.services.chart_of_accounts import get_account_balance, seed_default_chart
from accounting.services.exceptions import (
    IdempotencyError,
    JournalEntryCreationError,
    JournalEntryStateError,
)
from accounting.services.journal_entry_service import (
    create_and_post_journal_entry,
    create_journal_entry,
    post_if_absent,
    post_journal_entry,
    reverse_journal_entry,
    void_journal_entry,
)
from accounting.services.posting import post_order_cogs_to_ledger

TENANT = "tenant-a"


def _account(number, tenant_id=TENANT):
    return Account.objects.get(tenant_id=tenant_id, account_number=number)


class JournalFixtureMixin:
    def setUp(self):
        seed_default_chart(tenant_id=TENANT)
        self.cash = _account("1111")
        self.sales = _account("4100")
        self.vat = _account("2120")

    def sale_lines(self, amount="100.00"):
        return [
            {"account": self.cash, "debit": amount},
            {"account": self.sales, "credit": amount},
        ]


class JournalEntryCreationTests(JournalFixtureMixin, TestCase):
    def test_balanced_entry_is_created_as_draft(self):
        entry = create_journal_entry(tenant_id=TENANT, description="Test sale", lines=self.sale_lines())

        self.assertEqual(entry.status, JournalEntry.Status.DRAFT)
        self.assertEqual(entry.lines.count(), 2)
        # drafts never affect balances
        self.assertEqual(get_account_balance(self.cash), Decimal("0.00"))

    def test_unbalanced_entry_is_rejected(self):
        with self.assertRaises(JournalEntryCreationError):
            create_journal_entry(
                tenant_id=TENANT,
                description="Bad entry",
                lines=[
                    {"account": self.cash, "debit": "100.00"},
                    {"account": self.sales, "credit": "90.00"},
                ],
            )
        self.assertFalse(JournalEntry.objects.exists())

    def test_invalid_lines_are_rejected(self):
        other_tenant_cash = Account.objects.create(
            tenant_id="tenant-b", account_number="1000", name="Cash", account_type=Account.ASSET
        )
        bad_line_sets = [
            [{"account": self.cash, "debit": "10.00"}],
            [{"account": self.cash, "debit": "10.00", "credit": "10.00"}, {"account": self.sales, "credit": "0"}],
            [{"account": self.cash, "debit": "0.00"}, {"account": self.sales, "credit": "0.00"}],
            [{"account": self.cash, "debit": "-5.00"}, {"account": self.sales, "credit": "-5.00"}],
            [{"account": other_tenant_cash, "debit": "5.00"}, {"account": self.sales, "credit": "5.00"}],
            [{"account": None, "debit": "5.00"}, {"account": self.sales, "credit": "5.00"}],
            [{"account": self.cash, "debit": "abc"}, {"account": self.sales, "credit": "5.00"}],
        ]
        for lines in bad_line_sets:
            with self.subTest(lines=lines), self.assertRaises(JournalEntryCreationError):
                create_journal_entry(tenant_id=TENANT, description="Bad", lines=lines)

    def test_inactive_account_is_rejected(self):
        tips = Account.objects.create(
            tenant_id=TENANT, account_number="4300", name="Tips", account_type=Account.REVENUE, is_active=False
        )
        with self.assertRaises(JournalEntryCreationError):
            create_journal_entry(
                tenant_id=TENANT,
                description="Tips",
                lines=[{"account": self.cash, "debit": "5.00"}, {"account": tips, "credit": "5.00"}],
            )

    def test_description_and_reference_pairing_required(self):
        with self.assertRaises(JournalEntryCreationError):
            create_journal_entry(tenant_id=TENANT, description="  ", lines=self.sale_lines())
        with self.assertRaises(JournalEntryCreationError):
            create_journal_entry(
                tenant_id=TENANT, description="Sale", lines=self.sale_lines(), reference_type="order_sale"
            )

    def test_duplicate_live_reference_is_rejected(self):
        create_journal_entry(
            tenant_id=TENANT, description="Sale", lines=self.sale_lines(), reference_type="manual", reference_id="M1"
        )
        with self.assertRaises(IdempotencyError):
            create_journal_entry(
                tenant_id=TENANT,
                description="Sale again",
                lines=self.sale_lines(),
                reference_type="manual",
                reference_id="M1",
            )

    def test_same_reference_allowed_for_other_tenant(self):
        seed_default_chart(tenant_id="tenant-b")
        create_journal_entry(
            tenant_id=TENANT, description="Sale", lines=self.sale_lines(), reference_type="manual", reference_id="M2"
        )
        create_journal_entry(
            tenant_id="tenant-b",
            description="Sale",
            lines=[
                {"account": _account("1111", "tenant-b"), "debit": "1.00"},
                {"account": _account("4100", "tenant-b"), "credit": "1.00"},
            ],
            reference_type="manual",
            reference_id="M2",
        )
        self.assertEqual(JournalEntry.objects.filter(reference_id="M2").count(), 2)

    def test_line_branch_defaults_to_entry_branch(self):
        entry = create_journal_entry(
            tenant_id=TENANT,
            description="Branch sale",
            branch_id="branch-9",
            lines=[
                {"account": self.cash, "debit": "10.00", "branch_id": "branch-1"},
                {"account": self.sales, "credit": "10.00"},
            ],
        )
        branches = sorted(entry.lines.values_list("branch_id", flat=True))
        self.assertEqual(branches, ["branch-1", "branch-9"])


class JournalLifecycleTests(JournalFixtureMixin, TestCase):
    def test_post_moves_draft_to_posted(self):
        entry = create_journal_entry(tenant_id=TENANT, description="Sale", lines=self.sale_lines())

        with self.assertLogs("accounting.services.journal_entry_service", level="INFO"):
            posted = post_journal_entry(entry=entry, posted_by="cashier")

        self.assertEqual(posted.status, JournalEntry.Status.POSTED)
        self.assertIsNotNone(posted.posted_at)
        self.assertEqual(get_account_balance(self.cash), Decimal("100.00"))
        self.assertEqual(get_account_balance(self.sales), Decimal("100.00"))

    def test_posted_entry_cannot_be_posted_or_voided(self):
        entry = create_and_post_journal_entry(tenant_id=TENANT, description="Sale", lines=self.sale_lines())

        with self.assertRaises(JournalEntryStateError):
            post_journal_entry(entry=entry)
        with self.assertRaises(JournalEntryStateError):
            void_journal_entry(entry=entry)

    def test_void_draft_never_counts(self):
        entry = create_journal_entry(tenant_id=TENANT, description="Sale", lines=self.sale_lines())
        voided = void_journal_entry(entry=entry, voided_by="manager")

        self.assertEqual(voided.status, JournalEntry.Status.VOID)
        with self.assertRaises(JournalEntryStateError):
            post_journal_entry(entry=voided)
        self.assertEqual(get_account_balance(self.cash), Decimal("0.00"))

    def test_posted_entry_and_lines_are_immutable(self):
        entry = create_and_post_journal_entry(tenant_id=TENANT, description="Sale", lines=self.sale_lines())

        entry.description = "Edited"
        with self.assertRaises(ValidationError):
            entry.save()
        with self.assertRaises(ValidationError):
            entry.delete()

        line = entry.lines.first()
        line.debit = Decimal("1.00")
        with self.assertRaises(ValidationError):
            line.save()
        with self.assertRaises(ValidationError):
            line.delete()

        with self.assertRaises(ValidationError):
            JournalLine(entry=entry, account=self.vat, credit=Decimal("1.00")).save()

    def test_reversal_mirrors_lines_and_is_idempotent(self):
        entry = create_and_post_journal_entry(tenant_id=TENANT, description="Sale", lines=self.sale_lines("40.00"))

        reversal = reverse_journal_entry(entry=entry, reversed_by="manager")
        again = reverse_journal_entry(entry=entry)

        self.assertEqual(reversal.pk, again.pk)
        self.assertEqual(reversal.reversal_of_id, entry.pk)
        self.assertEqual(reversal.reference, f"reversal:{entry.pk}")
        cash_line = reversal.lines.get(account=self.cash)
        self.assertEqual(cash_line.credit, Decimal("40.00"))
        self.assertEqual(get_account_balance(self.cash), Decimal("0.00"))
        self.assertEqual(get_account_balance(self.sales), Decimal("0.00"))

    def test_only_posted_entries_can_be_reversed(self):
        draft = create_journal_entry(tenant_id=TENANT, description="Sale", lines=self.sale_lines())
        with self.assertRaises(JournalEntryStateError):
            reverse_journal_entry(entry=draft)


class PostIfAbsentTests(JournalFixtureMixin, TestCase):
    def test_builder_runs_once_per_reference(self):
        calls = []

        def build():
            calls.append(1)
            return {"description": "Order sale", "lines": self.sale_lines("12.00")}

        first = post_if_absent(tenant_id=TENANT, reference_type="order_sale", reference_id="o-1", builder=build)
        second = post_if_absent(tenant_id=TENANT, reference_type="order_sale", reference_id="o-1", builder=build)

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(len(calls), 1)
        self.assertEqual(first.status, JournalEntry.Status.POSTED)
        self.assertEqual(get_account_balance(self.cash), Decimal("12.00"))

    def test_builder_returning_none_posts_nothing(self):
        result = post_if_absent(
            tenant_id=TENANT, reference_type="order_cogs", reference_id="o-2", builder=lambda: None
        )
        self.assertIsNone(result)
        self.assertFalse(JournalEntry.objects.exists())

    def test_voided_draft_frees_the_reference(self):
        draft = create_journal_entry(
            tenant_id=TENANT, description="Draft", lines=self.sale_lines(), reference_type="manual", reference_id="m-3"
        )
        void_journal_entry(entry=draft)

        entry = post_if_absent(
            tenant_id=TENANT,
            reference_type="manual",
            reference_id="m-3",
            builder=lambda: {"description": "Real", "lines": self.sale_lines("5.00")},
        )
        self.assertNotEqual(entry.pk, draft.pk)
        self.assertEqual(entry.status, JournalEntry.Status.POSTED)

    def test_reference_is_required(self):
        with self.assertRaises(JournalEntryCreationError):
            post_if_absent(tenant_id=TENANT, reference_type="", reference_id="", builder=lambda: None)

    def test_failed_builder_leaves_no_entry(self):
        def build():
            return {
                "description": "Broken",
                "lines": [{"account": self.cash, "debit": "5.00"}, {"account": self.sales, "credit": "4.00"}],
            }

        with self.assertRaises(JournalEntryCreationError):
            post_if_absent(tenant_id=TENANT, reference_type="manual", reference_id="m-4", builder=build)
        self.assertFalse(JournalEntry.objects.filter(reference_id="m-4").exists())

    def test_draft_holding_the_reference_is_not_reported_as_posted(self):
        draft = create_journal_entry(
            tenant_id=TENANT,
            description="Hand-keyed COGS",
            lines=self.sale_lines("5.40"),
            reference_type="order_cogs",
            reference_id="O1",
        )

        with self.assertRaises(IdempotencyError):
            post_order_cogs_to_ledger(tenant_id=TENANT, order_id="O1", branch_id="branch-1", amount="5.40")

        self.assertEqual(JournalEntry.objects.filter(reference_id="O1").count(), 1)
        draft.refresh_from_db()
        self.assertEqual(draft.status, JournalEntry.Status.DRAFT)

    def test_posting_after_the_draft_is_voided(self):
        draft = create_journal_entry(
            tenant_id=TENANT,
            description="Hand-keyed COGS",
            lines=self.sale_lines("5.40"),
            reference_type="order_cogs",
            reference_id="O1",
        )
        void_journal_entry(entry=draft)

        entry = post_order_cogs_to_ledger(tenant_id=TENANT, order_id="O1", branch_id="branch-1", amount="5.40")

        self.assertEqual(entry.status, JournalEntry.Status.POSTED)
        self.assertEqual(get_account_balance(_account("5100")), Decimal("5.40"))
