# accounting/admin.py

from django.contrib import admin

from accounting.models import Account, Expense, Invoice, InvoiceLine, JournalEntry, JournalLine

# ============================================================
# CHART OF ACCOUNTS
# ============================================================


@admin.register(Account)
class AccountAdmin(admin.ModelAdmin):
    list_display = (
        "account_number",
        "name",
        "account_type",
        "tenant_id",
        "parent",
        "is_active",
        "is_system",
    )
    list_filter = ("account_type", "is_active", "is_system")
    search_fields = ("account_number", "name", "tenant_id")
    ordering = ("tenant_id", "account_number")
    readonly_fields = ("created_at", "updated_at")

    fieldsets = (
        (
            "Account Identity",
            {
                "fields": ("tenant_id", "account_number", "name", "account_type", "parent", "description"),
            },
        ),
        (
            "Status",
            {
                "fields": ("is_active", "is_system"),
            },
        ),
        (
            "System Fields",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )


# ============================================================
# JOURNAL (READ-ONLY: use the journal API to post / void / reverse)
# ============================================================


class JournalLineInline(admin.TabularInline):
    model = JournalLine
    extra = 0
    fields = ("account", "debit", "credit", "branch_id", "description")
    readonly_fields = fields
    can_delete = False


@admin.register(JournalEntry)
class JournalEntryAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "tenant_id",
        "entry_date",
        "description",
        "status",
        "reference_type",
        "reference_id",
        "posted_at",
    )
    list_filter = ("status", "reference_type", "entry_date")
    search_fields = ("description", "reference_id", "tenant_id")
    ordering = ("-entry_date", "-id")
    inlines = [JournalLineInline]

    readonly_fields = (
        "tenant_id",
        "entry_date",
        "description",
        "status",
        "reference_type",
        "reference_id",
        "reversal_of",
        "created_by",
        "posted_by",
        "posted_at",
        "voided_by",
        "voided_at",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


# ============================================================
# SUBLEDGERS
# ============================================================


class InvoiceLineInline(admin.TabularInline):
    model = InvoiceLine
    extra = 0
    readonly_fields = ("line_subtotal", "line_discount", "line_tax", "line_total")


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = (
        "invoice_number",
        "tenant_id",
        "customer_name",
        "issue_date",
        "total_amount",
        "amount_paid",
        "status",
    )
    list_filter = ("status", "issue_date")
    search_fields = ("invoice_number", "customer_name", "tenant_id")
    ordering = ("-issue_date", "-id")
    inlines = [InvoiceLineInline]
    readonly_fields = (
        "subtotal",
        "discount_amount",
        "tax_amount",
        "total_amount",
        "amount_paid",
        "status",
        "journal_entry",
        "created_at",
        "updated_at",
    )


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = (
        "expense_number",
        "tenant_id",
        "category",
        "amount",
        "vat_amount",
        "status",
        "expense_date",
    )
    list_filter = ("status", "category", "payment_method")
    search_fields = ("expense_number", "description", "vendor", "tenant_id")
    ordering = ("-expense_date", "-id")
    readonly_fields = (
        "status",
        "journal_entry",
        "payment_journal_entry",
        "approved_by",
        "approved_at",
        "paid_at",
        "created_at",
    )
