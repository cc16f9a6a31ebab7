# inventory/admin.py
"""
=====================================================
PATH: inventory/admin.py
=====================================================

Admin rules (audit-safe stock):

- RawItem is editable except unit_cost (purchase receipts own it).
- BranchStock quantity is read-only: quantities only change through
  inventory.services.stock_ledger so every change has a StockMovement.
- StockMovement rows are immutable and cannot be added, edited or deleted.
"""

from django.contrib import admin

from inventory.models import BranchStock, RawItem, StockAlert, StockMovement


@admin.register(RawItem)
class RawItemAdmin(admin.ModelAdmin):
    list_display = ("code", "name", "tenant_id", "category", "unit", "unit_cost", "is_active")
    list_filter = ("category", "unit", "is_active")
    search_fields = ("code", "name", "tenant_id")
    ordering = ("tenant_id", "name")
    readonly_fields = ("unit_cost", "created_at", "updated_at")


@admin.register(BranchStock)
class BranchStockAdmin(admin.ModelAdmin):
    list_display = ("branch_id", "raw_item", "current_quantity", "min_stock_level", "updated_at")
    list_filter = ("branch_id",)
    search_fields = ("branch_id", "raw_item__name", "raw_item__code")
    readonly_fields = ("branch_id", "raw_item", "current_quantity", "updated_at")

    def has_add_permission(self, request):
        return False


@admin.register(StockMovement)
class StockMovementAdmin(admin.ModelAdmin):
    list_display = (
        "created_at",
        "branch_id",
        "raw_item",
        "movement_type",
        "delta",
        "previous_quantity",
        "new_quantity",
        "reference_id",
        "actor",
    )
    list_filter = ("movement_type", "branch_id")
    search_fields = ("reference_id", "raw_item__name", "actor")
    ordering = ("-created_at",)

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockAlert)
class StockAlertAdmin(admin.ModelAdmin):
    list_display = ("branch_id", "raw_item", "alert_type", "current_quantity", "threshold_quantity", "is_resolved")
    list_filter = ("alert_type", "is_resolved", "branch_id")
    search_fields = ("raw_item__name", "branch_id")
    readonly_fields = ("current_quantity", "threshold_quantity", "resolved_by", "resolved_at", "created_at", "updated_at")
