# costing/admin.py

from django.contrib import admin

from costing.models import OrderCosting

# ============================================================
# ORDER COSTING (STRICTLY IMMUTABLE)
# ============================================================


@admin.register(OrderCosting)
class OrderCostingAdmin(admin.ModelAdmin):
    list_display = ("order_id", "branch_id", "tenant_id", "cost_of_goods", "has_shortages", "actor", "created_at")
    list_filter = ("has_shortages", "branch_id")
    search_fields = ("order_id", "tenant_id")
    ordering = ("-created_at",)
    readonly_fields = (
        "order_id",
        "branch_id",
        "tenant_id",
        "cost_of_goods",
        "has_shortages",
        "report",
        "actor",
        "created_at",
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
