# costing/api/serializers.py

"""
Order payload validation at the HTTP boundary.

The nested serializers mirror recipes.types.OrderLineItem / SelectedAddon;
validated data is turned into those typed records before entering the
costing engine.
"""

from decimal import Decimal

from rest_framework import serializers

from costing.models import OrderCosting
from recipes.types import OrderLineItem, SelectedAddon


class SelectedAddonSerializer(serializers.Serializer):
    addon_id = serializers.UUIDField()
    quantity = serializers.DecimalField(
        max_digits=12, decimal_places=4, min_value=Decimal("0.0001"), default=Decimal("1")
    )


class OrderLineItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.DecimalField(max_digits=12, decimal_places=4, min_value=Decimal("0.0001"))
    addons = SelectedAddonSerializer(many=True, required=False, default=list)

    def to_line_item(self, data) -> OrderLineItem:
        return OrderLineItem(
            product_id=str(data["product_id"]),
            quantity=data["quantity"],
            addons=tuple(
                SelectedAddon(addon_id=str(a["addon_id"]), quantity=a["quantity"])
                for a in data.get("addons", [])
            ),
        )


def to_line_items(validated_lines) -> list[OrderLineItem]:
    s = OrderLineItemSerializer()
    return [s.to_line_item(line) for line in validated_lines]


class CostOrderSerializer(serializers.Serializer):
    """
    POST body for /api/costing/orders/.

    total_amount is optional: when present (and a tenant is given) the sale
    itself is recognized as well as the COGS.
    """

    order_id = serializers.CharField(max_length=100)
    branch_id = serializers.CharField(max_length=64)
    line_items = OrderLineItemSerializer(many=True)
    total_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, min_value=Decimal("0"))
    vat_amount = serializers.DecimalField(max_digits=14, decimal_places=2, required=False, min_value=Decimal("0"))
    payment_method = serializers.ChoiceField(choices=["cash", "bank", "card", "credit"], default="cash")


class EstimateSerializer(serializers.Serializer):
    line_items = OrderLineItemSerializer(many=True)


class OrderCostingSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderCosting
        fields = (
            "order_id",
            "branch_id",
            "tenant_id",
            "cost_of_goods",
            "has_shortages",
            "report",
            "actor",
            "created_at",
        )
        read_only_fields = fields
