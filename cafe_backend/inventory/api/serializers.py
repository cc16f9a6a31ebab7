# inventory/api/serializers.py

"""
INVENTORY SERIALIZERS

- RawItemSerializer: catalog CRUD; unit is validated against known units,
  code is unique per tenant, and tenant_id and unit_cost are read-only
  (the request tenant and purchase receipts own them)
- Input serializers for the stock ledger endpoints; quantities are
  applied by services, never by ModelSerializer.save()
"""

from __future__ import annotations

from decimal import Decimal

from rest_framework import serializers

from inventory.models import RawItem, StockAlert, StockMovement
from inventory.services.units import is_valid_unit, normalize_unit


class RawItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = RawItem
        fields = (
            "id",
            "tenant_id",
            "code",
            "name",
            "category",
            "unit",
            "unit_cost",
            "is_active",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "tenant_id", "unit_cost", "created_at", "updated_at")

    def validate_unit(self, value):
        if not is_valid_unit(value):
            raise serializers.ValidationError(f"Unknown unit: {value!r}")
        return normalize_unit(value)

    def validate_code(self, value):
        tenant_id = self.instance.tenant_id if self.instance else self.context.get("tenant_id")
        taken = RawItem.objects.filter(tenant_id=tenant_id, code=value)
        if self.instance is not None:
            taken = taken.exclude(pk=self.instance.pk)
        if taken.exists():
            raise serializers.ValidationError(f"Code {value!r} is already used by another raw item")
        return value


class StockMovementSerializer(serializers.ModelSerializer):
    raw_item_name = serializers.CharField(source="raw_item.name", read_only=True)

    class Meta:
        model = StockMovement
        fields = (
            "id",
            "branch_id",
            "raw_item",
            "raw_item_name",
            "movement_type",
            "delta",
            "previous_quantity",
            "new_quantity",
            "reference_id",
            "actor",
            "note",
            "created_at",
        )
        read_only_fields = fields


class StockAlertSerializer(serializers.ModelSerializer):
    raw_item_name = serializers.CharField(source="raw_item.name", read_only=True)

    class Meta:
        model = StockAlert
        fields = (
            "id",
            "branch_id",
            "raw_item",
            "raw_item_name",
            "alert_type",
            "current_quantity",
            "threshold_quantity",
            "is_resolved",
            "resolved_by",
            "resolved_at",
            "created_at",
        )
        read_only_fields = fields


class StockAdjustmentInputSerializer(serializers.Serializer):
    """Manual stock count correction (movement_type=adjustment)."""

    branch_id = serializers.CharField(max_length=64)
    raw_item_id = serializers.UUIDField()
    delta = serializers.DecimalField(max_digits=16, decimal_places=4)
    reference_id = serializers.CharField(max_length=100, required=False, allow_blank=True)
    note = serializers.CharField(max_length=255, required=False, allow_blank=True)

    def validate_delta(self, value):
        if value == 0:
            raise serializers.ValidationError("delta cannot be 0")
        return value


class PurchaseReceiptInputSerializer(serializers.Serializer):
    branch_id = serializers.CharField(max_length=64)
    raw_item_id = serializers.UUIDField()
    quantity = serializers.DecimalField(max_digits=16, decimal_places=4, min_value=Decimal("0.0001"))
    unit = serializers.CharField(max_length=20, required=False, allow_blank=True)
    total_cost = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0"))
    reference_id = serializers.CharField(max_length=100)
    payment_method = serializers.ChoiceField(choices=["credit", "cash", "bank"], default="credit")


class TransferInputSerializer(serializers.Serializer):
    from_branch_id = serializers.CharField(max_length=64)
    to_branch_id = serializers.CharField(max_length=64)
    raw_item_id = serializers.UUIDField()
    quantity = serializers.DecimalField(max_digits=16, decimal_places=4, min_value=Decimal("0.0001"))
    reference_id = serializers.CharField(max_length=100, required=False, allow_blank=True)

    def validate(self, attrs):
        if attrs["from_branch_id"].strip() == attrs["to_branch_id"].strip():
            raise serializers.ValidationError("Source and destination branch must differ")
        return attrs


class MinStockLevelInputSerializer(serializers.Serializer):
    branch_id = serializers.CharField(max_length=64)
    raw_item_id = serializers.UUIDField()
    min_stock_level = serializers.DecimalField(max_digits=16, decimal_places=4, min_value=Decimal("0"))
