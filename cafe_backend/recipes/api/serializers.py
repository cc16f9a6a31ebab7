# recipes/api/serializers.py

from rest_framework import serializers

from inventory.services.units import is_valid_unit, normalize_unit
from recipes.models import MenuProduct, ProductAddon, RecipeLine


def _unit(value: str) -> str:
    if not is_valid_unit(value):
        raise serializers.ValidationError(f"Unknown unit: {value}")
    return normalize_unit(value)


def _same_tenant(serializer, obj, label: str):
    tenant_id = serializer.context.get("tenant_id")
    if obj is not None and tenant_id and obj.tenant_id != tenant_id:
        raise serializers.ValidationError(f"{label} belongs to another tenant")
    return obj


class RecipeLineSerializer(serializers.ModelSerializer):
    raw_item_name = serializers.CharField(source="raw_item.name", read_only=True)

    class Meta:
        model = RecipeLine
        fields = ("id", "product", "raw_item", "raw_item_name", "quantity", "unit", "note")

    def validate_unit(self, value):
        return _unit(value)

    def validate_product(self, value):
        return _same_tenant(self, value, "Product")

    def validate_raw_item(self, value):
        return _same_tenant(self, value, "Raw item")


class MenuProductSerializer(serializers.ModelSerializer):
    recipe_lines = RecipeLineSerializer(many=True, read_only=True)

    class Meta:
        model = MenuProduct
        fields = (
            "id",
            "tenant_id",
            "name",
            "price",
            "is_active",
            "recipe_lines",
            "created_at",
            "updated_at",
        )
        read_only_fields = ("id", "tenant_id", "created_at", "updated_at")


class ProductAddonSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductAddon
        fields = (
            "id",
            "tenant_id",
            "name",
            "price",
            "raw_item",
            "quantity_per_unit",
            "unit",
            "is_active",
        )
        read_only_fields = ("id", "tenant_id")

    def validate_unit(self, value):
        return _unit(value) if value else value

    def validate_raw_item(self, value):
        return _same_tenant(self, value, "Raw item")
