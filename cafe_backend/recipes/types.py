# recipes/types.py

"""
TYPED ORDER PAYLOAD RECORDS

Order lines arrive from checkout as loosely shaped JSON. They are validated
ONCE at the boundary (from_payload) and travel through the resolver and the
costing engine as these frozen records.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping

from recipes.exceptions import OrderPayloadError


def _positive_decimal(value, *, field_name: str) -> Decimal:
    if isinstance(value, bool) or value is None or value == "":
        raise OrderPayloadError(f"{field_name} is required and must be a number")
    try:
        qty = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise OrderPayloadError(f"{field_name} must be a number") from exc
    if not qty.is_finite() or qty <= 0:
        raise OrderPayloadError(f"{field_name} must be greater than zero")
    return qty


def _required_id(value, *, field_name: str) -> str:
    v = str(value or "").strip()
    if not v:
        raise OrderPayloadError(f"{field_name} is required")
    return v


@dataclass(frozen=True)
class SelectedAddon:
    addon_id: str
    quantity: Decimal = Decimal("1")

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "SelectedAddon":
        if not isinstance(data, Mapping):
            raise OrderPayloadError("Each add-on must be an object")
        return cls(
            addon_id=_required_id(data.get("addon_id"), field_name="addon_id"),
            quantity=_positive_decimal(data.get("quantity", 1), field_name="addon quantity"),
        )


@dataclass(frozen=True)
class OrderLineItem:
    product_id: str
    quantity: Decimal
    addons: tuple[SelectedAddon, ...] = field(default_factory=tuple)

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "OrderLineItem":
        if isinstance(data, OrderLineItem):
            return data
        if not isinstance(data, Mapping):
            raise OrderPayloadError("Each order line must be an object")

        raw_addons = data.get("addons") or []
        if not isinstance(raw_addons, (list, tuple)):
            raise OrderPayloadError("addons must be a list")

        return cls(
            product_id=_required_id(data.get("product_id"), field_name="product_id"),
            quantity=_positive_decimal(data.get("quantity"), field_name="quantity"),
            addons=tuple(SelectedAddon.from_payload(a) for a in raw_addons),
        )


def parse_line_items(items) -> list[OrderLineItem]:
    if items is None:
        raise OrderPayloadError("line_items is required")
    if not isinstance(items, (list, tuple)):
        raise OrderPayloadError("line_items must be a list")
    return [OrderLineItem.from_payload(item) for item in items]


@dataclass(frozen=True)
class RecipeRequirement:
    """Raw item quantity required by one order line, in the recipe's unit."""

    raw_item_id: str
    quantity: Decimal
    unit: str
    source: str  # "recipe" | "addon"
    product_id: str
    addon_id: str | None = None
