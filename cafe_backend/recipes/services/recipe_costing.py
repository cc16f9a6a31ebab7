# recipes/services/recipe_costing.py

"""
RECIPE COST ESTIMATION (READ-ONLY)

Prices one unit of a product from its recipe and current raw item unit
costs. No stock is touched; used for menu pricing and margin checks.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from inventory.services.units import convert
from recipes.models import MenuProduct

TWOPLACES = Decimal("0.01")
COST_PLACES = Decimal("0.0001")


def _q2(amount: Decimal) -> Decimal:
    return (amount or Decimal("0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def calculate_recipe_cost(product: MenuProduct) -> dict:
    lines = []
    total = Decimal("0")

    for line in product.recipe_lines.select_related("raw_item").order_by("id"):
        raw_item = line.raw_item
        stock_qty = convert(line.quantity, line.unit, raw_item.unit)
        cost = (stock_qty * raw_item.unit_cost).quantize(COST_PLACES, rounding=ROUND_HALF_UP)
        total += cost
        lines.append(
            {
                "raw_item_id": str(raw_item.pk),
                "raw_item_name": raw_item.name,
                "quantity": str(line.quantity),
                "unit": line.unit,
                "unit_cost": str(raw_item.unit_cost),
                "cost": str(cost),
            }
        )

    return {
        "product_id": str(product.pk),
        "product_name": product.name,
        "total_cost": _q2(total),
        "lines": lines,
    }


def calculate_profit(*, selling_price, cost) -> dict:
    price = _q2(Decimal(str(selling_price or "0")))
    total_cost = _q2(Decimal(str(cost or "0")))
    profit = _q2(price - total_cost)

    margin = Decimal("0.00")
    if price > 0:
        margin = _q2(profit / price * Decimal("100"))

    return {
        "selling_price": price,
        "cost": total_cost,
        "profit": profit,
        "margin_percent": margin,
    }
