# recipes/services/recipe_resolver.py

"""
======================================================
PATH: recipes/services/recipe_resolver.py
======================================================
RECIPE RESOLVER

Expands one order line into raw item requirements.

Quantities returned are FINAL for the line (already multiplied by the order
line quantity); callers must not scale them again:
- recipe line: recipe.quantity * line.quantity
- add-on:      addon.quantity_per_unit * selected.quantity * line.quantity

Recoverable data gaps (unknown product, unknown add-on) produce warnings
instead of errors so the order is still costed.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field

from recipes.models import MenuProduct, ProductAddon, RecipeLine
from recipes.types import OrderLineItem, RecipeRequirement

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    requirements: list[RecipeRequirement] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _as_uuid(value) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def resolve(line: OrderLineItem) -> Resolution:
    result = Resolution()

    product_pk = _as_uuid(line.product_id)
    product_exists = product_pk is not None and MenuProduct.objects.filter(pk=product_pk).exists()

    if not product_exists:
        msg = f"Product {line.product_id} not found; no recipe applied"
        logger.warning(msg, extra={"product_id": line.product_id})
        result.warnings.append(msg)
    else:
        recipe_rows = (
            RecipeLine.objects.filter(product_id=product_pk)
            .values("raw_item_id", "quantity", "unit")
            .order_by("id")
        )
        for row in recipe_rows:
            result.requirements.append(
                RecipeRequirement(
                    raw_item_id=str(row["raw_item_id"]),
                    quantity=row["quantity"] * line.quantity,
                    unit=row["unit"],
                    source="recipe",
                    product_id=line.product_id,
                )
            )

    for selected in line.addons:
        addon_pk = _as_uuid(selected.addon_id)
        addon = ProductAddon.objects.filter(pk=addon_pk).first() if addon_pk else None

        if addon is None:
            msg = f"Add-on {selected.addon_id} not found; skipped"
            logger.warning(msg, extra={"addon_id": selected.addon_id})
            result.warnings.append(msg)
            continue

        if not addon.consumes_inventory:
            continue

        result.requirements.append(
            RecipeRequirement(
                raw_item_id=str(addon.raw_item_id),
                quantity=addon.quantity_per_unit * selected.quantity * line.quantity,
                unit=addon.unit,
                source="addon",
                product_id=line.product_id,
                addon_id=str(addon.pk),
            )
        )

    return result
