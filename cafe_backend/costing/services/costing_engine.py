# costing/services/costing_engine.py

"""
======================================================
PATH: costing/services/costing_engine.py
======================================================
ORDER COSTING ENGINE

cost_order() turns a completed order into stock deductions + COGS.

Hard rules:
- At most once per order_id: the OrderCosting row is claimed (unique insert)
  in the same transaction as the deductions. A retry, sequential or
  concurrent, receives the stored report and deducts nothing.
- Requirements for the same raw item across lines are summed BEFORE
  deduction: one movement per raw item per order.
- Raw items are deducted in raw_item_id order so concurrent orders lock rows
  in the same order.
- Shortages never abort: stock goes negative and the shortage is reported.
- Recoverable data gaps (missing raw item, unknown product/add-on, unmatched
  unit) become report warnings. In strict unit mode an unmatched unit raises
  UnitConversionError and the whole call rolls back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from django.db import IntegrityError, transaction

from costing.exceptions import CostingError
from costing.models import OrderCosting
from costing.types import (
    CostingReport,
    DeductionDetail,
    OrderLineItem,
    Shortage,
    parse_line_items,
)
from inventory.models import RawItem, StockMovement
from inventory.services.stock_ledger import adjust
from inventory.services.units import convert_with_result, strict_mode_for
from recipes.services.recipe_resolver import resolve

logger = logging.getLogger(__name__)

TWOPLACES = Decimal("0.01")
QTY_PLACES = Decimal("0.0001")


@dataclass
class _Requirements:
    totals: dict[str, Decimal] = field(default_factory=dict)
    raw_items: dict[str, RawItem] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)


def _money(v: Decimal) -> Decimal:
    return (v or Decimal("0.00")).quantize(TWOPLACES, rounding=ROUND_HALF_UP)


def _qty(v: Decimal) -> Decimal:
    return v.quantize(QTY_PLACES, rounding=ROUND_HALF_UP)


def _required_str(value, *, name: str) -> str:
    v = str(value or "").strip()
    if not v:
        raise CostingError(f"{name} is required")
    return v


def _collect_requirements(lines: list[OrderLineItem], *, strict: bool) -> _Requirements:
    """Resolve every line and sum converted quantities per raw item."""
    out = _Requirements()
    resolved = []

    for line in lines:
        resolution = resolve(line)
        out.warnings.extend(resolution.warnings)
        resolved.extend(resolution.requirements)

    ids = {req.raw_item_id for req in resolved}
    raw_items = {str(pk): item for pk, item in RawItem.objects.in_bulk(list(ids)).items()}

    for req in resolved:
        raw_item = raw_items.get(req.raw_item_id)
        if raw_item is None:
            msg = f"Raw item {req.raw_item_id} not found; requirement skipped"
            logger.warning(msg, extra={"raw_item_id": req.raw_item_id, "product_id": req.product_id})
            out.warnings.append(msg)
            continue

        conversion = convert_with_result(req.quantity, req.unit, raw_item.unit, strict=strict)
        if not conversion.matched:
            out.warnings.append(
                f"Unit '{conversion.from_unit}' does not convert to '{conversion.to_unit}' "
                f"for {raw_item.name}; quantity used as-is"
            )

        out.raw_items[req.raw_item_id] = raw_item
        out.totals[req.raw_item_id] = out.totals.get(req.raw_item_id, Decimal("0")) + conversion.quantity

    return out


def _deduct(*, order_id: str, branch_id: str, actor: str, reqs: _Requirements) -> CostingReport:
    deductions: list[DeductionDetail] = []
    shortages: list[Shortage] = []
    warnings = list(reqs.warnings)
    cogs = Decimal("0")

    for raw_item_id in sorted(reqs.totals):
        quantity = _qty(reqs.totals[raw_item_id])
        if quantity <= 0:
            continue

        raw_item = reqs.raw_items[raw_item_id]
        result = adjust(
            branch_id=branch_id,
            raw_item_id=raw_item.pk,
            delta=-quantity,
            movement_type=StockMovement.MovementType.DEDUCTION,
            reference_id=order_id,
            actor=actor,
            note=f"Order {order_id}",
        )

        line_cost = _qty(quantity * raw_item.unit_cost)
        cogs += line_cost
        short = result.new_quantity < 0

        deductions.append(
            DeductionDetail(
                raw_item_id=raw_item_id,
                raw_item_name=raw_item.name,
                quantity=quantity,
                unit=raw_item.unit,
                unit_cost=raw_item.unit_cost,
                total_cost=line_cost,
                previous_quantity=result.previous_quantity,
                new_quantity=result.new_quantity,
                status="shortage" if short else "deducted",
                movement_id=str(result.movement.pk),
            )
        )

        if short:
            available = max(result.previous_quantity, Decimal("0"))
            shortages.append(
                Shortage(
                    raw_item_id=raw_item_id,
                    raw_item_name=raw_item.name,
                    required=quantity,
                    available=available,
                    unit=raw_item.unit,
                )
            )
            warnings.append(
                f"Insufficient {raw_item.name}: required {quantity} {raw_item.unit}, "
                f"available {available} {raw_item.unit}"
            )
            logger.warning(
                "Order deduction caused a shortage",
                extra={
                    "order_id": order_id,
                    "branch_id": branch_id,
                    "raw_item_id": raw_item_id,
                    "required": str(quantity),
                    "available": str(available),
                },
            )

    return CostingReport(
        order_id=order_id,
        branch_id=branch_id,
        cost_of_goods=_money(cogs),
        deductions=tuple(deductions),
        shortages=tuple(shortages),
        warnings=tuple(warnings),
    )


def _replay(record: OrderCosting) -> CostingReport:
    logger.info(
        "Order already costed; returning stored report",
        extra={"order_id": record.order_id, "cost_of_goods": str(record.cost_of_goods)},
    )
    return CostingReport.from_dict(record.report)


def cost_order(
    *,
    order_id,
    branch_id,
    line_items,
    actor: str = "",
    tenant_id: str | None = None,
) -> CostingReport:
    """
    Deduct inventory for a completed order and compute its cost of goods.

    line_items: list[OrderLineItem] or raw payload dicts
        {"product_id", "quantity", "addons": [{"addon_id", "quantity"}]}
    """
    order_id = _required_str(order_id, name="order_id")
    branch_id = _required_str(branch_id, name="branch_id")
    lines = parse_line_items(line_items)

    existing = OrderCosting.objects.filter(order_id=order_id).first()
    if existing is not None:
        return _replay(existing)

    strict = strict_mode_for(tenant_id)

    with transaction.atomic():
        try:
            with transaction.atomic():
                record = OrderCosting.objects.create(
                    order_id=order_id,
                    branch_id=branch_id,
                    tenant_id=str(tenant_id or ""),
                    actor=str(actor or "")[:100],
                )
        except IntegrityError:
            return _replay(OrderCosting.objects.get(order_id=order_id))

        reqs = _collect_requirements(lines, strict=strict)
        report = _deduct(order_id=order_id, branch_id=branch_id, actor=actor, reqs=reqs)

        record.report = report.to_dict()
        record.cost_of_goods = report.cost_of_goods
        record.has_shortages = report.has_shortages
        record.save(update_fields=["report", "cost_of_goods", "has_shortages"])

    logger.info(
        "Order costed",
        extra={
            "order_id": order_id,
            "branch_id": branch_id,
            "cost_of_goods": str(report.cost_of_goods),
            "shortages": len(report.shortages),
        },
    )
    return report


def estimate_order_cost(*, line_items, tenant_id: str | None = None) -> dict:
    """
    Price an order from current recipes and unit costs WITHOUT touching stock.
    """
    lines = parse_line_items(line_items)
    reqs = _collect_requirements(lines, strict=strict_mode_for(tenant_id))

    breakdown = []
    total = Decimal("0")
    for raw_item_id in sorted(reqs.totals):
        raw_item = reqs.raw_items[raw_item_id]
        quantity = _qty(reqs.totals[raw_item_id])
        cost = _qty(quantity * raw_item.unit_cost)
        total += cost
        breakdown.append(
            {
                "raw_item_id": raw_item_id,
                "raw_item_name": raw_item.name,
                "quantity": quantity,
                "unit": raw_item.unit,
                "unit_cost": raw_item.unit_cost,
                "total_cost": cost,
            }
        )

    return {
        "cost_of_goods": _money(total),
        "ingredients": breakdown,
        "warnings": list(reqs.warnings),
    }
