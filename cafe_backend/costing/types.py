# costing/types.py

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from decimal import Decimal

# Re-exported: the order payload records are owned by the recipe layer.
from recipes.types import OrderLineItem, SelectedAddon, parse_line_items  # noqa: F401


@dataclass(frozen=True)
class DeductionDetail:
    raw_item_id: str
    raw_item_name: str
    quantity: Decimal
    unit: str
    unit_cost: Decimal
    total_cost: Decimal
    previous_quantity: Decimal
    new_quantity: Decimal
    status: str  # "deducted" | "shortage"
    movement_id: str


@dataclass(frozen=True)
class Shortage:
    raw_item_id: str
    raw_item_name: str
    required: Decimal
    available: Decimal
    unit: str


_DECIMAL_FIELDS = {
    "quantity",
    "unit_cost",
    "total_cost",
    "previous_quantity",
    "new_quantity",
    "required",
    "available",
}


def _json_safe(d: dict) -> dict:
    return {k: (str(v) if isinstance(v, Decimal) else v) for k, v in d.items()}


def _from_json(d: dict) -> dict:
    return {k: (Decimal(v) if k in _DECIMAL_FIELDS else v) for k, v in d.items()}


@dataclass(frozen=True)
class CostingReport:
    order_id: str
    branch_id: str
    cost_of_goods: Decimal
    deductions: tuple[DeductionDetail, ...] = field(default_factory=tuple)
    shortages: tuple[Shortage, ...] = field(default_factory=tuple)
    warnings: tuple[str, ...] = field(default_factory=tuple)

    @property
    def has_shortages(self) -> bool:
        return bool(self.shortages)

    @property
    def success(self) -> bool:
        # false means "shortage occurred", never "order failed"
        return not self.shortages

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "order_id": self.order_id,
            "branch_id": self.branch_id,
            "cost_of_goods": str(self.cost_of_goods),
            "deductions": [_json_safe(asdict(d)) for d in self.deductions],
            "shortages": [_json_safe(asdict(s)) for s in self.shortages],
            "warnings": list(self.warnings),
            # fatal conditions raise instead of being reported
            "errors": [],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CostingReport":
        return cls(
            order_id=data["order_id"],
            branch_id=data["branch_id"],
            cost_of_goods=Decimal(data["cost_of_goods"]),
            deductions=tuple(DeductionDetail(**_from_json(d)) for d in data.get("deductions", [])),
            shortages=tuple(Shortage(**_from_json(s)) for s in data.get("shortages", [])),
            warnings=tuple(data.get("warnings", [])),
        )
