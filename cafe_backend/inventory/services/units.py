# inventory/services/units.py

"""
======================================================
PATH: inventory/services/units.py
======================================================
UNIT CONVERTER

Converts recipe quantities into a raw item's stocking unit.

Rules:
- Units are compared trimmed + case-insensitive
- Same unit -> quantity unchanged
- Mass family: g <-> kg (x / 1000)
- Volume family: ml <-> l (x / 1000)
- Any other pair is UNMATCHED:
    - default: quantity returned unchanged + WARNING logged
    - strict:  UnitConversionError

The pass-through default keeps orders flowing when recipe data is messy;
strict mode exists for tenants that need exact COGS.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.conf import settings

from inventory.exceptions import UnitConversionError

logger = logging.getLogger(__name__)

THOUSAND = Decimal("1000")

MASS = "mass"
VOLUME = "volume"
COUNT = "count"

# alias -> (canonical unit, family, factor to family base)
_UNITS: dict[str, tuple[str, str, Decimal]] = {
    "g": ("g", MASS, Decimal("1")),
    "gram": ("g", MASS, Decimal("1")),
    "grams": ("g", MASS, Decimal("1")),
    "kg": ("kg", MASS, THOUSAND),
    "kilogram": ("kg", MASS, THOUSAND),
    "kilograms": ("kg", MASS, THOUSAND),
    "ml": ("ml", VOLUME, Decimal("1")),
    "milliliter": ("ml", VOLUME, Decimal("1")),
    "milliliters": ("ml", VOLUME, Decimal("1")),
    "l": ("l", VOLUME, THOUSAND),
    "liter": ("l", VOLUME, THOUSAND),
    "liters": ("l", VOLUME, THOUSAND),
    "litre": ("l", VOLUME, THOUSAND),
    "pcs": ("pcs", COUNT, Decimal("1")),
    "piece": ("pcs", COUNT, Decimal("1")),
    "pieces": ("pcs", COUNT, Decimal("1")),
    "unit": ("pcs", COUNT, Decimal("1")),
}

# Count-like units that only ever convert to themselves.
_OPAQUE_COUNT_UNITS = {"box", "pack", "bottle", "bag", "cup"}


@dataclass(frozen=True)
class ConversionResult:
    quantity: Decimal
    from_unit: str
    to_unit: str
    matched: bool


def normalize_unit(unit) -> str:
    return str(unit or "").strip().lower()


def _canonical(unit: str) -> str:
    info = _UNITS.get(unit)
    return info[0] if info else unit


def unit_family(unit) -> str | None:
    u = normalize_unit(unit)
    info = _UNITS.get(u)
    if info:
        return info[1]
    if u in _OPAQUE_COUNT_UNITS:
        return COUNT
    return None


def is_valid_unit(unit) -> bool:
    return unit_family(unit) is not None


def _to_decimal(value) -> Decimal:
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise UnitConversionError(f"Invalid quantity: {value!r}") from exc


def strict_mode_for(tenant_id=None) -> bool:
    if getattr(settings, "COSTING_STRICT_UNIT_CONVERSION", False):
        return True
    tenants = getattr(settings, "COSTING_STRICT_UNIT_TENANTS", None) or []
    return tenant_id is not None and str(tenant_id) in {str(t) for t in tenants}


def convert_with_result(quantity, from_unit, to_unit, *, strict: bool = False) -> ConversionResult:
    qty = _to_decimal(quantity)
    src = normalize_unit(from_unit)
    dst = normalize_unit(to_unit)

    if src == dst or _canonical(src) == _canonical(dst):
        return ConversionResult(quantity=qty, from_unit=src, to_unit=dst, matched=True)

    src_info = _UNITS.get(src)
    dst_info = _UNITS.get(dst)

    if src_info and dst_info and src_info[1] == dst_info[1]:
        converted = qty * src_info[2] / dst_info[2]
        return ConversionResult(quantity=converted, from_unit=src, to_unit=dst, matched=True)

    if strict:
        raise UnitConversionError(f"Cannot convert from '{src}' to '{dst}'")

    logger.warning(
        "Unmatched unit conversion; quantity passed through unchanged",
        extra={"from_unit": src, "to_unit": dst, "quantity": str(qty)},
    )
    return ConversionResult(quantity=qty, from_unit=src, to_unit=dst, matched=False)


def convert(quantity, from_unit, to_unit, *, strict: bool = False) -> Decimal:
    """
    convert(18, "g", "kg") -> Decimal("0.018")
    convert(5, "scoop", "g") -> Decimal("5") (warning logged)
    """
    return convert_with_result(quantity, from_unit, to_unit, strict=strict).quantity


def normalize_to_base(quantity, unit) -> tuple[Decimal, str]:
    """Express a quantity in its family base unit (g, ml or pcs)."""
    u = normalize_unit(unit)
    info = _UNITS.get(u)
    qty = _to_decimal(quantity)
    if info is None:
        return qty, u
    base = {MASS: "g", VOLUME: "ml", COUNT: "pcs"}[info[1]]
    return qty * info[2], base
