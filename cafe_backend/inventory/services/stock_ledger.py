# inventory/services/stock_ledger.py

"""
======================================================
PATH: inventory/services/stock_ledger.py
======================================================
BRANCH STOCK LEDGER

This module is the ONLY place allowed to:
- Change BranchStock.current_quantity
- Create StockMovement rows

Rules:
- Every adjust() appends exactly one StockMovement
- Read-modify-write happens under a row lock (select_for_update) so two
  concurrent deductions on the same branch + item never lose an update
- A missing BranchStock row is created lazily at zero
- Negative results are allowed and reported (shortage), never clamped
- Restock alerts are re-evaluated in the same transaction as the change
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from inventory.exceptions import StockAdjustmentError
from inventory.models import BranchStock, RawItem, StockMovement
from inventory.services.alerts import evaluate_stock_alert

logger = logging.getLogger(__name__)

QTY_PLACES = Decimal("0.0001")


@dataclass(frozen=True)
class AdjustmentResult:
    stock: BranchStock
    movement: StockMovement
    previous_quantity: Decimal
    new_quantity: Decimal

    @property
    def is_shortage(self) -> bool:
        return self.new_quantity < 0


@dataclass(frozen=True)
class StockLevel:
    branch_id: str
    raw_item_id: str
    quantity: Decimal
    min_stock_level: Decimal
    unit: str
    status: str


def quantize_qty(value) -> Decimal:
    if value is None or value == "":
        raise StockAdjustmentError("quantity is required")

    if isinstance(value, bool):
        raise StockAdjustmentError("quantity must be a number")

    try:
        qty = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise StockAdjustmentError(f"Invalid quantity: {value!r}") from exc

    return qty.quantize(QTY_PLACES, rounding=ROUND_HALF_UP)


def _normalize_branch(branch_id) -> str:
    b = str(branch_id or "").strip()
    if not b:
        raise StockAdjustmentError("branch_id is required")
    return b


def _lock_branch_stock(*, branch_id: str, raw_item_id) -> BranchStock:
    """
    Return the BranchStock row locked FOR UPDATE, creating it at zero when absent.

    Must be called inside transaction.atomic().
    """
    locked = BranchStock.objects.select_for_update()

    stock = locked.filter(branch_id=branch_id, raw_item_id=raw_item_id).first()
    if stock is not None:
        return stock

    try:
        with transaction.atomic():
            BranchStock.objects.create(
                branch_id=branch_id,
                raw_item_id=raw_item_id,
                current_quantity=Decimal("0.0000"),
            )
    except IntegrityError:
        # Created concurrently; the unique constraint guarantees one row.
        pass

    return locked.get(branch_id=branch_id, raw_item_id=raw_item_id)


@transaction.atomic
def adjust(
    *,
    branch_id,
    raw_item_id,
    delta,
    movement_type: str,
    reference_id: str = "",
    actor: str = "",
    note: str = "",
) -> AdjustmentResult:
    """
    Atomically apply a signed delta to (branch, raw item) and append a movement.

    delta:
      +N -> stock in (purchase, positive adjustment, transfer in)
      -N -> stock out (deduction, negative adjustment, transfer out)
    """
    branch = _normalize_branch(branch_id)
    qty_delta = quantize_qty(delta)
    if qty_delta == 0:
        raise StockAdjustmentError("delta cannot be 0")

    if movement_type not in StockMovement.MovementType.values:
        raise StockAdjustmentError(f"Invalid movement_type: {movement_type!r}")

    if not RawItem.objects.filter(pk=raw_item_id).exists():
        raise StockAdjustmentError(f"Raw item {raw_item_id} does not exist")

    stock = _lock_branch_stock(branch_id=branch, raw_item_id=raw_item_id)

    previous = stock.current_quantity
    new = previous + qty_delta

    BranchStock.objects.filter(pk=stock.pk).update(
        current_quantity=F("current_quantity") + qty_delta,
        updated_at=timezone.now(),
    )
    stock.current_quantity = new

    movement = StockMovement.objects.create(
        branch_id=branch,
        raw_item_id=raw_item_id,
        movement_type=movement_type,
        delta=qty_delta,
        previous_quantity=previous,
        new_quantity=new,
        reference_id=str(reference_id or "")[:100],
        actor=str(actor or "")[:100],
        note=str(note or "")[:255],
    )

    if new < 0:
        logger.warning(
            "Stock went negative",
            extra={
                "branch_id": branch,
                "raw_item_id": str(raw_item_id),
                "previous_quantity": str(previous),
                "new_quantity": str(new),
                "reference_id": reference_id,
            },
        )

    evaluate_stock_alert(branch_id=branch, raw_item_id=raw_item_id)

    return AdjustmentResult(
        stock=stock,
        movement=movement,
        previous_quantity=previous,
        new_quantity=new,
    )


def _status_for(quantity: Decimal, threshold: Decimal) -> str:
    if quantity <= 0:
        return "out_of_stock"
    if quantity <= threshold:
        return "low"
    return "sufficient"


def get_stock_level(*, branch_id, raw_item: RawItem) -> StockLevel:
    branch = _normalize_branch(branch_id)
    row = (
        BranchStock.objects.filter(branch_id=branch, raw_item=raw_item)
        .values("current_quantity", "min_stock_level")
        .first()
    )
    quantity = row["current_quantity"] if row else Decimal("0.0000")
    threshold = row["min_stock_level"] if row else Decimal("0.0000")

    return StockLevel(
        branch_id=branch,
        raw_item_id=str(raw_item.pk),
        quantity=quantity,
        min_stock_level=threshold,
        unit=raw_item.unit,
        status=_status_for(quantity, threshold),
    )


def set_min_stock_level(*, branch_id, raw_item: RawItem, min_stock_level) -> BranchStock:
    branch = _normalize_branch(branch_id)
    threshold = quantize_qty(min_stock_level)
    if threshold < 0:
        raise StockAdjustmentError("min_stock_level cannot be negative")

    with transaction.atomic():
        stock = _lock_branch_stock(branch_id=branch, raw_item_id=raw_item.pk)
        stock.min_stock_level = threshold
        stock.save(update_fields=["min_stock_level", "updated_at"])
        evaluate_stock_alert(branch_id=branch, raw_item_id=raw_item.pk)
    return stock


def get_movement_history(
    *, branch_id, raw_item: RawItem | None = None, limit: int = 100, tenant_id: str | None = None
):
    qs = StockMovement.objects.filter(branch_id=_normalize_branch(branch_id))
    if tenant_id:
        qs = qs.filter(raw_item__tenant_id=tenant_id)
    if raw_item is not None:
        qs = qs.filter(raw_item=raw_item)
    return list(qs.select_related("raw_item").order_by("-created_at")[: max(int(limit), 0)])


@transaction.atomic
def transfer_stock(
    *,
    from_branch_id,
    to_branch_id,
    raw_item: RawItem,
    quantity,
    reference_id: str = "",
    actor: str = "",
) -> tuple[AdjustmentResult, AdjustmentResult]:
    """
    Move stock between branches as two TRANSFER movements in one transaction.
    Locks are taken in branch_id order so opposite transfers cannot deadlock.
    """
    src = _normalize_branch(from_branch_id)
    dst = _normalize_branch(to_branch_id)
    if src == dst:
        raise StockAdjustmentError("Source and destination branch must differ")

    qty = quantize_qty(quantity)
    if qty <= 0:
        raise StockAdjustmentError("Transfer quantity must be positive")

    legs = {
        src: (-qty, f"Transfer to {dst}"),
        dst: (qty, f"Transfer from {src}"),
    }

    results = {}
    for branch in sorted(legs):
        delta, note = legs[branch]
        results[branch] = adjust(
            branch_id=branch,
            raw_item_id=raw_item.pk,
            delta=delta,
            movement_type=StockMovement.MovementType.TRANSFER,
            reference_id=reference_id,
            actor=actor,
            note=note,
        )

    return results[src], results[dst]
