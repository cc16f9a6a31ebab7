# inventory/services/purchasing.py

"""
PURCHASE RECEIPT SERVICE

Workflow (atomic):
0) reference_id identifies ONE receipt line (branch + raw item) per tenant:
   - already recorded for the same line -> the earlier receipt is returned,
     stock is not touched again
   - already used for a different line -> StockAdjustmentError
1) Convert purchased quantity into the raw item's stocking unit
2) adjust(+qty, movement_type=purchase)
3) Update RawItem.unit_cost to the received cost per stocking unit
4) Optionally post Dr Inventory / Cr Accounts Payable|Cash (idempotent by reference)

Accounting Effect (when posting is enabled and tenant is known):
- Dr Inventory
- Cr Accounts Payable (credit) or Cash/Bank (paid on receipt)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from inventory.exceptions import StockAdjustmentError
from inventory.models import BranchStock, RawItem, StockMovement
from inventory.services.stock_ledger import AdjustmentResult, adjust
from inventory.services.units import convert, strict_mode_for

COST_PLACES = Decimal("0.0001")
TWOPLACES = Decimal("0.01")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PurchaseReceipt:
    adjustment: AdjustmentResult
    unit_cost: Decimal
    total_cost: Decimal
    journal_entry_id: int | None
    replayed: bool = False


def _to_decimal(value, *, field: str) -> Decimal:
    try:
        return value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError) as exc:
        raise StockAdjustmentError(f"Invalid {field}: {value!r}") from exc


def _prior_receipt(*, branch_id: str, raw_item: RawItem, reference_id: str) -> StockMovement | None:
    return StockMovement.objects.filter(
        branch_id=branch_id,
        raw_item=raw_item,
        movement_type=StockMovement.MovementType.PURCHASE,
        reference_id=reference_id,
    ).first()


def _reference_taken_elsewhere(*, branch_id: str, raw_item: RawItem, reference_id: str) -> bool:
    return (
        StockMovement.objects.filter(
            raw_item__tenant_id=raw_item.tenant_id,
            movement_type=StockMovement.MovementType.PURCHASE,
            reference_id=reference_id,
        )
        .exclude(branch_id=branch_id, raw_item=raw_item)
        .exists()
    )


def _replayed_adjustment(movement: StockMovement) -> AdjustmentResult:
    return AdjustmentResult(
        stock=BranchStock.objects.get(branch_id=movement.branch_id, raw_item_id=movement.raw_item_id),
        movement=movement,
        previous_quantity=movement.previous_quantity,
        new_quantity=movement.new_quantity,
    )


@transaction.atomic
def receive_purchase(
    *,
    branch_id,
    raw_item: RawItem,
    quantity,
    unit: str | None = None,
    total_cost,
    reference_id: str,
    actor: str = "",
    payment_method: str = "credit",
    tenant_id: str | None = None,
) -> PurchaseReceipt:
    reference_id = str(reference_id or "").strip()[:100]
    if not reference_id:
        raise StockAdjustmentError("reference_id is required for purchase receipts")
    branch = str(branch_id or "").strip()
    if not branch:
        raise StockAdjustmentError("branch_id is required")

    qty = _to_decimal(quantity, field="quantity")
    cost = _to_decimal(total_cost, field="total_cost")
    if qty <= 0:
        raise StockAdjustmentError("Purchased quantity must be positive")
    if cost < 0:
        raise StockAdjustmentError("total_cost cannot be negative")

    stocking_qty = convert(
        qty,
        unit or raw_item.unit,
        raw_item.unit,
        strict=strict_mode_for(tenant_id or raw_item.tenant_id),
    )

    prior = _prior_receipt(branch_id=branch, raw_item=raw_item, reference_id=reference_id)
    if prior is None and _reference_taken_elsewhere(branch_id=branch, raw_item=raw_item, reference_id=reference_id):
        raise StockAdjustmentError(f"Purchase reference {reference_id} is already used for another receipt line")
    if prior is None:
        try:
            with transaction.atomic():
                result = adjust(
                    branch_id=branch,
                    raw_item_id=raw_item.pk,
                    delta=stocking_qty,
                    movement_type=StockMovement.MovementType.PURCHASE,
                    reference_id=reference_id,
                    actor=actor,
                    note=f"Purchase receipt {reference_id}",
                )
        except (IntegrityError, ValidationError):
            # Same receipt recorded concurrently (unique constraint on purchase movements).
            prior = _prior_receipt(branch_id=branch, raw_item=raw_item, reference_id=reference_id)
            if prior is None:
                raise

    replayed = prior is not None
    if replayed:
        logger.info(
            "Purchase receipt already applied; stock not adjusted again",
            extra={"branch_id": branch, "raw_item_id": str(raw_item.pk), "reference_id": reference_id},
        )
        result = _replayed_adjustment(prior)

    unit_cost = (cost / result.movement.delta).quantize(COST_PLACES, rounding=ROUND_HALF_UP)
    if not replayed:
        RawItem.objects.filter(pk=raw_item.pk).update(unit_cost=unit_cost)
        raw_item.unit_cost = unit_cost

    total = cost.quantize(TWOPLACES, rounding=ROUND_HALF_UP)

    journal_entry_id = None
    tenant = tenant_id or raw_item.tenant_id
    if tenant and total > 0 and getattr(settings, "ACCOUNTING_POSTING_ENABLED", False):
        from accounting.services.posting import post_purchase_receipt_to_ledger

        entry = post_purchase_receipt_to_ledger(
            tenant_id=tenant,
            reference_id=reference_id,
            branch_id=branch,
            amount=total,
            payment_method=payment_method,
            posted_by=actor,
        )
        journal_entry_id = entry.id if entry is not None else None

    return PurchaseReceipt(
        adjustment=result,
        unit_cost=unit_cost,
        total_cost=total,
        journal_entry_id=journal_entry_id,
        replayed=replayed,
    )
