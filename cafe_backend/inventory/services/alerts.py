# inventory/services/alerts.py

"""
RESTOCK ALERTS

- out_of_stock: quantity <= 0 (includes negative / shortage)
- low_stock:    0 < quantity <= min_stock_level
- otherwise any open alert for the branch + item is auto-resolved
"""

from __future__ import annotations

import logging

from django.db import transaction
from django.utils import timezone

from inventory.models import BranchStock, StockAlert

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"


def _alert_type_for(stock: BranchStock) -> str | None:
    if stock.current_quantity <= 0:
        return StockAlert.AlertType.OUT_OF_STOCK
    if stock.min_stock_level > 0 and stock.current_quantity <= stock.min_stock_level:
        return StockAlert.AlertType.LOW_STOCK
    return None


@transaction.atomic
def evaluate_stock_alert(*, branch_id: str, raw_item_id) -> StockAlert | None:
    """
    Re-evaluate the open alert for one branch + raw item.
    Returns the open alert (created or updated), or None when stock is fine.
    """
    stock = (
        BranchStock.objects.filter(branch_id=branch_id, raw_item_id=raw_item_id)
        .first()
    )
    if stock is None:
        return None

    alert_type = _alert_type_for(stock)
    open_alert = (
        StockAlert.objects.select_for_update()
        .filter(branch_id=branch_id, raw_item_id=raw_item_id, is_resolved=False)
        .first()
    )

    if alert_type is None:
        if open_alert is not None:
            _resolve(open_alert, resolved_by=SYSTEM_ACTOR)
        return None

    if open_alert is None:
        alert = StockAlert.objects.create(
            branch_id=branch_id,
            raw_item_id=raw_item_id,
            alert_type=alert_type,
            current_quantity=stock.current_quantity,
            threshold_quantity=stock.min_stock_level,
        )
        logger.info(
            "Stock alert raised",
            extra={
                "branch_id": branch_id,
                "raw_item_id": str(raw_item_id),
                "alert_type": alert_type,
            },
        )
        return alert

    open_alert.alert_type = alert_type
    open_alert.current_quantity = stock.current_quantity
    open_alert.threshold_quantity = stock.min_stock_level
    open_alert.save(
        update_fields=["alert_type", "current_quantity", "threshold_quantity", "updated_at"]
    )
    return open_alert


def _resolve(alert: StockAlert, *, resolved_by: str) -> StockAlert:
    alert.is_resolved = True
    alert.resolved_by = str(resolved_by or "")[:100]
    alert.resolved_at = timezone.now()
    alert.save(update_fields=["is_resolved", "resolved_by", "resolved_at", "updated_at"])
    return alert


def resolve_alert(*, alert_id, resolved_by: str) -> StockAlert:
    with transaction.atomic():
        alert = StockAlert.objects.select_for_update().get(pk=alert_id)
        if alert.is_resolved:
            return alert
        return _resolve(alert, resolved_by=resolved_by)


def get_active_alerts(*, branch_id: str | None = None, tenant_id: str | None = None):
    qs = StockAlert.objects.filter(is_resolved=False).select_related("raw_item")
    if tenant_id:
        qs = qs.filter(raw_item__tenant_id=tenant_id)
    if branch_id:
        qs = qs.filter(branch_id=branch_id)
    return qs.order_by("-created_at")
