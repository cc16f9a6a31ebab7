# costing/services/order_completion.py

"""
======================================================
PATH: costing/services/order_completion.py
======================================================
ORDER COMPLETION ORCHESTRATOR

Order lifecycle hook: cost the order, then hand the result to the ledger.

    cost_order()                    -> stock deducted once, COGS computed
    post_order_cogs_to_ledger()     -> Dr COGS / Cr Inventory ('order_cogs', order_id)
    post_order_sale_to_ledger()     -> optional, when the sale total is known

Everything runs in ONE transaction: if posting fails (e.g. the tenant has
no chart of accounts) the deductions roll back too and the error propagates,
so order completion is never reported as succeeded when it did not.
Retries are safe at every step (costing replay + post_if_absent).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from django.conf import settings
from django.db import transaction

from costing.exceptions import CostingError
from costing.services.costing_engine import cost_order
from costing.types import CostingReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderCompletion:
    report: CostingReport
    cogs_entry_id: int | None = None
    sale_entry_id: int | None = None

    def to_dict(self) -> dict:
        return {
            **self.report.to_dict(),
            "cogs_journal_entry_id": self.cogs_entry_id,
            "sale_journal_entry_id": self.sale_entry_id,
        }


def posting_enabled() -> bool:
    return bool(getattr(settings, "ACCOUNTING_POSTING_ENABLED", False))


def complete_order_costing(
    *,
    tenant_id: str,
    order_id,
    branch_id,
    line_items,
    actor: str = "",
    total_amount=None,
    vat_amount=None,
    payment_method: str = "cash",
) -> OrderCompletion:
    if not str(tenant_id or "").strip():
        raise CostingError("tenant_id is required")

    # Imported lazily: accounting is optional for pure costing callers.
    from accounting.services.posting import (
        post_order_cogs_to_ledger,
        post_order_sale_to_ledger,
    )

    with transaction.atomic():
        report = cost_order(
            order_id=order_id,
            branch_id=branch_id,
            line_items=line_items,
            actor=actor,
            tenant_id=tenant_id,
        )

        if not posting_enabled():
            return OrderCompletion(report=report)

        cogs_entry = post_order_cogs_to_ledger(
            tenant_id=tenant_id,
            order_id=report.order_id,
            branch_id=report.branch_id,
            amount=report.cost_of_goods,
            posted_by=actor,
        )

        sale_entry = None
        if total_amount is not None:
            sale_entry = post_order_sale_to_ledger(
                tenant_id=tenant_id,
                order_id=report.order_id,
                branch_id=report.branch_id,
                total_amount=total_amount,
                vat_amount=vat_amount,
                payment_method=payment_method,
                posted_by=actor,
            )

    logger.info(
        "Order completion posted",
        extra={
            "order_id": report.order_id,
            "cogs_entry_id": getattr(cogs_entry, "pk", None),
            "sale_entry_id": getattr(sale_entry, "pk", None),
        },
    )
    return OrderCompletion(
        report=report,
        cogs_entry_id=getattr(cogs_entry, "pk", None),
        sale_entry_id=getattr(sale_entry, "pk", None),
    )
