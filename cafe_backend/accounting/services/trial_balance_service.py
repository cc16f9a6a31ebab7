# accounting/services/trial_balance_service.py

from __future__ import annotations

from decimal import Decimal

from django.utils import timezone

from accounting.services.balance_service import (
    _q2,
    money_fields,
    parse_date,
    posted_totals_by_account,
    to_major_number,
    to_minor_int,
)


class TrialBalanceService:
    """
    Trial Balance computation service.

    Guarantees:
    - Scopes to one tenant (optionally one branch)
    - Uses POSTED journal entries only, entry_date as the timeline
    - Avoids N+1 queries by aggregating in bulk (one grouped query)
    - Returns JSON-safe numeric values (no Decimals)

    Per account: Σdebit, Σcredit and the signed balance (per account type).
    totals.balanced is the primary self-check of the ledger: it can only be
    false if an unbalanced entry slipped past the journal engine.
    """

    def generate(self, *, tenant_id: str, as_of=None, branch_id: str | None = None) -> dict:
        cutoff = parse_date(as_of, field="as_of") or timezone.localdate()

        totals = posted_totals_by_account(
            tenant_id=tenant_id,
            end_date=cutoff,
            branch_id=branch_id,
        )

        accounts_output = []
        total_debit = Decimal("0.00")
        total_credit = Decimal("0.00")

        for acc in totals:
            if acc.debit == 0 and acc.credit == 0:
                continue

            accounts_output.append(
                {
                    "account_id": acc.account_id,
                    "account_number": acc.account_number,
                    "account_name": acc.name,
                    "account_type": acc.account_type,
                    **money_fields("debit", acc.debit),
                    **money_fields("credit", acc.credit),
                    **money_fields("balance", acc.balance),
                }
            )

            total_debit += acc.debit
            total_credit += acc.credit

        total_debit = _q2(total_debit)
        total_credit = _q2(total_credit)

        return {
            "tenant_id": tenant_id,
            "branch_id": branch_id or None,
            "as_of": cutoff.isoformat(),
            "accounts": accounts_output,
            "totals": {
                "debit": to_major_number(total_debit),
                "credit": to_major_number(total_credit),
                "debit_minor": to_minor_int(total_debit),
                "credit_minor": to_minor_int(total_credit),
                "balanced": to_minor_int(total_debit) == to_minor_int(total_credit),
            },
        }


def generate_trial_balance(*, tenant_id: str, as_of=None, branch_id: str | None = None) -> dict:
    return TrialBalanceService().generate(tenant_id=tenant_id, as_of=as_of, branch_id=branch_id)
