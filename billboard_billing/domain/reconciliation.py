"""Balance check that decides whether an installment set may be saved"""

from decimal import Decimal
from typing import Any, Sequence

from billboard_billing.domain.allocation import to_money
from billboard_billing.domain.manual import entries_total
from billboard_billing.domain.models import BalanceReport, BalanceStatus, SaveCheck

BALANCE_TOLERANCE = Decimal("1")


def reconcile(installments: Sequence[Any], total: Any, tolerance: Any = BALANCE_TOLERANCE) -> BalanceReport:
    """
    Compare the installment sum with the authoritative contract total.

    difference = total - sum(installments); negative means the installments
    overshoot (surplus), positive means they fall short (deficit).
    """
    total_installments = entries_total(installments)
    difference = to_money(total) - total_installments
    is_balanced = abs(difference) < to_money(tolerance)

    if is_balanced:
        status = BalanceStatus.BALANCED
    elif difference < 0:
        status = BalanceStatus.SURPLUS
    else:
        status = BalanceStatus.DEFICIT

    return BalanceReport(
        total_installments=total_installments,
        difference=difference,
        is_balanced=is_balanced,
        status=status,
    )


def check_save_eligibility(installments: Sequence[Any], total: Any, tolerance: Any = BALANCE_TOLERANCE) -> SaveCheck:
    """Save gate: at least one installment and a balanced sum"""
    report = reconcile(installments, total, tolerance)

    if len(installments) == 0:
        return SaveCheck(False, "At least one installment is required", report)

    if not report.is_balanced:
        return SaveCheck(
            False,
            f"Installments total {report.total_installments} does not match contract total {to_money(total)}",
            report,
        )

    return SaveCheck(True, "", report)
