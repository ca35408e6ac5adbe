"""Keeping an installment set consistent when the total or the set itself changes"""

import logging
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Any, List, Optional, Sequence

from billboard_billing.domain.allocation import ZERO, allocate, to_money
from billboard_billing.domain.exceptions import InvalidAllocation
from billboard_billing.domain.installments import MAX_INSTALLMENTS, distribute
from billboard_billing.domain.manual import entries_total, latest_due_date, renormalize, to_installment
from billboard_billing.domain.models import (
    PAYMENT_TYPE_MONTHLY,
    DistributionPolicy,
    Installment,
    ManualPolicy,
    RedistributionOutcome,
    TotalChanged,
)
from billboard_billing.utils.date_utils import DateLike, add_months, parse_date

logger = logging.getLogger(__name__)

# Total changes at or below this size are float jitter, not a real edit
REDISTRIBUTION_THRESHOLD = Decimal("1")


def redistribute_after_removal(installments: Sequence[Any], removed_index: int, total: Any) -> List[Installment]:
    """
    Drop one installment and spread its share over the survivors.

    Each survivor keeps its amount plus an even part of
    total - sum(survivors) (the removed amount, for a balanced set), so the
    survivors still add up to the original total. The last survivor absorbs
    rounding drift.

    Raises:
        InvalidAllocation: bad index, or survivors already above the total

    Example:
        [300, 300, 400], remove index 0, total 1000 -> [450, 550]
    """
    current = [to_installment(inst) for inst in installments]
    if not 0 <= removed_index < len(current):
        raise InvalidAllocation(f"No installment at index {removed_index}")

    survivors = current[:removed_index] + current[removed_index + 1 :]
    if not survivors:
        return []

    outstanding = to_money(total) - entries_total(survivors)
    if outstanding < 0:
        raise InvalidAllocation(
            f"Remaining installments exceed the contract total by {-outstanding}; reduce them before removing"
        )

    shares = allocate(outstanding, [1] * len(survivors))
    return [replace(inst, amount=inst.amount + share) for inst, share in zip(survivors, shares)]


def handle_total_changed(
    event: TotalChanged,
    installments: Sequence[Any],
    start_date: DateLike,
    policy: DistributionPolicy,
    suppressed: bool = False,
    threshold: Any = REDISTRIBUTION_THRESHOLD,
    max_installments: int = MAX_INSTALLMENTS,
) -> RedistributionOutcome:
    """
    Re-run the distribution for a new contract total.

    Skipped (installments returned unchanged) when redistribution is
    suppressed, the set is empty, no start date is known, or the change is
    within `threshold`. Manual splits are rescaled by their existing ratios
    instead of being replaced by an equal split.
    """
    current = [to_installment(inst) for inst in installments]
    start = parse_date(start_date)

    if suppressed:
        return RedistributionOutcome(current, False, "suppressed")
    if not current:
        return RedistributionOutcome(current, False, "no installments")
    if start is None:
        return RedistributionOutcome(current, False, "no start date")

    delta = abs(to_money(event.current) - to_money(event.previous))
    if delta <= to_money(threshold):
        return RedistributionOutcome(current, False, "below threshold")

    if isinstance(policy, ManualPolicy):
        updated = renormalize(current, event.current)
    else:
        updated = distribute(event.current, start, policy, max_installments=max_installments)

    logger.info(
        "Installments redistributed after total change",
        extra={
            "previous_total": str(event.previous),
            "current_total": str(event.current),
            "mode": policy.mode.value,
            "installment_count": len(updated),
        },
    )
    return RedistributionOutcome(updated, True, "total changed")


@dataclass
class TotalWatcher:
    """
    Caller-owned tracker turning observed totals into TotalChanged events.

    Emits at most one event per real change. Call `suppress_next()` right
    after loading installments from storage so the stored split is not
    overwritten by the first observation.
    """

    previous_total: Decimal
    suppressed: bool = False
    threshold: Decimal = REDISTRIBUTION_THRESHOLD

    def suppress_next(self) -> None:
        self.suppressed = True

    def observe(self, current_total: Any) -> Optional[TotalChanged]:
        current = to_money(current_total)
        previous = to_money(self.previous_total)
        self.previous_total = current

        if self.suppressed:
            self.suppressed = False
            return None
        if abs(current - previous) <= self.threshold:
            return None
        return TotalChanged(previous=previous, current=current)


def add_installment(
    installments: Sequence[Any],
    total: Any,
    start_date: DateLike = None,
    interval_months: int = 1,
) -> List[Installment]:
    """Append an installment carrying whatever the set still lacks (never negative)"""
    current = [to_installment(inst) for inst in installments]
    outstanding = to_money(total) - entries_total(current)

    last_date = latest_due_date(current)
    start = parse_date(start_date)
    if last_date is not None:
        due_date = add_months(last_date, interval_months)
    elif start is not None:
        due_date = add_months(start, len(current) * interval_months)
    else:
        due_date = None

    current.append(
        Installment(
            amount=max(ZERO, outstanding),
            due_date=due_date,
            description=f"Payment {len(current) + 1}",
            payment_type=PAYMENT_TYPE_MONTHLY,
        )
    )
    return current
