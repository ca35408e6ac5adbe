"""Installment schedule generation for contract payment terms"""

from datetime import date
from decimal import Decimal
from typing import Any, Iterable, List, Optional

from billboard_billing.domain.allocation import ZERO, allocate, clamp, round2, to_money
from billboard_billing.domain.exceptions import InvalidAllocation, InvalidPolicyError
from billboard_billing.domain.manual import auto_fill_dates, build_manual
from billboard_billing.domain.models import (
    PAYMENT_TYPE_ON_SIGNING,
    DistributionPolicy,
    FirstPaymentKind,
    FirstPaymentOverride,
    Installment,
    IntervalPolicy,
    ManualPolicy,
    SinglePaymentPolicy,
    interval_label,
)
from billboard_billing.utils.date_utils import DateLike, add_months, parse_date

# Schedule length when neither a count nor a last payment date is given
DEFAULT_SCHEDULE_MONTHS = 6

HUNDRED = Decimal("100")

# Upper bound on the equal-split tail of one schedule
MAX_INSTALLMENTS = 24


def _require_total(total: Any) -> Decimal:
    total = to_money(total)
    if total < 0:
        raise InvalidAllocation("Contract total must not be negative")
    return total


def first_payment_amount(total: Decimal, override: FirstPaymentOverride) -> Decimal:
    """Resolve a first-payment override against the total, clamped to [0, total]"""
    value = to_money(override.value)
    if override.kind == FirstPaymentKind.PERCENT:
        return round2(total * clamp(value, ZERO, HUNDRED) / HUNDRED)
    return clamp(value, ZERO, total)


def count_until(
    first_due: date,
    last_payment_date: date,
    interval_months: int,
    limit: Optional[int] = None,
) -> int:
    """
    Number of interval-spaced due dates from `first_due` up to and including
    `last_payment_date`. Never less than one.

    Counting stops once it passes `limit`, so callers can detect an
    oversized schedule without walking it to the end.
    """
    count = 0
    while add_months(first_due, count * interval_months) <= last_payment_date:
        count += 1
        if limit is not None and count > limit:
            break
    return max(1, count)


def _tail_count(policy: IntervalPolicy, first_due: date, tail_offset: int, max_installments: int) -> int:
    if policy.count is not None:
        tail_count = policy.count
    elif policy.last_payment_date is not None:
        tail_count = (
            count_until(first_due, policy.last_payment_date, policy.interval_months, max_installments + tail_offset)
            - tail_offset
        )
    else:
        tail_count = max(1, DEFAULT_SCHEDULE_MONTHS // policy.interval_months)

    if tail_count > max_installments:
        raise InvalidPolicyError(f"Schedule needs more than {max_installments} installments")
    return tail_count


def single_installment(total: Any, start_date: DateLike, payment_type: str = PAYMENT_TYPE_ON_SIGNING) -> List[Installment]:
    """Whole total as one installment at the start date"""
    start = parse_date(start_date)
    if start is None:
        return []
    return [
        Installment(
            amount=_require_total(total),
            due_date=start,
            description="Single payment",
            payment_type=payment_type,
        )
    ]


def distribute_with_interval(
    total: Any,
    start_date: DateLike,
    policy: IntervalPolicy,
    max_installments: int = MAX_INSTALLMENTS,
) -> List[Installment]:
    """
    Build an installment schedule from an interval policy.

    Rules:
    - Optional first payment override (fixed amount or percent of total),
      dated at signing or one interval after the start date
    - Remaining amount split equally across the tail installments, the last
      one absorbing rounding drift
    - Tail dates spaced `interval_months` calendar months apart (month ends clamp)
    - Tail length from `count`, from `last_payment_date`, or six months by default

    Args:
        total: Contract payable amount
        start_date: Contract start date; when missing nothing is scheduled
        policy: Interval policy
        max_installments: Largest tail allowed

    Returns:
        Installments in due date order, summing exactly to `total`

    Raises:
        InvalidPolicyError: tail longer than `max_installments`
        InvalidAllocation: negative total or dates past the calendar range

    Example:
        12000, 20% first payment, 5 monthly installments
        -> [2400, 1920, 1920, 1920, 1920, 1920]
    """
    start = parse_date(start_date)
    if start is None:
        return []

    total = _require_total(total)
    step = policy.interval_months
    first_due = start if policy.first_at_signing else add_months(start, step)
    label = interval_label(step)

    installments: List[Installment] = []
    remaining = total

    if policy.first_payment is not None:
        first_amount = first_payment_amount(total, policy.first_payment)
        remaining = total - first_amount
        installments.append(
            Installment(
                amount=first_amount,
                due_date=first_due,
                description="First payment",
                payment_type=PAYMENT_TYPE_ON_SIGNING if policy.first_at_signing else label,
            )
        )

    # Tail dates count from first_due so month-end anchors survive short months
    tail_offset = len(installments)
    tail_count = _tail_count(policy, first_due, tail_offset, max_installments)
    if tail_count < 1:
        if not installments:
            return single_installment(total, start)
        # Override kept; the rest collapses into one installment
        tail_count = 1

    numbering_offset = len(installments) + 1
    for i, amount in enumerate(allocate(remaining, [1] * tail_count)):
        number = i + numbering_offset
        is_signing = not installments and i == 0 and policy.first_at_signing
        installments.append(
            Installment(
                amount=amount,
                due_date=add_months(first_due, (tail_offset + i) * step),
                description="First payment" if number == 1 else f"Payment {number}",
                payment_type=PAYMENT_TYPE_ON_SIGNING if is_signing else label,
            )
        )

    return installments


def distribute_evenly(
    total: Any,
    start_date: DateLike,
    count: int,
    max_installments: int = MAX_INSTALLMENTS,
) -> List[Installment]:
    """
    Split `total` into `count` equal monthly installments starting at `start_date`.

    Example:
        1000 over 3 -> [333.33, 333.33, 333.34] on Jan 1, Feb 1, Mar 1
    """
    return distribute_with_interval(
        total, start_date, IntervalPolicy(interval_months=1, count=count), max_installments
    )


def distribute(
    total: Any,
    start_date: DateLike,
    policy: DistributionPolicy,
    entries: Optional[Iterable[Any]] = None,
    max_installments: int = MAX_INSTALLMENTS,
) -> List[Installment]:
    """Run whichever distribution the policy variant calls for"""
    if isinstance(policy, SinglePaymentPolicy):
        return single_installment(total, start_date, policy.payment_type)

    if isinstance(policy, IntervalPolicy):
        return distribute_with_interval(total, start_date, policy, max_installments)

    if isinstance(policy, ManualPolicy):
        installments = build_manual(entries or [])
        start = parse_date(start_date)
        if start is None:
            return installments
        return auto_fill_dates(installments, start, policy.interval_months)

    raise InvalidPolicyError(f"Unsupported policy type: {type(policy).__name__}")
