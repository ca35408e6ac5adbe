"""Rounding/allocation primitive shared by every distribution mode"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, List, Sequence

from billboard_billing.domain.exceptions import InvalidAllocation

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_money(value: Any) -> Decimal:
    """
    Coerce a caller-supplied amount into a finite Decimal.

    Floats go through their shortest repr so 0.1 becomes Decimal("0.1")
    rather than its binary expansion.

    Raises:
        InvalidAllocation: bool, non-numeric, NaN or infinite input
    """
    if isinstance(value, bool):
        raise InvalidAllocation(f"Not a numeric amount: {value!r}")
    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        amount = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            amount = Decimal(value.strip())
        except InvalidOperation:
            raise InvalidAllocation(f"Not a numeric amount: {value!r}")
    else:
        raise InvalidAllocation(f"Not a numeric amount: {value!r}")

    if not amount.is_finite():
        raise InvalidAllocation(f"Amount must be finite, got {value!r}")
    return amount


def round2(value: Decimal) -> Decimal:
    """Round to cents, halves away from zero"""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    return max(low, min(high, value))


def allocate(total: Any, weights: Sequence[Any]) -> List[Decimal]:
    """
    Split `total` across weighted buckets so the parts sum to `total` exactly.

    Every bucket but the last gets round2(total * w / sum(w)); the last one
    receives whatever is left, absorbing all rounding drift.

    Args:
        total: Amount to split
        weights: One non-negative weight per bucket

    Returns:
        One amount per weight, in the same order

    Raises:
        InvalidAllocation: non-finite total, no buckets, negative weight,
            or all-zero weights across more than one bucket

    Example:
        allocate(100, [1, 1, 1]) -> [33.33, 33.33, 33.34]
    """
    total = to_money(total)
    if len(weights) == 0:
        raise InvalidAllocation("Cannot allocate across zero installments")

    parsed = [to_money(w) for w in weights]
    if any(w < 0 for w in parsed):
        raise InvalidAllocation("Allocation weights must be non-negative")

    if len(parsed) == 1:
        return [total]

    weight_sum = sum(parsed, ZERO)
    if weight_sum == 0:
        raise InvalidAllocation("Allocation weights must not all be zero")

    amounts = [round2(total * w / weight_sum) for w in parsed[:-1]]
    last = total - sum(amounts, ZERO)
    if last < 0 <= total:
        # Many half-cent buckets rounded up past the total; truncate instead
        amounts = [(total * w / weight_sum).quantize(CENT, rounding=ROUND_DOWN) for w in parsed[:-1]]
        last = total - sum(amounts, ZERO)
    amounts.append(last)
    return amounts
