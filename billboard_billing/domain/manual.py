"""Unequal (manual) installment entry: validation, rescaling and date filling"""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, List, Mapping, Optional, Union

from billboard_billing.domain.allocation import ZERO, allocate, round2, to_money
from billboard_billing.domain.exceptions import InvalidAllocation
from billboard_billing.domain.models import (
    PAYMENT_TYPE_MONTHLY,
    PAYMENT_TYPE_ON_SIGNING,
    Installment,
    ValidationResult,
)
from billboard_billing.utils.date_utils import DateLike, add_months, parse_date

MANUAL_TOLERANCE = Decimal("0.01")


def _field(entry: Mapping[str, Any], name: str, alias: str, default: Any = None) -> Any:
    if name in entry:
        return entry[name]
    return entry.get(alias, default)


def to_installment(entry: Union[Installment, Mapping[str, Any]]) -> Installment:
    """Coerce a caller entry (Installment or snake_case/camelCase mapping) into an Installment"""
    if isinstance(entry, Installment):
        amount = to_money(entry.amount)
        due_date = parse_date(entry.due_date)
        description = entry.description
        payment_type = entry.payment_type
    else:
        amount = to_money(entry.get("amount") or 0)
        due_date = parse_date(_field(entry, "due_date", "dueDate"))
        description = _field(entry, "description", "description", "") or ""
        payment_type = _field(entry, "payment_type", "paymentType", "") or ""

    if amount < 0:
        raise InvalidAllocation(f"Installment amount must not be negative, got {amount}")

    return Installment(amount=amount, due_date=due_date, description=description, payment_type=payment_type)


def _total_of(installments: Iterable[Installment]) -> Decimal:
    return sum((inst.amount for inst in installments), ZERO)


def validate(entries: Iterable[Any], total: Any, tolerance: Any = MANUAL_TOLERANCE) -> ValidationResult:
    """Compare manual entries with the total; difference = total - sum(entries)"""
    installments = [to_installment(e) for e in entries]
    difference = to_money(total) - _total_of(installments)
    return ValidationResult(balanced=abs(difference) < to_money(tolerance), difference=difference)


def build_manual(
    entries: Iterable[Any],
    total: Optional[Any] = None,
) -> Union[List[Installment], ValidationResult]:
    """
    Accept caller-supplied installments as entered.

    No amounts are computed. When `total` is given and the entries do not add
    up to it, the ValidationResult is returned instead of the installments so
    the caller can show the difference; nothing is raised.
    """
    installments = [to_installment(e) for e in entries]
    if total is not None:
        result = validate(installments, total)
        if not result.balanced:
            return result
    return installments


def renormalize(entries: Iterable[Any], new_total: Any) -> List[Installment]:
    """
    Rescale entries to `new_total` keeping their ratios.

    The last entry absorbs rounding drift. All-zero entries are returned
    unchanged since there is no ratio to keep.
    """
    installments = [to_installment(e) for e in entries]
    if not installments or _total_of(installments) == 0:
        return installments

    amounts = allocate(new_total, [inst.amount for inst in installments])
    return [replace(inst, amount=amount) for inst, amount in zip(installments, amounts)]


def auto_fill_dates(entries: Iterable[Any], start_date: DateLike, interval_months: int = 1) -> List[Installment]:
    """Date entry i at start + i * interval months, only where no date is set"""
    start = parse_date(start_date)
    installments = [to_installment(e) for e in entries]
    if start is None:
        return installments

    return [
        inst if inst.due_date is not None else replace(inst, due_date=add_months(start, i * interval_months))
        for i, inst in enumerate(installments)
    ]


def create_blank_entries(count: int, start_date: DateLike = None, interval_months: int = 1) -> List[Installment]:
    """Zero-amount placeholders for the user to fill in, dated when a start date is known"""
    entries = [
        Installment(
            amount=ZERO,
            description="First payment" if i == 0 else f"Payment {i + 1}",
            payment_type=PAYMENT_TYPE_ON_SIGNING if i == 0 else PAYMENT_TYPE_MONTHLY,
        )
        for i in range(max(1, count))
    ]
    return auto_fill_dates(entries, start_date, interval_months)


def fill_remaining(entries: Iterable[Any], total: Any) -> List[Installment]:
    """Push the outstanding difference onto the last entry (never below zero)"""
    installments = [to_installment(e) for e in entries]
    if not installments:
        return installments

    difference = to_money(total) - _total_of(installments)
    last = installments[-1]
    installments[-1] = replace(last, amount=max(ZERO, last.amount + round2(difference)))
    return installments


def spread_evenly(entries: Iterable[Any], total: Any, start_date: DateLike = None) -> List[Installment]:
    """Equal split of `total` over the existing entries, keeping their labels"""
    installments = [to_installment(e) for e in entries]
    if not installments:
        return installments

    amounts = allocate(total, [1] * len(installments))
    installments = [replace(inst, amount=amount) for inst, amount in zip(installments, amounts)]
    return auto_fill_dates(installments, start_date)


def entries_total(entries: Iterable[Any]) -> Decimal:
    return _total_of(to_installment(e) for e in entries)


def latest_due_date(entries: Iterable[Any]) -> Optional[date]:
    dates = [inst.due_date for inst in (to_installment(e) for e in entries) if inst.due_date]
    return max(dates) if dates else None
