"""Human-readable schedule summaries and grouping of repeated payments"""

from decimal import Decimal
from typing import Any, List, Optional, Sequence

from billboard_billing.domain.manual import to_installment
from billboard_billing.domain.models import PaymentGroup

SAME_AMOUNT_TOLERANCE = Decimal("0.01")
RECURRING_TOLERANCE = Decimal("1")


def _date(value) -> str:
    return value.isoformat() if value else "unscheduled"


def summarize_installments(installments: Sequence[Any]) -> Optional[str]:
    """
    One-paragraph description of a schedule for contract documents.

    When every installment after the first shares amount and payment type the
    tail is described as a single recurring run.
    """
    entries = [to_installment(inst) for inst in installments]
    if not entries:
        return None

    first = entries[0]
    if len(entries) == 1:
        return f"Single payment: {first.amount} on {_date(first.due_date)}"

    recurring = entries[1:]
    head = recurring[0]
    same_amount = all(abs(r.amount - head.amount) < RECURRING_TOLERANCE for r in recurring)
    same_type = all(r.payment_type == head.payment_type for r in recurring)

    if same_amount and same_type:
        summary = f"First payment: {first.amount} on {_date(first.due_date)}"
        if len(recurring) == 1:
            return summary + f"\nSecond payment: {head.amount} on {_date(head.due_date)}"
        summary += f"\nThen {head.payment_type} payments of {head.amount}"
        summary += f"\nFrom {_date(head.due_date)} to {_date(recurring[-1].due_date)} ({len(recurring)} payments)"
        return summary

    return (
        f"{len(entries)} payments: first {first.amount} on {_date(first.due_date)}, "
        f"last on {_date(entries[-1].due_date)}"
    )


def group_repeating_payments(installments: Sequence[Any]) -> List[PaymentGroup]:
    """Collapse runs of consecutive equal installments (2 or more) into one group each"""
    entries = [to_installment(inst) for inst in installments]
    groups: List[PaymentGroup] = []

    i = 0
    while i < len(entries):
        current = entries[i]
        count = 1
        while i + count < len(entries) and abs(entries[i + count].amount - current.amount) < SAME_AMOUNT_TOLERANCE:
            count += 1

        run = entries[i : i + count]
        groups.append(
            PaymentGroup(
                amount=current.amount,
                count=count,
                payment_type=current.payment_type,
                start_date=current.due_date,
                end_date=run[-1].due_date,
                is_grouped=count >= 2,
                installments=run,
            )
        )
        i += count

    return groups
