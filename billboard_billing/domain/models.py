"""Domain models - pure Python dataclasses representing installment plans"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from billboard_billing.domain.exceptions import InvalidPolicyError
from billboard_billing.utils.date_utils import parse_date

# Built-in payment type labels; the vocabulary is open and callers may use their own
PAYMENT_TYPE_ON_SIGNING = "on signing"
PAYMENT_TYPE_MONTHLY = "monthly"
PAYMENT_TYPE_SINGLE = "single payment"


def interval_label(interval_months: int) -> str:
    """Payment type label for a recurrence interval"""
    if interval_months == 1:
        return PAYMENT_TYPE_MONTHLY
    return f"every {interval_months} months"


@dataclass
class Installment:
    """Single scheduled payment against a contract total"""

    amount: Decimal
    due_date: Optional[date] = None  # unset only while a manual entry is being edited
    description: str = ""
    payment_type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount": str(self.amount),
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "description": self.description,
            "payment_type": self.payment_type,
        }


class PaymentMode(str, Enum):
    SINGLE = "single"
    INTERVAL = "interval"
    MANUAL = "manual"


class FirstPaymentKind(str, Enum):
    AMOUNT = "amount"
    PERCENT = "percent"


@dataclass(frozen=True)
class FirstPaymentOverride:
    """First installment computed independently of the interval rule"""

    value: Decimal
    kind: FirstPaymentKind = FirstPaymentKind.AMOUNT


@dataclass(frozen=True)
class SinglePaymentPolicy:
    """Whole total in one installment at the contract start date"""

    payment_type: str = PAYMENT_TYPE_ON_SIGNING

    mode = PaymentMode.SINGLE


@dataclass(frozen=True)
class IntervalPolicy:
    """
    Recurring installments every `interval_months`.

    Sequence length comes from exactly one of `count` or `last_payment_date`;
    with neither, six months worth of payments are scheduled.
    """

    interval_months: int = 1
    count: Optional[int] = None
    last_payment_date: Optional[date] = None
    first_payment: Optional[FirstPaymentOverride] = None
    first_at_signing: bool = True

    mode = PaymentMode.INTERVAL

    def __post_init__(self) -> None:
        if isinstance(self.interval_months, bool) or not isinstance(self.interval_months, int):
            raise InvalidPolicyError("interval_months must be an integer")
        if self.interval_months < 1:
            raise InvalidPolicyError("interval_months must be positive")
        if self.count is not None and self.last_payment_date is not None:
            raise InvalidPolicyError("count and last_payment_date are mutually exclusive")

    @property
    def has_override_first_payment(self) -> bool:
        return self.first_payment is not None


@dataclass(frozen=True)
class ManualPolicy:
    """Caller enters every installment; interval only drives date auto-fill"""

    interval_months: int = 1

    mode = PaymentMode.MANUAL


DistributionPolicy = Union[SinglePaymentPolicy, IntervalPolicy, ManualPolicy]


@dataclass(frozen=True)
class TotalChanged:
    """Contract payable amount moved from `previous` to `current`"""

    previous: Decimal
    current: Decimal


@dataclass
class ValidationResult:
    """Manual entry comparison against the contract total"""

    balanced: bool
    difference: Decimal


class BalanceStatus(str, Enum):
    BALANCED = "balanced"
    SURPLUS = "surplus"
    DEFICIT = "deficit"


@dataclass
class BalanceReport:
    """Output of the reconciliation check that gates persistence"""

    total_installments: Decimal
    difference: Decimal
    is_balanced: bool
    status: BalanceStatus


@dataclass
class SaveCheck:
    is_valid: bool
    message: str
    report: BalanceReport


@dataclass
class RedistributionOutcome:
    installments: List[Installment]
    redistributed: bool
    reason: str


@dataclass
class PaymentGroup:
    """Run of consecutive installments sharing the same amount"""

    amount: Decimal
    count: int
    payment_type: str
    start_date: Optional[date]
    end_date: Optional[date]
    is_grouped: bool
    installments: List[Installment] = field(default_factory=list)


def policy_to_dict(policy: DistributionPolicy) -> Dict[str, Any]:
    """Serialize a policy so it can be stored next to its installments"""
    if isinstance(policy, SinglePaymentPolicy):
        return {"mode": PaymentMode.SINGLE.value, "payment_type": policy.payment_type}
    if isinstance(policy, ManualPolicy):
        return {"mode": PaymentMode.MANUAL.value, "interval_months": policy.interval_months}
    if isinstance(policy, IntervalPolicy):
        first = policy.first_payment
        return {
            "mode": PaymentMode.INTERVAL.value,
            "interval_months": policy.interval_months,
            "count": policy.count,
            "last_payment_date": policy.last_payment_date.isoformat() if policy.last_payment_date else None,
            "first_payment": (
                {"value": str(first.value), "kind": first.kind.value} if first is not None else None
            ),
            "first_at_signing": policy.first_at_signing,
        }
    raise InvalidPolicyError(f"Unsupported policy type: {type(policy).__name__}")


def _parse_kind(value: Any) -> FirstPaymentKind:
    try:
        return FirstPaymentKind(value or FirstPaymentKind.AMOUNT.value)
    except ValueError:
        raise InvalidPolicyError(f"Unknown first payment type: {value!r}")


def _legacy_first_payment(data: Dict[str, Any]) -> Optional[FirstPaymentOverride]:
    if not data.get("hasOverrideFirstPayment"):
        return None
    return FirstPaymentOverride(
        value=Decimal(str(data.get("firstPaymentAmount") or 0)),
        kind=_parse_kind(data.get("firstPaymentType")),
    )


def policy_from_dict(data: Dict[str, Any]) -> DistributionPolicy:
    """
    Rebuild a policy from its stored form.

    Accepts the output of `policy_to_dict` as well as the flat camelCase
    records kept by the contract editor (mode "multiple", hasOverrideFirstPayment, ...).
    """
    mode = data.get("mode")

    if mode == PaymentMode.SINGLE.value:
        return SinglePaymentPolicy(payment_type=data.get("payment_type") or PAYMENT_TYPE_ON_SIGNING)

    if mode == PaymentMode.MANUAL.value:
        return ManualPolicy(interval_months=int(data.get("interval_months", data.get("intervalMonths", 1))))

    if mode == PaymentMode.INTERVAL.value:
        first: Optional[FirstPaymentOverride] = None
        raw_first = data.get("first_payment")
        if raw_first:
            first = FirstPaymentOverride(
                value=Decimal(str(raw_first["value"])),
                kind=_parse_kind(raw_first.get("kind")),
            )
        return IntervalPolicy(
            interval_months=int(data.get("interval_months", 1)),
            count=data.get("count"),
            last_payment_date=parse_date(data.get("last_payment_date")),
            first_payment=first,
            first_at_signing=bool(data.get("first_at_signing", True)),
        )

    if mode == "multiple":
        return IntervalPolicy(
            interval_months=int(data.get("intervalMonths", 1)),
            count=data.get("count"),
            last_payment_date=parse_date(data.get("lastPaymentDate")),
            first_payment=_legacy_first_payment(data),
            first_at_signing=bool(data.get("firstAtSigning", True)),
        )

    raise InvalidPolicyError(f"Unknown distribution mode: {mode!r}")
