"""Pydantic schemas for API request/response validation"""

from datetime import date
from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field, model_validator

from billboard_billing.config import settings
from billboard_billing.domain.models import (
    BalanceReport,
    FirstPaymentKind,
    FirstPaymentOverride,
    Installment,
    IntervalPolicy,
    ManualPolicy,
    SinglePaymentPolicy,
)

Money = Annotated[Decimal, Field(ge=0)]


class InstallmentSchema(BaseModel):
    """Single installment; accepts camelCase keys from the contract editor"""

    amount: Money = Decimal("0")
    due_date: Optional[date] = Field(default=None, validation_alias=AliasChoices("due_date", "dueDate"))
    description: str = ""
    payment_type: str = Field(default="", validation_alias=AliasChoices("payment_type", "paymentType"))

    def to_domain(self) -> Installment:
        return Installment(
            amount=self.amount,
            due_date=self.due_date,
            description=self.description,
            payment_type=self.payment_type,
        )

    @classmethod
    def from_domain(cls, inst: Installment) -> "InstallmentSchema":
        return cls(
            amount=inst.amount,
            due_date=inst.due_date,
            description=inst.description,
            payment_type=inst.payment_type,
        )


class FirstPaymentSchema(BaseModel):
    value: Money
    kind: FirstPaymentKind = FirstPaymentKind.AMOUNT


class SinglePolicySchema(BaseModel):
    mode: Literal["single"] = "single"
    payment_type: Optional[str] = None

    def to_domain(self) -> SinglePaymentPolicy:
        if self.payment_type:
            return SinglePaymentPolicy(payment_type=self.payment_type)
        return SinglePaymentPolicy()


class IntervalPolicySchema(BaseModel):
    mode: Literal["interval"] = "interval"
    interval_months: int = Field(default=1, ge=1)
    count: Optional[int] = Field(default=None, le=settings.max_installments)
    last_payment_date: Optional[date] = None
    first_payment: Optional[FirstPaymentSchema] = None
    first_at_signing: bool = True

    @model_validator(mode="after")
    def check_length_source(self) -> "IntervalPolicySchema":
        if self.count is not None and self.last_payment_date is not None:
            raise ValueError("count and last_payment_date are mutually exclusive")
        return self

    def to_domain(self) -> IntervalPolicy:
        first = None
        if self.first_payment is not None:
            first = FirstPaymentOverride(value=self.first_payment.value, kind=self.first_payment.kind)
        return IntervalPolicy(
            interval_months=self.interval_months,
            count=self.count,
            last_payment_date=self.last_payment_date,
            first_payment=first,
            first_at_signing=self.first_at_signing,
        )


class ManualPolicySchema(BaseModel):
    mode: Literal["manual"] = "manual"
    interval_months: int = Field(default=1, ge=1)

    def to_domain(self) -> ManualPolicy:
        return ManualPolicy(interval_months=self.interval_months)


PolicySchema = Annotated[
    Union[SinglePolicySchema, IntervalPolicySchema, ManualPolicySchema],
    Field(discriminator="mode"),
]


# Requests


class EvenDistributionRequest(BaseModel):
    """Request body for POST /v1/installments/even"""

    total: Money
    start_date: Optional[date] = None
    count: int = Field(..., le=settings.max_installments)


class DistributionRequest(BaseModel):
    """Request body for POST /v1/installments/interval"""

    total: Money
    start_date: Optional[date] = None
    policy: PolicySchema
    entries: List[InstallmentSchema] = Field(default_factory=list)


class ManualRequest(BaseModel):
    """Request body for POST /v1/installments/manual"""

    total: Money
    entries: List[InstallmentSchema]


class RenormalizeRequest(BaseModel):
    entries: List[InstallmentSchema]
    new_total: Money


class AutoFillDatesRequest(BaseModel):
    entries: List[InstallmentSchema]
    start_date: Optional[date] = None
    interval_months: int = Field(default=1, ge=1)


class RemovalRequest(BaseModel):
    installments: List[InstallmentSchema] = Field(..., min_length=1)
    removed_index: int = Field(..., ge=0)
    total: Money


class TotalChangedRequest(BaseModel):
    installments: List[InstallmentSchema]
    previous_total: Money
    current_total: Money
    start_date: Optional[date] = None
    policy: PolicySchema
    suppressed: bool = False


class ReconcileRequest(BaseModel):
    installments: List[InstallmentSchema]
    total: Money


class SummaryRequest(BaseModel):
    installments: List[InstallmentSchema]


class SavePlanRequest(BaseModel):
    """Request body for PUT /v1/contracts/{contract_id}/plan"""

    total: Money
    policy: PolicySchema
    installments: List[InstallmentSchema] = Field(..., min_length=1)


# Responses


class BalanceSchema(BaseModel):
    total_installments: Decimal
    difference: Decimal
    is_balanced: bool
    status: str

    @classmethod
    def from_domain(cls, report: BalanceReport) -> "BalanceSchema":
        return cls(
            total_installments=report.total_installments,
            difference=report.difference,
            is_balanced=report.is_balanced,
            status=report.status.value,
        )


class DistributionResponse(BaseModel):
    total: Decimal
    installments: List[InstallmentSchema]
    balance: BalanceSchema


class ValidationSchema(BaseModel):
    balanced: bool
    difference: Decimal


class ManualResponse(BaseModel):
    installments: List[InstallmentSchema]
    validation: ValidationSchema


class InstallmentsResponse(BaseModel):
    installments: List[InstallmentSchema]


class TotalChangedResponse(BaseModel):
    installments: List[InstallmentSchema]
    redistributed: bool
    reason: str
    balance: BalanceSchema


class PaymentGroupSchema(BaseModel):
    amount: Decimal
    count: int
    payment_type: str
    start_date: Optional[date]
    end_date: Optional[date]
    is_grouped: bool


class SummaryResponse(BaseModel):
    summary: Optional[str]
    groups: List[PaymentGroupSchema]


class PlanResponse(BaseModel):
    """Response for GET /v1/contracts/{contract_id}/plan"""

    plan_id: str
    contract_id: str
    total: Decimal
    mode: str
    policy: Dict[str, Any]
    installments: List[InstallmentSchema]
    balance: BalanceSchema
    updated_at: str
