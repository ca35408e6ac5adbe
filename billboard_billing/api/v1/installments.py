"""POST /v1/installments/* - Installment distribution endpoints"""

import time
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from billboard_billing.api.dependencies import get_request_id
from billboard_billing.api.v1.schemas import (
    AutoFillDatesRequest,
    BalanceSchema,
    DistributionRequest,
    DistributionResponse,
    EvenDistributionRequest,
    InstallmentSchema,
    InstallmentsResponse,
    ManualRequest,
    ManualResponse,
    PaymentGroupSchema,
    ReconcileRequest,
    RemovalRequest,
    RenormalizeRequest,
    SummaryRequest,
    SummaryResponse,
    TotalChangedRequest,
    TotalChangedResponse,
    ValidationSchema,
)
from billboard_billing.config import settings
from billboard_billing.domain.exceptions import InvalidAllocation
from billboard_billing.domain.installments import distribute, distribute_evenly
from billboard_billing.domain.manual import auto_fill_dates, build_manual, renormalize, validate
from billboard_billing.domain.models import Installment, TotalChanged
from billboard_billing.domain.reconciliation import reconcile
from billboard_billing.domain.redistribution import handle_total_changed, redistribute_after_removal
from billboard_billing.domain.summary import group_repeating_payments, summarize_installments
from billboard_billing.infrastructure.observability.logging import log_distribution
from billboard_billing.infrastructure.observability.metrics import record_distribution, redistribution_counter

router = APIRouter()


def _schemas(installments: List[Installment]) -> List[InstallmentSchema]:
    return [InstallmentSchema.from_domain(inst) for inst in installments]


def _balance(installments: List[Installment], total) -> BalanceSchema:
    return BalanceSchema.from_domain(reconcile(installments, total, settings.balance_tolerance))


def _invalid(exc: InvalidAllocation) -> HTTPException:
    return HTTPException(status_code=422, detail=str(exc))


@router.post("/installments/even", response_model=DistributionResponse)
def create_even_distribution(body: EvenDistributionRequest, request_id: str = Depends(get_request_id)):
    """
    Split the total into `count` equal monthly installments.

    Returns:
        Installments plus the balance check result
    """
    start_time = time.time()
    try:
        installments = distribute_evenly(body.total, body.start_date, body.count, settings.max_installments)
    except InvalidAllocation as e:
        raise _invalid(e)

    record_distribution("even", len(installments))
    log_distribution(
        request_id, "even", "interval", str(body.total), len(installments), (time.time() - start_time) * 1000
    )
    return DistributionResponse(
        total=body.total,
        installments=_schemas(installments),
        balance=_balance(installments, body.total),
    )


@router.post("/installments/interval", response_model=DistributionResponse)
def create_distribution(body: DistributionRequest, request_id: str = Depends(get_request_id)):
    """
    Distribute the total according to a single, interval or manual policy.

    An interval policy may carry a first payment override and either a
    count or a last payment date. Without a start date nothing is scheduled.
    """
    start_time = time.time()
    try:
        policy = body.policy.to_domain()
        installments = distribute(
            body.total,
            body.start_date,
            policy,
            entries=[e.to_domain() for e in body.entries],
            max_installments=settings.max_installments,
        )
    except InvalidAllocation as e:
        raise _invalid(e)

    record_distribution(policy.mode.value, len(installments))
    log_distribution(
        request_id,
        "distribute",
        policy.mode.value,
        str(body.total),
        len(installments),
        (time.time() - start_time) * 1000,
    )
    return DistributionResponse(
        total=body.total,
        installments=_schemas(installments),
        balance=_balance(installments, body.total),
    )


@router.post("/installments/manual", response_model=ManualResponse)
def check_manual_distribution(body: ManualRequest):
    """Accept hand-entered installments and report whether they match the total"""
    try:
        installments = build_manual([e.to_domain() for e in body.entries])
        result = validate(installments, body.total, settings.manual_tolerance)
    except InvalidAllocation as e:
        raise _invalid(e)

    record_distribution("manual", len(installments))
    return ManualResponse(
        installments=_schemas(installments),
        validation=ValidationSchema(balanced=result.balanced, difference=result.difference),
    )


@router.post("/installments/manual/renormalize", response_model=DistributionResponse)
def renormalize_manual_distribution(body: RenormalizeRequest):
    """Rescale hand-entered installments to a new total keeping their ratios"""
    try:
        installments = renormalize([e.to_domain() for e in body.entries], body.new_total)
    except InvalidAllocation as e:
        raise _invalid(e)

    return DistributionResponse(
        total=body.new_total,
        installments=_schemas(installments),
        balance=_balance(installments, body.new_total),
    )


@router.post("/installments/manual/dates", response_model=InstallmentsResponse)
def fill_manual_dates(body: AutoFillDatesRequest):
    """Date undated entries at start + i * interval months"""
    try:
        installments = auto_fill_dates(
            [e.to_domain() for e in body.entries], body.start_date, body.interval_months
        )
    except InvalidAllocation as e:
        raise _invalid(e)

    return InstallmentsResponse(installments=_schemas(installments))


@router.post("/installments/redistribute/removal", response_model=DistributionResponse)
def redistribute_removal(body: RemovalRequest):
    """Remove one installment and spread its share over the remaining ones"""
    try:
        installments = redistribute_after_removal(
            [e.to_domain() for e in body.installments], body.removed_index, body.total
        )
    except InvalidAllocation as e:
        raise _invalid(e)

    redistribution_counter.labels(trigger="removal").inc()
    return DistributionResponse(
        total=body.total,
        installments=_schemas(installments),
        balance=_balance(installments, body.total),
    )


@router.post("/installments/redistribute/total", response_model=TotalChangedResponse)
def redistribute_total(body: TotalChangedRequest):
    """
    Recompute installments after the contract total changed.

    Callers that just loaded a stored plan pass `suppressed=true` so a
    hand-entered split is returned untouched.
    """
    event = TotalChanged(previous=body.previous_total, current=body.current_total)
    try:
        outcome = handle_total_changed(
            event,
            [e.to_domain() for e in body.installments],
            body.start_date,
            body.policy.to_domain(),
            suppressed=body.suppressed,
            threshold=settings.redistribution_threshold,
            max_installments=settings.max_installments,
        )
    except InvalidAllocation as e:
        raise _invalid(e)

    if outcome.redistributed:
        redistribution_counter.labels(trigger="total_changed").inc()

    return TotalChangedResponse(
        installments=_schemas(outcome.installments),
        redistributed=outcome.redistributed,
        reason=outcome.reason,
        balance=_balance(outcome.installments, body.current_total),
    )


@router.post("/installments/reconcile", response_model=BalanceSchema)
def reconcile_installments(body: ReconcileRequest):
    """Balance check consulted before a plan may be saved"""
    return _balance([e.to_domain() for e in body.installments], body.total)


@router.post("/installments/summary", response_model=SummaryResponse)
def summarize(body: SummaryRequest):
    """Text summary and repeated-payment groups for contract documents"""
    installments = [e.to_domain() for e in body.installments]
    groups = [
        PaymentGroupSchema(
            amount=g.amount,
            count=g.count,
            payment_type=g.payment_type,
            start_date=g.start_date,
            end_date=g.end_date,
            is_grouped=g.is_grouped,
        )
        for g in group_repeating_payments(installments)
    ]
    return SummaryResponse(summary=summarize_installments(installments), groups=groups)
