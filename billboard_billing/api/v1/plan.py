"""/v1/contracts/{contract_id}/plan - Persist, fetch and discard contract payment plans"""

import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from billboard_billing.api.dependencies import get_request_id
from billboard_billing.api.v1.schemas import BalanceSchema, InstallmentSchema, PlanResponse, SavePlanRequest
from billboard_billing.config import settings
from billboard_billing.domain.exceptions import InvalidAllocation
from billboard_billing.domain.reconciliation import check_save_eligibility, reconcile
from billboard_billing.infrastructure.database.models import ContractPaymentPlan
from billboard_billing.infrastructure.database.repositories import PlanRepository, from_cents, installments_from_plan
from billboard_billing.infrastructure.database.session import get_db
from billboard_billing.infrastructure.observability.logging import log_plan_saved
from billboard_billing.infrastructure.observability.metrics import unbalanced_save_counter

router = APIRouter()


def _plan_response(plan: ContractPaymentPlan) -> PlanResponse:
    installments = installments_from_plan(plan)
    total = from_cents(plan.total_cents)
    return PlanResponse(
        plan_id=str(plan.id),
        contract_id=plan.contract_id,
        total=total,
        mode=plan.mode,
        policy=plan.policy,
        installments=[InstallmentSchema.from_domain(inst) for inst in installments],
        balance=BalanceSchema.from_domain(reconcile(installments, total, settings.balance_tolerance)),
        updated_at=plan.updated_at.isoformat(),
    )


@router.put("/contracts/{contract_id}/plan", response_model=PlanResponse)
def save_plan(
    contract_id: str,
    body: SavePlanRequest,
    db: Session = Depends(get_db),
    request_id: str = Depends(get_request_id),
):
    """
    Store a contract's distribution policy and installments.

    Flow:
    1. Reconcile installments against the contract total
    2. Reject with 409 when unbalanced (nothing is written)
    3. Replace any previously stored plan for the contract
    """
    installments = [e.to_domain() for e in body.installments]
    check = check_save_eligibility(installments, body.total, settings.balance_tolerance)

    if not check.is_valid:
        unbalanced_save_counter.inc()
        logging.warning(
            f"Rejected unbalanced plan: {check.message}",
            extra={"request_id": request_id, "contract_id": contract_id},
        )
        raise HTTPException(
            status_code=409,
            detail={
                "message": check.message,
                "difference": str(check.report.difference),
                "total_installments": str(check.report.total_installments),
            },
        )

    try:
        plan = PlanRepository(db).save_plan(
            contract_id=contract_id,
            total=body.total,
            policy=body.policy.to_domain(),
            installments=installments,
        )
        db.commit()
    except InvalidAllocation as e:
        db.rollback()
        raise HTTPException(status_code=422, detail=str(e))
    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    log_plan_saved(request_id, contract_id, str(body.total), len(installments))
    return _plan_response(plan)


@router.get("/contracts/{contract_id}/plan", response_model=PlanResponse)
def get_plan(contract_id: str, db: Session = Depends(get_db)):
    """
    Retrieve a contract's stored policy and installment schedule.

    Callers editing the plan should suppress automatic redistribution for the
    first total they observe after loading it.
    """
    plan = PlanRepository(db).get_plan_by_contract(contract_id)
    if not plan:
        raise HTTPException(status_code=404, detail="Plan not found")
    return _plan_response(plan)


@router.delete("/contracts/{contract_id}/plan", status_code=204)
def delete_plan(contract_id: str, db: Session = Depends(get_db)):
    """Discard a contract's plan, e.g. when the contract itself is deleted"""
    if not PlanRepository(db).delete_plan(contract_id):
        raise HTTPException(status_code=404, detail="Plan not found")
    db.commit()
