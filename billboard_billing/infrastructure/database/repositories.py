"""Data access layer for contract payment plans"""

from decimal import Decimal
from typing import List, Optional
from sqlalchemy.orm import Session

from billboard_billing.domain.allocation import CENT, round2
from billboard_billing.domain.exceptions import InvalidAllocation
from billboard_billing.domain.models import DistributionPolicy, Installment, policy_to_dict
from billboard_billing.infrastructure.database.models import ContractInstallment, ContractPaymentPlan


def to_cents(amount: Decimal) -> int:
    return int(round2(amount) / CENT)


def from_cents(cents: int) -> Decimal:
    return Decimal(cents) * CENT


class PlanRepository:
    """Repository for contract payment plans"""

    def __init__(self, db: Session):
        self.db = db

    def save_plan(
        self,
        contract_id: str,
        total: Decimal,
        policy: DistributionPolicy,
        installments: List[Installment],
    ) -> ContractPaymentPlan:
        """Store the policy and installments for a contract, replacing any previous plan"""
        if any(inst.due_date is None for inst in installments):
            raise InvalidAllocation("Every installment needs a due date before it can be saved")

        existing = self.get_plan_by_contract(contract_id)
        if existing is not None:
            self.db.delete(existing)
            self.db.flush()

        db_plan = ContractPaymentPlan(
            contract_id=contract_id,
            total_cents=to_cents(total),
            mode=policy.mode.value,
            policy=policy_to_dict(policy),
        )
        self.db.add(db_plan)
        self.db.flush()

        for position, inst in enumerate(installments):
            self.db.add(
                ContractInstallment(
                    plan_id=db_plan.id,
                    position=position,
                    due_date=inst.due_date,
                    amount_cents=to_cents(inst.amount),
                    description=inst.description,
                    payment_type=inst.payment_type,
                )
            )

        self.db.flush()
        self.db.refresh(db_plan)
        return db_plan

    def get_plan_by_contract(self, contract_id: str) -> Optional[ContractPaymentPlan]:
        """Fetch plan with installments"""
        return (
            self.db.query(ContractPaymentPlan)
            .filter(ContractPaymentPlan.contract_id == contract_id)
            .first()
        )

    def delete_plan(self, contract_id: str) -> bool:
        """Discard a contract's plan; False when there was none"""
        plan = self.get_plan_by_contract(contract_id)
        if plan is None:
            return False
        self.db.delete(plan)
        self.db.flush()
        return True


def installments_from_plan(plan: ContractPaymentPlan) -> List[Installment]:
    return [
        Installment(
            amount=from_cents(row.amount_cents),
            due_date=row.due_date,
            description=row.description,
            payment_type=row.payment_type,
        )
        for row in plan.installments
    ]
