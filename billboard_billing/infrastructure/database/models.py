"""SQLAlchemy ORM models for persisted contract payment plans"""

import uuid
from sqlalchemy import Column, BigInteger, Date, DateTime, ForeignKey, Integer, JSON, Text, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class ContractPaymentPlan(Base):
    """Distribution policy and total for one contract"""

    __tablename__ = "contract_payment_plan"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    contract_id = Column(Text, nullable=False, unique=True, index=True)
    total_cents = Column(BigInteger, nullable=False)
    mode = Column(Text, nullable=False)
    policy = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    installments = relationship(
        "ContractInstallment",
        back_populates="plan",
        cascade="all, delete-orphan",
        order_by="ContractInstallment.position",
    )


class ContractInstallment(Base):
    """Individual installment within a contract payment plan"""

    __tablename__ = "contract_installment"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    plan_id = Column(Uuid, ForeignKey("contract_payment_plan.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    description = Column(Text, nullable=False, default="")
    payment_type = Column(Text, nullable=False, default="")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    plan = relationship("ContractPaymentPlan", back_populates="installments")
