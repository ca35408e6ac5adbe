"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from billboard_billing.api.main import create_app
from billboard_billing.infrastructure.database.models import Base
from billboard_billing.infrastructure.database.session import get_db
from billboard_billing.domain.models import Installment


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)


@pytest.fixture
def contract_start() -> date:
    return date(2025, 1, 1)


@pytest.fixture
def balanced_installments(contract_start: date) -> list[Installment]:
    """Three hand-entered installments adding up to 1000"""
    return [
        Installment(amount=Decimal("300"), due_date=contract_start, description="First payment", payment_type="on signing"),
        Installment(amount=Decimal("300"), due_date=date(2025, 2, 1), description="Payment 2", payment_type="monthly"),
        Installment(amount=Decimal("400"), due_date=date(2025, 3, 1), description="Payment 3", payment_type="monthly"),
    ]
