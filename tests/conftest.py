"""Pytest fixtures for testing"""

import pytest
from decimal import Decimal
from typing import Generator
from unittest.mock import AsyncMock, patch
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from saberstore.api.main import create_app
from saberstore.infrastructure.database.models import Base, InstallmentPlan, Product
from saberstore.infrastructure.database.repositories import PlanRepository, ProductRepository
from saberstore.infrastructure.database.session import get_db
from saberstore.services.credit import CreditService


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


@pytest.fixture(autouse=True)
def inventory_sync() -> Generator[AsyncMock, None, None]:
    """Keep the marketplace webhook off the network"""
    with patch(
        "saberstore.infrastructure.clients.inventory_sync.InventorySyncClient.send_stock_event"
    ) as mock_send:
        mock_send.return_value = None
        yield mock_send


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
def phone(db: Session) -> Product:
    """Smartphone, 10,000 EGP, 5 in stock"""
    product = ProductRepository(db).add_product("Galaxy A55", Decimal("10000.00"), 5, brand="Samsung")
    db.commit()
    return product


@pytest.fixture
def fridge(db: Session) -> Product:
    """Refrigerator, 25,000 EGP, 2 in stock"""
    product = ProductRepository(db).add_product("No-Frost Fridge 18ft", Decimal("25000.00"), 2, brand="Sharp")
    db.commit()
    return product


@pytest.fixture
def zero_interest_plan(db: Session) -> InstallmentPlan:
    """24 months, 0% interest, 10% down"""
    plan = PlanRepository(db).create_plan("24 months 0%", 24, Decimal("0"), Decimal("10"))
    db.commit()
    return plan


@pytest.fixture
def standard_plan(db: Session) -> InstallmentPlan:
    """12 months, 12% flat interest, 20% down"""
    plan = PlanRepository(db).create_plan("12 months", 12, Decimal("12"), Decimal("20"))
    db.commit()
    return plan


@pytest.fixture
def approved_customer(db: Session) -> str:
    """KYC-approved customer with 50,000 EGP of installment credit"""
    user_id = "user_approved"
    CreditService(db).approve_kyc(
        user_id=user_id,
        total_limit=Decimal("50000"),
        approved_by="admin_1",
        phone_number="01012345678",
        full_name="Mona Hassan",
    )
    return user_id
