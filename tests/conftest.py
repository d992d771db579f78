"""Pytest fixtures for testing"""

from datetime import date, time, timedelta
from typing import Callable, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from cashflow_insights.api.main import create_app
from cashflow_insights.domain.classification import classify_all
from cashflow_insights.domain.models import (
    Category,
    ClassifiedTransaction,
    PaymentMethod,
    Transaction,
    TransactionType,
)
from cashflow_insights.infrastructure.database.models import Base
from cashflow_insights.infrastructure.database.session import get_db

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
def make_transaction() -> Callable[..., Transaction]:
    """Factory for transactions with sensible defaults"""
    counter = {"n": 0}

    def _make(
        amount: float,
        merchant: str,
        day: date = date(2024, 3, 10),
        transaction_type: Optional[TransactionType] = None,
        category: Optional[Category] = None,
        payment_method: PaymentMethod = PaymentMethod.PIX,
        at: Optional[time] = None,
    ) -> Transaction:
        counter["n"] += 1
        return Transaction(
            id=f"tx_{counter['n']}",
            date=day,
            amount=amount,
            merchant=merchant,
            payment_method=payment_method,
            category=category,
            transaction_type=transaction_type,
            time_of_day=at,
        )

    return _make


@pytest.fixture
def classify() -> Callable[[List[Transaction]], List[ClassifiedTransaction]]:
    return classify_all


@pytest.fixture
def scenario_transactions(make_transaction) -> List[Transaction]:
    """Salary, two freelance-style incomes and three expenses including a gacha purchase"""
    return [
        make_transaction(10000, "Salary Co", date(2024, 3, 5), TransactionType.DEPOSIT),
        make_transaction(-300, "Market", date(2024, 3, 7)),
        make_transaction(-6666, "Gacha", date(2024, 3, 9)),
        make_transaction(-150, "Netflix", date(2024, 3, 12)),
        make_transaction(5000, "Freelance", date(2024, 3, 15)),
    ]


@pytest.fixture
def monthly_subscription(make_transaction) -> List[Transaction]:
    """Four charges roughly every 30 days at roughly 99.90"""
    start = date(2024, 1, 3)
    offsets = [0, 31, 59, 90]
    amounts = [-99.90, -102.50, -97.40, -99.90]
    return [
        make_transaction(amount, "StreamPlus", start + timedelta(days=offset))
        for offset, amount in zip(offsets, amounts)
    ]
