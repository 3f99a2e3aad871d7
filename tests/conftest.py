"""Pytest fixtures for testing"""

import pytest
from datetime import date, timedelta
from typing import Callable, Generator
from unittest.mock import MagicMock
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from nudgepal.api.main import create_app
from nudgepal.api.dependencies import get_clock, get_reminder_client
from nudgepal.infrastructure.clients.reminders import ReminderClient
from nudgepal.infrastructure.database.models import Base
from nudgepal.infrastructure.database.session import get_db
from nudgepal.domain.models import Bill, SpendingProfile
from nudgepal.utils.clock import FixedClock


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TODAY = date(2025, 6, 15)


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
def clock() -> FixedClock:
    """Clock frozen on a mid-June Sunday"""
    return FixedClock(TODAY)


@pytest.fixture
def reminder_client() -> MagicMock:
    """Reminder client whose async methods record calls instead of posting"""
    return MagicMock(spec=ReminderClient)


@pytest.fixture
def client(db: Session, clock: FixedClock, reminder_client: MagicMock) -> TestClient:
    """Create FastAPI test client with test database, fixed clock and fake reminders"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_reminder_client] = lambda: reminder_client
    return TestClient(app)


@pytest.fixture
def make_bill() -> Callable[..., Bill]:
    """Factory for bills due relative to TODAY"""

    def _make_bill(
        bill_id: str = "bill_1",
        due_in_days: int = 10,
        reminder_days: int = 3,
        is_active: bool = True,
        amount: float = 50.0,
        name: str = "Internet",
    ) -> Bill:
        return Bill(
            id=bill_id,
            name=name,
            amount=amount,
            due_date=TODAY + timedelta(days=due_in_days),
            frequency="monthly",
            reminder_days=reminder_days,
            is_active=is_active,
        )

    return _make_bill


@pytest.fixture
def profile() -> SpendingProfile:
    """Profile with 1000 spendable per month (1500 disposable, 500 saved)"""
    return SpendingProfile(
        monthly_income=3000.0,
        fixed_expenses=1500.0,
        loan_payment=200.0,
        monthly_savings_goal=500.0,
        disposable_income=1500.0,
        daily_budget=40.0,
        expense_breakdown={"rent": 1000.0, "utilities": 300.0},
    )


