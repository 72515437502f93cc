"""
Shared test fixtures.

Sets up an isolated test database so tests never touch the real
database. Tables are created before and dropped after every test.
"""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from trip_ledger.main import app
from trip_ledger.models import Base
from trip_ledger.models.base import get_db
from trip_ledger.models.external import BusLocal, BusTripLocal, EmployeeLocal
from trip_ledger.services.chart_of_account_service import ChartOfAccountService


# Use SQLite for tests, no external database needed
TEST_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

TestSessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


@pytest.fixture(autouse=True)
def setup_database():
    """Create all tables before each test, drop them after."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    The get_db dependency is overridden so the app uses the
    test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def system_accounts(db_session):
    """Seed the accounts the trip revenue workflow posts against."""
    accounts = ChartOfAccountService(db_session).seed_system_accounts()
    db_session.commit()
    return {a.account_code: a for a in accounts}


@pytest.fixture
def make_employee(db_session):
    def _make(employee_number, first_name="Juan", last_name="Dela Cruz", **extra):
        employee = EmployeeLocal(
            employee_number=employee_number,
            first_name=first_name,
            last_name=last_name,
            **extra,
        )
        db_session.add(employee)
        db_session.commit()
        return employee
    return _make


@pytest.fixture
def make_bus(db_session):
    def _make(bus_id=1, license_plate="ABC-1234", body_number="BUS-001", **extra):
        bus = BusLocal(
            bus_id=bus_id,
            license_plate=license_plate,
            body_number=body_number,
            **extra,
        )
        db_session.add(bus)
        db_session.commit()
        return bus
    return _make


@pytest.fixture
def make_trip(db_session):
    """
    Factory for cached bus trips.

    Defaults describe a BOUNDARY trip with a 200.00 shortage:
    fuel 500 + boundary 2000 = 2500 expected, 2300 collected.
    """
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        values = dict(
            assignment_id=f"ASG-{counter['n']:03d}",
            bus_trip_id=f"TRIP-{counter['n']:03d}",
            bus_route="Cubao - Baguio",
            date_assigned=date(2026, 3, 10),
            trip_revenue=Decimal("2300"),
            trip_fuel_expense=Decimal("500"),
            assignment_type="BOUNDARY",
            assignment_value=Decimal("2000"),
            payment_method="CASH",
            body_number="BUS-001",
            bus_plate_number="ABC-1234",
            driver_employee_number="EMP-001",
            conductor_employee_number="EMP-002",
        )
        values.update(overrides)
        trip = BusTripLocal(**values)
        db_session.add(trip)
        db_session.commit()
        return trip
    return _make
