"""
Shared test fixtures.

Sets up an isolated SQLite database so tests never touch the
real database. Tables are created and the chart of accounts
seeded before each test, and everything is dropped after it.
"""

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from property_ledger.main import app
from property_ledger.models import Lease, LeaseStatus, Property, Unit
from property_ledger.models.base import Base, get_db
from property_ledger.services.chart_of_accounts import seed_chart_of_accounts


# SQLite keeps the tests free of any database infrastructure.
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
    """
    Create all tables and seed the chart of accounts before each
    test, drop everything after.
    """
    Base.metadata.create_all(bind=engine)
    session = TestSessionLocal()
    try:
        seed_chart_of_accounts(session)
        session.commit()
    finally:
        session.close()
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
    test session.
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
def make_lease(db_session):
    """
    Factory for a property, unit and lease.

    Each call creates its own property so unit numbers never
    collide; pass rental_property to put several units in one.
    """
    counter = {"n": 0}

    def _make_lease(
        tenant_name="Test Tenant",
        monthly_rent=Decimal("1500.00"),
        status=LeaseStatus.ACTIVE,
        start_date=date(2026, 1, 1),
        end_date=None,
        rental_property=None,
        unit_number=None,
        late_fee_amount=None,
        late_fee_type=None,
    ):
        counter["n"] += 1
        if rental_property is None:
            rental_property = Property(
                name=f"Property {counter['n']}",
                address=f"{counter['n']} Main St",
            )
            db_session.add(rental_property)
            db_session.flush()
        unit = Unit(
            property_id=rental_property.id,
            unit_number=unit_number or f"U{counter['n']}",
            square_feet=800,
        )
        db_session.add(unit)
        db_session.flush()
        lease = Lease(
            property_id=rental_property.id,
            unit_id=unit.id,
            tenant_name=tenant_name,
            start_date=start_date,
            end_date=end_date,
            monthly_rent_amount=monthly_rent,
            charge_day=1,
            status=status,
            late_fee_amount=late_fee_amount,
            late_fee_type=late_fee_type,
        )
        db_session.add(lease)
        db_session.commit()
        return lease

    return _make_lease


@pytest.fixture
def lease(make_lease):
    return make_lease()
