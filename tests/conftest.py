"""Pytest configuration: in-memory database, settable clock and ledger factories."""

import os

# Set test database URL BEFORE any imports from src
# This ensures the SessionLocal and engine never touch a real database file
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SCHEDULER_ENABLED"] = "false"

from datetime import date, datetime, timezone  # noqa: E402
from decimal import Decimal  # noqa: E402
from itertools import count  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from src.models import Base, Property, RentRecord, RentStatus, Tenant, TenantStatus  # noqa: E402
from src.services.billing_calendar import parse_month  # noqa: E402
from src.services.config import LedgerConfig  # noqa: E402
from src.services.rent_ledger import carried_forward  # noqa: E402
from src.services.tenant_locks import TenantLockRegistry  # noqa: E402


class FakeClock:
    """Clock that returns a fixed aware UTC moment until moved."""

    def __init__(self, moment: datetime):
        self.moment = moment

    def __call__(self) -> datetime:
        return self.moment

    def set(self, year: int, month: int, day: int, hour: int = 9) -> None:
        self.moment = datetime(year, month, day, hour, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    """In-memory SQLite engine shared across threads (TestClient runs endpoints in a pool)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    """Create test database session."""
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    """1 March 2025, 09:00 UTC (12:00 in Nairobi)."""
    return FakeClock(datetime(2025, 3, 1, 9, tzinfo=timezone.utc))


@pytest.fixture
def config():
    return LedgerConfig(scheduler_enabled=False)


@pytest.fixture
def locks():
    return TenantLockRegistry()


@pytest.fixture
def services(db_session, config, clock, locks):
    """Build any ledger service against the test session, clock and locks."""

    def _build(service_cls):
        return service_cls(db_session, config, clock, locks)

    return _build


@pytest.fixture
def estate(db_session):
    prop = Property(name="Riverside Court", address="Ngong Road, Nairobi", units=12)
    db_session.add(prop)
    db_session.commit()
    return prop


@pytest.fixture
def make_tenant(db_session, estate):
    """Factory for committed tenants with distinct phone numbers (07000000NN)."""
    numbers = count(1)

    def _make(
        monthly_rent="10000",
        status=TenantStatus.ACTIVE,
        balance="0",
        current_month=None,
        **kwargs,
    ) -> Tenant:
        n = next(numbers)
        tenant = Tenant(
            name=kwargs.pop("name", f"Tenant {n}"),
            phone=kwargs.pop("phone", f"07000000{n:02d}"),
            unit_number=kwargs.pop("unit_number", f"A{n}"),
            property_id=estate.id,
            lease_start=kwargs.pop("lease_start", date(2025, 1, 1)),
            lease_end=kwargs.pop("lease_end", date(2025, 12, 31)),
            monthly_rent=Decimal(monthly_rent),
            balance=Decimal(balance),
            current_month=current_month,
            status=status,
            **kwargs,
        )
        db_session.add(tenant)
        db_session.commit()
        return tenant

    return _make


@pytest.fixture
def make_record(db_session):
    """Factory for committed rent records with a consistent carried_forward_amount."""

    def _make(
        tenant: Tenant,
        month: str,
        amount="10000",
        previous_balance="0",
        credit_balance="0",
        amount_paid="0",
        status=RentStatus.PENDING,
        due_date=None,
    ) -> RentRecord:
        amount = Decimal(amount)
        previous_balance = Decimal(previous_balance)
        credit_balance = Decimal(credit_balance)
        record = RentRecord(
            tenant_id=tenant.id,
            property_id=tenant.property_id,
            month=month,
            base_rent=amount,
            amount=amount,
            previous_balance=previous_balance,
            credit_balance=credit_balance,
            carried_forward_amount=carried_forward(amount, previous_balance, credit_balance),
            amount_paid=Decimal(amount_paid),
            status=status,
            due_date=due_date or parse_month(month).replace(day=5),
        )
        db_session.add(record)
        db_session.commit()
        return record

    return _make


@pytest.fixture
def client(db_session, config, clock):
    """FastAPI TestClient wired to the test session, config and clock."""
    from fastapi.testclient import TestClient

    from src.api.app import app
    from src.api.deps import get_clock, get_config
    from src.services import get_db

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_config] = lambda: config
    app.dependency_overrides[get_clock] = lambda: clock
    # Not used as a context manager: the lifespan (scheduler) stays off
    yield TestClient(app)
    app.dependency_overrides.clear()
