"""Shared test fixtures and helpers."""

import os

# Must be set before the app modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ["RESEND_API_KEY"] = ""
os.environ["ADMIN_NOTIFICATION_EMAIL"] = "admin@housnkuh.de"
os.environ["DB_LOG_SLOW_QUERIES"] = "false"

from datetime import date, datetime
from typing import Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from housnkuh import email_service
from housnkuh.database import Base, get_db
from housnkuh.main import app
from housnkuh.models import Contract, ContractLease, PendingBooking, RentalUnit, User
from housnkuh.security_utils import create_access_token, hash_password

VENDOR_PASSWORD = "Sicher123!"

DEFAULT_PACKAGE = {
    "packageName": "Starter",
    "unitCounts": {"standard": 2, "cooled": 1},
    "rentalDuration": 12,
    "commissionType": "premium",
    "commissionRate": 7,
    "storageService": True,
    "shippingService": False,
    "monthlyPrice": 126.0,
    "discount": 0.1,
    "setupFee": 0.0,
    "desiredStartDate": "2030-01-01",
}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def sent_emails(monkeypatch):
    """Capture outgoing emails instead of calling Resend"""
    sent = []

    async def fake_send_email(to, subject, mjml_content):
        sent.append({"to": to, "subject": subject, "mjml": mjml_content})
        return {"id": f"test-{len(sent)}"}

    monkeypatch.setattr(email_service, "send_email", fake_send_email)
    return sent


@pytest.fixture
def client(db_session, sent_emails):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ============================================================================
# FACTORIES
# ============================================================================


def make_user(
    db,
    email: str = "vendor@example.com",
    name: str = "Anna Mueller",
    is_vendor: bool = True,
    is_admin: bool = False,
    confirmed: bool = True,
    password: str = VENDOR_PASSWORD,
) -> User:
    user = User(
        email=email,
        password_hash=hash_password(password),
        name=name,
        street="Dorfstrasse",
        house_number="12",
        postal_code="95679",
        city="Waldershof",
        is_vendor=is_vendor,
        is_admin=is_admin,
        account_status="active" if confirmed else "unconfirmed",
        email_confirmed_at=datetime(2025, 1, 1, 12, 0) if confirmed else None,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_vendor_with_booking(
    db,
    email: str = "vendor@example.com",
    confirmed: bool = True,
    package: Optional[dict] = None,
) -> User:
    user = make_user(db, email=email, confirmed=confirmed)
    user.pending_booking = PendingBooking(package_data=dict(package or DEFAULT_PACKAGE), status="pending")
    db.commit()
    db.refresh(user)
    return user


def make_unit(db, label: str = "A1", unit_type: str = "standard", price: float = 35.0) -> RentalUnit:
    unit = RentalUnit(label=label, unit_type=unit_type, monthly_price=price, available=True)
    db.add(unit)
    db.commit()
    db.refresh(unit)
    return unit


def make_contract(
    db,
    vendor: User,
    units: list[RentalUnit],
    impact_from: date,
    impact_to: date,
    status: str = "active",
    duration_months: int = 12,
    trial_booking: bool = False,
    trial_ends_on: Optional[date] = None,
) -> Contract:
    contract = Contract(
        user_id=vendor.id,
        status=status,
        scheduled_start_date=impact_from,
        duration_months=duration_months,
        total_monthly_price=sum(u.monthly_price for u in units),
        trial_booking=trial_booking,
        trial_ends_on=trial_ends_on,
        payable_from=impact_from,
        impact_from=impact_from,
        impact_to=impact_to,
    )
    for position, unit in enumerate(units):
        contract.services.append(
            ContractLease(
                rental_unit_id=unit.id,
                position=position,
                lease_start=impact_from,
                lease_end=impact_to,
                monthly_price=unit.monthly_price,
            )
        )
    db.add(contract)
    db.commit()
    db.refresh(contract)
    return contract


def auth_headers(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest.fixture
def admin(db_session):
    return make_user(db_session, email="admin@housnkuh.de", name="Shop Admin", is_vendor=False, is_admin=True)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)
