import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


def generate_public_id():
    """Generate a unique public ID for secure public access"""
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    company = Column(String(255), nullable=True)
    street = Column(String(255), nullable=True)
    house_number = Column(String(20), nullable=True)
    postal_code = Column(String(10), nullable=True)
    city = Column(String(255), nullable=True)
    is_vendor = Column(Boolean, default=False, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    account_status = Column(String(20), default="unconfirmed", nullable=False)  # unconfirmed, active
    # SHA-256 of the single-use confirmation token; the raw token only leaves via email
    confirmation_token_hash = Column(String(64), nullable=True, index=True)
    confirmation_token_expires_at = Column(DateTime, nullable=True)
    email_confirmed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    pending_booking = relationship("PendingBooking", back_populates="user", uselist=False)
    contracts = relationship("Contract", back_populates="user")


class PendingBooking(Base):
    """Booking request captured at vendor registration, one per vendor"""

    __tablename__ = "pending_bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    package_data = Column(JSON, nullable=False)  # Snapshot of the selected package
    status = Column(String(20), default="pending", nullable=False, index=True)  # pending, confirmed, cancelled
    requested_at = Column(DateTime, server_default=func.now())
    email_confirmed_at = Column(DateTime, nullable=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=True)
    assigned_unit_ids = Column(JSON, default=list, nullable=True)
    decided_at = Column(DateTime, nullable=True)
    decided_by = Column(String(255), nullable=True)  # Admin email
    rejection_reason = Column(Text, nullable=True)

    user = relationship("User", back_populates="pending_booking")
    contract = relationship("Contract")


class RentalUnit(Base):
    """A rentable shelf, cooler, premium spot or table in the store (Mietfach)"""

    __tablename__ = "rental_units"

    id = Column(Integer, primary_key=True, index=True)
    label = Column(String(100), unique=True, nullable=False)
    unit_type = Column(String(20), nullable=False, index=True)  # standard, cooled, premium, other
    monthly_price = Column(Float, nullable=False, default=0.0)
    description = Column(Text, nullable=True)
    location = Column(String(255), nullable=True)
    available = Column(Boolean, default=True, nullable=False)
    current_contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=True)
    # Optimistic concurrency counter, bumped on every UPDATE
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    current_contract = relationship("Contract", foreign_keys=[current_contract_id])

    __mapper_args__ = {"version_id_col": version}


class Contract(Base):
    """Rental agreement (Vertrag) of a vendor for one or more rental units"""

    __tablename__ = "contracts"

    id = Column(Integer, primary_key=True, index=True)
    public_id = Column(String(36), unique=True, index=True, default=generate_public_id)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(String(20), default="pending", nullable=False, index=True)  # pending, scheduled, active, cancelled
    scheduled_start_date = Column(Date, nullable=False)
    duration_months = Column(Integer, nullable=False, default=1)
    total_monthly_price = Column(Float, nullable=False, default=0.0)
    discount = Column(Float, nullable=False, default=0.0)  # Decimal fraction (0.1 = 10%)
    commission_rate = Column(Integer, nullable=False, default=4)  # Percent on sales: 4 basic, 7 premium
    storage_service = Column(Boolean, default=False, nullable=False)
    shipping_service = Column(Boolean, default=False, nullable=False)
    storage_service_monthly = Column(Float, default=20.0, nullable=False)
    shipping_service_monthly = Column(Float, default=5.0, nullable=False)
    # Trial month (Probemonat)
    trial_booking = Column(Boolean, default=False, nullable=False)
    trial_ends_on = Column(Date, nullable=True)
    trial_cancelled = Column(Boolean, default=False, nullable=False)
    trial_cancellation_date = Column(Date, nullable=True)
    # Billing starts here (deferred to store opening when gating is enabled)
    payable_from = Column(Date, nullable=True)
    # Window during which the contract occupies its units, half-open [from, to)
    impact_from = Column(Date, nullable=True, index=True)
    impact_to = Column(Date, nullable=True, index=True)
    cancelled_at = Column(Date, nullable=True)
    cancelled_by = Column(String(255), nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="contracts")
    services = relationship(
        "ContractLease",
        back_populates="contract",
        order_by="ContractLease.position",
        cascade="all, delete-orphan",
    )

    @property
    def total_price(self) -> float:
        """Total over the paid duration; the trial month is not billed"""
        return round((self.total_monthly_price or 0.0) * (self.duration_months or 0), 2)

    @property
    def rental_unit_ids(self) -> list[int]:
        return [service.rental_unit_id for service in self.services]


class ContractLease(Base):
    """One rented unit within a contract (the contract's "services" list)"""

    __tablename__ = "contract_leases"

    id = Column(Integer, primary_key=True, index=True)
    contract_id = Column(Integer, ForeignKey("contracts.id"), nullable=False, index=True)
    rental_unit_id = Column(Integer, ForeignKey("rental_units.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)
    lease_start = Column(Date, nullable=False)
    lease_end = Column(Date, nullable=True)
    monthly_price = Column(Float, nullable=False, default=0.0)

    contract = relationship("Contract", back_populates="services")
    rental_unit = relationship("RentalUnit")


class StoreSettings(Base):
    """Single-row store configuration (id is always 1)"""

    __tablename__ = "store_settings"

    id = Column(Integer, primary_key=True, default=1)
    store_opening_enabled = Column(Boolean, default=False, nullable=False)
    opening_date = Column(Date, nullable=True)
    reminder_days = Column(JSON, default=lambda: [30, 14, 7, 1], nullable=False)
    # Default for new approvals when the admin doesn't decide explicitly
    trial_month_enabled = Column(Boolean, default=False, nullable=False)
    last_modified = Column(DateTime, server_default=func.now(), onupdate=func.now())
    modified_by = Column(String(255), nullable=True)


class SchemaMigration(Base):
    """Applied-version log written by the migration runner"""

    __tablename__ = "schema_migrations"

    version = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    applied_at = Column(DateTime, server_default=func.now())
