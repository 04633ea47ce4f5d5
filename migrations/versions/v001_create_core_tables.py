"""
Create the core tables

users, pending_bookings, rental_units, contracts, contract_leases, store_settings
"""

import logging

from sqlalchemy.orm import Session

from housnkuh.models import (
    Contract,
    ContractLease,
    PendingBooking,
    RentalUnit,
    StoreSettings,
    User,
)

logger = logging.getLogger(__name__)

VERSION = 1
NAME = "create_core_tables"

TABLES = [
    User.__table__,
    Contract.__table__,
    RentalUnit.__table__,
    ContractLease.__table__,
    PendingBooking.__table__,
    StoreSettings.__table__,
]


def upgrade(session: Session) -> None:
    """Create missing tables; existing ones are left untouched"""
    connection = session.connection()
    for table in TABLES:
        table.create(bind=connection, checkfirst=True)
    logger.info(f"✅ Core tables ensured: {', '.join(t.name for t in TABLES)}")


def downgrade(session: Session) -> None:
    connection = session.connection()
    for table in reversed(TABLES):
        table.drop(bind=connection, checkfirst=True)
    logger.info("✅ Core tables dropped")
