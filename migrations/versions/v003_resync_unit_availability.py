"""
Resync rental unit availability flags

Recompute available/current_contract_id of every unit from the contract
ledger, replacing flags written by earlier ad-hoc fix scripts.
"""

import logging
from datetime import date

from sqlalchemy.orm import Session

from housnkuh.domain.rental_units.service import refresh_unit_occupancy
from housnkuh.models import RentalUnit

logger = logging.getLogger(__name__)

VERSION = 3
NAME = "resync_unit_availability"


def upgrade(session: Session) -> None:
    today = date.today()
    changed = 0
    for unit in session.query(RentalUnit).order_by(RentalUnit.id).all():
        before = (unit.available, unit.current_contract_id)
        refresh_unit_occupancy(session, unit, today)
        if (unit.available, unit.current_contract_id) != before:
            changed += 1
    session.flush()
    logger.info(f"✅ Resynced availability flags, {changed} unit(s) changed")


def downgrade(session: Session) -> None:
    logger.info("ℹ️ resync_unit_availability has no downgrade step")
