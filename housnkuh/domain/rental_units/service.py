"""Rental unit service - catalog management and occupancy flags"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import RentalUnit
from ...shared.exceptions import ConflictError, NotFoundError, ValidationError
from ...utils.sanitization import sanitize_string
from ..pricing import UNIT_TYPE_BASE_PRICES
from .repository import RentalUnitRepository
from .schemas import RentalUnitCreate, RentalUnitUpdate

logger = logging.getLogger(__name__)


def refresh_unit_occupancy(db: Session, unit: RentalUnit, today: date) -> RentalUnit:
    """
    Recompute ``available`` and ``current_contract_id`` from the ledger.

    A unit is occupied while any blocking contract window has not yet ended.
    The contract running today wins over later ones. Does not commit.
    """
    contracts = RentalUnitRepository.get_open_contracts_for_unit(db, unit.id, today)
    if not contracts:
        unit.available = True
        unit.current_contract_id = None
        return unit

    running = [c for c in contracts if c.impact_from <= today]
    unit.available = False
    unit.current_contract_id = (running or contracts)[0].id
    return unit


class RentalUnitService:
    """Service layer for the rental unit catalog"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = RentalUnitRepository()

    def get_units(self, unit_type: Optional[str] = None, available: Optional[bool] = None) -> list[RentalUnit]:
        return self.repo.get_units(self.db, unit_type=unit_type, available=available)

    def get_unit(self, unit_id: int) -> RentalUnit:
        unit = self.repo.get_unit_by_id(self.db, unit_id)
        if not unit:
            raise NotFoundError(f"Rental unit {unit_id} not found")
        return unit

    def _clean_label(self, label: str) -> str:
        cleaned = sanitize_string(label)
        if not cleaned:
            raise ValidationError("Label must not be empty")
        return cleaned

    def create_unit(self, data: RentalUnitCreate) -> RentalUnit:
        label = self._clean_label(data.label)
        price = UNIT_TYPE_BASE_PRICES[data.unitType] if data.monthlyPrice is None else data.monthlyPrice
        if price < 0:
            raise ValidationError("Monthly price must not be negative")
        if self.repo.get_unit_by_label(self.db, label):
            raise ConflictError(f"A rental unit labelled '{label}' already exists")

        try:
            unit = self.repo.create_unit(
                self.db,
                label=label,
                unit_type=data.unitType,
                monthly_price=price,
                description=sanitize_string(data.description),
                location=sanitize_string(data.location),
                available=True,
            )
            self.db.commit()
            self.db.refresh(unit)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"✅ Rental unit created: {unit.label} ({unit.unit_type}, {unit.monthly_price:.2f} EUR)")
        return unit

    def update_unit(self, unit_id: int, data: RentalUnitUpdate) -> RentalUnit:
        unit = self.get_unit(unit_id)

        updates = {}
        if data.label is not None:
            label = self._clean_label(data.label)
            existing = self.repo.get_unit_by_label(self.db, label)
            if existing and existing.id != unit.id:
                raise ConflictError(f"A rental unit labelled '{label}' already exists")
            updates["label"] = label
        if data.monthlyPrice is not None:
            if data.monthlyPrice < 0:
                raise ValidationError("Monthly price must not be negative")
            updates["monthly_price"] = data.monthlyPrice
        if data.description is not None:
            updates["description"] = sanitize_string(data.description)
        if data.location is not None:
            updates["location"] = sanitize_string(data.location)

        try:
            self.repo.update_unit(self.db, unit, **updates)
            self.db.commit()
            self.db.refresh(unit)
        except Exception:
            self.db.rollback()
            raise
        return unit
