"""Rental unit availability - overlap checks against booked contract windows"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...config import AVAILABILITY_SEARCH_DAYS
from ...models import Contract, RentalUnit
from ...shared.dates import DateRange, ceil_to_month_start
from ...shared.exceptions import DomainError, NotFoundError, ValidationError
from .repository import RentalUnitRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailabilityConflict:
    contract_id: int
    impact_from: date
    impact_to: date
    status: str
    vendor_name: Optional[str] = None


@dataclass
class UnitAvailability:
    unit_id: int
    available: bool
    conflicts: list[AvailabilityConflict] = field(default_factory=list)
    next_available: Optional[date] = None
    error: Optional[str] = None


def make_range(start: date, end: date) -> DateRange:
    try:
        return DateRange(start, end)
    except ValueError as e:
        raise ValidationError(str(e), context={"from": start.isoformat(), "to": end.isoformat()}) from e


class AvailabilityService:
    """
    Answers "is this unit free for [from, to)?"

    A unit is blocked by every pending, scheduled or active contract that
    includes it and whose impact window overlaps the requested range.
    """

    def __init__(self, db: Session, search_days: int = AVAILABILITY_SEARCH_DAYS):
        self.db = db
        self.repo = RentalUnitRepository()
        self.search_days = search_days

    def _blocking(self, unit_id: int, requested: DateRange, exclude_contract_id: Optional[int] = None) -> list[Contract]:
        return self.repo.get_blocking_contracts(
            self.db, unit_id, requested.start, requested.end, exclude_contract_id=exclude_contract_id
        )

    def is_unit_available(
        self, unit_id: int, start: date, end: date, exclude_contract_id: Optional[int] = None
    ) -> bool:
        requested = make_range(start, end)
        return not self._blocking(unit_id, requested, exclude_contract_id)

    def calculate_availability(self, unit_id: int, start: date, end: date) -> UnitAvailability:
        """Availability with conflict details and the earliest month the unit frees up"""
        requested = make_range(start, end)
        unit = self.repo.get_unit_by_id(self.db, unit_id)
        if unit is None:
            raise NotFoundError(f"Rental unit {unit_id} not found")

        blocking = self._blocking(unit_id, requested)
        result = UnitAvailability(unit_id=unit_id, available=not blocking)
        if not blocking:
            return result

        result.conflicts = [
            AvailabilityConflict(
                contract_id=contract.id,
                impact_from=contract.impact_from,
                impact_to=contract.impact_to,
                status=contract.status,
                vendor_name=contract.user.name if contract.user else None,
            )
            for contract in blocking
        ]

        latest = max(contract.impact_to for contract in blocking)
        horizon = requested.start + timedelta(days=self.search_days)
        result.next_available = ceil_to_month_start(latest) if latest <= horizon else None
        return result

    def calculate_batch_availability(self, unit_ids: list[int], start: date, end: date) -> dict[int, UnitAvailability]:
        """Per-unit results; a failing unit is reported in its entry instead of failing the batch"""
        make_range(start, end)
        results: dict[int, UnitAvailability] = {}
        for unit_id in unit_ids:
            try:
                results[unit_id] = self.calculate_availability(unit_id, start, end)
            except DomainError as e:
                logger.warning(f"⚠️ Availability check failed for unit {unit_id}: {e.detail}")
                results[unit_id] = UnitAvailability(unit_id=unit_id, available=False, error=e.detail)
        return results

    def find_available_units(
        self,
        start: date,
        end: date,
        unit_types: Optional[list[str]] = None,
        limit: int = 50,
    ) -> list[RentalUnit]:
        requested = make_range(start, end)
        available = []
        for unit in self.repo.get_units_by_types(self.db, unit_types):
            if not self._blocking(unit.id, requested):
                available.append(unit)
                if len(available) >= limit:
                    break
        return available
