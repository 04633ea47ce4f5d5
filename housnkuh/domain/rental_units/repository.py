"""Rental unit repository - Database operations for rental units and their bookings"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Contract, ContractLease, RentalUnit
from ..contracts.lifecycle import BLOCKING_STATUSES


class RentalUnitRepository:
    """Repository for rental unit database operations"""

    @staticmethod
    def get_units(
        db: Session, unit_type: Optional[str] = None, available: Optional[bool] = None
    ) -> list[RentalUnit]:
        query = db.query(RentalUnit)
        if unit_type:
            query = query.filter(RentalUnit.unit_type == unit_type)
        if available is not None:
            query = query.filter(RentalUnit.available.is_(available))
        return query.order_by(RentalUnit.label).all()

    @staticmethod
    def get_units_by_types(db: Session, unit_types: Optional[list[str]] = None) -> list[RentalUnit]:
        query = db.query(RentalUnit)
        if unit_types:
            query = query.filter(RentalUnit.unit_type.in_(unit_types))
        return query.order_by(RentalUnit.id).all()

    @staticmethod
    def get_unit_by_id(db: Session, unit_id: int) -> Optional[RentalUnit]:
        return db.query(RentalUnit).filter(RentalUnit.id == unit_id).first()

    @staticmethod
    def get_unit_by_label(db: Session, label: str) -> Optional[RentalUnit]:
        return db.query(RentalUnit).filter(RentalUnit.label == label).first()

    @staticmethod
    def lock_units(db: Session, unit_ids: list[int]) -> list[RentalUnit]:
        """
        Load units with a row lock, always in id order so concurrent
        approvals acquire locks in the same sequence
        """
        return (
            db.query(RentalUnit)
            .filter(RentalUnit.id.in_(unit_ids))
            .order_by(RentalUnit.id)
            .with_for_update()
            .all()
        )

    @staticmethod
    def create_unit(db: Session, **unit_data) -> RentalUnit:
        unit = RentalUnit(**unit_data)
        db.add(unit)
        db.flush()
        return unit

    @staticmethod
    def update_unit(db: Session, unit: RentalUnit, **updates) -> RentalUnit:
        for key, value in updates.items():
            if value is not None and hasattr(unit, key):
                setattr(unit, key, value)
        db.flush()
        return unit

    @staticmethod
    def get_blocking_contracts(
        db: Session,
        unit_id: int,
        start: date,
        end: date,
        exclude_contract_id: Optional[int] = None,
    ) -> list[Contract]:
        """Contracts holding the unit with an impact window overlapping [start, end)"""
        query = (
            db.query(Contract)
            .join(ContractLease, ContractLease.contract_id == Contract.id)
            .options(joinedload(Contract.user))
            .filter(
                ContractLease.rental_unit_id == unit_id,
                Contract.status.in_(BLOCKING_STATUSES),
                Contract.impact_from < end,
                Contract.impact_to > start,
            )
        )
        if exclude_contract_id is not None:
            query = query.filter(Contract.id != exclude_contract_id)
        return query.order_by(Contract.impact_from).all()

    @staticmethod
    def get_open_contracts_for_unit(db: Session, unit_id: int, after: date) -> list[Contract]:
        """Blocking contracts of a unit whose window has not ended before ``after``"""
        return (
            db.query(Contract)
            .join(ContractLease, ContractLease.contract_id == Contract.id)
            .filter(
                ContractLease.rental_unit_id == unit_id,
                Contract.status.in_(BLOCKING_STATUSES),
                Contract.impact_to > after,
            )
            .order_by(Contract.impact_from)
            .all()
        )
