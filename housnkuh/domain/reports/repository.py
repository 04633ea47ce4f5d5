"""Report repository - read-only ledger queries for revenue, occupancy and trials"""

from datetime import date

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from ...models import Contract, ContractLease, RentalUnit
from ..contracts.lifecycle import BLOCKING_STATUSES


class ReportRepository:
    """Repository for reporting queries. Never writes."""

    @staticmethod
    def get_contracts_in_period(db: Session, statuses, period_start: date, period_end: date) -> list[Contract]:
        """Contracts with one of ``statuses`` whose window touches [period_start, period_end)"""
        return (
            db.query(Contract)
            .options(selectinload(Contract.services).selectinload(ContractLease.rental_unit))
            .filter(
                Contract.status.in_(statuses),
                Contract.scheduled_start_date < period_end,
                or_(Contract.impact_to.is_(None), Contract.impact_to > period_start),
            )
            .order_by(Contract.id)
            .all()
        )

    @staticmethod
    def count_units(db: Session) -> int:
        return db.query(func.count(RentalUnit.id)).scalar() or 0

    @staticmethod
    def count_occupied_units(db: Session, period_start: date, period_end: date) -> int:
        """Distinct units held by a blocking contract at some point in the period"""
        return (
            db.query(func.count(func.distinct(ContractLease.rental_unit_id)))
            .join(Contract, ContractLease.contract_id == Contract.id)
            .filter(
                Contract.status.in_(BLOCKING_STATUSES),
                func.coalesce(Contract.impact_from, Contract.scheduled_start_date) < period_end,
                or_(Contract.impact_to.is_(None), Contract.impact_to > period_start),
            )
            .scalar()
            or 0
        )

    @staticmethod
    def get_trial_contracts(db: Session) -> list[Contract]:
        """All trial bookings, newest first"""
        return (
            db.query(Contract)
            .options(
                selectinload(Contract.services).selectinload(ContractLease.rental_unit),
                selectinload(Contract.user),
            )
            .filter(Contract.trial_booking.is_(True))
            .order_by(Contract.created_at.desc(), Contract.id.desc())
            .all()
        )
