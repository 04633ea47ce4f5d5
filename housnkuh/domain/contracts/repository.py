"""Contract repository - Database operations for contracts"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...models import Contract, ContractLease


class ContractRepository:
    """Repository for contract database operations"""

    @staticmethod
    def get_contracts(
        db: Session,
        status: Optional[str] = None,
        user_id: Optional[int] = None,
    ) -> list[Contract]:
        """Get contracts with optional status / vendor filters"""
        query = db.query(Contract).options(
            selectinload(Contract.services).selectinload(ContractLease.rental_unit),
            selectinload(Contract.user),
        )
        if status:
            query = query.filter(Contract.status == status)
        if user_id:
            query = query.filter(Contract.user_id == user_id)
        return query.order_by(Contract.created_at.desc(), Contract.id.desc()).all()

    @staticmethod
    def get_contract_by_id(db: Session, contract_id: int) -> Optional[Contract]:
        return db.query(Contract).filter(Contract.id == contract_id).first()

    @staticmethod
    def get_contract_for_user(db: Session, contract_id: int, user_id: int) -> Optional[Contract]:
        return (
            db.query(Contract)
            .filter(Contract.id == contract_id, Contract.user_id == user_id)
            .first()
        )

    @staticmethod
    def create_contract(db: Session, user_id: int, leases: list[dict], **contract_data) -> Contract:
        """Create a contract with its ordered unit leases. Flushes, does not commit."""
        contract = Contract(user_id=user_id, **contract_data)
        for position, lease in enumerate(leases):
            contract.services.append(ContractLease(position=position, **lease))
        db.add(contract)
        db.flush()
        return contract

    @staticmethod
    def get_contracts_to_activate(db: Session, today: date) -> list[Contract]:
        """Scheduled contracts whose start date has been reached"""
        return (
            db.query(Contract)
            .filter(Contract.status == "scheduled", Contract.scheduled_start_date <= today)
            .order_by(Contract.id)
            .all()
        )

    @staticmethod
    def get_contracts_missing_schedule(db: Session) -> list[Contract]:
        """Contracts created before billing dates and impact windows were stored"""
        return (
            db.query(Contract)
            .filter(
                (Contract.impact_from.is_(None))
                | (Contract.impact_to.is_(None))
                | (Contract.payable_from.is_(None))
            )
            .order_by(Contract.id)
            .all()
        )
