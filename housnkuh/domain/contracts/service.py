"""Contract service - queries and cancellation"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Contract, User
from ...shared.dates import DateRange
from ...shared.exceptions import NotFoundError, ValidationError
from ...utils.sanitization import sanitize_string
from ..rental_units.service import refresh_unit_occupancy
from .lifecycle import ContractStatus, effective_status, ensure_transition
from .repository import ContractRepository

logger = logging.getLogger(__name__)


def in_trial_month(contract: Contract, day: date) -> bool:
    """True while ``day`` lies in the contract's trial window [start, trial end)"""
    if not contract.trial_booking or contract.trial_ends_on is None:
        return False
    return DateRange(contract.scheduled_start_date, contract.trial_ends_on).contains(day)


class ContractService:
    """Service layer for contract queries and status changes"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ContractRepository()

    def list_contracts(self, status: Optional[str] = None, vendor_id: Optional[int] = None) -> list[Contract]:
        if status is not None:
            try:
                ContractStatus(status)
            except ValueError:
                raise ValidationError(f"Unknown contract status '{status}'") from None
        return self.repo.get_contracts(self.db, status=status, user_id=vendor_id)

    def get_contract(self, contract_id: int) -> Contract:
        contract = self.repo.get_contract_by_id(self.db, contract_id)
        if not contract:
            raise NotFoundError(f"Contract {contract_id} not found")
        return contract

    def get_vendor_contracts(self, vendor: User) -> list[Contract]:
        return self.repo.get_contracts(self.db, user_id=vendor.id)

    def get_vendor_contract(self, contract_id: int, vendor: User) -> Contract:
        contract = self.repo.get_contract_for_user(self.db, contract_id, vendor.id)
        if not contract:
            raise NotFoundError(f"Contract {contract_id} not found")
        return contract

    @staticmethod
    def effective_status(contract: Contract, today: Optional[date] = None) -> ContractStatus:
        return effective_status(contract.status, contract.scheduled_start_date, today or date.today())

    def cancel_contract(
        self,
        contract: Contract,
        cancelled_by: User,
        reason: Optional[str] = None,
        cancellation_date: Optional[date] = None,
        today: Optional[date] = None,
    ) -> Contract:
        """
        Cancel a contract and release its rental units.

        A cancellation inside the trial month is recorded as a trial
        cancellation and ends the unit booking on the cancellation date.
        """
        today = today or date.today()
        cancel_on = cancellation_date or today
        ensure_transition(contract.status, ContractStatus.CANCELLED)

        if not cancelled_by.is_admin and cancel_on < today:
            raise ValidationError("Cancellation date must not be in the past")

        trial_cancellation = in_trial_month(contract, cancel_on)

        try:
            contract.status = ContractStatus.CANCELLED.value
            contract.cancelled_at = cancel_on
            contract.cancelled_by = cancelled_by.email
            contract.cancellation_reason = sanitize_string(reason)

            if trial_cancellation:
                contract.trial_cancelled = True
                contract.trial_cancellation_date = cancel_on
                if contract.impact_from < cancel_on < contract.impact_to:
                    contract.impact_to = cancel_on
                for lease in contract.services:
                    lease.lease_end = contract.impact_to

            self.db.flush()
            for lease in contract.services:
                refresh_unit_occupancy(self.db, lease.rental_unit, today)

            self.db.commit()
            self.db.refresh(contract)
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"🛑 Contract {contract.id} cancelled by {cancelled_by.email} on {cancel_on}"
            f"{' (trial month)' if trial_cancellation else ''}"
        )
        return contract
