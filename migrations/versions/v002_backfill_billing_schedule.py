"""
Backfill billing dates and impact windows

Contracts imported from the old booking system carry only a start date and a
duration. Derive payable_from, impact_from/impact_to and trial_ends_on from
the current store-opening settings, and align lease end dates. Imported
contracts never went through the approval overlap check, so overlapping
windows on the same unit are reported after the backfill.
"""

import logging

from sqlalchemy.orm import Session

from housnkuh.domain.contracts.billing import compute_billing_schedule
from housnkuh.domain.contracts.lifecycle import BLOCKING_STATUSES
from housnkuh.domain.contracts.repository import ContractRepository
from housnkuh.domain.rental_units.repository import RentalUnitRepository
from housnkuh.domain.settings.service import StoreSettingsService

logger = logging.getLogger(__name__)

VERSION = 2
NAME = "backfill_billing_schedule"


def find_overlaps(session: Session, contracts) -> list[tuple[int, int, int]]:
    """(unit id, contract id, other contract id) for each unit booked twice at once"""
    overlaps = set()
    for contract in contracts:
        if contract.status not in BLOCKING_STATUSES:
            continue
        for lease in contract.services:
            for other in RentalUnitRepository.get_blocking_contracts(
                session,
                lease.rental_unit_id,
                contract.impact_from,
                contract.impact_to,
                exclude_contract_id=contract.id,
            ):
                first, second = sorted((contract.id, other.id))
                overlaps.add((lease.rental_unit_id, first, second))
    return sorted(overlaps)


def upgrade(session: Session) -> None:
    policy = StoreSettingsService(session).get_policy()
    contracts = ContractRepository.get_contracts_missing_schedule(session)

    for contract in contracts:
        schedule = compute_billing_schedule(
            contract.scheduled_start_date,
            contract.duration_months or 1,
            bool(contract.trial_booking),
            policy,
        )
        contract.payable_from = contract.payable_from or schedule.payable_from
        contract.impact_from = contract.impact_from or schedule.impact_from
        contract.impact_to = contract.impact_to or schedule.impact_to
        if contract.trial_booking and contract.trial_ends_on is None:
            contract.trial_ends_on = schedule.trial_ends_on
        for lease in contract.services:
            if lease.lease_end is None:
                lease.lease_end = contract.impact_to

    session.flush()
    logger.info(f"✅ Backfilled billing schedule for {len(contracts)} contract(s)")

    for unit_id, contract_id, other_id in find_overlaps(session, contracts):
        logger.warning(
            f"⚠️ Rental unit {unit_id} is booked by contracts {contract_id} and {other_id} "
            f"in overlapping periods, resolve manually"
        )


def downgrade(session: Session) -> None:
    """Derived values are kept; there is nothing to restore"""
    logger.info("ℹ️ backfill_billing_schedule has no downgrade step")
