"""
Date-driven status reconciliation for contracts and rental units
Persists scheduled → active once the start date arrives and resyncs unit occupancy flags.

Reads never change status; run this as a daily job (admin endpoint or
``python -m housnkuh.services.status_automation``).
"""

import argparse
import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ..domain.contracts.lifecycle import ContractStatus, effective_status, ensure_transition
from ..domain.contracts.repository import ContractRepository
from ..domain.rental_units.service import refresh_unit_occupancy
from ..models import RentalUnit

logger = logging.getLogger(__name__)


def reconcile_contract_statuses(db: Session, today: Optional[date] = None) -> dict:
    """
    Persist derived contract statuses and refresh unit flags

    Returns:
        dict: Summary of the changes made
    """
    today = today or date.today()
    summary = {"activated": 0, "units_updated": 0, "total_updated": 0, "run_date": today}

    try:
        for contract in ContractRepository.get_contracts_to_activate(db, today):
            target = effective_status(contract.status, contract.scheduled_start_date, today)
            if target != ContractStatus.ACTIVE:
                continue
            contract.status = ensure_transition(contract.status, target).value
            summary["activated"] += 1
            logger.info(f"✅ Contract {contract.id} transitioned: scheduled → active")

        db.flush()

        for unit in db.query(RentalUnit).order_by(RentalUnit.id).all():
            before = (unit.available, unit.current_contract_id)
            refresh_unit_occupancy(db, unit, today)
            if (unit.available, unit.current_contract_id) != before:
                summary["units_updated"] += 1
                logger.info(f"🔄 Rental unit {unit.label}: available={unit.available}, "
                            f"contract={unit.current_contract_id}")

        summary["total_updated"] = summary["activated"] + summary["units_updated"]
        if summary["total_updated"] > 0:
            db.commit()
            logger.info(f"📊 Status reconciliation summary: {summary}")
        else:
            db.rollback()
            logger.debug("ℹ️ No contract/unit status updates needed")

        return summary

    except Exception as e:
        logger.error(f"❌ Error reconciling contract statuses: {str(e)}")
        db.rollback()
        raise


def main(argv=None):
    parser = argparse.ArgumentParser(description="Reconcile contract statuses and rental unit flags")
    parser.add_argument("--date", type=date.fromisoformat, default=None, help="Run as of this date (YYYY-MM-DD)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    from ..database import SessionLocal

    db = SessionLocal()
    try:
        summary = reconcile_contract_statuses(db, args.date)
        print(f"Activated {summary['activated']} contract(s), updated {summary['units_updated']} unit(s)")
    finally:
        db.close()


if __name__ == "__main__":
    main()
