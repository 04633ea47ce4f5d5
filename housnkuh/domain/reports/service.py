"""Report service - monthly revenue, projected occupancy and trial-contract statistics"""

import logging
from datetime import date
from enum import Enum
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Contract, ContractLease
from ...shared.dates import add_months, start_of_next_month
from ...shared.exceptions import ValidationError
from ..contracts.lifecycle import ContractStatus
from .repository import ReportRepository

logger = logging.getLogger(__name__)

# Contracts that earn money; pending ones are not billed yet, cancelled ones no longer
REVENUE_STATUSES = (ContractStatus.SCHEDULED.value, ContractStatus.ACTIVE.value)
MAX_REPORT_MONTHS = 36


class TrialPhase(str, Enum):
    UPCOMING = "upcoming"
    IN_TRIAL = "in_trial"
    CONVERTED = "converted"
    CANCELLED = "cancelled"


def month_start(day: date) -> date:
    return day.replace(day=1)


def billing_start(contract: Contract) -> date:
    """
    First billed day of a contract.

    Billing starts at ``payable_from`` (the later of start and store opening)
    but never inside the trial month.
    """
    start = contract.payable_from or contract.scheduled_start_date
    if contract.trial_booking and contract.trial_ends_on is not None:
        start = max(start, contract.trial_ends_on)
    return start


def billed_days(start: date, end: Optional[date], period_start: date, period_end: date) -> int:
    """Days of [start, end) inside [period_start, period_end); an open end runs to the period end"""
    first = max(start, period_start)
    last = period_end if end is None else min(end, period_end)
    return max((last - first).days, 0)


def _earliest(*days: Optional[date]) -> Optional[date]:
    known = [day for day in days if day is not None]
    return min(known) if known else None


def contract_revenue(contract: Contract, period_start: date) -> float:
    """Monthly total prorated by billed days in the month"""
    period_end = start_of_next_month(period_start)
    days = billed_days(billing_start(contract), contract.impact_to, period_start, period_end)
    return (contract.total_monthly_price or 0.0) * days / (period_end - period_start).days


def lease_revenue(contract: Contract, lease: ContractLease, period_start: date) -> float:
    """Unit rent prorated by the days the lease is billed in the month"""
    period_end = start_of_next_month(period_start)
    start = max(billing_start(contract), lease.lease_start)
    end = _earliest(lease.lease_end, contract.impact_to)
    days = billed_days(start, end, period_start, period_end)
    return (lease.monthly_price or 0.0) * days / (period_end - period_start).days


def trial_phase(contract: Contract, today: date) -> TrialPhase:
    if contract.status == ContractStatus.CANCELLED.value:
        return TrialPhase.CANCELLED
    if contract.status == ContractStatus.PENDING.value or today < contract.scheduled_start_date:
        return TrialPhase.UPCOMING
    if contract.trial_ends_on is None or today >= contract.trial_ends_on:
        return TrialPhase.CONVERTED
    return TrialPhase.IN_TRIAL


class ReportService:
    """Read-only reports computed from the contract ledger"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ReportRepository()

    def calculate_monthly_revenue(self, period: date, today: Optional[date] = None) -> dict:
        """Revenue of one calendar month, in total and per rental unit"""
        today = today or date.today()
        period_start = month_start(period)
        period_end = start_of_next_month(period_start)
        contracts = self.repo.get_contracts_in_period(self.db, REVENUE_STATUSES, period_start, period_end)

        total = 0.0
        paid = trial = deferred = 0
        units: dict[int, dict] = {}

        for contract in contracts:
            revenue = contract_revenue(contract, period_start)
            is_billed = billed_days(billing_start(contract), contract.impact_to, period_start, period_end) > 0
            if is_billed:
                paid += 1
                total += revenue
            elif contract.trial_booking:
                trial += 1
            else:
                deferred += 1

            for lease in contract.services:
                entry = units.setdefault(
                    lease.rental_unit_id,
                    {
                        "rental_unit_id": lease.rental_unit_id,
                        "label": lease.rental_unit.label if lease.rental_unit else None,
                        "revenue": 0.0,
                        "contracts": 0,
                        "trial_contracts": 0,
                    },
                )
                if is_billed:
                    entry["revenue"] += lease_revenue(contract, lease, period_start)
                    entry["contracts"] += 1
                elif contract.trial_booking:
                    entry["trial_contracts"] += 1

        for entry in units.values():
            entry["revenue"] = round(entry["revenue"], 2)

        logger.info(f"💶 Revenue {period_start:%Y-%m}: {total:.2f} EUR from {paid} paid contract(s), {trial} in trial")
        return {
            "month": period_start,
            "total_revenue": round(total, 2),
            "paid_contracts": paid,
            "trial_contracts": trial,
            "deferred_contracts": deferred,
            "is_projection": period_start > month_start(today),
            "units": sorted(units.values(), key=lambda entry: (entry["label"] or "", entry["rental_unit_id"])),
        }

    def get_revenue_range(self, start: date, end: date, today: Optional[date] = None) -> list[dict]:
        """Monthly revenue for every month from ``start`` to ``end``, both inclusive"""
        first, last = month_start(start), month_start(end)
        if last < first:
            raise ValidationError(
                "Range end must not be before its start", context={"from": start.isoformat(), "to": end.isoformat()}
            )

        months = []
        current = first
        while current <= last:
            months.append(current)
            current = add_months(current, 1)
        if len(months) > MAX_REPORT_MONTHS:
            raise ValidationError(f"A revenue range covers at most {MAX_REPORT_MONTHS} months")

        return [self.calculate_monthly_revenue(month, today) for month in months]

    def get_projected_occupancy(self, months: int = 12, today: Optional[date] = None) -> list[dict]:
        """Share of rental units held by a blocking contract in each of the coming months"""
        if not 1 <= months <= MAX_REPORT_MONTHS:
            raise ValidationError(f"months must be between 1 and {MAX_REPORT_MONTHS}")
        today = today or date.today()
        total_units = self.repo.count_units(self.db)
        first = month_start(today)

        result = []
        for offset in range(months):
            period_start = add_months(first, offset)
            occupied = self.repo.count_occupied_units(self.db, period_start, start_of_next_month(period_start))
            rate = occupied / total_units * 100 if total_units else 0.0
            result.append(
                {
                    "month": period_start,
                    "total_units": total_units,
                    "occupied_units": occupied,
                    "occupancy_rate": round(rate, 2),
                }
            )
        return result

    def get_trial_contracts(
        self, phase: Optional[str] = None, today: Optional[date] = None
    ) -> list[tuple[Contract, TrialPhase]]:
        today = today or date.today()
        if phase is not None:
            try:
                TrialPhase(phase)
            except ValueError:
                raise ValidationError(f"Unknown trial phase '{phase}'") from None

        result = [(contract, trial_phase(contract, today)) for contract in self.repo.get_trial_contracts(self.db)]
        if phase is not None:
            result = [(contract, current) for contract, current in result if current.value == phase]
        return result

    def get_trial_statistics(self, today: Optional[date] = None) -> dict:
        """Trial bookings per phase and the share that stayed past the trial month"""
        today = today or date.today()
        contracts = self.repo.get_trial_contracts(self.db)
        counts = {current: 0 for current in TrialPhase}
        for contract in contracts:
            counts[trial_phase(contract, today)] += 1

        cancelled_in_trial = sum(1 for contract in contracts if contract.trial_cancelled)
        decided = counts[TrialPhase.CONVERTED] + cancelled_in_trial
        conversion_rate = counts[TrialPhase.CONVERTED] / decided * 100 if decided else 0.0

        return {
            "total": len(contracts),
            "upcoming": counts[TrialPhase.UPCOMING],
            "in_trial": counts[TrialPhase.IN_TRIAL],
            "converted": counts[TrialPhase.CONVERTED],
            "cancelled": counts[TrialPhase.CANCELLED],
            "cancelled_in_trial": cancelled_in_trial,
            "conversion_rate": round(conversion_rate, 2),
        }
