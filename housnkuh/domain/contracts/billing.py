"""Billing schedule for a contract: when payment starts and how long units stay booked"""

from dataclasses import dataclass
from datetime import date
from typing import Optional

from ...shared.dates import add_months

TRIAL_MONTHS = 1


@dataclass(frozen=True)
class StoreOpeningPolicy:
    """Snapshot of the store-opening settings passed into billing"""

    enabled: bool = False
    opening_date: Optional[date] = None

    @property
    def effective_opening_date(self) -> Optional[date]:
        if self.enabled and self.opening_date is not None:
            return self.opening_date
        return None

    def is_open(self, today: date) -> bool:
        opening = self.effective_opening_date
        return opening is not None and today >= opening


@dataclass(frozen=True)
class BillingSchedule:
    payable_from: date
    nominal_end: date
    impact_from: date
    impact_to: date
    trial_ends_on: Optional[date]


def compute_billing_schedule(
    scheduled_start: date,
    duration_months: int,
    trial_booking: bool,
    policy: StoreOpeningPolicy,
) -> BillingSchedule:
    """
    Derive billing and occupancy dates for a contract.

    Billing never starts before the store opens. A trial month is added on
    top of the paid duration, so the units stay booked one month longer than
    the nominal end.
    """
    if duration_months < 1:
        raise ValueError("duration_months must be at least 1")

    opening = policy.effective_opening_date
    payable_from = max(scheduled_start, opening) if opening else scheduled_start

    nominal_end = add_months(scheduled_start, duration_months)
    impact_to = add_months(nominal_end, TRIAL_MONTHS) if trial_booking else nominal_end
    trial_ends_on = add_months(scheduled_start, TRIAL_MONTHS) if trial_booking else None

    return BillingSchedule(
        payable_from=payable_from,
        nominal_end=nominal_end,
        impact_from=scheduled_start,
        impact_to=impact_to,
        trial_ends_on=trial_ends_on,
    )
