"""Booking service - admin review, approval and rejection of booking requests"""

import logging
from datetime import date, datetime
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ...models import Contract, PendingBooking, User
from ...shared.exceptions import ConflictError, NotFoundError, StateError, ValidationError
from ...utils.sanitization import sanitize_string
from ..contracts.billing import compute_billing_schedule
from ..contracts.lifecycle import ContractStatus, ensure_transition
from ..contracts.repository import ContractRepository
from ..pricing import PriceBreakdown, calculate_price, price_package_snapshot
from ..rental_units.availability import AvailabilityService
from ..rental_units.repository import RentalUnitRepository
from ..settings.service import StoreSettingsService
from .repository import BookingRepository
from .schemas import ApproveBookingRequest

logger = logging.getLogger(__name__)


class BookingService:
    """Service layer for the admin approval workflow"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()
        self.units = RentalUnitRepository()
        self.contracts = ContractRepository()
        self.availability = AvailabilityService(db)
        self.settings = StoreSettingsService(db)

    def get_pending_bookings(self) -> list[tuple[PendingBooking, Optional[PriceBreakdown]]]:
        """Pending requests with a freshly computed price (None if the snapshot no longer prices)"""
        results = []
        for booking in self.repo.get_pending_bookings(self.db):
            try:
                price = price_package_snapshot(booking.package_data or {})
            except ValidationError as e:
                logger.warning(f"⚠️ Booking {booking.id} package cannot be priced: {e.detail}")
                price = None
            results.append((booking, price))
        return results

    def _get_pending(self, booking_id: int, lock: bool = False) -> PendingBooking:
        booking = self.repo.get_booking_by_id(self.db, booking_id, lock=lock)
        if not booking:
            raise NotFoundError(f"Booking request {booking_id} not found")
        if booking.status != "pending":
            raise StateError(
                f"Booking request {booking_id} is already {booking.status}",
                context={"status": booking.status},
            )
        return booking

    @staticmethod
    def _validate_request(data: ApproveBookingRequest) -> None:
        if not data.unitIds:
            raise ValidationError("Assign at least one rental unit")
        if len(set(data.unitIds)) != len(data.unitIds):
            raise ValidationError("Rental units must not be assigned twice")
        unknown = set(data.priceAdjustments) - set(data.unitIds)
        if unknown:
            raise ValidationError(
                "Price adjustments given for units that are not assigned",
                context={"unitIds": sorted(unknown)},
            )
        if any(price < 0 for price in data.priceAdjustments.values()):
            raise ValidationError("Adjusted prices must not be negative")

    def approve_booking(
        self, booking_id: int, data: ApproveBookingRequest, admin: User, today: Optional[date] = None
    ) -> Contract:
        """
        Turn a pending booking into a scheduled contract for the given units.

        Runs as one transaction: the units are locked in id order, checked
        against every blocking contract and only then written. Any failure
        rolls back everything, so either all units are assigned or none.

        Raises:
            ValidationError: Malformed unit list or price adjustments
            NotFoundError: Unknown booking or rental unit
            StateError: Booking already decided or vendor email unconfirmed
            ConflictError: A unit is booked in the requested window, or was
                modified concurrently
        """
        self._validate_request(data)
        today = today or date.today()

        try:
            booking = self._get_pending(booking_id, lock=True)
            vendor = booking.user
            if vendor.email_confirmed_at is None:
                raise StateError("Vendor has not confirmed their email address yet")

            package = booking.package_data or {}
            start = data.scheduledStartDate or (
                date.fromisoformat(package["desiredStartDate"]) if package.get("desiredStartDate") else today
            )
            duration = int(package.get("rentalDuration") or 1)
            trial = data.trialBooking if data.trialBooking is not None else self.settings.trial_month_default()
            schedule = compute_billing_schedule(start, duration, trial, self.settings.get_policy())

            units = self.units.lock_units(self.db, data.unitIds)
            found = {unit.id for unit in units}
            missing = [unit_id for unit_id in data.unitIds if unit_id not in found]
            if missing:
                raise NotFoundError(f"Rental unit(s) not found: {missing}", context={"unitIds": missing})

            conflicts = [
                unit.id
                for unit in units
                if not self.availability.is_unit_available(unit.id, schedule.impact_from, schedule.impact_to)
            ]
            if conflicts:
                raise ConflictError(
                    "Rental unit(s) already booked in the requested period",
                    context={
                        "unitIds": conflicts,
                        "from": schedule.impact_from.isoformat(),
                        "to": schedule.impact_to.isoformat(),
                    },
                )

            units_by_id = {unit.id: unit for unit in units}
            ordered = [units_by_id[unit_id] for unit_id in data.unitIds]
            unit_prices = [data.priceAdjustments.get(unit.id, unit.monthly_price) for unit in ordered]
            price = calculate_price(
                unit_prices,
                duration,
                int(package.get("commissionRate") or 4),
                storage_service=bool(package.get("storageService")),
                shipping_service=bool(package.get("shippingService")),
            )

            contract = self.contracts.create_contract(
                self.db,
                user_id=vendor.id,
                leases=[
                    {
                        "rental_unit_id": unit.id,
                        "lease_start": schedule.impact_from,
                        "lease_end": schedule.impact_to,
                        "monthly_price": unit_price,
                    }
                    for unit, unit_price in zip(ordered, unit_prices)
                ],
                status=ensure_transition(ContractStatus.PENDING, ContractStatus.SCHEDULED).value,
                scheduled_start_date=start,
                duration_months=duration,
                total_monthly_price=price.monthly_total,
                discount=price.discount,
                commission_rate=price.commission_rate,
                storage_service=bool(package.get("storageService")),
                shipping_service=bool(package.get("shippingService")),
                trial_booking=trial,
                trial_ends_on=schedule.trial_ends_on,
                payable_from=schedule.payable_from,
                impact_from=schedule.impact_from,
                impact_to=schedule.impact_to,
            )

            for unit in ordered:
                unit.available = False
                unit.current_contract_id = contract.id

            booking.status = "confirmed"
            booking.contract_id = contract.id
            booking.assigned_unit_ids = list(data.unitIds)
            booking.decided_at = datetime.utcnow()
            booking.decided_by = admin.email

            self.db.commit()
        except StaleDataError:
            self.db.rollback()
            logger.warning(f"⚠️ Concurrent modification while approving booking {booking_id}")
            raise ConflictError("Rental units were modified concurrently, please retry") from None
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(contract)
        logger.info(
            f"✅ Booking {booking_id} approved by {admin.email}: contract {contract.id}, "
            f"units {data.unitIds}, {schedule.impact_from} → {schedule.impact_to}"
            f"{' (trial)' if trial else ''}"
        )
        return contract

    def reject_booking(self, booking_id: int, admin: User, reason: Optional[str] = None) -> PendingBooking:
        try:
            booking = self._get_pending(booking_id, lock=True)
            booking.status = "cancelled"
            booking.rejection_reason = sanitize_string(reason)
            booking.decided_at = datetime.utcnow()
            booking.decided_by = admin.email
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(booking)
        logger.info(f"🚫 Booking {booking_id} rejected by {admin.email}")
        return booking
