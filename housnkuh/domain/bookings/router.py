"""Booking router - admin endpoints for pending booking requests"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...email_service import notify_booking_approved, notify_booking_rejected
from ...models import User
from ..contracts.router import to_contract_response
from .schemas import (
    ApproveBookingRequest,
    ApproveBookingResponse,
    PendingBookingResponse,
    RejectBookingRequest,
    RejectBookingResponse,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/bookings", tags=["Bookings"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


@router.get("/pending", response_model=list[PendingBookingResponse])
async def get_pending_bookings(
    current_user: User = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Booking requests waiting for unit assignment, oldest first"""
    return [
        PendingBookingResponse(
            id=booking.id,
            userId=booking.user_id,
            vendorName=booking.user.name,
            vendorEmail=booking.user.email,
            phone=booking.user.phone,
            company=booking.user.company,
            emailConfirmed=booking.user.email_confirmed_at is not None,
            status=booking.status,
            requestedAt=booking.requested_at,
            packageData=booking.package_data or {},
            price=price.rounded() if price else None,
        )
        for booking, price in service.get_pending_bookings()
    ]


@router.post("/{booking_id}/approve", response_model=ApproveBookingResponse)
async def approve_booking(
    booking_id: int,
    data: ApproveBookingRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    """Assign rental units and create the contract (all units or none)"""
    contract = service.approve_booking(booking_id, data, current_user)

    background_tasks.add_task(
        notify_booking_approved,
        to=contract.user.email,
        vendor_name=contract.user.name,
        unit_labels=[lease.rental_unit.label for lease in contract.services],
        start_date=contract.impact_from,
        end_date=contract.impact_to,
        payable_from=contract.payable_from,
        monthly_price=contract.total_monthly_price,
        trial_ends_on=contract.trial_ends_on,
    )

    return ApproveBookingResponse(
        bookingId=booking_id,
        status="confirmed",
        contract=to_contract_response(contract),
    )


@router.post("/{booking_id}/reject", response_model=RejectBookingResponse)
async def reject_booking(
    booking_id: int,
    data: RejectBookingRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service),
):
    booking = service.reject_booking(booking_id, current_user, data.reason)

    background_tasks.add_task(
        notify_booking_rejected,
        to=booking.user.email,
        vendor_name=booking.user.name,
        reason=booking.rejection_reason,
    )

    return RejectBookingResponse(bookingId=booking.id, status=booking.status, reason=booking.rejection_reason)
