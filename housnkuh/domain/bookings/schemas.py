"""Booking request schemas - admin review of pending bookings"""

from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel

from ..contracts.schemas import ContractResponse


class PendingBookingResponse(BaseModel):
    id: int
    userId: int
    vendorName: str
    vendorEmail: str
    phone: Optional[str] = None
    company: Optional[str] = None
    emailConfirmed: bool
    status: str
    requestedAt: Optional[datetime] = None
    packageData: dict[str, Any]
    price: Optional[dict[str, Any]] = None  # Freshly recomputed breakdown


class ApproveBookingRequest(BaseModel):
    unitIds: list[int]
    scheduledStartDate: Optional[date] = None
    priceAdjustments: dict[int, float] = {}  # unit id -> monthly price override
    trialBooking: Optional[bool] = None


class ApproveBookingResponse(BaseModel):
    bookingId: int
    status: str
    contract: ContractResponse


class RejectBookingRequest(BaseModel):
    reason: Optional[str] = None


class RejectBookingResponse(BaseModel):
    bookingId: int
    status: str
    reason: Optional[str] = None
