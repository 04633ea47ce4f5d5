"""Contract domain schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class ContractLeaseResponse(BaseModel):
    rentalUnitId: int
    label: Optional[str] = None
    unitType: Optional[str] = None
    leaseStart: date
    leaseEnd: Optional[date] = None
    monthlyPrice: float


class ContractResponse(BaseModel):
    id: int
    publicId: Optional[str] = None
    vendorId: int
    vendorName: Optional[str] = None
    status: str
    effectiveStatus: str
    scheduledStartDate: date
    durationMonths: int
    totalMonthlyPrice: float
    totalPrice: float
    discount: float
    commissionRate: int
    storageService: bool
    shippingService: bool
    trialBooking: bool
    trialEndsOn: Optional[date] = None
    trialCancelled: bool
    trialCancellationDate: Optional[date] = None
    payableFrom: Optional[date] = None
    impactFrom: Optional[date] = None
    impactTo: Optional[date] = None
    cancelledAt: Optional[date] = None
    cancellationReason: Optional[str] = None
    services: list[ContractLeaseResponse] = []
    createdAt: Optional[datetime] = None


class ContractCancelRequest(BaseModel):
    reason: Optional[str] = None
    cancellationDate: Optional[date] = None  # Defaults to today


class ReconcileResponse(BaseModel):
    activated: int
    unitsUpdated: int
    runDate: date
