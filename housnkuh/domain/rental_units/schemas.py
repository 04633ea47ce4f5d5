"""Rental unit schemas"""

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, Field

UnitType = Literal["standard", "cooled", "premium", "other"]


class RentalUnitCreate(BaseModel):
    label: str
    unitType: UnitType
    monthlyPrice: Optional[float] = None  # Defaults to the catalog price of the type
    description: Optional[str] = None
    location: Optional[str] = None


class RentalUnitUpdate(BaseModel):
    label: Optional[str] = None
    monthlyPrice: Optional[float] = None
    description: Optional[str] = None
    location: Optional[str] = None


class PublicRentalUnitResponse(BaseModel):
    """Catalog entry shown to anonymous visitors; no booking references"""

    id: int
    label: str
    unitType: str
    monthlyPrice: float
    description: Optional[str] = None
    location: Optional[str] = None


class RentalUnitResponse(BaseModel):
    id: int
    label: str
    unitType: str
    monthlyPrice: float
    description: Optional[str] = None
    location: Optional[str] = None
    available: bool
    currentContractId: Optional[int] = None


class AvailabilityConflictResponse(BaseModel):
    contractId: int
    impactFrom: date
    impactTo: date
    status: str
    vendorName: Optional[str] = None


class UnitAvailabilityResponse(BaseModel):
    unitId: int
    available: bool
    conflicts: list[AvailabilityConflictResponse] = []
    nextAvailable: Optional[date] = None
    error: Optional[str] = None


class BatchAvailabilityRequest(BaseModel):
    unitIds: list[int] = Field(..., min_length=1)
    startDate: date
    endDate: date
