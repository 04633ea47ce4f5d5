"""Report schemas"""

from datetime import date
from typing import Optional

from pydantic import BaseModel


class UnitRevenueResponse(BaseModel):
    rentalUnitId: int
    label: Optional[str] = None
    revenue: float
    contracts: int
    trialContracts: int


class MonthlyRevenueResponse(BaseModel):
    month: date
    totalRevenue: float
    paidContracts: int
    trialContracts: int
    deferredContracts: int  # Billing waits for the store opening
    isProjection: bool
    units: list[UnitRevenueResponse] = []


class OccupancyResponse(BaseModel):
    month: date
    totalUnits: int
    occupiedUnits: int
    occupancyRate: float  # Percent


class TrialStatisticsResponse(BaseModel):
    total: int
    upcoming: int
    inTrial: int
    converted: int
    cancelled: int
    cancelledInTrial: int
    conversionRate: float  # Percent of decided trials that stayed


class TrialContractResponse(BaseModel):
    contractId: int
    vendorId: int
    vendorName: Optional[str] = None
    vendorEmail: Optional[str] = None
    status: str
    phase: str
    scheduledStartDate: date
    trialEndsOn: Optional[date] = None
    payableFrom: Optional[date] = None
    trialCancelled: bool
    trialCancellationDate: Optional[date] = None
    totalMonthlyPrice: float
    units: list[str] = []


class TrialReportResponse(BaseModel):
    statistics: TrialStatisticsResponse
    contracts: list[TrialContractResponse]
