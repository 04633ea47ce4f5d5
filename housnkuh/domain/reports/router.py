"""Report router - admin revenue, occupancy and trial-contract reports"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import Contract, User
from .schemas import (
    MonthlyRevenueResponse,
    OccupancyResponse,
    TrialContractResponse,
    TrialReportResponse,
    TrialStatisticsResponse,
    UnitRevenueResponse,
)
from .service import ReportService, TrialPhase

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/reports", tags=["Reports"])


def get_report_service(db: Session = Depends(get_db)) -> ReportService:
    """Dependency injection for ReportService"""
    return ReportService(db)


def to_revenue_response(report: dict) -> MonthlyRevenueResponse:
    return MonthlyRevenueResponse(
        month=report["month"],
        totalRevenue=report["total_revenue"],
        paidContracts=report["paid_contracts"],
        trialContracts=report["trial_contracts"],
        deferredContracts=report["deferred_contracts"],
        isProjection=report["is_projection"],
        units=[
            UnitRevenueResponse(
                rentalUnitId=unit["rental_unit_id"],
                label=unit["label"],
                revenue=unit["revenue"],
                contracts=unit["contracts"],
                trialContracts=unit["trial_contracts"],
            )
            for unit in report["units"]
        ],
    )


def to_trial_response(contract: Contract, phase: TrialPhase) -> TrialContractResponse:
    return TrialContractResponse(
        contractId=contract.id,
        vendorId=contract.user_id,
        vendorName=contract.user.name if contract.user else None,
        vendorEmail=contract.user.email if contract.user else None,
        status=contract.status,
        phase=phase.value,
        scheduledStartDate=contract.scheduled_start_date,
        trialEndsOn=contract.trial_ends_on,
        payableFrom=contract.payable_from,
        trialCancelled=contract.trial_cancelled,
        trialCancellationDate=contract.trial_cancellation_date,
        totalMonthlyPrice=round(contract.total_monthly_price, 2),
        units=[lease.rental_unit.label for lease in contract.services if lease.rental_unit],
    )


@router.get("/revenue", response_model=MonthlyRevenueResponse)
async def get_monthly_revenue(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    current_user: User = Depends(get_current_admin),
    service: ReportService = Depends(get_report_service),
):
    """Revenue of one month per rental unit; trial months are not billed"""
    return to_revenue_response(service.calculate_monthly_revenue(date(year, month, 1)))


@router.get("/revenue/range", response_model=list[MonthlyRevenueResponse])
async def get_revenue_range(
    start_date: date = Query(..., alias="from"),
    end_date: date = Query(..., alias="to"),
    current_user: User = Depends(get_current_admin),
    service: ReportService = Depends(get_report_service),
):
    """Month-by-month revenue; months after the current one are projections"""
    return [to_revenue_response(report) for report in service.get_revenue_range(start_date, end_date)]


@router.get("/occupancy", response_model=list[OccupancyResponse])
async def get_projected_occupancy(
    months: int = Query(12),
    current_user: User = Depends(get_current_admin),
    service: ReportService = Depends(get_report_service),
):
    return [
        OccupancyResponse(
            month=entry["month"],
            totalUnits=entry["total_units"],
            occupiedUnits=entry["occupied_units"],
            occupancyRate=entry["occupancy_rate"],
        )
        for entry in service.get_projected_occupancy(months)
    ]


@router.get("/trials", response_model=TrialReportResponse)
async def get_trial_report(
    phase: Optional[str] = Query(None),
    current_user: User = Depends(get_current_admin),
    service: ReportService = Depends(get_report_service),
):
    """Trial bookings with their current phase, plus counts per phase"""
    contracts = service.get_trial_contracts(phase=phase)
    stats = service.get_trial_statistics()
    logger.info(f"📊 Trial report requested by {current_user.email}: {stats['total']} trial booking(s)")
    return TrialReportResponse(
        statistics=TrialStatisticsResponse(
            total=stats["total"],
            upcoming=stats["upcoming"],
            inTrial=stats["in_trial"],
            converted=stats["converted"],
            cancelled=stats["cancelled"],
            cancelledInTrial=stats["cancelled_in_trial"],
            conversionRate=stats["conversion_rate"],
        ),
        contracts=[to_trial_response(contract, current) for contract, current in contracts],
    )
