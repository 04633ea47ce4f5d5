"""Rental unit router - catalog CRUD and availability lookups"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import RentalUnit, User
from .availability import AvailabilityService, UnitAvailability
from .schemas import (
    AvailabilityConflictResponse,
    BatchAvailabilityRequest,
    PublicRentalUnitResponse,
    RentalUnitCreate,
    RentalUnitResponse,
    RentalUnitUpdate,
    UnitAvailabilityResponse,
    UnitType,
)
from .service import RentalUnitService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/rental-units", tags=["Rental Units"])
public_router = APIRouter(prefix="/rental-units", tags=["Rental Units"])


def get_rental_unit_service(db: Session = Depends(get_db)) -> RentalUnitService:
    """Dependency injection for RentalUnitService"""
    return RentalUnitService(db)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def to_unit_response(unit: RentalUnit) -> RentalUnitResponse:
    return RentalUnitResponse(
        id=unit.id,
        label=unit.label,
        unitType=unit.unit_type,
        monthlyPrice=unit.monthly_price,
        description=unit.description,
        location=unit.location,
        available=unit.available,
        currentContractId=unit.current_contract_id,
    )


def to_availability_response(result: UnitAvailability) -> UnitAvailabilityResponse:
    return UnitAvailabilityResponse(
        unitId=result.unit_id,
        available=result.available,
        conflicts=[
            AvailabilityConflictResponse(
                contractId=c.contract_id,
                impactFrom=c.impact_from,
                impactTo=c.impact_to,
                status=c.status,
                vendorName=c.vendor_name,
            )
            for c in result.conflicts
        ],
        nextAvailable=result.next_available,
        error=result.error,
    )


# ============================================================================
# CATALOG
# ============================================================================


@router.get("", response_model=list[RentalUnitResponse])
async def list_rental_units(
    unit_type: Optional[UnitType] = Query(None, alias="type"),
    available: Optional[bool] = Query(None),
    current_user: User = Depends(get_current_admin),
    service: RentalUnitService = Depends(get_rental_unit_service),
):
    return [to_unit_response(u) for u in service.get_units(unit_type=unit_type, available=available)]


@router.post("", response_model=RentalUnitResponse, status_code=201)
async def create_rental_unit(
    data: RentalUnitCreate,
    current_user: User = Depends(get_current_admin),
    service: RentalUnitService = Depends(get_rental_unit_service),
):
    return to_unit_response(service.create_unit(data))


@router.post("/availability/batch", response_model=dict[int, UnitAvailabilityResponse])
async def batch_availability(
    data: BatchAvailabilityRequest,
    current_user: User = Depends(get_current_admin),
    availability: AvailabilityService = Depends(get_availability_service),
):
    """Availability of several units for the same range"""
    results = availability.calculate_batch_availability(data.unitIds, data.startDate, data.endDate)
    return {unit_id: to_availability_response(result) for unit_id, result in results.items()}


@router.get("/{unit_id}", response_model=RentalUnitResponse)
async def get_rental_unit(
    unit_id: int,
    current_user: User = Depends(get_current_admin),
    service: RentalUnitService = Depends(get_rental_unit_service),
):
    return to_unit_response(service.get_unit(unit_id))


@router.patch("/{unit_id}", response_model=RentalUnitResponse)
async def update_rental_unit(
    unit_id: int,
    data: RentalUnitUpdate,
    current_user: User = Depends(get_current_admin),
    service: RentalUnitService = Depends(get_rental_unit_service),
):
    return to_unit_response(service.update_unit(unit_id, data))


# ============================================================================
# AVAILABILITY
# ============================================================================


@router.get("/{unit_id}/availability", response_model=UnitAvailabilityResponse)
async def get_unit_availability(
    unit_id: int,
    start_date: date = Query(..., alias="from"),
    end_date: date = Query(..., alias="to"),
    current_user: User = Depends(get_current_admin),
    availability: AvailabilityService = Depends(get_availability_service),
):
    """Availability of one unit for [from, to), with conflicting contracts"""
    return to_availability_response(availability.calculate_availability(unit_id, start_date, end_date))


@public_router.get("/available", response_model=list[PublicRentalUnitResponse])
async def find_available_units(
    start_date: date = Query(..., alias="from"),
    end_date: date = Query(..., alias="to"),
    unit_types: Optional[list[UnitType]] = Query(None, alias="type"),
    limit: int = Query(50, ge=1, le=200),
    availability: AvailabilityService = Depends(get_availability_service),
):
    """Units of the given types that are free for the whole range"""
    units = availability.find_available_units(start_date, end_date, unit_types=unit_types, limit=limit)
    return [
        PublicRentalUnitResponse(
            id=u.id,
            label=u.label,
            unitType=u.unit_type,
            monthlyPrice=u.monthly_price,
            description=u.description,
            location=u.location,
        )
        for u in units
    ]
