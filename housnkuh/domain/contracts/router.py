"""Contract router - admin contract endpoints"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...email_service import notify_contract_cancelled
from ...models import Contract, User
from ...services.status_automation import reconcile_contract_statuses
from .schemas import ContractCancelRequest, ContractLeaseResponse, ContractResponse, ReconcileResponse
from .service import ContractService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/contracts", tags=["Contracts"])


def get_contract_service(db: Session = Depends(get_db)) -> ContractService:
    """Dependency injection for ContractService"""
    return ContractService(db)


def to_contract_response(contract: Contract, today: Optional[date] = None) -> ContractResponse:
    return ContractResponse(
        id=contract.id,
        publicId=contract.public_id,
        vendorId=contract.user_id,
        vendorName=contract.user.name if contract.user else None,
        status=contract.status,
        effectiveStatus=ContractService.effective_status(contract, today).value,
        scheduledStartDate=contract.scheduled_start_date,
        durationMonths=contract.duration_months,
        totalMonthlyPrice=round(contract.total_monthly_price, 2),
        totalPrice=contract.total_price,
        discount=contract.discount,
        commissionRate=contract.commission_rate,
        storageService=contract.storage_service,
        shippingService=contract.shipping_service,
        trialBooking=contract.trial_booking,
        trialEndsOn=contract.trial_ends_on,
        trialCancelled=contract.trial_cancelled,
        trialCancellationDate=contract.trial_cancellation_date,
        payableFrom=contract.payable_from,
        impactFrom=contract.impact_from,
        impactTo=contract.impact_to,
        cancelledAt=contract.cancelled_at,
        cancellationReason=contract.cancellation_reason,
        services=[
            ContractLeaseResponse(
                rentalUnitId=lease.rental_unit_id,
                label=lease.rental_unit.label if lease.rental_unit else None,
                unitType=lease.rental_unit.unit_type if lease.rental_unit else None,
                leaseStart=lease.lease_start,
                leaseEnd=lease.lease_end,
                monthlyPrice=lease.monthly_price,
            )
            for lease in contract.services
        ],
        createdAt=contract.created_at,
    )


def schedule_cancellation_email(background_tasks: BackgroundTasks, contract: Contract) -> None:
    if contract.user is None:
        return
    background_tasks.add_task(
        notify_contract_cancelled,
        to=contract.user.email,
        vendor_name=contract.user.name,
        contract_id=contract.id,
        cancelled_at=contract.cancelled_at,
        trial_cancellation=contract.trial_cancelled,
    )


@router.get("", response_model=list[ContractResponse])
async def list_contracts(
    status: Optional[str] = Query(None),
    vendor_id: Optional[int] = Query(None, alias="vendorId"),
    current_user: User = Depends(get_current_admin),
    service: ContractService = Depends(get_contract_service),
):
    return [to_contract_response(c) for c in service.list_contracts(status=status, vendor_id=vendor_id)]


@router.post("/reconcile-statuses", response_model=ReconcileResponse)
async def reconcile_statuses(
    current_user: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Persist scheduled → active transitions and resync unit flags"""
    summary = reconcile_contract_statuses(db)
    logger.info(f"Status reconciliation triggered by {current_user.email}")
    return ReconcileResponse(
        activated=summary["activated"],
        unitsUpdated=summary["units_updated"],
        runDate=summary["run_date"],
    )


@router.get("/{contract_id}", response_model=ContractResponse)
async def get_contract(
    contract_id: int,
    current_user: User = Depends(get_current_admin),
    service: ContractService = Depends(get_contract_service),
):
    return to_contract_response(service.get_contract(contract_id))


@router.post("/{contract_id}/cancel", response_model=ContractResponse)
async def cancel_contract(
    contract_id: int,
    data: ContractCancelRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_admin),
    service: ContractService = Depends(get_contract_service),
):
    contract = service.get_contract(contract_id)
    contract = service.cancel_contract(
        contract, current_user, reason=data.reason, cancellation_date=data.cancellationDate
    )
    schedule_cancellation_email(background_tasks, contract)
    return to_contract_response(contract)
