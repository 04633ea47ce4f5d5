"""Vendor router - registration, email confirmation, login and own contracts"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_vendor
from ...database import get_db
from ...email_service import notify_admin_pending_booking, notify_vendor_confirmation
from ...models import User
from ..contracts.router import schedule_cancellation_email, to_contract_response
from ..contracts.schemas import ContractCancelRequest, ContractResponse
from ..contracts.service import ContractService
from .schemas import (
    ConfirmEmailRequest,
    ConfirmEmailResponse,
    LoginRequest,
    TokenResponse,
    UserSummary,
    VendorRegistrationRequest,
    VendorRegistrationResponse,
)
from .service import VendorService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vendors", tags=["Vendors"])


def get_vendor_service(db: Session = Depends(get_db)) -> VendorService:
    """Dependency injection for VendorService"""
    return VendorService(db)


def get_contract_service(db: Session = Depends(get_db)) -> ContractService:
    return ContractService(db)


# ============================================================================
# REGISTRATION & AUTH
# ============================================================================


@router.post("/register", response_model=VendorRegistrationResponse, status_code=201)
async def register_vendor(
    data: VendorRegistrationRequest,
    background_tasks: BackgroundTasks,
    service: VendorService = Depends(get_vendor_service),
):
    """Register a vendor together with the selected package as a booking request"""
    user, token = service.register_vendor(data)
    package = user.pending_booking.package_data

    background_tasks.add_task(
        notify_vendor_confirmation,
        to=user.email,
        vendor_name=user.name,
        token=token,
        package_name=package["packageName"],
        monthly_price=package["monthlyPrice"],
        rental_duration=package["rentalDuration"],
    )

    return VendorRegistrationResponse(
        userId=user.id,
        email=user.email,
        bookingStatus=user.pending_booking.status,
        monthlyPrice=package["monthlyPrice"],
        message="Registration received. Please check your inbox to confirm your email address.",
    )


@router.post("/confirm-email", response_model=ConfirmEmailResponse)
async def confirm_email(
    data: ConfirmEmailRequest,
    background_tasks: BackgroundTasks,
    service: VendorService = Depends(get_vendor_service),
):
    user = service.confirm_email(data.token)
    booking = user.pending_booking

    if booking is not None and booking.status == "pending":
        background_tasks.add_task(
            notify_admin_pending_booking,
            vendor_name=user.name,
            vendor_email=user.email,
            package_name=booking.package_data.get("packageName", ""),
        )

    return ConfirmEmailResponse(
        email=user.email,
        accountStatus=user.account_status,
        bookingStatus=booking.status if booking else None,
        message="Email confirmed. Your booking request is now waiting for approval.",
    )


@router.post("/login", response_model=TokenResponse)
async def login(data: LoginRequest, service: VendorService = Depends(get_vendor_service)):
    user, token = service.authenticate(data.email, data.password)
    return TokenResponse(
        accessToken=token,
        user=UserSummary(
            id=user.id,
            email=user.email,
            name=user.name,
            isVendor=user.is_vendor,
            isAdmin=user.is_admin,
        ),
    )


# ============================================================================
# OWN CONTRACTS
# ============================================================================


@router.get("/me/contracts", response_model=list[ContractResponse])
async def get_my_contracts(
    current_user: User = Depends(get_current_vendor),
    service: ContractService = Depends(get_contract_service),
):
    return [to_contract_response(c) for c in service.get_vendor_contracts(current_user)]


@router.post("/me/contracts/{contract_id}/cancel", response_model=ContractResponse)
async def cancel_my_contract(
    contract_id: int,
    data: ContractCancelRequest,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_vendor),
    service: ContractService = Depends(get_contract_service),
):
    """Cancel one of the vendor's own contracts (free of charge inside the trial month)"""
    contract = service.get_vendor_contract(contract_id, current_user)
    contract = service.cancel_contract(
        contract, current_user, reason=data.reason, cancellation_date=data.cancellationDate
    )
    schedule_cancellation_email(background_tasks, contract)
    return to_contract_response(contract)
