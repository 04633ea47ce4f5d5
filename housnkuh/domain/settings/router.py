"""Store settings router - store opening configuration and public store status"""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...email_service import notify_opening_date_changed
from ...models import StoreSettings, User
from .schemas import StoreOpeningResponse, StoreOpeningUpdate, StoreStatusResponse
from .service import StoreSettingsService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Store Settings"])


def get_settings_service(db: Session = Depends(get_db)) -> StoreSettingsService:
    """Dependency injection for StoreSettingsService"""
    return StoreSettingsService(db)


def _to_response(settings: StoreSettings, service: StoreSettingsService) -> StoreOpeningResponse:
    return StoreOpeningResponse(
        enabled=settings.store_opening_enabled,
        openingDate=settings.opening_date,
        reminderDays=settings.reminder_days or [],
        trialMonthEnabled=settings.trial_month_enabled,
        isStoreOpen=service.is_store_open(),
        daysUntilOpening=service.days_until_opening(),
        lastModified=settings.last_modified,
        modifiedBy=settings.modified_by,
    )


@router.get("/admin/settings/store-opening", response_model=StoreOpeningResponse)
async def get_store_opening(
    current_user: User = Depends(get_current_admin),
    service: StoreSettingsService = Depends(get_settings_service),
):
    return _to_response(service.get_settings(), service)


@router.put("/admin/settings/store-opening", response_model=StoreOpeningResponse)
async def update_store_opening(
    data: StoreOpeningUpdate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_admin),
    service: StoreSettingsService = Depends(get_settings_service),
):
    """Update the store opening; vendors waiting for approval hear about a new date"""
    previous_date = service.get_settings().opening_date
    settings, recipients = service.update_store_opening(data, current_user)

    for vendor in recipients:
        background_tasks.add_task(
            notify_opening_date_changed,
            to=vendor.email,
            vendor_name=vendor.name,
            new_date=settings.opening_date,
            old_date=previous_date,
        )

    return _to_response(settings, service)


@router.get("/store/status", response_model=StoreStatusResponse)
async def get_store_status(service: StoreSettingsService = Depends(get_settings_service)):
    """Public store status for the landing and registration pages"""
    policy = service.get_policy()
    return StoreStatusResponse(
        isStoreOpen=service.is_store_open(),
        openingDate=policy.effective_opening_date,
        daysUntilOpening=service.days_until_opening(),
    )
