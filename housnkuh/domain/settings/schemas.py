"""Store settings schemas"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class StoreOpeningUpdate(BaseModel):
    """
    Partial store-opening update.

    Omitted fields keep their stored value. The opening date is only removed
    by an explicit null or by clearOpeningDate.
    """

    enabled: Optional[bool] = None
    openingDate: Optional[date] = None
    clearOpeningDate: bool = False
    reminderDays: Optional[list[int]] = None
    trialMonthEnabled: Optional[bool] = None


class StoreOpeningResponse(BaseModel):
    enabled: bool
    openingDate: Optional[date] = None
    reminderDays: list[int]
    trialMonthEnabled: bool
    isStoreOpen: bool
    daysUntilOpening: Optional[int] = None
    lastModified: Optional[datetime] = None
    modifiedBy: Optional[str] = None


class StoreStatusResponse(BaseModel):
    """Public view used by the registration page"""

    isStoreOpen: bool
    openingDate: Optional[date] = None
    daysUntilOpening: Optional[int] = None
