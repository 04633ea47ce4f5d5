"""Store settings service - store opening and trial-month defaults"""

import logging
from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import StoreSettings, User
from ...shared.exceptions import ValidationError
from ..contracts.billing import StoreOpeningPolicy
from .repository import SettingsRepository
from .schemas import StoreOpeningUpdate

logger = logging.getLogger(__name__)


class StoreSettingsService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = SettingsRepository()

    def get_settings(self) -> StoreSettings:
        """Load the settings row, creating it with defaults on first access"""
        settings = self.repo.get_settings(self.db)
        if settings is None:
            settings = self.repo.create_default_settings(self.db)
            self.db.commit()
            logger.info("⚙️ Created default store settings")
        return settings

    def get_policy(self) -> StoreOpeningPolicy:
        """Read-only policy snapshot; does not create the row"""
        settings = self.repo.get_settings(self.db)
        if settings is None:
            return StoreOpeningPolicy()
        return StoreOpeningPolicy(enabled=settings.store_opening_enabled, opening_date=settings.opening_date)

    def trial_month_default(self) -> bool:
        settings = self.repo.get_settings(self.db)
        return bool(settings and settings.trial_month_enabled)

    def is_store_open(self, today: Optional[date] = None) -> bool:
        return self.get_policy().is_open(today or date.today())

    def days_until_opening(self, today: Optional[date] = None) -> Optional[int]:
        opening = self.get_policy().effective_opening_date
        if opening is None:
            return None
        return max((opening - (today or date.today())).days, 0)

    def update_store_opening(
        self, data: StoreOpeningUpdate, admin: User, today: Optional[date] = None
    ) -> tuple[StoreSettings, list[User]]:
        """
        Apply a store-opening update.

        Returns the saved settings and the vendors with a pending booking
        who should hear about a changed opening date.
        """
        today = today or date.today()
        settings = self.get_settings()
        previous_date = settings.opening_date

        # An omitted openingDate keeps the stored one
        new_date = previous_date
        if data.clearOpeningDate:
            new_date = None
        elif "openingDate" in data.model_fields_set:
            new_date = data.openingDate

        if new_date is not None and new_date != previous_date and new_date < today:
            raise ValidationError("Opening date must not be in the past")
        if data.reminderDays is not None and any(day <= 0 for day in data.reminderDays):
            raise ValidationError("Reminder days must be positive numbers of days")

        try:
            settings.opening_date = new_date
            if data.enabled is not None:
                settings.store_opening_enabled = data.enabled
            if data.reminderDays is not None:
                settings.reminder_days = sorted(set(data.reminderDays), reverse=True)
            if data.trialMonthEnabled is not None:
                settings.trial_month_enabled = data.trialMonthEnabled
            settings.modified_by = admin.email

            self.db.commit()
            self.db.refresh(settings)
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"🏪 Store opening updated by {admin.email}: enabled={settings.store_opening_enabled}, "
            f"date={settings.opening_date}"
        )

        recipients: list[User] = []
        if settings.opening_date is not None and settings.opening_date != previous_date:
            recipients = self.repo.get_vendors_with_pending_booking(self.db)
            logger.info(f"📧 Opening date changed ({previous_date} -> {settings.opening_date}), "
                        f"notifying {len(recipients)} vendor(s)")
        return settings, recipients
