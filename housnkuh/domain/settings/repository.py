"""Store settings repository - single-row table access"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import PendingBooking, StoreSettings, User

SETTINGS_ROW_ID = 1
DEFAULT_REMINDER_DAYS = [30, 14, 7, 1]


class SettingsRepository:
    @staticmethod
    def get_settings(db: Session) -> Optional[StoreSettings]:
        return db.query(StoreSettings).filter(StoreSettings.id == SETTINGS_ROW_ID).first()

    @staticmethod
    def create_default_settings(db: Session) -> StoreSettings:
        settings = StoreSettings(
            id=SETTINGS_ROW_ID,
            store_opening_enabled=False,
            reminder_days=list(DEFAULT_REMINDER_DAYS),
            trial_month_enabled=False,
        )
        db.add(settings)
        db.flush()
        return settings

    @staticmethod
    def get_vendors_with_pending_booking(db: Session) -> list[User]:
        return (
            db.query(User)
            .join(PendingBooking, PendingBooking.user_id == User.id)
            .filter(User.is_vendor.is_(True), PendingBooking.status == "pending")
            .all()
        )
