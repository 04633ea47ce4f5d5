"""Booking request repository"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import PendingBooking


class BookingRepository:
    @staticmethod
    def get_pending_bookings(db: Session) -> list[PendingBooking]:
        return (
            db.query(PendingBooking)
            .options(joinedload(PendingBooking.user))
            .filter(PendingBooking.status == "pending")
            .order_by(PendingBooking.requested_at, PendingBooking.id)
            .all()
        )

    @staticmethod
    def get_booking_by_id(db: Session, booking_id: int, lock: bool = False) -> Optional[PendingBooking]:
        query = db.query(PendingBooking).filter(PendingBooking.id == booking_id)
        if lock:
            query = query.with_for_update()
        return query.first()
