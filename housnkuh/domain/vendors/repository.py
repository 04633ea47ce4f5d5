"""Vendor repository - accounts and their booking requests"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import PendingBooking, User


class VendorRepository:
    @staticmethod
    def get_user_by_email(db: Session, email: str) -> Optional[User]:
        return db.query(User).filter(User.email == email).first()

    @staticmethod
    def get_user_by_token_hash(db: Session, token_hash: str) -> Optional[User]:
        return db.query(User).filter(User.confirmation_token_hash == token_hash).first()

    @staticmethod
    def create_vendor_with_booking(db: Session, package_data: dict, **user_data) -> User:
        """Insert the vendor and its pending booking together. Flushes, does not commit."""
        user = User(is_vendor=True, is_admin=False, account_status="unconfirmed", **user_data)
        user.pending_booking = PendingBooking(package_data=package_data, status="pending")
        db.add(user)
        db.flush()
        return user
