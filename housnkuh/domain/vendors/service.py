"""Vendor service - registration with booking request, email confirmation and login"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...config import CONFIRMATION_TOKEN_TTL_HOURS
from ...models import User
from ...security_utils import (
    create_access_token,
    generate_secure_token,
    hash_password,
    hash_token,
    verify_password,
)
from ...shared.exceptions import (
    AuthenticationError,
    ConflictError,
    PermissionDeniedError,
    ValidationError,
)
from ...shared.validators import (
    validate_email,
    validate_password,
    validate_postal_code,
    validate_required_text,
)
from ...utils.sanitization import sanitize_string
from ..pricing import (
    COMMISSION_RATES,
    MAX_RENTAL_DURATION,
    MIN_RENTAL_DURATION,
    UNIT_TYPES,
    PriceBreakdown,
    calculate_package_price,
)
from .repository import VendorRepository
from .schemas import PackageSelection, VendorRegistrationRequest

logger = logging.getLogger(__name__)

PRICE_TOLERANCE = 0.01


def _check(validator, *args):
    """Run a shared validator and surface its ValueError as a domain ValidationError"""
    try:
        return validator(*args)
    except ValueError as e:
        raise ValidationError(str(e)) from None


def validate_package(package: PackageSelection) -> tuple[dict, PriceBreakdown]:
    """
    Validate a package selection and build its stored snapshot.

    Returns:
        (snapshot, price) where the snapshot carries the server-side price
    """
    package_name = _check(validate_required_text, sanitize_string(package.packageName), "Package name")

    unknown = set(package.unitCounts) - set(UNIT_TYPES)
    if unknown:
        raise ValidationError(f"Unknown rental unit type(s): {', '.join(sorted(unknown))}")
    if any(count < 0 for count in package.unitCounts.values()):
        raise ValidationError("Rental unit counts must not be negative")
    if sum(package.unitCounts.values()) < 1:
        raise ValidationError("Select at least one rental unit")

    if not MIN_RENTAL_DURATION <= package.rentalDuration <= MAX_RENTAL_DURATION:
        raise ValidationError(
            f"Rental duration must be between {MIN_RENTAL_DURATION} and {MAX_RENTAL_DURATION} months"
        )
    if package.commissionType not in COMMISSION_RATES:
        raise ValidationError("Commission type must be 'basic' or 'premium'")
    if package.monthlyPrice < 0 or package.setupFee < 0:
        raise ValidationError("Prices must not be negative")

    commission_rate = COMMISSION_RATES[package.commissionType]
    unit_counts = {unit_type: count for unit_type, count in package.unitCounts.items() if count > 0}
    price = calculate_package_price(
        unit_counts,
        package.rentalDuration,
        commission_rate,
        storage_service=package.storageService,
        shipping_service=package.shippingService,
    )

    if abs(price.monthly_total - package.monthlyPrice) > PRICE_TOLERANCE:
        logger.warning(
            f"⚠️ Client price {package.monthlyPrice:.2f} differs from server price "
            f"{price.monthly_total:.2f} for package '{package_name}', storing server price"
        )

    snapshot = {
        "packageName": package_name,
        "unitCounts": unit_counts,
        "rentalDuration": package.rentalDuration,
        "commissionType": package.commissionType,
        "commissionRate": commission_rate,
        "storageService": package.storageService,
        "shippingService": package.shippingService,
        "monthlyPrice": round(price.monthly_total, 2),
        "discount": price.discount,
        "setupFee": package.setupFee,
        "desiredStartDate": package.desiredStartDate.isoformat() if package.desiredStartDate else None,
    }
    return snapshot, price


class VendorService:
    """Service layer for vendor accounts"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = VendorRepository()

    def register_vendor(self, data: VendorRegistrationRequest, now: Optional[datetime] = None) -> tuple[User, str]:
        """
        Create an unconfirmed vendor with a pending booking request.

        Returns:
            (user, raw confirmation token); only the token's hash is stored
        """
        now = now or datetime.utcnow()

        email = _check(validate_email, data.email)
        if not email:
            raise ValidationError("Email is required")
        _check(validate_password, data.password)

        name = _check(validate_required_text, sanitize_string(data.name), "Name")
        street = _check(validate_required_text, sanitize_string(data.street), "Street")
        house_number = _check(validate_required_text, sanitize_string(data.houseNumber), "House number")
        city = _check(validate_required_text, sanitize_string(data.city), "City")
        postal_code = _check(validate_postal_code, data.postalCode)

        snapshot, price = validate_package(data.package)

        if self.repo.get_user_by_email(self.db, email):
            logger.warning(f"⚠️ Registration attempt with existing email: {email}")
            raise ConflictError("An account with this email already exists")

        token = generate_secure_token()
        try:
            user = self.repo.create_vendor_with_booking(
                self.db,
                package_data=snapshot,
                email=email,
                password_hash=hash_password(data.password),
                name=name,
                phone=sanitize_string(data.phone),
                company=sanitize_string(data.company),
                street=street,
                house_number=house_number,
                postal_code=postal_code,
                city=city,
                confirmation_token_hash=hash_token(token),
                confirmation_token_expires_at=now + timedelta(hours=CONFIRMATION_TOKEN_TTL_HOURS),
            )
            self.db.commit()
            self.db.refresh(user)
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("An account with this email already exists") from None
        except Exception:
            self.db.rollback()
            raise

        logger.info(
            f"✅ Vendor registered: user_id={user.id}, package='{snapshot['packageName']}', "
            f"monthly={price.monthly_total:.2f} EUR"
        )
        return user, token

    def confirm_email(self, token: str, now: Optional[datetime] = None) -> User:
        """Redeem a confirmation token once and activate the account"""
        now = now or datetime.utcnow()
        if not token:
            raise ValidationError("Confirmation token is required")

        user = self.repo.get_user_by_token_hash(self.db, hash_token(token))
        if not user:
            logger.warning("⚠️ Invalid or already used confirmation token")
            raise ValidationError("Invalid or already used confirmation link")
        if user.confirmation_token_expires_at is None or user.confirmation_token_expires_at < now:
            logger.warning(f"⚠️ Expired confirmation token for user {user.id}")
            raise ValidationError("Confirmation link has expired")

        try:
            user.account_status = "active"
            user.email_confirmed_at = now
            user.confirmation_token_hash = None
            user.confirmation_token_expires_at = None
            if user.pending_booking is not None:
                user.pending_booking.email_confirmed_at = now
            self.db.commit()
            self.db.refresh(user)
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"✅ Email confirmed for vendor {user.id}")
        return user

    def authenticate(self, email: str, password: str) -> tuple[User, str]:
        """Check credentials and issue a bearer token"""
        normalized = (email or "").strip().lower()
        user = self.repo.get_user_by_email(self.db, normalized)
        if not user or not verify_password(password, user.password_hash):
            logger.warning(f"⚠️ Failed login for {normalized}")
            raise AuthenticationError("Invalid email or password")
        if user.account_status != "active":
            raise PermissionDeniedError("Please confirm your email address first")

        token = create_access_token(str(user.id), {"admin": user.is_admin, "vendor": user.is_vendor})
        logger.info(f"🔑 User {user.id} logged in")
        return user, token
