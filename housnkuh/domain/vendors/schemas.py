"""Vendor domain schemas - registration, confirmation and login"""

from datetime import date
from typing import Optional

from pydantic import BaseModel


class PackageSelection(BaseModel):
    """Package chosen in the package builder"""

    packageName: str
    unitCounts: dict[str, int]
    rentalDuration: int
    commissionType: str = "basic"  # basic (4%) or premium (7%)
    storageService: bool = False
    shippingService: bool = False
    monthlyPrice: float = 0.0  # As shown to the vendor; recomputed on the server
    setupFee: float = 0.0
    desiredStartDate: Optional[date] = None


class VendorRegistrationRequest(BaseModel):
    email: str
    password: str
    name: str
    phone: Optional[str] = None
    company: Optional[str] = None
    street: str
    houseNumber: str
    postalCode: str
    city: str
    package: PackageSelection


class VendorRegistrationResponse(BaseModel):
    userId: int
    email: str
    bookingStatus: str
    monthlyPrice: float
    message: str


class ConfirmEmailRequest(BaseModel):
    token: str


class ConfirmEmailResponse(BaseModel):
    email: str
    accountStatus: str
    bookingStatus: Optional[str] = None
    message: str


class LoginRequest(BaseModel):
    email: str
    password: str


class UserSummary(BaseModel):
    id: int
    email: str
    name: str
    isVendor: bool
    isAdmin: bool


class TokenResponse(BaseModel):
    accessToken: str
    tokenType: str = "bearer"
    user: UserSummary
