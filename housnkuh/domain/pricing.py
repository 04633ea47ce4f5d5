"""Package pricing - monthly rent, add-ons, duration discounts and commission"""

from dataclasses import dataclass
from typing import Iterable, Optional

from ..shared.exceptions import ValidationError

UNIT_TYPES = ("standard", "cooled", "premium", "other")

# EUR per month, matches the package builder on the website
UNIT_TYPE_BASE_PRICES = {
    "standard": 35.0,
    "cooled": 50.0,
    "premium": 60.0,
    "other": 0.0,  # Priced on request
}

ADDON_PRICES = {
    "storage_service": 20.0,
    "shipping_service": 5.0,
}

COMMISSION_RATES = {"basic": 4, "premium": 7}
PREMIUM_COMMISSION_RATE = COMMISSION_RATES["premium"]

MIN_RENTAL_DURATION = 1
MAX_RENTAL_DURATION = 24


@dataclass(frozen=True)
class PriceBreakdown:
    unit_costs: float
    addon_costs: float
    subtotal: float
    discount: float  # Fraction, 0.1 = 10%
    discount_amount: float
    monthly_total: float
    total_for_duration: float
    commission_rate: int
    commission_monthly: float
    commission_total: float

    def rounded(self) -> dict:
        """API representation with cent precision"""
        return {
            "unitCosts": round(self.unit_costs, 2),
            "addonCosts": round(self.addon_costs, 2),
            "subtotal": round(self.subtotal, 2),
            "discount": round(self.discount, 4),
            "discountAmount": round(self.discount_amount, 2),
            "monthlyTotal": round(self.monthly_total, 2),
            "totalForDuration": round(self.total_for_duration, 2),
            "commission": {
                "rate": self.commission_rate,
                "monthlyAmount": round(self.commission_monthly, 2),
                "totalAmount": round(self.commission_total, 2),
            },
        }


def duration_discount(rental_duration: int) -> float:
    """Automatic discount tier for longer rentals"""
    if rental_duration >= 12:
        return 0.10
    if rental_duration >= 6:
        return 0.05
    return 0.0


def calculate_addon_costs(storage_service: bool, shipping_service: bool, commission_rate: int) -> float:
    if (storage_service or shipping_service) and commission_rate != PREMIUM_COMMISSION_RATE:
        raise ValidationError("Add-on services are only available with the premium model (7%)")

    costs = 0.0
    if storage_service:
        costs += ADDON_PRICES["storage_service"]
    if shipping_service:
        costs += ADDON_PRICES["shipping_service"]
    return costs


def calculate_price(
    unit_prices: Iterable[float],
    rental_duration: int,
    commission_rate: int,
    storage_service: bool = False,
    shipping_service: bool = False,
    discount: Optional[float] = None,
) -> PriceBreakdown:
    """
    Price a set of units for a rental period.

    Args:
        unit_prices: Monthly price of each rented unit
        rental_duration: Paid months (1-24)
        commission_rate: 4 (basic) or 7 (premium)
        storage_service: Storage add-on booked
        shipping_service: Shipping add-on booked
        discount: Explicit discount fraction; defaults to the duration tier

    Raises:
        ValidationError: On out-of-range input or add-ons without premium
    """
    prices = list(unit_prices)
    if not prices:
        raise ValidationError("At least one rental unit is required")
    if any(price < 0 for price in prices):
        raise ValidationError("Unit prices must not be negative")
    if not MIN_RENTAL_DURATION <= rental_duration <= MAX_RENTAL_DURATION:
        raise ValidationError(
            f"Rental duration must be between {MIN_RENTAL_DURATION} and {MAX_RENTAL_DURATION} months"
        )
    if commission_rate not in COMMISSION_RATES.values():
        raise ValidationError("Commission rate must be 4% (basic) or 7% (premium)")
    if discount is not None and not 0 <= discount < 1:
        raise ValidationError("Discount must be a fraction between 0 and 1")

    unit_costs = sum(prices)
    addon_costs = calculate_addon_costs(storage_service, shipping_service, commission_rate)
    subtotal = unit_costs + addon_costs
    applied_discount = duration_discount(rental_duration) if discount is None else discount
    discount_amount = subtotal * applied_discount
    monthly_total = subtotal - discount_amount
    commission_monthly = monthly_total * commission_rate / 100

    return PriceBreakdown(
        unit_costs=unit_costs,
        addon_costs=addon_costs,
        subtotal=subtotal,
        discount=applied_discount,
        discount_amount=discount_amount,
        monthly_total=monthly_total,
        total_for_duration=monthly_total * rental_duration,
        commission_rate=commission_rate,
        commission_monthly=commission_monthly,
        commission_total=commission_monthly * rental_duration,
    )


def calculate_package_price(
    unit_counts: dict[str, int],
    rental_duration: int,
    commission_rate: int,
    storage_service: bool = False,
    shipping_service: bool = False,
) -> PriceBreakdown:
    """Price a package from unit-type counts using the catalog base prices"""
    unknown = set(unit_counts) - set(UNIT_TYPES)
    if unknown:
        raise ValidationError(f"Unknown rental unit type(s): {', '.join(sorted(unknown))}")

    unit_prices = []
    for unit_type, count in unit_counts.items():
        unit_prices.extend([UNIT_TYPE_BASE_PRICES[unit_type]] * count)

    return calculate_price(
        unit_prices,
        rental_duration,
        commission_rate,
        storage_service=storage_service,
        shipping_service=shipping_service,
    )


def price_package_snapshot(package_data: dict) -> PriceBreakdown:
    """Recompute the price of a stored booking request snapshot"""
    return calculate_package_price(
        package_data.get("unitCounts") or {},
        int(package_data.get("rentalDuration") or 0),
        int(package_data.get("commissionRate") or 0),
        storage_service=bool(package_data.get("storageService")),
        shipping_service=bool(package_data.get("shippingService")),
    )
