"""Tests for package pricing."""

import pytest

from housnkuh.domain.pricing import (
    calculate_package_price,
    calculate_price,
    duration_discount,
    price_package_snapshot,
)
from housnkuh.shared.exceptions import ValidationError


class TestDurationDiscount:
    @pytest.mark.parametrize("months, expected", [(1, 0.0), (5, 0.0), (6, 0.05), (11, 0.05), (12, 0.10), (24, 0.10)])
    def test_tiers(self, months, expected):
        assert duration_discount(months) == expected


class TestCalculatePrice:
    def test_package_with_storage_service(self):
        price = calculate_package_price({"standard": 2, "cooled": 1}, 12, 7, storage_service=True)
        assert price.unit_costs == 120.0
        assert price.addon_costs == 20.0
        assert price.monthly_total == pytest.approx(126.0)
        assert price.total_for_duration == pytest.approx(1512.0)
        assert price.commission_monthly == pytest.approx(8.82)

    def test_short_rental_has_no_discount(self):
        price = calculate_price([35.0], 3, 4)
        assert price.discount == 0.0
        assert price.monthly_total == 35.0

    def test_rounded_output(self):
        rounded = calculate_price([35.0, 50.0], 6, 4).rounded()
        assert rounded["monthlyTotal"] == 80.75
        assert rounded["commission"]["rate"] == 4

    def test_addons_require_premium(self):
        with pytest.raises(ValidationError):
            calculate_price([35.0], 12, 4, shipping_service=True)

    @pytest.mark.parametrize("duration", [0, 25])
    def test_duration_out_of_range(self, duration):
        with pytest.raises(ValidationError):
            calculate_price([35.0], duration, 4)

    def test_unknown_commission_rate(self):
        with pytest.raises(ValidationError):
            calculate_price([35.0], 12, 5)

    def test_negative_unit_price(self):
        with pytest.raises(ValidationError):
            calculate_price([-1.0], 12, 4)

    def test_unknown_unit_type(self):
        with pytest.raises(ValidationError):
            calculate_package_price({"freezer": 1}, 12, 4)


class TestSnapshotPricing:
    def test_recomputes_from_snapshot(self):
        snapshot = {
            "unitCounts": {"premium": 1},
            "rentalDuration": 6,
            "commissionRate": 7,
            "shippingService": True,
        }
        price = price_package_snapshot(snapshot)
        assert price.monthly_total == pytest.approx((60.0 + 5.0) * 0.95)
