"""Tests for the shipping cost calculator."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from storefront.errors import NotServiceableError, ValidationError
from storefront.schemas.address_schemas import ShippingAddress
from storefront.schemas.settings_schemas import SiteConfig
from storefront.services.shipping_service import (
    calculate_shipping,
    format_display_date,
    is_serviceable,
    shipping_info,
    validate_address,
)

from conftest import FIXED_NOW


class TestCalculateShipping:
    def test_kashmir_below_threshold(self, srinagar_address):
        calc = calculate_shipping(srinagar_address, Decimal("1500"), now=FIXED_NOW)

        assert calc.zone.id == "kashmir"
        assert calc.shipping_cost == Decimal("50")
        assert calc.is_free_shipping is False
        assert calc.amount_to_free_shipping == Decimal("500")
        assert calc.free_shipping_threshold == Decimal("2000")
        assert calc.courier_partner == "Blue Dart"

    def test_kashmir_above_threshold_ships_free(self, srinagar_address):
        calc = calculate_shipping(srinagar_address, 2500, now=FIXED_NOW)

        assert calc.shipping_cost == 0
        assert calc.is_free_shipping is True
        assert calc.amount_to_free_shipping == 0
        assert calc.base_rate == Decimal("50")

    def test_exactly_at_threshold_is_free(self, srinagar_address):
        calc = calculate_shipping(srinagar_address, "2000.00", now=FIXED_NOW)
        assert calc.is_free_shipping is True
        assert calc.shipping_cost == 0

    def test_general_india_rate(self):
        address = ShippingAddress(state="Maharashtra", country="India")
        calc = calculate_shipping(address, 500, now=FIXED_NOW)

        assert calc.zone.id == "india"
        assert calc.shipping_cost == Decimal("100")
        assert calc.amount_to_free_shipping == Decimal("1500")

    def test_unlisted_country_blocks_with_not_serviceable(self):
        with pytest.raises(NotServiceableError):
            calculate_shipping(ShippingAddress(country="Unlisted Country"), 100, now=FIXED_NOW)

    def test_fractional_subtotal_is_not_rounded_early(self, srinagar_address):
        calc = calculate_shipping(srinagar_address, "1999.995", now=FIXED_NOW)
        assert calc.is_free_shipping is False
        assert calc.amount_to_free_shipping == Decimal("0.005")

    def test_float_subtotal_accepted(self, srinagar_address):
        calc = calculate_shipping(srinagar_address, 1500.5, now=FIXED_NOW)
        assert calc.amount_to_free_shipping == Decimal("499.5")


class TestCalculateValidation:
    @pytest.mark.parametrize("subtotal", [-1, "-0.01", Decimal("-5")])
    def test_negative_subtotal_rejected(self, srinagar_address, subtotal):
        with pytest.raises(ValidationError) as exc_info:
            calculate_shipping(srinagar_address, subtotal)
        assert exc_info.value.field == "order_total"

    @pytest.mark.parametrize("subtotal", ["abc", None, "NaN", "Infinity", True])
    def test_non_numeric_subtotal_rejected(self, srinagar_address, subtotal):
        with pytest.raises(ValidationError):
            calculate_shipping(srinagar_address, subtotal)

    def test_subtotal_checked_before_zone_lookup(self):
        # unlisted country would be NotServiceable, but the amount fails first
        with pytest.raises(ValidationError):
            calculate_shipping(ShippingAddress(country="Unlisted Country"), -10)

    def test_domestic_address_needs_state(self):
        with pytest.raises(ValidationError) as exc_info:
            calculate_shipping(ShippingAddress(city="Pune", country="IN"), 100)
        assert exc_info.value.field == "state"

    def test_blank_country_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            calculate_shipping(ShippingAddress(city="Pune", state="Maharashtra", country="  "), 100)
        assert exc_info.value.field == "country"


class TestDeliveryEstimate:
    def test_calendar_days_added_in_reference_timezone(self, srinagar_address):
        calc = calculate_shipping(srinagar_address, 100, now=FIXED_NOW)
        estimate = calc.estimated_delivery

        assert (estimate.min_days, estimate.max_days) == (2, 3)
        assert estimate.min_date == date(2025, 1, 17)
        assert estimate.max_date == date(2025, 1, 18)

    def test_late_utc_evening_is_next_day_in_india(self, srinagar_address):
        # 20:00 UTC is 01:30 IST the following day
        now = datetime(2025, 1, 15, 20, 0, tzinfo=timezone.utc)
        calc = calculate_shipping(srinagar_address, 100, now=now)
        assert calc.estimated_delivery.min_date == date(2025, 1, 18)

    def test_weekends_are_not_skipped(self, srinagar_address):
        # Friday + 2 calendar days lands on Sunday
        calc = calculate_shipping(srinagar_address, 100, now=datetime(2025, 1, 17, 6, 0))
        assert calc.estimated_delivery.min_date == date(2025, 1, 19)

    def test_repeated_calls_are_deterministic(self, srinagar_address):
        first = calculate_shipping(srinagar_address, 1500, now=FIXED_NOW)
        second = calculate_shipping(srinagar_address, 1500, now=FIXED_NOW)
        assert first == second


class TestAddressValidation:
    def test_complete_address_is_valid(self, srinagar_address):
        assert validate_address(srinagar_address) == []

    def test_missing_fields_reported(self):
        errors = validate_address(ShippingAddress(country="IN"))
        assert "City is required" in errors
        assert "State is required" in errors
        assert "Postal code is required" in errors

    def test_indian_pin_must_be_six_digits(self):
        address = ShippingAddress(city="Srinagar", state="Kashmir", country="India", postal_code="1900")
        assert validate_address(address) == ["Invalid Indian PIN code. Must be 6 digits."]

    def test_foreign_postcode_not_checked_as_pin(self):
        address = ShippingAddress(city="London", state="England", country="GB", postal_code="SW1A 1AA")
        assert validate_address(address) == []

    def test_is_serviceable(self, srinagar_address):
        assert is_serviceable(srinagar_address) is True
        assert is_serviceable(ShippingAddress(country="Unlisted Country")) is False


class TestShippingInfo:
    def test_prompt_and_estimate(self, srinagar_address):
        info = shipping_info(srinagar_address, 1500, SiteConfig(), now=FIXED_NOW)

        assert info.zone_name == "Kashmir & J&K"
        assert info.free_shipping_prompt == "Add ₹500.00 more for free shipping"
        assert info.delivery_estimate == "Jan 17, 2025 - Jan 18, 2025"

    def test_no_prompt_when_free(self, srinagar_address):
        info = shipping_info(srinagar_address, 2500, SiteConfig(), now=FIXED_NOW)
        assert info.free_shipping_prompt is None

    def test_currency_symbol_comes_from_site_config(self, srinagar_address):
        config = SiteConfig(currency_symbol="Rs. ")
        info = shipping_info(srinagar_address, 1000, config, now=FIXED_NOW)
        assert info.free_shipping_prompt == "Add Rs. 1,000.00 more for free shipping"

    def test_format_display_date(self):
        assert format_display_date(date(2025, 3, 4)) == "Mar 4, 2025"
