"""Unit tests for the `GiftInterVivos` entity."""

from datetime import date
from decimal import Decimal

import pytest

from tests.helpers.builders import DATE_OF_DEATH, fixed_clock, kes, make_gift
from urithi.domain.entities import GiftInterVivos

# pylint: disable=magic-value-comparison,too-few-public-methods


class TestGiftCreation:
    """Tests for `GiftInterVivos.create`."""

    @staticmethod
    def test_defaults():
        """New gifts are subject to hotchpot but not yet verified."""
        gift = make_gift(clock=fixed_clock())
        assert gift.is_subject_to_hotchpot
        assert not gift.is_verified
        assert not gift.counts_toward_hotchpot
        assert gift.hotchpot_value == kes(200_000)

    @staticmethod
    @pytest.mark.parametrize(
        ("overrides", "message"),
        [
            ({"value_at_gift_time": kes(0)}, "Gift value must be greater than zero"),
            ({"date_of_gift": date(2031, 1, 1)}, "Gift date cannot be in the future"),
            ({"recipient_id": " "}, "Gift recipient is required"),
            ({"description": ""}, "Gift description is required"),
        ],
    )
    def test_invalid(overrides, message):
        """Each broken rule is reported."""
        kwargs = {
            "gift_id": "gift-1",
            "estate_id": "estate-1",
            "recipient_id": "child-1",
            "description": "Car",
            "value_at_gift_time": kes(1_000),
            "date_of_gift": date(2020, 1, 1),
            "clock": fixed_clock(),
        }
        kwargs.update(overrides)
        result = GiftInterVivos.create(**kwargs)
        assert result.is_failure
        assert message in result.error


class TestGiftHotchpot:
    """Tests for verification and hotchpot membership."""

    @staticmethod
    def test_verified_gift_counts():
        """Verification brings the gift into hotchpot."""
        clock = fixed_clock()
        gift = make_gift(clock=clock)
        gift.verify("registrar-1").unwrap()
        assert gift.counts_toward_hotchpot
        assert gift.verified_at == clock.now()
        assert gift.verify("registrar-1").error == "Gift is already verified"

    @staticmethod
    def test_exclude_and_include():
        """Excluded gifts do not count even when verified."""
        gift = make_gift(clock=fixed_clock())
        gift.verify("registrar-1").unwrap()
        gift.exclude_from_hotchpot("Customary gift on marriage").unwrap()
        assert not gift.counts_toward_hotchpot
        assert gift.exclusion_reason == "Customary gift on marriage"
        assert gift.exclude_from_hotchpot("again").error == (
            "Gift is already excluded from hotchpot"
        )
        gift.include_in_hotchpot().unwrap()
        assert gift.counts_toward_hotchpot
        assert gift.exclusion_reason is None
        assert gift.include_in_hotchpot().error == "Gift is already subject to hotchpot"


class TestInflationAdjustment:
    """Tests for `calculate_inflation_adjusted_value`."""

    @staticmethod
    def test_compounds_over_fractional_years():
        """Five years at 5% is a little over 1.276 times the original value."""
        gift = make_gift(clock=fixed_clock())
        adjusted = gift.calculate_inflation_adjusted_value(
            DATE_OF_DEATH, Decimal("0.05")
        ).unwrap()
        assert kes(255_000) < adjusted < kes(255_300)
        assert gift.inflation_adjusted_value == adjusted
        assert gift.hotchpot_value == adjusted

    @staticmethod
    def test_zero_rate_keeps_value():
        """With no inflation the value is unchanged."""
        gift = make_gift(clock=fixed_clock())
        assert gift.calculate_inflation_adjusted_value(
            DATE_OF_DEATH, Decimal(0)
        ).unwrap() == kes(200_000)

    @staticmethod
    @pytest.mark.parametrize(
        ("date_of_death", "rate", "message"),
        [
            (date(2020, 3, 15), Decimal("0.05"), "Date of death must be after the date of the gift"),
            (date(2019, 1, 1), Decimal("0.05"), "Date of death must be after the date of the gift"),
            (DATE_OF_DEATH, Decimal("-0.01"), "Inflation rate cannot be negative"),
        ],
    )
    def test_invalid(date_of_death, rate, message):
        """Bad inputs leave the gift untouched."""
        gift = make_gift(clock=fixed_clock())
        result = gift.calculate_inflation_adjusted_value(date_of_death, rate)
        assert result.error == message
        assert gift.inflation_adjusted_value is None
