"""Unit tests for the `LegalDependant` entity."""

from datetime import date

import pytest

from tests.helpers.builders import fixed_clock, kes, make_dependant
from urithi.domain.errors import ResultUnwrapError
from urithi.domain.value_objects import Currency, Money

# pylint: disable=magic-value-comparison


def test_annual_provision_is_twelve_months():
    """The yearly need is twelve times the monthly need."""
    dependant = make_dependant(clock=fixed_clock())
    assert dependant.annual_provision == kes(240_000)


@pytest.mark.parametrize(
    ("as_of", "age", "minor"),
    [
        (date(2025, 4, 1), 12, True),
        (date(2030, 4, 1), 17, True),
        (date(2030, 4, 2), 18, False),
    ],
)
def test_age_and_minority(as_of, age, minor):
    """Age counts completed years; majority is at 18 by default."""
    dependant = make_dependant(clock=fixed_clock())
    assert dependant.age_on(as_of) == age
    assert dependant.is_minor(as_of) is minor


def test_age_of_majority_is_configurable():
    """Other jurisdictions can set another threshold."""
    dependant = make_dependant(clock=fixed_clock())
    assert dependant.is_minor(date(2031, 1, 1), age_of_majority=21)


def test_unknown_birth_date():
    """Without a date of birth there is no age and no minority."""
    dependant = make_dependant(clock=fixed_clock(), date_of_birth=None)
    assert dependant.age_on() is None
    assert not dependant.is_minor()


def test_future_birth_date_refused():
    """Dependants cannot be born after today."""
    with pytest.raises(ResultUnwrapError, match="Date of birth cannot be in the future"):
        make_dependant(clock=fixed_clock(), date_of_birth=date(2030, 1, 1))


def test_verify_and_revoke():
    """Verification can be withdrawn."""
    clock = fixed_clock()
    dependant = make_dependant(clock=clock)
    dependant.verify("registrar-1").unwrap()
    assert dependant.is_verified
    assert dependant.verified_at == clock.now()
    assert dependant.verify("registrar-1").error == "Dependant is already verified"
    dependant.revoke_verification().unwrap()
    assert not dependant.is_verified
    assert dependant.verified_by is None
    assert dependant.revoke_verification().error == "Dependant is not verified"


def test_update_monthly_needs():
    """Needs can be revised in the same currency."""
    dependant = make_dependant(clock=fixed_clock())
    dependant.update_monthly_needs(kes(25_000)).unwrap()
    assert dependant.annual_provision == kes(300_000)
    assert dependant.update_monthly_needs(kes(-1)).error == (
        "Monthly needs cannot be negative"
    )
    assert dependant.update_monthly_needs(Money.of(10, Currency.USD)).error == (
        "Monthly needs must stay in the same currency"
    )
