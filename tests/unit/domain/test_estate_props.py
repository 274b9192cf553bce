"""Hypothesis property tests for the estate's financial position.

These properties hold whatever the figures:

- **Net value**: after any interleaving of asset and debt additions,
  removals and payments,
  ``net_estate_value == max(0, gross_value - total_liabilities)``.
- **Solvency**: the estate is solvent exactly when the insolvency shortfall
  is zero.
- **Fee monotonicity**: a larger net estate never attracts a smaller
  statutory executor fee, and the fee equals the sum of its band charges.

A fresh estate is built per generated example to avoid state bleed.
"""

from __future__ import annotations

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from tests.helpers.builders import add_verified_asset, kes, make_debt, make_estate
from urithi.domain.statutes import DEFAULT_STATUTE_SCHEDULE
from urithi.domain.value_objects import Money

pytestmark = [pytest.mark.property]

amounts = st.integers(min_value=0, max_value=50_000_000)
positive_amounts = st.integers(min_value=1, max_value=50_000_000)


@settings(max_examples=75, deadline=None)
@given(
    asset_values=st.lists(amounts, max_size=5),
    debt_amounts=st.lists(positive_amounts, max_size=5),
    payment_fraction=st.integers(min_value=0, max_value=100),
)
def test_net_value_invariant(asset_values, debt_amounts, payment_fraction):
    """The cached net value always matches the clamped difference."""
    estate = make_estate()

    def check():
        expected = (estate.gross_value - estate.total_liabilities).clamp_at_zero()
        assert estate.net_estate_value == expected
        assert estate.is_solvent() == estate.get_insolvency_shortfall().is_zero

    for n, value in enumerate(asset_values):
        add_verified_asset(estate, f"asset-{n}", value=value)
        check()
    for n, amount in enumerate(debt_amounts):
        estate.add_debt(make_debt(f"debt-{n}", clock=estate.clock, amount=amount)).unwrap()
        check()
    for debt in estate.get_debts_by_priority(outstanding_only=True):
        payment = debt.outstanding_balance.amount * payment_fraction // 100
        if payment > 0:
            estate.record_debt_payment(debt.id, kes(payment)).unwrap()
            check()

    assert estate.gross_value == Money.sum(kes(v) for v in asset_values)


operations = st.lists(
    st.one_of(
        st.tuples(st.just("add_asset"), amounts),
        st.tuples(st.just("add_debt"), positive_amounts),
        st.tuples(st.just("remove_asset"), st.integers(min_value=0, max_value=9)),
        st.tuples(st.just("remove_debt"), st.integers(min_value=0, max_value=9)),
        st.tuples(st.just("pay"), st.integers(min_value=0, max_value=9)),
    ),
    max_size=25,
)


@settings(max_examples=75, deadline=None)
@given(steps=operations)
def test_net_value_invariant_with_removals(steps):
    """Removals interleaved with additions and payments keep the totals in step."""
    estate = make_estate()
    values: dict[str, int] = {}

    for n, (action, number) in enumerate(steps):
        assets = [a.id for a in estate.assets]
        debts = [d.id for d in estate.debts if d.is_outstanding]
        if action == "add_asset":
            add_verified_asset(estate, f"asset-{n}", value=number)
            values[f"asset-{n}"] = number
        elif action == "add_debt":
            estate.add_debt(make_debt(f"debt-{n}", clock=estate.clock, amount=number)).unwrap()
        elif action == "remove_asset" and assets:
            asset_id = assets[number % len(assets)]
            estate.remove_asset(asset_id).unwrap()
            del values[asset_id]
        elif action == "remove_debt" and estate.debts:
            estate.remove_debt(estate.debts[number % len(estate.debts)].id).unwrap()
        elif action == "pay" and debts:
            first = estate.get_debts_by_priority(outstanding_only=True)[0]
            payment = first.outstanding_balance.amount * (number + 1) // 10
            if payment > 0:
                estate.record_debt_payment(first.id, kes(payment)).unwrap()

        expected = (estate.gross_value - estate.total_liabilities).clamp_at_zero()
        assert estate.net_estate_value == expected
        assert estate.gross_value == Money.sum(kes(v) for v in values.values())
        estate.validate()


@given(low=amounts, extra=amounts)
def test_fee_is_monotonic(low, extra):
    """Fees never fall as the estate grows."""
    schedule = DEFAULT_STATUTE_SCHEDULE
    assert schedule.statutory_fee(kes(low)) <= schedule.statutory_fee(kes(low + extra))


@given(value=amounts)
def test_fee_is_sum_of_band_charges(value):
    """The fee is the total of the marginal band charges."""
    schedule = DEFAULT_STATUTE_SCHEDULE
    charges = schedule.statutory_fee_breakdown(kes(value))
    total = Money.sum(charge.fee for charge in charges)
    assert schedule.statutory_fee(kes(value)) == total
