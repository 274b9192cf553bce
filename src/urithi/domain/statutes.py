"""Versioned statutory schedules.

The figures the engine applies (executor compensation bands, the Section 45
payment order, the list of offences that disqualify an executor, the age of
majority, limitation periods) codify a specific revision of the Law of
Succession Act and related statutes. They live here as data so that an
amendment is a new `StatuteSchedule`, not a code change.

`DEFAULT_STATUTE_SCHEDULE` is used wherever a caller does not supply one.
Deployments can load a replacement from JSON with `schedule_from_dict`
(see `urithi.config.load_statute_schedule`).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from urithi.domain.errors import (
    CurrencyMismatchError,
    InvalidMoneyError,
    StatuteScheduleError,
)
from urithi.domain.value_objects import (
    Currency,
    DebtPriority,
    LiabilityTier,
    Money,
    coerce_decimal,
)

# pylint: disable=too-many-instance-attributes


@dataclass(frozen=True, slots=True)
class CompensationBand:
    """One marginal slice of the executor compensation scale.

    ``upper_bound`` is inclusive; ``None`` means the band is open-ended.
    """

    upper_bound: Decimal | None
    rate: Decimal


@dataclass(frozen=True, slots=True)
class BandCharge:
    """The fee charged on one band for a particular estate value."""

    lower_bound: Decimal
    upper_bound: Decimal | None
    rate: Decimal
    slice_amount: Money
    fee: Money


@dataclass(frozen=True)
class StatuteSchedule:
    """A versioned table of statutory constants."""

    version: str
    currency: Currency
    age_of_majority: int
    compensation_bands: tuple[CompensationBand, ...]
    disqualifying_offences: tuple[str, ...]
    tier_ranks: Mapping[LiabilityTier, int]
    critical_tiers: frozenset[LiabilityTier]
    limitation_years_secured: int = 12
    limitation_years_unsecured: int = 6
    minimum_witnesses: int = 2
    hotchpot_inflation_rate: Decimal = field(default=Decimal("0.05"))

    def __post_init__(self) -> None:
        if not self.version.strip():
            raise StatuteScheduleError("A statute schedule needs a version label.")
        if self.age_of_majority < 1:
            raise StatuteScheduleError("age_of_majority must be positive.")
        self._check_bands()
        missing = set(LiabilityTier) - set(self.tier_ranks)
        if missing:
            names = sorted(tier.value for tier in missing)
            raise StatuteScheduleError(f"No priority rank for tiers: {names}")
        if any(rank < 1 for rank in self.tier_ranks.values()):
            raise StatuteScheduleError("Priority ranks must be >= 1.")
        if self.minimum_witnesses < 1:
            raise StatuteScheduleError("minimum_witnesses must be >= 1.")

    def _check_bands(self) -> None:
        if not self.compensation_bands:
            raise StatuteScheduleError("At least one compensation band is required.")
        *bounded, last = self.compensation_bands
        if last.upper_bound is not None:
            raise StatuteScheduleError("The last compensation band must be open-ended.")
        previous = Decimal(0)
        for band in bounded:
            if band.upper_bound is None or band.upper_bound <= previous:
                raise StatuteScheduleError(
                    "Compensation band bounds must be strictly increasing."
                )
            previous = band.upper_bound
        for band in self.compensation_bands:
            if not Decimal(0) <= band.rate <= Decimal(1):
                raise StatuteScheduleError(
                    f"Band rate must be a fraction in [0, 1], got {band.rate}."
                )

    # --- Debt priority ---

    def priority_for(self, tier: LiabilityTier) -> DebtPriority:
        """Return the payment priority this schedule assigns to *tier*."""
        return DebtPriority(
            rank=self.tier_ranks[tier],
            tier=tier,
            critical=tier in self.critical_tiers,
        )

    # --- Executor compensation ---

    def statutory_fee_breakdown(self, net_value: Money) -> list[BandCharge]:
        """Split *net_value* across the marginal bands.

        Raises:
            CurrencyMismatchError: If *net_value* is not in the schedule's currency.
        """
        if net_value.currency is not self.currency:
            raise CurrencyMismatchError(net_value.currency.value, self.currency.value)

        charges: list[BandCharge] = []
        lower = Decimal(0)
        for band in self.compensation_bands:
            if net_value.amount <= lower:
                break
            top = (
                net_value.amount
                if band.upper_bound is None
                else min(net_value.amount, band.upper_bound)
            )
            slice_amount = Money(top - lower, self.currency)
            charges.append(
                BandCharge(
                    lower_bound=lower,
                    upper_bound=band.upper_bound,
                    rate=band.rate,
                    slice_amount=slice_amount,
                    fee=slice_amount * band.rate,
                )
            )
            if band.upper_bound is None:
                break
            lower = band.upper_bound
        return charges

    def statutory_fee(self, net_value: Money) -> Money:
        """Executor compensation on the statutory scale for *net_value*."""
        return Money.sum(
            (charge.fee for charge in self.statutory_fee_breakdown(net_value)),
            self.currency,
        )

    # --- Executor eligibility ---

    def matches_disqualifying_offence(self, details: str | None) -> list[str]:
        """Return the disqualifying offences mentioned in *details*."""
        if not details:
            return []
        text = _normalise_offence(details)
        return [
            offence
            for offence in self.disqualifying_offences
            if _normalise_offence(offence) in text
        ]


def _normalise_offence(text: str) -> str:
    return " ".join(text.upper().replace("_", " ").replace("-", " ").split())


KENYA_LSA_SCHEDULE = StatuteSchedule(
    version="KE-LSA-CAP160-2024",
    currency=Currency.KES,
    age_of_majority=18,
    compensation_bands=(
        CompensationBand(Decimal("100000"), Decimal("0.04")),
        CompensationBand(Decimal("500000"), Decimal("0.03")),
        CompensationBand(Decimal("1000000"), Decimal("0.02")),
        CompensationBand(None, Decimal("0.01")),
    ),
    disqualifying_offences=(
        "FRAUD",
        "THEFT",
        "FORGERY",
        "EMBEZZLEMENT",
        "PERJURY",
        "MONEY LAUNDERING",
        "CORRUPTION",
    ),
    tier_ranks={
        LiabilityTier.FUNERAL_EXPENSES: 1,
        LiabilityTier.SECURED_DEBTS: 2,
        LiabilityTier.TAXES_RATES_WAGES: 3,
        LiabilityTier.UNSECURED_GENERAL: 4,
    },
    critical_tiers=frozenset(
        {
            LiabilityTier.FUNERAL_EXPENSES,
            LiabilityTier.SECURED_DEBTS,
            LiabilityTier.TAXES_RATES_WAGES,
        }
    ),
)

DEFAULT_STATUTE_SCHEDULE = KENYA_LSA_SCHEDULE


def schedule_from_dict(data: Mapping[str, Any]) -> StatuteSchedule:
    """Build a schedule from plain data (e.g. parsed JSON).

    Keys mirror the `StatuteSchedule` fields. Bands are a list of
    ``{"upper_bound": <number|null>, "rate": <number>}``; tiers are keyed by
    `LiabilityTier` value. Omitted optional keys fall back to the defaults of
    `DEFAULT_STATUTE_SCHEDULE`.

    Raises:
        StatuteScheduleError: If required keys are missing or values are invalid.
    """
    base = DEFAULT_STATUTE_SCHEDULE
    try:
        bands = tuple(
            CompensationBand(
                upper_bound=(
                    None
                    if band.get("upper_bound") is None
                    else coerce_decimal(band["upper_bound"])
                ),
                rate=coerce_decimal(band["rate"]),
            )
            for band in data["compensation_bands"]
        )
        tier_ranks = {
            LiabilityTier(name): int(rank)
            for name, rank in data.get(
                "tier_ranks", {t.value: r for t, r in base.tier_ranks.items()}
            ).items()
        }
        critical = frozenset(
            LiabilityTier(name)
            for name in data.get(
                "critical_tiers", [t.value for t in base.critical_tiers]
            )
        )
        return StatuteSchedule(
            version=str(data["version"]),
            currency=Currency(data.get("currency", base.currency.value)),
            age_of_majority=int(data.get("age_of_majority", base.age_of_majority)),
            compensation_bands=bands,
            disqualifying_offences=tuple(
                str(o)
                for o in data.get("disqualifying_offences", base.disqualifying_offences)
            ),
            tier_ranks=tier_ranks,
            critical_tiers=critical,
            limitation_years_secured=int(
                data.get("limitation_years_secured", base.limitation_years_secured)
            ),
            limitation_years_unsecured=int(
                data.get("limitation_years_unsecured", base.limitation_years_unsecured)
            ),
            minimum_witnesses=int(
                data.get("minimum_witnesses", base.minimum_witnesses)
            ),
            hotchpot_inflation_rate=coerce_decimal(
                data.get("hotchpot_inflation_rate", base.hotchpot_inflation_rate)
            ),
        )
    except StatuteScheduleError:
        raise
    except (KeyError, TypeError, ValueError, InvalidMoneyError) as e:
        raise StatuteScheduleError(f"Malformed statute schedule: {e}") from e
