"""Unit tests for domain value objects.

Scope:
    - `Money` quantization, arithmetic and currency safety.
    - `Percentage` bounds.
    - `DebtPriority` ordering.
    - Person identities and `same_person`.
    - `WitnessSignature` capture, verification and validity.
"""

import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from urithi.domain.errors import (
    CurrencyMismatchError,
    InvalidMoneyError,
    InvalidPercentageError,
)
from urithi.domain.value_objects import (
    Currency,
    DebtPriority,
    ExternalPerson,
    LiabilityTier,
    Money,
    Percentage,
    RegisteredUser,
    SignatureStatus,
    SignatureType,
    WitnessSignature,
    coerce_decimal,
    same_person,
)

# pylint: disable=magic-value-comparison,too-few-public-methods

SIGNED_AT = datetime(2025, 6, 1, 10, 0, tzinfo=timezone.utc)


class TestCoerceDecimal:
    """Tests for `coerce_decimal`."""

    @staticmethod
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            (10, Decimal("10")),
            ("12.50", Decimal("12.50")),
            (0.1, Decimal("0.1")),
            (Decimal("3.14"), Decimal("3.14")),
        ],
    )
    def test_accepts_numbers(raw, expected):
        """Ints, strings, floats and decimals all become exact decimals."""
        assert coerce_decimal(raw) == expected

    @staticmethod
    @pytest.mark.parametrize("raw", [None, True, "ten", object()])
    def test_rejects_non_numbers(raw):
        """Booleans, None and garbage are not amounts."""
        with pytest.raises(InvalidMoneyError, match="Not a numeric amount"):
            coerce_decimal(raw)


class TestMoney:
    """Tests for `Money`."""

    @staticmethod
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("1.005", Decimal("1.01")),
            ("2.675", Decimal("2.68")),
            ("2.674", Decimal("2.67")),
            (100, Decimal("100.00")),
        ],
    )
    def test_quantized_half_up(raw, expected):
        """Amounts are rounded half-up to two places."""
        assert Money.of(raw).amount == expected

    @staticmethod
    def test_default_currency_is_kes():
        """Money defaults to Kenya shillings."""
        assert Money.of(1).currency is Currency.KES

    @staticmethod
    def test_currency_string_accepted():
        """A currency code string is converted to the enum."""
        assert Money.of(5, "USD").currency is Currency.USD

    @staticmethod
    def test_non_finite_rejected():
        """NaN and infinity are not money."""
        with pytest.raises(InvalidMoneyError, match="finite"):
            Money.of("NaN")

    @staticmethod
    def test_str_formats_with_thousands():
        """The display form groups thousands and shows two decimals."""
        assert str(Money.of(1_000)) == "KES 1,000.00"
        assert str(Money.of("1234567.8", Currency.USD)) == "USD 1,234,567.80"

    @staticmethod
    def test_arithmetic():
        """Addition, subtraction and scaling stay in the same currency."""
        a = Money.of(100)
        b = Money.of("25.50")
        assert (a + b).amount == Decimal("125.50")
        assert (a - b).amount == Decimal("74.50")
        assert (a * 3).amount == Decimal("300.00")
        assert (2 * a).amount == Decimal("200.00")

    @staticmethod
    def test_money_times_money_rejected():
        """Multiplying two amounts has no meaning."""
        with pytest.raises(TypeError, match="Money cannot be multiplied by Money"):
            _ = Money.of(2) * Money.of(3)

    @staticmethod
    def test_mixed_currency_arithmetic_raises():
        """No implicit conversion between currencies."""
        with pytest.raises(CurrencyMismatchError, match="cannot combine KES with USD"):
            _ = Money.of(1) + Money.of(1, Currency.USD)

    @staticmethod
    def test_mixed_currency_comparison_raises():
        """Ordering across currencies is refused too."""
        with pytest.raises(CurrencyMismatchError):
            _ = Money.of(1) < Money.of(2, Currency.EUR)

    @staticmethod
    def test_comparisons():
        """Amounts in one currency order by value."""
        small, big = Money.of(1), Money.of(2)
        assert small < big
        assert small <= Money.of(1)
        assert big > small
        assert big >= Money.of(2)
        assert Money.of(1) == Money.of("1.00")

    @staticmethod
    def test_sum_and_zero():
        """`sum` of nothing is zero in the requested currency."""
        assert Money.sum([], Currency.UGX) == Money.zero(Currency.UGX)
        assert Money.sum([Money.of(1), Money.of(2)]).amount == Decimal("3.00")

    @staticmethod
    def test_percentage():
        """`percentage` takes a percent, not a fraction."""
        assert Money.of(200_000).percentage(15).amount == Decimal("30000.00")

    @staticmethod
    def test_clamp_and_sign_predicates():
        """Sign helpers and clamping."""
        negative = Money.of(-5)
        assert negative.is_negative
        assert negative.clamp_at_zero().is_zero
        assert Money.of(5).is_positive
        assert Money.of(5).clamp_at_zero() == Money.of(5)


class TestPercentage:
    """Tests for `Percentage`."""

    @staticmethod
    @pytest.mark.parametrize("value", [0, 50, 100, "12.5"])
    def test_in_range(value):
        """Values in 0..100 inclusive are accepted."""
        assert Percentage(value).value == Decimal(str(value))

    @staticmethod
    @pytest.mark.parametrize("value", [-1, "100.01", 250])
    def test_out_of_range(value):
        """Values outside 0..100 raise."""
        with pytest.raises(
            InvalidPercentageError, match="Percentage must be between 0 and 100"
        ):
            Percentage(value)

    @staticmethod
    def test_create_returns_failure():
        """The `Result` constructor reports instead of raising."""
        result = Percentage.create(150)
        assert result.is_failure
        assert result.error == "Percentage must be between 0 and 100, got 150."

    @staticmethod
    def test_create_rejects_garbage():
        """Non-numeric input is a failure, not an exception."""
        assert Percentage.create("half").is_failure

    @staticmethod
    def test_of_and_fraction():
        """Applying a percentage to money."""
        quarter = Percentage(25)
        assert quarter.fraction == Decimal("0.25")
        assert quarter.of(Money.of(1_000)) == Money.of(250)
        assert Percentage.full().value == Decimal(100)

    @staticmethod
    @pytest.mark.parametrize(("value", "text"), [(50, "50%"), ("12.5", "12.5%")])
    def test_str(value, text):
        """The display form drops trailing zeros."""
        assert str(Percentage(value)) == text


class TestDebtPriority:
    """Tests for `DebtPriority`."""

    @staticmethod
    def test_lower_rank_outranks():
        """Rank 1 is paid before rank 4."""
        funeral = DebtPriority(1, LiabilityTier.FUNERAL_EXPENSES, critical=True)
        general = DebtPriority(4, LiabilityTier.UNSECURED_GENERAL)
        assert funeral.outranks(general)
        assert not general.outranks(funeral)
        assert funeral < general
        assert sorted([general, funeral]) == [funeral, general]

    @staticmethod
    def test_only_rank_compared():
        """Tier and criticality do not take part in equality."""
        assert DebtPriority(2, LiabilityTier.SECURED_DEBTS, True) == DebtPriority(
            2, LiabilityTier.UNSECURED_GENERAL, False
        )

    @staticmethod
    def test_rank_must_be_positive():
        """Rank zero is rejected."""
        with pytest.raises(ValueError, match="rank must be >= 1"):
            DebtPriority(0)


class TestPersonIdentity:
    """Tests for identities and `same_person`."""

    @staticmethod
    def test_labels_and_kinds():
        """Each identity kind labels itself."""
        user = RegisteredUser("u-1")
        person = ExternalPerson("Achieng Otieno")
        assert (user.kind, user.label) == ("user", "user:u-1")
        assert (person.kind, person.label) == ("external", "Achieng Otieno")

    @staticmethod
    def test_blank_identities_rejected():
        """An identity must identify someone."""
        with pytest.raises(ValueError):
            RegisteredUser(" ")
        with pytest.raises(ValueError):
            ExternalPerson("")

    @staticmethod
    @pytest.mark.parametrize(
        ("left", "right", "expected"),
        [
            (RegisteredUser("a"), RegisteredUser("a"), True),
            (RegisteredUser("a"), RegisteredUser("b"), False),
            (
                ExternalPerson("Jane Doe", national_id="1"),
                ExternalPerson("J. Doe", national_id="1"),
                True,
            ),
            (
                ExternalPerson("Jane Doe", national_id="1"),
                ExternalPerson("Jane Doe", national_id="2"),
                False,
            ),
            (ExternalPerson("Jane Doe"), ExternalPerson(" jane doe "), True),
            (ExternalPerson("Jane Doe", national_id="1"), ExternalPerson("jane doe"), True),
            (RegisteredUser("Jane Doe"), ExternalPerson("Jane Doe"), False),
        ],
    )
    def test_same_person(left, right, expected):
        """National ids win when both sides have one; names otherwise."""
        assert same_person(left, right) is expected


class TestWitnessSignature:
    """Tests for `WitnessSignature`."""

    @staticmethod
    def _capture(**overrides):
        kwargs = {
            "signature_type": SignatureType.WET_INK,
            "signed_at": SIGNED_AT,
            "attestation": "Signed in the presence of the testator",
            "co_witness_present": True,
        }
        kwargs.update(overrides)
        return WitnessSignature.capture(**kwargs)

    def test_capture(self):
        """A captured signature starts in CAPTURED."""
        signature = self._capture().unwrap()
        assert signature.status is SignatureStatus.CAPTURED
        assert not signature.is_legally_valid()

    def test_capture_requires_attestation(self):
        """An empty attestation clause is refused."""
        result = self._capture(attestation="  ")
        assert result.error == "A witness signature requires an attestation clause"

    def test_capture_requires_aware_time(self):
        """Naive times are refused."""
        result = self._capture(signed_at=datetime(2025, 6, 1, 10, 0))
        assert result.error == "Signature time must be timezone-aware"

    def test_verify_makes_it_valid(self):
        """A verified signature with a co-witness present is legally valid."""
        verified = (
            self._capture()
            .unwrap()
            .verify_identity("registrar-1", "national_id", SIGNED_AT)
            .unwrap()
        )
        assert verified.status is SignatureStatus.VERIFIED
        assert verified.verified_by == "registrar-1"
        assert verified.is_legally_valid()

    def test_verified_without_co_witness_is_not_valid(self):
        """Section 11(c) needs both witnesses present."""
        verified = (
            self._capture(co_witness_present=False)
            .unwrap()
            .verify_identity("registrar-1", "national_id", SIGNED_AT)
            .unwrap()
        )
        assert not verified.is_legally_valid()

    def test_verify_only_from_captured(self):
        """A verified signature cannot be verified again."""
        verified = (
            self._capture()
            .unwrap()
            .verify_identity("registrar-1", "national_id", SIGNED_AT)
            .unwrap()
        )
        result = verified.verify_identity("registrar-2", "biometric", SIGNED_AT)
        assert result.error == (
            "Only captured signatures can be verified (status: verified)"
        )

    def test_reject(self):
        """Rejection records the reason; rejecting twice fails."""
        rejected = self._capture().unwrap().reject("Smudged").unwrap()
        assert rejected.status is SignatureStatus.REJECTED
        assert rejected.rejection_reason == "Smudged"
        assert rejected.reject("Again").error == "Signature is already rejected"

    def test_simultaneity_window(self):
        """Signatures within 30 minutes count as made together."""
        first = self._capture().unwrap()
        close = self._capture(signed_at=SIGNED_AT + timedelta(minutes=29)).unwrap()
        late = self._capture(signed_at=SIGNED_AT + timedelta(hours=2)).unwrap()
        assert first.is_simultaneous_with(close)
        assert not first.is_simultaneous_with(late)
        assert first.is_simultaneous_with(late, window=timedelta(hours=3))

    @staticmethod
    def test_capture_is_immutable():
        """Verification returns a copy; the original is untouched."""
        signature = WitnessSignature.capture(
            signature_type=SignatureType.DIGITAL,
            signed_at=SIGNED_AT,
            attestation="Signed",
            co_witness_present=True,
        ).unwrap()
        signature.verify_identity("r", "m", SIGNED_AT)
        assert signature.status is SignatureStatus.CAPTURED
        with pytest.raises(AttributeError, match=re.escape("status")):
            signature.status = SignatureStatus.VERIFIED  # type: ignore[misc]
