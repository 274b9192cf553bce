"""Module including value objects used across the domain layer.

All value objects are immutable. Operations return new instances.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Literal, TypeAlias

from urithi.domain.errors import (
    CurrencyMismatchError,
    InvalidMoneyError,
    InvalidPercentageError,
)
from urithi.domain.result import Result

# pylint: disable=too-many-instance-attributes

MINOR_UNIT = Decimal("0.01")
HUNDRED = Decimal(100)


def coerce_decimal(value: object) -> Decimal:
    """Normalize numeric values to Decimal.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` and not its
    binary expansion.

    Raises:
        InvalidMoneyError: If the value cannot be read as a decimal number.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool) or value is None:
        raise InvalidMoneyError(f"Not a numeric amount: {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise InvalidMoneyError(f"Not a numeric amount: {value!r}") from e


# ============================================================================
#                                   Money
# ============================================================================


class Currency(Enum):
    """ISO 4217 currencies accepted by the engine."""

    KES = "KES"
    UGX = "UGX"
    TZS = "TZS"
    USD = "USD"
    GBP = "GBP"
    EUR = "EUR"


@dataclass(frozen=True, slots=True)
class Money:
    """Fixed-point monetary value in a single currency.

    Amounts are quantized to the minor unit (two places, half-up) on
    construction. Arithmetic and comparison between different currencies
    raise `CurrencyMismatchError`.
    """

    amount: Decimal
    currency: Currency = Currency.KES

    def __post_init__(self) -> None:
        amount = coerce_decimal(self.amount)
        if not amount.is_finite():
            raise InvalidMoneyError(f"Amount must be finite, got {amount}.")
        object.__setattr__(
            self, "amount", amount.quantize(MINOR_UNIT, rounding=ROUND_HALF_UP)
        )
        if not isinstance(self.currency, Currency):
            object.__setattr__(self, "currency", Currency(self.currency))

    # --- Construction Paths ---

    @classmethod
    def zero(cls, currency: Currency = Currency.KES) -> Money:
        return cls(Decimal(0), currency)

    @classmethod
    def of(cls, amount: object, currency: Currency | str = Currency.KES) -> Money:
        """Build from anything `coerce_decimal` accepts."""
        return cls(coerce_decimal(amount), Currency(currency))

    @classmethod
    def sum(cls, values: Iterable[Money], currency: Currency = Currency.KES) -> Money:
        """Add up *values*; an empty iterable gives zero in *currency*."""
        total = cls.zero(currency)
        for value in values:
            total = total + value
        return total

    # --- Arithmetic ---

    def _check_currency(self, other: Money) -> None:
        if self.currency is not other.currency:
            raise CurrencyMismatchError(self.currency.value, other.currency.value)

    def __add__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: Money) -> Money:
        self._check_currency(other)
        return Money(self.amount - other.amount, self.currency)

    def __mul__(self, factor: Decimal | int) -> Money:
        if isinstance(factor, Money):
            raise TypeError("Money cannot be multiplied by Money.")
        return Money(self.amount * coerce_decimal(factor), self.currency)

    __rmul__ = __mul__

    def percentage(self, percent: Decimal | int) -> Money:
        """Return ``percent`` per cent of this amount."""
        return Money(self.amount * coerce_decimal(percent) / HUNDRED, self.currency)

    def clamp_at_zero(self) -> Money:
        """Return this amount, or zero if it is negative."""
        return self if self.amount >= 0 else Money.zero(self.currency)

    # --- Comparison ---

    def __lt__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount < other.amount

    def __le__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount <= other.amount

    def __gt__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount > other.amount

    def __ge__(self, other: Money) -> bool:
        self._check_currency(other)
        return self.amount >= other.amount

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    def __str__(self) -> str:
        return f"{self.currency.value} {self.amount:,.2f}"


# ============================================================================
#                                 Percentage
# ============================================================================


@dataclass(frozen=True, slots=True)
class Percentage:
    """A percentage in the closed range 0..100."""

    value: Decimal

    def __post_init__(self) -> None:
        value = coerce_decimal(self.value)
        if not value.is_finite() or not Decimal(0) <= value <= HUNDRED:
            raise InvalidPercentageError(
                f"Percentage must be between 0 and 100, got {self.value}."
            )
        object.__setattr__(self, "value", value)

    @classmethod
    def create(cls, value: object) -> Result[Percentage]:
        """Validate *value* and return it as a percentage, or a failure."""
        try:
            return Result.ok(cls(coerce_decimal(value)))
        except (InvalidPercentageError, InvalidMoneyError):
            return Result.fail(f"Percentage must be between 0 and 100, got {value}.")

    @classmethod
    def full(cls) -> Percentage:
        return cls(HUNDRED)

    def of(self, money: Money) -> Money:
        """Apply this percentage to *money*."""
        return money.percentage(self.value)

    @property
    def fraction(self) -> Decimal:
        return self.value / HUNDRED

    def __str__(self) -> str:
        return f"{self.value.normalize():f}%"


# ============================================================================
#                       Debt priority (Section 45 LSA)
# ============================================================================


class LiabilityTier(Enum):
    """Statutory payment classes for estate liabilities."""

    FUNERAL_EXPENSES = "funeral_expenses"
    SECURED_DEBTS = "secured_debts"
    TAXES_RATES_WAGES = "taxes_rates_wages"
    UNSECURED_GENERAL = "unsecured_general"


@dataclass(frozen=True, slots=True, order=True)
class DebtPriority:
    """Comparable payment priority; lower rank is paid first.

    Only ``rank`` takes part in comparison. ``tier`` and ``critical`` are
    carried for reporting and distribution gating.
    """

    rank: int
    tier: LiabilityTier = field(default=LiabilityTier.UNSECURED_GENERAL, compare=False)
    critical: bool = field(default=False, compare=False)

    def __post_init__(self) -> None:
        if self.rank < 1:
            raise ValueError(f"Debt priority rank must be >= 1, got {self.rank}.")

    def outranks(self, other: DebtPriority) -> bool:
        """True if debts of this priority must be paid before *other*."""
        return self.rank < other.rank


# ============================================================================
#                   Person identity (registered or external)
# ============================================================================


@dataclass(frozen=True, slots=True)
class RegisteredUser:
    """A person known to the platform by user id."""

    user_id: str
    kind: Literal["user"] = field(default="user", init=False)

    def __post_init__(self) -> None:
        if not self.user_id.strip():
            raise ValueError("user_id must be non-empty.")

    @property
    def label(self) -> str:
        return f"user:{self.user_id}"


@dataclass(frozen=True, slots=True)
class ExternalPerson:
    """A person outside the platform, identified by their own details."""

    full_name: str
    national_id: str | None = None
    email: str | None = None
    phone: str | None = None
    kra_pin: str | None = None
    kind: Literal["external"] = field(default="external", init=False)

    def __post_init__(self) -> None:
        if not self.full_name.strip():
            raise ValueError("An external person needs a full name.")

    @property
    def label(self) -> str:
        return self.full_name


PersonIdentity: TypeAlias = RegisteredUser | ExternalPerson


def same_person(left: PersonIdentity, right: PersonIdentity) -> bool:
    """Best-effort identity match across the two identity kinds."""
    match left, right:
        case RegisteredUser(user_id=a), RegisteredUser(user_id=b):
            return a == b
        case ExternalPerson(), ExternalPerson():
            if left.national_id and right.national_id:
                return left.national_id == right.national_id
            return left.full_name.strip().lower() == right.full_name.strip().lower()
        case _:
            return False


# ============================================================================
#                             Witness signature
# ============================================================================


class SignatureType(Enum):
    """How a witness signature was captured."""

    WET_INK = "wet_ink"
    DIGITAL = "digital"
    ELECTRONIC = "electronic"


class SignatureStatus(Enum):
    """Lifecycle of a witness signature."""

    PENDING = "pending"
    CAPTURED = "captured"
    VERIFIED = "verified"
    REJECTED = "rejected"
    EXPIRED = "expired"


SIMULTANEITY_WINDOW = timedelta(minutes=30)


@dataclass(frozen=True, slots=True)
class WitnessSignature:
    """A witness's attestation signature on a will.

    Section 11(c) LSA requires witnesses to sign in the presence of the
    testator and of each other, so the co-witness presence and attestation
    clause are part of legal validity.
    """

    signature_type: SignatureType
    status: SignatureStatus
    signed_at: datetime
    attestation: str
    co_witness_present: bool = False
    co_witness_id: str | None = None
    signature_hash: str | None = None
    verified_by: str | None = None
    verified_at: datetime | None = None
    verification_method: str | None = None
    rejection_reason: str | None = None

    @classmethod
    def capture(  # pylint: disable=too-many-arguments
        cls,
        *,
        signature_type: SignatureType,
        signed_at: datetime,
        attestation: str,
        co_witness_present: bool,
        co_witness_id: str | None = None,
        signature_hash: str | None = None,
    ) -> Result[WitnessSignature]:
        """Record a freshly captured signature."""
        if not attestation.strip():
            return Result.fail("A witness signature requires an attestation clause")
        if signed_at.tzinfo is None:
            return Result.fail("Signature time must be timezone-aware")
        return Result.ok(
            cls(
                signature_type=signature_type,
                status=SignatureStatus.CAPTURED,
                signed_at=signed_at,
                attestation=attestation.strip(),
                co_witness_present=co_witness_present,
                co_witness_id=co_witness_id,
                signature_hash=signature_hash,
            )
        )

    def verify_identity(
        self, verified_by: str, method: str, verified_at: datetime
    ) -> Result[WitnessSignature]:
        """Return a verified copy of this signature."""
        if self.status is not SignatureStatus.CAPTURED:
            return Result.fail(
                f"Only captured signatures can be verified (status: {self.status.value})"
            )
        if not verified_by.strip() or not method.strip():
            return Result.fail("Signature verification needs a verifier and a method")
        return Result.ok(
            replace(
                self,
                status=SignatureStatus.VERIFIED,
                verified_by=verified_by,
                verified_at=verified_at,
                verification_method=method,
            )
        )

    def reject(self, reason: str) -> Result[WitnessSignature]:
        """Return a rejected copy of this signature."""
        if self.status in (SignatureStatus.REJECTED, SignatureStatus.EXPIRED):
            return Result.fail(f"Signature is already {self.status.value}")
        if not reason.strip():
            return Result.fail("A rejection reason is required")
        return Result.ok(
            replace(self, status=SignatureStatus.REJECTED, rejection_reason=reason)
        )

    def is_legally_valid(self) -> bool:
        return (
            self.status is SignatureStatus.VERIFIED
            and bool(self.attestation.strip())
            and self.co_witness_present
        )

    def is_simultaneous_with(
        self, other: WitnessSignature, window: timedelta = SIMULTANEITY_WINDOW
    ) -> bool:
        """True if both signatures were made within *window* of each other."""
        return abs(self.signed_at - other.signed_at) <= window
