"""Conversions between aggregates and snapshot state documents.

A snapshot document is JSON-compatible: enums become their values, decimals
and dates become strings, and dataclasses (entities and value objects)
become dicts of their persisted fields. Runtime collaborators marked
`TRANSIENT` (the injected clock) are not stored.

Decoding is driven by the dataclasses' type hints. The person-identity union
is told apart by its ``kind`` tag, so a witness or executor comes back as the
same `RegisteredUser` / `ExternalPerson` variant it was saved as.
"""

from __future__ import annotations

import abc
import logging
import types
from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from functools import lru_cache
from typing import Any, Generic, TypeVar, Union, get_args, get_origin, get_type_hints

from urithi.domain.aggregates import Aggregate, Estate, FinancialTotals, Will, WillStatus
from urithi.domain.clock import SYSTEM_CLOCK, Clock
from urithi.domain.entities import (
    Asset,
    Bequest,
    Debt,
    Entity,
    GiftInterVivos,
    LegalDependant,
    TestamentaryExecutor,
    WillWitness,
)
from urithi.domain.entities.base import TRANSIENT
from urithi.domain.statutes import DEFAULT_STATUTE_SCHEDULE, StatuteSchedule
from urithi.domain.value_objects import Currency

from .errors import SnapshotDecodeError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=Aggregate)

#: Bumped when the document layout changes incompatibly.
SCHEMA_VERSION = 1  # pragma: no mutate

KIND_FIELD = "kind"  # pragma: no mutate

_NONE_TYPE = type(None)
_UNION_ORIGINS = (Union, types.UnionType)


# ============================================================================
#                              Generic state codec
# ============================================================================


def encode(value: Any) -> Any:
    """Turn domain state into JSON-compatible data.

    Raises:
        TypeError: For values with no document representation.
    """
    if isinstance(value, Enum):
        return value.value
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: encode(getattr(value, f.name))
            for f in fields(value)
            if not f.metadata.get(TRANSIENT)
        }
    if isinstance(value, dict):
        return {str(key): encode(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode(item) for item in value]
    raise TypeError(f"Cannot store a {type(value).__name__} in a snapshot")


@lru_cache(maxsize=None)
def _hints(cls: type) -> dict[str, Any]:
    return get_type_hints(cls)


def _kind(cls: type) -> Any:
    return next((f.default for f in fields(cls) if f.name == KIND_FIELD), None)


class StateCodec:
    """Decodes snapshot data back into domain objects.

    Entities are rebuilt with the codec's clock so that later mutations are
    timestamped by the application's clock, not the one they were saved with.
    """

    def __init__(self, clock: Clock = SYSTEM_CLOCK) -> None:
        self.clock = clock

    def decode(self, hint: Any, data: Any) -> Any:
        """Rebuild a value of type *hint* from *data*."""
        if data is None:
            return None
        origin = get_origin(hint)
        if origin in _UNION_ORIGINS:
            options = [arg for arg in get_args(hint) if arg is not _NONE_TYPE]
            if len(options) == 1:
                return self.decode(options[0], data)
            return self.decode(self._variant(hint, options, data), data)
        if origin is list:
            (item_hint,) = get_args(hint)
            return [self.decode(item_hint, item) for item in data]
        if origin is dict:
            return dict(data)
        if hint is Any or not isinstance(hint, type):
            return data
        if issubclass(hint, Enum):
            return hint(data)
        if hint is Decimal:
            return Decimal(data)
        if hint is datetime:
            return datetime.fromisoformat(data)
        if hint is date:
            return date.fromisoformat(data)
        if is_dataclass(hint):
            return self._build(hint, data)
        return data

    def _build(self, cls: type, data: dict[str, Any]) -> Any:
        hints = _hints(cls)
        kwargs = {
            f.name: self.decode(hints[f.name], data[f.name])
            for f in fields(cls)
            if f.init and not f.metadata.get(TRANSIENT) and f.name in data
        }
        if issubclass(cls, Entity):
            kwargs["clock"] = self.clock
        return cls(**kwargs)

    @staticmethod
    def _variant(hint: Any, options: list[Any], data: Any) -> Any:
        tag = data.get(KIND_FIELD) if isinstance(data, dict) else None
        for option in options:
            if is_dataclass(option) and _kind(option) == tag:
                return option
        raise ValueError(f"No variant of {hint} is tagged {tag!r}")


# ============================================================================
#                             Aggregate mappers
# ============================================================================


class SnapshotMapper(abc.ABC, Generic[T]):
    """Maps one aggregate type to and from its snapshot document."""

    aggregate_cls: type[T]

    def __init__(
        self,
        clock: Clock = SYSTEM_CLOCK,
        schedule: StatuteSchedule = DEFAULT_STATUTE_SCHEDULE,
    ) -> None:
        self.clock = clock
        self.schedule = schedule
        self.codec = StateCodec(clock)

    @abc.abstractmethod
    def to_state(self, aggregate: T) -> dict[str, Any]:
        """Serialize *aggregate* to a JSON-compatible document."""

    @abc.abstractmethod
    def _rebuild(self, aggregate_id: str, state: dict[str, Any], version: int) -> T:
        """Construct the aggregate; may raise KeyError, TypeError or ValueError."""

    def from_state(self, aggregate_id: str, state: dict[str, Any], version: int) -> T:
        """Rebuild the aggregate stored under *aggregate_id* at *version*.

        Raises:
            SnapshotDecodeError: If the document is malformed.
            DomainError: If the decoded aggregate breaks an invariant.
        """
        if state.get("schema") != SCHEMA_VERSION:
            raise SnapshotDecodeError(
                aggregate_id, f"unsupported schema {state.get('schema')!r}"
            )
        stored = state.get("statute_version")
        if stored is not None and stored != self.schedule.version:
            logger.warning(
                "%s %s was saved under statute schedule %s; loading with %s",
                self.aggregate_cls.__name__,
                aggregate_id,
                stored,
                self.schedule.version,
            )
        try:
            return self._rebuild(aggregate_id, state, version)
        except (KeyError, TypeError, ValueError) as e:
            raise SnapshotDecodeError(aggregate_id, f"{type(e).__name__}: {e}") from e

    def _header(self) -> dict[str, Any]:
        return {"schema": SCHEMA_VERSION, "statute_version": self.schedule.version}

    def _decode_attributes(
        self, attributes: dict[str, Any], hints: dict[str, Any]
    ) -> dict[str, Any]:
        return {
            name: self.codec.decode(hint, attributes[name])
            for name, hint in hints.items()
            if name in attributes
        }

    def _decode_all(self, cls: type, items: list[dict[str, Any]]) -> list[Any]:
        return [self.codec.decode(cls, item) for item in items]


#: Estate attributes restored through `Estate.reconstitute(state=...)`.
ESTATE_ATTRIBUTES: dict[str, Any] = {
    "kra_pin": str | None,
    "is_testate": bool,
    "is_intestate": bool,
    "will_id": str | None,
    "is_frozen": bool,
    "freeze_reason": str | None,
    "frozen_at": datetime | None,
    "frozen_by": str | None,
    "metadata": dict[str, Any],
    "created_at": datetime,
    "updated_at": datetime,
    "deleted_at": datetime | None,
    "deletion_reason": str | None,
}


class EstateSnapshotMapper(SnapshotMapper[Estate]):
    """Snapshot documents for `Estate`."""

    aggregate_cls = Estate

    def to_state(self, aggregate: Estate) -> dict[str, Any]:
        return {
            **self._header(),
            "deceased_id": aggregate.deceased_id,
            "deceased_name": aggregate.deceased_name,
            "date_of_death": encode(aggregate.date_of_death),
            "currency": encode(aggregate.currency),
            "totals": encode(aggregate.totals),
            "attributes": {
                name: encode(getattr(aggregate, name)) for name in ESTATE_ATTRIBUTES
            },
            "assets": encode(aggregate.assets),
            "debts": encode(aggregate.debts),
            "dependants": encode(aggregate.legal_dependants),
            "gifts": encode(aggregate.gifts_inter_vivos),
        }

    def _rebuild(self, aggregate_id: str, state: dict[str, Any], version: int) -> Estate:
        return Estate.reconstitute(
            estate_id=aggregate_id,
            deceased_id=state["deceased_id"],
            deceased_name=state["deceased_name"],
            date_of_death=date.fromisoformat(state["date_of_death"]),
            currency=Currency(state["currency"]),
            totals=self.codec.decode(FinancialTotals, state["totals"]),
            assets=self._decode_all(Asset, state["assets"]),
            debts=self._decode_all(Debt, state["debts"]),
            dependants=self._decode_all(LegalDependant, state["dependants"]),
            gifts=self._decode_all(GiftInterVivos, state["gifts"]),
            state=self._decode_attributes(state["attributes"], ESTATE_ATTRIBUTES),
            version=version,
            clock=self.clock,
            schedule=self.schedule,
        )


#: Will attributes restored through `Will.reconstitute(state=...)`.
WILL_ATTRIBUTES: dict[str, Any] = {
    "status": WillStatus,
    "executed_at": datetime | None,
    "witnessed_at": datetime | None,
    "activated_at": datetime | None,
    "revoked_at": datetime | None,
    "revocation_reason": str | None,
    "created_at": datetime,
    "updated_at": datetime,
}


class WillSnapshotMapper(SnapshotMapper[Will]):
    """Snapshot documents for `Will`."""

    aggregate_cls = Will

    def to_state(self, aggregate: Will) -> dict[str, Any]:
        return {
            **self._header(),
            "testator_id": aggregate.testator_id,
            "title": aggregate.title,
            "attributes": {
                name: encode(getattr(aggregate, name)) for name in WILL_ATTRIBUTES
            },
            "executors": encode(aggregate.executors),
            "witnesses": encode(aggregate.witnesses),
            "bequests": encode(aggregate.bequests),
        }

    def _rebuild(self, aggregate_id: str, state: dict[str, Any], version: int) -> Will:
        return Will.reconstitute(
            will_id=aggregate_id,
            testator_id=state["testator_id"],
            title=state["title"],
            executors=self._decode_all(TestamentaryExecutor, state["executors"]),
            witnesses=self._decode_all(WillWitness, state["witnesses"]),
            bequests=self._decode_all(Bequest, state["bequests"]),
            state=self._decode_attributes(state["attributes"], WILL_ATTRIBUTES),
            version=version,
            clock=self.clock,
            schedule=self.schedule,
        )
