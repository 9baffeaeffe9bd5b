"""Transition schedules for time-varying TLD attributes.

A schedule maps effective times to values. It always has an entry at
START_OF_TIME, so a floor lookup for any instant returns a value. Schedules
are immutable: replace_all and append_one return new instances and leave the
old one valid for anyone still holding it.
"""

from __future__ import annotations

import logging
from bisect import bisect_right
from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Generic, TypeVar

from registry.errors import (
    ConflictingScheduleUpdate,
    CurrencyMismatch,
    DuplicateTimestamp,
    InvalidTimestamp,
    MissingStartOfTime,
    NegativeCost,
    OutOfOrderTransition,
)
from registry.money import Money

logger = logging.getLogger(__name__)

V = TypeVar("V")

START_OF_TIME = datetime(1970, 1, 1, tzinfo=UTC)
END_OF_TIME = datetime(9999, 12, 31, 23, 59, 59, 999000, tzinfo=UTC)


def normalize_time(value: datetime) -> datetime:
    """Convert an aware datetime to UTC at millisecond resolution.

    Raises:
        InvalidTimestamp: If the datetime is naive.
    """
    if value.tzinfo is None or value.utcoffset() is None:
        raise InvalidTimestamp(value)
    value = value.astimezone(UTC)
    return value.replace(microsecond=(value.microsecond // 1000) * 1000)


@dataclass(frozen=True)
class Transition(Generic[V]):
    """A single (effective time, value) pair."""

    effective_at: datetime
    value: V

    def __post_init__(self) -> None:
        effective_at = normalize_time(self.effective_at)
        if effective_at < START_OF_TIME:
            raise InvalidTimestamp(effective_at, "precedes the start of time")
        object.__setattr__(self, "effective_at", effective_at)

    def __str__(self) -> str:
        return f"{self.effective_at.isoformat()}={self.value}"


class Schedule(Generic[V]):
    """Ordered, immutable time → value history with floor lookup."""

    __slots__ = ("_keys", "_values")

    def __init__(self, transitions: Iterable[Transition[V]]):
        ordered = sorted(transitions, key=lambda t: t.effective_at)
        if not ordered or ordered[0].effective_at != START_OF_TIME:
            raise MissingStartOfTime()
        for prev, cur in zip(ordered, ordered[1:], strict=False):
            if prev.effective_at == cur.effective_at:
                raise DuplicateTimestamp(cur.effective_at)
        self._keys: tuple[datetime, ...] = tuple(t.effective_at for t in ordered)
        self._values: tuple[V, ...] = tuple(t.value for t in ordered)
        self._check()

    @classmethod
    def constant(cls, value: V) -> Schedule[V]:
        """A schedule with only the start-of-time value."""
        return cls([Transition(START_OF_TIME, value)])

    @classmethod
    def from_mapping(cls, mapping: Mapping[datetime, V]) -> Schedule[V]:
        return cls(Transition(k, v) for k, v in mapping.items())

    def _check(self) -> None:
        """Hook for subclasses to validate values after construction."""

    # =========================================================================
    # Reads
    # =========================================================================

    def lookup(self, at: datetime) -> V:
        """Return the value of the latest transition at or before ``at``.

        Instants earlier than every key resolve to the start-of-time value.
        """
        idx = bisect_right(self._keys, normalize_time(at)) - 1
        return self._values[max(idx, 0)]

    def keys(self) -> tuple[datetime, ...]:
        return self._keys

    def transitions(self) -> list[Transition[V]]:
        return [Transition(k, v) for k, v in zip(self._keys, self._values, strict=True)]

    def last_transition(self) -> Transition[V]:
        return Transition(self._keys[-1], self._values[-1])

    def next_transition_after(self, at: datetime) -> datetime | None:
        """Time of the first change strictly after ``at``, or None."""
        idx = bisect_right(self._keys, normalize_time(at))
        return self._keys[idx] if idx < len(self._keys) else None

    def to_mapping(self) -> dict[datetime, V]:
        return dict(zip(self._keys, self._values, strict=True))

    def __iter__(self) -> Iterator[Transition[V]]:
        return iter(self.transitions())

    def __len__(self) -> int:
        return len(self._keys)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Schedule):
            return NotImplemented
        return self._keys == other._keys and self._values == other._values

    def __hash__(self) -> int:
        return hash((self._keys, self._values))

    def __repr__(self) -> str:
        entries = ", ".join(str(t) for t in self.transitions())
        return f"{type(self).__name__}({{{entries}}})"


class MoneySchedule(Schedule[Money]):
    """Schedule of cost amounts: one currency, no negative entries."""

    __slots__ = ()

    def _check(self) -> None:
        currencies = [v.currency for v in self._values]
        if len(set(currencies)) > 1:
            raise CurrencyMismatch("Fee schedule amounts", currencies[0], currencies)
        for value in self._values:
            if value.is_negative:
                raise NegativeCost("Fee schedule amount", value)

    @property
    def currency(self) -> str:
        return self._values[0].currency


# =============================================================================
# Updates
# =============================================================================


def _anchored(entries: list[Transition[V]]) -> list[Transition[V]]:
    """Sort entries and back-fill a start-of-time entry from the earliest one.

    Raises:
        DuplicateTimestamp: If two entries share an effective time.
    """
    ordered = sorted(entries, key=lambda t: t.effective_at)
    for prev, cur in zip(ordered, ordered[1:], strict=False):
        if prev.effective_at == cur.effective_at:
            raise DuplicateTimestamp(cur.effective_at)
    if ordered[0].effective_at != START_OF_TIME:
        ordered.insert(0, Transition(START_OF_TIME, ordered[0].value))
    return ordered


def replace_all(
    old: Schedule[V],
    new_entries: Iterable[Transition[V]],
) -> Schedule[V]:
    """Replace the whole history of ``old`` with ``new_entries``.

    Ordering relative to ``old`` is not checked; the new entries are trusted
    to be the complete corrected history. If no entry sits at the start of
    time, the earliest value is extended back to it. An empty input returns
    ``old`` unchanged.

    Raises:
        DuplicateTimestamp: If two new entries share an effective time.
    """
    entries = list(new_entries)
    if not entries:
        return old
    return type(old)(_anchored(entries))


def append_one(old: Schedule[V], transition: Transition[V]) -> Schedule[V]:
    """Add a single transition strictly after every existing one.

    Raises:
        OutOfOrderTransition: If ``transition`` is at or before the last key.
    """
    last = old.last_transition()
    if transition.effective_at <= last.effective_at:
        raise OutOfOrderTransition(
            transition.value, transition.effective_at, last.effective_at
        )
    return type(old)([*old.transitions(), transition])


def apply_schedule_update(
    field_name: str,
    old: Schedule[V] | None,
    replacement: Iterable[Transition[V]] | None = None,
    append: Transition[V] | None = None,
    schedule_type: type[Schedule] = Schedule,
) -> Schedule[V] | None:
    """Apply at most one of a replace-all set or an append candidate.

    When ``old`` is None (the TLD is being created) an append candidate
    becomes the whole schedule. Returns None when there is no old schedule
    and nothing to apply.

    Raises:
        ConflictingScheduleUpdate: If both a non-empty replacement and an
            append candidate are given.
    """
    entries = list(replacement) if replacement is not None else []
    if entries and append is not None:
        raise ConflictingScheduleUpdate(field_name)

    if entries:
        if old is None:
            return schedule_type(_anchored(entries))
        return replace_all(old, entries)

    if append is not None:
        if old is None:
            return schedule_type(_anchored([append]))
        return append_one(old, append)

    return old
