"""Tests for transition schedules."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from app.models.enums import TldState
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
from registry.schedule import (
    START_OF_TIME,
    MoneySchedule,
    Schedule,
    Transition,
    append_one,
    apply_schedule_update,
    normalize_time,
    replace_all,
)

T0 = datetime(2026, 3, 1, tzinfo=UTC)
MS = timedelta(milliseconds=1)


@pytest.fixture
def states() -> Schedule[TldState]:
    return Schedule(
        [
            Transition(START_OF_TIME, TldState.PREDELEGATION),
            Transition(T0, TldState.START_DATE_SUNRISE),
            Transition(T0 + timedelta(days=60), TldState.GENERAL_AVAILABILITY),
        ]
    )


class TestNormalizeTime:
    def test_converts_to_utc(self) -> None:
        eastern = timezone(timedelta(hours=-5))
        value = normalize_time(datetime(2026, 3, 1, 7, 0, tzinfo=eastern))
        assert value == datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
        assert value.tzinfo == UTC

    def test_truncates_to_milliseconds(self) -> None:
        value = normalize_time(datetime(2026, 3, 1, 0, 0, 0, 123456, tzinfo=UTC))
        assert value.microsecond == 123000

    def test_rejects_naive(self) -> None:
        with pytest.raises(InvalidTimestamp):
            normalize_time(datetime(2026, 3, 1))

    def test_transition_rejects_pre_epoch(self) -> None:
        with pytest.raises(InvalidTimestamp, match="precedes the start of time"):
            Transition(datetime(1969, 12, 31, tzinfo=UTC), TldState.PDT)


class TestConstruction:
    def test_requires_start_of_time(self) -> None:
        with pytest.raises(MissingStartOfTime):
            Schedule([Transition(T0, TldState.PREDELEGATION)])

    def test_empty_is_rejected(self) -> None:
        with pytest.raises(MissingStartOfTime):
            Schedule([])

    def test_sorts_input(self) -> None:
        s = Schedule(
            [
                Transition(T0, TldState.GENERAL_AVAILABILITY),
                Transition(START_OF_TIME, TldState.PREDELEGATION),
            ]
        )
        assert s.keys() == (START_OF_TIME, T0)

    def test_duplicate_timestamp(self) -> None:
        with pytest.raises(DuplicateTimestamp):
            Schedule(
                [
                    Transition(START_OF_TIME, TldState.PREDELEGATION),
                    Transition(T0, TldState.QUIET_PERIOD),
                    Transition(T0, TldState.GENERAL_AVAILABILITY),
                ]
            )

    def test_constant(self) -> None:
        s = Schedule.constant(TldState.PDT)
        assert len(s) == 1
        assert s.lookup(T0) == TldState.PDT

    def test_equality_and_hash(self, states: Schedule[TldState]) -> None:
        copy = Schedule.from_mapping(states.to_mapping())
        assert copy == states
        assert hash(copy) == hash(states)


class TestLookup:
    def test_floor_semantics(self, states: Schedule[TldState]) -> None:
        assert states.lookup(T0 - MS) == TldState.PREDELEGATION
        assert states.lookup(T0) == TldState.START_DATE_SUNRISE
        assert states.lookup(T0 + timedelta(days=59)) == TldState.START_DATE_SUNRISE
        assert (
            states.lookup(T0 + timedelta(days=365)) == TldState.GENERAL_AVAILABILITY
        )

    def test_at_start_of_time(self, states: Schedule[TldState]) -> None:
        assert states.lookup(START_OF_TIME) == TldState.PREDELEGATION

    def test_next_transition_after(self, states: Schedule[TldState]) -> None:
        assert states.next_transition_after(START_OF_TIME) == T0
        assert states.next_transition_after(T0) == T0 + timedelta(days=60)
        assert states.next_transition_after(T0 + timedelta(days=60)) is None

    def test_lookup_rejects_naive(self, states: Schedule[TldState]) -> None:
        with pytest.raises(InvalidTimestamp):
            states.lookup(datetime(2026, 3, 1))


class TestAppendOne:
    def test_lookup_unchanged_before_new_key(self, states: Schedule[TldState]) -> None:
        t2 = T0 + timedelta(days=90)
        appended = append_one(states, Transition(t2, TldState.QUIET_PERIOD))

        for t in (START_OF_TIME, T0 - MS, T0, t2 - MS):
            assert appended.lookup(t) == states.lookup(t)
        assert appended.lookup(t2) == TldState.QUIET_PERIOD
        assert appended.lookup(t2 + timedelta(days=1000)) == TldState.QUIET_PERIOD

    def test_at_last_key_fails(self, states: Schedule[TldState]) -> None:
        last = states.last_transition().effective_at
        with pytest.raises(OutOfOrderTransition) as exc_info:
            append_one(states, Transition(last, TldState.PDT))
        assert exc_info.value.last_at == last

    def test_before_last_key_fails(self, states: Schedule[TldState]) -> None:
        with pytest.raises(OutOfOrderTransition):
            append_one(states, Transition(T0, TldState.PDT))

    def test_old_schedule_unchanged(self, states: Schedule[TldState]) -> None:
        before = states.transitions()
        append_one(states, Transition(T0 + timedelta(days=90), TldState.PDT))
        assert states.transitions() == before

    def test_update_scenario(self) -> None:
        now = datetime(2026, 10, 19, 12, tzinfo=UTC)
        current = Schedule(
            [
                Transition(START_OF_TIME, TldState.PREDELEGATION),
                Transition(now, TldState.QUIET_PERIOD),
            ]
        )
        later = append_one(
            current,
            Transition(now + timedelta(days=1), TldState.GENERAL_AVAILABILITY),
        )
        assert later.lookup(now + timedelta(days=1)) == TldState.GENERAL_AVAILABILITY

        with pytest.raises(OutOfOrderTransition):
            append_one(current, Transition(now, TldState.GENERAL_AVAILABILITY))


class TestReplaceAll:
    def test_idempotent(self, states: Schedule[TldState]) -> None:
        assert replace_all(states, states.transitions()) == states

    def test_duplicate_fails(self, states: Schedule[TldState]) -> None:
        with pytest.raises(DuplicateTimestamp):
            replace_all(
                states,
                [
                    Transition(T0, TldState.QUIET_PERIOD),
                    Transition(T0, TldState.GENERAL_AVAILABILITY),
                ],
            )

    def test_empty_is_noop(self, states: Schedule[TldState]) -> None:
        assert replace_all(states, []) is states

    def test_backfills_start_of_time(self, states: Schedule[TldState]) -> None:
        replaced = replace_all(states, [Transition(T0, TldState.PREDELEGATION)])
        assert replaced.keys() == (START_OF_TIME, T0)
        assert replaced.lookup(T0 - MS) == TldState.PREDELEGATION
        assert replaced.lookup(T0 + timedelta(days=365)) == TldState.PREDELEGATION

    def test_can_rewrite_history(self, states: Schedule[TldState]) -> None:
        replaced = replace_all(
            states,
            [
                Transition(START_OF_TIME, TldState.PDT),
                Transition(T0 - timedelta(days=30), TldState.GENERAL_AVAILABILITY),
            ],
        )
        assert replaced.lookup(T0) == TldState.GENERAL_AVAILABILITY

    def test_keeps_schedule_type(self) -> None:
        fees = MoneySchedule.constant(Money.of("USD", 8))
        replaced = replace_all(fees, [Transition(T0, Money.of("USD", 10))])
        assert isinstance(replaced, MoneySchedule)


class TestMoneySchedule:
    def test_mixed_currencies_rejected(self) -> None:
        with pytest.raises(CurrencyMismatch):
            MoneySchedule(
                [
                    Transition(START_OF_TIME, Money.of("USD", 1)),
                    Transition(T0, Money.of("EUR", 1)),
                ]
            )

    def test_negative_rejected(self) -> None:
        with pytest.raises(NegativeCost):
            MoneySchedule(
                [
                    Transition(START_OF_TIME, Money.of("USD", 1)),
                    Transition(T0, Money.of("USD", "-0.01")),
                ]
            )

    def test_append_validates(self) -> None:
        fees = MoneySchedule.constant(Money.of("USD", 0))
        with pytest.raises(CurrencyMismatch):
            append_one(fees, Transition(T0, Money.of("JPY", 100)))

    def test_currency(self) -> None:
        assert MoneySchedule.constant(Money.of("jpy", 100)).currency == "JPY"


class TestApplyScheduleUpdate:
    def test_replacement_and_append_conflict(self, states: Schedule[TldState]) -> None:
        with pytest.raises(ConflictingScheduleUpdate):
            apply_schedule_update(
                "TLD state transitions",
                states,
                replacement=[Transition(T0, TldState.PDT)],
                append=Transition(T0 + timedelta(days=365), TldState.PDT),
            )

    def test_empty_replacement_is_absent(self, states: Schedule[TldState]) -> None:
        t = T0 + timedelta(days=365)
        result = apply_schedule_update(
            "TLD state transitions",
            states,
            replacement=[],
            append=Transition(t, TldState.QUIET_PERIOD),
        )
        assert result.lookup(t) == TldState.QUIET_PERIOD

    def test_nothing_to_apply(self, states: Schedule[TldState]) -> None:
        assert apply_schedule_update("x", states) is states
        assert apply_schedule_update("x", None) is None

    def test_create_from_append(self) -> None:
        result = apply_schedule_update(
            "TLD state transitions",
            None,
            append=Transition(START_OF_TIME, TldState.GENERAL_AVAILABILITY),
        )
        assert result == Schedule.constant(TldState.GENERAL_AVAILABILITY)

    def test_create_from_replacement(self) -> None:
        result = apply_schedule_update(
            "EAP fee schedule",
            None,
            replacement=[Transition(T0, Money.of("USD", 100))],
            schedule_type=MoneySchedule,
        )
        assert isinstance(result, MoneySchedule)
        assert result.lookup(T0 - MS) == Money.of("USD", 100)
