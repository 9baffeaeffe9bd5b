"""Tests for parameter string parsing shared by the CLI and API."""

from datetime import UTC, datetime, timedelta

import pytest

from app.models.enums import TldState, TldType
from registry.errors import InvalidEnumValue, InvalidParameter
from registry.money import Money
from registry.overrides import CLEAR
from registry.params import (
    parse_datetime,
    parse_duration,
    parse_list,
    parse_money,
    parse_money_transitions,
    parse_optional_string,
    parse_state_transitions,
    parse_tld_state,
    parse_tld_type,
)
from registry.schedule import START_OF_TIME


class TestScalars:
    def test_datetime(self) -> None:
        assert parse_datetime("2026-03-01T00:00:00Z") == datetime(
            2026, 3, 1, tzinfo=UTC
        )

    def test_datetime_alias(self) -> None:
        assert parse_datetime("START_OF_TIME") == START_OF_TIME

    def test_datetime_invalid(self) -> None:
        with pytest.raises(InvalidParameter):
            parse_datetime("yesterday")

    def test_datetime_requires_timezone(self) -> None:
        with pytest.raises(InvalidParameter):
            parse_datetime("2026-03-01T00:00:00")

    def test_duration(self) -> None:
        assert parse_duration("PT5M") == timedelta(minutes=5)
        assert parse_duration("P30D") == timedelta(days=30)

    def test_duration_requires_iso(self) -> None:
        with pytest.raises(InvalidParameter):
            parse_duration("300")

    def test_money(self) -> None:
        assert parse_money("USD 8") == Money.of("USD", 8)

    def test_money_invalid(self) -> None:
        with pytest.raises(InvalidParameter, match="create_billing_cost"):
            parse_money("8 dollars", "create_billing_cost")

    def test_money_extra_precision(self) -> None:
        with pytest.raises(InvalidParameter, match="create_billing_cost"):
            parse_money("USD 1.005", "create_billing_cost")

    def test_tld_state_case_insensitive(self) -> None:
        assert parse_tld_state("general_availability") == TldState.GENERAL_AVAILABILITY

    def test_tld_state_invalid(self) -> None:
        with pytest.raises(InvalidEnumValue) as exc_info:
            parse_tld_state("LANDRUSH")
        assert exc_info.value.values == ["LANDRUSH"]
        assert "PREDELEGATION" in exc_info.value.domain

    def test_tld_type(self) -> None:
        assert parse_tld_type("test") == TldType.TEST

    def test_list(self) -> None:
        assert parse_list("a, b,,c") == ["a", "b", "c"]
        assert parse_list("") == []

    def test_optional_string(self) -> None:
        assert parse_optional_string("null") is CLEAR
        assert parse_optional_string(" folder ") == "folder"


class TestTransitions:
    def test_state_transitions(self) -> None:
        result = parse_state_transitions(
            "START_OF_TIME=PREDELEGATION,2026-03-01T00:00:00Z=GENERAL_AVAILABILITY"
        )
        assert [(t.effective_at, t.value) for t in result] == [
            (START_OF_TIME, TldState.PREDELEGATION),
            (datetime(2026, 3, 1, tzinfo=UTC), TldState.GENERAL_AVAILABILITY),
        ]

    def test_money_transitions(self) -> None:
        result = parse_money_transitions(
            '"1970-01-01T00:00:00Z=USD 8,2027-01-01T00:00:00Z=USD 10"',
            "renew_billing_cost_transitions",
        )
        assert [t.value for t in result] == [Money.of("USD", 8), Money.of("USD", 10)]

    def test_missing_separator(self) -> None:
        with pytest.raises(InvalidParameter, match="Expected <time>=<value>"):
            parse_state_transitions("2026-03-01T00:00:00Z")

    def test_empty(self) -> None:
        assert parse_state_transitions("") == []