"""Parsers for the string forms of TLD parameters.

Shared by the CLI flags and the API request schemas:

    transitions:  <time>=<value>[,<time>=<value>]*
    durations:    ISO-8601, e.g. PT5M, P30D
    money:        <currency> <amount>, e.g. "USD 42.42"
    lists:        comma-separated names; the empty string is an empty list
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta
from typing import TypeVar

from pydantic import AwareDatetime, TypeAdapter, ValidationError

from app.models.enums import TldState, TldType
from registry.errors import InvalidEnumValue, InvalidParameter
from registry.money import Money
from registry.overrides import CLEAR, Clear
from registry.schedule import START_OF_TIME, Transition

V = TypeVar("V")

_DATETIME = TypeAdapter(AwareDatetime)
_DURATION = TypeAdapter(timedelta)

# Accepted in place of an ISO timestamp
TIME_ALIASES = {"START_OF_TIME": START_OF_TIME}


def parse_datetime(text: str, parameter: str = "time") -> datetime:
    text = text.strip()
    if text in TIME_ALIASES:
        return TIME_ALIASES[text]
    try:
        return _DATETIME.validate_python(text)
    except ValidationError as e:
        raise InvalidParameter(parameter, text) from e


def parse_duration(text: str, parameter: str = "duration") -> timedelta:
    text = text.strip()
    # Bare numbers would be read as seconds; require the ISO form.
    if not text.upper().startswith("P"):
        raise InvalidParameter(parameter, text)
    try:
        return _DURATION.validate_python(text)
    except ValidationError as e:
        raise InvalidParameter(parameter, text) from e


def parse_money(text: str, parameter: str = "amount") -> Money:
    try:
        return Money.parse(text)
    except ValueError as e:
        raise InvalidParameter(parameter, text) from e


def parse_tld_state(text: str) -> TldState:
    value = text.strip().upper()
    try:
        return TldState(value)
    except ValueError:
        raise InvalidEnumValue(
            "TLD state", [value], [s.value for s in TldState]
        ) from None


def parse_tld_type(text: str) -> TldType:
    value = text.strip().upper()
    try:
        return TldType(value)
    except ValueError:
        raise InvalidEnumValue(
            "TLD type", [value], [t.value for t in TldType]
        ) from None


def parse_list(text: str) -> list[str]:
    """Split a comma-separated list; empty items are dropped."""
    return [item.strip() for item in text.split(",") if item.strip()]


def parse_optional_string(text: str) -> str | Clear:
    """The literal ``null`` clears the field."""
    return CLEAR if text.strip() == "null" else text.strip()


def parse_transitions(
    text: str,
    value_parser: Callable[[str], V],
    parameter: str = "transitions",
) -> list[Transition[V]]:
    """Parse ``<time>=<value>[,<time>=<value>]*`` into transitions.

    Order is preserved and duplicates are kept; the schedule update decides
    whether they are acceptable.
    """
    transitions: list[Transition[V]] = []
    for item in text.strip().strip('"').split(","):
        item = item.strip()
        if not item:
            continue
        time_text, sep, value_text = item.partition("=")
        if not sep:
            raise InvalidParameter(parameter, item, "Expected <time>=<value>")
        transitions.append(
            Transition(parse_datetime(time_text, parameter), value_parser(value_text))
        )
    return transitions


def parse_state_transitions(text: str) -> list[Transition[TldState]]:
    return parse_transitions(text, parse_tld_state, "tld_state_transitions")


def parse_money_transitions(text: str, parameter: str) -> list[Transition[Money]]:
    return parse_transitions(text, lambda v: parse_money(v, parameter), parameter)
