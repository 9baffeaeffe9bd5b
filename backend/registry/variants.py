"""Create vs. update behaviour, expressed as strategy records.

Both mutation kinds share one staging pipeline (registry.validator). The
points where they differ are collected in a MutationVariant and selected by
MutationKind, so the pipeline never needs to know which kind it is running.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from app.models.enums import TldState
from registry.errors import (
    AlreadyExists,
    ConflictingOverride,
    InvalidParameter,
    NotFound,
)
from registry.money import Money
from registry.overrides import UNSET, TldOverrides, Unset
from registry.revision import TldRevision
from registry.schedule import START_OF_TIME, Transition


class MutationKind(StrEnum):
    CREATE = "create"
    UPDATE = "update"


# (field name, old value, replacement, additions, removals) -> new value
SetResolver = Callable[..., frozenset[str]]


@dataclass(frozen=True)
class MutationVariant:
    """The hooks a mutation kind plugs into the staging pipeline."""

    kind: MutationKind
    check_existence: Callable[[str, TldRevision | None], None]
    state_transition_to_add: Callable[
        [TldOverrides, datetime], Transition[TldState] | None
    ]
    renew_cost_transition_to_add: Callable[[TldOverrides], Transition[Money] | None]
    resolve_set: SetResolver


# =============================================================================
# Create
# =============================================================================


def _check_absent(tld: str, old: TldRevision | None) -> None:
    if old is not None:
        raise AlreadyExists(tld)


def _initial_state(
    overrides: TldOverrides, now: datetime
) -> Transition[TldState] | None:
    if overrides.new_tld_state is UNSET:
        return None
    return Transition(START_OF_TIME, overrides.new_tld_state)


def _initial_renew_cost(overrides: TldOverrides) -> Transition[Money] | None:
    if overrides.initial_renew_billing_cost is UNSET:
        return None
    return Transition(START_OF_TIME, overrides.initial_renew_billing_cost)


def _create_set(
    field_name: str,
    old: frozenset[str],
    replace: Iterable[str] | Unset,
    add: Iterable[str] | Unset,
    remove: Iterable[str] | Unset,
) -> frozenset[str]:
    if add is not UNSET or remove is not UNSET:
        raise InvalidParameter(
            f"add/remove {field_name}", "", "Only valid when updating a TLD"
        )
    return frozenset(replace) if replace is not UNSET else old


CREATE = MutationVariant(
    kind=MutationKind.CREATE,
    check_existence=_check_absent,
    state_transition_to_add=_initial_state,
    renew_cost_transition_to_add=_initial_renew_cost,
    resolve_set=_create_set,
)


# =============================================================================
# Update
# =============================================================================


def _check_present(tld: str, old: TldRevision | None) -> None:
    if old is None:
        raise NotFound(tld)


def _current_state(
    overrides: TldOverrides, now: datetime
) -> Transition[TldState] | None:
    if overrides.new_tld_state is UNSET:
        return None
    return Transition(now, overrides.new_tld_state)


def _no_initial_renew_cost(overrides: TldOverrides) -> Transition[Money] | None:
    if overrides.initial_renew_billing_cost is not UNSET:
        raise InvalidParameter(
            "initial_renew_billing_cost",
            str(overrides.initial_renew_billing_cost),
            "Only valid when creating a TLD",
        )
    return None


def _update_set(
    field_name: str,
    old: frozenset[str],
    replace: Iterable[str] | Unset,
    add: Iterable[str] | Unset,
    remove: Iterable[str] | Unset,
) -> frozenset[str]:
    if replace is not UNSET:
        if add is not UNSET or remove is not UNSET:
            raise ConflictingOverride(field_name)
        return frozenset(replace)
    result = set(old)
    if add is not UNSET:
        result |= set(add)
    if remove is not UNSET:
        result -= set(remove)
    return frozenset(result)


UPDATE = MutationVariant(
    kind=MutationKind.UPDATE,
    check_existence=_check_present,
    state_transition_to_add=_current_state,
    renew_cost_transition_to_add=_no_initial_renew_cost,
    resolve_set=_update_set,
)


VARIANTS: dict[MutationKind, MutationVariant] = {
    MutationKind.CREATE: CREATE,
    MutationKind.UPDATE: UPDATE,
}
