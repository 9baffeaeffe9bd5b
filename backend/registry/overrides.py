"""Sparse override records applied to a TLD revision.

Every field defaults to UNSET, meaning "keep the old value". Fields that can
be cleared accept CLEAR, which is distinct from UNSET: it sets the field
back to None (or empty for collections).
"""

from __future__ import annotations

import enum
from collections.abc import Sequence
from dataclasses import dataclass, fields
from datetime import datetime, timedelta
from typing import Literal, TypeVar

from app.models.enums import TldState, TldType
from registry.money import Money
from registry.schedule import Transition

T = TypeVar("T")


class Sentinel(enum.Enum):
    UNSET = "UNSET"
    CLEAR = "CLEAR"

    def __repr__(self) -> str:
        return self.value


UNSET = Sentinel.UNSET
CLEAR = Sentinel.CLEAR

Unset = Literal[Sentinel.UNSET]
Clear = Literal[Sentinel.CLEAR]


@dataclass(frozen=True)
class TldOverrides:
    """Requested changes to a TLD; UNSET fields are left alone."""

    # Schedules: full replacement sets or single transitions to add
    tld_state_transitions: Sequence[Transition[TldState]] | Unset = UNSET
    new_tld_state: TldState | Unset = UNSET
    renew_billing_cost_transitions: Sequence[Transition[Money]] | Unset = UNSET
    initial_renew_billing_cost: Money | Unset = UNSET
    eap_fee_schedule: Sequence[Transition[Money]] | Unset = UNSET

    # Identity
    roid_suffix: str | Unset = UNSET
    tld_type: TldType | Unset = UNSET
    currency: str | Unset = UNSET

    # Costs
    create_billing_cost: Money | Unset = UNSET
    restore_billing_cost: Money | Unset = UNSET
    server_status_change_cost: Money | Unset = UNSET
    registry_lock_or_unlock_cost: Money | Unset = UNSET

    # Flags
    escrow_enabled: bool | Unset = UNSET
    dns_paused: bool | Unset = UNSET
    invoicing_enabled: bool | Unset = UNSET

    # Durations
    add_grace_period: timedelta | Unset = UNSET
    redemption_grace_period: timedelta | Unset = UNSET
    pending_delete_length: timedelta | Unset = UNSET
    automatic_transfer_length: timedelta | Unset = UNSET
    dns_a_plus_aaaa_ttl: timedelta | Clear | Unset = UNSET
    dns_ns_ttl: timedelta | Clear | Unset = UNSET
    dns_ds_ttl: timedelta | Clear | Unset = UNSET

    # Clearable strings
    drive_folder_id: str | Clear | Unset = UNSET
    lordn_username: str | Clear | Unset = UNSET
    premium_list_name: str | Clear | Unset = UNSET

    # Collections; add/remove variants are only meaningful for updates
    dns_writers: Sequence[str] | Unset = UNSET
    reserved_lists: Sequence[str] | Unset = UNSET
    add_reserved_lists: Sequence[str] | Unset = UNSET
    remove_reserved_lists: Sequence[str] | Unset = UNSET
    allowed_registrants: Sequence[str] | Unset = UNSET
    add_allowed_registrants: Sequence[str] | Unset = UNSET
    remove_allowed_registrants: Sequence[str] | Unset = UNSET
    allowed_nameservers: Sequence[str] | Unset = UNSET
    add_allowed_nameservers: Sequence[str] | Unset = UNSET
    remove_allowed_nameservers: Sequence[str] | Unset = UNSET
    default_tokens: Sequence[str] | Unset = UNSET
    idn_tables: Sequence[str] | Clear | Unset = UNSET

    claims_period_end: datetime | Unset = UNSET
    num_dns_publish_locks: int | Unset = UNSET

    def touched(self) -> list[str]:
        """Names of the fields that carry a value (including CLEAR)."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not UNSET]


def is_set(value: object) -> bool:
    return value is not UNSET


def merged(old: T, override: T | Clear | Unset) -> T | None:
    """Resolve one tri-state field against its old value."""
    if override is UNSET:
        return old
    if override is CLEAR:
        return None
    return override  # type: ignore[return-value]
