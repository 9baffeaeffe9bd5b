"""Staged mutation: old revision × overrides → validated new revision.

stage_revision() is a pure function. It either returns a complete new
TldRevision or raises a TldConfigError; nothing is persisted here and no
partially-applied revision is ever returned.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from app.models.enums import IdnTable
from registry.catalogs import Catalogs, NamedCatalog
from registry.errors import (
    BatchIdentityConflict,
    CurrencyMismatch,
    DuplicateInput,
    InvalidEnumValue,
    InvalidIdentityFormat,
    InvalidParameter,
    MissingRequiredField,
    NamingConventionViolation,
    NegativeCost,
    NotCanonical,
    UnknownReference,
)
from registry.overrides import CLEAR, UNSET, TldOverrides, merged
from registry.revision import TldRevision, default_revision
from registry.schedule import MoneySchedule, Schedule, apply_schedule_update
from registry.variants import MutationKind, MutationVariant

logger = logging.getLogger(__name__)

ROID_SUFFIX_RE = re.compile(r"^[A-Z0-9_]{1,8}$")


@dataclass
class StagingContext:
    """Everything a staging run needs besides the old revision and overrides."""

    catalogs: Catalogs = field(default_factory=Catalogs)
    default_currency: str = "USD"
    common_reserved_list_prefix: str = "common_"
    override_reserved_list_rules: bool = False
    warn_on_multiple_renew_costs: bool = True
    now: datetime = field(default_factory=lambda: datetime.now(UTC))


# =============================================================================
# Identity and batch checks
# =============================================================================


def canonicalize_tld(name: str) -> str:
    """Lowercase and convert to the ASCII (punycode) form."""
    lowered = name.lower()
    try:
        return lowered.encode("idna").decode("ascii")
    except UnicodeError:
        return lowered


def check_identity(tld: str) -> None:
    """Raise if ``tld`` isn't canonical or starts with a digit."""
    canonical = canonicalize_tld(tld)
    if tld != canonical:
        raise NotCanonical(tld, canonical)
    if not tld:
        raise InvalidIdentityFormat(tld, "TLD name cannot be empty")
    if tld[0].isdigit():
        raise InvalidIdentityFormat(tld)


def find_duplicates(names: Iterable[str]) -> list[str]:
    """Names that appear more than once, in first-seen order."""
    counts = Counter(names)
    return [name for name, count in counts.items() if count > 1]


def check_batch(tlds: Sequence[str], overrides: TldOverrides) -> None:
    """Batch-wide checks that run before any per-TLD processing.

    Raises:
        DuplicateInput: If a TLD name is given more than once.
        BatchIdentityConflict: If a ROID suffix is set for several TLDs.
    """
    duplicates = find_duplicates(tlds)
    if duplicates:
        raise DuplicateInput(duplicates)
    if overrides.roid_suffix is not UNSET and len(tlds) > 1:
        raise BatchIdentityConflict("roid suffixes", len(tlds))


# =============================================================================
# Reference checks
# =============================================================================


def _in_order(values: frozenset[str], *sources: Iterable[str]) -> list[str]:
    """``values`` ordered by first appearance across ``sources``, rest sorted."""
    ordered: list[str] = []
    for source in sources:
        for value in source:
            if value in values and value not in ordered:
                ordered.append(value)
    ordered.extend(sorted(values.difference(ordered)))
    return ordered


def check_reserved_list_naming(
    tld: str,
    names: Sequence[str],
    common_prefix: str,
    override: bool,
) -> None:
    """Reserved lists must be shared (common prefix) or scoped to this TLD.

    All offending names are reported together, in input order. When
    ``override`` is set the violation is only logged.
    """
    invalid = [
        name
        for name in names
        if not name.startswith(common_prefix) and not name.startswith(f"{tld}_")
    ]
    if not invalid:
        return
    error = NamingConventionViolation(tld, invalid)
    if override:
        logger.warning(f"Error overridden: {error.message}")
        return
    raise error


def _check_resolves(
    catalog_name: str, names: Sequence[str], catalog: NamedCatalog
) -> None:
    missing = catalog.missing(names)
    if missing:
        raise UnknownReference(catalog_name, missing)


def parse_idn_tables(values: Sequence[str]) -> frozenset[IdnTable]:
    """Upper-case the names and map them onto IdnTable.

    An empty list, or a list holding only the empty string, clears the set.

    Raises:
        InvalidEnumValue: With every unrecognized value and the full domain.
    """
    if not values or list(values) == [""]:
        return frozenset()
    upper: list[str] = []
    for value in values:
        if value.upper() not in upper:
            upper.append(value.upper())
    domain = [member.value for member in IdnTable]
    if any(value not in domain for value in upper):
        raise InvalidEnumValue("IDN tables", upper, domain)
    return frozenset(IdnTable(value) for value in upper)


def check_currency_agreement(revision: TldRevision) -> None:
    """Every cost must be in the TLD's currency and non-negative."""
    for name, money in revision.money_fields().items():
        if money.currency != revision.currency:
            raise CurrencyMismatch(name, revision.currency, [money.currency])
        if money.is_negative:
            raise NegativeCost(name, money)
    for name, schedule in revision.money_schedules().items():
        if schedule.currency != revision.currency:
            raise CurrencyMismatch(name, revision.currency, [schedule.currency])


# =============================================================================
# Staging
# =============================================================================


def _replacement(value):
    return None if value is UNSET else value


def stage_revision(
    tld: str,
    old: TldRevision | None,
    overrides: TldOverrides,
    variant: MutationVariant,
    ctx: StagingContext,
) -> TldRevision:
    """Build the validated new revision for one TLD.

    Args:
        tld: Name of the TLD being created or updated.
        old: The current stored revision, or None if there is none.
        overrides: Requested changes.
        variant: Create or update behaviour.
        ctx: Catalogs, settings and the current time.

    Returns:
        The new revision. ``revision_id`` is left for the store to assign.

    Raises:
        TldConfigError: On the first rule the overrides violate.
    """
    check_identity(tld)
    variant.check_existence(tld, old)

    currency = overrides.currency.upper() if overrides.currency is not UNSET else None
    base = old or default_revision(tld, currency or ctx.default_currency)

    # Schedules
    state_schedule = apply_schedule_update(
        "TLD state transitions",
        old.tld_state_transitions if old else None,
        replacement=_replacement(overrides.tld_state_transitions),
        append=variant.state_transition_to_add(overrides, ctx.now),
        schedule_type=Schedule,
    )

    renew_replacement = _replacement(overrides.renew_billing_cost_transitions)
    if (
        renew_replacement
        and len(renew_replacement) > 1
        and ctx.warn_on_multiple_renew_costs
    ):
        logger.warning(
            f"Multiple renew cost transitions set for {tld}; invoicing only "
            "supports a single renew billing cost"
        )
    renew_schedule = apply_schedule_update(
        "renew billing cost transitions",
        old.renew_billing_cost_transitions if old else None,
        replacement=renew_replacement,
        append=variant.renew_cost_transition_to_add(overrides),
        schedule_type=MoneySchedule,
    )

    eap_schedule = apply_schedule_update(
        "EAP fee schedule",
        old.eap_fee_schedule if old else None,
        replacement=_replacement(overrides.eap_fee_schedule),
        schedule_type=MoneySchedule,
    )

    # Collections
    reserved = variant.resolve_set(
        "reserved lists",
        base.reserved_list_names,
        overrides.reserved_lists,
        overrides.add_reserved_lists,
        overrides.remove_reserved_lists,
    )
    registrants = variant.resolve_set(
        "allowed registrants",
        base.allowed_registrant_contact_ids,
        overrides.allowed_registrants,
        overrides.add_allowed_registrants,
        overrides.remove_allowed_registrants,
    )
    nameservers = variant.resolve_set(
        "allowed nameservers",
        base.allowed_fully_qualified_host_names,
        overrides.allowed_nameservers,
        overrides.add_allowed_nameservers,
        overrides.remove_allowed_nameservers,
    )

    reserved_order = _in_order(
        reserved,
        _replacement(overrides.reserved_lists) or (),
        _replacement(overrides.add_reserved_lists) or (),
    )
    check_reserved_list_naming(
        tld,
        reserved_order,
        ctx.common_reserved_list_prefix,
        ctx.override_reserved_list_rules,
    )
    _check_resolves("reserved list", reserved_order, ctx.catalogs.reserved_lists)

    dns_writers = base.dns_writers
    if overrides.dns_writers is not UNSET:
        _check_resolves("DNS writer", overrides.dns_writers, ctx.catalogs.dns_writers)
        dns_writers = frozenset(overrides.dns_writers)
    if variant.kind == MutationKind.CREATE and not dns_writers:
        raise MissingRequiredField(
            "dns_writers", "At least one DNS writer must be specified"
        )

    premium_list_name = merged(base.premium_list_name, overrides.premium_list_name)
    if overrides.premium_list_name not in (UNSET, CLEAR):
        _check_resolves(
            "premium list", [overrides.premium_list_name], ctx.catalogs.premium_lists
        )

    default_tokens = base.default_promo_tokens
    if overrides.default_tokens is not UNSET:
        tokens = [t for t in overrides.default_tokens if t]
        _check_resolves("allocation token", tokens, ctx.catalogs.allocation_tokens)
        default_tokens = tuple(dict.fromkeys(tokens))

    idn_tables = base.idn_tables
    if overrides.idn_tables is CLEAR:
        idn_tables = frozenset()
    elif overrides.idn_tables is not UNSET:
        idn_tables = parse_idn_tables(overrides.idn_tables)

    roid_suffix = merged(base.roid_suffix, overrides.roid_suffix)
    if overrides.roid_suffix is not UNSET and not ROID_SUFFIX_RE.match(roid_suffix):
        raise InvalidParameter(
            "roid_suffix", roid_suffix, "ROID suffix must be 1-8 of [A-Z0-9_]"
        )

    num_locks = merged(base.num_dns_publish_locks, overrides.num_dns_publish_locks)
    if num_locks < 1:
        raise InvalidParameter(
            "num_dns_publish_locks", str(num_locks), "Must be a positive integer"
        )

    revision = dataclasses.replace(
        base,
        currency=currency or base.currency,
        tld_state_transitions=state_schedule or base.tld_state_transitions,
        renew_billing_cost_transitions=(
            renew_schedule or base.renew_billing_cost_transitions
        ),
        eap_fee_schedule=eap_schedule or base.eap_fee_schedule,
        roid_suffix=roid_suffix,
        tld_type=merged(base.tld_type, overrides.tld_type),
        create_billing_cost=merged(
            base.create_billing_cost, overrides.create_billing_cost
        ),
        restore_billing_cost=merged(
            base.restore_billing_cost, overrides.restore_billing_cost
        ),
        server_status_change_billing_cost=merged(
            base.server_status_change_billing_cost, overrides.server_status_change_cost
        ),
        registry_lock_or_unlock_billing_cost=merged(
            base.registry_lock_or_unlock_billing_cost,
            overrides.registry_lock_or_unlock_cost,
        ),
        escrow_enabled=merged(base.escrow_enabled, overrides.escrow_enabled),
        dns_paused=merged(base.dns_paused, overrides.dns_paused),
        invoicing_enabled=merged(base.invoicing_enabled, overrides.invoicing_enabled),
        add_grace_period_length=merged(
            base.add_grace_period_length, overrides.add_grace_period
        ),
        redemption_grace_period_length=merged(
            base.redemption_grace_period_length, overrides.redemption_grace_period
        ),
        pending_delete_length=merged(
            base.pending_delete_length, overrides.pending_delete_length
        ),
        automatic_transfer_length=merged(
            base.automatic_transfer_length, overrides.automatic_transfer_length
        ),
        dns_a_plus_aaaa_ttl=merged(
            base.dns_a_plus_aaaa_ttl, overrides.dns_a_plus_aaaa_ttl
        ),
        dns_ns_ttl=merged(base.dns_ns_ttl, overrides.dns_ns_ttl),
        dns_ds_ttl=merged(base.dns_ds_ttl, overrides.dns_ds_ttl),
        drive_folder_id=merged(base.drive_folder_id, overrides.drive_folder_id),
        lordn_username=merged(base.lordn_username, overrides.lordn_username),
        premium_list_name=premium_list_name,
        dns_writers=dns_writers,
        reserved_list_names=reserved,
        allowed_registrant_contact_ids=registrants,
        allowed_fully_qualified_host_names=nameservers,
        idn_tables=idn_tables,
        default_promo_tokens=default_tokens,
        claims_period_end=merged(base.claims_period_end, overrides.claims_period_end),
        num_dns_publish_locks=num_locks,
        creation_time=base.creation_time or ctx.now,
    )

    check_currency_agreement(revision)
    return revision
