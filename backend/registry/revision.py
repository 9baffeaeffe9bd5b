"""Immutable TLD revision snapshots.

A revision is the full configuration of a TLD at one point in its edit
history. New revisions are built from old ones by merging overrides (see
registry.overrides); a revision is never changed in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta

from app.models.enums import IdnTable, TldState, TldType
from registry.money import Money
from registry.schedule import END_OF_TIME, MoneySchedule, Schedule

STATIC_PREMIUM_LIST_PRICING_ENGINE = "StaticPremiumListPricingEngine"

DEFAULT_ADD_GRACE_PERIOD = timedelta(days=5)
DEFAULT_REDEMPTION_GRACE_PERIOD = timedelta(days=30)
DEFAULT_PENDING_DELETE_LENGTH = timedelta(days=5)
DEFAULT_AUTOMATIC_TRANSFER_LENGTH = timedelta(days=5)


@dataclass(frozen=True)
class TldRevision:
    """A snapshot of one TLD's configuration."""

    tld_str: str
    currency: str
    tld_state_transitions: Schedule[TldState]
    renew_billing_cost_transitions: MoneySchedule
    eap_fee_schedule: MoneySchedule
    create_billing_cost: Money
    restore_billing_cost: Money
    server_status_change_billing_cost: Money
    registry_lock_or_unlock_billing_cost: Money

    roid_suffix: str | None = None
    tld_type: TldType = TldType.REAL
    premium_pricing_engine: str = STATIC_PREMIUM_LIST_PRICING_ENGINE

    escrow_enabled: bool = False
    dns_paused: bool = False
    invoicing_enabled: bool = False

    add_grace_period_length: timedelta = DEFAULT_ADD_GRACE_PERIOD
    redemption_grace_period_length: timedelta = DEFAULT_REDEMPTION_GRACE_PERIOD
    pending_delete_length: timedelta = DEFAULT_PENDING_DELETE_LENGTH
    automatic_transfer_length: timedelta = DEFAULT_AUTOMATIC_TRANSFER_LENGTH
    dns_a_plus_aaaa_ttl: timedelta | None = None
    dns_ns_ttl: timedelta | None = None
    dns_ds_ttl: timedelta | None = None

    drive_folder_id: str | None = None
    lordn_username: str | None = None
    premium_list_name: str | None = None

    dns_writers: frozenset[str] = field(default_factory=frozenset)
    reserved_list_names: frozenset[str] = field(default_factory=frozenset)
    allowed_registrant_contact_ids: frozenset[str] = field(default_factory=frozenset)
    allowed_fully_qualified_host_names: frozenset[str] = field(
        default_factory=frozenset
    )
    idn_tables: frozenset[IdnTable] = field(default_factory=frozenset)
    # Order matters: the first valid token wins at registration time.
    default_promo_tokens: tuple[str, ...] = ()

    claims_period_end: datetime = END_OF_TIME
    num_dns_publish_locks: int = 1

    # Assigned by the store; 0 means never persisted.
    revision_id: int = 0
    creation_time: datetime | None = None

    # =========================================================================
    # Effective values
    # =========================================================================

    def get_tld_state(self, at: datetime) -> TldState:
        return self.tld_state_transitions.lookup(at)

    def get_standard_renew_cost(self, at: datetime) -> Money:
        return self.renew_billing_cost_transitions.lookup(at)

    def get_eap_fee_for(self, at: datetime) -> Money:
        return self.eap_fee_schedule.lookup(at)

    def money_fields(self) -> dict[str, Money]:
        """One-time cost fields, keyed by their human-readable name."""
        return {
            "Create billing cost": self.create_billing_cost,
            "Restore billing cost": self.restore_billing_cost,
            "Server status change billing cost": self.server_status_change_billing_cost,
            "Registry lock/unlock billing cost": (
                self.registry_lock_or_unlock_billing_cost
            ),
        }

    def money_schedules(self) -> dict[str, MoneySchedule]:
        return {
            "Renew billing costs": self.renew_billing_cost_transitions,
            "EAP fees": self.eap_fee_schedule,
        }


def default_revision(tld: str, currency: str = "USD") -> TldRevision:
    """The configuration a newly created TLD starts from."""
    currency = currency.upper()
    return TldRevision(
        tld_str=tld,
        currency=currency,
        tld_state_transitions=Schedule.constant(TldState.PREDELEGATION),
        renew_billing_cost_transitions=MoneySchedule.constant(Money.of(currency, 8)),
        eap_fee_schedule=MoneySchedule.constant(Money.zero(currency)),
        create_billing_cost=Money.of(currency, 8),
        restore_billing_cost=Money.of(currency, 17),
        server_status_change_billing_cost=Money.of(currency, 20),
        registry_lock_or_unlock_billing_cost=Money.zero(currency),
    )
