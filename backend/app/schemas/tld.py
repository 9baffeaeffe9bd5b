"""Pydantic schemas for TLD endpoints."""

from datetime import datetime, timedelta

from pydantic import AwareDatetime, BaseModel, Field

from app.models.enums import TldState, TldType
from registry.mutation import BatchResult
from registry.overrides import CLEAR, UNSET, TldOverrides
from registry.params import parse_money, parse_tld_state
from registry.revision import TldRevision
from registry.schedule import Transition
from registry.serialization import format_time


class TransitionSchema(BaseModel):
    """One (effective time, value) pair of a schedule."""

    effective_at: AwareDatetime
    value: str


def _schedule(schedule) -> list[TransitionSchema]:
    return [
        TransitionSchema(effective_at=t.effective_at, value=str(t.value))
        for t in schedule
    ]


class TldSchema(BaseModel):
    """Full configuration of a TLD at its latest revision."""

    tld_str: str
    revision_id: int
    currency: str
    roid_suffix: str | None
    tld_type: TldType
    tld_state_transitions: list[TransitionSchema]
    renew_billing_cost_transitions: list[TransitionSchema]
    eap_fee_schedule: list[TransitionSchema]
    create_billing_cost: str
    restore_billing_cost: str
    server_status_change_billing_cost: str
    registry_lock_or_unlock_billing_cost: str
    escrow_enabled: bool
    dns_paused: bool
    invoicing_enabled: bool
    add_grace_period_length: timedelta
    redemption_grace_period_length: timedelta
    pending_delete_length: timedelta
    automatic_transfer_length: timedelta
    dns_a_plus_aaaa_ttl: timedelta | None
    dns_ns_ttl: timedelta | None
    dns_ds_ttl: timedelta | None
    drive_folder_id: str | None
    lordn_username: str | None
    premium_list_name: str | None
    dns_writers: list[str]
    reserved_list_names: list[str]
    allowed_registrant_contact_ids: list[str]
    allowed_fully_qualified_host_names: list[str]
    idn_tables: list[str]
    default_promo_tokens: list[str]
    claims_period_end: datetime
    num_dns_publish_locks: int
    creation_time: datetime | None

    @classmethod
    def from_revision(cls, revision: TldRevision) -> "TldSchema":
        return cls(
            tld_str=revision.tld_str,
            revision_id=revision.revision_id,
            currency=revision.currency,
            roid_suffix=revision.roid_suffix,
            tld_type=revision.tld_type,
            tld_state_transitions=_schedule(revision.tld_state_transitions),
            renew_billing_cost_transitions=_schedule(
                revision.renew_billing_cost_transitions
            ),
            eap_fee_schedule=_schedule(revision.eap_fee_schedule),
            create_billing_cost=str(revision.create_billing_cost),
            restore_billing_cost=str(revision.restore_billing_cost),
            server_status_change_billing_cost=str(
                revision.server_status_change_billing_cost
            ),
            registry_lock_or_unlock_billing_cost=str(
                revision.registry_lock_or_unlock_billing_cost
            ),
            escrow_enabled=revision.escrow_enabled,
            dns_paused=revision.dns_paused,
            invoicing_enabled=revision.invoicing_enabled,
            add_grace_period_length=revision.add_grace_period_length,
            redemption_grace_period_length=revision.redemption_grace_period_length,
            pending_delete_length=revision.pending_delete_length,
            automatic_transfer_length=revision.automatic_transfer_length,
            dns_a_plus_aaaa_ttl=revision.dns_a_plus_aaaa_ttl,
            dns_ns_ttl=revision.dns_ns_ttl,
            dns_ds_ttl=revision.dns_ds_ttl,
            drive_folder_id=revision.drive_folder_id,
            lordn_username=revision.lordn_username,
            premium_list_name=revision.premium_list_name,
            dns_writers=sorted(revision.dns_writers),
            reserved_list_names=sorted(revision.reserved_list_names),
            allowed_registrant_contact_ids=sorted(
                revision.allowed_registrant_contact_ids
            ),
            allowed_fully_qualified_host_names=sorted(
                revision.allowed_fully_qualified_host_names
            ),
            idn_tables=sorted(t.value for t in revision.idn_tables),
            default_promo_tokens=list(revision.default_promo_tokens),
            claims_period_end=revision.claims_period_end,
            num_dns_publish_locks=revision.num_dns_publish_locks,
            creation_time=revision.creation_time,
        )


class EffectiveValuesSchema(BaseModel):
    """Values of the scheduled attributes at one instant."""

    tld_str: str
    at: str
    tld_state: TldState
    renew_billing_cost: str
    eap_fee: str
    next_state_change: str | None

    @classmethod
    def from_revision(
        cls, revision: TldRevision, at: datetime
    ) -> "EffectiveValuesSchema":
        next_change = revision.tld_state_transitions.next_transition_after(at)
        return cls(
            tld_str=revision.tld_str,
            at=format_time(at),
            tld_state=revision.get_tld_state(at),
            renew_billing_cost=str(revision.get_standard_renew_cost(at)),
            eap_fee=str(revision.get_eap_fee_for(at)),
            next_state_change=format_time(next_change) if next_change else None,
        )


class TldMutationRequest(BaseModel):
    """Create or update request for a batch of TLDs.

    Omitted fields are left unchanged. For clearable fields (premium list,
    drive folder, LORDN username, DNS TTLs, IDN tables) an explicit null
    clears the stored value.
    """

    tlds: list[str] = Field(min_length=1)
    override_reserved_list_rules: bool = False
    dry_run: bool = False

    tld_state_transitions: list[TransitionSchema] | None = None
    new_tld_state: TldState | None = Field(
        default=None,
        description="Initial state on create; state effective now on update",
    )
    renew_billing_cost_transitions: list[TransitionSchema] | None = None
    initial_renew_billing_cost: str | None = None
    eap_fee_schedule: list[TransitionSchema] | None = None

    roid_suffix: str | None = None
    tld_type: TldType | None = None
    currency: str | None = None

    create_billing_cost: str | None = None
    restore_billing_cost: str | None = None
    server_status_change_cost: str | None = None
    registry_lock_or_unlock_cost: str | None = None

    escrow_enabled: bool | None = None
    dns_paused: bool | None = None
    invoicing_enabled: bool | None = None

    add_grace_period: timedelta | None = None
    redemption_grace_period: timedelta | None = None
    pending_delete_length: timedelta | None = None
    automatic_transfer_length: timedelta | None = None
    dns_a_plus_aaaa_ttl: timedelta | None = None
    dns_ns_ttl: timedelta | None = None
    dns_ds_ttl: timedelta | None = None

    drive_folder_id: str | None = None
    lordn_username: str | None = None
    premium_list_name: str | None = None

    dns_writers: list[str] | None = None
    reserved_lists: list[str] | None = None
    add_reserved_lists: list[str] | None = None
    remove_reserved_lists: list[str] | None = None
    allowed_registrants: list[str] | None = None
    add_allowed_registrants: list[str] | None = None
    remove_allowed_registrants: list[str] | None = None
    allowed_nameservers: list[str] | None = None
    add_allowed_nameservers: list[str] | None = None
    remove_allowed_nameservers: list[str] | None = None
    default_tokens: list[str] | None = None
    idn_tables: list[str] | None = None

    claims_period_end: AwareDatetime | None = None
    num_dns_publish_locks: int | None = None

    def to_overrides(self) -> TldOverrides:
        """Convert to the tri-state override record.

        A field the client didn't send is UNSET. An explicit null is CLEAR
        for clearable fields and UNSET otherwise.
        """
        clearable = {
            "dns_a_plus_aaaa_ttl",
            "dns_ns_ttl",
            "dns_ds_ttl",
            "drive_folder_id",
            "lordn_username",
            "premium_list_name",
            "idn_tables",
        }
        money = {
            "initial_renew_billing_cost",
            "create_billing_cost",
            "restore_billing_cost",
            "server_status_change_cost",
            "registry_lock_or_unlock_cost",
        }
        transitions = {
            "tld_state_transitions": lambda v, n: parse_tld_state(v),
            "renew_billing_cost_transitions": parse_money,
            "eap_fee_schedule": parse_money,
        }
        skip = {"tlds", "override_reserved_list_rules", "dry_run"}

        values: dict = {}
        for name in self.model_fields_set - skip:
            value = getattr(self, name)
            if value is None:
                values[name] = CLEAR if name in clearable else UNSET
            elif name in money:
                values[name] = parse_money(value, name)
            elif name in transitions:
                decode = transitions[name]
                values[name] = [
                    Transition(t.effective_at, decode(t.value, name)) for t in value
                ]
            else:
                values[name] = value
        return TldOverrides(**values)


class TldOutcomeSchema(BaseModel):
    tld: str
    ok: bool
    revision_id: int | None = None
    error: str | None = None
    detail: str | None = None


class BatchResultSchema(BaseModel):
    kind: str
    dry_run: bool
    outcomes: list[TldOutcomeSchema]

    @classmethod
    def from_result(cls, result: BatchResult) -> "BatchResultSchema":
        return cls(
            kind=str(result.kind),
            dry_run=result.dry_run,
            outcomes=[
                TldOutcomeSchema(
                    tld=o.tld,
                    ok=o.ok,
                    revision_id=o.revision.revision_id if o.revision else None,
                    error=o.error.kind if o.error else None,
                    detail=o.error.message if o.error else None,
                )
                for o in result.outcomes
            ],
        )
