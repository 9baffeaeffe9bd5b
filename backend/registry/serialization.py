"""JSON-compatible (de)serialization of TLD revisions.

Used for the ``payload`` column of the tld table. Timestamps are ISO-8601
UTC with milliseconds, money is ``"USD 8.00"``, durations are seconds.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any

from app.models.enums import IdnTable, TldState, TldType
from registry.money import Money
from registry.revision import TldRevision
from registry.schedule import MoneySchedule, Schedule, Transition


def format_time(value: datetime) -> str:
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def parse_time(text: str) -> datetime:
    return datetime.fromisoformat(text.replace("Z", "+00:00"))


def _duration(value: timedelta | None) -> float | None:
    return None if value is None else value.total_seconds()


def _from_duration(value: float | None) -> timedelta | None:
    return None if value is None else timedelta(seconds=value)


def schedule_to_list(schedule: Schedule, encode=str) -> list[list[str]]:
    return [[format_time(t.effective_at), encode(t.value)] for t in schedule]


def revision_to_dict(revision: TldRevision) -> dict[str, Any]:
    return {
        "tld_str": revision.tld_str,
        "currency": revision.currency,
        "roid_suffix": revision.roid_suffix,
        "tld_type": revision.tld_type.value,
        "premium_pricing_engine": revision.premium_pricing_engine,
        "tld_state_transitions": schedule_to_list(revision.tld_state_transitions),
        "renew_billing_cost_transitions": schedule_to_list(
            revision.renew_billing_cost_transitions
        ),
        "eap_fee_schedule": schedule_to_list(revision.eap_fee_schedule),
        "create_billing_cost": str(revision.create_billing_cost),
        "restore_billing_cost": str(revision.restore_billing_cost),
        "server_status_change_billing_cost": str(
            revision.server_status_change_billing_cost
        ),
        "registry_lock_or_unlock_billing_cost": str(
            revision.registry_lock_or_unlock_billing_cost
        ),
        "escrow_enabled": revision.escrow_enabled,
        "dns_paused": revision.dns_paused,
        "invoicing_enabled": revision.invoicing_enabled,
        "add_grace_period_length": _duration(revision.add_grace_period_length),
        "redemption_grace_period_length": _duration(
            revision.redemption_grace_period_length
        ),
        "pending_delete_length": _duration(revision.pending_delete_length),
        "automatic_transfer_length": _duration(revision.automatic_transfer_length),
        "dns_a_plus_aaaa_ttl": _duration(revision.dns_a_plus_aaaa_ttl),
        "dns_ns_ttl": _duration(revision.dns_ns_ttl),
        "dns_ds_ttl": _duration(revision.dns_ds_ttl),
        "drive_folder_id": revision.drive_folder_id,
        "lordn_username": revision.lordn_username,
        "premium_list_name": revision.premium_list_name,
        "dns_writers": sorted(revision.dns_writers),
        "reserved_list_names": sorted(revision.reserved_list_names),
        "allowed_registrant_contact_ids": sorted(
            revision.allowed_registrant_contact_ids
        ),
        "allowed_fully_qualified_host_names": sorted(
            revision.allowed_fully_qualified_host_names
        ),
        "idn_tables": sorted(t.value for t in revision.idn_tables),
        "default_promo_tokens": list(revision.default_promo_tokens),
        "claims_period_end": format_time(revision.claims_period_end),
        "num_dns_publish_locks": revision.num_dns_publish_locks,
        "revision_id": revision.revision_id,
        "creation_time": (
            format_time(revision.creation_time) if revision.creation_time else None
        ),
    }


def revision_from_dict(data: dict[str, Any]) -> TldRevision:
    def schedule(key: str, decode, schedule_type: type[Schedule]) -> Schedule:
        return schedule_type(
            Transition(parse_time(at), decode(value)) for at, value in data[key]
        )

    return TldRevision(
        tld_str=data["tld_str"],
        currency=data["currency"],
        roid_suffix=data.get("roid_suffix"),
        tld_type=TldType(data["tld_type"]),
        premium_pricing_engine=data["premium_pricing_engine"],
        tld_state_transitions=schedule("tld_state_transitions", TldState, Schedule),
        renew_billing_cost_transitions=schedule(
            "renew_billing_cost_transitions", Money.parse, MoneySchedule
        ),
        eap_fee_schedule=schedule("eap_fee_schedule", Money.parse, MoneySchedule),
        create_billing_cost=Money.parse(data["create_billing_cost"]),
        restore_billing_cost=Money.parse(data["restore_billing_cost"]),
        server_status_change_billing_cost=Money.parse(
            data["server_status_change_billing_cost"]
        ),
        registry_lock_or_unlock_billing_cost=Money.parse(
            data["registry_lock_or_unlock_billing_cost"]
        ),
        escrow_enabled=data["escrow_enabled"],
        dns_paused=data["dns_paused"],
        invoicing_enabled=data["invoicing_enabled"],
        add_grace_period_length=_from_duration(data["add_grace_period_length"]),
        redemption_grace_period_length=_from_duration(
            data["redemption_grace_period_length"]
        ),
        pending_delete_length=_from_duration(data["pending_delete_length"]),
        automatic_transfer_length=_from_duration(data["automatic_transfer_length"]),
        dns_a_plus_aaaa_ttl=_from_duration(data.get("dns_a_plus_aaaa_ttl")),
        dns_ns_ttl=_from_duration(data.get("dns_ns_ttl")),
        dns_ds_ttl=_from_duration(data.get("dns_ds_ttl")),
        drive_folder_id=data.get("drive_folder_id"),
        lordn_username=data.get("lordn_username"),
        premium_list_name=data.get("premium_list_name"),
        dns_writers=frozenset(data.get("dns_writers", [])),
        reserved_list_names=frozenset(data.get("reserved_list_names", [])),
        allowed_registrant_contact_ids=frozenset(
            data.get("allowed_registrant_contact_ids", [])
        ),
        allowed_fully_qualified_host_names=frozenset(
            data.get("allowed_fully_qualified_host_names", [])
        ),
        idn_tables=frozenset(IdnTable(t) for t in data.get("idn_tables", [])),
        default_promo_tokens=tuple(data.get("default_promo_tokens", [])),
        claims_period_end=parse_time(data["claims_period_end"]),
        num_dns_publish_locks=data["num_dns_publish_locks"],
        revision_id=data.get("revision_id", 0),
        creation_time=(
            parse_time(data["creation_time"]) if data.get("creation_time") else None
        ),
    )
