"""Command-line tool for creating, updating and inspecting TLDs.

Usage:
    python -m registry.cli create-tld --roid_suffix=XN \\
        --dns_writers=VoidDnsWriter xn
    python -m registry.cli update-tld \\
        --tld_state_transitions="START_OF_TIME=PREDELEGATION,2026-03-01T00:00:00Z=GENERAL_AVAILABILITY" \\
        example
    python -m registry.cli show-tld example
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Callable
from typing import Any

from registry.errors import InvalidParameter, TldConfigError
from registry.overrides import CLEAR, TldOverrides
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
from registry.variants import MutationKind

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)-5.5s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


def parse_bool(text: str, parameter: str) -> bool:
    value = text.strip().lower()
    if value in ("true", "1", "yes"):
        return True
    if value in ("false", "0", "no"):
        return False
    raise InvalidParameter(parameter, text, "Expected true or false")


def parse_int(text: str, parameter: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise InvalidParameter(parameter, text, "Expected an integer") from None


def parse_clearable_duration(text: str, parameter: str):
    value = parse_optional_string(text)
    return value if value is CLEAR else parse_duration(value, parameter)


def parse_idn_table_names(text: str, parameter: str):
    # An empty value clears the IDN tables.
    names = parse_list(text)
    return names or CLEAR


# flag -> (override field, parser(text, flag)); kinds limit where the flag applies
Parser = Callable[[str, str], Any]
FLAGS: dict[str, tuple[str, Parser, frozenset[MutationKind]]] = {}

BOTH = frozenset(MutationKind)
CREATE_ONLY = frozenset({MutationKind.CREATE})
UPDATE_ONLY = frozenset({MutationKind.UPDATE})


def _flag(
    name: str, field: str, parser: Parser, kinds: frozenset[MutationKind] = BOTH
) -> None:
    FLAGS[name] = (field, parser, kinds)


_flag("tld_state_transitions", "tld_state_transitions",
      lambda v, _: parse_state_transitions(v))
_flag("initial_tld_state", "new_tld_state",
      lambda v, _: parse_tld_state(v), CREATE_ONLY)
_flag("set_current_tld_state", "new_tld_state",
      lambda v, _: parse_tld_state(v), UPDATE_ONLY)
_flag("renew_billing_cost_transitions", "renew_billing_cost_transitions",
      parse_money_transitions)
_flag("initial_renew_billing_cost", "initial_renew_billing_cost",
      parse_money, CREATE_ONLY)
_flag("eap_fee_schedule", "eap_fee_schedule", parse_money_transitions)
_flag("create_billing_cost", "create_billing_cost", parse_money)
_flag("restore_billing_cost", "restore_billing_cost", parse_money)
_flag("server_status_change_cost", "server_status_change_cost", parse_money)
_flag("registry_lock_or_unlock_cost", "registry_lock_or_unlock_cost", parse_money)
_flag("roid_suffix", "roid_suffix", lambda v, _: v.strip())
_flag("tld_type", "tld_type", lambda v, _: parse_tld_type(v))
_flag("escrow", "escrow_enabled", parse_bool)
_flag("dns", "dns_paused", lambda v, p: not parse_bool(v, p))
_flag("invoicing_enabled", "invoicing_enabled", parse_bool)
_flag("add_grace_period", "add_grace_period", parse_duration)
_flag("redemption_grace_period", "redemption_grace_period", parse_duration)
_flag("pending_delete_length", "pending_delete_length", parse_duration)
_flag("automatic_transfer_length", "automatic_transfer_length", parse_duration)
_flag("dns_a_plus_aaaa_ttl", "dns_a_plus_aaaa_ttl", parse_clearable_duration)
_flag("dns_ns_ttl", "dns_ns_ttl", parse_clearable_duration)
_flag("dns_ds_ttl", "dns_ds_ttl", parse_clearable_duration)
_flag("drive_folder_id", "drive_folder_id", lambda v, _: parse_optional_string(v))
_flag("lordn_username", "lordn_username", lambda v, _: parse_optional_string(v))
_flag("premium_list", "premium_list_name", lambda v, _: parse_optional_string(v))
_flag("dns_writers", "dns_writers", lambda v, _: parse_list(v))
_flag("reserved_lists", "reserved_lists", lambda v, _: parse_list(v))
_flag("add_reserved_lists", "add_reserved_lists",
      lambda v, _: parse_list(v), UPDATE_ONLY)
_flag("remove_reserved_lists", "remove_reserved_lists",
      lambda v, _: parse_list(v), UPDATE_ONLY)
_flag("allowed_registrants", "allowed_registrants", lambda v, _: parse_list(v))
_flag("add_allowed_registrants", "add_allowed_registrants",
      lambda v, _: parse_list(v), UPDATE_ONLY)
_flag("remove_allowed_registrants", "remove_allowed_registrants",
      lambda v, _: parse_list(v), UPDATE_ONLY)
_flag("allowed_nameservers", "allowed_nameservers", lambda v, _: parse_list(v))
_flag("add_allowed_nameservers", "add_allowed_nameservers",
      lambda v, _: parse_list(v), UPDATE_ONLY)
_flag("remove_allowed_nameservers", "remove_allowed_nameservers",
      lambda v, _: parse_list(v), UPDATE_ONLY)
_flag("default_tokens", "default_tokens", lambda v, _: parse_list(v))
_flag("idn_tables", "idn_tables", parse_idn_table_names)
_flag("claims_period_end", "claims_period_end", parse_datetime)
_flag("num_dns_publish_locks", "num_dns_publish_locks", parse_int)


def overrides_from_args(args: argparse.Namespace, kind: MutationKind) -> TldOverrides:
    """Build the override record from the raw flag strings.

    Flags the user didn't pass stay UNSET.

    Raises:
        InvalidParameter: If a flag value can't be parsed.
        InvalidEnumValue: If a state or TLD type is not recognized.
    """
    values: dict[str, Any] = {}
    for flag, (field, parser, kinds) in FLAGS.items():
        if kind not in kinds:
            continue
        text = getattr(args, flag, None)
        if text is None:
            continue
        values[field] = parser(text, flag)
    return TldOverrides(**values)


async def mutate_command(
    kind: MutationKind,
    tlds: list[str],
    overrides: TldOverrides,
    override_reserved_list_rules: bool = False,
    dry_run: bool = False,
) -> int:
    """Run a create or update batch against the database.

    Returns:
        0 if every TLD succeeded, 1 otherwise.
    """
    from app.config import settings
    from app.crud.catalog import load_catalogs
    from app.crud.tld import SqlTldStore
    from app.models.base import async_session_maker
    from registry.mutation import TldMutationService

    async with async_session_maker() as session:
        service = TldMutationService(
            SqlTldStore(session),
            catalogs=await load_catalogs(session),
            default_currency=settings.default_currency,
            common_reserved_list_prefix=settings.common_reserved_list_prefix,
            warn_on_multiple_renew_costs=settings.warn_on_multiple_renew_costs,
        )
        result = await service.run(
            kind,
            tlds,
            overrides,
            override_reserved_list_rules=override_reserved_list_rules,
            dry_run=dry_run,
        )

    for outcome in result.outcomes:
        if outcome.ok:
            verb = "would be" if dry_run else "was"
            print(f"{outcome.tld}: {verb} {kind}d")
        else:
            print(f"{outcome.tld}: {outcome.error}", file=sys.stderr)
    return 0 if result.ok else 1


async def show_command(tld: str) -> int:
    """Print the stored revision of a TLD as JSON."""
    from app.crud.tld import SqlTldStore
    from app.models.base import async_session_maker
    from registry.serialization import revision_to_dict

    async with async_session_maker() as session:
        revision = await SqlTldStore(session).get(tld)
    if revision is None:
        print(f"TLD '{tld}' does not exist", file=sys.stderr)
        return 1
    print(json.dumps(revision_to_dict(revision), indent=2, sort_keys=True))
    return 0


def _add_mutation_parser(
    subparsers: argparse._SubParsersAction, kind: MutationKind, help_text: str
) -> None:
    sub = subparsers.add_parser(f"{kind}-tld", help=help_text)
    sub.add_argument("tlds", nargs="+", help="TLD name(s)")
    for flag, (_, _, kinds) in FLAGS.items():
        if kind in kinds:
            sub.add_argument(f"--{flag}", metavar="VALUE")
    sub.add_argument(
        "-o",
        "--override_reserved_list_rules",
        action="store_true",
        help="Allow reserved lists that break the naming rules (logs a warning)",
    )
    sub.add_argument(
        "--dry_run",
        action="store_true",
        help="Validate and stage without writing",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="TLD configuration CLI")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    _add_mutation_parser(subparsers, MutationKind.CREATE, "Create new TLDs")
    _add_mutation_parser(subparsers, MutationKind.UPDATE, "Update existing TLDs")

    show_parser = subparsers.add_parser("show-tld", help="Print a TLD's configuration")
    show_parser.add_argument("tld", help="TLD name")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "show-tld":
        return asyncio.run(show_command(args.tld))

    kinds = {f"{k}-tld": k for k in MutationKind}
    if args.command not in kinds:
        parser.print_help()
        return 1

    kind = kinds[args.command]
    try:
        overrides = overrides_from_args(args, kind)
        return asyncio.run(
            mutate_command(
                kind,
                args.tlds,
                overrides,
                override_reserved_list_rules=args.override_reserved_list_rules,
                dry_run=args.dry_run,
            )
        )
    except TldConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
