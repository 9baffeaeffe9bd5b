"""Tests for the TLD command-line flags."""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest

from app.models.enums import TldState
from registry.cli import build_parser, main, overrides_from_args
from registry.errors import InvalidParameter
from registry.money import Money
from registry.overrides import CLEAR, UNSET
from registry.schedule import START_OF_TIME
from registry.variants import MutationKind


def _overrides(kind: MutationKind, *argv: str):
    args = build_parser().parse_args([f"{kind}-tld", *argv, "example"])
    return overrides_from_args(args, kind)


class TestOverridesFromArgs:
    def test_unset_by_default(self) -> None:
        overrides = _overrides(MutationKind.UPDATE)
        assert overrides.touched() == []

    def test_state_transitions(self) -> None:
        overrides = _overrides(
            MutationKind.UPDATE,
            "--tld_state_transitions",
            "START_OF_TIME=PREDELEGATION,2027-01-01T00:00:00Z=GENERAL_AVAILABILITY",
        )
        assert [t.effective_at for t in overrides.tld_state_transitions] == [
            START_OF_TIME,
            datetime(2027, 1, 1, tzinfo=UTC),
        ]

    def test_initial_state_on_create(self) -> None:
        overrides = _overrides(MutationKind.CREATE, "--initial_tld_state", "pdt")
        assert overrides.new_tld_state == TldState.PDT

    def test_set_current_state_on_update(self) -> None:
        overrides = _overrides(
            MutationKind.UPDATE, "--set_current_tld_state", "QUIET_PERIOD"
        )
        assert overrides.new_tld_state == TldState.QUIET_PERIOD

    def test_create_only_flag_rejected_on_update(self) -> None:
        with pytest.raises(SystemExit):
            _overrides(MutationKind.UPDATE, "--initial_renew_billing_cost", "USD 1")

    def test_dns_flag_inverts(self) -> None:
        overrides = _overrides(MutationKind.UPDATE, "--dns", "false")
        assert overrides.dns_paused is True

    def test_money_and_duration(self) -> None:
        overrides = _overrides(
            MutationKind.UPDATE,
            "--create_billing_cost",
            "USD 12",
            "--dns_ns_ttl",
            "PT5M",
        )
        assert overrides.create_billing_cost == Money.of("USD", 12)
        assert overrides.dns_ns_ttl == timedelta(minutes=5)

    def test_null_clears(self) -> None:
        overrides = _overrides(
            MutationKind.UPDATE, "--premium_list", "null", "--dns_ds_ttl", "null"
        )
        assert overrides.premium_list_name is CLEAR
        assert overrides.dns_ds_ttl is CLEAR
        assert overrides.lordn_username is UNSET

    def test_empty_idn_tables_clear(self) -> None:
        overrides = _overrides(MutationKind.UPDATE, "--idn_tables", "")
        assert overrides.idn_tables is CLEAR

    def test_bad_boolean(self) -> None:
        with pytest.raises(InvalidParameter, match="escrow"):
            _overrides(MutationKind.UPDATE, "--escrow", "maybe")


class TestMain:
    @patch("registry.cli.mutate_command", new_callable=AsyncMock)
    def test_runs_mutation(self, mock_mutate: AsyncMock) -> None:
        mock_mutate.return_value = 0

        code = main(["update-tld", "-o", "--reserved_lists", "bar_extra", "foo"])

        assert code == 0
        kind, tlds, overrides = mock_mutate.call_args.args
        assert kind == MutationKind.UPDATE
        assert tlds == ["foo"]
        assert overrides.reserved_lists == ["bar_extra"]
        assert mock_mutate.call_args.kwargs["override_reserved_list_rules"] is True

    @patch("registry.cli.mutate_command", new_callable=AsyncMock)
    def test_parameter_error_exits_1(
        self, mock_mutate: AsyncMock, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = main(["create-tld", "--create_billing_cost", "eight", "foo"])

        assert code == 1
        mock_mutate.assert_not_awaited()
        assert "create_billing_cost" in capsys.readouterr().err
