"""Tests for app.crud.tld.SqlTldStore with a mocked session."""

from __future__ import annotations

import dataclasses
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings
from app.crud.catalog import load_catalogs
from app.crud.tld import SqlTldStore, row_to_revision
from app.models.tld import Tld
from registry.errors import VersionConflict
from registry.revision import default_revision
from registry.serialization import revision_to_dict

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _result(value=None, values=None) -> MagicMock:
    """A mock Result answering scalar_one_or_none / scalars().all()."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalars.return_value.all.return_value = values or []
    result.rowcount = 1
    return result


def _session() -> AsyncMock:
    return AsyncMock(spec=AsyncSession)


def _row(revision_id: int = 1) -> Tld:
    revision = default_revision("example")
    return Tld(
        tld_name="example",
        revision_id=revision_id,
        payload=revision_to_dict(revision),
    )


class TestRead:
    @pytest.mark.asyncio
    async def test_get_missing(self) -> None:
        session = _session()
        session.execute.return_value = _result(None)
        assert await SqlTldStore(session).get("nope") is None

    @pytest.mark.asyncio
    async def test_get_uses_column_revision_id(self) -> None:
        session = _session()
        session.execute.return_value = _result(_row(revision_id=7))

        revision = await SqlTldStore(session).get("example")

        assert revision.tld_str == "example"
        assert revision.revision_id == 7

    def test_row_to_revision(self) -> None:
        assert row_to_revision(_row(3)).revision_id == 3


class TestPut:
    @pytest.mark.asyncio
    async def test_insert(self) -> None:
        session = _session()
        new = default_revision("example")

        stored = await SqlTldStore(session).put(None, new)

        assert stored.revision_id == 1
        session.add.assert_called_once()
        row = session.add.call_args.args[0]
        assert row.tld_name == "example"
        assert row.payload["revision_id"] == 1
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_insert_race(self) -> None:
        session = _session()
        session.flush.side_effect = IntegrityError("INSERT", {}, Exception("dup"))
        session.execute.return_value = _result(1)

        with pytest.raises(VersionConflict) as exc_info:
            await SqlTldStore(session).put(None, default_revision("example"))

        assert exc_info.value.expected is None
        assert exc_info.value.actual == 1
        session.rollback.assert_awaited_once()
        session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update(self) -> None:
        session = _session()
        session.execute.return_value = _result()
        old = dataclasses.replace(default_revision("example"), revision_id=2)

        stored = await SqlTldStore(session).put(old, old)

        assert stored.revision_id == 3
        session.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_update_stale(self) -> None:
        session = _session()
        stale = _result(5)
        stale.rowcount = 0
        session.execute.return_value = stale
        old = dataclasses.replace(default_revision("example"), revision_id=2)

        with pytest.raises(VersionConflict) as exc_info:
            await SqlTldStore(session).put(old, old)

        assert exc_info.value.expected == 2
        assert exc_info.value.actual == 5
        session.rollback.assert_awaited_once()


class TestLoadCatalogs:
    @pytest.mark.asyncio
    async def test_snapshot(self) -> None:
        premium = MagicMock()
        premium.name = "xn_premium"
        session = _session()
        session.execute.side_effect = [
            _result(values=[premium]),
            _result(values=["common_abuse"]),
            _result(values=["promo1"]),
        ]

        catalogs = await load_catalogs(
            session, Settings(dns_writer_names=["VoidDnsWriter"])
        )

        assert catalogs.premium_lists.resolve("xn_premium") is premium
        assert catalogs.reserved_lists.list_names() == {"common_abuse"}
        assert catalogs.allocation_tokens.list_names() == {"promo1"}
        assert catalogs.dns_writers.list_names() == {"VoidDnsWriter"}
