"""CRUD operations for TLD revisions.

SqlTldStore implements the registry.store.TldStore interface over an async
session. Writes are optimistic: an update only matches the row if its
revision_id is still the one the caller read.
"""

from __future__ import annotations

import dataclasses
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.tld import Tld
from registry.errors import VersionConflict
from registry.revision import TldRevision
from registry.serialization import revision_from_dict, revision_to_dict
from registry.store import next_revision

logger = logging.getLogger(__name__)


def row_to_revision(row: Tld) -> TldRevision:
    # The column is authoritative; the payload copy is informational.
    return dataclasses.replace(
        revision_from_dict(row.payload), revision_id=row.revision_id
    )


class SqlTldStore:
    """TLD store backed by the ``tld`` table."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, tld: str) -> TldRevision | None:
        row = await self._get_row(tld)
        return row_to_revision(row) if row is not None else None

    async def put(self, old: TldRevision | None, new: TldRevision) -> TldRevision:
        """Write ``new`` if the stored revision still matches ``old``.

        Raises:
            VersionConflict: If another writer got there first.
        """
        stored = next_revision(old, new)
        payload = revision_to_dict(stored)

        if old is None:
            row = Tld(
                tld_name=new.tld_str, revision_id=stored.revision_id, payload=payload
            )
            self.session.add(row)
            try:
                await self.session.flush()
            except IntegrityError as e:
                await self.session.rollback()
                actual = await self._current_id(new.tld_str)
                raise VersionConflict(new.tld_str, None, actual) from e
        else:
            stmt = (
                update(Tld)
                .where(
                    Tld.tld_name == new.tld_str,
                    Tld.revision_id == old.revision_id,
                )
                .values(revision_id=stored.revision_id, payload=payload)
            )
            result = await self.session.execute(stmt)
            if result.rowcount == 0:
                await self.session.rollback()
                raise VersionConflict(
                    new.tld_str, old.revision_id, await self._current_id(new.tld_str)
                )

        await self.session.commit()
        logger.debug(f"Wrote {new.tld_str} revision {stored.revision_id}")
        return stored

    async def _get_row(self, tld: str) -> Tld | None:
        result = await self.session.execute(select(Tld).where(Tld.tld_name == tld))
        return result.scalar_one_or_none()

    async def _current_id(self, tld: str) -> int | None:
        result = await self.session.execute(
            select(Tld.revision_id).where(Tld.tld_name == tld)
        )
        return result.scalar_one_or_none()
