"""Entity store interface for TLD revisions.

The store owns same-TLD serialization: put() only succeeds if the stored
revision is still the one the caller staged against.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Protocol

from registry.errors import VersionConflict
from registry.revision import TldRevision

logger = logging.getLogger(__name__)


class TldStore(Protocol):
    async def get(self, tld: str) -> TldRevision | None: ...

    async def put(self, old: TldRevision | None, new: TldRevision) -> TldRevision: ...


def next_revision(old: TldRevision | None, new: TldRevision) -> TldRevision:
    """Stamp ``new`` with the revision id that follows ``old``."""
    return dataclasses.replace(
        new, revision_id=(old.revision_id if old is not None else 0) + 1
    )


class InMemoryTldStore:
    """Dict-backed store with the same version semantics as the SQL store."""

    def __init__(self, revisions: list[TldRevision] | None = None):
        self._revisions: dict[str, TldRevision] = {
            r.tld_str: r for r in revisions or []
        }

    async def get(self, tld: str) -> TldRevision | None:
        return self._revisions.get(tld)

    async def put(self, old: TldRevision | None, new: TldRevision) -> TldRevision:
        current = self._revisions.get(new.tld_str)
        expected = old.revision_id if old is not None else None
        actual = current.revision_id if current is not None else None
        if expected != actual:
            raise VersionConflict(new.tld_str, expected, actual)
        stored = next_revision(old, new)
        self._revisions[new.tld_str] = stored
        return stored

    def names(self) -> list[str]:
        return sorted(self._revisions)
