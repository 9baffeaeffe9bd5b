"""Named catalogs that TLD overrides may reference.

The validator only needs to know whether a name resolves, so catalogs are
snapshotted into memory before validation runs (see app.crud.catalog for the
database-backed loader).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Protocol


class NamedCatalog(Protocol):
    def resolve(self, name: str) -> Any | None: ...

    def list_names(self) -> set[str]: ...

    def missing(self, names: Iterable[str]) -> list[str]: ...


class InMemoryCatalog:
    """A catalog backed by a plain dict of name → resource."""

    def __init__(self, entries: dict[str, Any] | Iterable[str] | None = None):
        if entries is None:
            self._entries: dict[str, Any] = {}
        elif isinstance(entries, dict):
            self._entries = dict(entries)
        else:
            self._entries = {name: name for name in entries}

    def resolve(self, name: str) -> Any | None:
        return self._entries.get(name)

    def list_names(self) -> set[str]:
        return set(self._entries)

    def missing(self, names: Iterable[str]) -> list[str]:
        """Names that don't resolve, in input order, without repeats."""
        seen: set[str] = set()
        result = []
        for name in names:
            if name not in seen and self.resolve(name) is None:
                result.append(name)
            seen.add(name)
        return result

    def __len__(self) -> int:
        return len(self._entries)


@dataclass
class Catalogs:
    """The set of catalogs consulted by one validation run."""

    premium_lists: NamedCatalog = field(default_factory=InMemoryCatalog)
    reserved_lists: NamedCatalog = field(default_factory=InMemoryCatalog)
    allocation_tokens: NamedCatalog = field(default_factory=InMemoryCatalog)
    dns_writers: NamedCatalog = field(default_factory=InMemoryCatalog)
