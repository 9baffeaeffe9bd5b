"""In-process cache of TLD revisions for read paths.

Writers never reset the cache wholesale; they invalidate exactly the TLDs a
batch touched via TldViewCache.invalidate (or any other callable with the
same shape passed to the mutation service).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from registry.revision import TldRevision

logger = logging.getLogger(__name__)

InvalidationHook = Callable[[Iterable[str]], None]


class TldViewCache:
    """Cache of the most recently read revision per TLD."""

    def __init__(self) -> None:
        self._entries: dict[str, TldRevision] = {}

    def get(self, tld: str) -> TldRevision | None:
        return self._entries.get(tld)

    def put(self, revision: TldRevision) -> None:
        self._entries[revision.tld_str] = revision

    def invalidate(self, tlds: Iterable[str]) -> None:
        dropped = [tld for tld in tlds if self._entries.pop(tld, None) is not None]
        if dropped:
            logger.debug(f"Invalidated cached TLDs: {', '.join(dropped)}")

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, tld: object) -> bool:
        return tld in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def signal_invalidation(hook: InvalidationHook | None, tlds: Iterable[str]) -> None:
    """Fire-and-forget invalidation; failures are logged, never raised."""
    if hook is None:
        return
    names = list(tlds)
    try:
        hook(names)
    except Exception as e:
        logger.warning(f"Cache invalidation failed for {', '.join(names)}: {e}")
