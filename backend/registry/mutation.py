"""Orchestrates create/update batches for TLDs.

For each TLD in a batch: read the old revision from the store, stage the new
revision, hand it to the store. TLDs are processed independently, so one
TLD's failure does not stop its siblings. Only the batch-wide checks
(duplicate names, ROID suffix on several TLDs) reject the whole batch.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from registry.cache import InvalidationHook, signal_invalidation
from registry.catalogs import Catalogs
from registry.errors import TldConfigError
from registry.overrides import TldOverrides
from registry.revision import TldRevision
from registry.store import TldStore
from registry.validator import (
    StagingContext,
    check_batch,
    check_identity,
    stage_revision,
)
from registry.variants import VARIANTS, MutationKind

logger = logging.getLogger(__name__)


@dataclass
class TldOutcome:
    """Result for one TLD in a batch: a stored revision or an error."""

    tld: str
    revision: TldRevision | None = None
    error: TldConfigError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    kind: MutationKind
    outcomes: list[TldOutcome] = field(default_factory=list)
    dry_run: bool = False

    @property
    def succeeded(self) -> list[TldOutcome]:
        return [o for o in self.outcomes if o.ok]

    @property
    def failed(self) -> list[TldOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def ok(self) -> bool:
        return not self.failed

    def get(self, tld: str) -> TldOutcome:
        return next(o for o in self.outcomes if o.tld == tld)


class TldMutationService:
    """Runs create and update batches against a store.

    Args:
        store: Where old revisions come from and new ones go.
        catalogs: Snapshot of the named catalogs overrides may reference.
        invalidate: Called with every TLD name in the batch once the batch
            is done. Failures are logged and ignored.
        default_currency: Currency for newly created TLDs.
        common_reserved_list_prefix: Prefix of reserved lists any TLD may use.
        warn_on_multiple_renew_costs: Log a warning when more than one renew
            cost transition is set.
    """

    def __init__(
        self,
        store: TldStore,
        catalogs: Catalogs | None = None,
        invalidate: InvalidationHook | None = None,
        default_currency: str = "USD",
        common_reserved_list_prefix: str = "common_",
        warn_on_multiple_renew_costs: bool = True,
    ):
        self.store = store
        self.catalogs = catalogs or Catalogs()
        self.invalidate = invalidate
        self.default_currency = default_currency
        self.common_reserved_list_prefix = common_reserved_list_prefix
        self.warn_on_multiple_renew_costs = warn_on_multiple_renew_costs

    async def create(
        self, tlds: Sequence[str], overrides: TldOverrides, **kwargs
    ) -> BatchResult:
        return await self.run(MutationKind.CREATE, tlds, overrides, **kwargs)

    async def update(
        self, tlds: Sequence[str], overrides: TldOverrides, **kwargs
    ) -> BatchResult:
        return await self.run(MutationKind.UPDATE, tlds, overrides, **kwargs)

    async def run(
        self,
        kind: MutationKind,
        tlds: Sequence[str],
        overrides: TldOverrides,
        override_reserved_list_rules: bool = False,
        now: datetime | None = None,
        dry_run: bool = False,
    ) -> BatchResult:
        """Stage and store a new revision for each TLD.

        Args:
            kind: Create or update.
            tlds: TLD names; must be unique.
            overrides: Changes applied to every TLD in the batch.
            override_reserved_list_rules: Demote reserved list naming
                violations to warnings.
            now: The current time (defaults to the wall clock, UTC).
            dry_run: Stage and validate, but don't write to the store.

        Returns:
            A BatchResult with one outcome per TLD, in input order.

        Raises:
            DuplicateInput: If a TLD name is repeated.
            BatchIdentityConflict: If a ROID suffix is set on several TLDs.
        """
        check_batch(tlds, overrides)

        variant = VARIANTS[kind]
        ctx = StagingContext(
            catalogs=self.catalogs,
            default_currency=self.default_currency,
            common_reserved_list_prefix=self.common_reserved_list_prefix,
            override_reserved_list_rules=override_reserved_list_rules,
            warn_on_multiple_renew_costs=self.warn_on_multiple_renew_costs,
            now=now or datetime.now(UTC),
        )
        result = BatchResult(kind=kind, dry_run=dry_run)

        try:
            for tld in tlds:
                outcome = await self._run_one(tld, overrides, variant, ctx, dry_run)
                result.outcomes.append(outcome)
        finally:
            if not dry_run:
                signal_invalidation(self.invalidate, tlds)

        logger.info(
            f"{kind} batch: {len(result.succeeded)} succeeded, "
            f"{len(result.failed)} failed"
            + (" (dry run)" if dry_run else "")
        )
        return result

    async def _run_one(self, tld, overrides, variant, ctx, dry_run) -> TldOutcome:
        try:
            check_identity(tld)
            old = await self.store.get(tld)
            new = stage_revision(tld, old, overrides, variant, ctx)
            if not dry_run:
                new = await self.store.put(old, new)
                logger.info(f"Stored {tld} at revision {new.revision_id}")
            return TldOutcome(tld=tld, revision=new)
        except TldConfigError as e:
            logger.warning(f"Failed to {variant.kind} TLD {tld}: {e}")
            return TldOutcome(tld=tld, error=e)
