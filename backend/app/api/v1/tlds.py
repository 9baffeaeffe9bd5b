"""TLD endpoints: read the latest revision and run create/update batches."""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, Query
from pydantic import AwareDatetime
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.crud.catalog import load_catalogs
from app.crud.tld import SqlTldStore
from app.models.base import get_async_session
from app.schemas.tld import (
    BatchResultSchema,
    EffectiveValuesSchema,
    TldMutationRequest,
    TldSchema,
)
from registry.cache import TldViewCache
from registry.errors import NotFound
from registry.mutation import TldMutationService
from registry.revision import TldRevision
from registry.variants import MutationKind

router = APIRouter()

# Shared by all requests in this process; writers invalidate the TLDs they touch.
view_cache = TldViewCache()


def get_store(session: AsyncSession = Depends(get_async_session)) -> SqlTldStore:
    return SqlTldStore(session)


async def get_mutation_service(
    session: AsyncSession = Depends(get_async_session),
    store: SqlTldStore = Depends(get_store),
) -> TldMutationService:
    return TldMutationService(
        store,
        catalogs=await load_catalogs(session),
        invalidate=view_cache.invalidate,
        default_currency=settings.default_currency,
        common_reserved_list_prefix=settings.common_reserved_list_prefix,
        warn_on_multiple_renew_costs=settings.warn_on_multiple_renew_costs,
    )


async def _load(tld: str, store: SqlTldStore) -> TldRevision:
    revision = view_cache.get(tld)
    if revision is None:
        revision = await store.get(tld)
        if revision is None:
            raise NotFound(tld)
        view_cache.put(revision)
    return revision


@router.get("/{tld}")
async def get_tld(tld: str, store: SqlTldStore = Depends(get_store)) -> TldSchema:
    """Return the latest revision of a TLD."""
    return TldSchema.from_revision(await _load(tld, store))


@router.get("/{tld}/effective")
async def get_effective_values(
    tld: str,
    at: AwareDatetime | None = Query(
        None, description="Instant to evaluate the schedules at (default now)"
    ),
    store: SqlTldStore = Depends(get_store),
) -> EffectiveValuesSchema:
    """Return the state, renew cost and EAP fee in effect at ``at``."""
    revision = await _load(tld, store)
    return EffectiveValuesSchema.from_revision(revision, at or datetime.now(UTC))


async def _run(
    kind: MutationKind, request: TldMutationRequest, service: TldMutationService
) -> BatchResultSchema:
    result = await service.run(
        kind,
        request.tlds,
        request.to_overrides(),
        override_reserved_list_rules=request.override_reserved_list_rules,
        dry_run=request.dry_run,
    )
    return BatchResultSchema.from_result(result)


@router.post("")
async def create_tlds(
    request: TldMutationRequest,
    service: TldMutationService = Depends(get_mutation_service),
) -> BatchResultSchema:
    """Create every TLD in the batch. Each TLD succeeds or fails on its own."""
    return await _run(MutationKind.CREATE, request, service)


@router.patch("")
async def update_tlds(
    request: TldMutationRequest,
    service: TldMutationService = Depends(get_mutation_service),
) -> BatchResultSchema:
    """Apply the same overrides to every TLD in the batch."""
    return await _run(MutationKind.UPDATE, request, service)
