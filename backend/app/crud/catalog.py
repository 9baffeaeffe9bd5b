"""Load the named catalogs a TLD mutation is validated against."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, settings
from app.models.tld import AllocationToken, PremiumList, ReservedList
from registry.catalogs import Catalogs, InMemoryCatalog

logger = logging.getLogger(__name__)

DEFAULT_PROMO = "DEFAULT_PROMO"


async def load_catalogs(
    session: AsyncSession, config: Settings = settings
) -> Catalogs:
    """Snapshot premium lists, reserved lists and default-promo tokens.

    DNS writer names come from settings rather than the database.
    """
    premium = await session.execute(select(PremiumList))
    reserved = await session.execute(select(ReservedList.name))
    tokens = await session.execute(
        select(AllocationToken.token).where(AllocationToken.token_type == DEFAULT_PROMO)
    )

    catalogs = Catalogs(
        premium_lists=InMemoryCatalog({p.name: p for p in premium.scalars().all()}),
        reserved_lists=InMemoryCatalog(reserved.scalars().all()),
        allocation_tokens=InMemoryCatalog(tokens.scalars().all()),
        dns_writers=InMemoryCatalog(config.dns_writer_names),
    )
    logger.debug(
        f"Loaded catalogs: {len(catalogs.premium_lists)} premium lists, "
        f"{len(catalogs.reserved_lists)} reserved lists, "
        f"{len(catalogs.allocation_tokens)} tokens"
    )
    return catalogs
