"""SQLAlchemy models for TLD configuration."""

from app.models.base import Base, TimestampMixin, async_session_maker, get_async_session
from app.models.enums import IdnTable, TldState, TldType
from app.models.tld import AllocationToken, PremiumList, ReservedList, Tld

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "async_session_maker",
    "get_async_session",
    # Enums
    "IdnTable",
    "TldState",
    "TldType",
    # TLD
    "Tld",
    # Catalogs
    "AllocationToken",
    "PremiumList",
    "ReservedList",
]
