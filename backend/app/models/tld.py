"""TLD and catalog models.

A TLD row holds the latest revision as a JSON payload; ``revision_id`` is
the optimistic-concurrency version checked on every write. The catalog
tables hold the named resources a TLD may reference.
"""

from sqlalchemy import JSON, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin


class Tld(Base, TimestampMixin):
    """Latest stored revision of a TLD."""

    __tablename__ = "tld"

    tld_name: Mapped[str] = mapped_column(String(255), primary_key=True)
    revision_id: Mapped[int] = mapped_column(
        Integer, nullable=False, doc="Incremented on every successful write"
    )
    payload: Mapped[dict] = mapped_column(JSON, nullable=False)

    def __repr__(self) -> str:
        return f"<Tld({self.tld_name}, rev={self.revision_id})>"


class PremiumList(Base, TimestampMixin):
    """A named premium price list."""

    __tablename__ = "premium_list"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class ReservedList(Base, TimestampMixin):
    """A named list of reserved labels."""

    __tablename__ = "reserved_list"

    name: Mapped[str] = mapped_column(String(255), primary_key=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)


class AllocationToken(Base, TimestampMixin):
    """A promotional allocation token."""

    __tablename__ = "allocation_token"

    token: Mapped[str] = mapped_column(String(255), primary_key=True)
    token_type: Mapped[str] = mapped_column(String(32), nullable=False)

    __table_args__ = (Index("idx_allocation_token_type", "token_type"),)
