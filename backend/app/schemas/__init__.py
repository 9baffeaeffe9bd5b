"""Pydantic schemas module.

Request/response models for the TLD API. Naming convention: Schema suffix
to distinguish from SQLAlchemy models; requests end in Request.
"""

from app.schemas.tld import (
    BatchResultSchema,
    EffectiveValuesSchema,
    TldMutationRequest,
    TldOutcomeSchema,
    TldSchema,
    TransitionSchema,
)

__all__ = [
    "BatchResultSchema",
    "EffectiveValuesSchema",
    "TldMutationRequest",
    "TldOutcomeSchema",
    "TldSchema",
    "TransitionSchema",
]
