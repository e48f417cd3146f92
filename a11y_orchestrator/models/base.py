"""Base model for immutable records."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Frozen record rejecting unknown fields.

    Typos in batch definition files surface as validation errors instead of
    being silently dropped.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")
