"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).

- ``StockAdjustmentDTO``: input for a manual stock change.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator


class StockAdjustmentDTO(BaseModel):
    """Immutable DTO for ``PATCH /products/{id}/stock/``.

    ``delta`` is signed: positive restocks, negative writes off.
    """

    model_config = ConfigDict(frozen=True)

    delta: StrictInt
    reason: str = Field(default="", max_length=255)

    @field_validator("delta")
    @classmethod
    def delta_must_be_non_zero(cls, v: int) -> int:
        if v == 0:
            raise ValueError("Stock delta must be a non-zero integer.")
        return v
