"""Stock movement request schemas."""

from typing import Optional

from pydantic import Field, model_validator

from ..models.stock import StockMovementType
from ._strict_base import StrictRequestModel


class StockMovementRequest(StrictRequestModel):
    type: StockMovementType
    quantity: int = Field(..., ge=0)
    note: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def _positive_unless_stockin(self) -> "StockMovementRequest":
        if self.type != StockMovementType.STOCKIN and self.quantity <= 0:
            raise ValueError("quantity must be a positive integer")
        return self
