from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Order(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    order_id: str
    name: str
    qty: int = Field(..., ge=0)
    price: float = 0.0
