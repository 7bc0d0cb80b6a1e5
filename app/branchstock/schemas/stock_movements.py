from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, Field

from app.branchstock.schemas.common import PagePagination


class StockAdjustmentRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "product_id": "7d1f0c1e-3c55-4f9e-9a57-0c0b8a8f1d2a",
                "branch_id": "franko",
                "variation_id": None,
                "movement_type": "in",
                "quantity": 12,
                "reason": "Supplier delivery",
            }
        }
    }

    product_id: UUID
    branch_id: str = Field(min_length=1)
    variation_id: UUID | None = None
    movement_type: Literal["in", "out"]
    quantity: int = Field(gt=0)
    reason: str = Field(min_length=1)


class StockMovementRow(BaseModel):
    id: str
    product_id: str
    variation_id: str | None
    branch_id: str
    user_id: str
    movement_type: str
    quantity: int
    reason: str | None
    reference_type: str | None
    reference_id: str | None
    created_at: datetime
    product_name: str
    sku: str
    branch_name: str


class StockMovementListResponse(BaseModel):
    success: bool = True
    data: list[StockMovementRow]
    pagination: PagePagination
