from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from app.branchstock.schemas.common import OffsetPagination


class TransferItemCreate(BaseModel):
    product_id: UUID
    variation_id: UUID | None = None
    quantity: int = Field(gt=0)


class TransferCreateRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "from_branch_id": "franko",
                "to_branch_id": "mebrathayl",
                "reason": "Weekend restock",
                "items": [
                    {
                        "product_id": "7d1f0c1e-3c55-4f9e-9a57-0c0b8a8f1d2a",
                        "variation_id": None,
                        "quantity": 4,
                    }
                ],
            }
        }
    }

    from_branch_id: str = Field(min_length=1)
    to_branch_id: str = Field(min_length=1)
    reason: str = Field(min_length=1)
    items: list[TransferItemCreate] = Field(min_length=1)


class TransferItemResponse(BaseModel):
    id: str
    product_id: str
    variation_id: str | None
    quantity: int
    product_name: str | None
    sku: str | None
    variation_name: str | None
    color: str | None
    size: str | None


class TransferResponse(BaseModel):
    id: str
    from_branch_id: str
    to_branch_id: str
    status: str
    reason: str | None
    requested_at: datetime
    completed_at: datetime | None
    requested_by: str | None
    approved_by: str | None
    from_branch_name: str | None
    to_branch_name: str | None
    requested_by_name: str | None
    approved_by_name: str | None
    items: list[TransferItemResponse]


class TransferCreateResponse(BaseModel):
    success: bool = True
    data: TransferResponse
    message: str = "Transfer completed successfully"


class TransferDetailResponse(BaseModel):
    success: bool = True
    data: TransferResponse


class TransferListResponse(BaseModel):
    success: bool = True
    data: list[TransferResponse]
    pagination: OffsetPagination
