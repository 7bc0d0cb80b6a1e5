from datetime import datetime

from pydantic import BaseModel

from app.branchstock.schemas.common import PagePagination


class InventoryRow(BaseModel):
    id: str
    product_id: str
    variation_id: str | None
    branch_id: str
    branch_name: str
    product_name: str
    product_sku: str
    product_type: str
    variation_sku: str | None
    color: str | None
    size: str | None
    quantity: int
    min_stock_level: int | None
    max_stock_level: int | None
    last_restocked: datetime | None
    updated_at: datetime | None
    stock_status: str


class InventoryListResponse(BaseModel):
    success: bool = True
    data: list[InventoryRow]
    pagination: PagePagination
