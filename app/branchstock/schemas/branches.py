from datetime import datetime

from pydantic import BaseModel


class BranchResponse(BaseModel):
    id: str
    name: str
    address: str | None
    phone: str | None
    is_active: bool
    created_at: datetime


class BranchListResponse(BaseModel):
    success: bool = True
    data: list[BranchResponse]
