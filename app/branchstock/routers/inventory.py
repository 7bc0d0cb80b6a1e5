import math
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.branchstock.core.config import settings
from app.branchstock.core.deps import get_branch_policy, get_current_user
from app.branchstock.db.session import get_db
from app.branchstock.repos.inventory import InventoryQueryFilters, InventoryRepository
from app.branchstock.schemas.common import PagePagination
from app.branchstock.schemas.inventory import InventoryListResponse, InventoryRow

router = APIRouter()


@router.get("/api/inventory", response_model=InventoryListResponse)
def list_inventory(
    branch_id: str | None = Query(None),
    product_id: UUID | None = Query(None),
    variation_id: UUID | None = Query(None),
    low_stock_only: bool = Query(False),
    status: Literal["all", "out_of_stock", "low_stock", "overstock", "normal"] | None = Query(None),
    cross_branch: bool = Query(False),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.INVENTORY_DEFAULT_PAGE_SIZE, ge=1, le=settings.LIST_MAX_PAGE_SIZE),
    current_user=Depends(get_current_user),
    policy=Depends(get_branch_policy),
    db=Depends(get_db),
):
    if branch_id and not cross_branch:
        policy.ensure_branch(current_user, branch_id)
    scoped_branch_id = policy.pinned_branch(current_user, branch_id, cross_branch=cross_branch)

    rows, total = InventoryRepository(db).list_inventory(
        InventoryQueryFilters(
            branch_id=scoped_branch_id,
            product_id=product_id,
            variation_id=variation_id,
            low_stock_only=low_stock_only,
            status=status,
        ),
        page=page,
        limit=limit,
    )
    return InventoryListResponse(
        data=[InventoryRow(**row) for row in rows],
        pagination=PagePagination(
            current_page=page,
            total_pages=math.ceil(total / limit) if total else 0,
            total_count=total,
            limit=limit,
        ),
    )
