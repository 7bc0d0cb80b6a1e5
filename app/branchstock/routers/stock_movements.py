import math
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.branchstock.core.config import settings
from app.branchstock.core.deps import get_branch_policy, get_current_user
from app.branchstock.db.session import get_db
from app.branchstock.repos.stock_movements import StockMovementQueryFilters, StockMovementRepository
from app.branchstock.schemas.common import PagePagination
from app.branchstock.schemas.stock_movements import (
    StockAdjustmentRequest,
    StockMovementListResponse,
    StockMovementRow,
)
from app.branchstock.services.stock_adjustments import StockAdjustment, StockAdjustmentService

router = APIRouter()


@router.get("/api/stock-movements", response_model=StockMovementListResponse)
def list_stock_movements(
    branch_id: str | None = Query(None),
    reference_type: str | None = Query(None),
    reference_id: UUID | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.STOCK_MOVEMENTS_DEFAULT_PAGE_SIZE, ge=1, le=settings.LIST_MAX_PAGE_SIZE),
    current_user=Depends(get_current_user),
    policy=Depends(get_branch_policy),
    db=Depends(get_db),
):
    if branch_id:
        policy.ensure_branch(current_user, branch_id)

    rows, total = StockMovementRepository(db).list_movements(
        StockMovementQueryFilters(
            branch_id=branch_id,
            reference_type=reference_type,
            reference_id=reference_id,
        ),
        page=page,
        limit=limit,
    )
    return StockMovementListResponse(
        data=[StockMovementRow(**row) for row in rows],
        pagination=PagePagination(
            current_page=page,
            total_pages=math.ceil(total / limit) if total else 0,
            total_count=total,
            limit=limit,
        ),
    )


@router.post("/api/stock-movements")
def create_stock_movement(
    payload: StockAdjustmentRequest,
    current_user=Depends(get_current_user),
    policy=Depends(get_branch_policy),
    db=Depends(get_db),
):
    policy.ensure_branch(current_user, payload.branch_id)
    StockAdjustmentService(db).adjust(
        StockAdjustment(
            product_id=payload.product_id,
            branch_id=payload.branch_id,
            movement_type=payload.movement_type,
            quantity=payload.quantity,
            reason=payload.reason,
            variation_id=payload.variation_id,
        ),
        current_user,
    )
    message = "Stock added successfully" if payload.movement_type == "in" else "Stock reduced successfully"
    return {"success": True, "data": {"ok": True}, "message": message}
