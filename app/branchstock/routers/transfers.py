from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query

from app.branchstock.core.config import settings
from app.branchstock.core.deps import get_branch_policy, get_current_user
from app.branchstock.core.error_catalog import AppError, ErrorCatalog
from app.branchstock.core.metrics import metrics
from app.branchstock.db.session import get_db
from app.branchstock.repos.transfers import TransferQueryFilters, TransferRepository
from app.branchstock.schemas.common import OffsetPagination
from app.branchstock.schemas.transfers import (
    TransferCreateRequest,
    TransferCreateResponse,
    TransferDetailResponse,
    TransferListResponse,
    TransferResponse,
)
from app.branchstock.services.transfers import TransferLine, TransferRequest, TransferService

router = APIRouter()


@router.get("/api/transfers", response_model=TransferListResponse)
def list_transfers(
    from_branch_id: str | None = Query(None),
    to_branch_id: str | None = Query(None),
    status: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.TRANSFERS_DEFAULT_PAGE_SIZE, ge=1, le=settings.LIST_MAX_PAGE_SIZE),
    current_user=Depends(get_current_user),
    policy=Depends(get_branch_policy),
    db=Depends(get_db),
):
    if from_branch_id:
        policy.ensure_branch(current_user, from_branch_id, label="from")
    if to_branch_id:
        policy.ensure_branch(current_user, to_branch_id, label="to")

    repo = TransferRepository(db)
    rows = repo.list_transfers(
        TransferQueryFilters(from_branch_id=from_branch_id, to_branch_id=to_branch_id, status=status),
        page=page,
        limit=limit,
    )
    items = repo.get_items([row["id"] for row in rows])
    data = [TransferResponse(**row, items=items.get(row["id"], [])) for row in rows]
    # total counts the rows on this page, not the whole result set.
    return TransferListResponse(
        data=data,
        pagination=OffsetPagination(
            page=page,
            limit=limit,
            total=len(data),
            has_next=len(data) == limit,
            has_prev=page > 1,
        ),
    )


@router.post("/api/transfers", response_model=TransferCreateResponse)
def create_transfer(
    payload: TransferCreateRequest,
    current_user=Depends(get_current_user),
    policy=Depends(get_branch_policy),
    db=Depends(get_db),
):
    try:
        policy.ensure_transfer(current_user, payload.from_branch_id, payload.to_branch_id)
    except AppError:
        metrics.increment_transfer_rejected("permission_denied")
        raise

    request = TransferRequest(
        from_branch_id=payload.from_branch_id,
        to_branch_id=payload.to_branch_id,
        reason=payload.reason,
        items=[
            TransferLine(product_id=item.product_id, quantity=item.quantity, variation_id=item.variation_id)
            for item in payload.items
        ],
    )
    result = TransferService(db).create_transfer(request, current_user)
    return TransferCreateResponse(data=TransferResponse(**result.transfer))


@router.get("/api/transfers/{transfer_id}", response_model=TransferDetailResponse)
def get_transfer(
    transfer_id: UUID,
    current_user=Depends(get_current_user),
    policy=Depends(get_branch_policy),
    db=Depends(get_db),
):
    transfer = TransferService(db).get_transfer(str(transfer_id))
    if transfer is None:
        raise AppError(ErrorCatalog.NOT_FOUND, message="Transfer not found")
    if not (
        policy.has_permission_for_branch(current_user, transfer["from_branch_id"])
        or policy.has_permission_for_branch(current_user, transfer["to_branch_id"])
    ):
        metrics.increment_branch_access_denied()
        raise AppError(ErrorCatalog.PERMISSION_DENIED, message="Access denied to this transfer")
    return TransferDetailResponse(data=TransferResponse(**transfer))
