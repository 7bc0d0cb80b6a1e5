"""Instant branch-to-branch stock transfers.

A transfer is applied in two phases. The validation phase resolves stock
available at the source for every line and refuses the whole request if any
line is short. The commit phase then writes the transfer, its items, both
inventory deltas and the paired stock movements inside the session's single
transaction. Any failure before ``commit`` rolls the session back, so callers
observe either every row or none of them.
"""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from app.branchstock.core.error_catalog import (
    AppError,
    ErrorCatalog,
    InsufficientStockError,
    PersistenceError,
    ValidationError,
)
from app.branchstock.core.errors import is_lock_timeout
from app.branchstock.core.logging import log_json
from app.branchstock.core.metrics import metrics
from app.branchstock.repos.branches import BranchRepository
from app.branchstock.repos.inventory import InventoryRepository
from app.branchstock.repos.products import ProductRepository
from app.branchstock.repos.transfers import TransferRepository
from app.branchstock.services.stock_movements import StockMovementRecorder

logger = logging.getLogger("branchstock.transfers")

TRANSFER_REFERENCE_TYPE = "transfer"
TRANSFER_STATUS_COMPLETED = "completed"


@dataclass(frozen=True)
class TransferLine:
    product_id: UUID
    quantity: int
    variation_id: UUID | None = None


@dataclass(frozen=True)
class TransferRequest:
    from_branch_id: str
    to_branch_id: str
    reason: str
    items: list[TransferLine] = field(default_factory=list)


@dataclass(frozen=True)
class TransferResult:
    transfer: dict
    success: bool = True


class TransferService:
    def __init__(self, db):
        self.db = db
        self.inventory = InventoryRepository(db)
        self.transfers = TransferRepository(db)
        self.branches = BranchRepository(db)
        self.products = ProductRepository(db)
        self.recorder = StockMovementRecorder(db)

    def create_transfer(self, request: TransferRequest, actor) -> TransferResult:
        committed = False
        try:
            self._validate(request)
            self._check_availability(request)
            transfer_id = self._apply(request, actor)
            self.db.commit()
            committed = True
        except AppError as exc:
            self._log_rejection(request, actor, exc)
            raise
        except SQLAlchemyError as exc:
            if is_lock_timeout(exc):
                metrics.increment_transfer_rejected("lock_timeout")
                metrics.increment_lock_wait_timeout()
                raise AppError(ErrorCatalog.LOCK_TIMEOUT, details={"type": exc.__class__.__name__}) from exc
            metrics.increment_transfer_rejected("persistence")
            logger.exception("Transfer rolled back after database failure")
            raise PersistenceError(details={"type": exc.__class__.__name__}) from exc
        finally:
            if not committed:
                self.db.rollback()

        metrics.increment_transfer_completed()
        log_json(
            logger,
            {
                "event": "transfer.completed",
                "transfer_id": transfer_id,
                "from_branch_id": request.from_branch_id,
                "to_branch_id": request.to_branch_id,
                "user_id": str(actor.id),
                "lines": len(request.items),
                "units": sum(line.quantity for line in request.items),
            },
        )
        return TransferResult(transfer=self.get_transfer(transfer_id))

    def get_transfer(self, transfer_id: str) -> dict | None:
        header = self.transfers.get_transfer(UUID(transfer_id))
        if header is None:
            return None
        header["items"] = self.transfers.list_items_for(header["id"])
        return header

    def _validate(self, request: TransferRequest) -> None:
        if not request.from_branch_id or not request.to_branch_id:
            raise ValidationError("from_branch_id and to_branch_id are required")
        if request.from_branch_id == request.to_branch_id:
            raise AppError(ErrorCatalog.BRANCHES_MUST_DIFFER)
        if not request.reason or not request.reason.strip():
            raise ValidationError("reason is required")
        if not request.items:
            raise ValidationError("items must not be empty")

        for branch_id in (request.from_branch_id, request.to_branch_id):
            if self.branches.get(branch_id) is None:
                raise ValidationError(f"Branch not found: {branch_id}", details={"branch_id": branch_id})

        for line in request.items:
            if line.quantity <= 0:
                raise ValidationError(
                    "quantity must be greater than 0",
                    details={"product_id": str(line.product_id), "quantity": line.quantity},
                )
            product = self.products.get_product(line.product_id)
            if product is None:
                raise ValidationError(
                    f"Product not found: {line.product_id}",
                    details={"product_id": str(line.product_id)},
                )
            if line.variation_id is None:
                if product.product_type == "variation":
                    raise ValidationError(
                        f"variation_id is required for variation products (product {line.product_id})",
                        details={"product_id": str(line.product_id)},
                    )
                continue
            if self.products.get_product_variation(product.id, line.variation_id) is None:
                raise ValidationError(
                    f"Variation not found for product {line.product_id}: {line.variation_id}",
                    details={"product_id": str(line.product_id), "variation_id": str(line.variation_id)},
                )

    def _check_availability(self, request: TransferRequest) -> None:
        # Lines naming the same product/variation draw on the same stock.
        requested: OrderedDict[tuple[UUID, UUID | None], int] = OrderedDict()
        for line in request.items:
            key = (line.product_id, line.variation_id)
            requested[key] = requested.get(key, 0) + line.quantity

        for (product_id, variation_id), quantity in requested.items():
            available = self.inventory.available_quantity(product_id, request.from_branch_id, variation_id)
            if available < quantity:
                raise InsufficientStockError(
                    product_id=str(product_id),
                    variation_id=str(variation_id) if variation_id else None,
                    available=available,
                    requested=quantity,
                )

    def _apply(self, request: TransferRequest, actor) -> str:
        transfer = self.transfers.create_transfer(
            from_branch_id=request.from_branch_id,
            to_branch_id=request.to_branch_id,
            notes=request.reason,
            user_id=actor.id,
            status=TRANSFER_STATUS_COMPLETED,
        )
        transfer_id = transfer.id

        for line_no, line in enumerate(request.items, start=1):
            self.transfers.add_item(
                transfer_id,
                line.product_id,
                line.variation_id,
                line.quantity,
                line_no=line_no,
            )
            self._move_out(request, line, actor, transfer_id)
            self._move_in(request, line, actor, transfer_id)

        return str(transfer_id)

    def _move_out(self, request: TransferRequest, line: TransferLine, actor, transfer_id: UUID) -> None:
        decremented = self.inventory.decrement_guarded(
            line.product_id,
            request.from_branch_id,
            line.variation_id,
            line.quantity,
        )
        if not decremented:
            # Stock moved between the availability check and the guarded update.
            raise InsufficientStockError(
                product_id=str(line.product_id),
                variation_id=str(line.variation_id) if line.variation_id else None,
                available=self.inventory.get_quantity(line.product_id, request.from_branch_id, line.variation_id),
                requested=line.quantity,
            )
        self.recorder.record(
            line.product_id,
            request.from_branch_id,
            line.variation_id,
            actor.id,
            "out",
            line.quantity,
            f"Transfer to {request.to_branch_id}",
            TRANSFER_REFERENCE_TYPE,
            transfer_id,
        )

    def _move_in(self, request: TransferRequest, line: TransferLine, actor, transfer_id: UUID) -> None:
        incremented = self.inventory.increment(
            line.product_id,
            request.to_branch_id,
            line.variation_id,
            line.quantity,
        )
        if not incremented:
            min_level, max_level = self.inventory.stock_levels(
                line.product_id,
                request.from_branch_id,
                line.variation_id,
            )
            self.inventory.insert(
                line.product_id,
                request.to_branch_id,
                line.variation_id,
                line.quantity,
                min_stock_level=min_level,
                max_stock_level=max_level,
            )
        self.recorder.record(
            line.product_id,
            request.to_branch_id,
            line.variation_id,
            actor.id,
            "in",
            line.quantity,
            f"Transfer from {request.from_branch_id}",
            TRANSFER_REFERENCE_TYPE,
            transfer_id,
        )

    def _log_rejection(self, request: TransferRequest, actor, exc: AppError) -> None:
        reason = exc.error.code.lower()
        metrics.increment_transfer_rejected(reason)
        log_json(
            logger,
            {
                "event": "transfer.rejected",
                "reason": reason,
                "message": exc.message,
                "from_branch_id": request.from_branch_id,
                "to_branch_id": request.to_branch_id,
                "user_id": str(actor.id),
            },
            level=logging.WARNING,
        )
