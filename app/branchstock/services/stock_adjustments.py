from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from app.branchstock.core.config import settings
from app.branchstock.core.error_catalog import AppError, ErrorCatalog, PersistenceError, ValidationError
from app.branchstock.core.errors import is_lock_timeout
from app.branchstock.core.logging import log_json
from app.branchstock.core.metrics import metrics
from app.branchstock.repos.branches import BranchRepository
from app.branchstock.repos.inventory import InventoryRepository
from app.branchstock.repos.products import ProductRepository
from app.branchstock.services.stock_movements import MOVEMENT_TYPES, StockMovementRecorder

logger = logging.getLogger("branchstock.stock")

MANUAL_REFERENCE_TYPE = "manual"


@dataclass(frozen=True)
class StockAdjustment:
    product_id: UUID
    branch_id: str
    movement_type: str
    quantity: int
    reason: str
    variation_id: UUID | None = None


class StockAdjustmentService:
    def __init__(self, db):
        self.db = db
        self.inventory = InventoryRepository(db)
        self.branches = BranchRepository(db)
        self.products = ProductRepository(db)
        self.recorder = StockMovementRecorder(db)

    def adjust(self, adjustment: StockAdjustment, actor) -> None:
        if adjustment.movement_type not in MOVEMENT_TYPES:
            raise ValidationError("Invalid movement_type. Must be 'in' or 'out'")
        if adjustment.quantity <= 0:
            raise ValidationError("Quantity must be a positive number")
        if self.products.get_product(adjustment.product_id) is None:
            raise AppError(ErrorCatalog.NOT_FOUND, message="Product not found")
        if adjustment.variation_id is not None and (
            self.products.get_product_variation(adjustment.product_id, adjustment.variation_id) is None
        ):
            raise ValidationError(
                f"Variation not found for product {adjustment.product_id}: {adjustment.variation_id}",
                details={"product_id": str(adjustment.product_id), "variation_id": str(adjustment.variation_id)},
            )
        if self.branches.get(adjustment.branch_id) is None:
            raise AppError(ErrorCatalog.NOT_FOUND, message="Branch not found")

        committed = False
        try:
            if adjustment.movement_type == "in":
                self._add_stock(adjustment)
            else:
                self._reduce_stock(adjustment)
            self.recorder.record(
                adjustment.product_id,
                adjustment.branch_id,
                adjustment.variation_id,
                actor.id,
                adjustment.movement_type,
                adjustment.quantity,
                adjustment.reason,
                MANUAL_REFERENCE_TYPE,
                None,
            )
            self.db.commit()
            committed = True
        except SQLAlchemyError as exc:
            if is_lock_timeout(exc):
                metrics.increment_lock_wait_timeout()
                raise AppError(ErrorCatalog.LOCK_TIMEOUT, details={"type": exc.__class__.__name__}) from exc
            logger.exception("Stock adjustment rolled back after database failure")
            raise PersistenceError(details={"type": exc.__class__.__name__}) from exc
        finally:
            if not committed:
                self.db.rollback()

        metrics.increment_stock_adjustment(adjustment.movement_type)
        log_json(
            logger,
            {
                "event": "stock.adjusted",
                "product_id": str(adjustment.product_id),
                "variation_id": str(adjustment.variation_id) if adjustment.variation_id else None,
                "branch_id": adjustment.branch_id,
                "movement_type": adjustment.movement_type,
                "quantity": adjustment.quantity,
                "user_id": str(actor.id),
            },
        )

    def _add_stock(self, adjustment: StockAdjustment) -> None:
        incremented = self.inventory.increment(
            adjustment.product_id,
            adjustment.branch_id,
            adjustment.variation_id,
            adjustment.quantity,
            restocked=False,
        )
        if not incremented:
            self.inventory.insert(
                adjustment.product_id,
                adjustment.branch_id,
                adjustment.variation_id,
                adjustment.quantity,
                min_stock_level=settings.DEFAULT_MIN_STOCK_LEVEL,
                max_stock_level=settings.DEFAULT_MAX_STOCK_LEVEL,
                restocked=False,
            )

    def _reduce_stock(self, adjustment: StockAdjustment) -> None:
        reduced = self.inventory.decrement_guarded(
            adjustment.product_id,
            adjustment.branch_id,
            adjustment.variation_id,
            adjustment.quantity,
        )
        if not reduced:
            raise AppError(
                ErrorCatalog.INSUFFICIENT_STOCK,
                details={
                    "product_id": str(adjustment.product_id),
                    "available": self.inventory.get_quantity(
                        adjustment.product_id, adjustment.branch_id, adjustment.variation_id
                    ),
                    "requested": adjustment.quantity,
                },
            )
