from __future__ import annotations

from datetime import datetime
from uuid import UUID

from app.branchstock.db.models import StockMovement
from app.branchstock.repos.stock_movements import StockMovementRepository

MOVEMENT_TYPES = ("in", "out")


class StockMovementRecorder:
    """Appends audit rows for inventory deltas.

    The recorder never commits and never reads back; it shares the
    transaction of whichever operation is changing stock.
    """

    def __init__(self, db):
        self.repo = StockMovementRepository(db)

    def record(
        self,
        product_id: UUID,
        branch_id: str,
        variation_id: UUID | None,
        user_id: UUID,
        movement_type: str,
        quantity: int,
        reason: str | None,
        reference_type: str | None,
        reference_id: UUID | None,
    ) -> None:
        if movement_type not in MOVEMENT_TYPES:
            raise ValueError(f"movement_type must be one of {MOVEMENT_TYPES}, got {movement_type!r}")
        if quantity <= 0:
            raise ValueError("movement quantity must be positive")
        movement = StockMovement(
            product_id=product_id,
            branch_id=branch_id,
            variation_id=variation_id,
            user_id=user_id,
            movement_type=movement_type,
            quantity=quantity,
            reason=reason,
            reference_type=reference_type,
            reference_id=reference_id,
            created_at=datetime.utcnow(),
        )
        self.repo.add(movement)
