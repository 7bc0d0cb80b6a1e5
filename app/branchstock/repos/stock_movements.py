from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import func, select

from app.branchstock.db.models import Branch, Product, StockMovement


@dataclass(frozen=True)
class StockMovementQueryFilters:
    branch_id: str | None = None
    reference_type: str | None = None
    reference_id: UUID | None = None


class StockMovementRepository:
    def __init__(self, db):
        self.db = db

    def add(self, movement: StockMovement) -> StockMovement:
        # Never commits: movements ride on the caller's transaction.
        self.db.add(movement)
        self.db.flush()
        return movement

    def list_movements(
        self,
        filters: StockMovementQueryFilters,
        *,
        page: int,
        limit: int,
    ) -> tuple[list[dict], int]:
        base_query = (
            select(
                StockMovement,
                Product.name.label("product_name"),
                Product.sku.label("sku"),
                Branch.name.label("branch_name"),
            )
            .join(Product, StockMovement.product_id == Product.id)
            .join(Branch, StockMovement.branch_id == Branch.id)
        )
        if filters.branch_id:
            base_query = base_query.where(StockMovement.branch_id == filters.branch_id)
        if filters.reference_type:
            base_query = base_query.where(StockMovement.reference_type == filters.reference_type)
        if filters.reference_id:
            base_query = base_query.where(StockMovement.reference_id == filters.reference_id)

        total = self.db.execute(select(func.count()).select_from(base_query.subquery())).scalar_one()
        query = (
            base_query.order_by(StockMovement.created_at.desc(), StockMovement.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = []
        for row in self.db.execute(query).all():
            movement = row.StockMovement
            rows.append(
                {
                    "id": str(movement.id),
                    "product_id": str(movement.product_id),
                    "variation_id": str(movement.variation_id) if movement.variation_id else None,
                    "branch_id": movement.branch_id,
                    "user_id": str(movement.user_id),
                    "movement_type": movement.movement_type,
                    "quantity": movement.quantity,
                    "reason": movement.reason,
                    "reference_type": movement.reference_type,
                    "reference_id": str(movement.reference_id) if movement.reference_id else None,
                    "created_at": movement.created_at,
                    "product_name": row.product_name,
                    "sku": row.sku,
                    "branch_name": row.branch_name,
                }
            )
        return rows, int(total or 0)
