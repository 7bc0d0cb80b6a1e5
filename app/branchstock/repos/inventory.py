from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import and_, func, or_, select, update

from app.branchstock.db.models import Branch, InventoryRecord, Product, ProductVariation


@dataclass(frozen=True)
class InventoryQueryFilters:
    branch_id: str | None = None
    product_id: UUID | None = None
    variation_id: UUID | None = None
    low_stock_only: bool = False
    status: str | None = None


def stock_status(quantity: int, min_stock_level: int | None, max_stock_level: int | None) -> str:
    if quantity <= 0:
        return "out_of_stock"
    if min_stock_level is not None and quantity <= min_stock_level:
        return "low_stock"
    if max_stock_level is not None and quantity >= max_stock_level:
        return "overstock"
    return "normal"


def _status_condition(status: str):
    quantity = InventoryRecord.quantity
    min_level = InventoryRecord.min_stock_level
    max_level = InventoryRecord.max_stock_level
    if status == "out_of_stock":
        return quantity == 0
    if status == "low_stock":
        return and_(min_level.is_not(None), quantity <= min_level, quantity > 0)
    if status == "overstock":
        return and_(max_level.is_not(None), quantity >= max_level)
    # Rows with only one level configured never count as normal.
    return or_(
        and_(min_level.is_not(None), max_level.is_not(None), quantity > min_level, quantity < max_level),
        and_(min_level.is_(None), max_level.is_(None), quantity > 0),
    )


def _row_match(product_id: UUID, branch_id: str, variation_id: UUID | None) -> list:
    conditions = [InventoryRecord.product_id == product_id, InventoryRecord.branch_id == branch_id]
    if variation_id is None:
        conditions.append(InventoryRecord.variation_id.is_(None))
    else:
        conditions.append(InventoryRecord.variation_id == variation_id)
    return conditions


class InventoryRepository:
    """Inventory access for a single unit of work.

    Quantities are only ever changed with conditional UPDATE statements so
    that concurrent writers are serialized by the database row lock rather
    than by a read-then-write in Python.
    """

    def __init__(self, db):
        self.db = db

    def get_quantity(self, product_id: UUID, branch_id: str, variation_id: UUID | None) -> int:
        quantity = self.db.execute(
            select(InventoryRecord.quantity).where(*_row_match(product_id, branch_id, variation_id))
        ).scalar()
        return int(quantity or 0)

    def sum_quantity(self, product_id: UUID, branch_id: str) -> int:
        total = self.db.execute(
            select(func.coalesce(func.sum(InventoryRecord.quantity), 0)).where(
                InventoryRecord.product_id == product_id,
                InventoryRecord.branch_id == branch_id,
            )
        ).scalar_one()
        return int(total or 0)

    def available_quantity(self, product_id: UUID, branch_id: str, variation_id: UUID | None) -> int:
        if variation_id is not None:
            return self.get_quantity(product_id, branch_id, variation_id)
        return self.sum_quantity(product_id, branch_id)

    def stock_levels(self, product_id: UUID, branch_id: str, variation_id: UUID | None) -> tuple[int | None, int | None]:
        row = self.db.execute(
            select(InventoryRecord.min_stock_level, InventoryRecord.max_stock_level)
            .where(*_row_match(product_id, branch_id, variation_id))
            .limit(1)
        ).first()
        if row is None:
            return None, None
        return row.min_stock_level, row.max_stock_level

    def decrement_guarded(self, product_id: UUID, branch_id: str, variation_id: UUID | None, quantity: int) -> bool:
        """Subtract ``quantity`` only if the row still holds at least that much.

        Returns False when no row matched, either because it does not exist or
        because a concurrent writer already drew it down.
        """
        stmt = (
            update(InventoryRecord)
            .where(*_row_match(product_id, branch_id, variation_id), InventoryRecord.quantity >= quantity)
            .values(quantity=InventoryRecord.quantity - quantity, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount > 0

    def increment(
        self,
        product_id: UUID,
        branch_id: str,
        variation_id: UUID | None,
        quantity: int,
        *,
        restocked: bool = True,
    ) -> bool:
        now = datetime.utcnow()
        values = {"quantity": InventoryRecord.quantity + quantity, "updated_at": now}
        if restocked:
            values["last_restocked"] = now
        stmt = (
            update(InventoryRecord)
            .where(*_row_match(product_id, branch_id, variation_id))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self.db.execute(stmt)
        return result.rowcount > 0

    def insert(
        self,
        product_id: UUID,
        branch_id: str,
        variation_id: UUID | None,
        quantity: int,
        *,
        min_stock_level: int | None,
        max_stock_level: int | None,
        restocked: bool = True,
    ) -> InventoryRecord:
        now = datetime.utcnow()
        record = InventoryRecord(
            product_id=product_id,
            branch_id=branch_id,
            variation_id=variation_id,
            quantity=quantity,
            min_stock_level=min_stock_level,
            max_stock_level=max_stock_level,
            last_restocked=now if restocked else None,
            created_at=now,
            updated_at=now,
        )
        self.db.add(record)
        self.db.flush()
        return record

    def list_inventory(self, filters: InventoryQueryFilters, *, page: int, limit: int) -> tuple[list[dict], int]:
        base_query = (
            select(
                InventoryRecord,
                Product.name.label("product_name"),
                Product.sku.label("product_sku"),
                Product.product_type.label("product_type"),
                ProductVariation.sku.label("variation_sku"),
                ProductVariation.color.label("color"),
                ProductVariation.size.label("size"),
                Branch.name.label("branch_name"),
            )
            .join(Product, InventoryRecord.product_id == Product.id)
            .join(Branch, InventoryRecord.branch_id == Branch.id)
            .outerjoin(ProductVariation, InventoryRecord.variation_id == ProductVariation.id)
            .where(Product.is_active.is_(True))
        )
        if filters.branch_id:
            base_query = base_query.where(InventoryRecord.branch_id == filters.branch_id)
        if filters.product_id:
            base_query = base_query.where(InventoryRecord.product_id == filters.product_id)
        if filters.variation_id:
            base_query = base_query.where(InventoryRecord.variation_id == filters.variation_id)
        if filters.low_stock_only:
            base_query = base_query.where(InventoryRecord.quantity <= InventoryRecord.min_stock_level)
        if filters.status and filters.status != "all":
            base_query = base_query.where(_status_condition(filters.status))

        total = self.db.execute(select(func.count()).select_from(base_query.subquery())).scalar_one()
        query = (
            base_query.order_by(Product.name.asc(), Branch.name.asc(), InventoryRecord.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        rows = []
        for row in self.db.execute(query).all():
            record = row.InventoryRecord
            rows.append(
                {
                    "id": str(record.id),
                    "product_id": str(record.product_id),
                    "variation_id": str(record.variation_id) if record.variation_id else None,
                    "branch_id": record.branch_id,
                    "branch_name": row.branch_name,
                    "product_name": row.product_name,
                    "product_sku": row.product_sku,
                    "product_type": row.product_type,
                    "variation_sku": row.variation_sku,
                    "color": row.color,
                    "size": row.size,
                    "quantity": record.quantity,
                    "min_stock_level": record.min_stock_level,
                    "max_stock_level": record.max_stock_level,
                    "last_restocked": record.last_restocked,
                    "updated_at": record.updated_at,
                    "stock_status": stock_status(
                        record.quantity, record.min_stock_level, record.max_stock_level
                    ),
                }
            )
        return rows, int(total or 0)
