from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import aliased

from app.branchstock.db.models import Branch, Product, ProductVariation, Transfer, TransferItem, User


@dataclass(frozen=True)
class TransferQueryFilters:
    from_branch_id: str | None = None
    to_branch_id: str | None = None
    status: str | None = None


def variation_display_name(variation_id, color: str | None, size: str | None) -> str | None:
    if variation_id is None:
        return None
    return " - ".join(part for part in (color, size) if part) or ""


class TransferRepository:
    def __init__(self, db):
        self.db = db

    def create_transfer(
        self,
        *,
        from_branch_id: str,
        to_branch_id: str,
        notes: str,
        user_id: UUID,
        status: str = "completed",
    ) -> Transfer:
        transfer = Transfer(
            from_branch_id=from_branch_id,
            to_branch_id=to_branch_id,
            notes=notes,
            status=status,
            user_id=user_id,
            transfer_date=datetime.utcnow(),
        )
        self.db.add(transfer)
        self.db.flush()
        return transfer

    def add_item(
        self,
        transfer_id: UUID,
        product_id: UUID,
        variation_id: UUID | None,
        quantity: int,
        *,
        line_no: int,
    ) -> TransferItem:
        item = TransferItem(
            transfer_id=transfer_id,
            product_id=product_id,
            variation_id=variation_id,
            quantity=quantity,
            line_no=line_no,
        )
        self.db.add(item)
        self.db.flush()
        return item

    def _header_query(self):
        from_branch = aliased(Branch)
        to_branch = aliased(Branch)
        return (
            select(
                Transfer,
                from_branch.name.label("from_branch_name"),
                to_branch.name.label("to_branch_name"),
                User.full_name.label("user_name"),
            )
            .outerjoin(from_branch, Transfer.from_branch_id == from_branch.id)
            .outerjoin(to_branch, Transfer.to_branch_id == to_branch.id)
            .outerjoin(User, Transfer.user_id == User.id)
        )

    @staticmethod
    def _header(row) -> dict:
        transfer = row.Transfer
        user_id = str(transfer.user_id) if transfer.user_id else None
        # There is no separate approval step: approver mirrors the requester.
        return {
            "id": str(transfer.id),
            "from_branch_id": transfer.from_branch_id,
            "to_branch_id": transfer.to_branch_id,
            "status": transfer.status,
            "reason": transfer.notes,
            "requested_at": transfer.transfer_date,
            "completed_at": transfer.transfer_date,
            "requested_by": user_id,
            "approved_by": user_id,
            "from_branch_name": row.from_branch_name,
            "to_branch_name": row.to_branch_name,
            "requested_by_name": row.user_name,
            "approved_by_name": row.user_name,
        }

    def list_transfers(self, filters: TransferQueryFilters, *, page: int, limit: int) -> list[dict]:
        query = self._header_query()
        if filters.from_branch_id:
            query = query.where(Transfer.from_branch_id == filters.from_branch_id)
        if filters.to_branch_id:
            query = query.where(Transfer.to_branch_id == filters.to_branch_id)
        if filters.status:
            query = query.where(Transfer.status == filters.status)
        query = query.order_by(Transfer.transfer_date.desc()).offset((page - 1) * limit).limit(limit)
        return [self._header(row) for row in self.db.execute(query).all()]

    def get_transfer(self, transfer_id: UUID) -> dict | None:
        row = self.db.execute(self._header_query().where(Transfer.id == transfer_id)).first()
        if row is None:
            return None
        return self._header(row)

    def get_items(self, transfer_ids: list[str]) -> dict[str, list[dict]]:
        grouped: dict[str, list[dict]] = {transfer_id: [] for transfer_id in transfer_ids}
        if not transfer_ids:
            return grouped
        query = (
            select(
                TransferItem,
                Product.name.label("product_name"),
                Product.sku.label("sku"),
                ProductVariation.id.label("joined_variation_id"),
                ProductVariation.color.label("color"),
                ProductVariation.size.label("size"),
            )
            .outerjoin(Product, TransferItem.product_id == Product.id)
            .outerjoin(ProductVariation, TransferItem.variation_id == ProductVariation.id)
            .where(TransferItem.transfer_id.in_([UUID(transfer_id) for transfer_id in transfer_ids]))
            .order_by(TransferItem.transfer_id, TransferItem.line_no)
        )
        for row in self.db.execute(query).all():
            item = row.TransferItem
            grouped.setdefault(str(item.transfer_id), []).append(
                {
                    "id": str(item.id),
                    "product_id": str(item.product_id),
                    "variation_id": str(item.variation_id) if item.variation_id else None,
                    "quantity": item.quantity,
                    "product_name": row.product_name,
                    "sku": row.sku,
                    "variation_name": variation_display_name(row.joined_variation_id, row.color, row.size),
                    "color": row.color,
                    "size": row.size,
                }
            )
        return grouped

    def list_items_for(self, transfer_id: str) -> list[dict]:
        return self.get_items([transfer_id])[transfer_id]
