"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


class GUID(sa.TypeDecorator):
    impl = sa.CHAR
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            from sqlalchemy.dialects.postgresql import UUID

            return dialect.type_descriptor(UUID(as_uuid=True))
        return dialect.type_descriptor(sa.CHAR(36))


def upgrade() -> None:
    op.create_table(
        "branches",
        sa.Column("id", sa.String(length=50), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("address", sa.String(length=500), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "users",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("role", sa.String(length=50), nullable=False, server_default="employee"),
        sa.Column("branch_id", sa.String(length=50), sa.ForeignKey("branches.id"), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("last_login", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_branch_id", "users", ["branch_id"], unique=False)

    op.create_table(
        "products",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("sku", sa.String(length=100), nullable=False, unique=True),
        sa.Column("product_type", sa.String(length=20), nullable=False, server_default="uniform"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_table(
        "product_variations",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("product_id", GUID(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("sku", sa.String(length=100), nullable=False),
        sa.Column("color", sa.String(length=100), nullable=True),
        sa.Column("size", sa.String(length=50), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(), nullable=False),
    )
    op.create_index("ix_product_variations_product_id", "product_variations", ["product_id"], unique=False)

    op.create_table(
        "inventory",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("product_id", GUID(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("branch_id", sa.String(length=50), sa.ForeignKey("branches.id"), nullable=False),
        sa.Column("variation_id", GUID(), sa.ForeignKey("product_variations.id"), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("min_stock_level", sa.Integer(), nullable=True),
        sa.Column("max_stock_level", sa.Integer(), nullable=True),
        sa.Column("last_restocked", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=True),
        sa.CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
        sa.UniqueConstraint(
            "product_id",
            "branch_id",
            "variation_id",
            name="uq_inventory_product_branch_variation",
        ),
    )
    op.create_index("ix_inventory_product_id", "inventory", ["product_id"], unique=False)
    op.create_index("ix_inventory_branch_id", "inventory", ["branch_id"], unique=False)
    op.create_index("ix_inventory_variation_id", "inventory", ["variation_id"], unique=False)
    op.create_index(
        "uq_inventory_product_branch_uniform",
        "inventory",
        ["product_id", "branch_id"],
        unique=True,
        postgresql_where=sa.text("variation_id IS NULL"),
        sqlite_where=sa.text("variation_id IS NULL"),
    )

    op.create_table(
        "transfers",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("from_branch_id", sa.String(length=50), sa.ForeignKey("branches.id"), nullable=False),
        sa.Column("to_branch_id", sa.String(length=50), sa.ForeignKey("branches.id"), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="completed"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("user_id", GUID(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("transfer_date", sa.DateTime(), nullable=False),
        sa.CheckConstraint("from_branch_id <> to_branch_id", name="ck_transfers_distinct_branches"),
    )
    op.create_index("ix_transfers_from_branch_id", "transfers", ["from_branch_id"], unique=False)
    op.create_index("ix_transfers_to_branch_id", "transfers", ["to_branch_id"], unique=False)
    op.create_index("ix_transfers_user_id", "transfers", ["user_id"], unique=False)
    op.create_index("ix_transfers_transfer_date", "transfers", ["transfer_date"], unique=False)

    op.create_table(
        "transfer_items",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("transfer_id", GUID(), sa.ForeignKey("transfers.id"), nullable=False),
        sa.Column("product_id", GUID(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("variation_id", GUID(), sa.ForeignKey("product_variations.id"), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("line_no", sa.Integer(), nullable=False, server_default="1"),
        sa.CheckConstraint("quantity > 0", name="ck_transfer_items_quantity_positive"),
    )
    op.create_index("ix_transfer_items_transfer_id", "transfer_items", ["transfer_id"], unique=False)

    op.create_table(
        "stock_movements",
        sa.Column("id", GUID(), primary_key=True),
        sa.Column("product_id", GUID(), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("branch_id", sa.String(length=50), sa.ForeignKey("branches.id"), nullable=False),
        sa.Column("variation_id", GUID(), sa.ForeignKey("product_variations.id"), nullable=True),
        sa.Column("user_id", GUID(), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("movement_type", sa.String(length=10), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("reference_type", sa.String(length=50), nullable=True),
        sa.Column("reference_id", GUID(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint("quantity > 0", name="ck_stock_movements_quantity_positive"),
        sa.CheckConstraint("movement_type IN ('in', 'out')", name="ck_stock_movements_movement_type"),
    )
    op.create_index("ix_stock_movements_product_id", "stock_movements", ["product_id"], unique=False)
    op.create_index("ix_stock_movements_branch_id", "stock_movements", ["branch_id"], unique=False)
    op.create_index("ix_stock_movements_reference_id", "stock_movements", ["reference_id"], unique=False)
    op.create_index("ix_stock_movements_created_at", "stock_movements", ["created_at"], unique=False)


def downgrade() -> None:
    op.drop_table("stock_movements")
    op.drop_table("transfer_items")
    op.drop_table("transfers")
    op.drop_index("uq_inventory_product_branch_uniform", table_name="inventory")
    op.drop_table("inventory")
    op.drop_table("product_variations")
    op.drop_table("products")
    op.drop_table("users")
    op.drop_table("branches")
