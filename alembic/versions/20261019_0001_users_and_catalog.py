"""users, products and stock ledger

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 09:00:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    user_role_enum = sa.Enum(
        "SUPER_ADMIN",
        "ADMIN",
        "SHOP_AGENT",
        "WAREHOUSE_AGENT",
        "CONFIRMER",
        name="userrole",
    )
    stock_movement_type_enum = sa.Enum(
        "ADD",
        "REMOVE",
        "ADJUSTMENT",
        name="stockmovementtype",
    )

    bind = op.get_bind()
    user_role_enum.create(bind, checkfirst=True)
    stock_movement_type_enum.create(bind, checkfirst=True)

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("phone", sa.String(length=20), nullable=True),
        sa.Column("email", sa.String(length=320), nullable=True),
        sa.Column("password_hash", sa.String(length=255), nullable=False),
        sa.Column("role", user_role_enum, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("avatar_url", sa.String(length=500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_id"), "users", ["id"], unique=False)
    op.create_index(op.f("ix_users_phone"), "users", ["phone"], unique=True)
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_role"), "users", ["role"], unique=False)

    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("sku", sa.String(length=100), nullable=False),
        sa.Column("barcode", sa.String(length=100), nullable=True),
        sa.Column("selling_price", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("cost_price", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_products_id"), "products", ["id"], unique=False)
    op.create_index(op.f("ix_products_name"), "products", ["name"], unique=False)
    op.create_index(op.f("ix_products_sku"), "products", ["sku"], unique=True)
    op.create_index(op.f("ix_products_barcode"), "products", ["barcode"], unique=True)
    op.create_index(op.f("ix_products_is_active"), "products", ["is_active"], unique=False)
    op.create_index(op.f("ix_products_created_by"), "products", ["created_by"], unique=False)
    op.create_index(op.f("ix_products_created_at"), "products", ["created_at"], unique=False)

    op.create_table(
        "stock",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("warehouse_location", sa.String(length=100), nullable=True),
        sa.Column("min_stock_level", sa.Integer(), nullable=False),
        sa.Column("last_updated", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_stock_id"), "stock", ["id"], unique=False)
    op.create_index(op.f("ix_stock_product_id"), "stock", ["product_id"], unique=True)

    op.create_table(
        "stock_history",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("quantity_change", sa.Integer(), nullable=False),
        sa.Column("type", stock_movement_type_enum, nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("previous_quantity", sa.Integer(), nullable=False),
        sa.Column("new_quantity", sa.Integer(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_stock_history_id"), "stock_history", ["id"], unique=False)
    op.create_index(op.f("ix_stock_history_product_id"), "stock_history", ["product_id"], unique=False)
    op.create_index(op.f("ix_stock_history_type"), "stock_history", ["type"], unique=False)
    op.create_index(op.f("ix_stock_history_created_by"), "stock_history", ["created_by"], unique=False)
    op.create_index(op.f("ix_stock_history_created_at"), "stock_history", ["created_at"], unique=False)

    op.create_table(
        "product_delivery_stats",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("total_orders", sa.Integer(), nullable=False),
        sa.Column("delivered_orders", sa.Integer(), nullable=False),
        sa.Column("cancelled_orders", sa.Integer(), nullable=False),
        sa.Column("returned_orders", sa.Integer(), nullable=False),
        sa.Column("in_transit_orders", sa.Integer(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_product_delivery_stats_id"), "product_delivery_stats", ["id"], unique=False)
    op.create_index(
        op.f("ix_product_delivery_stats_product_id"),
        "product_delivery_stats",
        ["product_id"],
        unique=True,
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_product_delivery_stats_product_id"), table_name="product_delivery_stats")
    op.drop_index(op.f("ix_product_delivery_stats_id"), table_name="product_delivery_stats")
    op.drop_table("product_delivery_stats")

    op.drop_index(op.f("ix_stock_history_created_at"), table_name="stock_history")
    op.drop_index(op.f("ix_stock_history_created_by"), table_name="stock_history")
    op.drop_index(op.f("ix_stock_history_type"), table_name="stock_history")
    op.drop_index(op.f("ix_stock_history_product_id"), table_name="stock_history")
    op.drop_index(op.f("ix_stock_history_id"), table_name="stock_history")
    op.drop_table("stock_history")

    op.drop_index(op.f("ix_stock_product_id"), table_name="stock")
    op.drop_index(op.f("ix_stock_id"), table_name="stock")
    op.drop_table("stock")

    op.drop_index(op.f("ix_products_created_at"), table_name="products")
    op.drop_index(op.f("ix_products_created_by"), table_name="products")
    op.drop_index(op.f("ix_products_is_active"), table_name="products")
    op.drop_index(op.f("ix_products_barcode"), table_name="products")
    op.drop_index(op.f("ix_products_sku"), table_name="products")
    op.drop_index(op.f("ix_products_name"), table_name="products")
    op.drop_index(op.f("ix_products_id"), table_name="products")
    op.drop_table("products")

    op.drop_index(op.f("ix_users_role"), table_name="users")
    op.drop_index(op.f("ix_users_email"), table_name="users")
    op.drop_index(op.f("ix_users_phone"), table_name="users")
    op.drop_index(op.f("ix_users_id"), table_name="users")
    op.drop_table("users")

    bind = op.get_bind()
    sa.Enum(name="stockmovementtype").drop(bind, checkfirst=True)
    sa.Enum(name="userrole").drop(bind, checkfirst=True)
