"""orders, scans and finance

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 09:30:00
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "20261019_0002"
down_revision: Union[str, Sequence[str], None] = "20261019_0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    order_status_enum = sa.Enum(
        "PENDING",
        "CONFIRMED",
        "PICKED_UP",
        "IN_TRANSIT",
        "OUT_FOR_DELIVERY",
        "DELIVERED",
        "CANCELLED",
        "RETURNED",
        name="orderstatus",
    )
    payment_status_enum = sa.Enum("UNPAID", "PAID", "REFUNDED", name="paymentstatus")
    charge_type_enum = sa.Enum(
        "WATER_BILL",
        "ELECTRICITY_BILL",
        "RENT",
        "LAWYER",
        "BROKEN_PARTS",
        "MAINTENANCE",
        "OTHER",
        name="chargetype",
    )
    ad_platform_enum = sa.Enum(
        "FACEBOOK",
        "INSTAGRAM",
        "GOOGLE",
        "TIKTOK",
        "SNAPCHAT",
        "OTHER",
        name="adplatform",
    )

    bind = op.get_bind()
    order_status_enum.create(bind, checkfirst=True)
    payment_status_enum.create(bind, checkfirst=True)
    charge_type_enum.create(bind, checkfirst=True)
    ad_platform_enum.create(bind, checkfirst=True)

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("order_number", sa.String(length=50), nullable=False),
        sa.Column("customer_name", sa.String(length=255), nullable=False),
        sa.Column("customer_phone", sa.String(length=20), nullable=False),
        sa.Column("customer_address", sa.Text(), nullable=False),
        sa.Column("customer_city", sa.String(length=100), nullable=True),
        sa.Column("total_amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("delivery_price", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("status", order_status_enum, nullable=False),
        sa.Column("payment_status", payment_status_enum, nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_from_shop", sa.Boolean(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_orders_id"), "orders", ["id"], unique=False)
    op.create_index(op.f("ix_orders_order_number"), "orders", ["order_number"], unique=True)
    op.create_index(op.f("ix_orders_customer_phone"), "orders", ["customer_phone"], unique=False)
    op.create_index(op.f("ix_orders_status"), "orders", ["status"], unique=False)
    op.create_index(op.f("ix_orders_payment_status"), "orders", ["payment_status"], unique=False)
    op.create_index(op.f("ix_orders_created_by"), "orders", ["created_by"], unique=False)
    op.create_index(op.f("ix_orders_created_at"), "orders", ["created_at"], unique=False)

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.Integer(), nullable=False),
        sa.Column("product_id", sa.Integer(), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("unit_price", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("subtotal", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["product_id"], ["products.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_order_items_id"), "order_items", ["id"], unique=False)
    op.create_index(op.f("ix_order_items_order_id"), "order_items", ["order_id"], unique=False)
    op.create_index(op.f("ix_order_items_product_id"), "order_items", ["product_id"], unique=False)

    op.create_table(
        "scanned_orders",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("order_id", sa.Integer(), nullable=False),
        sa.Column("delivery_company", sa.String(length=100), nullable=True),
        sa.Column("tracking_number", sa.String(length=100), nullable=True),
        sa.Column("scanned_by", sa.Integer(), nullable=True),
        sa.Column("scanned_at", sa.DateTime(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["scanned_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_scanned_orders_id"), "scanned_orders", ["id"], unique=False)
    op.create_index(op.f("ix_scanned_orders_order_id"), "scanned_orders", ["order_id"], unique=True)
    op.create_index(op.f("ix_scanned_orders_scanned_by"), "scanned_orders", ["scanned_by"], unique=False)
    op.create_index(op.f("ix_scanned_orders_scanned_at"), "scanned_orders", ["scanned_at"], unique=False)

    op.create_table(
        "salaries",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("employee_name", sa.String(length=255), nullable=False),
        sa.Column("position", sa.String(length=100), nullable=True),
        sa.Column("base_amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("bonus", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("deductions", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("total_amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("paid_at", sa.DateTime(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_salaries_id"), "salaries", ["id"], unique=False)
    op.create_index(op.f("ix_salaries_employee_name"), "salaries", ["employee_name"], unique=False)
    op.create_index(op.f("ix_salaries_month"), "salaries", ["month"], unique=False)
    op.create_index(op.f("ix_salaries_year"), "salaries", ["year"], unique=False)
    op.create_index(op.f("ix_salaries_created_by"), "salaries", ["created_by"], unique=False)

    op.create_table(
        "charges",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("type", charge_type_enum, nullable=False),
        sa.Column("custom_type", sa.String(length=100), nullable=True),
        sa.Column("amount", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("charge_date", sa.Date(), nullable=False),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_charges_id"), "charges", ["id"], unique=False)
    op.create_index(op.f("ix_charges_type"), "charges", ["type"], unique=False)
    op.create_index(op.f("ix_charges_charge_date"), "charges", ["charge_date"], unique=False)
    op.create_index(op.f("ix_charges_created_by"), "charges", ["created_by"], unique=False)

    op.create_table(
        "ads_costs",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("campaign_name", sa.String(length=255), nullable=False),
        sa.Column("platform", ad_platform_enum, nullable=False),
        sa.Column("cost", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("results", sa.Integer(), nullable=False),
        sa.Column("cost_per_result", sa.Numeric(precision=10, scale=2), nullable=False),
        sa.Column("campaign_date", sa.Date(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_by", sa.Integer(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(["created_by"], ["users.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_ads_costs_id"), "ads_costs", ["id"], unique=False)
    op.create_index(op.f("ix_ads_costs_platform"), "ads_costs", ["platform"], unique=False)
    op.create_index(op.f("ix_ads_costs_campaign_date"), "ads_costs", ["campaign_date"], unique=False)
    op.create_index(op.f("ix_ads_costs_created_by"), "ads_costs", ["created_by"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_ads_costs_created_by"), table_name="ads_costs")
    op.drop_index(op.f("ix_ads_costs_campaign_date"), table_name="ads_costs")
    op.drop_index(op.f("ix_ads_costs_platform"), table_name="ads_costs")
    op.drop_index(op.f("ix_ads_costs_id"), table_name="ads_costs")
    op.drop_table("ads_costs")

    op.drop_index(op.f("ix_charges_created_by"), table_name="charges")
    op.drop_index(op.f("ix_charges_charge_date"), table_name="charges")
    op.drop_index(op.f("ix_charges_type"), table_name="charges")
    op.drop_index(op.f("ix_charges_id"), table_name="charges")
    op.drop_table("charges")

    op.drop_index(op.f("ix_salaries_created_by"), table_name="salaries")
    op.drop_index(op.f("ix_salaries_year"), table_name="salaries")
    op.drop_index(op.f("ix_salaries_month"), table_name="salaries")
    op.drop_index(op.f("ix_salaries_employee_name"), table_name="salaries")
    op.drop_index(op.f("ix_salaries_id"), table_name="salaries")
    op.drop_table("salaries")

    op.drop_index(op.f("ix_scanned_orders_scanned_at"), table_name="scanned_orders")
    op.drop_index(op.f("ix_scanned_orders_scanned_by"), table_name="scanned_orders")
    op.drop_index(op.f("ix_scanned_orders_order_id"), table_name="scanned_orders")
    op.drop_index(op.f("ix_scanned_orders_id"), table_name="scanned_orders")
    op.drop_table("scanned_orders")

    op.drop_index(op.f("ix_order_items_product_id"), table_name="order_items")
    op.drop_index(op.f("ix_order_items_order_id"), table_name="order_items")
    op.drop_index(op.f("ix_order_items_id"), table_name="order_items")
    op.drop_table("order_items")

    op.drop_index(op.f("ix_orders_created_at"), table_name="orders")
    op.drop_index(op.f("ix_orders_created_by"), table_name="orders")
    op.drop_index(op.f("ix_orders_payment_status"), table_name="orders")
    op.drop_index(op.f("ix_orders_status"), table_name="orders")
    op.drop_index(op.f("ix_orders_customer_phone"), table_name="orders")
    op.drop_index(op.f("ix_orders_order_number"), table_name="orders")
    op.drop_index(op.f("ix_orders_id"), table_name="orders")
    op.drop_table("orders")

    bind = op.get_bind()
    sa.Enum(name="adplatform").drop(bind, checkfirst=True)
    sa.Enum(name="chargetype").drop(bind, checkfirst=True)
    sa.Enum(name="paymentstatus").drop(bind, checkfirst=True)
    sa.Enum(name="orderstatus").drop(bind, checkfirst=True)
