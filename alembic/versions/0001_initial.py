"""initial purchase order schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001_initial"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

STATUSES = (
    "requires_payment_supplier",
    "requires_delivery",
    "requires_payment_delivery",
    "waiting_delivery",
    "delivered",
    "abandoned",
    "waiting_collection",
    "waiting_payment",
    "collected",
)


def upgrade() -> None:
    order_statuses = op.create_table(
        "order_statuses",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("status", sa.String(), nullable=False, unique=True),
    )
    op.create_table(
        "raw_materials",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(), nullable=False, unique=True),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.CheckConstraint("quantity >= 0", name="ck_raw_materials_quantity_nonneg"),
    )
    op.create_table(
        "equipment_parameters",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("input_sand_kg", sa.Integer(), nullable=False),
        sa.Column("input_copper_kg", sa.Integer(), nullable=False),
        sa.Column("output_screens_day", sa.Integer(), nullable=False),
        sa.Column("equipment_weight", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_table(
        "purchase_orders",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("order_id", sa.String(), nullable=False),
        sa.Column("shipment_id", sa.String(), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("quantity_delivered", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("order_date", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("unit_price", sa.Integer(), nullable=False),
        sa.Column("seller_bank_account", sa.String(), nullable=False),
        sa.Column("origin", sa.String(), nullable=False),
        sa.Column("order_shipping_price", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("shipper_bank_account", sa.String(), nullable=True),
        sa.Column("status_id", sa.Integer(), sa.ForeignKey("order_statuses.id"), nullable=False),
        sa.Column("raw_materials_id", sa.Integer(), sa.ForeignKey("raw_materials.id"), nullable=True),
        sa.Column("equipment_order", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.CheckConstraint(
            "quantity_delivered >= 0 AND quantity_delivered <= quantity",
            name="ck_purchase_orders_quantity_delivered",
        ),
    )
    op.create_index("ix_purchase_orders_shipment_id", "purchase_orders", ["shipment_id"])
    op.create_table(
        "equipment",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("parameters_id", sa.Integer(), sa.ForeignKey("equipment_parameters.id"), nullable=False),
        sa.Column("is_available", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_producing", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("purchase_order_id", sa.Integer(), sa.ForeignKey("purchase_orders.id"), nullable=True),
    )

    op.bulk_insert(order_statuses, [{"status": status} for status in STATUSES])


def downgrade() -> None:
    op.drop_table("equipment")
    op.drop_index("ix_purchase_orders_shipment_id", table_name="purchase_orders")
    op.drop_table("purchase_orders")
    op.drop_table("equipment_parameters")
    op.drop_table("raw_materials")
    op.drop_table("order_statuses")
