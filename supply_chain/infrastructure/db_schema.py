from sqlalchemy import (
    Table, Column, String, Integer, Boolean, DateTime, ForeignKey, MetaData, CheckConstraint
)
from sqlalchemy.sql import func

metadata = MetaData()


order_statuses_tbl = Table(
    "order_statuses",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("status", String, unique=True, nullable=False)
)


raw_materials_tbl = Table(
    "raw_materials",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String, unique=True, nullable=False),
    Column("quantity", Integer, nullable=False, default=0),
    CheckConstraint("quantity >= 0", name="ck_raw_materials_quantity_nonneg")
)


equipment_parameters_tbl = Table(
    "equipment_parameters",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("input_sand_kg", Integer, nullable=False),
    Column("input_copper_kg", Integer, nullable=False),
    Column("output_screens_day", Integer, nullable=False),
    Column("equipment_weight", Integer, nullable=False, default=0)
)


purchase_orders_tbl = Table(
    "purchase_orders",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", String, nullable=False),
    Column("shipment_id", String, nullable=True, index=True),
    Column("quantity", Integer, nullable=False),
    Column("quantity_delivered", Integer, nullable=False, default=0),
    Column("order_date", DateTime(timezone=True), server_default=func.now()),
    Column("unit_price", Integer, nullable=False),
    Column("seller_bank_account", String, nullable=False),
    Column("origin", String, nullable=False),
    Column("order_shipping_price", Integer, nullable=False, default=0),
    Column("shipper_bank_account", String, nullable=True),
    Column("status_id", Integer, ForeignKey("order_statuses.id"), nullable=False),
    Column("raw_materials_id", Integer, ForeignKey("raw_materials.id"), nullable=True),
    Column("equipment_order", Boolean, nullable=False, default=False),
    CheckConstraint(
        "quantity_delivered >= 0 AND quantity_delivered <= quantity",
        name="ck_purchase_orders_quantity_delivered"
    )
)


equipment_tbl = Table(
    "equipment",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("parameters_id", Integer, ForeignKey("equipment_parameters.id"), nullable=False),
    Column("is_available", Boolean, nullable=False, default=True),
    Column("is_producing", Boolean, nullable=False, default=False),
    Column("purchase_order_id", Integer, ForeignKey("purchase_orders.id"), nullable=True)
)
