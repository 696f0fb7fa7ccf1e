from typing import Optional, List
from sqlalchemy import select, insert, update, func
from sqlalchemy.ext.asyncio import AsyncSession

from supply_chain.domain.models import (
    PurchaseOrder, NewPurchaseOrder, OrderStatus, Material, EquipmentParameters, ACTIVE_STATUSES
)
from supply_chain.infrastructure.db_schema import (
    order_statuses_tbl, raw_materials_tbl, equipment_parameters_tbl, purchase_orders_tbl, equipment_tbl
)
from supply_chain.application.interfaces import (
    PurchaseOrderRepository, MaterialRepository, EquipmentRepository
)

_ACTIVE_STATUS_NAMES = [status.value for status in ACTIVE_STATUSES]


async def _status_id(session: AsyncSession, status_name: str) -> Optional[int]:
    result = await session.execute(
        select(order_statuses_tbl.c.id).where(order_statuses_tbl.c.status == status_name)
    )
    return result.scalar_one_or_none()


class SQLAlchemyPurchaseOrderRepository(PurchaseOrderRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    def _select(self):
        return (
            select(
                purchase_orders_tbl,
                order_statuses_tbl.c.status.label("status_name"),
                raw_materials_tbl.c.name.label("raw_material_name")
            )
            .select_from(
                purchase_orders_tbl
                .join(order_statuses_tbl, purchase_orders_tbl.c.status_id == order_statuses_tbl.c.id)
                .outerjoin(raw_materials_tbl, purchase_orders_tbl.c.raw_materials_id == raw_materials_tbl.c.id)
            )
        )

    async def get_by_id(self, purchase_order_id: int) -> Optional[PurchaseOrder]:
        result = await self._session.execute(
            self._select().where(purchase_orders_tbl.c.id == purchase_order_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def get_by_shipment_id(self, shipment_id: str) -> Optional[PurchaseOrder]:
        result = await self._session.execute(
            self._select().where(purchase_orders_tbl.c.shipment_id == shipment_id)
        )
        row = result.fetchone()
        return self._to_domain(row) if row else None

    async def create(self, order: NewPurchaseOrder) -> PurchaseOrder:
        status_id = await _status_id(self._session, OrderStatus.REQUIRES_PAYMENT_TO_SUPPLIER.value)
        if status_id is None:
            raise LookupError(f"Status {OrderStatus.REQUIRES_PAYMENT_TO_SUPPLIER.value} is not seeded")

        stmt = insert(purchase_orders_tbl).values(
            order_id=order.order_id,
            shipment_id=None,
            quantity=order.quantity,
            quantity_delivered=0,
            order_date=order.order_date,
            unit_price=order.unit_price,
            seller_bank_account=order.seller_bank_account,
            origin=order.origin,
            order_shipping_price=0,
            shipper_bank_account=None,
            status_id=status_id,
            raw_materials_id=None if order.equipment_order else order.raw_material_id,
            equipment_order=order.equipment_order
        )
        result = await self._session.execute(stmt)
        return await self.get_by_id(result.inserted_primary_key[0])

    async def list_all(self, limit: int = 100) -> List[PurchaseOrder]:
        result = await self._session.execute(
            self._select().order_by(purchase_orders_tbl.c.order_date.desc()).limit(limit)
        )
        return [self._to_domain(row) for row in result.fetchall()]

    async def list_active(self) -> List[PurchaseOrder]:
        result = await self._session.execute(
            self._select()
            .where(order_statuses_tbl.c.status.in_(_ACTIVE_STATUS_NAMES))
            .order_by(purchase_orders_tbl.c.id.asc())
        )
        return [self._to_domain(row) for row in result.fetchall()]

    async def update_status(self, purchase_order_id: int, status_name: str) -> bool:
        status_id = await _status_id(self._session, status_name)
        if status_id is None:
            return False
        result = await self._session.execute(
            update(purchase_orders_tbl)
            .where(purchase_orders_tbl.c.id == purchase_order_id)
            .values(status_id=status_id)
        )
        return result.rowcount > 0

    async def update_shipment_id(self, purchase_order_id: int, shipment_id: str) -> bool:
        result = await self._session.execute(
            update(purchase_orders_tbl)
            .where(purchase_orders_tbl.c.id == purchase_order_id)
            .values(shipment_id=shipment_id)
        )
        return result.rowcount > 0

    async def update_shipping_details(self, purchase_order_id: int, bank_account: str, price: int) -> bool:
        result = await self._session.execute(
            update(purchase_orders_tbl)
            .where(purchase_orders_tbl.c.id == purchase_order_id)
            .values(shipper_bank_account=bank_account, order_shipping_price=price)
        )
        return result.rowcount > 0

    async def add_delivered_quantity(self, purchase_order_id: int, quantity: int) -> bool:
        """Adds to quantity_delivered; marks the order delivered once complete"""
        result = await self._session.execute(
            select(purchase_orders_tbl.c.quantity, purchase_orders_tbl.c.quantity_delivered)
            .where(purchase_orders_tbl.c.id == purchase_order_id)
            .with_for_update()
        )
        row = result.fetchone()
        if not row:
            return False

        delivered = row.quantity_delivered + quantity
        if quantity <= 0 or delivered > row.quantity:
            return False

        values = {"quantity_delivered": delivered}
        if delivered == row.quantity:
            values["status_id"] = await _status_id(self._session, OrderStatus.DELIVERED.value)

        await self._session.execute(
            update(purchase_orders_tbl)
            .where(purchase_orders_tbl.c.id == purchase_order_id)
            .values(**values)
        )
        return True

    async def incoming_material_quantity(self, material_name: str) -> int:
        result = await self._session.execute(
            select(
                func.coalesce(
                    func.sum(purchase_orders_tbl.c.quantity - purchase_orders_tbl.c.quantity_delivered), 0
                )
            )
            .select_from(
                purchase_orders_tbl
                .join(order_statuses_tbl, purchase_orders_tbl.c.status_id == order_statuses_tbl.c.id)
                .join(raw_materials_tbl, purchase_orders_tbl.c.raw_materials_id == raw_materials_tbl.c.id)
            )
            .where(func.lower(raw_materials_tbl.c.name) == material_name.lower())
            .where(order_statuses_tbl.c.status.in_(_ACTIVE_STATUS_NAMES))
            .where(purchase_orders_tbl.c.equipment_order.is_(False))
        )
        return int(result.scalar_one())

    async def incoming_equipment_quantity(self) -> int:
        result = await self._session.execute(
            select(
                func.coalesce(
                    func.sum(purchase_orders_tbl.c.quantity - purchase_orders_tbl.c.quantity_delivered), 0
                )
            )
            .select_from(
                purchase_orders_tbl
                .join(order_statuses_tbl, purchase_orders_tbl.c.status_id == order_statuses_tbl.c.id)
            )
            .where(purchase_orders_tbl.c.equipment_order.is_(True))
            .where(order_statuses_tbl.c.status.in_(_ACTIVE_STATUS_NAMES))
        )
        return int(result.scalar_one())

    def _to_domain(self, row) -> PurchaseOrder:
        """DB row → Domain"""
        return PurchaseOrder(
            id=row.id,
            order_id=row.order_id,
            shipment_id=row.shipment_id,
            quantity=row.quantity,
            quantity_delivered=row.quantity_delivered,
            order_date=row.order_date,
            unit_price=row.unit_price,
            seller_bank_account=row.seller_bank_account,
            origin=row.origin,
            shipping_price=row.order_shipping_price,
            shipper_bank_account=row.shipper_bank_account,
            status=row.status_name,
            raw_material_id=row.raw_materials_id,
            raw_material_name=row.raw_material_name,
            equipment_order=bool(row.equipment_order)
        )


class SQLAlchemyMaterialRepository(MaterialRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_by_name(self, name: str) -> Optional[Material]:
        result = await self._session.execute(
            select(raw_materials_tbl).where(func.lower(raw_materials_tbl.c.name) == name.lower())
        )
        row = result.fetchone()
        return Material(id=row.id, name=row.name, quantity=row.quantity) if row else None

    async def get_or_create(self, name: str) -> Material:
        material = await self.get_by_name(name)
        if material:
            return material
        result = await self._session.execute(
            insert(raw_materials_tbl).values(name=name.lower(), quantity=0)
        )
        return Material(id=result.inserted_primary_key[0], name=name.lower(), quantity=0)

    async def add_quantity(self, name: str, quantity: int) -> Material:
        material = await self.get_or_create(name)
        await self._session.execute(
            update(raw_materials_tbl)
            .where(raw_materials_tbl.c.id == material.id)
            .values(quantity=raw_materials_tbl.c.quantity + quantity)
        )
        return Material(id=material.id, name=material.name, quantity=material.quantity + quantity)


class SQLAlchemyEquipmentRepository(EquipmentRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_parameters(self) -> Optional[EquipmentParameters]:
        result = await self._session.execute(
            select(equipment_parameters_tbl).order_by(equipment_parameters_tbl.c.id.asc()).limit(1)
        )
        row = result.fetchone()
        if not row:
            return None
        return EquipmentParameters(
            id=row.id,
            input_sand_kg=row.input_sand_kg,
            input_copper_kg=row.input_copper_kg,
            output_screens_per_day=row.output_screens_day,
            equipment_weight=row.equipment_weight
        )

    async def count_available(self) -> int:
        result = await self._session.execute(
            select(func.count()).select_from(equipment_tbl).where(equipment_tbl.c.is_available.is_(True))
        )
        return int(result.scalar_one())

    async def add(self, parameters_id: int, purchase_order_id: int) -> int:
        result = await self._session.execute(
            insert(equipment_tbl).values(
                parameters_id=parameters_id,
                is_available=True,
                is_producing=False,
                purchase_order_id=purchase_order_id
            )
        )
        return result.inserted_primary_key[0]

    async def initialize_parameters(
        self, input_sand_kg: int, input_copper_kg: int, output_screens_per_day: int, equipment_weight: int
    ) -> EquipmentParameters:
        """Keeps the first stored parameter set if one exists"""
        existing = await self.get_parameters()
        if existing:
            return existing
        result = await self._session.execute(
            insert(equipment_parameters_tbl).values(
                input_sand_kg=input_sand_kg,
                input_copper_kg=input_copper_kg,
                output_screens_day=output_screens_per_day,
                equipment_weight=equipment_weight
            )
        )
        return EquipmentParameters(
            id=result.inserted_primary_key[0],
            input_sand_kg=input_sand_kg,
            input_copper_kg=input_copper_kg,
            output_screens_per_day=output_screens_per_day,
            equipment_weight=equipment_weight
        )
