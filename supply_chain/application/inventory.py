from supply_chain.config import ReorderSettings
from supply_chain.domain.models import InventoryStatus, MaterialStatus, EquipmentStatus

SAND = "sand"
COPPER = "copper"


class GetInventoryStatusUseCase:
    """Current stock plus stock still incoming on active purchase orders"""

    def __init__(self, unit_of_work, reorder_settings: ReorderSettings):
        self._uow = unit_of_work
        self._settings = reorder_settings

    async def __call__(self) -> InventoryStatus:
        async with self._uow() as uow:
            sand = await uow.materials.get_by_name(SAND)
            copper = await uow.materials.get_by_name(COPPER)
            current_equipment = await uow.equipment.count_available()

            incoming_sand = await uow.purchase_orders.incoming_material_quantity(SAND)
            incoming_copper = await uow.purchase_orders.incoming_material_quantity(COPPER)
            incoming_equipment = await uow.purchase_orders.incoming_equipment_quantity()

        return InventoryStatus(
            sand=MaterialStatus(
                current=sand.quantity if sand else 0,
                incoming=incoming_sand,
                target=self._settings.sand.target,
                reorder_point=self._settings.sand.reorder_point
            ),
            copper=MaterialStatus(
                current=copper.quantity if copper else 0,
                incoming=incoming_copper,
                target=self._settings.copper.target,
                reorder_point=self._settings.copper.reorder_point
            ),
            equipment=EquipmentStatus(
                current=current_equipment,
                incoming=incoming_equipment,
                target=self._settings.equipment.target,
                reorder_point=self._settings.equipment.reorder_point
            )
        )
