import logging
import uuid
from typing import Optional
from pydantic import BaseModel

from supply_chain.config import ReorderSettings, TargetQuantity
from supply_chain.domain.models import NewPurchaseOrder, PurchaseOrder, ResourceStatus
from supply_chain.application.interfaces import BankService
from supply_chain.application.inventory import GetInventoryStatusUseCase, SAND, COPPER
from supply_chain.application.purchase_order_queue import PurchaseOrderQueue

logger = logging.getLogger(__name__)

EQUIPMENT = "equipment"


class ReorderResult(BaseModel):
    auto_reorder_enabled: bool
    sand_order_created: bool = False
    copper_order_created: bool = False
    equipment_order_created: bool = False
    sand_order_id: Optional[int] = None
    copper_order_id: Optional[int] = None
    equipment_order_id: Optional[int] = None


class ReorderMonitor:
    """Creates purchase orders for resources at or below their reorder point.

    Supplier terms (origin, bank account, unit price) come from configuration
    until a real supplier-selection integration exists.
    """

    def __init__(
        self,
        unit_of_work,
        queue: PurchaseOrderQueue,
        bank_service: BankService,
        reorder_settings: ReorderSettings
    ):
        self._uow = unit_of_work
        self._queue = queue
        self._bank = bank_service
        self._settings = reorder_settings
        self._inventory = GetInventoryStatusUseCase(unit_of_work, reorder_settings)

    async def check_and_reorder(self) -> ReorderResult:
        if not self._settings.enable_auto_reorder:
            return ReorderResult(auto_reorder_enabled=False)

        status = await self._inventory()
        result = ReorderResult(auto_reorder_enabled=True)

        for resource, resource_status, terms in (
            (SAND, status.sand, self._settings.sand),
            (COPPER, status.copper, self._settings.copper),
            (EQUIPMENT, status.equipment, self._settings.equipment),
        ):
            if not resource_status.needs_reorder:
                continue
            order = await self._reorder(resource, resource_status, terms)
            if order:
                setattr(result, f"{resource}_order_created", True)
                setattr(result, f"{resource}_order_id", order.id)

        return result

    async def _reorder(self, resource: str, resource_status: ResourceStatus, terms: TargetQuantity) -> Optional[PurchaseOrder]:
        logger.info(
            f"{resource} at {resource_status.total} (current {resource_status.current}, incoming "
            f"{resource_status.incoming}) is at or below reorder point {resource_status.reorder_point}"
        )
        try:
            total_cost = terms.order_quantity * terms.unit_price
            if self._settings.check_balance and not await self._bank.has_sufficient_balance(total_cost):
                logger.warning(f"Insufficient funds for {resource} reorder, cost {total_cost}")
                return None

            async with self._uow() as uow:
                raw_material_id = None
                if resource != EQUIPMENT:
                    material = await uow.materials.get_or_create(resource)
                    raw_material_id = material.id

                purchase_order = await uow.purchase_orders.create(
                    NewPurchaseOrder(
                        order_id=f"{resource}-{uuid.uuid4().hex[:12]}",
                        quantity=terms.order_quantity,
                        unit_price=terms.unit_price,
                        seller_bank_account=self._settings.supplier_bank_account,
                        origin=self._settings.supplier_origin,
                        raw_material_id=raw_material_id,
                        equipment_order=resource == EQUIPMENT
                    )
                )
                await uow.commit()

        except Exception as e:
            logger.error(f"Failed to create {resource} reorder: {e}")
            return None

        self._queue.enqueue(purchase_order.id)
        logger.info(f"{resource} order created: {purchase_order.id}, quantity {purchase_order.quantity}")
        return purchase_order
