import logging
from typing import Optional
from pydantic import BaseModel

from supply_chain.domain.models import OrderStatus
from supply_chain.domain.exceptions import (
    PurchaseOrderNotFoundError, InvalidOrderStateError, InvalidDeliveryError, ConfigurationError
)

logger = logging.getLogger(__name__)


class DeliveryReceipt(BaseModel):
    purchase_order_id: int
    shipment_id: str
    quantity_received: int
    quantity_delivered: int
    quantity: int
    status: str
    equipment_id: Optional[int] = None


class ReceiveDeliveryUseCase:
    """Books a logistics drop-off against the purchase order it ships.

    Stock, delivered quantity and status change in one transaction.
    """

    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, shipment_id: str, quantity: int) -> DeliveryReceipt:
        logger.info(f"Receiving delivery for shipment {shipment_id}, quantity {quantity}")

        async with self._uow() as uow:
            order = await uow.purchase_orders.get_by_shipment_id(shipment_id)
            if not order:
                raise PurchaseOrderNotFoundError(f"No purchase order for shipment {shipment_id}")

            if order.status != OrderStatus.WAITING_FOR_DELIVERY.value:
                raise InvalidOrderStateError(order.id, order.status, OrderStatus.WAITING_FOR_DELIVERY.value)

            # One machine per drop-off
            if order.is_equipment_order():
                quantity = 1

            if quantity <= 0 or quantity > order.remaining_quantity:
                raise InvalidDeliveryError(
                    f"Cannot receive {quantity} for purchase order {order.id}, "
                    f"{order.remaining_quantity} remaining"
                )

            equipment_id = None
            if order.is_equipment_order():
                parameters = await uow.equipment.get_parameters()
                if parameters is None:
                    raise ConfigurationError("Equipment parameters are not configured")
                equipment_id = await uow.equipment.add(parameters.id, order.id)
            elif order.raw_material_name:
                await uow.materials.add_quantity(order.raw_material_name, quantity)
            else:
                raise InvalidDeliveryError(f"Purchase order {order.id} has no material or equipment to receive")

            if not await uow.purchase_orders.add_delivered_quantity(order.id, quantity):
                raise InvalidDeliveryError(f"Delivered quantity rejected for purchase order {order.id}")
            await uow.commit()

        delivered = order.quantity_delivered + quantity
        status = OrderStatus.DELIVERED.value if delivered >= order.quantity else order.status
        logger.info(f"Delivery received for purchase order {order.id}: {delivered}/{order.quantity}, status {status}")

        return DeliveryReceipt(
            purchase_order_id=order.id,
            shipment_id=shipment_id,
            quantity_received=quantity,
            quantity_delivered=delivered,
            quantity=order.quantity,
            status=status,
            equipment_id=equipment_id
        )
