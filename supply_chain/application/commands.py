"""
Queue commands.

Each command is bound to one purchase order and performs exactly one
side-effecting step (a payment or a pickup request), then moves the order to
its next status. While a command runs the order keeps its current status, so
a failed command can be executed again on the next queue pass.
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Optional
from pydantic import BaseModel

from supply_chain.domain.models import PurchaseOrder, OrderStatus, PickupItem
from supply_chain.application.interfaces import BankService, LogisticsService

logger = logging.getLogger(__name__)

EQUIPMENT_ITEM_NAME = "screen_machine"


class CommandResult(BaseModel):
    success: bool
    error_message: Optional[str] = None
    should_retry: bool = False

    @classmethod
    def succeeded(cls) -> "CommandResult":
        return cls(success=True)

    @classmethod
    def failed(cls, error_message: str, should_retry: bool = True) -> "CommandResult":
        return cls(success=False, error_message=error_message, should_retry=should_retry)

    @classmethod
    def failed_no_retry(cls, error_message: str) -> "CommandResult":
        return cls(success=False, error_message=error_message, should_retry=False)


class Command(ABC):
    # Status the order is moved to when execute() succeeds
    next_status: Optional[OrderStatus] = None

    @abstractmethod
    async def execute(self) -> CommandResult:
        pass


class NoOpCommand(Command):
    """Terminal statuses and statuses this pipeline does not drive"""

    def __init__(self, status: str):
        self.status = status

    async def execute(self) -> CommandResult:
        return CommandResult.succeeded()


class ProcessSupplierPaymentCommand(Command):
    next_status = OrderStatus.REQUIRES_DELIVERY

    def __init__(self, purchase_order: PurchaseOrder, unit_of_work, bank_service: BankService, payer_bank_name: str):
        self._order = purchase_order
        self._uow = unit_of_work
        self._bank = bank_service
        self._payer_bank_name = payer_bank_name

    async def execute(self) -> CommandResult:
        order = self._order
        try:
            logger.info(f"Processing supplier payment for purchase order {order.id}")
            total_amount = order.total_price

            payment_success = await self._bank.make_payment(
                order.seller_bank_account,
                self._payer_bank_name,
                total_amount,
                order.order_id
            )
            if not payment_success:
                logger.warning(f"Supplier payment failed for purchase order {order.id}")
                return CommandResult.failed("Supplier payment failed")

            async with self._uow() as uow:
                updated = await uow.purchase_orders.update_status(order.id, self.next_status.value)
                if not updated:
                    return CommandResult.failed_no_retry(f"Purchase order {order.id} not found after supplier payment")
                await uow.commit()

            logger.info(f"Supplier payment successful for purchase order {order.id}, amount {total_amount}")
            return CommandResult.succeeded()

        except Exception as e:
            logger.error(f"Error processing supplier payment for purchase order {order.id}: {e}")
            return CommandResult.failed(str(e))


class ProcessShippingRequestCommand(Command):
    next_status = OrderStatus.REQUIRES_PAYMENT_TO_LOGISTICS

    def __init__(
        self,
        purchase_order: PurchaseOrder,
        unit_of_work,
        logistics_service: LogisticsService,
        company_id: str
    ):
        self._order = purchase_order
        self._uow = unit_of_work
        self._logistics = logistics_service
        self._company_id = company_id

    async def execute(self) -> CommandResult:
        order = self._order
        try:
            logger.info(f"Processing shipping request for purchase order {order.id}")

            pickup_items = await self._create_pickup_items()
            if pickup_items is None:
                return CommandResult.failed_no_retry("Invalid purchase order configuration")

            pickup = await self._logistics.request_pickup(
                order.origin,
                self._company_id,
                order.order_id,
                pickup_items
            )

            # Shipment id, shipping details and status commit together
            async with self._uow() as uow:
                repo = uow.purchase_orders
                if not await repo.update_shipment_id(order.id, pickup.shipment_id):
                    return CommandResult.failed_no_retry(f"Purchase order {order.id} not found after pickup request")
                await repo.update_shipping_details(order.id, pickup.bank_account, pickup.cost)
                await repo.update_status(order.id, self.next_status.value)
                await uow.commit()

            logger.info(
                f"Shipping request successful for purchase order {order.id}, "
                f"pickup request {pickup.shipment_id}, cost {pickup.cost}"
            )
            return CommandResult.succeeded()

        except Exception as e:
            logger.error(f"Error processing shipping request for purchase order {order.id}: {e}")
            return CommandResult.failed(str(e))

    async def _create_pickup_items(self) -> Optional[List[PickupItem]]:
        async with self._uow() as uow:
            equipment_params = await uow.equipment.get_parameters()
        if equipment_params is None:
            logger.error("Failed to get equipment parameters for shipping request")
            return None

        order = self._order
        if not order.has_valid_classification():
            logger.error(f"Purchase order {order.id} is neither a material nor an equipment order")
            return None

        if order.is_equipment_order():
            return create_pickup_items(EQUIPMENT_ITEM_NAME, equipment_params.equipment_weight, is_equipment=True)
        if not order.raw_material_name:
            logger.error(f"Purchase order {order.id} references a missing raw material")
            return None
        return create_pickup_items(order.raw_material_name, order.quantity, is_equipment=False)


class ProcessLogisticsPaymentCommand(Command):
    next_status = OrderStatus.WAITING_FOR_DELIVERY

    def __init__(self, purchase_order: PurchaseOrder, unit_of_work, bank_service: BankService, payer_bank_name: str):
        self._order = purchase_order
        self._uow = unit_of_work
        self._bank = bank_service
        self._payer_bank_name = payer_bank_name

    async def execute(self) -> CommandResult:
        order = self._order
        try:
            logger.info(f"Processing logistics payment for purchase order {order.id}")
            if order.shipment_id is None or order.shipper_bank_account is None:
                return CommandResult.failed_no_retry(f"Purchase order {order.id} has no shipment to pay for")

            payment_success = await self._bank.make_payment(
                order.shipper_bank_account,
                self._payer_bank_name,
                order.shipping_price,
                order.shipment_id
            )
            if not payment_success:
                logger.warning(f"Logistics payment failed for purchase order {order.id}")
                return CommandResult.failed("Logistics payment failed")

            async with self._uow() as uow:
                updated = await uow.purchase_orders.update_status(order.id, self.next_status.value)
                if not updated:
                    return CommandResult.failed_no_retry(f"Purchase order {order.id} not found after logistics payment")
                await uow.commit()

            logger.info(f"Logistics payment successful for purchase order {order.id}, amount {order.shipping_price}")
            return CommandResult.succeeded()

        except Exception as e:
            logger.error(f"Error processing logistics payment for purchase order {order.id}: {e}")
            return CommandResult.failed(str(e))


def create_pickup_items(item_name: str, quantity: int, is_equipment: bool = False) -> List[PickupItem]:
    return [
        PickupItem(
            name=item_name.lower(),
            quantity=quantity if quantity > 0 else 1,
            measurement_type="UNIT" if is_equipment else "KG"
        )
    ]
