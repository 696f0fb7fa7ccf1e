from typing import Callable, Dict

from supply_chain.domain.models import PurchaseOrder, OrderStatus
from supply_chain.application.interfaces import BankService, LogisticsService
from supply_chain.application.commands import (
    Command,
    NoOpCommand,
    ProcessSupplierPaymentCommand,
    ProcessShippingRequestCommand,
    ProcessLogisticsPaymentCommand
)


class CommandDispatchTable:
    """Maps a purchase order's status to the command that advances it.

    Built once with the collaborators the commands need; resolve() builds a
    fresh command per dispatch and never raises for an unknown status.
    """

    def __init__(
        self,
        unit_of_work,
        bank_service: BankService,
        logistics_service: LogisticsService,
        company_id: str,
        payer_bank_name: str
    ):
        self._uow = unit_of_work
        self._bank = bank_service
        self._logistics = logistics_service
        self._company_id = company_id
        self._payer_bank_name = payer_bank_name
        self._factories: Dict[OrderStatus, Callable[[PurchaseOrder], Command]] = {
            OrderStatus.REQUIRES_PAYMENT_TO_SUPPLIER: self._supplier_payment,
            OrderStatus.REQUIRES_DELIVERY: self._shipping_request,
            OrderStatus.REQUIRES_PAYMENT_TO_LOGISTICS: self._logistics_payment,
        }

    def resolve(self, purchase_order: PurchaseOrder) -> Command:
        status = OrderStatus.parse(purchase_order.status)
        factory = self._factories.get(status) if status else None
        if factory is None:
            return NoOpCommand(purchase_order.status)
        return factory(purchase_order)

    def _supplier_payment(self, purchase_order: PurchaseOrder) -> Command:
        return ProcessSupplierPaymentCommand(purchase_order, self._uow, self._bank, self._payer_bank_name)

    def _shipping_request(self, purchase_order: PurchaseOrder) -> Command:
        return ProcessShippingRequestCommand(purchase_order, self._uow, self._logistics, self._company_id)

    def _logistics_payment(self, purchase_order: PurchaseOrder) -> Command:
        return ProcessLogisticsPaymentCommand(purchase_order, self._uow, self._bank, self._payer_bank_name)
