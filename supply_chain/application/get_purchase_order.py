from typing import List

from supply_chain.domain.models import PurchaseOrder
from supply_chain.domain.exceptions import PurchaseOrderNotFoundError


class GetPurchaseOrderUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, purchase_order_id: int) -> PurchaseOrder:
        async with self._uow() as uow:
            order = await uow.purchase_orders.get_by_id(purchase_order_id)
            if not order:
                raise PurchaseOrderNotFoundError(f"Purchase order {purchase_order_id} not found")
            return order


class ListPurchaseOrdersUseCase:
    def __init__(self, unit_of_work):
        self._uow = unit_of_work

    async def __call__(self, active_only: bool = False, limit: int = 100) -> List[PurchaseOrder]:
        async with self._uow() as uow:
            if active_only:
                return await uow.purchase_orders.list_active()
            return await uow.purchase_orders.list_all(limit=limit)
