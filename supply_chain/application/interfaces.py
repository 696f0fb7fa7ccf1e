from abc import ABC, abstractmethod
from typing import Optional, List
from supply_chain.domain.models import (
    PurchaseOrder, NewPurchaseOrder, Material, EquipmentParameters, PickupItem, PickupResult
)


class PurchaseOrderRepository(ABC):
    @abstractmethod
    async def get_by_id(self, purchase_order_id: int) -> Optional[PurchaseOrder]:
        pass

    @abstractmethod
    async def get_by_shipment_id(self, shipment_id: str) -> Optional[PurchaseOrder]:
        pass

    @abstractmethod
    async def create(self, order: NewPurchaseOrder) -> PurchaseOrder:
        pass

    @abstractmethod
    async def list_all(self, limit: int = 100) -> List[PurchaseOrder]:
        pass

    @abstractmethod
    async def list_active(self) -> List[PurchaseOrder]:
        pass

    @abstractmethod
    async def update_status(self, purchase_order_id: int, status_name: str) -> bool:
        pass

    @abstractmethod
    async def update_shipment_id(self, purchase_order_id: int, shipment_id: str) -> bool:
        pass

    @abstractmethod
    async def update_shipping_details(self, purchase_order_id: int, bank_account: str, price: int) -> bool:
        pass

    @abstractmethod
    async def add_delivered_quantity(self, purchase_order_id: int, quantity: int) -> bool:
        pass

    @abstractmethod
    async def incoming_material_quantity(self, material_name: str) -> int:
        pass

    @abstractmethod
    async def incoming_equipment_quantity(self) -> int:
        pass


class MaterialRepository(ABC):
    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[Material]:
        pass

    @abstractmethod
    async def get_or_create(self, name: str) -> Material:
        pass

    @abstractmethod
    async def add_quantity(self, name: str, quantity: int) -> Material:
        pass


class EquipmentRepository(ABC):
    @abstractmethod
    async def get_parameters(self) -> Optional[EquipmentParameters]:
        pass

    @abstractmethod
    async def count_available(self) -> int:
        pass

    @abstractmethod
    async def add(self, parameters_id: int, purchase_order_id: int) -> int:
        pass

    @abstractmethod
    async def initialize_parameters(
        self, input_sand_kg: int, input_copper_kg: int, output_screens_per_day: int, equipment_weight: int
    ) -> EquipmentParameters:
        pass


class UnitOfWork(ABC):
    @property
    @abstractmethod
    def purchase_orders(self) -> PurchaseOrderRepository:
        pass

    @property
    @abstractmethod
    def materials(self) -> MaterialRepository:
        pass

    @property
    @abstractmethod
    def equipment(self) -> EquipmentRepository:
        pass

    @abstractmethod
    async def __call__(self):
        pass

    @abstractmethod
    async def commit(self):
        pass

    @abstractmethod
    async def rollback(self):
        pass


class BankService(ABC):
    @abstractmethod
    async def make_payment(self, to_account: str, to_bank_name: str, amount: int, description: str) -> bool:
        pass

    @abstractmethod
    async def get_balance(self) -> int:
        pass

    @abstractmethod
    async def has_sufficient_balance(self, amount: int) -> bool:
        pass


class LogisticsService(ABC):
    @abstractmethod
    async def request_pickup(
        self,
        origin_company: str,
        destination_company: str,
        external_order_id: str,
        items: List[PickupItem]
    ) -> PickupResult:
        pass
