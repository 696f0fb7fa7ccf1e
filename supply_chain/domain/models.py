from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


class OrderStatus(str, Enum):
    # Purchase order lifecycle
    REQUIRES_PAYMENT_TO_SUPPLIER = "requires_payment_supplier"
    REQUIRES_DELIVERY = "requires_delivery"
    REQUIRES_PAYMENT_TO_LOGISTICS = "requires_payment_delivery"
    WAITING_FOR_DELIVERY = "waiting_delivery"
    DELIVERED = "delivered"
    ABANDONED = "abandoned"
    # Screen order lifecycle, shares the status table
    WAITING_FOR_COLLECTION = "waiting_collection"
    WAITING_FOR_PAYMENT = "waiting_payment"
    COLLECTED = "collected"

    @classmethod
    def parse(cls, value: str) -> Optional["OrderStatus"]:
        """Returns None for status names this service does not know"""
        try:
            return cls(value)
        except ValueError:
            return None


ACTIONABLE_STATUSES = (
    OrderStatus.REQUIRES_PAYMENT_TO_SUPPLIER,
    OrderStatus.REQUIRES_DELIVERY,
    OrderStatus.REQUIRES_PAYMENT_TO_LOGISTICS,
)

# Orders still "on order": counted as incoming stock and reloaded on startup
ACTIVE_STATUSES = ACTIONABLE_STATUSES + (OrderStatus.WAITING_FOR_DELIVERY,)

TERMINAL_STATUSES = (OrderStatus.DELIVERED, OrderStatus.ABANDONED)


class PurchaseOrder(BaseModel):
    """Domain Entity — purchase of raw material or equipment"""
    id: int
    order_id: str
    shipment_id: str | None = None
    quantity: int
    quantity_delivered: int = 0
    order_date: datetime
    unit_price: int
    seller_bank_account: str
    origin: str
    shipping_price: int = 0
    shipper_bank_account: str | None = None
    # Plain string so unknown status names still load
    status: str
    raw_material_id: int | None = None
    raw_material_name: str | None = None
    equipment_order: bool = False

    @property
    def total_price(self) -> int:
        return self.quantity * self.unit_price

    @property
    def remaining_quantity(self) -> int:
        return self.quantity - self.quantity_delivered

    def is_equipment_order(self) -> bool:
        return self.equipment_order and self.raw_material_id is None

    def is_material_order(self) -> bool:
        return not self.equipment_order and self.raw_material_id is not None

    def has_valid_classification(self) -> bool:
        """Business rule: exactly one of material / equipment is set"""
        return self.is_equipment_order() != self.is_material_order()


class NewPurchaseOrder(BaseModel):
    """Value Object — data needed to create a purchase order"""
    order_id: str
    quantity: int = Field(gt=0)
    unit_price: int
    seller_bank_account: str
    origin: str
    raw_material_id: int | None = None
    equipment_order: bool = False
    order_date: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Material(BaseModel):
    id: int
    name: str
    quantity: int


class EquipmentParameters(BaseModel):
    id: int
    input_sand_kg: int
    input_copper_kg: int
    output_screens_per_day: int
    equipment_weight: int


class PickupItem(BaseModel):
    """Value Object — one line of a pickup request"""
    name: str
    quantity: int
    measurement_type: str


class PickupResult(BaseModel):
    shipment_id: str
    bank_account: str
    cost: int


class QueueItem(BaseModel):
    """Transient queue entry, never persisted"""
    purchase_order_id: int
    retry_count: int = 0
    last_processed: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_error: str = ""


class ResourceStatus(BaseModel):
    current: int
    incoming: int
    target: int
    reorder_point: int

    @property
    def total(self) -> int:
        return self.current + self.incoming

    @property
    def needs_reorder(self) -> bool:
        return self.total <= self.reorder_point


class MaterialStatus(ResourceStatus):
    pass


class EquipmentStatus(ResourceStatus):
    pass


class InventoryStatus(BaseModel):
    sand: MaterialStatus
    copper: MaterialStatus
    equipment: EquipmentStatus
