from pydantic import BaseModel, Field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class LogisticsType(str, Enum):
    DELIVERY = "DELIVERY"
    PICKUP = "PICKUP"


class LogisticsItem(BaseModel):
    name: str
    quantity: int
    measurement_type: Optional[str] = None


class LogisticsRequest(BaseModel):
    """Drop-off / collection notification from the logistics company"""
    id: int | str
    type: str
    items: List[LogisticsItem] = Field(min_length=1)


class DeliveryResponse(BaseModel):
    purchase_order_id: int
    shipment_id: str
    quantity_received: int
    quantity_delivered: int
    quantity: int
    status: str
    equipment_id: Optional[int] = None

    @classmethod
    def from_domain(cls, receipt):
        return cls(**receipt.model_dump())


class PurchaseOrderResponse(BaseModel):
    id: int
    order_id: str
    shipment_id: Optional[str] = None
    quantity: int
    quantity_delivered: int
    order_date: datetime
    unit_price: int
    total_price: int
    seller_bank_account: str
    origin: str
    shipping_price: int
    shipper_bank_account: Optional[str] = None
    status: str
    raw_material_name: Optional[str] = None
    equipment_order: bool

    @classmethod
    def from_domain(cls, order):
        return cls(
            id=order.id,
            order_id=order.order_id,
            shipment_id=order.shipment_id,
            quantity=order.quantity,
            quantity_delivered=order.quantity_delivered,
            order_date=order.order_date,
            unit_price=order.unit_price,
            total_price=order.total_price,
            seller_bank_account=order.seller_bank_account,
            origin=order.origin,
            shipping_price=order.shipping_price,
            shipper_bank_account=order.shipper_bank_account,
            status=order.status,
            raw_material_name=order.raw_material_name,
            equipment_order=order.equipment_order
        )


class ResourceStatusResponse(BaseModel):
    current: int
    incoming: int
    total: int
    target: int
    reorder_point: int
    needs_reorder: bool

    @classmethod
    def from_domain(cls, status):
        return cls(
            current=status.current,
            incoming=status.incoming,
            total=status.total,
            target=status.target,
            reorder_point=status.reorder_point,
            needs_reorder=status.needs_reorder
        )


class InventoryResponse(BaseModel):
    sand: ResourceStatusResponse
    copper: ResourceStatusResponse
    equipment: ResourceStatusResponse

    @classmethod
    def from_domain(cls, inventory):
        return cls(
            sand=ResourceStatusResponse.from_domain(inventory.sand),
            copper=ResourceStatusResponse.from_domain(inventory.copper),
            equipment=ResourceStatusResponse.from_domain(inventory.equipment)
        )


class QueueStatusResponse(BaseModel):
    queue_count: int
    failed_count: int
    processing: bool
    timestamp: datetime


class QueueProcessResponse(BaseModel):
    success: bool
    queue_count_before: int
    queue_count_after: int
    processed: int
    succeeded: int
    retried: int
    abandoned: int
    processed_at: datetime


class ErrorResponse(BaseModel):
    detail: str
