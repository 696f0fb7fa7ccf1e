import logging
from datetime import datetime, timezone
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request, status

from supply_chain.presentation.schemas import (
    LogisticsRequest, LogisticsType, DeliveryResponse, PurchaseOrderResponse, InventoryResponse,
    QueueStatusResponse, QueueProcessResponse, ErrorResponse
)
from supply_chain.application.purchase_order_queue import PurchaseOrderQueue
from supply_chain.application.receive_delivery import ReceiveDeliveryUseCase
from supply_chain.application.get_purchase_order import GetPurchaseOrderUseCase, ListPurchaseOrdersUseCase
from supply_chain.application.inventory import GetInventoryStatusUseCase
from supply_chain.application.reorder import ReorderMonitor, ReorderResult
from supply_chain.domain.exceptions import (
    PurchaseOrderNotFoundError, InvalidOrderStateError, InvalidDeliveryError, ConfigurationError
)

logger = logging.getLogger(__name__)

router = APIRouter()


# Factories over the objects built in the application lifespan
def get_queue(request: Request) -> PurchaseOrderQueue:
    return request.app.state.queue


def get_reorder_monitor(request: Request) -> ReorderMonitor:
    return request.app.state.reorder_monitor


def get_receive_delivery_use_case(request: Request):
    return ReceiveDeliveryUseCase(request.app.state.unit_of_work)


def get_get_purchase_order_use_case(request: Request):
    return GetPurchaseOrderUseCase(request.app.state.unit_of_work)


def get_list_purchase_orders_use_case(request: Request):
    return ListPurchaseOrdersUseCase(request.app.state.unit_of_work)


def get_inventory_use_case(request: Request):
    return GetInventoryStatusUseCase(request.app.state.unit_of_work, request.app.state.reorder_settings)


@router.get("/queue", response_model=QueueStatusResponse)
async def get_queue_status(queue: PurchaseOrderQueue = Depends(get_queue)):
    """Number of purchase orders waiting for their next step"""
    return QueueStatusResponse(
        queue_count=queue.count(),
        failed_count=len(queue.failed_items()),
        processing=queue.is_processing,
        timestamp=datetime.now(timezone.utc)
    )


@router.post(
    "/queue",
    response_model=QueueProcessResponse,
    responses={500: {"model": ErrorResponse}}
)
async def process_queue(queue: PurchaseOrderQueue = Depends(get_queue)):
    """Run one queue pass now, alongside the background loop"""
    count_before = queue.count()
    try:
        summary = await queue.process_all()
    except Exception as e:
        logger.error(f"Manual queue processing failed: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail=f"Queue processing failed: {str(e)}")

    return QueueProcessResponse(
        success=True,
        queue_count_before=count_before,
        queue_count_after=queue.count(),
        processed=summary.processed,
        succeeded=summary.succeeded,
        retried=summary.retried,
        abandoned=summary.abandoned,
        processed_at=datetime.now(timezone.utc)
    )


@router.post(
    "/logistics",
    response_model=DeliveryResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
async def handle_logistics(
    request: LogisticsRequest,
    use_case: ReceiveDeliveryUseCase = Depends(get_receive_delivery_use_case)
):
    """Logistics notifications: deliveries of purchased goods"""
    logistics_type = request.type.strip().upper()
    if logistics_type == LogisticsType.PICKUP.value:
        raise HTTPException(status_code=400, detail="Pickups of screen orders are not handled by this service")
    if logistics_type != LogisticsType.DELIVERY.value:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown logistics type: {request.type}. Must be 'DELIVERY' or 'PICKUP'"
        )

    try:
        receipt = await use_case(str(request.id), request.items[0].quantity)
        return DeliveryResponse.from_domain(receipt)

    except PurchaseOrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (InvalidOrderStateError, InvalidDeliveryError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/purchase-orders", response_model=List[PurchaseOrderResponse])
async def list_purchase_orders(
    active: bool = False,
    use_case: ListPurchaseOrdersUseCase = Depends(get_list_purchase_orders_use_case)
):
    orders = await use_case(active_only=active)
    return [PurchaseOrderResponse.from_domain(order) for order in orders]


@router.get(
    "/purchase-orders/{purchase_order_id}",
    response_model=PurchaseOrderResponse,
    responses={404: {"model": ErrorResponse}}
)
async def get_purchase_order(
    purchase_order_id: int,
    use_case: GetPurchaseOrderUseCase = Depends(get_get_purchase_order_use_case)
):
    try:
        order = await use_case(purchase_order_id)
        return PurchaseOrderResponse.from_domain(order)
    except PurchaseOrderNotFoundError:
        raise HTTPException(status_code=404, detail="Purchase order not found")


@router.get("/inventory", response_model=InventoryResponse)
async def get_inventory(use_case: GetInventoryStatusUseCase = Depends(get_inventory_use_case)):
    """Stock on hand and on order for sand, copper and equipment"""
    inventory = await use_case()
    return InventoryResponse.from_domain(inventory)


@router.post("/reorder", response_model=ReorderResult, status_code=status.HTTP_200_OK)
async def run_reorder(monitor: ReorderMonitor = Depends(get_reorder_monitor)):
    """Run the reorder check once"""
    return await monitor.check_and_reorder()
