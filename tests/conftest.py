"""
Pytest configuration and shared fixtures for the supply chain test suite.
"""
from typing import List, Optional

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from supply_chain.config import QueueSettings, ReorderSettings, TargetQuantity
from supply_chain.database import make_session_factory, create_schema, seed_statuses
from supply_chain.domain.models import NewPurchaseOrder, PickupItem, PickupResult, PurchaseOrder
from supply_chain.domain.exceptions import BankServiceError, LogisticsServiceError
from supply_chain.application.interfaces import BankService, LogisticsService
from supply_chain.application.dispatch import CommandDispatchTable
from supply_chain.application.purchase_order_queue import PurchaseOrderQueue
from supply_chain.infrastructure.unit_of_work import UnitOfWork

COMPANY_ID = "screen-supplier"
PAYER_BANK_NAME = "commercial-bank"


class FakeBankService(BankService):
    """In-memory bank recording every payment it is asked to make."""

    def __init__(self, balance: int = 1_000_000, safety_balance: int = 2000):
        self.balance = balance
        self.safety_balance = safety_balance
        self.payments: List[dict] = []
        self.succeed = True
        self.error: Optional[Exception] = None

    async def make_payment(self, to_account: str, to_bank_name: str, amount: int, description: str) -> bool:
        if self.error:
            raise self.error
        self.payments.append({
            "to_account": to_account,
            "to_bank_name": to_bank_name,
            "amount": amount,
            "description": description
        })
        if self.succeed:
            self.balance -= amount
        return self.succeed

    async def get_balance(self) -> int:
        if self.error:
            raise self.error
        return self.balance

    async def has_sufficient_balance(self, amount: int) -> bool:
        return await self.get_balance() - self.safety_balance >= amount


class FakeLogisticsService(LogisticsService):
    """In-memory logistics company handing out sequential pickup request ids."""

    def __init__(self, cost: int = 250, bank_account: str = "LOGISTICS-ACC"):
        self.cost = cost
        self.bank_account = bank_account
        self.requests: List[dict] = []
        self.error: Optional[Exception] = None
        self._next_id = 1000

    async def request_pickup(
        self,
        origin_company: str,
        destination_company: str,
        external_order_id: str,
        items: List[PickupItem]
    ) -> PickupResult:
        if self.error:
            raise self.error
        self.requests.append({
            "origin_company": origin_company,
            "destination_company": destination_company,
            "external_order_id": external_order_id,
            "items": items
        })
        self._next_id += 1
        return PickupResult(shipment_id=str(self._next_id), bank_account=self.bank_account, cost=self.cost)


@pytest.fixture
async def engine():
    """In-memory SQLite database shared by every session of one test."""
    db_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    await create_schema(db_engine)
    yield db_engine
    await db_engine.dispose()


@pytest.fixture
async def unit_of_work(engine) -> UnitOfWork:
    """Unit of work over a seeded database with one equipment parameter set."""
    session_factory = make_session_factory(engine)
    await seed_statuses(session_factory)
    uow_factory = UnitOfWork(session_factory)
    async with uow_factory() as uow:
        await uow.equipment.initialize_parameters(10, 5, 100, 1000)
        await uow.commit()
    return uow_factory


@pytest.fixture
def bank() -> FakeBankService:
    return FakeBankService()


@pytest.fixture
def logistics() -> FakeLogisticsService:
    return FakeLogisticsService()


@pytest.fixture
def queue_settings() -> QueueSettings:
    """Queue settings where a successful step does not re-enqueue the order."""
    return QueueSettings(
        processing_interval_seconds=0.05,
        max_retries=3,
        enable_processing=False,
        requeue_on_success=False,
        command_timeout_seconds=2,
        shutdown_grace_seconds=1
    )


@pytest.fixture
def reorder_settings() -> ReorderSettings:
    return ReorderSettings(
        enable_auto_reorder=True,
        run_on_tick=False,
        check_balance=True,
        sand=TargetQuantity(target=1000, reorder_point=150, order_quantity=500, unit_price=5),
        copper=TargetQuantity(target=1000, reorder_point=150, order_quantity=500, unit_price=8),
        equipment=TargetQuantity(target=2, reorder_point=0, order_quantity=1, unit_price=5000)
    )


@pytest.fixture
def dispatch_table(unit_of_work, bank, logistics) -> CommandDispatchTable:
    return CommandDispatchTable(unit_of_work, bank, logistics, COMPANY_ID, PAYER_BANK_NAME)


@pytest.fixture
def queue(unit_of_work, dispatch_table, queue_settings) -> PurchaseOrderQueue:
    return PurchaseOrderQueue(unit_of_work, dispatch_table, queue_settings)


@pytest.fixture
def order_factory(unit_of_work):
    """Create a purchase order in the given status.

    Pass shipment fields to simulate an order that already went through the
    shipping request step.
    """

    async def _create(
        material: Optional[str] = "sand",
        quantity: int = 100,
        unit_price: int = 5,
        status: Optional[str] = None,
        shipment_id: Optional[str] = None,
        shipper_bank_account: Optional[str] = None,
        shipping_price: int = 0,
        equipment: bool = False,
        order_id: str = "ext-1"
    ) -> PurchaseOrder:
        async with unit_of_work() as uow:
            raw_material_id = None
            if material and not equipment:
                raw_material_id = (await uow.materials.get_or_create(material)).id
            order = await uow.purchase_orders.create(
                NewPurchaseOrder(
                    order_id=order_id,
                    quantity=quantity,
                    unit_price=unit_price,
                    seller_bank_account="SUPPLIER-ACC",
                    origin="thoh",
                    raw_material_id=raw_material_id,
                    equipment_order=equipment
                )
            )
            if shipment_id:
                await uow.purchase_orders.update_shipment_id(order.id, shipment_id)
            if shipper_bank_account:
                await uow.purchase_orders.update_shipping_details(order.id, shipper_bank_account, shipping_price)
            if status:
                await uow.purchase_orders.update_status(order.id, status)
            await uow.commit()
            return await uow.purchase_orders.get_by_id(order.id)

    return _create


@pytest.fixture
def get_order(unit_of_work):
    async def _get(purchase_order_id: int) -> Optional[PurchaseOrder]:
        async with unit_of_work() as uow:
            return await uow.purchase_orders.get_by_id(purchase_order_id)

    return _get


@pytest.fixture
def bank_error() -> BankServiceError:
    return BankServiceError("Bank service unavailable")


@pytest.fixture
def logistics_error() -> LogisticsServiceError:
    return LogisticsServiceError("Logistics service unavailable")


# Configure pytest markers
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "api: API tests")
