import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from supply_chain.config import settings, QueueSettings, ReorderSettings, EquipmentParameterSettings
from supply_chain.database import engine as default_engine, make_session_factory, create_schema, seed_statuses
from supply_chain.application.interfaces import BankService, LogisticsService
from supply_chain.application.dispatch import CommandDispatchTable
from supply_chain.application.purchase_order_queue import PurchaseOrderQueue
from supply_chain.application.reorder import ReorderMonitor
from supply_chain.infrastructure.unit_of_work import UnitOfWork
from supply_chain.infrastructure.http_clients import HTTPBankClient, HTTPLogisticsClient
from supply_chain.presentation.api import router
from supply_chain.presentation.dispatch_worker import DispatchLoop

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


async def _initialize_equipment_parameters(unit_of_work: UnitOfWork, parameters: EquipmentParameterSettings) -> None:
    async with unit_of_work() as uow:
        await uow.equipment.initialize_parameters(
            parameters.input_sand_kg,
            parameters.input_copper_kg,
            parameters.output_screens_per_day,
            parameters.equipment_weight
        )
        await uow.commit()


def create_app(
    db_engine: Optional[AsyncEngine] = None,
    bank_service: Optional[BankService] = None,
    logistics_service: Optional[LogisticsService] = None,
    queue_settings: Optional[QueueSettings] = None,
    reorder_settings: Optional[ReorderSettings] = None
) -> FastAPI:
    db_engine = db_engine or default_engine
    queue_settings = queue_settings or settings.queue
    reorder_settings = reorder_settings or settings.reorder
    queue_settings.check_timeouts()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifecycle"""
        # 1. Schema and reference data
        session_factory = make_session_factory(db_engine)
        await create_schema(db_engine)
        await seed_statuses(session_factory)
        unit_of_work = UnitOfWork(session_factory)
        await _initialize_equipment_parameters(unit_of_work, settings.equipment_parameters)
        logger.info("Database ready")

        # 2. Collaborators, queue and reorder monitor
        bank = bank_service or HTTPBankClient(
            settings.BANK_BASE_URL,
            timeout=queue_settings.collaborator_timeout_seconds,
            safety_balance=settings.BANK_SAFETY_BALANCE
        )
        logistics = logistics_service or HTTPLogisticsClient(
            settings.LOGISTICS_BASE_URL,
            timeout=queue_settings.collaborator_timeout_seconds
        )
        dispatch_table = CommandDispatchTable(
            unit_of_work, bank, logistics, settings.COMPANY_ID, settings.PAYER_BANK_NAME
        )
        queue = PurchaseOrderQueue(unit_of_work, dispatch_table, queue_settings)
        reorder_monitor = ReorderMonitor(unit_of_work, queue, bank, reorder_settings)

        app.state.unit_of_work = unit_of_work
        app.state.queue = queue
        app.state.reorder_monitor = reorder_monitor
        app.state.reorder_settings = reorder_settings

        # 3. Work persisted before a restart, whether or not the loop runs
        await queue.populate_from_store()

        # 4. Background processing
        dispatch_loop = None
        if queue_settings.enable_processing:
            dispatch_loop = DispatchLoop(queue, queue_settings, reorder_monitor, reorder_settings.run_on_tick)
            dispatch_loop.start()
        else:
            logger.info("Queue processing is disabled, only manual triggers will run")

        yield

        logger.info("Application is shutting down...")
        if dispatch_loop:
            await dispatch_loop.stop()

    app = FastAPI(
        title="Supply Chain Service",
        description="Purchase order fulfillment for the screen factory",
        version="1.0.0",
        lifespan=lifespan
    )

    app.include_router(router, prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    return app


app = create_app()
