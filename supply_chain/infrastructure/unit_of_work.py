from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from supply_chain.infrastructure.repositories import (
    SQLAlchemyPurchaseOrderRepository,
    SQLAlchemyMaterialRepository,
    SQLAlchemyEquipmentRepository
)


class UnitOfWork:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def __call__(self):
        async with self._session_factory() as session:
            try:
                uow_impl = _UnitOfWorkImpl(session)
                yield uow_impl
                # Anything not committed is discarded
                await session.rollback()
            except BaseException:
                await session.rollback()
                raise


class _UnitOfWorkImpl:
    def __init__(self, session: AsyncSession):
        self._session = session
        self.purchase_orders = SQLAlchemyPurchaseOrderRepository(session)
        self.materials = SQLAlchemyMaterialRepository(session)
        self.equipment = SQLAlchemyEquipmentRepository(session)

    async def commit(self):
        await self._session.commit()

    async def rollback(self):
        await self._session.rollback()
