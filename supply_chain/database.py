import logging
from sqlalchemy import select, insert
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine, AsyncSession

from supply_chain.config import settings
from supply_chain.domain.models import OrderStatus
from supply_chain.infrastructure.db_schema import metadata, order_statuses_tbl

logger = logging.getLogger(__name__)


def make_engine(url: str) -> AsyncEngine:
    if url.startswith("sqlite"):
        return create_async_engine(url)
    return create_async_engine(url, pool_pre_ping=True)


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=bind, expire_on_commit=False, autoflush=False)


engine = make_engine(settings.DATABASE_URL)
AsyncSessionLocal = make_session_factory(engine)


async def create_schema(bind: AsyncEngine = engine) -> None:
    async with bind.begin() as conn:
        await conn.run_sync(metadata.create_all)


async def seed_statuses(session_factory: async_sessionmaker[AsyncSession] = AsyncSessionLocal) -> int:
    """Inserts any missing status names. Returns how many were added."""
    async with session_factory() as session:
        result = await session.execute(select(order_statuses_tbl.c.status))
        existing = {row.status for row in result.fetchall()}
        missing = [status.value for status in OrderStatus if status.value not in existing]
        if missing:
            await session.execute(insert(order_statuses_tbl), [{"status": name} for name in missing])
            await session.commit()
            logger.info(f"Seeded order statuses: {missing}")
        return len(missing)


