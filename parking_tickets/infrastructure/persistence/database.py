from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from parking_tickets.application.services.ticket_service import TicketService
from parking_tickets.config.settings_env import Settings, settings
from parking_tickets.infrastructure.persistence.models import build_tickets_table, metadata
from parking_tickets.infrastructure.persistence.sqlalchemy_store import SQLAlchemyTicketStore
from parking_tickets.shared.utils import logger


def create_engine_from_settings(app_settings: Settings = settings) -> AsyncEngine:
    return create_async_engine(app_settings.ASYNC_DATABASE_URL, echo=False)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine, table_name: str = settings.TICKETS_TABLE):
    logger.info(f"Initializing table {table_name}")
    table = build_tickets_table(table_name)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all, tables=[table], checkfirst=True)
    logger.info(f"Table {table_name} ready")


def create_ticket_store(
    app_settings: Settings = settings, engine: Optional[AsyncEngine] = None
) -> SQLAlchemyTicketStore:
    if engine is None:
        engine = create_engine_from_settings(app_settings)
    return SQLAlchemyTicketStore(create_session_factory(engine), app_settings.TICKETS_TABLE)


def create_ticket_service(
    app_settings: Settings = settings, engine: Optional[AsyncEngine] = None
) -> TicketService:
    store = create_ticket_store(app_settings, engine)
    return TicketService(store, store_timeout=app_settings.STORE_TIMEOUT_SECONDS)
