import asyncio

from parking_tickets.config.settings_env import settings
from parking_tickets.infrastructure.persistence.database import create_engine_from_settings, init_db


async def main():
    engine = create_engine_from_settings(settings)
    try:
        await init_db(engine, settings.TICKETS_TABLE)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
