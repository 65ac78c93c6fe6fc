import asyncio
import logging

from core.bot import Bot
from core.config import get_settings
from core.database import setup_database_schema
from core.logging import setup_logging
from shared.database import DatabaseManager, PoolConfig

LOGGER: logging.Logger = logging.getLogger("Bot")


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level)

    async def runner() -> None:
        db = DatabaseManager(settings.database_url, PoolConfig(ssl=settings.database_ssl))
        await db.connect()

        try:
            async with db.pool.acquire() as connection:
                await setup_database_schema(connection)

            async with Bot(settings=settings, token_database=db.pool) as bot:
                await bot.start()
        finally:
            await db.disconnect()

    try:
        asyncio.run(runner())
    except KeyboardInterrupt:
        LOGGER.warning("Shutting down due to KeyboardInterrupt...")


if __name__ == "__main__":
    main()
