import asyncio
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine
from tenacity import retry, stop_after_attempt, wait_fixed

from core.config_loader import load_config
from database.database import get_engine
from database.models import Base

logger = logging.getLogger(__name__)


@retry(stop=stop_after_attempt(5), wait=wait_fixed(2))
async def init_db(engine: Optional[AsyncEngine] = None) -> None:
    logger.info("Initializing database...")
    engine = engine or get_engine()
    try:
        async with engine.begin() as connection:
            await connection.run_sync(Base.metadata.create_all)
        logger.info("Tables created or verified.")
    except Exception as e:
        logger.error(f"Error initializing DB: {e}")
        raise


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    config = load_config()
    asyncio.run(init_db(get_engine(config.database.url, echo=config.database.echo)))
