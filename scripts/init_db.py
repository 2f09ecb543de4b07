import asyncio
import logging

from core.config import load_settings
from core.database import create_db_engine, init_models
from core.logging import setup_logging

logger = logging.getLogger(__name__)


async def init_database():
    settings = load_settings()
    setup_logging(settings.LOG_LEVEL)
    
    logger.info("Connecting to database...")
    engine = create_db_engine(settings.DATABASE_URL, echo=True)
    
    try:
        logger.info("Creating tables...")
        await init_models(engine)
    finally:
        await engine.dispose()


if __name__ == "__main__":
    asyncio.run(init_database())
