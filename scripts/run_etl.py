"""
Script to run the smartphone batch job once
"""

import asyncio
import sys
import logging

from core.config import load_settings
from core.database import create_db_engine
from core.exceptions import ConfigurationError
from core.logging import setup_logging
from ingestion.job import build_job
from schemas.job import JobParameters

logger = logging.getLogger(__name__)


async def run_etl() -> int:
    """Run the job with a fresh startAt parameter. Returns the exit code."""
    try:
        settings = load_settings()
    except ConfigurationError as e:
        setup_logging()
        logger.error(str(e))
        return 2
    
    setup_logging(settings.LOG_LEVEL)
    
    engine = create_db_engine(settings.DATABASE_URL, echo=False)
    
    try:
        runner = build_job(settings, engine)
        logger.info("Launching batch job...")
        result = await runner.run(JobParameters.now())
    finally:
        await engine.dispose()
    
    logger.info(f"Job result: {result.to_dict()}")
    return 0 if result.succeeded else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(run_etl()))
