"""
Composition root: builds the smartphone job from settings
"""

from sqlalchemy.ext.asyncio import AsyncEngine

from core.config import Settings
from core.database import create_session_factory
from ingestion.engine import ChunkEngine
from ingestion.extractors.csv_extractor import CSVRecordSource
from ingestion.job_repository import JobRepository
from ingestion.loaders.smartphone_loader import SmartphoneLoader
from ingestion.runner import JobRunner
from ingestion.transformers.mapper import SmartphoneMapper
from ingestion.transformers.pricing import PriceTransformer


def build_job(settings: Settings, db_engine: AsyncEngine) -> JobRunner:
    """Wire every component in dependency order and return the runner."""
    session_factory = create_session_factory(db_engine)

    source = CSVRecordSource(
        file_path=settings.SOURCE_PATH,
        delimiter=settings.FIELD_DELIMITER,
        header_lines=settings.HEADER_LINES,
        read_size=settings.CHUNK_SIZE,
        encoding=settings.SOURCE_ENCODING
    )
    mapper = SmartphoneMapper()
    transformer = PriceTransformer()
    sink = SmartphoneLoader()
    repository = JobRepository(session_factory)

    chunk_engine = ChunkEngine(
        source=source,
        mapper=mapper,
        transformer=transformer,
        sink=sink,
        session_factory=session_factory,
        chunk_size=settings.CHUNK_SIZE,
        skip_limit=settings.SKIP_LIMIT,
        repository=repository
    )

    return JobRunner(
        chunk_engine,
        repository,
        job_name=settings.JOB_NAME,
        config_snapshot=settings.snapshot()
    )
