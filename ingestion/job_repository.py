"""
Persistence of job run metadata
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.exceptions import DuplicateRunError
from models.base import ETLStatus
from models.etl_run import ETLRun

logger = logging.getLogger(__name__)


class JobRepository:
    """
    Create, update and finalize ETLRun rows.
    
    start_run and complete_run use their own short transactions;
    record_chunk runs inside the chunk transaction it is given so that the
    counters commit or roll back together with the chunk's rows.
    """
    
    def __init__(self, session_factory: async_sessionmaker):
        self.session_factory = session_factory
    
    async def start_run(
        self,
        job_name: str,
        run_key: str,
        parameters: Optional[Dict[str, Any]] = None,
        config_snapshot: Optional[Dict[str, Any]] = None
    ) -> ETLRun:
        """
        Create a RUNNING job run.
        
        Raises:
            DuplicateRunError: If the job already has a run with this key
        """
        etl_run = ETLRun(
            job_name=job_name,
            run_key=run_key,
            parameters=parameters,
            status=ETLStatus.RUNNING,
            started_at=datetime.now(timezone.utc),
            config_snapshot=config_snapshot
        )
        
        async with self.session_factory() as session:
            session.add(etl_run)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateRunError(
                    "A run with these parameters already exists",
                    context={"job_name": job_name, "run_key": run_key},
                    original_exception=e
                )
        
        logger.info(f"Started run {etl_run.id} of {job_name} ({run_key})")
        return etl_run
    
    async def record_chunk(self, session: AsyncSession, etl_run_id: int, records_written: int) -> None:
        """Increment the run counters inside the caller's transaction"""
        await session.execute(
            update(ETLRun)
            .where(ETLRun.id == etl_run_id)
            .values(
                records_written=ETLRun.records_written + records_written,
                chunks_committed=ETLRun.chunks_committed + 1
            )
        )
    
    async def complete_run(
        self,
        etl_run: ETLRun,
        status: ETLStatus,
        records_read: int = 0,
        records_skipped: int = 0,
        error_message: Optional[str] = None,
        error_details: Optional[Dict[str, Any]] = None
    ) -> None:
        """Finalize a run with its terminal status"""
        completed_at = datetime.now(timezone.utc)
        started_at = etl_run.started_at
        if started_at.tzinfo is None:
            # SQLite drops the offset on read-back
            started_at = started_at.replace(tzinfo=timezone.utc)
        duration = (completed_at - started_at).total_seconds()
        
        async with self.session_factory() as session:
            await session.execute(
                update(ETLRun)
                .where(ETLRun.id == etl_run.id)
                .values(
                    status=status,
                    completed_at=completed_at,
                    duration_seconds=duration,
                    records_read=records_read,
                    records_skipped=records_skipped,
                    error_message=error_message,
                    error_details=error_details
                )
            )
            await session.commit()
    
    async def get_run(self, run_key: str, job_name: Optional[str] = None) -> Optional[ETLRun]:
        """Fetch a run by its key, the latest one when job_name is not given"""
        query = select(ETLRun).where(ETLRun.run_key == run_key)
        if job_name is not None:
            query = query.where(ETLRun.job_name == job_name)
        
        async with self.session_factory() as session:
            result = await session.execute(query.order_by(ETLRun.id.desc()).limit(1))
            return result.scalars().first()
