# ============================================================================
# File: ingestion/runner.py
# Description: Entry point that drives one identified run of the batch job
# ============================================================================
"""
Job Runner - creates a job run and drives the chunk engine once.

This module provides:
- Run identity from job parameters (distinct parameters, distinct run)
- Exactly one engine pass per run
- Terminal status recorded on the run and returned to the caller
"""

from typing import Any, Dict, Optional
import logging

from sqlalchemy.exc import SQLAlchemyError

from core.exceptions import DuplicateRunError, WriteError
from ingestion.engine import ChunkEngine, EngineState, StepExecution
from ingestion.job_repository import JobRepository
from models.base import ETLStatus
from schemas.job import JobParameters, JobResult

logger = logging.getLogger(__name__)

_STATUS_BY_STATE = {
    EngineState.COMPLETED: ETLStatus.SUCCESS,
    EngineState.FAILED: ETLStatus.FAILED,
    EngineState.STOPPED: ETLStatus.STOPPED,
}


class JobRunner:
    """
    Batch job launcher

    Responsibilities:
    - Create the ETLRun row for the given parameters
    - Run the chunk engine to a terminal state
    - Record the outcome and report it
    """

    def __init__(
        self,
        engine: ChunkEngine,
        repository: JobRepository,
        job_name: str = "smartphoneJob",
        config_snapshot: Optional[Dict[str, Any]] = None
    ):
        self.engine = engine
        self.repository = repository
        self.job_name = job_name
        self.config_snapshot = config_snapshot

    async def run(self, parameters: JobParameters) -> JobResult:
        """
        Run the job once for the given parameters.

        Never raises for pipeline errors: the returned JobResult carries the
        terminal status and, on failure, the error that caused it.
        """
        run_key = parameters.run_key
        logger.info(f"Launching job {self.job_name} with parameters {run_key}")

        try:
            etl_run = await self.repository.start_run(
                job_name=self.job_name,
                run_key=run_key,
                parameters=parameters.to_dict(),
                config_snapshot=self.config_snapshot
            )
        except DuplicateRunError as e:
            existing = await self.repository.get_run(run_key, job_name=self.job_name)
            if existing is not None:
                e.context["existing_run_id"] = existing.id
                e.context["existing_status"] = existing.status.value
            logger.error(f"Job {self.job_name} not started: {e.message} ({run_key})")
            return JobResult(status=ETLStatus.FAILED, run_key=run_key, error=e)
        except SQLAlchemyError as e:
            error = WriteError(
                "Could not create job run",
                context={"job_name": self.job_name, "run_key": run_key, "table_name": "etl_runs"},
                original_exception=e
            )
            logger.error(f"Job {self.job_name} not started: {error}")
            return JobResult(status=ETLStatus.FAILED, run_key=run_key, error=error)

        execution = await self.engine.execute(etl_run_id=etl_run.id)
        status = _STATUS_BY_STATE[execution.state]

        try:
            await self.repository.complete_run(
                etl_run,
                status=status,
                records_read=execution.records_read,
                records_skipped=execution.records_skipped,
                error_message=execution.error.message if execution.error else None,
                error_details=self._error_details(execution)
            )
        except SQLAlchemyError:
            logger.exception(f"Could not record final status of run {etl_run.id}")

        result = JobResult(
            status=status,
            run_key=run_key,
            etl_run_id=etl_run.id,
            records_read=execution.records_read,
            records_written=execution.records_written,
            records_skipped=execution.records_skipped,
            chunks_committed=execution.chunks_committed,
            error=execution.error,
            skipped=execution.skipped
        )

        if result.succeeded:
            logger.info(
                f"Job {self.job_name} completed: {status.value} - "
                f"Read: {result.records_read}, Written: {result.records_written}, "
                f"Skipped: {result.records_skipped}"
            )
        else:
            logger.error(
                f"Job {self.job_name} ended with status {status.value}: "
                f"{execution.error if execution.error else 'stop requested'}"
            )

        return result

    @staticmethod
    def _error_details(execution: StepExecution) -> Optional[Dict[str, Any]]:
        details: Dict[str, Any] = {}
        if execution.error is not None:
            details["error"] = execution.error.to_dict()
        if execution.skipped:
            details["skipped"] = execution.skipped
        return details or None
