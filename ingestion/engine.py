"""
Chunk engine - read, process and write records in fixed-size chunks.

Each chunk is committed in its own transaction. The engine is a small state
machine:

    IDLE → READING_CHUNK → PROCESSING_CHUNK → COMMITTING_CHUNK
         → READING_CHUNK | COMPLETED | FAILED

plus STOPPED when a stop was requested. Errors raised by the source, mapper,
transformer or sink are caught where they happen and move the engine to
FAILED; execute() reports them on the returned StepExecution instead of
raising. Chunks committed before a failure stay committed.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple
import enum
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from core.exceptions import ConfigurationError, ETLException, MappingError, WriteError
from ingestion.base import RecordSource, SourceRecord
from ingestion.job_repository import JobRepository
from ingestion.loaders.smartphone_loader import SmartphoneLoader
from ingestion.transformers.mapper import SmartphoneMapper
from ingestion.transformers.pricing import PriceTransformer
from schemas.smartphone import SmartphoneRecord

logger = logging.getLogger(__name__)


class EngineState(str, enum.Enum):
    IDLE = "idle"
    READING_CHUNK = "reading_chunk"
    PROCESSING_CHUNK = "processing_chunk"
    COMMITTING_CHUNK = "committing_chunk"
    COMPLETED = "completed"
    FAILED = "failed"
    STOPPED = "stopped"


TERMINAL_STATES = frozenset({EngineState.COMPLETED, EngineState.FAILED, EngineState.STOPPED})


@dataclass
class StepExecution:
    """Bookkeeping for one pass over the source"""
    state: EngineState = EngineState.IDLE
    records_read: int = 0
    records_written: int = 0
    records_skipped: int = 0
    chunks_committed: int = 0
    error: Optional[ETLException] = None
    skipped: List[Dict[str, Any]] = field(default_factory=list)
    history: List[EngineState] = field(default_factory=lambda: [EngineState.IDLE])


class ChunkEngine:
    """
    Orchestrates RecordSource → mapper → transformer → loader in chunks.

    Responsibilities:
    - Assemble chunks of up to chunk_size records, one at a time
    - Own the transaction of every chunk
    - Apply the failure policy (abort by default, optional skip limit
      for records that fail mapping)
    - Keep run counters in step with committed rows
    """

    def __init__(
        self,
        source: RecordSource,
        mapper: SmartphoneMapper,
        transformer: PriceTransformer,
        sink: SmartphoneLoader,
        session_factory: async_sessionmaker,
        chunk_size: int = 10,
        skip_limit: int = 0,
        repository: Optional[JobRepository] = None
    ):
        if chunk_size < 1:
            raise ConfigurationError(
                "Chunk size must be at least 1",
                context={"chunk_size": chunk_size}
            )
        if skip_limit < 0:
            raise ConfigurationError(
                "Skip limit cannot be negative",
                context={"skip_limit": skip_limit}
            )

        self.source = source
        self.mapper = mapper
        self.transformer = transformer
        self.sink = sink
        self.session_factory = session_factory
        self.chunk_size = chunk_size
        self.skip_limit = skip_limit
        self.repository = repository
        self._stop_requested = False

    def request_stop(self) -> None:
        """Ask the running pass to stop at the next chunk boundary."""
        logger.info("Stop requested; will stop after the current chunk")
        self._stop_requested = True

    async def execute(self, etl_run_id: Optional[int] = None) -> StepExecution:
        """
        Run one pass over the source until it is exhausted or fails.

        Args:
            etl_run_id: Run to attribute rows and counters to

        Returns:
            StepExecution in a terminal state
        """
        self._stop_requested = False
        execution = StepExecution()

        try:
            with self.source.open() as records:
                await self._run_chunks(records, execution, etl_run_id)

        except ETLException as e:
            self._fail(execution, e)

        except Exception as e:
            logger.exception("Unexpected error in chunk engine")
            self._fail(
                execution,
                ETLException(
                    "Unexpected error in chunk engine",
                    context={
                        "state": execution.state.value,
                        "chunks_committed": execution.chunks_committed
                    },
                    original_exception=e
                )
            )

        logger.info(
            f"Step finished: {execution.state.value} - "
            f"Read: {execution.records_read}, Written: {execution.records_written}, "
            f"Skipped: {execution.records_skipped}, Chunks: {execution.chunks_committed}"
        )
        return execution

    async def _run_chunks(
        self,
        records: Iterator[SourceRecord],
        execution: StepExecution,
        etl_run_id: Optional[int]
    ) -> None:
        while True:
            if self._stop_requested:
                self._transition(execution, EngineState.STOPPED)
                return

            # --------------------------------------------------
            # READ
            # --------------------------------------------------
            self._transition(execution, EngineState.READING_CHUNK)
            chunk, exhausted = self._read_chunk(records, execution)

            if not chunk:
                self._transition(execution, EngineState.COMPLETED)
                return

            # --------------------------------------------------
            # PROCESS
            # --------------------------------------------------
            self._transition(execution, EngineState.PROCESSING_CHUNK)
            processed = [self.transformer.transform(record) for record in chunk]

            # --------------------------------------------------
            # WRITE
            # --------------------------------------------------
            self._transition(execution, EngineState.COMMITTING_CHUNK)
            await self._commit_chunk(processed, execution, etl_run_id)

            if exhausted:
                self._transition(execution, EngineState.COMPLETED)
                return

    def _read_chunk(
        self,
        records: Iterator[SourceRecord],
        execution: StepExecution
    ) -> Tuple[List[SmartphoneRecord], bool]:
        """Pull up to chunk_size mapped records. Returns (chunk, exhausted)."""
        chunk: List[SmartphoneRecord] = []

        while len(chunk) < self.chunk_size:
            try:
                raw = next(records)
            except StopIteration:
                return chunk, True

            execution.records_read += 1

            try:
                chunk.append(self.mapper.map(raw.fields, line_number=raw.line_number))
            except MappingError as e:
                if execution.records_skipped >= self.skip_limit:
                    e.context["records_skipped"] = execution.records_skipped
                    e.context.setdefault("chunk_number", execution.chunks_committed + 1)
                    raise

                execution.records_skipped += 1
                execution.skipped.append(e.to_dict())
                logger.warning(
                    f"Skipped line {raw.line_number}: {e.message}",
                    extra={"error_context": e.to_dict()}
                )

        return chunk, False

    async def _commit_chunk(
        self,
        chunk: List[SmartphoneRecord],
        execution: StepExecution,
        etl_run_id: Optional[int]
    ) -> None:
        chunk_number = execution.chunks_committed + 1

        async with self.session_factory() as session:
            try:
                async with session.begin():
                    written = await self.sink.write(session, chunk, etl_run_id=etl_run_id)
                    if self.repository is not None and etl_run_id is not None:
                        await self.repository.record_chunk(session, etl_run_id, written)

            except WriteError as e:
                e.context.setdefault("chunk_number", chunk_number)
                raise

            except SQLAlchemyError as e:
                raise WriteError(
                    "Failed to commit chunk",
                    context={
                        "chunk_number": chunk_number,
                        "chunk_size": len(chunk)
                    },
                    original_exception=e
                )

        execution.records_written += written
        execution.chunks_committed += 1
        logger.info(f"Committed chunk {chunk_number} ({written} records)")

    def _transition(self, execution: StepExecution, state: EngineState) -> None:
        if execution.state in TERMINAL_STATES:
            raise RuntimeError(f"Step already finished in state {execution.state.value}")

        logger.debug(f"Chunk engine: {execution.state.value} -> {state.value}")
        execution.state = state
        execution.history.append(state)

    def _fail(self, execution: StepExecution, error: ETLException) -> None:
        logger.error(
            f"Step failed in state {execution.state.value}: {error.message}",
            extra={"error_context": error.to_dict()}
        )
        execution.error = error
        execution.state = EngineState.FAILED
        execution.history.append(EngineState.FAILED)
