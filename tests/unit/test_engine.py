"""
Unit tests for the chunk engine state machine
"""

import pytest
from contextlib import contextmanager
from sqlalchemy import func, select
from core.exceptions import ConfigurationError, MappingError, ResourceError, WriteError
from ingestion.base import RecordSource, SourceRecord
from ingestion.engine import ChunkEngine, EngineState
from ingestion.loaders.smartphone_loader import SmartphoneLoader
from ingestion.transformers.mapper import SmartphoneMapper
from ingestion.transformers.pricing import PriceTransformer
from models.smartphone import Smartphone


def _fields(index, price="100.00"):
    return {
        "brand": "Acme",
        "model": f"X{index}",
        "operating_system": "OS1",
        "release_year": "2024",
        "screen_size": "6.1",
        "price": price,
    }


class ListSource(RecordSource):
    """In-memory source that logs every read into a shared event list"""
    
    def __init__(self, rows, events=None):
        self.rows = rows
        self.events = events if events is not None else []
        self.closed = False
    
    @contextmanager
    def open(self):
        self.closed = False
        try:
            yield self._records()
        finally:
            self.closed = True
    
    def _records(self):
        for line_number, fields in enumerate(self.rows, start=2):
            self.events.append(f"read:{fields['model']}")
            yield SourceRecord(line_number=line_number, fields=fields)


class RecordingLoader(SmartphoneLoader):
    """Loader that logs writes and can fail on a given chunk"""
    
    def __init__(self, events, fail_on_call=None):
        self.events = events
        self.fail_on_call = fail_on_call
        self.calls = 0
    
    async def write(self, session, chunk, etl_run_id=None):
        self.calls += 1
        written = await super().write(session, chunk, etl_run_id=etl_run_id)
        self.events.append(f"write:{len(chunk)}")
        if self.calls == self.fail_on_call:
            raise WriteError("Simulated constraint violation", context={"table_name": "smartphones"})
        return written


def _engine(rows, session_factory, chunk_size=3, skip_limit=0, fail_on_call=None):
    events = []
    source = ListSource(rows, events)
    loader = RecordingLoader(events, fail_on_call=fail_on_call)
    engine = ChunkEngine(
        source=source,
        mapper=SmartphoneMapper(),
        transformer=PriceTransformer(),
        sink=loader,
        session_factory=session_factory,
        chunk_size=chunk_size,
        skip_limit=skip_limit
    )
    return engine, source, events


async def _count(session_factory):
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(Smartphone))).scalar_one()


class TestChunkEngine:
    
    @pytest.mark.parametrize("chunk_size", [0, -1])
    def test_invalid_chunk_size(self, chunk_size):
        with pytest.raises(ConfigurationError):
            ChunkEngine(
                source=ListSource([]),
                mapper=SmartphoneMapper(),
                transformer=PriceTransformer(),
                sink=SmartphoneLoader(),
                session_factory=None,
                chunk_size=chunk_size
            )
    
    def test_negative_skip_limit(self):
        with pytest.raises(ConfigurationError):
            ChunkEngine(
                source=ListSource([]),
                mapper=SmartphoneMapper(),
                transformer=PriceTransformer(),
                sink=SmartphoneLoader(),
                session_factory=None,
                skip_limit=-1
            )
    
    @pytest.mark.asyncio
    async def test_next_chunk_is_read_only_after_commit(self, session_factory):
        rows = [_fields(i) for i in range(5)]
        engine, source, events = _engine(rows, session_factory, chunk_size=3)
        
        execution = await engine.execute()
        
        assert execution.state == EngineState.COMPLETED
        assert events == [
            "read:X0", "read:X1", "read:X2", "write:3",
            "read:X3", "read:X4", "write:2",
        ]
        assert source.closed
    
    @pytest.mark.asyncio
    async def test_state_history(self, session_factory):
        engine, _, _ = _engine([_fields(i) for i in range(4)], session_factory, chunk_size=2)
        
        execution = await engine.execute()
        
        assert execution.history == [
            EngineState.IDLE,
            EngineState.READING_CHUNK,
            EngineState.PROCESSING_CHUNK,
            EngineState.COMMITTING_CHUNK,
            EngineState.READING_CHUNK,
            EngineState.PROCESSING_CHUNK,
            EngineState.COMMITTING_CHUNK,
            EngineState.READING_CHUNK,
            EngineState.COMPLETED,
        ]
        assert execution.chunks_committed == 2
    
    @pytest.mark.asyncio
    async def test_empty_source_completes(self, session_factory):
        engine, _, events = _engine([], session_factory)
        
        execution = await engine.execute()
        
        assert execution.state == EngineState.COMPLETED
        assert execution.records_read == 0
        assert events == []
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("chunk_size", [1, 2, 3, 7, 10, 50])
    async def test_row_count_independent_of_chunk_size(self, session_factory, chunk_size):
        engine, _, _ = _engine([_fields(i) for i in range(7)], session_factory, chunk_size=chunk_size)
        
        execution = await engine.execute()
        
        assert execution.state == EngineState.COMPLETED
        assert execution.records_written == 7
        assert execution.chunks_committed == -(-7 // chunk_size)
        assert await _count(session_factory) == 7
    
    @pytest.mark.asyncio
    async def test_write_failure_rolls_back_only_failing_chunk(self, session_factory):
        rows = [_fields(i) for i in range(7)]
        engine, _, events = _engine(rows, session_factory, chunk_size=3, fail_on_call=2)
        
        execution = await engine.execute()
        
        assert execution.state == EngineState.FAILED
        assert isinstance(execution.error, WriteError)
        assert execution.error.context["chunk_number"] == 2
        assert execution.chunks_committed == 1
        assert execution.records_written == 3
        # The loader did insert the second chunk before failing
        assert "write:3" in events[4:]
        assert await _count(session_factory) == 3
        # Nothing read past the failing chunk
        assert "read:X6" not in events
    
    @pytest.mark.asyncio
    async def test_mapping_error_aborts_by_default(self, session_factory):
        rows = [_fields(0), _fields(1), _fields(2, price="n/a"), _fields(3)]
        engine, _, events = _engine(rows, session_factory, chunk_size=10)
        
        execution = await engine.execute()
        
        assert execution.state == EngineState.FAILED
        assert isinstance(execution.error, MappingError)
        assert execution.error.context["line_number"] == 4
        assert not any(e.startswith("write") for e in events)
        assert await _count(session_factory) == 0
    
    @pytest.mark.asyncio
    async def test_skip_limit_skips_and_reports_bad_records(self, session_factory):
        rows = [_fields(0), _fields(1, price="n/a"), _fields(2), _fields(3, price="-5")]
        engine, _, _ = _engine(rows, session_factory, chunk_size=2, skip_limit=2)
        
        execution = await engine.execute()
        
        assert execution.state == EngineState.COMPLETED
        assert execution.records_read == 4
        assert execution.records_skipped == 2
        assert execution.records_written == 2
        assert [s["context"]["line_number"] for s in execution.skipped] == [3, 5]
        assert await _count(session_factory) == 2
    
    @pytest.mark.asyncio
    async def test_skip_limit_exceeded_fails(self, session_factory):
        rows = [_fields(0, price="x"), _fields(1, price="y"), _fields(2)]
        engine, _, _ = _engine(rows, session_factory, skip_limit=1)
        
        execution = await engine.execute()
        
        assert execution.state == EngineState.FAILED
        assert isinstance(execution.error, MappingError)
        assert execution.records_skipped == 1
        assert execution.error.context["line_number"] == 3
        assert execution.error.context["records_skipped"] == 1
        assert execution.error.context["chunk_number"] == 1
    
    @pytest.mark.asyncio
    async def test_resource_error_fails_before_any_chunk(self, session_factory):
        class BrokenSource(RecordSource):
            def open(self):
                raise ResourceError("Cannot open source file", context={"file_path": "gone.csv"})
        
        engine = ChunkEngine(
            source=BrokenSource(),
            mapper=SmartphoneMapper(),
            transformer=PriceTransformer(),
            sink=SmartphoneLoader(),
            session_factory=session_factory
        )
        
        execution = await engine.execute()
        
        assert execution.state == EngineState.FAILED
        assert isinstance(execution.error, ResourceError)
        assert execution.chunks_committed == 0
    
    @pytest.mark.asyncio
    async def test_unexpected_error_is_fatal(self, session_factory):
        engine, _, _ = _engine([_fields(0)], session_factory)
        engine.transformer.transform = lambda record: 1 / 0
        
        execution = await engine.execute()
        
        assert execution.state == EngineState.FAILED
        assert isinstance(execution.error.original_exception, ZeroDivisionError)
        assert await _count(session_factory) == 0
    
    @pytest.mark.asyncio
    async def test_stop_takes_effect_at_chunk_boundary(self, session_factory):
        rows = [_fields(i) for i in range(6)]
        engine, source, events = _engine(rows, session_factory, chunk_size=2)
        
        original_write = engine.sink.write
        
        async def write_then_stop(session, chunk, etl_run_id=None):
            written = await original_write(session, chunk, etl_run_id=etl_run_id)
            engine.request_stop()
            return written
        
        engine.sink.write = write_then_stop
        
        execution = await engine.execute()
        
        assert execution.state == EngineState.STOPPED
        assert execution.chunks_committed == 1
        assert events == ["read:X0", "read:X1", "write:2"]
        assert await _count(session_factory) == 2
