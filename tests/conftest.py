"""
Pytest configuration and fixtures
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import NullPool
from models.base import Base
from core.database import create_session_factory, init_models

HEADER = "brand;model;operating_system;release_year;screen_size;price"


@pytest_asyncio.fixture(scope="function")
async def test_engine(tmp_path):
    """Create test database engine on a throwaway SQLite file"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'etl_test.db'}",
        echo=False,
        poolclass=NullPool,
    )
    
    await init_models(engine)
    
    yield engine
    
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    """Session factory bound to the test engine"""
    return create_session_factory(test_engine)


@pytest.fixture
def write_csv(tmp_path):
    """Write a smartphone file and return its path"""
    def _write(lines, header=HEADER, name="smartphones.csv"):
        path = tmp_path / name
        content = "\n".join(([header] if header is not None else []) + list(lines))
        path.write_text(content + "\n", encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def mock_csv_lines():
    """Two valid smartphone lines, one old model and one recent"""
    return [
        "Acme;X1;OS1;2022;6.1;100.00",
        "Acme;X2;OS1;2024;6.5;200.00",
    ]


@pytest.fixture
def many_csv_lines():
    """Twenty-three valid lines with distinct models"""
    return [
        f"Brand{i % 3};Model {i:02d};Android;{2019 + i % 6};6.{i % 10};{100 + i}.50"
        for i in range(23)
    ]
