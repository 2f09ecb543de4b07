from sqlalchemy import select
from core.config import load_settings
from models.etl_run import ETLRun
from models.smartphone import Smartphone


def make_settings(test_engine, source_path, **overrides):
    return load_settings(
        _env_file=None,
        DATABASE_URL=test_engine.url.render_as_string(hide_password=False),
        SOURCE_PATH=source_path,
        **overrides
    )


async def fetch_rows(session_factory):
    async with session_factory() as session:
        result = await session.execute(select(Smartphone).order_by(Smartphone.id))
        return result.scalars().all()


async def fetch_run(session_factory, etl_run_id):
    async with session_factory() as session:
        return await session.get(ETLRun, etl_run_id)


def as_tuple(row):
    return (
        row.brand,
        row.model,
        row.operating_system,
        row.release_year,
        row.screen_size,
        row.price,
    )
