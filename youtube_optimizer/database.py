# youtube_optimizer/database.py
import logging
from sqlmodel import SQLModel
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker

from .config import DATABASE_URL

logger = logging.getLogger(__name__)


def _build_engine(url: str) -> AsyncEngine:
    """SQLite files take the default pool; server databases get liveness checks."""
    if make_url(url).get_backend_name() == "sqlite":
        return create_async_engine(url, echo=False)
    return create_async_engine(url, echo=False, pool_pre_ping=True)


engine = _build_engine(DATABASE_URL)
AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False)


async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Credential store ready (%s)", make_url(DATABASE_URL).render_as_string(hide_password=True))


async def close_db():
    await engine.dispose()
    logger.info("Credential store connections closed")


async def get_session():
    """FastAPI dependency yielding one session per request; uncommitted work is rolled back on error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
