"""
Database configuration and session management
"""

from sqlmodel import SQLModel
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel.ext.asyncio.session import AsyncSession
import structlog

from qrmenu.models import records  # noqa: F401  registers tables on SQLModel.metadata

logger = structlog.get_logger(__name__)


def create_engine_from_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create an async engine, keeping in-memory SQLite on one connection"""
    url = database_url.replace("postgresql://", "postgresql+asyncpg://")
    if url.startswith("sqlite") and ":memory:" in url:
        return create_async_engine(
            url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_async_engine(url, echo=echo, future=True)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker:
    """Create async session factory"""
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def init_db(engine: AsyncEngine):
    """Initialize database tables"""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("Database tables created")
