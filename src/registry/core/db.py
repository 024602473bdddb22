# src/registry/core/db.py
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from src.registry.core.config import Settings

logger = logging.getLogger(__name__)


# Async Engine
def build_async_engine(settings: Settings) -> AsyncEngine:
    db_url = str(settings.ASYNC_DATABASE_URI)
    if settings.uses_sqlite:
        # single file, writers queue on the sqlite lock
        return create_async_engine(
            db_url,
            echo=settings.DB_ECHO,
            connect_args={"timeout": 30},
            future=True,
        )
    return create_async_engine(
        db_url,
        echo=settings.DB_ECHO,
        pool_size=settings.POOL_SIZE,
        max_overflow=5,
        pool_timeout=30,
        pool_recycle=1800,
        pool_pre_ping=True,
        future=True,
    )


def build_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False, future=True)


# Session Provider
@asynccontextmanager
async def session_scope(session_factory: sessionmaker) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


# Initialize DB tables
async def init_db(engine: AsyncEngine) -> None:
    from src.registry.models.admin import Admin  # noqa: F401
    from src.registry.models.supporter import Supporter  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    logger.info("DB initialized at %s", engine.url.render_as_string(hide_password=True))


async def shutdown(engine: AsyncEngine) -> None:
    await engine.dispose()
    logger.info("DB engine disposed")
