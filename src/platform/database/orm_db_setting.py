"""
SQLAlchemy async engine and session management

- AsyncEngineManager: event-loop aware engines with optional read replica
- Base: declarative base shared by every ORM model
- get_async_session / get_async_read_session: FastAPI session providers
- Database: session factory for DI-managed repositories

Write traffic always goes to the primary. Reads may use the replica when
POSTGRES_REPLICA_SERVER is configured; inside a unit of work every statement
runs on the write session so a transaction sees its own writes.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger


class AsyncEngineManager:
    """
    Keeps engines bound to the running event loop.

    Test runners and uvicorn workers can start a fresh loop per test/worker;
    an engine created on a previous loop raises "attached to a different loop",
    so engines are rebuilt whenever the loop changes.
    """

    def __init__(self) -> None:
        self._write_engine: Optional[AsyncEngine] = None
        self._read_engine: Optional[AsyncEngine] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._write_session_maker: Optional[async_sessionmaker[AsyncSession]] = None
        self._read_session_maker: Optional[async_sessionmaker[AsyncSession]] = None

    def get_engine(self, *, read_only: bool = False) -> AsyncEngine:
        try:
            current_loop = asyncio.get_running_loop()
        except RuntimeError:
            current_loop = None

        if current_loop is not None and self._loop is not current_loop:
            if self._write_engine is not None:
                Logger.base.warning('🔄 [DB] Event loop changed, recreating engines')
            self._write_engine = None
            self._read_engine = None
            self._write_session_maker = None
            self._read_session_maker = None
            self._loop = current_loop

        if self._write_engine is None:
            Logger.base.info('🔗 [DB] Creating engines')
            self._write_engine = self._create_engine(
                url=settings.DATABASE_URL_ASYNC, pool_size=settings.DB_POOL_SIZE_WRITE
            )
            self._read_engine = (
                self._create_engine(
                    url=settings.DATABASE_READ_URL_ASYNC, pool_size=settings.DB_POOL_SIZE_READ
                )
                if settings.POSTGRES_REPLICA_SERVER
                else self._write_engine
            )

        return self._read_engine if read_only else self._write_engine  # type: ignore[return-value]

    def get_session_maker(self, *, read_only: bool = False) -> async_sessionmaker[AsyncSession]:
        engine = self.get_engine(read_only=read_only)
        if read_only:
            if self._read_session_maker is None:
                self._read_session_maker = async_sessionmaker(
                    engine, class_=AsyncSession, expire_on_commit=False
                )
            return self._read_session_maker
        if self._write_session_maker is None:
            self._write_session_maker = async_sessionmaker(
                engine, class_=AsyncSession, expire_on_commit=False
            )
        return self._write_session_maker

    async def dispose(self) -> None:
        if self._read_engine is not None and self._read_engine is not self._write_engine:
            await self._read_engine.dispose()
        if self._write_engine is not None:
            await self._write_engine.dispose()
        self._write_engine = None
        self._read_engine = None
        self._write_session_maker = None
        self._read_session_maker = None

    @staticmethod
    def _create_engine(*, url: str, pool_size: int) -> AsyncEngine:
        return create_async_engine(
            url,
            echo=False,
            pool_size=pool_size,
            max_overflow=settings.DB_POOL_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
            pool_pre_ping=settings.DB_POOL_PRE_PING,
        )


engine_manager = AsyncEngineManager()


class Base(DeclarativeBase):
    pass


async def create_db_and_tables() -> None:
    """Create tables that do not exist yet (local development without alembic)"""
    async with engine_manager.get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all, checkfirst=True)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Write session for FastAPI Depends; rolled back and closed on exit"""
    session_maker = engine_manager.get_session_maker(read_only=False)
    async with session_maker() as session:
        yield session


async def get_async_read_session() -> AsyncGenerator[AsyncSession, None]:
    """Read session (replica when configured) for query endpoints"""
    session_maker = engine_manager.get_session_maker(read_only=True)
    async with session_maker() as session:
        yield session


class Database:
    """Session factory handed to repositories through the DI container"""

    def __init__(self, *, read_only: bool = False) -> None:
        self._read_only = read_only

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session_maker = engine_manager.get_session_maker(read_only=self._read_only)
        async with session_maker() as session:
            yield session
