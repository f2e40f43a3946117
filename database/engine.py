import logging
from datetime import datetime, timezone
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

logger = logging.getLogger(__name__)


# Base class for declarative models
class Base(DeclarativeBase):
    pass


class Database:
    """
    Owns the engine and session factory for one application instance.

    Every service call runs inside `transaction()`, which commits when the
    block exits cleanly and rolls back on any exception.
    """

    def __init__(
        self,
        url: str,
        isolation_level: str | None = "REPEATABLE READ",
        pool_size: int = 10,
        echo: bool = False,
    ):
        self.url = make_url(url)
        engine_kwargs: dict = {"echo": echo}
        if isolation_level:
            engine_kwargs["isolation_level"] = isolation_level
        if self.url.get_backend_name() == "postgresql":
            engine_kwargs["pool_size"] = pool_size
            engine_kwargs["pool_pre_ping"] = True

        logger.info(
            "Connecting to database",
            extra={"database": self.url.render_as_string(hide_password=True)},
        )
        self.engine: AsyncEngine = create_async_engine(url, **engine_kwargs)
        self.sessionmaker = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    @property
    def is_postgres(self) -> bool:
        return self.url.get_backend_name() == "postgresql"

    @asynccontextmanager
    async def transaction(self, read_only: bool = False) -> AsyncIterator[AsyncSession]:
        """
        Open a session with a transaction around it.

        Args:
            read_only: Mark the transaction read-only where the backend supports it

        Yields:
            AsyncSession bound to the open transaction
        """
        async with self.sessionmaker() as session:
            async with session.begin():
                if read_only and self.is_postgres:
                    await session.execute(text("SET TRANSACTION READ ONLY"))
                yield session

    async def create_schema(self) -> None:
        """Create all tables that do not exist yet."""
        # models must be imported so their tables are registered on Base.metadata
        import database.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_schema(self) -> None:
        import database.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def ping(self) -> bool:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def dispose(self) -> None:
        """Close database engine and connections."""
        await self.engine.dispose()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
