"""Async engine, session factory and the transaction boundary.

The engine URL comes from settings (``database_url``). Tests build their
own engine on a temporary SQLite file with :func:`create_engine` and pass
the resulting session factory to the service.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm.exc import StaleDataError

from ..domain import ConcurrentUpdateError, StoreError
from ..models import Base
from ..obs import add_query_logger
from ..obs.queries import DEFAULT_SLOW_QUERY_MS


def create_engine(url: str, slow_query_ms: int = DEFAULT_SLOW_QUERY_MS) -> AsyncEngine:
    """Create an :class:`AsyncEngine` for ``url`` with query timing attached."""

    engine = create_async_engine(url)
    add_query_logger(engine, slow_query_ms)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Return a session factory whose objects stay usable after commit."""

    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def create_schema(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def transaction(
    session_factory: async_sessionmaker[AsyncSession],
    order_id: int | None = None,
) -> AsyncGenerator[AsyncSession, None]:
    """Run the enclosed reads and writes as one atomic unit.

    Commits when the block exits normally and rolls back on any exception.
    A version mismatch on flush or commit is raised as
    :class:`ConcurrentUpdateError` for ``order_id``; other driver errors are
    raised as :class:`StoreError`. Errors raised by the block itself pass
    through unchanged.
    """

    async with session_factory() as session:
        try:
            async with session.begin():
                yield session
        except StaleDataError as exc:
            raise ConcurrentUpdateError(order_id) from exc
        except OperationalError as exc:
            # SQLite reports a lost write race as a lock error.
            if order_id is not None and "database is locked" in str(exc.orig):
                raise ConcurrentUpdateError(order_id) from exc
            raise StoreError(f"store failure: {exc.__class__.__name__}") from exc
        except SQLAlchemyError as exc:
            raise StoreError(f"store failure: {exc.__class__.__name__}") from exc


__all__ = [
    "create_engine",
    "create_session_factory",
    "create_schema",
    "transaction",
]
