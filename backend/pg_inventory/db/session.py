"""
Async engine, session factory and the transaction scope used by every
mutating engine operation.

TRANSACTION POLICY
==================

Each logical operation (booking transition, reconciliation, listing sync,
override toggle) runs inside exactly one `atomic()` block:

  - success: commit once at the end
  - engine error (InventoryError): roll back, re-raise unchanged
  - store error (SQLAlchemyError): roll back, raise TransactionFailed

There is no partial success. Callers retry the whole operation on
TransactionFailed, never a part of it.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from pg_inventory.core.config import get_settings
from pg_inventory.core.exceptions import InventoryError, TransactionFailed
from pg_inventory.core.logging import get_logger
from pg_inventory.core.metrics import record_transaction_failure

logger = get_logger(__name__)
settings = get_settings()


def build_engine(url: str, **overrides) -> AsyncEngine:
    """Create an async engine; pool sizing only applies to server databases."""
    options = {"echo": settings.DEBUG, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options.update(
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=settings.DB_MAX_OVERFLOW,
            pool_timeout=settings.DB_POOL_TIMEOUT,
            pool_recycle=settings.DB_POOL_RECYCLE,
        )
    options.update(overrides)
    return create_async_engine(url, **options)


engine = build_engine(settings.DATABASE_URL)
AsyncSessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding one session per request."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def atomic(db: AsyncSession, operation: str) -> AsyncIterator[AsyncSession]:
    """Run one logical mutation as a single all-or-nothing transaction."""
    try:
        yield db
        await db.commit()
    except InventoryError:
        await db.rollback()
        raise
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("transaction_failed", operation=operation, error=str(e))
        record_transaction_failure(operation)
        raise TransactionFailed(operation, reason=e.__class__.__name__) from e
    except Exception:
        await db.rollback()
        raise
