import logging
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from realitylog.config import get_settings
from realitylog.exceptions import ConnectivityError, LoggerError, UnknownError
from realitylog.models.base import Base

settings = get_settings()
logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> dict[str, Any]:
    if database_url.startswith("sqlite"):
        # aiosqlite connections are bound to the event loop that opened them
        return {"poolclass": NullPool}
    return {
        "pool_size": 5,
        "max_overflow": 0,  # queue instead of exceeding the database limit
        "pool_pre_ping": True,  # Check connection health before use
        "pool_recycle": 300,  # Recycle connections after 5 minutes
        "pool_timeout": 30,  # Wait 30 seconds for connection before timeout
    }


engine = create_async_engine(
    settings.database_url,
    echo=settings.database_echo,
    future=True,
    **_engine_options(settings.database_url),
)

async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Initialize database with retry logic for connection failures."""
    import asyncio

    # Register every mapped table on Base.metadata
    import realitylog.models  # noqa: F401

    max_retries = 5
    retry_delay = 2  # seconds

    for attempt in range(max_retries):
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            return  # Success
        except Exception as e:
            if attempt < max_retries - 1:
                logger.warning(
                    f"DB connection attempt {attempt + 1}/{max_retries} failed: {e}. "
                    f"Retrying in {retry_delay} seconds..."
                )
                await asyncio.sleep(retry_delay)
                retry_delay *= 2  # Exponential backoff
            else:
                logger.error(f"Failed to connect to database after {max_retries} attempts")
                raise


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def store_transaction(
    session_maker: async_sessionmaker[AsyncSession] | None = None,
) -> AsyncIterator[AsyncSession]:
    """Open a session + transaction and translate database failures.

    Connection-level failures become ``ConnectivityError`` (retryable); any
    other database error becomes ``UnknownError``.
    """
    try:
        async with (session_maker or async_session_maker)() as db:
            async with db.begin():
                yield db
    except LoggerError:
        raise
    except (OperationalError, InterfaceError, DisconnectionError, OSError) as e:
        logger.warning(f"Data store unreachable: {e}")
        raise ConnectivityError(f"Data store unreachable: {e}") from e
    except SQLAlchemyError as e:
        raise UnknownError(str(e)) from e
