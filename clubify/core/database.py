import logging
from functools import wraps
from typing import Callable, TypeVar, Any, AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.sql import text
from sqlalchemy.exc import (
    SQLAlchemyError,
    OperationalError,
    DisconnectionError,
    TimeoutError,
)
from asyncpg.exceptions import (
    ConnectionFailureError,
    ConnectionDoesNotExistError,
)
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from .config import (
    DATABASE_URL,
    DB_RETRY_ATTEMPTS,
    DB_RETRY_DELAY,
    DB_RETRY_BACKOFF_FACTOR,
)
from .exceptions import DatabaseConnectionError, DatabaseError

logger = logging.getLogger(__name__)

engine = create_async_engine(
    DATABASE_URL,
    echo=False,
    pool_size=20,
    max_overflow=10,
    pool_timeout=30,
    pool_recycle=3600,
    pool_pre_ping=True,
)

async_session = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()

F = TypeVar("F", bound=Callable[..., Any])

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def dialect_insert(session: AsyncSession, model):
    """INSERT construct supporting ON CONFLICT for the session's database"""
    dialect_name = session.get_bind().dialect.name
    insert = _INSERT_BY_DIALECT.get(dialect_name)
    if insert is None:
        raise DatabaseError(f"Unsupported database dialect: {dialect_name}")
    return insert(model)


# Errors worth retrying while the database is still coming up
RETRYABLE_ERRORS = (
    OperationalError,
    DisconnectionError,
    TimeoutError,
    ConnectionFailureError,
    ConnectionDoesNotExistError,
    OSError,
)


def startup_retrying() -> AsyncRetrying:
    """
    Retry policy for startup-only database operations.

    Request handlers never retry store calls; a failure there surfaces
    to the caller as is.
    """
    return AsyncRetrying(
        stop=stop_after_attempt(DB_RETRY_ATTEMPTS),
        wait=wait_exponential(
            multiplier=DB_RETRY_DELAY, exp_base=DB_RETRY_BACKOFF_FACTOR
        ),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency providing a database session per request
    """
    session = async_session()
    try:
        yield session
    except Exception as e:
        await session.rollback()
        logger.error(f"Session error: {str(e)}")
        raise
    finally:
        await session.close()


class DatabaseManager:
    """Startup and shutdown operations on the database"""

    @staticmethod
    async def create_tables():
        """Create all tables known to Base.metadata"""
        try:
            async for attempt in startup_retrying():
                with attempt:
                    async with engine.begin() as conn:
                        await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created successfully")
        except RetryError as e:
            logger.error(f"Failed to create database tables: {e.last_attempt.exception()}")
            raise DatabaseConnectionError("Database unavailable while creating tables")

    @staticmethod
    async def check_connection():
        """Check that the database answers"""
        try:
            async for attempt in startup_retrying():
                with attempt:
                    async with engine.begin() as conn:
                        await conn.execute(text("SELECT 1"))
            logger.info("Database connection check successful")
            return True
        except RetryError as e:
            logger.error(
                f"Database connection check failed after {DB_RETRY_ATTEMPTS} attempts: "
                f"{e.last_attempt.exception()}"
            )
            raise DatabaseConnectionError("Database connection check failed")

    @staticmethod
    async def close_connections():
        """Dispose of the connection pool"""
        try:
            await engine.dispose()
            logger.info("Database connections closed successfully")
        except Exception as e:
            logger.error(f"Error closing database connections: {str(e)}")


db_manager = DatabaseManager()


def db_operation(func: F) -> F:
    """
    Decorator for CRUD operations: debug tracing plus error logging
    """

    @wraps(func)
    async def wrapper(*args, **kwargs):
        operation_name = func.__name__

        try:
            logger.debug(f"Starting database operation: {operation_name}")
            result = await func(*args, **kwargs)
            logger.debug(f"Database operation completed: {operation_name}")
            return result

        except SQLAlchemyError as e:
            logger.error(
                f"SQLAlchemy error in {operation_name}: {str(e)}",
                extra={"operation": operation_name, "exception_type": type(e).__name__},
            )
            raise

    return wrapper
