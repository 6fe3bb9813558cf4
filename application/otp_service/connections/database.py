"""
Async SQLAlchemy database configuration.
Uses the psycopg 3 driver in async mode; SQLAlchemy owns connection pooling.
"""

from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

# Logger
from otp_service.logging.utils import get_app_logger
logger = get_app_logger("database")

# Settings
from otp_service.config.settings import OTPServiceConfigs
configs = OTPServiceConfigs()

# postgresql:// -> postgresql+psycopg:// so the async psycopg 3 driver is used
DATABASE_URL = configs.DATABASE_URL
if DATABASE_URL and DATABASE_URL.startswith("postgresql://"):
    DATABASE_URL = DATABASE_URL.replace("postgresql://", "postgresql+psycopg://", 1)

Base = declarative_base()

engine = create_async_engine(
    DATABASE_URL,
    pool_size=configs.DATABASE_POOL_SIZE,
    max_overflow=configs.DATABASE_MAX_OVERFLOW,
    pool_pre_ping=True,
    pool_recycle=3600,
    echo=False,
)

AsyncSessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)

logger.info("Async SQLAlchemy engine initialized")


@asynccontextmanager
async def get_db_session(read_only: bool = False):
    """
    Session with transaction management for service-layer code.

    Args:
        read_only: skip the commit on exit

    Yields:
        AsyncSession
    """
    async with AsyncSessionLocal() as db:
        try:
            yield db
            if not read_only:
                await db.commit()
        except Exception:
            if not read_only:
                await db.rollback()
            raise


async def close_db_pool():
    await engine.dispose()
