from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from src.utils.logger import get_logger
from src.utils.settings.database import DatabaseSettings

logger = get_logger(__name__)


def create_db_engine(settings: DatabaseSettings | None = None) -> AsyncEngine:
    """Create the pooled async engine used for the lifetime of the process."""
    settings = settings or DatabaseSettings()
    url = make_url(settings.DATABASE_URL_ASYNC)

    engine_kwargs: dict = {"echo": settings.DATABASE_ECHO, "pool_pre_ping": True}
    if url.get_backend_name() != "sqlite":
        engine_kwargs["pool_size"] = settings.DATABASE_POOL_SIZE

    logger.info(
        "Creating database engine",
        backend=url.get_backend_name(),
        driver=url.get_driver_name(),
        database=url.database,
    )
    return create_async_engine(url, **engine_kwargs)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
