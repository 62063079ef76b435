from functools import lru_cache
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from shared.app_logging.logger import get_logger
from shared.config.settings import get_settings
from shared.database.base import Base
from shared.database.models import article, bookmark, summary  # noqa: F401  (register tables)

logger = get_logger("database")


def build_engine(database_url: str) -> Engine:
    """Create an engine; SQLite URLs get a thread-safe single connection for :memory:."""
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, **kwargs)

    return create_engine(
        database_url,
        pool_size=10,
        max_overflow=20,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


@lru_cache()
def get_engine() -> Engine:
    """Engine for the configured DATABASE_URL."""
    url = get_settings().storage.database_url
    logger.info(f"Connecting to database: {url.split('@')[1] if '@' in url else url}")
    return build_engine(url)


def make_session_factory(engine: Optional[Engine] = None) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine or get_engine(),
        expire_on_commit=False,
    )


def init_db(engine: Optional[Engine] = None):
    """Initialize database tables."""
    try:
        Base.metadata.create_all(bind=engine or get_engine())
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}")
        raise
