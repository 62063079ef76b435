from typing import Optional

from shared.app_logging.logger import get_logger
from shared.config.settings import Settings, get_settings
from shared.storage.base import StorageBackend
from shared.storage.memory import MemoryStorage

logger = get_logger(__name__)


def create_storage(settings: Optional[Settings] = None) -> StorageBackend:
    """Build the storage backend named by STORAGE_BACKEND."""
    settings = settings or get_settings()
    backend = settings.storage.backend

    if backend == "redis":
        from shared.storage.redis_store import RedisStorage
        from shared.utils.redis_client import get_redis_client

        storage = RedisStorage(get_redis_client("storage"), prefix=settings.storage.redis_key_prefix)
    elif backend == "sql":
        from shared.database.session import get_engine, init_db, make_session_factory
        from shared.storage.sql import SqlStorage

        engine = get_engine()
        init_db(engine)
        storage = SqlStorage(make_session_factory(engine))
    else:
        storage = MemoryStorage()

    logger.info(f"Using {storage.name} storage backend")
    return storage
