"""
Standardized Redis client utilities for DevBytes.
Provides connection pooling and consistent error handling for the Redis
storage backend.
"""

from typing import Dict, List, Optional

import redis

from shared.app_logging.logger import get_logger
from shared.config.settings import get_settings


class RedisClient:
    """Redis client wrapper with lazy connection pooling."""

    def __init__(self, service_name: str, client: Optional[redis.Redis] = None):
        self.service_name = service_name
        self.settings = get_settings()
        self._client: Optional[redis.Redis] = client
        self._logger = get_logger(f"{service_name}.redis")

    def _get_client(self) -> redis.Redis:
        """Get or create Redis client with connection pooling."""
        if self._client is None:
            try:
                self._client = redis.from_url(
                    self.settings.storage.redis_url,
                    decode_responses=True,
                    socket_timeout=self.settings.service.redis_timeout,
                    retry_on_timeout=True,
                    max_connections=20,
                    health_check_interval=30,
                )
                self._client.ping()
                self._logger.info("Connected to Redis successfully")
            except Exception as e:
                self._logger.error(f"Failed to connect to Redis: {e}")
                self._client = None
                raise

        return self._client

    def ping(self) -> bool:
        """Test Redis connection."""
        try:
            return bool(self._get_client().ping())
        except Exception as e:
            self._logger.error(f"Redis ping failed: {e}")
            return False

    def hget(self, key: str, field: str) -> Optional[str]:
        try:
            return self._get_client().hget(key, field)
        except Exception as e:
            self._logger.error(f"Failed to read {key}[{field}]: {e}")
            raise

    def hset(self, key: str, field: str, value: str) -> int:
        try:
            return self._get_client().hset(key, field, value)
        except Exception as e:
            self._logger.error(f"Failed to write {key}[{field}]: {e}")
            raise

    def hsetnx(self, key: str, field: str, value: str) -> bool:
        """Set a hash field only if it does not exist yet."""
        try:
            return bool(self._get_client().hsetnx(key, field, value))
        except Exception as e:
            self._logger.error(f"Failed to write {key}[{field}]: {e}")
            raise

    def hdel(self, key: str, field: str) -> int:
        try:
            return self._get_client().hdel(key, field)
        except Exception as e:
            self._logger.error(f"Failed to delete {key}[{field}]: {e}")
            raise

    def hexists(self, key: str, field: str) -> bool:
        try:
            return bool(self._get_client().hexists(key, field))
        except Exception as e:
            self._logger.error(f"Failed to check {key}[{field}]: {e}")
            raise

    def hvals(self, key: str) -> List[str]:
        try:
            return self._get_client().hvals(key)
        except Exception as e:
            self._logger.error(f"Failed to read hash {key}: {e}")
            raise

    def close(self):
        """Close Redis connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._logger.info("Redis connection closed")


_redis_clients: Dict[str, RedisClient] = {}


def get_redis_client(service_name: str) -> RedisClient:
    """Get or create Redis client for a service."""
    if service_name not in _redis_clients:
        _redis_clients[service_name] = RedisClient(service_name)
    return _redis_clients[service_name]


def close_all_redis_clients():
    """Close all Redis client connections."""
    for client in _redis_clients.values():
        client.close()
    _redis_clients.clear()
