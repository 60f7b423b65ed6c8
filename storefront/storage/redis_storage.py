import logging
from typing import Optional

from redis import Redis
from redis.exceptions import RedisError

from storefront.storage.base import StorageInterface

logger = logging.getLogger(__name__)


class RedisStorage(StorageInterface):
    def __init__(self, client: Redis):
        self.client = client

    def get(self, key: str) -> Optional[str]:
        try:
            data = self.client.get(key)
        except RedisError as e:
            # An unreachable Redis reads as an empty cart
            logger.error(f"Redis read failed for {key}: {str(e)}")
            return None

        if isinstance(data, bytes):
            data = data.decode("utf-8")
        return data

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        try:
            self.client.set(key, value, ex=ttl)
        except RedisError as e:
            logger.error(f"Redis write failed for {key}: {str(e)}")
            raise

    def delete(self, key: str) -> None:
        try:
            self.client.delete(key)
        except RedisError as e:
            logger.error(f"Redis delete failed for {key}: {str(e)}")

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False
