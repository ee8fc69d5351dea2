import time
import logging

from django.core.cache import cache

logger = logging.getLogger(__name__)


class ResourceLockedException(Exception):
    """Raised when trying to acquire an already locked resource"""


class ResourceLock:
    """
    Cache-backed mutex for background jobs, keyed by resource type and id.
    Only as reliable as the cache backend: use a shared cache (redis) when
    several workers run.
    """

    def __init__(self, resource_type, resource_id, timeout=600):
        self.resource_type = resource_type
        self.resource_id = resource_id
        self.timeout = timeout
        self.key = f"clique:{resource_type}_lock:{resource_id}"

    def acquire(self) -> bool:
        """Try to acquire lock. Returns True if successful, False if already locked."""
        # cache.add() only writes when the key is missing
        lock_value = {
            "acquired_at": time.time(),
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
        }
        return cache.add(self.key, lock_value, timeout=self.timeout)

    def release(self):
        cache.delete(self.key)

    def is_locked(self) -> bool:
        return cache.get(self.key) is not None

    def get_lock_info(self):
        return cache.get(self.key)

    def __enter__(self):
        if not self.acquire():
            lock_info = self.get_lock_info() or {}
            acquired_at = lock_info.get("acquired_at")
            age = f"{time.time() - acquired_at:.0f}s" if acquired_at else "unknown"
            logger.warning(
                f"{self.resource_type} {self.resource_id} locked for {age}"
            )
            raise ResourceLockedException(
                f"{self.resource_type} {self.resource_id} is already being processed"
            )
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
        return False
