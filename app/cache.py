"""
Redis query cache and change events

Services never touch cache keys directly. After a successful mutation they
publish a ChangeEvent ("entity X of kind Y changed") on the change bus; the
QueryCacheInvalidator subscribed to the bus maps each event to the cached
views it makes stale.
"""
import json
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Optional

import redis

from .config import (
    CACHE_ENABLED,
    CACHE_TTL_SECONDS,
    REDIS_DB,
    REDIS_HOST,
    REDIS_PASSWORD,
    REDIS_PORT,
    REDIS_URL,
)

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """
    Get or create Redis client
    Supports both a REDIS_URL and individual host/port settings
    """
    global redis_client

    if redis_client is None:
        if REDIS_URL:
            # Mask password in URL for logging
            if "@" in REDIS_URL:
                url_parts = REDIS_URL.split("@")
                protocol = url_parts[0].split(":")[0]
                masked_url = f"{protocol}:****@{url_parts[1]}"
            else:
                masked_url = "****"
            logger.info(f"📡 Using Redis URL connection: {masked_url}")
            client = redis.from_url(
                REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )
        else:
            logger.info(f"📡 Using Redis at {REDIS_HOST}:{REDIS_PORT} (db {REDIS_DB})")
            client = redis.Redis(
                host=REDIS_HOST,
                port=REDIS_PORT,
                password=REDIS_PASSWORD,
                db=REDIS_DB,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
                retry_on_timeout=True,
                health_check_interval=30,
            )
        # Test connection
        client.ping()
        redis_client = client
        logger.info("Redis connected successfully")

    return redis_client


class Cache:
    """Redis cache wrapper with automatic serialization.

    Fail-open: when Redis is unavailable every read is a miss and every
    write is skipped.
    """

    def __init__(self):
        self.redis_client = None
        self._disabled = not CACHE_ENABLED

    def _get_client(self):
        """Lazy load Redis client; a failed connect is retried on the next call"""
        if self.redis_client is None and not self._disabled:
            try:
                self.redis_client = get_redis_client()
            except Exception as e:
                logger.warning(f"⚠️ Redis cache unavailable: {e}")
                return None
        return self.redis_client

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache"""
        client = self._get_client()
        if not client:
            return None

        try:
            value = client.get(key)
            if value:
                logger.debug(f"✅ Cache HIT: {key}")
                return json.loads(value)
            logger.debug(f"❌ Cache MISS: {key}")
            return None
        except Exception as e:
            logger.error(f"❌ Cache get error for {key}: {e}")
            return None

    def set(self, key: str, value: Any, ttl: int = CACHE_TTL_SECONDS) -> bool:
        """Set value in cache with TTL"""
        client = self._get_client()
        if not client:
            return False

        try:
            serialized = json.dumps(value, default=str)
            client.setex(key, ttl, serialized)
            logger.debug(f"✅ Cache SET: {key} (TTL: {ttl}s)")
            return True
        except Exception as e:
            logger.error(f"❌ Cache set error for {key}: {e}")
            return False

    def delete(self, key: str) -> bool:
        """Delete value from cache"""
        client = self._get_client()
        if not client:
            return False

        try:
            client.delete(key)
            logger.debug(f"✅ Cache DELETE: {key}")
            return True
        except Exception as e:
            logger.error(f"❌ Cache delete error for {key}: {e}")
            return False

    def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with prefix (e.g. 'snapshot:')"""
        client = self._get_client()
        if not client:
            return 0

        try:
            keys = list(client.scan_iter(match=f"{prefix}*"))
            if keys:
                deleted = client.delete(*keys)
                logger.debug(f"✅ Cache DELETE prefix: {prefix} ({deleted} keys)")
                return deleted
            return 0
        except Exception as e:
            logger.error(f"❌ Cache delete prefix error for {prefix}: {e}")
            return 0

    def get_or_load(self, key: str, loader: Callable[[], Any], ttl: int = CACHE_TTL_SECONDS) -> Any:
        """Return the cached value for key, computing and storing it on a miss"""
        cached_value = self.get(key)
        if cached_value is not None:
            return cached_value

        result = loader()
        if result is not None:
            self.set(key, result, ttl)
        return result


# Global cache instance
cache = Cache()


# Cache key builders. Exact keys carry an id; the others are prefixes
# that broader-scoped queries extend (e.g. "snapshot:3:2024-06-10").

def booking_info_key(booking_id: int) -> str:
    return f"booking-info:{booking_id}"


def booking_instances_key(booking_id: int) -> str:
    return f"booking-instances:{booking_id}"


BOOKING_SERIES_PREFIX = "booking-series:"
SNAPSHOT_PREFIX = "snapshot:"
CAPACITY_SCHEDULES_PREFIX = "capacity-schedules:"
DEFAULT_PLATFORMS_PREFIX = "default-platforms:"
OVERRIDES_PREFIX = "period-type-overrides:"


def capacity_schedules_key(side_id: int) -> str:
    return f"{CAPACITY_SCHEDULES_PREFIX}{side_id}"


def snapshot_key(side_id: int, week_start: date) -> str:
    return f"{SNAPSHOT_PREFIX}{side_id}:{week_start.isoformat()}"


@dataclass(frozen=True)
class ChangeEvent:
    """Entity `entity_id` of kind `kind` changed"""

    kind: str
    entity_id: Optional[int] = None


BOOKING = "booking"
CAPACITY_SCHEDULE = "capacity_schedule"
PERIOD_TYPE_DEFAULT = "period_type_default"
PERIOD_TYPE_OVERRIDE = "period_type_override"


@dataclass(frozen=True)
class InvalidationTargets:
    exact: tuple[str, ...] = ()
    prefixes: tuple[str, ...] = ()


def invalidation_targets(event: ChangeEvent) -> InvalidationTargets:
    """Cached views made stale by an event"""
    if event.kind == BOOKING:
        exact = ()
        if event.entity_id is not None:
            exact = (booking_info_key(event.entity_id), booking_instances_key(event.entity_id))
        return InvalidationTargets(exact=exact, prefixes=(BOOKING_SERIES_PREFIX, SNAPSHOT_PREFIX))
    if event.kind == CAPACITY_SCHEDULE:
        return InvalidationTargets(prefixes=(CAPACITY_SCHEDULES_PREFIX, SNAPSHOT_PREFIX))
    if event.kind == PERIOD_TYPE_DEFAULT:
        return InvalidationTargets(prefixes=(DEFAULT_PLATFORMS_PREFIX,))
    if event.kind == PERIOD_TYPE_OVERRIDE:
        return InvalidationTargets(prefixes=(OVERRIDES_PREFIX, SNAPSHOT_PREFIX))
    return InvalidationTargets()


class ChangeBus:
    """In-process publish/subscribe for change events"""

    def __init__(self):
        self._subscribers: list[Callable[[ChangeEvent], None]] = []

    def subscribe(self, handler: Callable[[ChangeEvent], None]) -> None:
        self._subscribers.append(handler)

    def unsubscribe(self, handler: Callable[[ChangeEvent], None]) -> None:
        if handler in self._subscribers:
            self._subscribers.remove(handler)

    def publish(self, event: ChangeEvent) -> None:
        # Subscribers run after the mutation has committed; their failures
        # are secondary and must not fail the request.
        for handler in list(self._subscribers):
            try:
                handler(event)
            except Exception as e:
                logger.error(f"❌ Change subscriber failed for {event}: {e}")


class QueryCacheInvalidator:
    """Drops cached query results when a change event arrives"""

    def __init__(self, cache_backend: Cache):
        self.cache = cache_backend

    def __call__(self, event: ChangeEvent) -> None:
        targets = invalidation_targets(event)
        for key in targets.exact:
            self.cache.delete(key)
        for prefix in targets.prefixes:
            self.cache.delete_prefix(prefix)
        logger.info(f"🧹 Invalidated cache for {event.kind}:{event.entity_id}")


change_bus = ChangeBus()
change_bus.subscribe(QueryCacheInvalidator(cache))


def publish_change(kind: str, entity_id: Optional[int] = None) -> None:
    change_bus.publish(ChangeEvent(kind=kind, entity_id=entity_id))
