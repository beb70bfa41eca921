import json
import logging
from typing import Any, Callable, Optional

import redis
from redis.exceptions import RedisError

from app.core.config import settings


logger = logging.getLogger(__name__)

_client: Optional[redis.Redis] = None


def get_redis() -> redis.Redis:
    global _client
    if _client is None:
        _client = redis.from_url(settings.redis_url, decode_responses=True)
    return _client


def weather_cache_key(*, location: str | None = None, lat: float | None = None, lon: float | None = None) -> str:
    if location is not None:
        return f"weather:q:{location.strip().lower()}"
    return f"weather:ll:{lat:.4f},{lon:.4f}"


def cached_json(key: str, ttl_seconds: int, loader: Callable[[], Any]):
    """Return the cached JSON value for `key`, or call `loader` and store its result.

    Redis being unreachable is not an error: the loader runs uncached. Exceptions
    raised by the loader propagate and nothing is stored.
    """
    if not settings.weather_cache_enabled or ttl_seconds <= 0:
        return loader()

    r = get_redis()
    try:
        cached = r.get(key)
    except RedisError as exc:
        logger.debug("Cache read failed for %s: %s", key, exc)
        cached = None
    if cached is not None:
        try:
            decoded = json.loads(cached)
            if decoded is not None:
                return decoded
        except json.JSONDecodeError:
            pass
    data = loader()
    if data is not None:
        try:
            r.setex(key, ttl_seconds, json.dumps(data, ensure_ascii=False))
        except RedisError as exc:
            logger.debug("Cache write failed for %s: %s", key, exc)
    return data
