import logging
from typing import Optional

import redis

from app.config import settings
from app.services.reports import CacheFiller

logger = logging.getLogger(__name__)

_client: Optional[redis.Redis] = None


def make_redis(url: str, timeout: Optional[float] = None) -> redis.Redis:
    """Create a Redis client; `timeout` bounds connect and socket operations."""
    return redis.from_url(
        url,
        decode_responses=True,
        socket_connect_timeout=timeout,
        socket_timeout=timeout,
        health_check_interval=30,
    )


def get_redis() -> redis.Redis:
    """Process-wide Redis client used for cache reads."""
    global _client
    if _client is None:
        _client = make_redis(settings.redis_url, timeout=1)
        logger.info(f"Redis client created for {settings.redis_url}")
    return _client


_filler: Optional[CacheFiller] = None


def get_cache_filler() -> CacheFiller:
    """Process-wide background filler, with its own time-bounded Redis client."""
    global _filler
    if _filler is None:
        _filler = CacheFiller(
            make_redis(settings.redis_url, timeout=settings.cache_fill_timeout),
            max_workers=settings.cache_fill_workers,
            max_pending=settings.cache_fill_max_pending,
            timeout=settings.cache_fill_timeout,
        )
    return _filler


def close_cache() -> None:
    global _client, _filler
    if _filler is not None:
        _filler.shutdown()
        _filler.client.close()
        _filler = None
    if _client is not None:
        _client.close()
        _client = None
