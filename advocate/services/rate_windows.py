"""
Rate windows shared through Redis.

Each window is a sorted set scored by timestamp, so pruning is a single
``ZREMRANGEBYSCORE``. The per-key lock is a Redis lock, which serializes
checks on the same key across every instance that talks to the same Redis.
"""

import logging
import math
from typing import ContextManager, Optional

import redis
from flask import current_app

from ..auth.ratelimit import RateWindowStore, Window

logger = logging.getLogger(__name__)


class RateWindowStoreUnavailable(IOError):
    """Could not read or write a rate window."""


class RedisRateWindowStore(RateWindowStore):
    """
    Manages a connection to Redis.

    The StrictRedis instance is thread safe and connections are attached at
    the time a command is executed. This class simply provides a container
    for configuration.
    """

    def __init__(self, host: str, port: int, db: int, ttl: int = 15 * 60,
                 prefix: str = 'ratewindow', lock_timeout: float = 5.0,
                 connection: Optional[redis.StrictRedis] = None) -> None:
        """Open the connection to Redis."""
        logger.debug('New Redis connection at %s, port %s', host, port)
        if connection is None:
            connection = redis.StrictRedis(host=host, port=port, db=db)
        self.r = connection
        self._ttl = ttl
        self._prefix = prefix
        self._lock_timeout = lock_timeout

    def _key(self, key: str) -> str:
        return f'{self._prefix}:{key}'

    def get(self, key: str) -> Window:
        try:
            entries = self.r.zrange(self._key(key), 0, -1, withscores=True)
        except redis.exceptions.ConnectionError as e:
            raise RateWindowStoreUnavailable(f'Connection failed: {e}') from e
        return [float(score) for _, score in entries]

    def put(self, key: str, window: Window,
            ttl: Optional[float] = None) -> None:
        name = self._key(key)
        expiry = math.ceil(ttl) if ttl else self._ttl
        try:
            pipe = self.r.pipeline()
            pipe.delete(name)
            if window:
                pipe.zadd(name, {f'{i}:{ts}': ts
                                 for i, ts in enumerate(window)})
                pipe.expire(name, expiry)
            pipe.execute()
        except redis.exceptions.ConnectionError as e:
            raise RateWindowStoreUnavailable(f'Connection failed: {e}') from e

    def prune(self, key: str, cutoff: float) -> Window:
        try:
            self.r.zremrangebyscore(self._key(key), '-inf', cutoff)
        except redis.exceptions.ConnectionError as e:
            raise RateWindowStoreUnavailable(f'Connection failed: {e}') from e
        return self.get(key)

    def lock(self, key: str) -> ContextManager:
        return self.r.lock(f'{self._key(key)}:lock',
                           timeout=self._lock_timeout,
                           blocking_timeout=self._lock_timeout)


def init_app(app: object = None) -> None:
    """Set default configuration parameters for an application instance."""
    config = app.config if app is not None else current_app.config
    config.setdefault('REDIS_HOST', 'localhost')
    config.setdefault('REDIS_PORT', '6379')
    config.setdefault('REDIS_DATABASE', '0')


def get_store(app: object = None,
              ttl: Optional[int] = None) -> RedisRateWindowStore:
    """Get a new Redis rate window store from application config."""
    config = app.config if app is not None else current_app.config
    host = config.get('REDIS_HOST', 'localhost')
    port = int(config.get('REDIS_PORT', '6379'))
    db = int(config.get('REDIS_DATABASE', '0'))
    if ttl is None:
        ttl = int(config.get('USER_RATE_LIMIT_WINDOW', 15 * 60))
    return RedisRateWindowStore(host, port, db, ttl=ttl)
