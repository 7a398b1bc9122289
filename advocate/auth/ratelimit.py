"""
Sliding-window log rate limiting.

For each key (usually a user ID) we keep the timestamps of recently admitted
requests. On every check, timestamps that fell out of the trailing window are
pruned and the remainder is counted; if the count has reached the limit the
request is refused, otherwise its timestamp is appended. Unlike a fixed
window or token bucket this is exact, at the cost of keeping up to
``max_requests`` timestamps per active key.

Where the timestamps live is up to a :class:`RateWindowStore`.
:class:`InMemoryRateWindowStore` keeps them in the process, so each process
enforces its own budget and a restart clears it.
:class:`advocate.services.rate_windows.RedisRateWindowStore` shares them
between instances.

The read-prune-append sequence for a key must not interleave with another
check on the same key, or two concurrent requests could both see ``N`` and
both be admitted. Stores therefore hand out a per-key lock
(:meth:`RateWindowStore.lock`) that :class:`SlidingWindowLimiter` holds for
the whole sequence.
"""

from contextlib import contextmanager
import math
import threading
import time
from typing import Any, Callable, ContextManager, Dict, Iterator, List, \
    NamedTuple, Optional

Window = List[float]


class RateWindowStore(object):
    """Keyed storage for rate windows."""

    def get(self, key: str) -> Window:
        """Get the timestamps recorded for ``key``, oldest first."""
        raise NotImplementedError('Must be implemented by subclass')

    def put(self, key: str, window: Window,
            ttl: Optional[float] = None) -> None:
        """
        Replace the timestamps recorded for ``key``.

        ``ttl`` is how long, in seconds, the window stays relevant; stores
        that expire keys must keep it at least that long.
        """
        raise NotImplementedError('Must be implemented by subclass')

    def prune(self, key: str, cutoff: float) -> Window:
        """Drop timestamps at or before ``cutoff``; return what remains."""
        raise NotImplementedError('Must be implemented by subclass')

    def lock(self, key: str) -> ContextManager:
        """Get a context manager that serializes checks on ``key``."""
        raise NotImplementedError('Must be implemented by subclass')


class InMemoryRateWindowStore(RateWindowStore):
    """Rate windows held in process memory, one lock per key."""

    def __init__(self) -> None:
        self._windows: Dict[str, Window] = {}
        self._locks: Dict[str, List[Any]] = {}
        self._guard = threading.Lock()

    def get(self, key: str) -> Window:
        return list(self._windows.get(key, []))

    def put(self, key: str, window: Window,
            ttl: Optional[float] = None) -> None:
        if window:
            self._windows[key] = list(window)
        else:
            self._windows.pop(key, None)

    def prune(self, key: str, cutoff: float) -> Window:
        window = [ts for ts in self._windows.get(key, []) if ts > cutoff]
        self.put(key, window)
        return list(window)

    @contextmanager
    def lock(self, key: str) -> Iterator[None]:
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                # Locks live only as long as the window or a waiter does.
                if entry[1] == 0 and key not in self._windows:
                    del self._locks[key]

    def keys(self) -> List[str]:
        return list(self._windows)


class Decision(NamedTuple):
    """Outcome of a rate limit check."""

    allowed: bool
    remaining: int
    retry_after: int = 0
    """Seconds until the oldest request in the window expires."""


class SlidingWindowLimiter(object):
    """
    Admits at most ``max_requests`` per key in any trailing ``window``.

    Parameters
    ----------
    store : :class:`RateWindowStore`
    max_requests : int
    window : float
        Length of the trailing window, in seconds.
    clock : callable
        Returns the current time in seconds; :func:`time.time` by default.

    """

    def __init__(self, store: RateWindowStore, max_requests: int = 100,
                 window: float = 15 * 60,
                 clock: Callable[[], float] = time.time) -> None:
        if max_requests < 1:
            raise ValueError('max_requests must be at least 1')
        if window <= 0:
            raise ValueError('window must be positive')
        self.store = store
        self.max_requests = max_requests
        self.window = window
        self.clock = clock

    def check(self, key: str) -> Decision:
        """Admit or refuse one request for ``key``, recording it if admitted."""
        with self.store.lock(key):
            now = self.clock()
            recent = self.store.prune(key, now - self.window)
            if len(recent) >= self.max_requests:
                retry_after = math.ceil(recent[0] + self.window - now)
                return Decision(False, 0, max(retry_after, 0))
            recent.append(now)
            self.store.put(key, recent, ttl=self.window)
            return Decision(True, self.max_requests - len(recent))
