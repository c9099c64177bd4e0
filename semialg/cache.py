"""Bounded LRU memo shared by root isolation and projection.

Values must be immutable (tuples, frozensets): they are published once under
the lock and handed to every reader. Two threads missing on the same key may
both compute it; the second store simply overwrites an equal value.
"""

import logging
import threading
from collections import OrderedDict
from dataclasses import dataclass

logger = logging.getLogger(__name__)

REPORT_EVERY = 100000


@dataclass(frozen=True)
class CacheStats:
    name: str
    size: int
    capacity: int
    requests: int
    hits: int

    @property
    def hit_rate(self) -> float:
        return self.hits / self.requests if self.requests else 0.0


class LRUCache:

    def __init__(self, capacity: int, name: str = "cache"):
        if capacity <= 0:
            raise ValueError(f"Cache capacity must be positive, got {capacity}")
        self.capacity = capacity
        self.name = name
        self._map: OrderedDict = OrderedDict()
        self._lock = threading.Lock()
        self._requests = 0
        self._hits = 0

    def get(self, key):
        with self._lock:
            self._requests += 1
            value = self._map.get(key)
            if value is not None:
                self._hits += 1
                self._map.move_to_end(key)
            if self._requests % REPORT_EVERY == 0:
                logger.debug("%s hit rate %d / %d", self.name, self._hits, self._requests)
            return value

    def set(self, key, value):
        with self._lock:
            if key in self._map:
                self._map.move_to_end(key)
            elif len(self._map) >= self.capacity:
                self._map.popitem(last=False)
            self._map[key] = value

    def get_or_compute(self, key, compute):
        value = self.get(key)
        if value is None:
            # computed outside the lock; sympy calls can take a while
            value = compute()
            self.set(key, value)
        return value

    def clear(self):
        with self._lock:
            self._map.clear()

    def stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(self.name, len(self._map), self.capacity, self._requests, self._hits)

    def __len__(self):
        return len(self._map)

    def __contains__(self, key):
        return key in self._map
