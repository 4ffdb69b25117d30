"""Result cache used by :class:`quran_roots.search.RootSearchService`."""
from __future__ import annotations

import threading
import time
from typing import Any, Callable, Dict, Optional, Protocol, Tuple


class Cache(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any, ttl: float) -> None: ...


class TTLCache:
    """Small in-process cache whose entries expire *ttl* seconds after ``set``.

    ``maxsize`` bounds memory: when full, expired entries are purged first,
    then the oldest insertion is evicted.
    """

    def __init__(self, maxsize: int = 512,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.maxsize = maxsize
        self._clock = clock
        self._data: Dict[str, Tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            item = self._data.get(key)
            if item is None:
                return None
            expires, value = item
            if expires <= self._clock():
                del self._data[key]
                return None
            return value

    def set(self, key: str, value: Any, ttl: float) -> None:
        with self._lock:
            now = self._clock()
            self._data.pop(key, None)
            if len(self._data) >= self.maxsize:
                for k in [k for k, (exp, _) in self._data.items() if exp <= now]:
                    del self._data[k]
            while self._data and len(self._data) >= self.maxsize:
                del self._data[next(iter(self._data))]
            self._data[key] = (now + ttl, value)

    def __len__(self) -> int:
        return len(self._data)
