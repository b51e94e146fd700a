"""Short-lived cache of resolved principals, keyed by user id."""

import threading
import time
from collections import OrderedDict
from collections.abc import Callable

from app.services.authorization import Principal


class PrincipalCache:
    """
    TTL + LRU bounded cache. A ttl of 0 disables it, so every request reads
    the store and role changes apply on the next request.
    """

    def __init__(
        self,
        ttl_seconds: float = 0.0,
        maxsize: int = 4096,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl_seconds
        self.maxsize = maxsize
        self._clock = clock
        self._lock = threading.RLock()
        self._data: OrderedDict[int, tuple[float, Principal]] = OrderedDict()

    @property
    def enabled(self) -> bool:
        return self.ttl > 0

    def get(self, user_id: int) -> Principal | None:
        if not self.enabled:
            return None
        now = self._clock()
        with self._lock:
            item = self._data.get(user_id)
            if item is None:
                return None
            stored_at, principal = item
            if now - stored_at >= self.ttl:
                self._data.pop(user_id, None)
                return None
            self._data.move_to_end(user_id)
            return principal

    def put(self, principal: Principal) -> None:
        if not self.enabled:
            return
        with self._lock:
            self._data[principal.user_id] = (self._clock(), principal)
            self._data.move_to_end(principal.user_id)
            while len(self._data) > self.maxsize:
                self._data.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
