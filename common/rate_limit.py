# common/rate_limit.py
import threading
import time
from typing import Callable, Dict, Hashable, List, Optional


class SlidingWindowLimiter:
    """
    In-memory sliding-window counter: at most ``max_requests`` hits per key
    within the last ``window_seconds``.

    Keys whose window has emptied are dropped on the next sweep, so the table
    only holds clients seen during the current window. All access goes through
    one lock because FastAPI runs sync dependencies in a thread pool.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float = 60,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock or time.monotonic
        self._hits: Dict[Hashable, List[float]] = {}
        self._lock = threading.Lock()

    def hit(self, key: Hashable) -> bool:
        """
        Record a request for ``key``. Return False, without recording it,
        when the key is already at its limit.
        """
        now = self._clock()
        window_start = now - self.window_seconds
        with self._lock:
            self._sweep(window_start)
            timestamps = self._hits.get(key, [])
            if len(timestamps) >= self.max_requests:
                return False
            timestamps.append(now)
            self._hits[key] = timestamps
            return True

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._hits)

    def reset(self) -> None:
        with self._lock:
            self._hits.clear()

    def _sweep(self, window_start: float) -> None:
        for key in list(self._hits):
            kept = [ts for ts in self._hits[key] if ts >= window_start]
            if kept:
                self._hits[key] = kept
            else:
                del self._hits[key]
