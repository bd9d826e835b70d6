# calculon/core/rate_limit.py
import time
from typing import Union

from calculon.config import MAX_EXPENSES_PER_MINUTE, RATE_LIMIT_DURATION


def now_ms() -> float:
    return time.time() * 1000


class RateLimiter:
    """
    Fixed-window counter. Allows `max_attempts` per `window_ms`.

    The window restarts on the first attempt after it has elapsed, so up to
    twice the cap can get through around a window boundary.
    """

    def __init__(self, window_ms: int = RATE_LIMIT_DURATION,
                 max_attempts: int = MAX_EXPENSES_PER_MINUTE):
        self.window_ms = window_ms
        self.max_attempts = max_attempts
        self.count = 0
        self.window_start = 0.0

    def allows(self, now: Union[float, None] = None) -> bool:
        """Restarts an elapsed window and tells whether one more attempt fits."""
        if now is None:
            now = now_ms()

        if now - self.window_start > self.window_ms:
            self.count = 0
            self.window_start = now

        return self.count < self.max_attempts

    def record(self) -> None:
        self.count += 1

    def attempt(self, now: Union[float, None] = None) -> bool:
        """Returns True and counts the attempt if allowed, False otherwise."""
        if not self.allows(now):
            return False
        self.record()
        return True
