"""Fixed-window request rate limiting for individual routes."""

import math
import time
from dataclasses import dataclass, field

from limits import RateLimitItem, RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage
from limits.strategies import FixedWindowRateLimiter

from mood_journal.domain.errors import RateLimited


@dataclass(frozen=True)
class RateLimitPolicy:
    """At most ``limit`` requests per ``window_seconds`` for one client."""

    name: str
    limit: int
    window_seconds: int
    message: str

    @property
    def item(self) -> RateLimitItem:
        return RateLimitItemPerSecond(self.limit, self.window_seconds)


CREATE_ENTRY_POLICY = RateLimitPolicy(
    name="create-entry",
    limit=1,
    window_seconds=30,
    message="Too many new entries, please wait before creating again.",
)
EDIT_ENTRY_POLICY = RateLimitPolicy(
    name="edit-entry",
    limit=3,
    window_seconds=60,
    message="Too many edit requests, slow down.",
)
UPLOAD_POLICY = RateLimitPolicy(
    name="upload",
    limit=2,
    window_seconds=15,
    message="Too many image uploads, please wait.",
)


@dataclass
class RequestRateLimiter:
    """Fixed-window counters shared by all requests of a process.

    Counters live in a ``limits`` storage; the in-memory one expires keys once
    their window has passed.
    """

    enabled: bool = True
    storage: Storage = field(default_factory=MemoryStorage)

    def __post_init__(self) -> None:
        self._strategy = FixedWindowRateLimiter(self.storage)

    def hit(self, policy: RateLimitPolicy, client_key: str) -> None:
        """Count a request, raising ``RateLimited`` when the policy is exceeded."""
        if not self.enabled:
            return
        if self._strategy.hit(policy.item, policy.name, client_key):
            return
        stats = self._strategy.get_window_stats(policy.item, policy.name, client_key)
        raise RateLimited(
            policy.message,
            retry_after_seconds=max(1, math.ceil(stats.reset_time - time.time())),
        )
