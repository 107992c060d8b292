"""Login attempt throttling.

Each client key moves through three states: ``CLEAR`` (no record),
``WARMING`` (some failures below the threshold) and ``LOCKED`` (threshold
reached). While locked, attempts are rejected. Once the lockout window since
the last failure has elapsed, the record is evicted in either state and the
next attempt is evaluated as if the client were new.

State lives in an injected store for the lifetime of the process only.
"""

import logging
import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from mood_journal.domain.errors import RateLimited

logger = logging.getLogger(__name__)


class ThrottleState(str, Enum):
    """Per-client lockout state."""

    CLEAR = "clear"
    WARMING = "warming"
    LOCKED = "locked"


@dataclass(frozen=True)
class LoginAttempt:
    """Failure count and time of the most recent failure for one client."""

    count: int
    last_failure: float


class LoginAttemptStore(Protocol):
    """Shared, mutation-synchronized storage for login attempt records."""

    def get(self, key: str) -> LoginAttempt | None:
        """Return the record for a key, if present."""

    def increment(self, key: str, now: float) -> LoginAttempt:
        """Atomically add one failure for a key and return the new record."""

    def clear(self, key: str) -> None:
        """Delete the record for a key."""

    def clear_if_stale(self, key: str, stale_before: float) -> bool:
        """Delete the record if its last failure is older than a cutoff."""


@dataclass
class InMemoryLoginAttemptStore(LoginAttemptStore):
    """Process-local attempt store guarded by a lock."""

    _records: dict[str, LoginAttempt] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    def get(self, key: str) -> LoginAttempt | None:
        """Return the record for a key, if present."""
        with self._lock:
            return self._records.get(key)

    def increment(self, key: str, now: float) -> LoginAttempt:
        """Add one failure and stamp the current time."""
        with self._lock:
            current = self._records.get(key)
            count = current.count + 1 if current else 1
            record = LoginAttempt(count=count, last_failure=now)
            self._records[key] = record
            return record

    def clear(self, key: str) -> None:
        """Delete the record for a key."""
        with self._lock:
            self._records.pop(key, None)

    def clear_if_stale(self, key: str, stale_before: float) -> bool:
        """Delete the record when its last failure predates the cutoff."""
        with self._lock:
            current = self._records.get(key)
            if current is None or current.last_failure > stale_before:
                return False
            del self._records[key]
            return True


@dataclass
class LoginThrottle:
    """Failure counter with a lockout window, keyed by client address."""

    store: LoginAttemptStore
    max_attempts: int = 5
    lockout_seconds: float = 5 * 60
    clock: Callable[[], float] = time.monotonic

    def state(self, key: str) -> ThrottleState:
        """Return the current state for a client key."""
        record = self.store.get(key)
        if record is None:
            return ThrottleState.CLEAR
        if self.clock() - record.last_failure >= self.lockout_seconds:
            return ThrottleState.CLEAR
        if record.count < self.max_attempts:
            return ThrottleState.WARMING
        return ThrottleState.LOCKED

    def check(self, key: str) -> None:
        """Reject the attempt while the key is locked out.

        A record whose last failure is older than the lockout window is
        evicted, so the attempt proceeds as a fresh one.
        """
        record = self.store.get(key)
        if record is None:
            return
        now = self.clock()
        elapsed = now - record.last_failure
        if elapsed >= self.lockout_seconds:
            self.store.clear_if_stale(key, now - self.lockout_seconds)
            return
        if record.count >= self.max_attempts:
            remaining_ms = (self.lockout_seconds - elapsed) * 1000
            minutes_left = math.ceil(remaining_ms / 60000)
            logger.warning(
                "Login attempt rejected during lockout", extra={"client": key}
            )
            raise RateLimited(
                f"Too many login attempts. Try again in {minutes_left} minutes.",
                retry_after_seconds=math.ceil(remaining_ms / 1000),
            )

    def record_failure(self, key: str) -> LoginAttempt:
        """Count a failed credential check."""
        record = self.store.increment(key, self.clock())
        if record.count == self.max_attempts:
            logger.warning(
                "Client locked out after failed logins", extra={"client": key}
            )
        return record

    def record_success(self, key: str) -> None:
        """Forget all failures for a key after a successful login."""
        self.store.clear(key)
