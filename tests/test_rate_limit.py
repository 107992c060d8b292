"""Tests for per-route request rate limiting."""

import time

import pytest
from limits.storage import MemoryStorage

from mood_journal.domain.errors import RateLimited
from mood_journal.services.rate_limit import (
    EDIT_ENTRY_POLICY,
    UPLOAD_POLICY,
    RateLimitPolicy,
    RequestRateLimiter,
)


def test_policy_limit_is_enforced_within_window() -> None:
    limiter = RequestRateLimiter()
    for _ in range(EDIT_ENTRY_POLICY.limit):
        limiter.hit(EDIT_ENTRY_POLICY, "client")

    with pytest.raises(RateLimited) as exc_info:
        limiter.hit(EDIT_ENTRY_POLICY, "client")

    assert exc_info.value.message == EDIT_ENTRY_POLICY.message
    assert 1 <= exc_info.value.retry_after_seconds <= 60


def test_window_resets_after_it_elapses() -> None:
    policy = RateLimitPolicy(name="short", limit=1, window_seconds=1, message="wait")
    limiter = RequestRateLimiter()
    limiter.hit(policy, "client")
    with pytest.raises(RateLimited):
        limiter.hit(policy, "client")

    time.sleep(1.2)

    limiter.hit(policy, "client")


def test_policies_and_clients_are_independent() -> None:
    limiter = RequestRateLimiter()
    limiter.hit(UPLOAD_POLICY, "client")
    limiter.hit(UPLOAD_POLICY, "client")

    limiter.hit(UPLOAD_POLICY, "other-client")
    limiter.hit(EDIT_ENTRY_POLICY, "client")


def test_limiters_sharing_storage_share_counters() -> None:
    storage = MemoryStorage()
    RequestRateLimiter(storage=storage).hit(UPLOAD_POLICY, "client")
    RequestRateLimiter(storage=storage).hit(UPLOAD_POLICY, "client")

    with pytest.raises(RateLimited):
        RequestRateLimiter(storage=storage).hit(UPLOAD_POLICY, "client")


def test_disabled_limiter_allows_everything() -> None:
    limiter = RequestRateLimiter(enabled=False)

    for _ in range(10):
        limiter.hit(UPLOAD_POLICY, "client")
