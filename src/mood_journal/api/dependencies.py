"""Request-scoped dependencies shared by the routers."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING

from fastapi import Depends, Header, Request

from mood_journal.domain.errors import MissingToken
from mood_journal.services.rate_limit import RateLimitPolicy
from mood_journal.services.tokens import TokenClaims

if TYPE_CHECKING:
    from mood_journal.containers import AppContainer


def get_container(request: Request) -> AppContainer:
    """Return the container attached to the running app."""
    return request.app.state.container


def client_address(request: Request) -> str:
    """Return the peer address used to key per-client counters.

    Forwarded headers are applied upstream by the proxy middleware, and only
    for trusted proxies.
    """
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


def require_user(
    request: Request,
    authorization: str | None = Header(default=None),
) -> TokenClaims:
    """Validate the bearer token before any other work on the request."""
    if not authorization:
        raise MissingToken()
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise MissingToken()
    return get_container(request).token_service.validate(token.strip())


def rate_limited(policy: RateLimitPolicy) -> Callable[..., TokenClaims]:
    """Build a dependency that authenticates, then applies a route policy."""

    def dependency(
        request: Request, claims: TokenClaims = Depends(require_user)
    ) -> TokenClaims:
        get_container(request).rate_limiter.hit(policy, client_address(request))
        return claims

    return dependency
