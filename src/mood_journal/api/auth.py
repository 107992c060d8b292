"""Account endpoints."""

from fastapi import APIRouter, Request

from mood_journal.api.dependencies import client_address, get_container
from mood_journal.api.schemas import LoginRequest, RegisterRequest

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register")
def register(payload: RegisterRequest, request: Request) -> dict[str, object]:
    """Create an account and return a session token."""
    session = get_container(request).account_service.register(
        payload.username, payload.email, payload.password
    )
    return session.to_payload()


@router.post("/login")
def login(payload: LoginRequest, request: Request) -> dict[str, object]:
    """Exchange credentials for a session token."""
    session = get_container(request).account_service.login(
        client_address(request), payload.username, payload.password
    )
    return session.to_payload()
