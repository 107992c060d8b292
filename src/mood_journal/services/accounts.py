"""Registration and login."""

import logging
from dataclasses import dataclass
from typing import Protocol

from mood_journal.domain.errors import ValidationError
from mood_journal.domain.models import UserRecord
from mood_journal.services.passwords import MAX_PASSWORD_BYTES, CredentialVerifier
from mood_journal.services.throttle import LoginThrottle
from mood_journal.services.tokens import TokenService

logger = logging.getLogger(__name__)


class UserRepository(Protocol):
    """Persistence interface for user accounts."""

    def create_user(self, username: str, email: str, password_hash: str) -> UserRecord:
        """Create a user; raise ``DuplicateAccountError`` on a taken field."""

    def get_by_username(self, username: str) -> UserRecord | None:
        """Return the user with a username, if present."""


@dataclass(frozen=True)
class AuthSession:
    """Token handed to a client along with its public profile."""

    token: str
    user: UserRecord

    def to_payload(self) -> dict[str, object]:
        """Serialize for API responses."""
        return {"token": self.token, "user": self.user.public()}


@dataclass
class AccountService:
    """Application service for account creation and credential checks."""

    repository: UserRepository
    verifier: CredentialVerifier
    tokens: TokenService
    throttle: LoginThrottle

    def register(
        self, username: str | None, email: str | None, password: str | None
    ) -> AuthSession:
        """Create an account and sign the new user in."""
        if not username or not email or not password:
            raise ValidationError("Username, email and password required")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError("Password is too long")
        user = self.repository.create_user(
            username=username,
            email=email,
            password_hash=self.verifier.hash(password),
        )
        logger.info("Registered user", extra={"user_id": user.id})
        return AuthSession(token=self.tokens.issue(user.id, user.username), user=user)

    def login(
        self, client_key: str, username: str | None, password: str | None
    ) -> AuthSession:
        """Check credentials behind the login throttle and issue a token."""
        if not username or not password:
            raise ValidationError("Username and password required")
        self.throttle.check(client_key)

        user = self.repository.get_by_username(username)
        if user is None or not self.verifier.verify(password, user.password_hash):
            self.throttle.record_failure(client_key)
            logger.info("Failed login", extra={"client": client_key})
            raise ValidationError("Invalid credentials")

        self.throttle.record_success(client_key)
        return AuthSession(token=self.tokens.issue(user.id, user.username), user=user)
