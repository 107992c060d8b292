"""Signed session tokens."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt

from mood_journal.domain.errors import InvalidSignature, MalformedToken, TokenExpired


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried by a session token."""

    user_id: int
    username: str
    issued_at: datetime
    expires_at: datetime


@dataclass
class TokenService:
    """Issues and validates HMAC-signed JWT session tokens."""

    secret: str
    algorithm: str = "HS256"
    expires_in: timedelta = timedelta(hours=1)

    def issue(self, user_id: int, username: str) -> str:
        """Return a signed token for the user."""
        now = datetime.now(tz=UTC)
        payload = {
            "sub": str(user_id),
            "username": username,
            "iat": now,
            "exp": now + self.expires_in,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def validate(self, token: str) -> TokenClaims:
        """Return the claims of a valid token or raise an AuthError subtype."""
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "iat", "exp"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired("Token expired") from exc
        except jwt.InvalidSignatureError as exc:
            raise InvalidSignature("Invalid token") from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedToken("Invalid token") from exc
        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError) as exc:
            raise MalformedToken("Invalid token") from exc
        return TokenClaims(
            user_id=user_id,
            username=str(payload.get("username", "")),
            issued_at=datetime.fromtimestamp(payload["iat"], tz=UTC),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=UTC),
        )
