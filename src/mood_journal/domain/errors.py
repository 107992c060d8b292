"""Error taxonomy surfaced to API clients."""

from http import HTTPStatus


class MoodJournalError(Exception):
    """Base class for errors with a client-facing message and status."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class AuthError(MoodJournalError):
    """Authentication failed or credentials were not supplied."""

    status_code = HTTPStatus.FORBIDDEN


class MissingToken(AuthError):
    """No bearer token on a protected request."""

    status_code = HTTPStatus.UNAUTHORIZED

    def __init__(self, message: str = "No token provided") -> None:
        super().__init__(message)


class InvalidSignature(AuthError):
    """Token signature does not verify."""


class TokenExpired(AuthError):
    """Token is past its expiry."""


class MalformedToken(AuthError):
    """Token cannot be parsed or lacks required claims."""


class ValidationError(MoodJournalError):
    """Client input is missing or invalid."""

    status_code = HTTPStatus.BAD_REQUEST


class DuplicateAccountError(ValidationError):
    """A uniqueness constraint on the users table fired."""

    def __init__(self, field: str) -> None:
        messages = {
            "username": "Username already taken",
            "email": "Email already registered",
        }
        super().__init__(messages.get(field, "Account already exists"))
        self.field = field


class RateLimited(MoodJournalError):
    """Too many requests from one client."""

    status_code = HTTPStatus.TOO_MANY_REQUESTS

    def __init__(self, message: str, retry_after_seconds: int) -> None:
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class InvalidMedia(MoodJournalError):
    """Uploaded file is not an accepted, well-formed image."""

    status_code = HTTPStatus.BAD_REQUEST


class MediaTooLarge(InvalidMedia):
    """Uploaded file exceeds the configured size cap."""

    status_code = HTTPStatus.REQUEST_ENTITY_TOO_LARGE


class PersistenceError(MoodJournalError):
    """The database could not record a change."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR


class NotFound(MoodJournalError):
    """Requested entry or file does not exist."""

    status_code = HTTPStatus.NOT_FOUND


class Forbidden(MoodJournalError):
    """Caller does not own the requested resource."""

    status_code = HTTPStatus.FORBIDDEN

    def __init__(self, message: str = "Forbidden") -> None:
        super().__init__(message)
