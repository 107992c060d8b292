"""Domain models for stored media."""

from dataclasses import dataclass
from enum import Enum

ALLOWED_IMAGE_MIMES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}

MIME_BY_EXTENSION: dict[str, str] = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


class AccessDecision(str, Enum):
    """Outcome of a media access check."""

    ALLOWED = "allowed"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class SniffResult:
    """True media type of an uploaded file, derived from its content."""

    mime: str
    extension: str


@dataclass(frozen=True)
class UploadResult:
    """Outcome of a successful upload reconciliation."""

    filename: str
    entry_id: int | None
    previous_filename: str | None = None
