"""Content-based image type detection."""

import logging
from dataclasses import dataclass
from pathlib import Path

import filetype
from PIL import Image, UnidentifiedImageError

from mood_journal.domain.errors import InvalidMedia
from mood_journal.domain.media import ALLOWED_IMAGE_MIMES, SniffResult

logger = logging.getLogger(__name__)

_PIL_FORMAT_BY_MIME = {
    "image/jpeg": "JPEG",
    "image/png": "PNG",
    "image/gif": "GIF",
    "image/webp": "WEBP",
}


def is_allowed_declared_type(content_type: str | None) -> bool:
    """Cheap intake filter on the client-declared content type.

    Only used to reject obviously wrong uploads early; ``ContentSniffer`` is
    the authoritative check.
    """
    if not content_type:
        return False
    return content_type.split(";")[0].strip().lower() in ALLOWED_IMAGE_MIMES


@dataclass
class ContentSniffer:
    """Decides the true media type of a file from its bytes."""

    allowed: dict[str, str] | None = None
    max_pixels: int = 36_000_000

    def sniff(self, path: Path) -> SniffResult:
        """Return the verified type of an image file or raise ``InvalidMedia``."""
        allowed = self.allowed or ALLOWED_IMAGE_MIMES
        kind = filetype.guess(str(path))
        if kind is None or kind.mime not in allowed:
            logger.info(
                "Rejected upload with disallowed content",
                extra={"detected": kind.mime if kind else None},
            )
            raise InvalidMedia("Invalid file type")
        try:
            with Image.open(path) as image:
                width, height = image.size
                if width * height > self.max_pixels:
                    logger.info(
                        "Rejected oversized image",
                        extra={"width": width, "height": height},
                    )
                    raise InvalidMedia("Image dimensions too large")
                image.verify()
            # verify() leaves the image unusable, so decode from a fresh handle.
            with Image.open(path) as image:
                decoded_format = image.format
                image.load()
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            EOFError,
            OSError,
            SyntaxError,
            ValueError,
        ) as exc:
            logger.info("Rejected corrupt image upload", extra={"error": str(exc)})
            raise InvalidMedia("Corrupted or invalid image") from exc
        if decoded_format != _PIL_FORMAT_BY_MIME.get(kind.mime):
            raise InvalidMedia("Corrupted or invalid image")
        return SniffResult(mime=kind.mime, extension=allowed[kind.mime])
