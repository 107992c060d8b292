"""Stored media layout and ownership checks."""

import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from uuid import uuid4

from mood_journal.domain.errors import Forbidden, NotFound
from mood_journal.domain.media import MIME_BY_EXTENSION, AccessDecision

logger = logging.getLogger(__name__)


def is_bare_filename(filename: str) -> bool:
    """Return true when the name cannot escape its directory."""
    if not filename or filename in {".", ".."}:
        return False
    if "/" in filename or "\\" in filename or "\x00" in filename:
        return False
    return ".." not in filename


def media_type_for(filename: str) -> str:
    """Return the content type implied by a stored file's extension."""
    suffix = Path(filename).suffix.lower()
    return MIME_BY_EXTENSION.get(suffix, "application/octet-stream")


@dataclass(frozen=True)
class AccessGuard:
    """Authorizes media reads from the owner prefix in the filename.

    Ownership is fixed at upload time, so no database lookup is needed.
    """

    def authorize(self, caller_id: int, filename: str) -> AccessDecision:
        """Return whether the caller owns the named file."""
        if is_bare_filename(filename) and filename.startswith(f"{caller_id}_"):
            return AccessDecision.ALLOWED
        return AccessDecision.FORBIDDEN

    def ensure_allowed(self, caller_id: int, filename: str) -> None:
        """Raise ``Forbidden`` unless the caller owns the named file."""
        if self.authorize(caller_id, filename) is AccessDecision.FORBIDDEN:
            logger.warning(
                "Denied access to media",
                extra={"user_id": caller_id, "media_file": filename},
            )
            raise Forbidden()


@dataclass
class MediaStorage:
    """Filesystem operations confined to the upload directory."""

    upload_dir: Path

    def __post_init__(self) -> None:
        self.upload_dir = Path(self.upload_dir).resolve()

    def ensure_directory(self) -> None:
        """Create the upload directory if it is missing."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def new_filename(self, owner_id: int, extension: str) -> str:
        """Return an unguessable name carrying the owner prefix."""
        return f"{owner_id}_{uuid4().hex}.{extension}"

    def path_for(self, filename: str) -> Path:
        """Resolve a stored filename to its path inside the upload directory."""
        if not is_bare_filename(filename):
            raise NotFound("File not found")
        path = (self.upload_dir / filename).resolve()
        if path.parent != self.upload_dir:
            raise NotFound("File not found")
        return path

    def exists(self, filename: str) -> bool:
        """Return true when the stored file is present."""
        try:
            return self.path_for(filename).is_file()
        except NotFound:
            return False

    def place(self, source: Path, filename: str) -> Path:
        """Copy a temp file into storage, flush it to disk, then drop the temp.

        A crash between copy and unlink leaves a duplicate, never a loss.
        """
        self.ensure_directory()
        destination = self.path_for(filename)
        try:
            shutil.copyfile(source, destination)
            with destination.open("rb") as handle:
                os.fsync(handle.fileno())
        except OSError:
            destination.unlink(missing_ok=True)
            raise
        Path(source).unlink(missing_ok=True)
        return destination

    def delete(self, filename: str) -> bool:
        """Remove a stored file; return false when it was already gone."""
        path = self.path_for(filename)
        if not path.exists():
            return False
        path.unlink()
        return True
