"""Mood entry use cases."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from mood_journal.domain.errors import NotFound, PersistenceError, ValidationError
from mood_journal.domain.models import MoodEntryRecord
from mood_journal.services.media import AccessGuard, MediaStorage

logger = logging.getLogger(__name__)


class EntryRepository(Protocol):
    """Persistence interface for mood entries."""

    def create_entry(
        self, user_id: int, description: str, mood: str, photo: str | None
    ) -> MoodEntryRecord:
        """Create an entry and return it."""

    def get_entry(self, entry_id: int, user_id: int) -> MoodEntryRecord | None:
        """Return an entry owned by the user, if present."""

    def get_latest_entry(self, user_id: int) -> MoodEntryRecord | None:
        """Return the most recently created entry for the user, if any."""

    def update_entry(
        self, entry_id: int, description: str, mood: str, photo: str | None
    ) -> MoodEntryRecord:
        """Overwrite an entry's fields and return the stored entry."""

    def set_photo(self, entry_id: int, photo: str) -> None:
        """Point an entry at a stored photo."""

    def photo_in_use(self, photo: str, exclude_entry_id: int | None = None) -> bool:
        """Return whether any other entry already points at a photo."""


def sanitize_text(value: str) -> str:
    """Escape angle brackets before persisting free text.

    Not a general HTML sanitizer; rich text would need a real one.
    """
    return value.replace("<", "&lt;").replace(">", "&gt;")


@dataclass
class MoodEntryService:
    """Create, edit and read a user's current mood entry."""

    repository: EntryRepository
    storage: MediaStorage
    guard: AccessGuard = field(default_factory=AccessGuard)

    def create(
        self,
        user_id: int,
        description: str | None,
        mood: str | None,
        photo_url: str | None = None,
    ) -> MoodEntryRecord:
        """Create a new entry, optionally attaching an uploaded photo."""
        if description is None or not mood:
            raise ValidationError("Description and mood required")
        photo = photo_url or None
        if photo is not None:
            self.guard.ensure_allowed(user_id, photo)
            if not self.storage.exists(photo):
                raise NotFound("Photo not found")
            self._ensure_unclaimed(photo)
        return self.repository.create_entry(
            user_id=user_id,
            description=sanitize_text(description),
            mood=mood,
            photo=photo,
        )

    def update(  # noqa: PLR0913
        self,
        user_id: int,
        entry_id: int,
        description: str | None,
        mood: str | None,
        photo_url: str | None = None,
    ) -> MoodEntryRecord:
        """Edit an owned entry.

        The database is updated before a replaced photo is deleted, so the
        stored pointer never references a missing file.
        """
        entry = self.repository.get_entry(entry_id, user_id)
        if entry is None:
            raise NotFound("Post not found")

        final_photo = entry.photo
        if photo_url and photo_url != entry.photo:
            self.guard.ensure_allowed(user_id, photo_url)
            if self.storage.exists(photo_url):
                self._ensure_unclaimed(photo_url, exclude_entry_id=entry.id)
                final_photo = photo_url
            else:
                logger.info(
                    "Requested photo missing, keeping current photo",
                    extra={"entry_id": entry_id},
                )

        try:
            updated = self.repository.update_entry(
                entry_id=entry.id,
                description=(
                    sanitize_text(description)
                    if description is not None
                    else entry.description
                ),
                mood=mood or entry.mood,
                photo=final_photo,
            )
        except Exception as exc:
            logger.exception("Failed to update entry", extra={"entry_id": entry.id})
            raise PersistenceError("Failed to update entry") from exc

        if entry.photo and entry.photo != final_photo:
            self._discard(entry.photo)
        return updated

    def get_current(self, user_id: int) -> MoodEntryRecord | None:
        """Return the user's most recent entry."""
        return self.repository.get_latest_entry(user_id)

    def _ensure_unclaimed(
        self, photo: str, exclude_entry_id: int | None = None
    ) -> None:
        # Each stored photo belongs to exactly one entry; replacing it deletes it.
        if self.repository.photo_in_use(photo, exclude_entry_id=exclude_entry_id):
            raise ValidationError("Photo already attached to another entry")

    def _discard(self, filename: str) -> None:
        try:
            self.storage.delete(filename)
        except (OSError, NotFound):
            logger.exception(
                "Failed to delete replaced photo", extra={"media_file": filename}
            )
