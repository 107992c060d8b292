"""Upload reconciliation between stored files and entry photo pointers."""

import logging
from dataclasses import dataclass
from pathlib import Path

from mood_journal.domain.errors import InvalidMedia, NotFound, PersistenceError
from mood_journal.domain.media import UploadResult
from mood_journal.services.entries import EntryRepository
from mood_journal.services.media import MediaStorage
from mood_journal.services.sniffer import ContentSniffer

logger = logging.getLogger(__name__)


@dataclass
class UploadReconciler:
    """Moves a verified upload into storage and repoints the owner's entry.

    Ordering: the file is fully placed before any pointer changes, and the
    pointer is updated before the previous file is removed. On a failed
    pointer update only the new file is rolled back.
    """

    sniffer: ContentSniffer
    storage: MediaStorage
    entries: EntryRepository

    def reconcile(
        self, owner_id: int, temp_path: Path, entry_id: int | None = None
    ) -> UploadResult:
        """Store an uploaded image for the owner and return its filename."""
        temp_path = Path(temp_path)
        try:
            sniffed = self.sniffer.sniff(temp_path)
        except InvalidMedia:
            temp_path.unlink(missing_ok=True)
            raise

        filename = self.storage.new_filename(owner_id, sniffed.extension)
        try:
            self.storage.place(temp_path, filename)
        except OSError as exc:
            temp_path.unlink(missing_ok=True)
            logger.exception("Failed to store upload", extra={"user_id": owner_id})
            raise PersistenceError("Failed to save photo") from exc

        try:
            if entry_id is not None:
                entry = self.entries.get_entry(entry_id, owner_id)
                if entry is None:
                    raise NotFound("Post not found")
            else:
                entry = self.entries.get_latest_entry(owner_id)
        except NotFound:
            self._rollback(filename)
            raise
        except Exception as exc:
            self._rollback(filename)
            logger.exception(
                "Failed to read current photo", extra={"user_id": owner_id}
            )
            raise PersistenceError("Failed to save photo") from exc

        if entry is None:
            # Nothing to point at yet; the client attaches it when creating the entry.
            return UploadResult(filename=filename, entry_id=None)

        previous = entry.photo
        try:
            self.entries.set_photo(entry.id, filename)
        except Exception as exc:
            self._rollback(filename)
            logger.exception(
                "Error updating photo pointer, keeping old photo",
                extra={"user_id": owner_id, "entry_id": entry.id},
            )
            raise PersistenceError("Failed to save photo") from exc

        if previous and previous != filename:
            self._remove_stale(previous)
        return UploadResult(
            filename=filename, entry_id=entry.id, previous_filename=previous
        )

    def _rollback(self, filename: str) -> None:
        try:
            self.storage.delete(filename)
        except OSError:
            logger.exception(
                "Failed to roll back new upload", extra={"media_file": filename}
            )

    def _remove_stale(self, filename: str) -> None:
        try:
            self.storage.delete(filename)
        except (OSError, NotFound):
            logger.exception(
                "Failed to delete previous photo", extra={"media_file": filename}
            )
