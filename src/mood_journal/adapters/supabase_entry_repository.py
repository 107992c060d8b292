"""Supabase-backed mood entry repository."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from mood_journal.domain.models import MoodEntryRecord
from mood_journal.services.entries import EntryRepository

_ENTRY_COLUMNS = "id, user_id, description, mood, photo, created_at, updated_at"


@dataclass
class SupabaseEntryRepository(EntryRepository):
    """Supabase implementation for mood entries."""

    client: Client

    def create_entry(
        self, user_id: int, description: str, mood: str, photo: str | None
    ) -> MoodEntryRecord:
        """Insert an entry row and return it."""
        response = (
            self.client.table("mood_entries")
            .insert(
                {
                    "user_id": user_id,
                    "description": description,
                    "mood": mood,
                    "photo": photo,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create mood entry")
        return _to_entry(response.data[0])

    def get_entry(self, entry_id: int, user_id: int) -> MoodEntryRecord | None:
        """Return an entry if it belongs to the user."""
        response = (
            self.client.table("mood_entries")
            .select(_ENTRY_COLUMNS)
            .eq("id", entry_id)
            .eq("user_id", user_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return _to_entry(response.data[0])
        return None

    def get_latest_entry(self, user_id: int) -> MoodEntryRecord | None:
        """Return the newest entry for the user."""
        response = (
            self.client.table("mood_entries")
            .select(_ENTRY_COLUMNS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
        if response.data:
            return _to_entry(response.data[0])
        return None

    def update_entry(
        self, entry_id: int, description: str, mood: str, photo: str | None
    ) -> MoodEntryRecord:
        """Overwrite an entry and return the stored row."""
        response = (
            self.client.table("mood_entries")
            .update(
                {
                    "description": description,
                    "mood": mood,
                    "photo": photo,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .eq("id", entry_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update mood entry")
        return _to_entry(response.data[0])

    def set_photo(self, entry_id: int, photo: str) -> None:
        """Point an entry at a new photo."""
        response = (
            self.client.table("mood_entries")
            .update(
                {"photo": photo, "updated_at": datetime.now(tz=UTC).isoformat()}
            )
            .eq("id", entry_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to update entry photo")

    def photo_in_use(self, photo: str, exclude_entry_id: int | None = None) -> bool:
        """Return whether another entry row references the photo."""
        query = self.client.table("mood_entries").select("id").eq("photo", photo)
        if exclude_entry_id is not None:
            query = query.neq("id", exclude_entry_id)
        response = query.limit(1).execute()
        return bool(response.data)


def _parse_timestamp(value: object) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(str(value))


def _to_entry(row: dict[str, object]) -> MoodEntryRecord:
    return MoodEntryRecord(
        id=int(row["id"]),
        user_id=int(row["user_id"]),
        description=str(row.get("description") or ""),
        mood=str(row.get("mood") or ""),
        photo=row.get("photo") or None,
        created_at=_parse_timestamp(row.get("created_at")),
        updated_at=_parse_timestamp(row.get("updated_at")),
    )
