"""Domain models for the mood journal."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class UserRecord:
    """Represents a user stored in the database."""

    id: int
    username: str
    email: str
    password_hash: str

    def public(self) -> dict[str, object]:
        """Return the fields safe to expose to clients."""
        return {"id": self.id, "username": self.username, "email": self.email}


@dataclass(frozen=True)
class MoodEntryRecord:
    """Represents a persisted mood entry."""

    id: int
    user_id: int
    description: str
    mood: str
    photo: str | None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def to_payload(self) -> dict[str, object]:
        """Serialize the entry the way API clients expect it."""
        return {
            "id": self.id,
            "user_id": self.user_id,
            "description": self.description,
            "mood": self.mood,
            "photo": self.photo,
            "photo_url": self.photo or None,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
