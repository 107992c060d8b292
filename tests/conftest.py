"""Shared test fixtures."""

import io
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import pytest
from PIL import Image

from mood_journal.config import Settings
from mood_journal.containers import AppContainer, wire_container
from mood_journal.domain.errors import DuplicateAccountError
from mood_journal.domain.models import MoodEntryRecord, UserRecord
from mood_journal.services.accounts import UserRepository
from mood_journal.services.entries import EntryRepository

JWT_SECRET = "test-secret-with-enough-length-for-hs256"


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: dict[int, UserRecord] = field(default_factory=dict)

    def create_user(self, username: str, email: str, password_hash: str) -> UserRecord:
        for user in self.users.values():
            if user.username == username:
                raise DuplicateAccountError("username")
            if user.email == email:
                raise DuplicateAccountError("email")
        user = UserRecord(
            id=len(self.users) + 1,
            username=username,
            email=email,
            password_hash=password_hash,
        )
        self.users[user.id] = user
        return user

    def get_by_username(self, username: str) -> UserRecord | None:
        for user in self.users.values():
            if user.username == username:
                return user
        return None


@dataclass
class InMemoryEntryRepository(EntryRepository):
    """In-memory entry repository for tests."""

    entries: dict[int, MoodEntryRecord] = field(default_factory=dict)
    fail_set_photo: bool = False
    fail_reads: bool = False
    fail_updates: bool = False
    set_photo_calls: list[tuple[int, str]] = field(default_factory=list)

    def create_entry(
        self, user_id: int, description: str, mood: str, photo: str | None
    ) -> MoodEntryRecord:
        now = datetime.now(tz=UTC)
        entry = MoodEntryRecord(
            id=len(self.entries) + 1,
            user_id=user_id,
            description=description,
            mood=mood,
            photo=photo,
            created_at=now,
            updated_at=now,
        )
        self.entries[entry.id] = entry
        return entry

    def get_entry(self, entry_id: int, user_id: int) -> MoodEntryRecord | None:
        if self.fail_reads:
            raise RuntimeError("database unavailable")
        entry = self.entries.get(entry_id)
        if entry is None or entry.user_id != user_id:
            return None
        return entry

    def get_latest_entry(self, user_id: int) -> MoodEntryRecord | None:
        if self.fail_reads:
            raise RuntimeError("database unavailable")
        owned = [entry for entry in self.entries.values() if entry.user_id == user_id]
        if not owned:
            return None
        return max(owned, key=lambda entry: (entry.created_at, entry.id))

    def update_entry(
        self, entry_id: int, description: str, mood: str, photo: str | None
    ) -> MoodEntryRecord:
        if self.fail_updates:
            raise RuntimeError("database unavailable")
        current = self.entries[entry_id]
        updated = MoodEntryRecord(
            id=current.id,
            user_id=current.user_id,
            description=description,
            mood=mood,
            photo=photo,
            created_at=current.created_at,
            updated_at=datetime.now(tz=UTC),
        )
        self.entries[entry_id] = updated
        return updated

    def set_photo(self, entry_id: int, photo: str) -> None:
        self.set_photo_calls.append((entry_id, photo))
        if self.fail_set_photo:
            raise RuntimeError("database unavailable")
        current = self.entries[entry_id]
        self.entries[entry_id] = MoodEntryRecord(
            id=current.id,
            user_id=current.user_id,
            description=current.description,
            mood=current.mood,
            photo=photo,
            created_at=current.created_at,
            updated_at=datetime.now(tz=UTC),
        )

    def photo_in_use(self, photo: str, exclude_entry_id: int | None = None) -> bool:
        return any(
            entry.photo == photo and entry.id != exclude_entry_id
            for entry in self.entries.values()
        )


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def image_bytes(image_format: str = "JPEG", size: tuple[int, int] = (8, 8)) -> bytes:
    """Render a small solid-colour image in the given format."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color=(200, 120, 40)).save(buffer, format=image_format)
    return buffer.getvalue()


def write_temp(directory: Path, content: bytes, name: str = "upload.tmp") -> Path:
    """Write bytes to a temp upload path."""
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_bytes(content)
    return path


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key=(
            "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9."
            "eyJyb2xlIjoic2VydmljZV9yb2xlIn0."
            "c2lnbmF0dXJl"
        ),
        jwt_secret=JWT_SECRET,
        bcrypt_rounds=4,
        upload_dir=tmp_path / "uploads",
        temp_dir=tmp_path / "temp",
        rate_limits_enabled=False,
    )


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def entry_repository() -> InMemoryEntryRepository:
    return InMemoryEntryRepository()


@pytest.fixture
def container(
    settings: Settings,
    user_repository: InMemoryUserRepository,
    entry_repository: InMemoryEntryRepository,
) -> AppContainer:
    return wire_container(
        settings,
        user_repository=user_repository,
        entry_repository=entry_repository,
    )
