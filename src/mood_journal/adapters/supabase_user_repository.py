"""Supabase-backed user repository."""

from dataclasses import dataclass

from postgrest.exceptions import APIError
from supabase import Client

from mood_journal.domain.errors import DuplicateAccountError
from mood_journal.domain.models import UserRecord
from mood_journal.services.accounts import UserRepository

_UNIQUE_VIOLATION = "23505"
_USER_COLUMNS = "id, username, email, password_hash"


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for user persistence."""

    client: Client

    def create_user(self, username: str, email: str, password_hash: str) -> UserRecord:
        """Create a new user row and return it."""
        try:
            response = (
                self.client.table("users")
                .insert(
                    {
                        "username": username,
                        "email": email,
                        "password_hash": password_hash,
                    }
                )
                .execute()
            )
        except APIError as exc:
            field = _duplicate_field(exc)
            if field:
                raise DuplicateAccountError(field) from exc
            raise
        if not response.data:
            raise RuntimeError("Failed to create user in Supabase")
        return _to_user(response.data[0])

    def get_by_username(self, username: str) -> UserRecord | None:
        """Return the user for a username, if present."""
        response = (
            self.client.table("users")
            .select(_USER_COLUMNS)
            .eq("username", username)
            .limit(1)
            .execute()
        )
        if response.data:
            return _to_user(response.data[0])
        return None


def _duplicate_field(exc: APIError) -> str | None:
    """Return which unique column a constraint violation refers to."""
    if exc.code != _UNIQUE_VIOLATION:
        return None
    detail = f"{exc.message or ''} {exc.details or ''}".lower()
    if "username" in detail:
        return "username"
    if "email" in detail:
        return "email"
    return None


def _to_user(row: dict[str, object]) -> UserRecord:
    return UserRecord(
        id=int(row["id"]),
        username=str(row["username"]),
        email=str(row["email"]),
        password_hash=str(row["password_hash"]),
    )
