"""Request bodies accepted by the API.

Fields are optional at the schema level so missing values surface as the
same 400 messages the services raise.
"""

from pydantic import BaseModel


class RegisterRequest(BaseModel):
    """Registration payload."""

    username: str | None = None
    email: str | None = None
    password: str | None = None


class LoginRequest(BaseModel):
    """Login payload."""

    username: str | None = None
    password: str | None = None


class MoodEntryRequest(BaseModel):
    """Create or update payload for a mood entry."""

    description: str | None = None
    mood: str | None = None
    photo_url: str | None = None
