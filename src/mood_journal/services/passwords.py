"""Credential hashing and verification."""

from dataclasses import dataclass
from typing import Protocol

import bcrypt

# bcrypt ignores (or rejects, depending on version) input past this length.
MAX_PASSWORD_BYTES = 72


class CredentialVerifier(Protocol):
    """Interface for salted password hashing."""

    def hash(self, password: str) -> str:
        """Return a salted hash for the password."""

    def verify(self, password: str, password_hash: str) -> bool:
        """Return true when the password matches the stored hash."""


@dataclass
class BcryptCredentialVerifier(CredentialVerifier):
    """bcrypt-backed credential verifier."""

    rounds: int = 12

    def hash(self, password: str) -> str:
        """Hash a password with a fresh salt."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify(self, password: str, password_hash: str) -> bool:
        """Check a password against a stored bcrypt hash."""
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"), password_hash.encode("utf-8")
            )
        except ValueError:
            return False
