"""Credential store interface."""

from typing import Protocol

from calorie_tracker.domain.auth import CredentialPair


class CredentialStore(Protocol):
    """Persistence interface for the single shared OAuth identity."""

    def load(self) -> CredentialPair | None:
        """Return the current credentials, if any."""

    def save(self, credentials: CredentialPair) -> None:
        """Persist credentials, keeping a stored refresh token the payload omits."""

    def clear(self) -> None:
        """Remove persisted credentials and reset in-memory state."""
