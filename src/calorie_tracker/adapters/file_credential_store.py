"""JSON token file credential store."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from calorie_tracker.domain.auth import CredentialPair, merge_credentials
from calorie_tracker.services.credentials import CredentialStore

_logger = logging.getLogger(__name__)


@dataclass
class FileCredentialStore(CredentialStore):
    """Credential store backed by a plain JSON file.

    The file is loaded once on creation and kept in memory; every save
    rewrites the whole file.
    """

    path: Path
    _current: CredentialPair | None = field(default=None, init=False, repr=False)

    @classmethod
    def create(cls, path: str | Path) -> "FileCredentialStore":
        """Create a store and load any existing token file."""
        store = cls(path=Path(path))
        store.reload()
        return store

    def reload(self) -> CredentialPair | None:
        """Read the token file into memory."""
        self._current = None
        if not self.path.exists():
            return None
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            self._current = CredentialPair.model_validate(payload)
        except (OSError, ValueError):
            _logger.exception("Error loading tokens", extra={"path": str(self.path)})
        return self._current

    def load(self) -> CredentialPair | None:
        """Return the credentials held in memory."""
        return self._current

    def save(self, credentials: CredentialPair) -> None:
        """Merge credentials over the persisted record and rewrite the file."""
        existing = self._current
        if existing is None and credentials.refresh_token is None:
            existing = self.reload()
        merged = merge_credentials(existing, credentials)
        self.path.write_text(
            json.dumps(merged.to_payload(), indent=2), encoding="utf-8"
        )
        self._current = merged

    def clear(self) -> None:
        """Delete the token file and forget the in-memory credentials."""
        self.path.unlink(missing_ok=True)
        self._current = None
