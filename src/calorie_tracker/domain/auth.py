"""OAuth credential models."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict


class CredentialPair(BaseModel):
    """OAuth2 token payload as returned by Google and stored on disk."""

    model_config = ConfigDict(extra="allow")

    access_token: str | None = None
    refresh_token: str | None = None
    scope: str | None = None
    token_type: str | None = None
    id_token: str | None = None
    expiry_date: int | None = None

    def to_payload(self) -> dict[str, object]:
        """Return the JSON-ready payload without unset fields."""
        return self.model_dump(exclude_none=True)


@dataclass
class AuthSession:
    """Credentials for one request against Google APIs.

    ``pending_refresh`` holds tokens obtained by a refresh during the request
    until the post-call hook persists them.
    """

    credentials: CredentialPair
    pending_refresh: CredentialPair | None = None

    @property
    def access_token(self) -> str | None:
        return self.credentials.access_token

    @property
    def refresh_token(self) -> str | None:
        return self.credentials.refresh_token

    def apply_refresh(self, refreshed: CredentialPair) -> None:
        """Merge refreshed tokens into the session and mark them for saving."""
        self.credentials = merge_credentials(self.credentials, refreshed)
        self.pending_refresh = refreshed


def merge_credentials(
    existing: CredentialPair | None, incoming: CredentialPair
) -> CredentialPair:
    """Overlay ``incoming`` on ``existing`` keeping fields the provider omitted."""
    if incoming.refresh_token or existing is None:
        return incoming
    return CredentialPair.model_validate(
        {**existing.to_payload(), **incoming.to_payload()}
    )
