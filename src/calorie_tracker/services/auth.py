"""Google authorization flow for the shared spreadsheet identity."""

import logging
from dataclasses import dataclass
from typing import Protocol

from calorie_tracker.domain.auth import AuthSession, CredentialPair
from calorie_tracker.domain.errors import AuthorizationError, NotAuthenticatedError
from calorie_tracker.services.credentials import CredentialStore

SHEETS_SCOPE = "https://www.googleapis.com/auth/spreadsheets"

_logger = logging.getLogger(__name__)


class OAuthClient(Protocol):
    """Interface for the OAuth2 provider."""

    def authorization_url(self, scopes: list[str]) -> str:
        """Return the consent URL for the given scopes."""

    async def exchange_code(self, code: str) -> CredentialPair:
        """Exchange an authorization code for tokens."""

    def is_expired(self, credentials: CredentialPair) -> bool:
        """Return True when the access token needs a refresh."""

    async def refresh(self, credentials: CredentialPair) -> CredentialPair:
        """Obtain a new access token using the stored refresh token."""


class SessionHooks(Protocol):
    """Token maintenance invoked around each remote call."""

    async def refresh(self, session: AuthSession) -> None:
        """Refresh the access token in place when it has expired."""

    def after_call(self, session: AuthSession) -> None:
        """Persist tokens refreshed during the call."""


@dataclass
class AuthorizationService(SessionHooks):
    """Unauthenticated/Authorized state machine over the credential store."""

    oauth_client: OAuthClient
    credential_store: CredentialStore

    def begin(self) -> str:
        """Return the provider authorization URL."""
        return self.oauth_client.authorization_url([SHEETS_SCOPE])

    async def callback(self, code: str | None) -> None:
        """Exchange ``code`` for tokens and persist them."""
        if not code:
            raise AuthorizationError("Missing authorization code")
        credentials = await self.oauth_client.exchange_code(code)
        self.credential_store.save(credentials)
        _logger.info("Google account connected")

    def disconnect(self) -> None:
        """Forget the stored credentials."""
        self.credential_store.clear()
        _logger.info("Google account disconnected")

    def status(self) -> bool:
        """Return True when an access token is held."""
        credentials = self.credential_store.load()
        return bool(credentials and credentials.access_token)

    def session(self) -> AuthSession | None:
        """Return a session for the current request, or None."""
        credentials = self.credential_store.load()
        if credentials is None or not credentials.access_token:
            return None
        return AuthSession(credentials=credentials)

    def require_session(self) -> AuthSession:
        """Return a session or raise NotAuthenticatedError."""
        session = self.session()
        if session is None:
            raise NotAuthenticatedError
        return session

    async def refresh(self, session: AuthSession) -> None:
        """Refresh the access token in place when it has expired."""
        if not session.refresh_token:
            return
        if not self.oauth_client.is_expired(session.credentials):
            return
        refreshed = await self.oauth_client.refresh(session.credentials)
        session.apply_refresh(refreshed)

    def after_call(self, session: AuthSession) -> None:
        """Persist tokens refreshed during a remote call.

        Failures are logged and never surface to the in-flight request.
        """
        pending = session.pending_refresh
        if pending is None:
            return
        session.pending_refresh = None
        try:
            self.credential_store.save(pending)
        except Exception:
            _logger.exception("Failed to persist refreshed tokens")
