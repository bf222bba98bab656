"""Google OAuth2 client.

The authorization-code exchange goes through httpx. Expiry checks and token
refresh use google-auth ``Credentials``.
"""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from functools import partial

import httpx
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from calorie_tracker.domain.auth import CredentialPair
from calorie_tracker.domain.errors import AuthorizationError
from calorie_tracker.services.auth import OAuthClient

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"


@dataclass
class GoogleOAuthClient(OAuthClient):
    """OAuth2 authorization-code client for Google."""

    client_id: str
    client_secret: str
    redirect_uri: str
    http_client: httpx.AsyncClient
    timeout: float = 15
    transport: Request = field(default_factory=Request)

    @classmethod
    def create(
        cls,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 15,
    ) -> "GoogleOAuthClient":
        """Create an OAuth client with managed HTTP sessions."""
        return cls(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=redirect_uri,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    def authorization_url(self, scopes: list[str]) -> str:
        """Build the consent URL requesting offline access and forced consent."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(scopes),
            "access_type": "offline",
            "prompt": "consent",
        }
        return str(httpx.URL(AUTH_URL, params=params))

    async def exchange_code(self, code: str) -> CredentialPair:
        """Exchange an authorization code for tokens."""
        payload = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "code": code,
            "redirect_uri": self.redirect_uri,
            "grant_type": "authorization_code",
        }
        try:
            response = await self.http_client.post(
                TOKEN_URL, data=payload, timeout=self.timeout
            )
        except httpx.HTTPError as exc:
            raise AuthorizationError(f"Token request failed: {exc}") from exc
        if response.is_error:
            raise AuthorizationError(_error_message(response))
        try:
            return _to_credentials(response.json())
        except ValueError as exc:
            raise AuthorizationError(f"Invalid token response: {exc}") from exc

    def google_credentials(self, credentials: CredentialPair) -> Credentials:
        """Return google-auth credentials for a stored token payload."""
        expiry = None
        if credentials.expiry_date is not None:
            # google-auth compares naive UTC datetimes.
            expiry = datetime.fromtimestamp(
                credentials.expiry_date / 1000, tz=UTC
            ).replace(tzinfo=None)
        return Credentials(
            token=credentials.access_token,
            refresh_token=credentials.refresh_token,
            id_token=credentials.id_token,
            token_uri=TOKEN_URL,
            client_id=self.client_id,
            client_secret=self.client_secret,
            expiry=expiry,
        )

    def is_expired(self, credentials: CredentialPair) -> bool:
        """Return True when google-auth considers the access token expired."""
        return self.google_credentials(credentials).expired

    async def refresh(self, credentials: CredentialPair) -> CredentialPair:
        """Refresh the access token and return only the fields that changed."""
        google_credentials = self.google_credentials(credentials)
        request = partial(self.transport, timeout=self.timeout)
        try:
            await asyncio.to_thread(google_credentials.refresh, request)
        except GoogleAuthError as exc:
            raise AuthorizationError(f"Token refresh failed: {exc}") from exc
        return _from_google_credentials(google_credentials, credentials)

    async def close(self) -> None:
        """Close the underlying HTTP sessions."""
        await self.http_client.aclose()
        self.transport.session.close()


def _epoch_ms(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _to_credentials(payload: dict[str, object]) -> CredentialPair:
    """Convert a token response, turning ``expires_in`` into ``expiry_date``."""
    tokens = dict(payload)
    expires_in = tokens.pop("expires_in", None)
    if isinstance(expires_in, int | float):
        tokens["expiry_date"] = _epoch_ms(datetime.now(tz=UTC)) + int(
            expires_in * 1000
        )
    return CredentialPair.model_validate(tokens)


def _from_google_credentials(
    refreshed: Credentials, previous: CredentialPair
) -> CredentialPair:
    tokens: dict[str, object] = {"access_token": refreshed.token, "token_type": "Bearer"}
    if refreshed.expiry is not None:
        tokens["expiry_date"] = _epoch_ms(refreshed.expiry.replace(tzinfo=UTC))
    if refreshed.refresh_token and refreshed.refresh_token != previous.refresh_token:
        tokens["refresh_token"] = refreshed.refresh_token
    if refreshed.id_token and refreshed.id_token != previous.id_token:
        tokens["id_token"] = refreshed.id_token
    return CredentialPair.model_validate(tokens)


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"Token request failed with status {response.status_code}"
    if isinstance(body, dict):
        description = body.get("error_description") or body.get("error")
        if description:
            return str(description)
    return f"Token request failed with status {response.status_code}"
