"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    openai_api_key: str
    openai_model: str = "gpt-5.2"
    openai_max_output_tokens: int = 512
    openai_timeout_seconds: float = 30
    google_client_id: str
    google_client_secret: str
    google_sheets_id: str | None = None
    google_timeout_seconds: float = 15
    public_base_url: str | None = None
    render_external_hostname: str | None = None
    railway_public_domain: str | None = None
    vercel_url: str | None = None
    port: int = 3000
    token_path: str = "tokens.json"
    static_dir: str = "public"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def oauth_redirect_uri(self) -> str:
        """Return the OAuth callback URL for this deployment."""
        return f"{resolve_base_url(self)}/auth/google/callback"


def resolve_base_url(settings: Settings) -> str:
    """Derive the public base URL from deployment hostnames, else localhost."""
    if settings.public_base_url:
        return settings.public_base_url.rstrip("/")
    for host in (
        settings.render_external_hostname,
        settings.railway_public_domain,
        settings.vercel_url,
    ):
        cleaned = (host or "").strip().rstrip("/")
        if not cleaned:
            continue
        if cleaned.startswith(("http://", "https://")):
            return cleaned
        return f"https://{cleaned}"
    return f"http://localhost:{settings.port}"
