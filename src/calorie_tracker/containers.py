"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from calorie_tracker.adapters.file_credential_store import FileCredentialStore
from calorie_tracker.adapters.google_oauth_client import GoogleOAuthClient
from calorie_tracker.adapters.google_sheets_client import HttpxSheetsClient
from calorie_tracker.adapters.openai_completion_client import OpenAICompletionClient
from calorie_tracker.config import Settings
from calorie_tracker.services.auth import AuthorizationService
from calorie_tracker.services.ledger import LedgerService
from calorie_tracker.services.nutrition import NutritionEstimator
from calorie_tracker.services.stats import SummaryService
from calorie_tracker.services.targets import TargetsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    authorization_service: AuthorizationService
    nutrition_estimator: NutritionEstimator
    ledger_service: LedgerService
    summary_service: SummaryService
    targets_service: TargetsService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    credential_store = FileCredentialStore.create(resolved_settings.token_path)
    oauth_client = GoogleOAuthClient.create(
        client_id=resolved_settings.google_client_id,
        client_secret=resolved_settings.google_client_secret,
        redirect_uri=resolved_settings.oauth_redirect_uri,
        timeout=resolved_settings.google_timeout_seconds,
    )
    authorization_service = AuthorizationService(
        oauth_client=oauth_client,
        credential_store=credential_store,
    )
    sheets_client = HttpxSheetsClient.create(
        hooks=authorization_service,
        timeout=resolved_settings.google_timeout_seconds,
    )
    completion_client = OpenAICompletionClient.create(
        resolved_settings.openai_api_key,
        timeout=resolved_settings.openai_timeout_seconds,
    )
    nutrition_estimator = NutritionEstimator(
        client=completion_client,
        model=resolved_settings.openai_model,
        max_output_tokens=resolved_settings.openai_max_output_tokens,
    )
    ledger_service = LedgerService(
        sheets_client=sheets_client,
        spreadsheet_id=resolved_settings.google_sheets_id,
    )
    summary_service = SummaryService(ledger_service)
    targets_service = TargetsService(
        sheets_client=sheets_client,
        spreadsheet_id=resolved_settings.google_sheets_id,
    )

    async def close_resources() -> None:
        await oauth_client.close()
        await sheets_client.close()
        await completion_client.close()

    return AppContainer(
        settings=resolved_settings,
        authorization_service=authorization_service,
        nutrition_estimator=nutrition_estimator,
        ledger_service=ledger_service,
        summary_service=summary_service,
        targets_service=targets_service,
        close_resources=close_resources,
    )
