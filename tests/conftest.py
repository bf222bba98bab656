"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import pytest

from calorie_tracker.config import Settings
from calorie_tracker.containers import AppContainer
from calorie_tracker.domain.auth import AuthSession, CredentialPair, merge_credentials
from calorie_tracker.domain.errors import AuthorizationError, RemoteStoreError
from calorie_tracker.services.auth import AuthorizationService, OAuthClient
from calorie_tracker.services.credentials import CredentialStore
from calorie_tracker.services.ledger import LedgerService, SheetsClient
from calorie_tracker.services.nutrition import CompletionClient, NutritionEstimator
from calorie_tracker.services.stats import SummaryService
from calorie_tracker.services.targets import TargetsService


@dataclass
class InMemoryCredentialStore(CredentialStore):
    """In-memory credential store for tests."""

    current: CredentialPair | None = None
    saved: list[CredentialPair] = field(default_factory=list)
    fail_on_save: bool = False

    def load(self) -> CredentialPair | None:
        return self.current

    def save(self, credentials: CredentialPair) -> None:
        if self.fail_on_save:
            raise OSError("disk full")
        self.current = merge_credentials(self.current, credentials)
        self.saved.append(credentials)

    def clear(self) -> None:
        self.current = None


@dataclass
class FakeOAuthClient(OAuthClient):
    """Fake OAuth provider."""

    tokens: CredentialPair = field(
        default_factory=lambda: CredentialPair(
            access_token="access-1",
            refresh_token="refresh-1",
            token_type="Bearer",
            scope="https://www.googleapis.com/auth/spreadsheets",
        )
    )
    refreshed: CredentialPair = field(
        default_factory=lambda: CredentialPair(
            access_token="access-2", token_type="Bearer"
        )
    )
    fail_exchange: bool = False
    codes: list[str] = field(default_factory=list)
    refresh_calls: int = 0

    def authorization_url(self, scopes: list[str]) -> str:
        return "https://accounts.example/auth?scope=" + "+".join(scopes)

    async def exchange_code(self, code: str) -> CredentialPair:
        self.codes.append(code)
        if self.fail_exchange:
            raise AuthorizationError("invalid_grant")
        return self.tokens

    def is_expired(self, credentials: CredentialPair) -> bool:
        if credentials.expiry_date is None:
            return False
        return credentials.expiry_date <= int(datetime.now(tz=UTC).timestamp() * 1000)

    async def refresh(self, credentials: CredentialPair) -> CredentialPair:
        self.refresh_calls += 1
        return self.refreshed


@dataclass
class FakeCompletionClient(CompletionClient):
    """Fake completion client returning fixed text."""

    text: str = '{"calories": 250, "protein": 12, "carbs": 30, "fat": 9}'
    prompts: list[str] = field(default_factory=list)
    images: list[str | None] = field(default_factory=list)
    error: Exception | None = None

    async def complete(
        self,
        *,
        model: str,
        prompt: str,
        image_data_url: str | None,
        max_output_tokens: int,
    ) -> str:
        self.prompts.append(prompt)
        self.images.append(image_data_url)
        if self.error is not None:
            raise self.error
        return self.text


def _column(ref: str) -> tuple[int, int | None]:
    letters = "".join(char for char in ref if char.isalpha())
    digits = "".join(char for char in ref if char.isdigit())
    return ord(letters.upper()) - ord("A"), int(digits) if digits else None


def _parse_range(cell_range: str) -> tuple[str, int, int | None, int, int | None]:
    sheet, _, cells = cell_range.partition("!")
    start, _, end = cells.partition(":")
    start_col, start_row = _column(start)
    end_col, end_row = _column(end or start)
    return sheet, start_col, start_row, end_col, end_row


@dataclass
class InMemorySheetsClient(SheetsClient):
    """In-memory spreadsheet keyed by sheet title.

    Cells are returned as strings, the way the Sheets API formats values.
    """

    sheets: dict[str, list[list[object]]] = field(
        default_factory=lambda: {"Sheet1": []}
    )
    calls: list[str] = field(default_factory=list)
    fail_append: bool = False
    fail_get_status: int | None = None

    def _sheet(self, title: str) -> list[list[object]]:
        if title not in self.sheets:
            raise RemoteStoreError(f"Unable to parse range: {title}", status_code=400)
        return self.sheets[title]

    async def get_values(
        self, session: AuthSession, spreadsheet_id: str, cell_range: str
    ) -> list[list[object]]:
        self.calls.append("get_values")
        if self.fail_get_status is not None:
            raise RemoteStoreError(
                "backend unavailable", status_code=self.fail_get_status
            )
        title, start_col, start_row, end_col, end_row = _parse_range(cell_range)
        rows = self._sheet(title)
        first = (start_row or 1) - 1
        last = end_row if end_row is not None else len(rows)
        return [
            [str(cell) for cell in row[start_col : end_col + 1]]
            for row in rows[first:last]
        ]

    async def append_values(
        self,
        session: AuthSession,
        spreadsheet_id: str,
        cell_range: str,
        rows: list[list[object]],
    ) -> None:
        self.calls.append("append_values")
        if self.fail_append:
            raise RemoteStoreError("quota exceeded", status_code=429)
        title, *_ = _parse_range(cell_range)
        self._sheet(title).extend(list(row) for row in rows)

    async def update_values(
        self,
        session: AuthSession,
        spreadsheet_id: str,
        cell_range: str,
        rows: list[list[object]],
    ) -> None:
        self.calls.append("update_values")
        title, start_col, start_row, _, _ = _parse_range(cell_range)
        sheet = self._sheet(title)
        for offset, values in enumerate(rows):
            index = (start_row or 1) - 1 + offset
            while len(sheet) <= index:
                sheet.append([])
            row = sheet[index]
            while len(row) < start_col + len(values):
                row.append("")
            row[start_col : start_col + len(values)] = values

    async def list_sheets(
        self, session: AuthSession, spreadsheet_id: str
    ) -> dict[str, int]:
        self.calls.append("list_sheets")
        return {title: index for index, title in enumerate(self.sheets)}

    async def add_sheet(
        self, session: AuthSession, spreadsheet_id: str, title: str
    ) -> None:
        self.calls.append("add_sheet")
        self.sheets[title] = []

    async def delete_rows(
        self,
        session: AuthSession,
        spreadsheet_id: str,
        sheet_id: int,
        start_index: int,
        end_index: int,
    ) -> None:
        self.calls.append("delete_rows")
        title = list(self.sheets)[sheet_id]
        del self.sheets[title][start_index:end_index]


HEADER = ["Date", "Time", "Food", "Calories", "Protein", "Carbs", "Fat"]


def make_session(access_token: str = "access-1") -> AuthSession:
    return AuthSession(
        credentials=CredentialPair(access_token=access_token, refresh_token="refresh-1")
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        openai_api_key="openai-key",
        google_client_id="client-id",
        google_client_secret="client-secret",
        google_sheets_id="sheet-id",
        token_path=str(tmp_path / "tokens.json"),
        static_dir=str(tmp_path / "public"),
    )


@pytest.fixture
def credential_store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore(
        current=CredentialPair(access_token="access-1", refresh_token="refresh-1")
    )


@pytest.fixture
def sheets_client() -> InMemorySheetsClient:
    return InMemorySheetsClient(sheets={"Sheet1": [list(HEADER)]})


@pytest.fixture
def completion_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def container(
    settings: Settings,
    credential_store: InMemoryCredentialStore,
    sheets_client: InMemorySheetsClient,
    completion_client: FakeCompletionClient,
) -> AppContainer:
    authorization_service = AuthorizationService(
        oauth_client=FakeOAuthClient(),
        credential_store=credential_store,
    )
    ledger_service = LedgerService(
        sheets_client=sheets_client, spreadsheet_id=settings.google_sheets_id
    )

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        authorization_service=authorization_service,
        nutrition_estimator=NutritionEstimator(
            client=completion_client, model=settings.openai_model
        ),
        ledger_service=ledger_service,
        summary_service=SummaryService(ledger_service),
        targets_service=TargetsService(
            sheets_client=sheets_client, spreadsheet_id=settings.google_sheets_id
        ),
        close_resources=close_resources,
    )
