"""Google Sheets v4 REST client built on httpx."""

from dataclasses import dataclass
from urllib.parse import quote

import httpx

from calorie_tracker.domain.auth import AuthSession
from calorie_tracker.domain.errors import AuthorizationError, RemoteStoreError
from calorie_tracker.services.auth import SessionHooks
from calorie_tracker.services.ledger import SheetsClient

SHEETS_BASE_URL = "https://sheets.googleapis.com/v4/spreadsheets"


@dataclass
class HttpxSheetsClient(SheetsClient):
    """Sheets client that refreshes tokens and runs the post-call hook."""

    http_client: httpx.AsyncClient
    hooks: SessionHooks
    base_url: str = SHEETS_BASE_URL
    timeout: float = 15

    @classmethod
    def create(
        cls, hooks: SessionHooks, timeout: float = 15
    ) -> "HttpxSheetsClient":
        """Create a Sheets client with a managed httpx session."""
        return cls(http_client=httpx.AsyncClient(), hooks=hooks, timeout=timeout)

    async def get_values(
        self, session: AuthSession, spreadsheet_id: str, cell_range: str
    ) -> list[list[object]]:
        """Read the values of a range."""
        payload = await self._request(
            session, "GET", self._values_url(spreadsheet_id, cell_range)
        )
        values = payload.get("values")
        return values if isinstance(values, list) else []

    async def append_values(
        self,
        session: AuthSession,
        spreadsheet_id: str,
        cell_range: str,
        rows: list[list[object]],
    ) -> None:
        """Append rows to a range as user-entered values."""
        await self._request(
            session,
            "POST",
            f"{self._values_url(spreadsheet_id, cell_range)}:append",
            params={"valueInputOption": "USER_ENTERED"},
            json={"values": rows},
        )

    async def update_values(
        self,
        session: AuthSession,
        spreadsheet_id: str,
        cell_range: str,
        rows: list[list[object]],
    ) -> None:
        """Overwrite a range with user-entered values."""
        await self._request(
            session,
            "PUT",
            self._values_url(spreadsheet_id, cell_range),
            params={"valueInputOption": "USER_ENTERED"},
            json={"values": rows},
        )

    async def list_sheets(
        self, session: AuthSession, spreadsheet_id: str
    ) -> dict[str, int]:
        """Return sheet titles mapped to sheet ids."""
        payload = await self._request(
            session,
            "GET",
            f"{self.base_url}/{spreadsheet_id}",
            params={"fields": "sheets.properties"},
        )
        sheets: dict[str, int] = {}
        for sheet in payload.get("sheets", []):
            properties = sheet.get("properties", {})
            title = properties.get("title")
            if title is not None:
                sheets[str(title)] = int(properties.get("sheetId", 0))
        return sheets

    async def add_sheet(
        self, session: AuthSession, spreadsheet_id: str, title: str
    ) -> None:
        """Add a sheet to the spreadsheet."""
        await self._batch_update(
            session,
            spreadsheet_id,
            [{"addSheet": {"properties": {"title": title}}}],
        )

    async def delete_rows(
        self,
        session: AuthSession,
        spreadsheet_id: str,
        sheet_id: int,
        start_index: int,
        end_index: int,
    ) -> None:
        """Delete a span of rows from a sheet."""
        await self._batch_update(
            session,
            spreadsheet_id,
            [
                {
                    "deleteDimension": {
                        "range": {
                            "sheetId": sheet_id,
                            "dimension": "ROWS",
                            "startIndex": start_index,
                            "endIndex": end_index,
                        }
                    }
                }
            ],
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _batch_update(
        self,
        session: AuthSession,
        spreadsheet_id: str,
        requests: list[dict[str, object]],
    ) -> None:
        await self._request(
            session,
            "POST",
            f"{self.base_url}/{spreadsheet_id}:batchUpdate",
            json={"requests": requests},
        )

    def _values_url(self, spreadsheet_id: str, cell_range: str) -> str:
        return f"{self.base_url}/{spreadsheet_id}/values/{quote(cell_range, safe='!:')}"

    async def _request(
        self,
        session: AuthSession,
        method: str,
        url: str,
        params: dict[str, str] | None = None,
        json: dict[str, object] | None = None,
    ) -> dict[str, object]:
        """Send one authorized request; the post-call hook always runs."""
        try:
            await self.hooks.refresh(session)
            response = await self.http_client.request(
                method,
                url,
                params=params,
                json=json,
                headers={"Authorization": f"Bearer {session.access_token}"},
                timeout=self.timeout,
            )
        except AuthorizationError as exc:
            raise RemoteStoreError(f"Token refresh failed: {exc}") from exc
        except httpx.HTTPError as exc:
            raise RemoteStoreError(f"Sheets request failed: {exc}") from exc
        finally:
            self.hooks.after_call(session)
        if response.is_error:
            raise RemoteStoreError(
                _error_message(response), status_code=response.status_code
            )
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise RemoteStoreError(
                f"Invalid Sheets response: {exc}", status_code=response.status_code
            ) from exc


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"Sheets request failed with status {response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return f"Sheets request failed with status {response.status_code}"
