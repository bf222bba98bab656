"""Ledger of logged foods stored in a Google Sheet."""

import logging
import math
from dataclasses import dataclass
from typing import Protocol

from calorie_tracker.domain.auth import AuthSession
from calorie_tracker.domain.errors import (
    NotAuthenticatedError,
    NotConfiguredError,
    RemoteStoreError,
)
from calorie_tracker.domain.ledger import (
    LEDGER_RANGE,
    LEDGER_SHEET,
    LedgerEntry,
    physical_row,
)
from calorie_tracker.domain.nutrition import Macros

_logger = logging.getLogger(__name__)


class SheetsClient(Protocol):
    """Interface for range-addressed spreadsheet operations."""

    async def get_values(
        self, session: AuthSession, spreadsheet_id: str, cell_range: str
    ) -> list[list[object]]:
        """Return the rows stored in a range."""

    async def append_values(
        self,
        session: AuthSession,
        spreadsheet_id: str,
        cell_range: str,
        rows: list[list[object]],
    ) -> None:
        """Append rows after the last row of a range."""

    async def update_values(
        self,
        session: AuthSession,
        spreadsheet_id: str,
        cell_range: str,
        rows: list[list[object]],
    ) -> None:
        """Overwrite the cells of a range."""

    async def list_sheets(
        self, session: AuthSession, spreadsheet_id: str
    ) -> dict[str, int]:
        """Return sheet titles mapped to their numeric sheet ids."""

    async def add_sheet(
        self, session: AuthSession, spreadsheet_id: str, title: str
    ) -> None:
        """Create a sheet with the given title."""

    async def delete_rows(
        self,
        session: AuthSession,
        spreadsheet_id: str,
        sheet_id: int,
        start_index: int,
        end_index: int,
    ) -> None:
        """Delete zero-based rows ``[start_index, end_index)`` from a sheet."""


def require_remote(session: AuthSession | None, spreadsheet_id: str | None) -> str:
    """Return the spreadsheet id once auth and configuration are present."""
    if session is None or not session.access_token:
        raise NotAuthenticatedError
    if not spreadsheet_id:
        raise NotConfiguredError
    return spreadsheet_id


@dataclass
class LedgerService:
    """Append, list, update and delete ledger rows."""

    sheets_client: SheetsClient
    spreadsheet_id: str | None

    async def append(self, session: AuthSession | None, entry: LedgerEntry) -> None:
        """Append one entry at the end of the ledger."""
        spreadsheet_id = require_remote(session, self.spreadsheet_id)
        await self.sheets_client.append_values(
            session, spreadsheet_id, LEDGER_RANGE, [entry.to_row()]
        )

    async def list_entries(
        self, session: AuthSession | None, date: str | None = None
    ) -> list[LedgerEntry]:
        """Return entries, optionally only those whose date equals ``date``."""
        entries = await self.read_all(session)
        if date is None:
            return entries
        return [entry for entry in entries if entry.date == date]

    async def read_all(self, session: AuthSession | None) -> list[LedgerEntry]:
        """Read every data row with freshly computed row indices."""
        spreadsheet_id = require_remote(session, self.spreadsheet_id)
        rows = await self.sheets_client.get_values(
            session, spreadsheet_id, LEDGER_RANGE
        )
        return parse_rows(rows)

    async def latest_row_index(
        self, session: AuthSession | None, date: str
    ) -> int | None:
        """Return the index of the newest entry for ``date``."""
        entries = await self.list_entries(session, date)
        if not entries:
            return None
        return entries[-1].row_index

    async def update(
        self, session: AuthSession | None, row_index: int, macros: Macros
    ) -> None:
        """Overwrite the calorie and macro columns of one row."""
        spreadsheet_id = require_remote(session, self.spreadsheet_id)
        row = physical_row(row_index)
        await self.sheets_client.update_values(
            session,
            spreadsheet_id,
            f"{LEDGER_SHEET}!D{row}:G{row}",
            [[macros.calories, macros.protein_g, macros.carbs_g, macros.fat_g]],
        )

    async def delete(self, session: AuthSession | None, row_index: int) -> None:
        """Delete one row; later rows shift up by one."""
        spreadsheet_id = require_remote(session, self.spreadsheet_id)
        sheets = await self.sheets_client.list_sheets(session, spreadsheet_id)
        sheet_id = sheets.get(LEDGER_SHEET)
        if sheet_id is None:
            raise RemoteStoreError(f"Sheet {LEDGER_SHEET!r} not found")
        start = physical_row(row_index) - 1
        await self.sheets_client.delete_rows(
            session, spreadsheet_id, sheet_id, start, start + 1
        )
        _logger.info("Deleted ledger row", extra={"row_index": row_index})


def parse_rows(rows: list[list[object]]) -> list[LedgerEntry]:
    """Convert raw sheet rows to entries, skipping a leading header row."""
    if rows and rows[0] and str(rows[0][0]).strip().lower() == "date":
        rows = rows[1:]
    return [_to_entry(index, row) for index, row in enumerate(rows)]


def to_number(value: object) -> float | int:
    """Parse a sheet cell as a number, defaulting to 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int | float):
        number = float(value)
    else:
        try:
            number = float(str(value).replace(",", "").strip())
        except ValueError:
            return 0
    if not math.isfinite(number):
        return 0
    return int(number) if number.is_integer() else number


def _cell(row: list[object], index: int) -> object:
    return row[index] if index < len(row) else ""


def _to_entry(index: int, row: list[object]) -> LedgerEntry:
    return LedgerEntry(
        date=str(_cell(row, 0)),
        time=str(_cell(row, 1)),
        food=str(_cell(row, 2)),
        calories=to_number(_cell(row, 3)),
        protein_g=to_number(_cell(row, 4)),
        carbs_g=to_number(_cell(row, 5)),
        fat_g=to_number(_cell(row, 6)),
        row_index=index,
    )
