"""Daily macro targets stored in a Settings sheet."""

import logging
from dataclasses import dataclass

from calorie_tracker.domain.auth import AuthSession
from calorie_tracker.domain.errors import RemoteStoreError
from calorie_tracker.domain.ledger import (
    DEFAULT_TARGETS,
    SETTINGS_DATA_RANGE,
    SETTINGS_HEADER,
    SETTINGS_SHEET,
    Targets,
)
from calorie_tracker.services.ledger import SheetsClient, require_remote, to_number

_logger = logging.getLogger(__name__)

MISSING_RANGE_MESSAGE = "Unable to parse range"


def is_missing_range(exc: RemoteStoreError) -> bool:
    """Return True when the Sheets API rejected a range on an absent sheet."""
    return exc.status_code == 400 and MISSING_RANGE_MESSAGE in str(exc)


@dataclass
class TargetsService:
    """Read and write the single targets record."""

    sheets_client: SheetsClient
    spreadsheet_id: str | None

    async def get(self, session: AuthSession | None) -> Targets:
        """Return stored targets, or defaults when none are stored."""
        spreadsheet_id = require_remote(session, self.spreadsheet_id)
        try:
            rows = await self.sheets_client.get_values(
                session, spreadsheet_id, SETTINGS_DATA_RANGE
            )
        except RemoteStoreError as exc:
            if not is_missing_range(exc):
                raise
            _logger.info("Targets unavailable, using defaults: %s", exc)
            return DEFAULT_TARGETS
        if not rows or not rows[0]:
            return DEFAULT_TARGETS
        row = list(rows[0]) + [None] * (4 - len(rows[0]))
        defaults = (
            DEFAULT_TARGETS.calories,
            DEFAULT_TARGETS.protein_g,
            DEFAULT_TARGETS.carbs_g,
            DEFAULT_TARGETS.fat_g,
        )
        values = [
            to_number(cell) if cell not in (None, "") else default
            for cell, default in zip(row[:4], defaults, strict=True)
        ]
        return Targets(
            calories=values[0],
            protein_g=values[1],
            carbs_g=values[2],
            fat_g=values[3],
        )

    async def set(self, session: AuthSession | None, targets: Targets) -> None:
        """Write targets, creating the Settings sheet on first use."""
        spreadsheet_id = require_remote(session, self.spreadsheet_id)
        sheets = await self.sheets_client.list_sheets(session, spreadsheet_id)
        if SETTINGS_SHEET not in sheets:
            await self.sheets_client.add_sheet(session, spreadsheet_id, SETTINGS_SHEET)
            await self.sheets_client.update_values(
                session,
                spreadsheet_id,
                f"{SETTINGS_SHEET}!A1:D1",
                [SETTINGS_HEADER],
            )
            _logger.info("Created %s sheet", SETTINGS_SHEET)
        await self.sheets_client.update_values(
            session,
            spreadsheet_id,
            SETTINGS_DATA_RANGE,
            [[targets.calories, targets.protein_g, targets.carbs_g, targets.fat_g]],
        )
