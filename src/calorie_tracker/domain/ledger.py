"""Domain models for the spreadsheet ledger."""

from dataclasses import dataclass
from datetime import datetime

LEDGER_SHEET = "Sheet1"
LEDGER_RANGE = f"{LEDGER_SHEET}!A:G"
SETTINGS_SHEET = "Settings"
SETTINGS_HEADER = ["Calories", "Protein", "Carbs", "Fat"]
SETTINGS_DATA_RANGE = f"{SETTINGS_SHEET}!A2:D2"

# One for 1-based sheet rows, one for the header row.
PHYSICAL_ROW_OFFSET = 2
NOON = 12


@dataclass(frozen=True)
class LedgerEntry:
    """One logged food row.

    ``row_index`` is the zero-based position among data rows at read time. It
    shifts when an earlier row is deleted and must not be cached across writes.
    """

    date: str
    time: str
    food: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    row_index: int | None = None

    def to_row(self) -> list[object]:
        """Return the sheet row in A:G column order."""
        return [
            self.date,
            self.time,
            self.food,
            self.calories,
            self.protein_g,
            self.carbs_g,
            self.fat_g,
        ]


@dataclass(frozen=True)
class Targets:
    """Daily macro targets."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


DEFAULT_TARGETS = Targets(calories=1800, protein_g=180, carbs_g=115, fat_g=65)


def physical_row(row_index: int) -> int:
    """Return the 1-based sheet row for a logical data row index."""
    return row_index + PHYSICAL_ROW_OFFSET


def format_entry_date(moment: datetime) -> str:
    """Format a date the way entries are stored, e.g. ``3/10/2024``."""
    return f"{moment.month}/{moment.day}/{moment.year}"


def format_entry_time(moment: datetime) -> str:
    """Format a clock time the way entries are stored, e.g. ``03:05 PM``."""
    hour = moment.hour % NOON or NOON
    suffix = "AM" if moment.hour < NOON else "PM"
    return f"{hour:02d}:{moment.minute:02d} {suffix}"
