"""Summary statistics over ledger rows."""

import calendar
import math
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from calorie_tracker.domain.auth import AuthSession
from calorie_tracker.domain.ledger import LedgerEntry
from calorie_tracker.domain.stats import Summary, SummaryWindow
from calorie_tracker.services.ledger import LedgerService

PERIODS = ("daily", "weekly", "monthly")

_DATE_FORMATS = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%d %b %Y",
)


@dataclass
class SummaryService:
    """Aggregate ledger rows over a daily, weekly or monthly window."""

    ledger: LedgerService

    async def summarize(
        self,
        session: AuthSession | None,
        period: str | None,
        now: datetime | None = None,
        timezone_name: str | None = None,
    ) -> Summary:
        """Read the whole ledger and aggregate rows inside the window."""
        entries = await self.ledger.read_all(session)
        window = compute_window(period, now or datetime.now(tz=UTC), timezone_name)
        return aggregate(window, entries, resolve_timezone(timezone_name))


def resolve_timezone(name: str | None) -> tzinfo:
    """Return the named zone, falling back to UTC."""
    if not name:
        return UTC
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        return UTC


def compute_window(
    period: str | None, now: datetime, timezone_name: str | None = None
) -> SummaryWindow:
    """Return the ``[start, now]`` window for a period in the given timezone."""
    tz = resolve_timezone(timezone_name)
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    local_now = now.astimezone(tz)
    resolved = period if period in PERIODS else "daily"
    today = local_now.date()
    if resolved == "weekly":
        start_day = today - timedelta(days=7)
    elif resolved == "monthly":
        start_day = _one_month_before(today)
    else:
        start_day = today
    start = datetime.combine(start_day, time(), tzinfo=tz)
    return SummaryWindow(period=resolved, start=start, end=local_now)


def aggregate(
    window: SummaryWindow, entries: list[LedgerEntry], tz: tzinfo
) -> Summary:
    """Sum entries whose parsed date falls inside the window."""
    totals = {"calories": 0.0, "protein_g": 0.0, "carbs_g": 0.0, "fat_g": 0.0}
    days: dict[str, float] = {}
    entry_count = 0
    for entry in entries:
        parsed = parse_sheet_date(entry.date)
        if parsed is None:
            continue
        moment = datetime.combine(parsed, time(), tzinfo=tz)
        if not window.start <= moment <= window.end:
            continue
        entry_count += 1
        totals["calories"] += entry.calories
        totals["protein_g"] += entry.protein_g
        totals["carbs_g"] += entry.carbs_g
        totals["fat_g"] += entry.fat_g
        days[entry.date] = days.get(entry.date, 0.0) + entry.calories

    days_count = max(1, len(days))
    return Summary(
        period=window.period,
        total_calories=_clean(totals["calories"]),
        total_protein_g=_clean(totals["protein_g"]),
        total_carbs_g=_clean(totals["carbs_g"]),
        total_fat_g=_clean(totals["fat_g"]),
        entry_count=entry_count,
        days_count=days_count,
        avg_calories=round_half_up(totals["calories"] / days_count),
        avg_protein_g=round_half_up(totals["protein_g"] / days_count),
        avg_carbs_g=round_half_up(totals["carbs_g"] / days_count),
        avg_fat_g=round_half_up(totals["fat_g"] / days_count),
    )


def parse_sheet_date(value: str) -> date | None:
    """Parse a stored date string in any of the common spreadsheet formats."""
    cleaned = value.strip()
    if not cleaned:
        return None
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(cleaned).date()
    except ValueError:
        return None


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up."""
    return math.floor(value + 0.5)


def _clean(value: float) -> float | int:
    return int(value) if value.is_integer() else value


def _one_month_before(day: date) -> date:
    if day.month == 1:
        year, month = day.year - 1, 12
    else:
        year, month = day.year, day.month - 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))
