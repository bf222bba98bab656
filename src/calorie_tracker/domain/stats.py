"""Domain models for statistics."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class SummaryWindow:
    """Inclusive time window for a summary period."""

    period: str
    start: datetime
    end: datetime


@dataclass(frozen=True)
class Summary:
    """Aggregated totals and per-day averages."""

    period: str
    total_calories: float
    total_protein_g: float
    total_carbs_g: float
    total_fat_g: float
    entry_count: int
    days_count: int
    avg_calories: int
    avg_protein_g: int
    avg_carbs_g: int
    avg_fat_g: int
