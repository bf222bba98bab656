"""Pydantic models for HTTP request bodies."""

from pydantic import BaseModel


class AnalyzeRequest(BaseModel):
    """Body for /analyze."""

    food: str | None = None
    date: str | None = None
    image: str | None = None
    timezone: str | None = None


class MacrosPayload(BaseModel):
    """Calories and macros in wire names."""

    calories: float = 0
    protein: float = 0
    carbs: float = 0
    fat: float = 0


class ConfirmRequest(MacrosPayload):
    """Body for /confirm."""

    food: str | None = None
    date: str | None = None
    time: str | None = None
    timezone: str | None = None
