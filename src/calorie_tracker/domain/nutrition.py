"""Nutrition domain models."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


class NutritionRecord(BaseModel):
    """Nutrition estimate for one food item as returned by the LLM."""

    model_config = ConfigDict(populate_by_name=True)

    food: str | None = None
    calories: float
    protein_g: float = Field(alias="protein")
    carbs_g: float = Field(alias="carbs")
    fat_g: float = Field(alias="fat")


@dataclass(frozen=True)
class Macros:
    """Calories and macronutrients for a ledger row."""

    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float


@dataclass(frozen=True)
class ImageInput:
    """Inline image passed to the completion API."""

    media_type: str
    data: str

    def to_data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"
