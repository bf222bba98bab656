"""Nutrition estimates from an LLM completion API."""

import json
from dataclasses import dataclass
from typing import Protocol

from pydantic import ValidationError as PydanticValidationError

from calorie_tracker.domain.errors import UpstreamMalformedError, ValidationError
from calorie_tracker.domain.nutrition import ImageInput, NutritionRecord

DEFAULT_MEDIA_TYPE = "image/jpeg"

TEXT_PROMPT = """Analyze this food and estimate its nutritional content. \
Be concise and give your best estimate.

Food: {food}

Respond in this exact JSON format only, no other text:
{{"calories": <number>, "protein": <number in grams>, \
"carbs": <number in grams>, "fat": <number in grams>}}"""

IMAGE_PROMPT = """Identify the food in this image and estimate its \
nutritional content for the portion shown. Be concise and give your best \
estimate.{context}

Respond in this exact JSON format only, no other text:
{{"food": "<short description of the food>", "calories": <number>, \
"protein": <number in grams>, "carbs": <number in grams>, \
"fat": <number in grams>}}"""


class CompletionClient(Protocol):
    """Interface for a single-turn LLM completion."""

    async def complete(
        self,
        *,
        model: str,
        prompt: str,
        image_data_url: str | None,
        max_output_tokens: int,
    ) -> str:
        """Return the raw response text."""


@dataclass
class NutritionEstimator:
    """Build nutrition prompts and parse the model's JSON reply."""

    client: CompletionClient
    model: str
    max_output_tokens: int = 512

    async def estimate(
        self, description: str | None = None, image: str | None = None
    ) -> NutritionRecord:
        """Estimate nutrition for a description, an image data URL, or both."""
        description = (description or "").strip() or None
        image_input = parse_image_data_url(image) if image else None
        if description is None and image_input is None:
            raise ValidationError("Food description or image is required")

        if image_input is not None:
            context = f"\n\nAdditional context: {description}" if description else ""
            prompt = IMAGE_PROMPT.format(context=context)
            image_data_url = image_input.to_data_url()
        else:
            prompt = TEXT_PROMPT.format(food=description)
            image_data_url = None

        text = await self.client.complete(
            model=self.model,
            prompt=prompt,
            image_data_url=image_data_url,
            max_output_tokens=self.max_output_tokens,
        )
        record = parse_nutrition(text)
        if image_input is None:
            return record.model_copy(update={"food": description})
        if not (record.food or "").strip():
            raise UpstreamMalformedError("Image estimate did not name the food")
        return record


def parse_nutrition(text: str) -> NutritionRecord:
    """Parse model output as a nutrition record without any fallback."""
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise UpstreamMalformedError(str(exc)) from exc
    if not isinstance(payload, dict):
        raise UpstreamMalformedError("Expected a JSON object")
    try:
        return NutritionRecord.model_validate(payload)
    except PydanticValidationError as exc:
        raise UpstreamMalformedError(str(exc)) from exc


def parse_image_data_url(value: str) -> ImageInput:
    """Split a data URL into media type and untouched base64 payload."""
    if not value.startswith("data:") or "," not in value:
        return ImageInput(media_type=DEFAULT_MEDIA_TYPE, data=value)
    header, data = value.split(",", maxsplit=1)
    media_type = header[len("data:") :].split(";", maxsplit=1)[0].strip()
    return ImageInput(media_type=media_type or DEFAULT_MEDIA_TYPE, data=data)
