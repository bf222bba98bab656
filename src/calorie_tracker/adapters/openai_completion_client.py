"""OpenAI Responses API client for nutrition estimates."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from calorie_tracker.domain.errors import UpstreamMalformedError
from calorie_tracker.services.nutrition import CompletionClient


@dataclass
class OpenAICompletionClient(CompletionClient):
    """Completion client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, timeout: float = 30) -> "OpenAICompletionClient":
        """Create an OpenAI completion client."""
        return cls(client=AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0))

    async def complete(
        self,
        *,
        model: str,
        prompt: str,
        image_data_url: str | None,
        max_output_tokens: int,
    ) -> str:
        """Send a single user turn and return the output text."""
        content: list[dict[str, object]] = [{"type": "input_text", "text": prompt}]
        if image_data_url:
            content.append({"type": "input_image", "image_url": image_data_url})
        response = await self.client.responses.create(
            model=model,
            input=[{"role": "user", "content": content}],
            max_output_tokens=max_output_tokens,
            store=False,
        )
        output_text = response.output_text
        if not output_text:
            raise UpstreamMalformedError("OpenAI returned an empty response")
        return output_text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
