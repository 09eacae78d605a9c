"""OpenAI Responses API client for narration text."""

from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from tutorialize.domain.errors import GenerationError, RateLimitedError
from tutorialize.services.storyboard import TextGenerationClient


@dataclass
class OpenAITextClient(TextGenerationClient):
    """Text generation client backed by OpenAI Responses API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str, timeout: float | None = None) -> "OpenAITextClient":
        """Create an OpenAI text client."""
        return cls(client=AsyncOpenAI(api_key=api_key, timeout=timeout))

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        prompt: str,
    ) -> str:
        """Call OpenAI Responses API with a single user turn."""
        request_payload: dict[str, object] = {
            "model": model,
            "instructions": instructions,
            "input": prompt,
            "store": store,
        }
        if reasoning_effort:
            request_payload["reasoning"] = {"effort": reasoning_effort}

        try:
            response = await self.client.responses.create(**request_payload)
        except openai.RateLimitError as exc:
            raise RateLimitedError(str(exc)) from exc
        output_text = response.output_text
        if not output_text:
            raise GenerationError("OpenAI returned an empty response")
        return output_text
