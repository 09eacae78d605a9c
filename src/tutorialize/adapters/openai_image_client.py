"""OpenAI Images API client for frame illustrations."""

import base64
from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from tutorialize.domain.errors import GenerationError, RateLimitedError
from tutorialize.services.media import ImageGenerationClient


@dataclass
class OpenAIImageClient(ImageGenerationClient):
    """Image generation client backed by OpenAI Images API."""

    client: AsyncOpenAI
    model: str
    size: str = "1024x1024"

    @classmethod
    def create(
        cls,
        api_key: str,
        model: str,
        size: str = "1024x1024",
        timeout: float | None = None,
    ) -> "OpenAIImageClient":
        """Create an OpenAI image client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, timeout=timeout),
            model=model,
            size=size,
        )

    async def generate(self, prompt: str) -> bytes:
        """Generate one image and return its decoded bytes."""
        try:
            response = await self.client.images.generate(
                model=self.model,
                prompt=prompt,
                size=self.size,
                n=1,
            )
        except openai.RateLimitError as exc:
            raise RateLimitedError(str(exc)) from exc
        if not response.data or not response.data[0].b64_json:
            raise GenerationError("OpenAI returned no image data")
        return base64.b64decode(response.data[0].b64_json)
