"""OpenAI text-to-speech client for frame narration."""

from dataclasses import dataclass

import openai
from openai import AsyncOpenAI

from tutorialize.domain.errors import RateLimitedError
from tutorialize.services.media import SpeechClient


@dataclass
class OpenAISpeechClient(SpeechClient):
    """Speech synthesis client backed by OpenAI audio API."""

    client: AsyncOpenAI
    model: str
    voice: str

    @classmethod
    def create(
        cls, api_key: str, model: str, voice: str, timeout: float | None = None
    ) -> "OpenAISpeechClient":
        """Create an OpenAI speech client."""
        return cls(
            client=AsyncOpenAI(api_key=api_key, timeout=timeout),
            model=model,
            voice=voice,
        )

    async def synthesize(self, text: str) -> bytes:
        """Synthesize mp3 narration for ``text``."""
        try:
            response = await self.client.audio.speech.create(
                model=self.model,
                voice=self.voice,
                input=text,
                response_format="mp3",
            )
        except openai.RateLimitError as exc:
            raise RateLimitedError(str(exc)) from exc
        return response.content
