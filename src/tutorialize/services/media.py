"""Per-frame media generation stages (images and narration audio)."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Protocol

from tutorialize.domain.errors import (
    EmptyStoryboardError,
    RateLimitedError,
    SessionNotFoundError,
)
from tutorialize.domain.sessions import FrameTextPolicy
from tutorialize.services.session_store import SessionStore
from tutorialize.services.visual_prompt import VisualPromptStrategy

logger = logging.getLogger(__name__)

_RATE_LIMIT_MARKERS = ("quota", "resource_exhausted", "rate limit", "rate_limit")

Sleep = Callable[[float], Awaitable[None]]


class ImageGenerationClient(Protocol):
    """Interface for prompt-to-image generation."""

    async def generate(self, prompt: str) -> bytes:
        """Return encoded image bytes for ``prompt``."""


class SpeechClient(Protocol):
    """Interface for text-to-speech synthesis."""

    async def synthesize(self, text: str) -> bytes:
        """Return encoded audio bytes narrating ``text``."""


class BlobStorage(Protocol):
    """Interface for publicly readable artifact storage."""

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        """Store ``data`` under ``key`` and return its public URL."""


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt bounds and pacing for a media stage."""

    max_attempts: int = 3
    retry_delay: float = 2.0
    step_delay: float = 3.0
    call_timeout: float | None = None


@dataclass(frozen=True)
class MediaStage:
    """One artifact type produced per storyboard step.

    With ``resync_on_init`` unset, pre-initialization only seeds missing
    slots, so text already paired with this stage's artifact is kept until a
    new artifact is written.
    """

    name: str
    artifact_label: str
    generate: Callable[[str], Awaitable[bytes]]
    build_prompt: Callable[[str], str]
    extension: str
    content_type: str
    url_field: str
    resync_on_init: bool = True


def image_stage(
    client: ImageGenerationClient, prompt_strategy: VisualPromptStrategy
) -> MediaStage:
    """Stage that illustrates each step."""
    return MediaStage(
        name="image",
        artifact_label="images",
        generate=client.generate,
        build_prompt=prompt_strategy.build_prompt,
        extension="png",
        content_type="image/png",
        url_field="image_url",
    )


def audio_stage(client: SpeechClient) -> MediaStage:
    """Stage that narrates each step."""
    return MediaStage(
        name="audio",
        artifact_label="audio files",
        generate=client.synthesize,
        build_prompt=str.strip,
        extension="mp3",
        content_type="audio/mpeg",
        url_field="audio_url",
        resync_on_init=False,
    )


@dataclass(frozen=True)
class StageResult:
    """Outcome of one pass of a stage across every step."""

    stage: str
    artifact_label: str
    succeeded: int
    total: int
    urls: list[str]
    rate_limited: bool = False

    @property
    def message(self) -> str:
        return f"Generated {self.succeeded}/{self.total} {self.artifact_label}"


@dataclass
class FrameMediaPipeline:
    """Walks a session's steps in order and attaches one artifact per frame.

    A failed step is logged and skipped so the remaining frames still get
    their artifacts. A rate-limited provider stops the stage immediately.
    """

    store: SessionStore
    storage: BlobStorage
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    text_policy: FrameTextPolicy = FrameTextPolicy.RESYNC
    sleep: Sleep = asyncio.sleep

    async def run(self, session_id: str, stage: MediaStage) -> StageResult:
        """Run ``stage`` over every step of the session."""
        session = self.store.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        keys = session.step_keys
        if not keys:
            raise EmptyStoryboardError("Session storyboard has no steps")

        for index, key in enumerate(keys):
            seed = self._text(session.steps[key]) if stage.resync_on_init else None
            self.store.update_frame(session_id, index, text=seed)

        urls: list[str] = []
        rate_limited = False
        for index, key in enumerate(keys):
            text = session.steps[key]
            try:
                data = await self._generate_with_retry(stage, key, text)
            except RateLimitedError:
                logger.warning(
                    "Rate limit hit for %s in %s stage, skipping remaining %d steps",
                    key,
                    stage.name,
                    len(keys) - index - 1,
                )
                rate_limited = True
                break
            if data is None:
                logger.warning(
                    "Failed to generate %s for %s, frame will display without it",
                    stage.name,
                    key,
                )
                continue

            blob_key = frame_blob_key(session_id, index, stage.extension)
            try:
                url = await self.storage.put(blob_key, data, stage.content_type)
            except Exception:
                logger.exception("Failed to upload %s for %s", stage.name, key)
                continue

            self.store.update_frame(
                session_id,
                index,
                text=self._text(text),
                **{stage.url_field: url},
            )
            urls.append(url)
            logger.info(
                "Generated and uploaded %s %d/%d", stage.name, index + 1, len(keys)
            )
            if index < len(keys) - 1 and self.retry_policy.step_delay > 0:
                await self.sleep(self.retry_policy.step_delay)

        return StageResult(
            stage=stage.name,
            artifact_label=stage.artifact_label,
            succeeded=len(urls),
            total=len(keys),
            urls=urls,
            rate_limited=rate_limited,
        )

    async def _generate_with_retry(
        self, stage: MediaStage, key: str, text: str
    ) -> bytes | None:
        prompt = stage.build_prompt(text)
        attempts = max(self.retry_policy.max_attempts, 1)
        for attempt in range(1, attempts + 1):
            try:
                data = await self._call(stage.generate(prompt))
            except Exception as exc:
                if is_rate_limited(exc):
                    if isinstance(exc, RateLimitedError):
                        raise
                    raise RateLimitedError(str(exc)) from exc
                logger.warning(
                    "%s generation failed on attempt %d/%d for %s: %s",
                    stage.name,
                    attempt,
                    attempts,
                    key,
                    exc,
                )
            else:
                if data:
                    return data
                logger.warning(
                    "No %s data returned for %s, attempt %d/%d",
                    stage.name,
                    key,
                    attempt,
                    attempts,
                )
            if attempt < attempts:
                await self.sleep(self.retry_policy.retry_delay)
        logger.error(
            "Skipping %s for %s after %d failed attempts", stage.name, key, attempts
        )
        return None

    async def _call(self, pending: Awaitable[bytes]) -> bytes:
        if self.retry_policy.call_timeout is None:
            return await pending
        return await asyncio.wait_for(pending, timeout=self.retry_policy.call_timeout)

    def _text(self, text: str) -> str | None:
        # None lets the store keep existing text or seed a new slot from the step.
        return text if self.text_policy is FrameTextPolicy.RESYNC else None


def frame_blob_key(session_id: str, index: int, extension: str) -> str:
    """Storage key for a frame artifact, numbered from one."""
    return f"{session_id}/frame{index + 1}.{extension}"


def is_rate_limited(exc: BaseException) -> bool:
    """Classify a generation failure as quota or rate exhaustion."""
    if isinstance(exc, RateLimitedError):
        return True
    message = str(exc).lower()
    return any(marker in message for marker in _RATE_LIMIT_MARKERS)


def versioned_url(url: str, version: str) -> str:
    """Append a cache-busting ``v`` query parameter to a public URL."""
    if url.endswith(("?", "&")):
        return f"{url}v={version}"
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}v={version}"
