"""Single-frame narration regeneration."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import uuid4

from tutorialize.domain.errors import (
    FrameIndexError,
    RephraseError,
    SessionNotFoundError,
)
from tutorialize.domain.styles import NarrationStyle
from tutorialize.services.media import (
    BlobStorage,
    SpeechClient,
    frame_blob_key,
    versioned_url,
)
from tutorialize.services.session_store import SessionStore
from tutorialize.services.storyboard import TextGenerationClient

logger = logging.getLogger(__name__)

REPHRASE_INSTRUCTIONS = (
    "You rewrite one frame of a narrated tutorial for a learner who found it "
    "confusing. Explain the same idea with different, simpler wording and a "
    "fresh angle on the analogy. Keep it conversational and 2-3 sentences "
    "long. Keep any visual scene description free of text, labels, signs, or "
    "written words. Reply with the new narration only, without quotes or "
    "commentary."
)


@dataclass(frozen=True)
class RephraseResult:
    """New narration and audio attached to a frame."""

    index: int
    text: str
    audio_url: str


@dataclass
class RephraseService:
    """Regenerates the narration and voice of one existing frame."""

    store: SessionStore
    text_client: TextGenerationClient
    speech_client: SpeechClient
    storage: BlobStorage
    model: str
    reasoning_effort: str | None
    store_responses: bool = False
    new_version: Callable[[], str] = field(default=lambda: uuid4().hex[:12])

    async def rephrase(self, session_id: str, frame_index: int) -> RephraseResult:
        """Rewrite and re-voice ``frame_index``, leaving other frames alone."""
        session = self.store.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        total = len(session.steps)
        if not 0 <= frame_index < total:
            raise FrameIndexError(frame_index, total)

        frame = session.frame(frame_index)
        current_text = frame.text if frame else session.step_text(frame_index)
        style = NarrationStyle.parse(session.style)
        prompt = (
            f"Style requirement: {style.hint}\n\n"
            f'Current narration:\n"""{current_text}"""\n\n'
            "Rephrase this narration."
        )

        try:
            reply = await self.text_client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store_responses,
                instructions=REPHRASE_INSTRUCTIONS,
                prompt=prompt,
            )
            new_text = _clean_reply(reply)
            if not new_text:
                raise RephraseError("Model returned an empty rephrasing")
            audio = await self.speech_client.synthesize(new_text)
            if not audio:
                raise RephraseError("Speech synthesis returned no audio")
            public_url = await self.storage.put(
                frame_blob_key(session_id, frame_index, "mp3"), audio, "audio/mpeg"
            )
        except RephraseError:
            logger.warning(
                "Rephrase failed for frame %d of %s", frame_index, session_id
            )
            raise
        except Exception as exc:
            logger.exception(
                "Rephrase failed for frame %d of %s", frame_index, session_id
            )
            raise RephraseError("Failed to rephrase the audio") from exc

        # Blob key is shared with the audio stage; each rephrase gets a new URL.
        audio_url = versioned_url(public_url, self.new_version())
        self.store.update_frame(
            session_id, frame_index, text=new_text, audio_url=audio_url
        )
        logger.info("Rephrased frame %d of %s", frame_index + 1, session_id)
        return RephraseResult(index=frame_index, text=new_text, audio_url=audio_url)


def _clean_reply(reply: str) -> str:
    text = reply.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'"}:
        text = text[1:-1].strip()
    return text
