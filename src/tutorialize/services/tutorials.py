"""Request-level tutorial flow: source text to storyboard to session."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import uuid4

from tutorialize.domain.errors import InvalidRequestError
from tutorialize.domain.sessions import Session
from tutorialize.domain.styles import NarrationStyle
from tutorialize.services.content import ContentService
from tutorialize.services.media import FrameMediaPipeline, MediaStage, StageResult
from tutorialize.services.session_store import SessionStore
from tutorialize.services.storyboard import StoryboardGenerator

logger = logging.getLogger(__name__)


@dataclass
class TutorialService:
    """Creates tutorial sessions and runs their media stages."""

    store: SessionStore
    content_service: ContentService
    storyboard_generator: StoryboardGenerator
    pipeline: FrameMediaPipeline
    stages: dict[str, MediaStage]
    new_session_id: Callable[[], str] = field(default=lambda: str(uuid4()))

    async def create_tutorial(self, url: str, style: str | None = None) -> Session:
        """Fetch the source, generate its storyboard and register a session."""
        if not url or not url.strip():
            raise InvalidRequestError("Missing URL")
        resolved_style = NarrationStyle.parse(style)
        content = await self.content_service.fetch(url.strip())
        steps = await self.storyboard_generator.generate(content, resolved_style)
        session = self.store.create(
            self.new_session_id(),
            steps=steps,
            source_url=url.strip(),
            style=resolved_style.value,
        )
        logger.info(
            "Created session %s with %d steps from %s",
            session.id,
            len(steps),
            session.source_url,
        )
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Return the current snapshot of a session."""
        return self.store.get(session_id)

    async def run_stage(self, session_id: str, stage_name: str) -> StageResult:
        """Run the named media stage over a session."""
        stage = self.stages.get(stage_name)
        if stage is None:
            raise InvalidRequestError(f"Unknown stage {stage_name}")
        result = await self.pipeline.run(session_id, stage)
        logger.info("%s for session %s", result.message, session_id)
        return result
