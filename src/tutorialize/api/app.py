"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from tutorialize.api.models import (
    AudioStageResponse,
    CreateTutorialRequest,
    CreateTutorialResponse,
    ImageStageResponse,
    RephraseRequest,
    RephraseResponse,
    SessionPayload,
    SessionRequest,
)
from tutorialize.app_logging import configure_logging
from tutorialize.containers import AppContainer
from tutorialize.domain.errors import (
    FrameIndexError,
    InvalidRequestError,
    SessionNotFoundError,
    TutorialError,
)
from tutorialize.services.media import StageResult

_ERROR_STATUS: tuple[tuple[type[TutorialError], int], ...] = (
    (InvalidRequestError, 400),
    (FrameIndexError, 400),
    (SessionNotFoundError, 404),
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level.upper())
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(TutorialError)
    async def tutorial_error_handler(
        request: Request, exc: TutorialError
    ) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return _error(status_code, str(exc))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "%s %s failed unexpectedly",
            request.method,
            request.url.path,
            exc_info=exc,
        )
        return _error(500, "Internal server error")

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error(400, _describe_validation_error(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/api/tutorial")
    async def get_tutorial(
        request: Request,
        session_id: str | None = Query(default=None, alias="sessionId"),
    ) -> SessionPayload:
        """Return the full session so the viewer can render or poll it."""
        if not session_id:
            raise InvalidRequestError("Missing or invalid sessionId")
        state_container: AppContainer = request.app.state.container
        session = state_container.tutorial_service.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return SessionPayload.from_session(session)

    @app.post("/api/tutorial")
    async def create_tutorial(
        body: CreateTutorialRequest, request: Request
    ) -> CreateTutorialResponse:
        """Create a tutorial session from a source URL."""
        state_container: AppContainer = request.app.state.container
        try:
            session = await state_container.tutorial_service.create_tutorial(
                body.url or "", body.style
            )
        except TutorialError:
            raise
        except Exception as exc:
            logger.exception("Error in tutorial generation")
            return _error(500, str(exc) or "Failed to generate tutorial")
        return CreateTutorialResponse(session_id=session.id, steps=dict(session.steps))

    @app.post("/api/image-gen")
    async def generate_images(
        body: SessionRequest, request: Request
    ) -> ImageStageResponse:
        """Illustrate every frame of a session."""
        result = await _run_stage(request, body.session_id, "image")
        return ImageStageResponse(
            images=result.urls,
            message=result.message,
            rate_limited=result.rate_limited,
        )

    @app.post("/api/audio-gen")
    async def generate_audio(
        body: SessionRequest, request: Request
    ) -> AudioStageResponse:
        """Narrate every frame of a session."""
        result = await _run_stage(request, body.session_id, "audio")
        return AudioStageResponse(
            audios=result.urls,
            message=result.message,
            rate_limited=result.rate_limited,
        )

    @app.post("/api/rephrase-audio")
    async def rephrase_audio(
        body: RephraseRequest, request: Request
    ) -> RephraseResponse:
        """Regenerate narration and audio for one frame."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.rephrase_service.rephrase(
            body.session_id, body.frame_index
        )
        return RephraseResponse(new_text=result.text, new_audio_url=result.audio_url)

    async def _run_stage(request: Request, session_id: str, stage: str) -> StageResult:
        state_container: AppContainer = request.app.state.container
        return await state_container.tutorial_service.run_stage(session_id, stage)

    return app


def _status_for(exc: TutorialError) -> int:
    for error_type, status_code in _ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code
    return 500


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    if location:
        return f"Invalid {location}: {message}"
    return f"Invalid request: {message}"
