"""Request and response payloads for the tutorial API."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tutorialize.domain.sessions import Frame, Session


class ApiModel(BaseModel):
    """Base model using camelCase field names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CreateTutorialRequest(ApiModel):
    """Body of a tutorial creation request."""

    url: str | None = None
    style: str | None = None


class SessionRequest(ApiModel):
    """Body of a request addressed to one session."""

    session_id: str = Field(min_length=1)


class RephraseRequest(SessionRequest):
    """Body of a single-frame rephrase request."""

    frame_index: int


class CreateTutorialResponse(ApiModel):
    session_id: str
    steps: dict[str, str]


class FramePayload(ApiModel):
    text: str
    image_url: str | None = None
    audio_url: str | None = None

    @classmethod
    def from_frame(cls, frame: Frame) -> "FramePayload":
        return cls(
            text=frame.text, image_url=frame.image_url, audio_url=frame.audio_url
        )


class SessionPayload(ApiModel):
    """Full session state as read by the viewer."""

    id: str
    steps: dict[str, str]
    frames: list[FramePayload | None]
    url: str
    style: str

    @classmethod
    def from_session(cls, session: Session) -> "SessionPayload":
        return cls(
            id=session.id,
            steps=dict(session.steps),
            frames=[
                FramePayload.from_frame(frame) if frame else None
                for frame in session.frames
            ],
            url=session.source_url,
            style=session.style,
        )


class ImageStageResponse(ApiModel):
    images: list[str]
    message: str
    rate_limited: bool = False


class AudioStageResponse(ApiModel):
    audios: list[str]
    message: str
    rate_limited: bool = False


class RephraseResponse(ApiModel):
    new_text: str
    new_audio_url: str
