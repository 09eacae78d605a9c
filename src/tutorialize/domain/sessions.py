"""Domain models for tutorial sessions and their frames."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum


@dataclass(frozen=True)
class Frame:
    """Materialized content for one storyboard step."""

    text: str
    image_url: str | None = None
    audio_url: str | None = None


@dataclass(frozen=True)
class Session:
    """Snapshot of one tutorial request and its generated frames."""

    id: str
    steps: Mapping[str, str]
    frames: tuple[Frame | None, ...]
    source_url: str
    style: str
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    updated_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    @property
    def step_keys(self) -> list[str]:
        """Storyboard keys in frame-index order."""
        return ordered_step_keys(self.steps)

    def step_text(self, index: int) -> str:
        """Return the storyboard text for a frame index."""
        return self.steps[self.step_keys[index]]

    def frame(self, index: int) -> Frame | None:
        """Return the frame at ``index`` if it has been materialized."""
        if 0 <= index < len(self.frames):
            return self.frames[index]
        return None


class FrameTextPolicy(StrEnum):
    """How media stages treat a frame's text when they write to it."""

    RESYNC = "resync"
    PRESERVE = "preserve"


def ordered_step_keys(steps: Mapping[str, str]) -> list[str]:
    """Return step keys sorted lexically, which defines frame indexes."""
    return sorted(steps)
