"""Session registry shared by the pipeline stages and rephrase requests."""

import threading
from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import UTC, datetime, timedelta
from types import MappingProxyType
from typing import Protocol

from tutorialize.domain.errors import (
    FrameIndexError,
    SessionExistsError,
    SessionNotFoundError,
)
from tutorialize.domain.sessions import Frame, Session


class SessionStore(Protocol):
    """Keyed, mutable registry of tutorial sessions."""

    def create(
        self,
        session_id: str,
        steps: Mapping[str, str],
        source_url: str,
        style: str,
    ) -> Session:
        """Register a new session with no frames and return it."""

    def get(self, session_id: str) -> Session | None:
        """Return a snapshot of the session, if present."""

    def update_frame(
        self,
        session_id: str,
        index: int,
        *,
        text: str | None = None,
        image_url: str | None = None,
        audio_url: str | None = None,
    ) -> Frame:
        """Merge the given fields into ``frames[index]`` and return the result."""


@dataclass
class InMemorySessionStore(SessionStore):
    """Process-resident session store guarded by a single lock.

    Creating a session under an existing id raises ``SessionExistsError``.
    When ``ttl_seconds`` is set, sessions idle for longer than that are
    dropped the next time the store is accessed.
    """

    ttl_seconds: int | None = None

    def __post_init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create(
        self,
        session_id: str,
        steps: Mapping[str, str],
        source_url: str,
        style: str,
    ) -> Session:
        """Register a new session with no frames."""
        with self._lock:
            self._evict_expired()
            if session_id in self._sessions:
                raise SessionExistsError(session_id)
            session = Session(
                id=session_id,
                steps=MappingProxyType(dict(steps)),
                frames=(),
                source_url=source_url,
                style=style,
            )
            self._sessions[session_id] = session
            return session

    def get(self, session_id: str) -> Session | None:
        """Return the current snapshot without waiting on writers' work."""
        with self._lock:
            self._evict_expired()
            return self._sessions.get(session_id)

    def update_frame(
        self,
        session_id: str,
        index: int,
        *,
        text: str | None = None,
        image_url: str | None = None,
        audio_url: str | None = None,
    ) -> Frame:
        """Upsert fields of one frame; ``None`` leaves a field unchanged."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFoundError(session_id)
            total = len(session.steps)
            if not 0 <= index < total:
                raise FrameIndexError(index, total)

            frames = list(session.frames)
            if len(frames) <= index:
                frames.extend([None] * (index + 1 - len(frames)))
            current = frames[index] or Frame(text=session.step_text(index))
            merged = Frame(
                text=current.text if text is None else text,
                image_url=current.image_url if image_url is None else image_url,
                audio_url=current.audio_url if audio_url is None else audio_url,
            )
            frames[index] = merged
            self._sessions[session_id] = replace(
                session,
                frames=tuple(frames),
                updated_at=datetime.now(tz=UTC),
            )
            return merged

    def _evict_expired(self) -> None:
        if self.ttl_seconds is None:
            return
        cutoff = datetime.now(tz=UTC) - timedelta(seconds=self.ttl_seconds)
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if session.updated_at < cutoff
        ]
        for session_id in expired:
            self._sessions.pop(session_id, None)
