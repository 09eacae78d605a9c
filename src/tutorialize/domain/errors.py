"""Error types shared across services and the HTTP layer."""


class TutorialError(Exception):
    """Base class for tutorial generation errors."""


class InvalidRequestError(TutorialError):
    """Raised when request input is missing or malformed."""


class SessionNotFoundError(TutorialError):
    """Raised when a session id is not registered."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__("Session not found")


class SessionExistsError(TutorialError):
    """Raised when creating a session under an id that is already taken."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Session {session_id} already exists")


class FrameIndexError(TutorialError):
    """Raised when a frame index falls outside the storyboard."""

    def __init__(self, index: int, total: int) -> None:
        self.index = index
        self.total = total
        super().__init__(f"Frame index {index} is out of range (0-{total - 1})")


class EmptyStoryboardError(TutorialError):
    """Raised when a session has no storyboard steps to process."""


class ContentExtractionError(TutorialError):
    """Raised when a source URL yields too little usable text."""


class StoryboardGenerationError(TutorialError):
    """Raised when the model reply cannot be turned into a storyboard."""


class GenerationError(TutorialError):
    """Raised when an external generation call fails."""


class RateLimitedError(GenerationError):
    """Raised when a generation provider reports quota or rate exhaustion."""


class StorageError(TutorialError):
    """Raised when an artifact cannot be written to blob storage."""


class RephraseError(TutorialError):
    """Raised when a single-frame rephrase cannot be completed."""
