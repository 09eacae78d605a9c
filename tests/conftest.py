"""Shared test fixtures."""

import asyncio
import json
from dataclasses import dataclass, field

import pytest

from tutorialize.config import Settings
from tutorialize.containers import AppContainer
from tutorialize.domain.errors import StorageError
from tutorialize.domain.sessions import FrameTextPolicy
from tutorialize.services.content import ContentService, ReadmeClient, WebPageClient
from tutorialize.services.media import (
    BlobStorage,
    FrameMediaPipeline,
    ImageGenerationClient,
    RetryPolicy,
    SpeechClient,
    audio_stage,
    image_stage,
)
from tutorialize.services.rephrase import RephraseService
from tutorialize.services.session_store import InMemorySessionStore
from tutorialize.services.storyboard import StoryboardGenerator, TextGenerationClient
from tutorialize.services.tutorials import TutorialService
from tutorialize.services.visual_prompt import VisualPromptExtractor

STORYBOARD: dict[str, str] = {
    "step1": (
        "Let's start with the basics. A web server is like a restaurant host. "
        "Picture a friendly host greeting guests at the door."
    ),
    "step2": (
        "Now the order goes to the kitchen. Think of the kitchen as your "
        "application code. Imagine chefs busy at glowing stoves."
    ),
    "step3": (
        "Finally, the food comes back to the table. That's your response. "
        "Visualize a waiter carrying a steaming plate."
    ),
}

SOURCE_HTML = (
    "<html><head><title>Docs</title><style>body {color: red}</style></head>"
    "<body><nav>Home | About</nav><h1>Getting started</h1>"
    "<p>This library turns web requests into responses using a small "
    "routing layer and a handful of middleware hooks.</p>"
    "<script>console.log('tracking')</script><footer>Copyright</footer>"
    "</body></html>"
)


@dataclass
class FakeTextClient(TextGenerationClient):
    """Fake text client returning a fixed reply."""

    reply: str = field(default_factory=lambda: _storyboard_json(STORYBOARD))
    error: Exception | None = None
    calls: list[dict[str, object]] = field(default_factory=list)

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        prompt: str,
    ) -> str:
        self.calls.append(
            {
                "model": model,
                "reasoning_effort": reasoning_effort,
                "store": store,
                "instructions": instructions,
                "prompt": prompt,
            }
        )
        if self.error is not None:
            raise self.error
        return self.reply


@dataclass
class FakeImageClient(ImageGenerationClient):
    """Fake image client failing for prompts containing configured markers."""

    content: bytes = b"png-bytes"
    errors: dict[str, Exception] = field(default_factory=dict)
    empty_for: set[str] = field(default_factory=set)
    calls: list[str] = field(default_factory=list)

    async def generate(self, prompt: str) -> bytes:
        self.calls.append(prompt)
        for marker, error in self.errors.items():
            if marker in prompt:
                raise error
        if any(marker in prompt for marker in self.empty_for):
            return b""
        return self.content


@dataclass
class FakeSpeechClient(SpeechClient):
    """Fake speech client failing for texts containing configured markers."""

    content: bytes = b"mp3-bytes"
    errors: dict[str, Exception] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def synthesize(self, text: str) -> bytes:
        self.calls.append(text)
        for marker, error in self.errors.items():
            if marker in text:
                raise error
        return self.content


@dataclass
class InMemoryBlobStorage(BlobStorage):
    """In-memory blob storage returning predictable public URLs."""

    objects: dict[str, tuple[bytes, str]] = field(default_factory=dict)
    fail_keys: set[str] = field(default_factory=set)

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        if key in self.fail_keys:
            raise StorageError(f"Failed to upload {key}")
        self.objects[key] = (data, content_type)
        return f"https://blobs.test/{key}"


@dataclass
class FakeWebPageClient(WebPageClient):
    """Fake web page client returning fixed HTML."""

    html: str = SOURCE_HTML
    requested: list[str] = field(default_factory=list)

    async def fetch_html(self, url: str) -> str:
        self.requested.append(url)
        return self.html


@dataclass
class FakeReadmeClient(ReadmeClient):
    """Fake README client keyed by (repo path, branch)."""

    readmes: dict[tuple[str, str], str] = field(default_factory=dict)
    requested: list[tuple[str, str]] = field(default_factory=list)
    error: Exception | None = None

    async def fetch_readme(self, repo_path: str, branch: str) -> str | None:
        self.requested.append((repo_path, branch))
        if self.error is not None:
            raise self.error
        return self.readmes.get((repo_path, branch))


@dataclass
class RecordingSleep:
    """Sleep replacement that records requested delays without waiting."""

    delays: list[float] = field(default_factory=list)

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)
        await asyncio.sleep(0)


def _storyboard_json(steps: dict[str, str]) -> str:
    return json.dumps(steps)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        openai_api_key="openai-key",
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
    )


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def storage() -> InMemoryBlobStorage:
    return InMemoryBlobStorage()


@pytest.fixture
def image_client() -> FakeImageClient:
    return FakeImageClient()


@pytest.fixture
def speech_client() -> FakeSpeechClient:
    return FakeSpeechClient()


@pytest.fixture
def text_client() -> FakeTextClient:
    return FakeTextClient()


@pytest.fixture
def sleeper() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def pipeline(
    session_store: InMemorySessionStore,
    storage: InMemoryBlobStorage,
    sleeper: RecordingSleep,
) -> FrameMediaPipeline:
    return FrameMediaPipeline(
        store=session_store,
        storage=storage,
        retry_policy=RetryPolicy(max_attempts=3, retry_delay=2.0, step_delay=3.0),
        text_policy=FrameTextPolicy.RESYNC,
        sleep=sleeper,
    )


@pytest.fixture
def rephrase_service(
    session_store: InMemorySessionStore,
    text_client: FakeTextClient,
    speech_client: FakeSpeechClient,
    storage: InMemoryBlobStorage,
) -> RephraseService:
    return RephraseService(
        store=session_store,
        text_client=text_client,
        speech_client=speech_client,
        storage=storage,
        model="test-model",
        reasoning_effort=None,
        new_version=lambda: "v1",
    )


@pytest.fixture
def tutorial_service(
    settings: Settings,
    session_store: InMemorySessionStore,
    text_client: FakeTextClient,
    image_client: FakeImageClient,
    speech_client: FakeSpeechClient,
    pipeline: FrameMediaPipeline,
) -> TutorialService:
    content_service = ContentService(
        web_client=FakeWebPageClient(),
        readme_client=FakeReadmeClient(),
        max_chars=settings.max_source_chars,
        min_chars=settings.min_content_chars,
    )
    generator = StoryboardGenerator(
        client=text_client,
        model=settings.openai_text_model,
        reasoning_effort=settings.openai_reasoning_effort,
        store=settings.openai_store,
        char_budget=settings.prompt_char_budget,
    )
    return TutorialService(
        store=session_store,
        content_service=content_service,
        storyboard_generator=generator,
        pipeline=pipeline,
        stages={
            "image": image_stage(image_client, VisualPromptExtractor()),
            "audio": audio_stage(speech_client),
        },
    )


@pytest.fixture
def container(
    settings: Settings,
    session_store: InMemorySessionStore,
    tutorial_service: TutorialService,
    rephrase_service: RephraseService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        session_store=session_store,
        tutorial_service=tutorial_service,
        rephrase_service=rephrase_service,
        close_resources=close_resources,
    )
