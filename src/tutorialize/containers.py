"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from tutorialize.adapters.github_readme_client import HttpxReadmeClient
from tutorialize.adapters.openai_image_client import OpenAIImageClient
from tutorialize.adapters.openai_speech_client import OpenAISpeechClient
from tutorialize.adapters.openai_text_client import OpenAITextClient
from tutorialize.adapters.supabase_blob_storage import SupabaseBlobStorage
from tutorialize.adapters.web_page_client import HttpxWebPageClient
from tutorialize.config import Settings, parse_optional_seconds
from tutorialize.domain.sessions import FrameTextPolicy
from tutorialize.services.content import ContentService
from tutorialize.services.media import (
    FrameMediaPipeline,
    RetryPolicy,
    audio_stage,
    image_stage,
)
from tutorialize.services.rephrase import RephraseService
from tutorialize.services.session_store import InMemorySessionStore, SessionStore
from tutorialize.services.storyboard import StoryboardGenerator
from tutorialize.services.tutorials import TutorialService
from tutorialize.services.visual_prompt import VisualPromptExtractor


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_store: SessionStore
    tutorial_service: TutorialService
    rephrase_service: RephraseService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    call_timeout = parse_optional_seconds(resolved_settings.call_timeout_seconds)
    http_timeout = resolved_settings.http_timeout_seconds

    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    storage = SupabaseBlobStorage(supabase_client, resolved_settings.supabase_bucket)
    session_store = InMemorySessionStore(
        ttl_seconds=resolved_settings.session_ttl_seconds
    )

    web_client = HttpxWebPageClient.create(
        brightdata_api_key=resolved_settings.brightdata_api_key,
        timeout=http_timeout,
    )
    readme_client = HttpxReadmeClient.create(timeout=http_timeout)
    content_service = ContentService(
        web_client=web_client,
        readme_client=readme_client,
        max_chars=resolved_settings.max_source_chars,
        min_chars=resolved_settings.min_content_chars,
    )

    text_client = OpenAITextClient.create(
        resolved_settings.openai_api_key, timeout=call_timeout
    )
    image_client = OpenAIImageClient.create(
        resolved_settings.openai_api_key,
        model=resolved_settings.openai_image_model,
        size=resolved_settings.openai_image_size,
        timeout=call_timeout,
    )
    speech_client = OpenAISpeechClient.create(
        resolved_settings.openai_api_key,
        model=resolved_settings.openai_tts_model,
        voice=resolved_settings.openai_tts_voice,
        timeout=call_timeout,
    )
    storyboard_generator = StoryboardGenerator(
        client=text_client,
        model=resolved_settings.openai_text_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
        char_budget=resolved_settings.prompt_char_budget,
    )
    pipeline = FrameMediaPipeline(
        store=session_store,
        storage=storage,
        retry_policy=RetryPolicy(
            max_attempts=resolved_settings.retry_attempts,
            retry_delay=resolved_settings.retry_delay_seconds,
            step_delay=resolved_settings.step_delay_seconds,
            call_timeout=call_timeout,
        ),
        text_policy=FrameTextPolicy(resolved_settings.frame_text_policy),
    )
    tutorial_service = TutorialService(
        store=session_store,
        content_service=content_service,
        storyboard_generator=storyboard_generator,
        pipeline=pipeline,
        stages={
            "image": image_stage(image_client, VisualPromptExtractor()),
            "audio": audio_stage(speech_client),
        },
    )
    rephrase_service = RephraseService(
        store=session_store,
        text_client=text_client,
        speech_client=speech_client,
        storage=storage,
        model=resolved_settings.openai_text_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store_responses=resolved_settings.openai_store,
    )

    async def close_resources() -> None:
        await web_client.close()
        await readme_client.close()
        await text_client.client.close()
        await image_client.client.close()
        await speech_client.client.close()

    return AppContainer(
        settings=resolved_settings,
        session_store=session_store,
        tutorial_service=tutorial_service,
        rephrase_service=rephrase_service,
        close_resources=close_resources,
    )
