"""Provider selection from settings."""

from persona_studio.adapters.llm import LLMProvider, OpenAIProvider, StubLLMProvider
from persona_studio.adapters.publisher import (
    InstagramReelsPublisher,
    PublisherAdapter,
    SimulatedPublisher,
    TikTokPublisher,
    XPublisher,
)
from persona_studio.adapters.video_gen import KlingProvider, StubVideoGenProvider, VideoGenProvider
from persona_studio.adapters.voiceover import (
    ElevenLabsProvider,
    StubVoiceoverProvider,
    VoiceoverProvider,
)
from persona_studio.config import settings
from persona_studio.domain.enums import ContentPlatform
from persona_studio.logging import get_logger

logger = get_logger(__name__)


def get_llm_provider() -> LLMProvider:
    """Get the configured LLM provider, falling back to the stub without a key."""
    provider_name = settings.llm_provider.lower()

    if provider_name == "stub":
        return StubLLMProvider()
    if provider_name == "openai" and settings.openai_api_key:
        return OpenAIProvider()

    logger.warning("No LLM API key configured, using stub provider", provider=provider_name)
    return StubLLMProvider()


def get_voiceover_provider() -> VoiceoverProvider:
    """Get the configured voice provider."""
    provider_name = settings.voiceover_provider.lower()

    if provider_name == "elevenlabs":
        return ElevenLabsProvider()
    return StubVoiceoverProvider()


def get_video_gen_provider() -> VideoGenProvider:
    """Get the configured video generation provider."""
    provider_name = settings.video_gen_provider.lower()

    if provider_name == "kling":
        return KlingProvider()
    return StubVideoGenProvider()


def get_publisher_handlers() -> dict[ContentPlatform, PublisherAdapter]:
    """One handler per supported platform, simulated or live by setting."""
    if settings.publisher_mode == "live":
        return {
            ContentPlatform.INSTAGRAM_REEL: InstagramReelsPublisher(
                access_token=settings.instagram_access_token,
                account_id=settings.instagram_account_id,
            ),
            ContentPlatform.TIKTOK: TikTokPublisher(access_token=settings.tiktok_access_token),
            ContentPlatform.X_POST: XPublisher(access_token=settings.x_access_token),
        }
    return {platform: SimulatedPublisher(platform) for platform in ContentPlatform}
