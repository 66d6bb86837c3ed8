"""API route modules."""

from persona_studio.api.routes import content, generate, health, persona, stats, video, voice

__all__ = ["content", "generate", "health", "persona", "stats", "video", "voice"]
