"""Deterministic LLM provider for tests and local runs."""

import json

from persona_studio.adapters.llm.base import Completion, LLMProvider, Prompt
from persona_studio.logging import get_logger

logger = get_logger(__name__)

STUB_PERSONA_PROFILE = {
    "bio": "Creator sharing practical everyday tips",
    "topics": ["productivity", "mindset", "fitness"],
    "style": "Direct, energetic, short sentences",
    "catchphrases": ["Let's go!", "No excuses."],
    "targetAudience": "Young professionals",
}


class StubLLMProvider(LLMProvider):
    """Answers persona analysis with a fixed profile and anything else with a short script."""

    @property
    def name(self) -> str:
        return "stub"

    async def complete(
        self,
        prompt: Prompt,
        temperature: float = 0.7,  # noqa: ARG002
        max_tokens: int = 1024,  # noqa: ARG002
        json_mode: bool = False,
    ) -> Completion:
        logger.debug("stub_llm_complete", json_mode=json_mode)

        if json_mode:
            text = json.dumps(STUB_PERSONA_PROFILE)
        else:
            text = (
                "[Close-up, direct to camera]\n"
                "HOOK: Stop scrolling for a second.\n"
                f"MAIN: Here is the one thing about {prompt.user[:60]} nobody tells you.\n"
                "CTA: Follow for more."
            )

        return Completion(
            text=text,
            model="stub-model",
            prompt_tokens=len(prompt.user.split()),
            completion_tokens=len(text.split()),
        )
