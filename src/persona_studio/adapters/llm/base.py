"""LLM provider interface.

Every call is a single turn: a system instruction plus one user message.
Script generation asks for prose, persona analysis for a JSON object.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Prompt:
    system: str
    user: str


@dataclass
class Completion:
    """Text returned by a provider, with token accounting when known."""

    text: str
    model: str
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens


class LLMProvider(ABC):
    """Text generation backend.

    Implementations:
    - OpenAIProvider: chat completions over HTTP
    - StubLLMProvider: canned scripts and persona profiles
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @abstractmethod
    async def complete(
        self,
        prompt: Prompt,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        json_mode: bool = False,
    ) -> Completion:
        """Answer ``prompt``; with ``json_mode`` the text is a JSON object."""
