"""LLM provider adapters."""

from persona_studio.adapters.llm.base import Completion, LLMProvider, Prompt
from persona_studio.adapters.llm.openai import OpenAIProvider
from persona_studio.adapters.llm.stub import StubLLMProvider

__all__ = [
    "Completion",
    "LLMProvider",
    "Prompt",
    "OpenAIProvider",
    "StubLLMProvider",
]
