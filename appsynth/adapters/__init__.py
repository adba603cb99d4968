from __future__ import annotations

from .gemini_adapter import GeminiAdapter
from .llm_base import LLMAdapter, LLMResponse
from .mock_adapter import MockAdapter
from .openai_adapter import OpenAIAdapter


def build_adapter(mode: str, provider: str) -> LLMAdapter:
    if mode == "mock":
        return MockAdapter()
    if provider == "gemini":
        return GeminiAdapter()
    return OpenAIAdapter()


__all__ = [
    "GeminiAdapter",
    "LLMAdapter",
    "LLMResponse",
    "MockAdapter",
    "OpenAIAdapter",
    "build_adapter",
]
