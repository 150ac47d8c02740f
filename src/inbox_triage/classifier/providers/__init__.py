"""Generative-model providers for escalated classification."""

from .base import BaseProvider, ProviderResponse
from .claude import ClaudeProvider
from .openai import OpenAIProvider

__all__ = [
    "BaseProvider",
    "ClaudeProvider",
    "OpenAIProvider",
    "ProviderResponse",
]
