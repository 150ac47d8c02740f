"""Base provider abstract class for escalated classification.

Defines the interface every generative-model backend implements.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

logger = logging.getLogger("inbox_triage.classifier.providers")

__all__ = ["BaseProvider", "ProviderResponse"]


@dataclass
class ProviderResponse:
    """Raw completion returned by a provider.

    Attributes:
        text: Model output, expected to be a JSON object (not yet parsed)
        model_name: Specific model that answered (e.g., "gpt-4o-mini-2024-07-18")
        input_tokens: Number of input tokens used
        output_tokens: Number of output tokens used
    """

    text: str
    model_name: str = ""
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens


class BaseProvider(ABC):
    """Abstract base class for generative-model providers.

    Providers make exactly one request per call; they never retry.
    """

    def __init__(self, timeout: float = 30.0, temperature: float = 0.3, max_output_tokens: int = 300):
        """Initialize provider.

        Args:
            timeout: Request timeout in seconds
            temperature: Sampling temperature
            max_output_tokens: Upper bound on generated tokens
        """
        self.timeout = timeout
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    @abstractmethod
    async def complete(self, system_instructions: str, user_prompt: str) -> ProviderResponse:
        """Run one completion.

        Args:
            system_instructions: System prompt (output schema and scoring rules)
            user_prompt: Message, examples and hints

        Returns:
            ProviderResponse with the raw model text

        Raises:
            TimeoutError: If request exceeds timeout
            ConnectionError: If provider is unreachable or rejects the request
            ValueError: If the provider response is malformed
        """
        pass

    @abstractmethod
    def is_available(self) -> bool:
        """Check if provider is configured to accept requests."""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Provider name for logging and metrics (e.g., "openai", "claude")."""
        pass

    @property
    def model(self) -> str:
        return getattr(self, "_model", "")

    async def aclose(self) -> None:
        """Clean up resources. Override in subclasses if needed."""
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        await self.aclose()
