"""Claude (Anthropic) provider for escalated classification.

Uses the async Anthropic SDK.
"""

import logging

import anthropic
from anthropic import AsyncAnthropic

from .base import BaseProvider, ProviderResponse

logger = logging.getLogger("inbox_triage.classifier.providers.claude")

__all__ = ["ClaudeProvider"]


class ClaudeProvider(BaseProvider):
    """Claude/Anthropic provider for classification."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-3-5-haiku-20241022",
        timeout: float = 30.0,
        temperature: float = 0.3,
        max_output_tokens: int = 300,
        client: AsyncAnthropic | None = None,
    ):
        """Initialize Claude provider.

        Args:
            api_key: Anthropic API key
            model: Model name
            timeout: Request timeout in seconds
            temperature: Sampling temperature
            max_output_tokens: Upper bound on generated tokens
            client: Optional pre-built AsyncAnthropic client (tests)
        """
        super().__init__(timeout, temperature, max_output_tokens)
        self._model = model

        if client is not None:
            self._client = client
        elif api_key:
            # The SDK retries by default; retries are the caller's concern
            self._client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)
        else:
            logger.warning("claude_no_api_key")
            self._client = None

    @property
    def name(self) -> str:
        return "claude"

    def is_available(self) -> bool:
        return self._client is not None

    async def complete(self, system_instructions: str, user_prompt: str) -> ProviderResponse:
        """Run one message completion.

        Raises:
            TimeoutError: If request exceeds timeout
            ConnectionError: If Claude is unreachable or rejects the request
            ValueError: If the response has no text content
        """
        if not self._client:
            raise ConnectionError("Claude client not initialized (missing API key)")

        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=self.max_output_tokens,
                temperature=self.temperature,
                system=system_instructions,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except anthropic.APITimeoutError as e:
            logger.error("claude_timeout", extra={"error": str(e)})
            raise TimeoutError(f"Claude request timed out: {e}") from e
        except (anthropic.APIConnectionError, anthropic.APIStatusError) as e:
            logger.error("claude_api_error", extra={"error": str(e), "type": type(e).__name__})
            raise ConnectionError(f"Claude API error: {e}") from e

        text_blocks = [block.text for block in response.content if getattr(block, "type", None) == "text"]
        if not text_blocks:
            logger.error("claude_empty_response")
            raise ValueError("Claude response contained no text")

        input_tokens = response.usage.input_tokens
        output_tokens = response.usage.output_tokens

        logger.info(
            "claude_completion_success",
            extra={
                "model": response.model,
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
            },
        )

        return ProviderResponse(
            text="".join(text_blocks),
            model_name=response.model,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.close()
