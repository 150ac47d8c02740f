"""OpenAI provider for escalated classification.

Calls the chat completions API over httpx with JSON response format.
"""

import logging

import httpx

from .base import BaseProvider, ProviderResponse

logger = logging.getLogger("inbox_triage.classifier.providers.openai")

__all__ = ["OpenAIProvider"]


class OpenAIProvider(BaseProvider):
    """OpenAI provider for GPT-based classification."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30.0,
        temperature: float = 0.3,
        max_output_tokens: int = 300,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize OpenAI provider.

        Args:
            api_key: OpenAI API key
            model: Chat model name
            base_url: OpenAI-compatible API base URL
            timeout: Request timeout in seconds
            temperature: Sampling temperature
            max_output_tokens: Upper bound on generated tokens
            client: Optional pre-built httpx.AsyncClient (tests)
        """
        super().__init__(timeout, temperature, max_output_tokens)
        self.api_key = api_key
        self._model = model
        self.base_url = base_url.rstrip("/")

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        else:
            logger.warning("openai_no_api_key")

        self._client = client or httpx.AsyncClient(timeout=timeout, headers=headers)

    @property
    def name(self) -> str:
        return "openai"

    def is_available(self) -> bool:
        return bool(self.api_key)

    async def complete(self, system_instructions: str, user_prompt: str) -> ProviderResponse:
        """Run one chat completion.

        Raises:
            TimeoutError: If request exceeds timeout
            ConnectionError: If OpenAI is unreachable or returns an HTTP error
            ValueError: If the response body is malformed
        """
        if not self.api_key:
            raise ConnectionError("OpenAI API key not configured")

        try:
            response = await self._client.post(
                f"{self.base_url}/chat/completions",
                json={
                    "model": self._model,
                    "messages": [
                        {"role": "system", "content": system_instructions},
                        {"role": "user", "content": user_prompt},
                    ],
                    "response_format": {"type": "json_object"},
                    "temperature": self.temperature,
                    "max_tokens": self.max_output_tokens,
                },
            )
            response.raise_for_status()

            result = response.json()
            text = result["choices"][0]["message"]["content"]
            usage = result.get("usage") or {}

        except httpx.TimeoutException as e:
            logger.error("openai_timeout", extra={"error": str(e)})
            raise TimeoutError(f"OpenAI request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error("openai_http_error", extra={"error": str(e)})
            raise ConnectionError(f"OpenAI HTTP error: {e}") from e
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error("openai_parse_error", extra={"error": str(e)})
            raise ValueError(f"Invalid OpenAI response: {e}") from e

        if not isinstance(text, str):
            raise ValueError("Invalid OpenAI response: message content is not text")

        input_tokens = usage.get("prompt_tokens", 0)
        output_tokens = usage.get("completion_tokens", 0)

        logger.info(
            "openai_completion_success",
            extra={
                "model": result.get("model", self._model),
                "input_tokens": input_tokens,
                "output_tokens": output_tokens,
            },
        )

        return ProviderResponse(
            text=text,
            model_name=result.get("model", self._model),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
