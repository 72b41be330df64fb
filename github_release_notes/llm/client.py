"""Client for OpenAI-compatible chat-completions APIs."""

from typing import Any, Self

import httpx
import structlog

from github_release_notes.configuration.models import TextGenerationConfig
from github_release_notes.utils.constants import DEFAULT_HTTP_TIMEOUT_SECONDS
from github_release_notes.utils.retry import retry_on_rate_limit

logger = structlog.get_logger(__name__)


class TextGenerationError(Exception):
    """Raised when the text generation service cannot be reached or rejects the request."""

    pass


class ModelOutputError(Exception):
    """Raised when the text generation service answers without usable content."""

    pass


def extract_message_content(data: Any) -> str | None:
    """Return the text at choices[0].message.content, or None when it is absent or blank."""
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    if not isinstance(content, str) or not content.strip():
        return None
    return content.strip()


class ChatCompletionsClient:
    """Sends prompts to ``POST {api_url}/chat/completions`` and returns the generated text.

    The API key is only ever placed in the Authorization header of outgoing
    requests; it is never logged nor included in raised errors.
    """

    def __init__(
        self,
        api_key: str,
        api_url: str,
        model: str,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client; ``transport`` lets tests substitute an in-memory transport."""
        self.model = model
        self._client = httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: TextGenerationConfig,
        timeout: float = DEFAULT_HTTP_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Self:
        """Create a client from resolved text generation settings."""
        return cls(api_key=config.api_key, api_url=config.api_url, model=config.model, timeout=timeout, transport=transport)

    @retry_on_rate_limit()
    async def _post_chat_completion(self, payload: dict[str, Any]) -> Any:
        response = await self._client.post("/chat/completions", json=payload)
        response.raise_for_status()
        return response.json()

    async def generate(self, system_prompt: str, prompt: str, max_tokens: int) -> str:
        """Generate text for a prompt.

        Args:
            system_prompt: Instruction framing the assistant's role.
            prompt: The user message.
            max_tokens: Upper bound on generated tokens.

        Returns:
            The generated text.

        Raises:
            TextGenerationError: On timeouts, connection errors, non-2xx responses or undecodable bodies.
            ModelOutputError: When the response carries no text at choices[0].message.content.
        """
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": prompt},
            ],
            "max_tokens": max_tokens,
        }
        try:
            data = await self._post_chat_completion(payload)
        except httpx.HTTPStatusError as e:
            logger.warning("Text generation request rejected", status_code=e.response.status_code, model=self.model)
            raise TextGenerationError(f"Text generation request failed with HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning("Text generation request failed", error_type=type(e).__name__, model=self.model)
            raise TextGenerationError(f"Text generation request failed: {type(e).__name__}") from e
        except ValueError as e:
            logger.warning("Text generation response is not valid JSON", model=self.model)
            raise TextGenerationError("Text generation response is not valid JSON") from e

        content = extract_message_content(data)
        if content is None:
            logger.warning("Text generation response has no content", model=self.model)
            raise ModelOutputError("Text generation response has no content at choices[0].message.content")
        return content

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *_exc: object) -> None:
        await self.aclose()
