"""
Text-generation client for an OpenAI-compatible chat-completions API.

One attempt per call: there is no retry or backoff. Every transport, timeout,
HTTP status or response-shape failure is raised as GenerationError so the
pipeline can answer it with the fallback generator.
"""
from __future__ import annotations

from typing import Any

import httpx
from loguru import logger

from src.core.errors import GenerationError

from .config import AISettings


class TextGenerationClient:
    """Send prompt messages, receive response text."""

    def __init__(
        self,
        settings: AISettings,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize the client.

        Args:
            settings: API key, model, sampling and timeout settings
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        if not settings.has_api_key:
            raise GenerationError("No API key configured")

        self.settings = settings
        self.client = httpx.AsyncClient(
            base_url=settings.api_url.rstrip("/"),
            timeout=httpx.Timeout(settings.timeout_seconds),
            headers={
                "Authorization": f"Bearer {settings.api_key}",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> TextGenerationClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    def _payload(self, messages: list[dict[str, str]]) -> dict[str, Any]:
        return {
            "model": self.settings.model,
            "messages": messages,
            "temperature": self.settings.temperature,
            "max_tokens": self.settings.max_tokens,
        }

    async def complete(self, messages: list[dict[str, str]]) -> str:
        """
        Run one chat completion.

        Returns:
            choices[0].message.content

        Raises:
            GenerationError: On any failure (never retried)
        """
        logger.debug(f"Requesting completion from {self.settings.model} ({len(messages)} messages)")

        try:
            response = await self.client.post("/chat/completions", json=self._payload(messages))
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            raise GenerationError(f"Text generation timed out after {self.settings.timeout_seconds}s") from e
        except httpx.HTTPStatusError as e:
            raise GenerationError(
                f"API request failed: {e.response.status_code} - {_error_detail(e.response)}"
            ) from e
        except httpx.HTTPError as e:
            raise GenerationError(f"API request failed: {e}") from e
        except ValueError as e:
            raise GenerationError("API response was not valid JSON") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise GenerationError("No response generated from AI") from e

        if not isinstance(content, str) or not content.strip():
            raise GenerationError("No response generated from AI")

        return content.strip()


def _error_detail(response: httpx.Response) -> str:
    try:
        return response.json()["error"]["message"]
    except (ValueError, KeyError, TypeError):
        return response.reason_phrase or "Unknown error"
