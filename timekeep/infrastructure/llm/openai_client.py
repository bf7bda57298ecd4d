"""
Chat-completions client for the language model proxy.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from timekeep.domain.models.base import UpstreamError

logger = logging.getLogger(__name__)


class OpenAIChatClient:
    """
    Thin async client for the ``/chat/completions`` endpoint.

    Any transport error, timeout, non-2xx status or malformed body is raised
    as UpstreamError. The upstream text is logged, never returned.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-4o-mini",
        temperature: float = 0.7,
        max_tokens: int = 800,
        timeout_seconds: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=httpx.Timeout(timeout_seconds),
            follow_redirects=False,
            transport=transport,
        )

    async def complete(self, messages: List[Dict[str, str]]) -> str:
        """Send the conversation and return the assistant's reply text."""
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

        try:
            response = await self._client.post("/chat/completions", json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"Language model request timed out: {e}")
            raise UpstreamError("The language model did not answer in time", service="llm") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"Language model returned {e.response.status_code}: {e.response.text[:500]}")
            raise UpstreamError("The language model request failed", service="llm") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Language model request failed: {e}")
            raise UpstreamError("The language model request failed", service="llm") from e

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected language model response shape: {data!r:.500}")
            raise UpstreamError("The language model returned an invalid response", service="llm") from e

        return content or ""

    async def aclose(self) -> None:
        await self._client.aclose()
