"""
llm/client.py

Async httpx client for an OpenAI-compatible /completions endpoint.

Responsibilities:
  - POST the prompt with a bounded max_tokens
  - Enforce a hard timeout per call
  - Turn every transport/HTTP/format problem into EnrichmentFailure

Usage:
    async with CompletionClient(base_url, model, api_key) as client:
        text = await client.complete(prompt, max_tokens=50)

The client owns one httpx.AsyncClient for its whole lifetime; build it
once and pass it to whoever needs it.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from ..errors import EnrichmentFailure
from .validator import extract_completion_text

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS = 8.0


class CompletionClient:
    """
    Args:
        base_url:  API root, e.g. "https://api.openai.com/v1"
        model:     Completion model name
        api_key:   Bearer token; no Authorization header when empty
        timeout:   Hard per-call timeout in seconds
        transport: Optional httpx transport (tests pass httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str = "https://api.openai.com/v1",
        model: str = "gpt-3.5-turbo-instruct",
        api_key: str = "",
        timeout: float = _DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = timeout
        headers = {"Authorization": f"Bearer {api_key}"} if api_key else {}
        self._http = httpx.AsyncClient(
            headers=headers,
            timeout=timeout + 1,
            transport=transport,
        )
        self.stats: dict[str, int] = {
            "calls_made": 0,
            "timeouts": 0,
            "errors": 0,
        }

    async def complete(self, prompt: str, max_tokens: int) -> str:
        """Return the trimmed completion text, or raise EnrichmentFailure."""
        payload = {
            "model": self.model,
            "prompt": prompt,
            "max_tokens": max_tokens,
            "temperature": 0.2,
        }
        self.stats["calls_made"] += 1
        try:
            async with asyncio.timeout(self.timeout):
                resp = await self._http.post(f"{self.base_url}/completions", json=payload)
                resp.raise_for_status()
                data = resp.json()
        except asyncio.TimeoutError as exc:
            self.stats["timeouts"] += 1
            raise EnrichmentFailure(f"completion timed out after {self.timeout:.1f}s") from exc
        except httpx.HTTPStatusError as exc:
            self.stats["errors"] += 1
            raise EnrichmentFailure(
                f"completion endpoint returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            self.stats["errors"] += 1
            raise EnrichmentFailure(f"completion request failed: {exc!r}") from exc
        except ValueError as exc:
            self.stats["errors"] += 1
            raise EnrichmentFailure(f"completion response is not JSON: {exc}") from exc

        return extract_completion_text(data)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> CompletionClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"<CompletionClient {self.base_url} model={self.model!r}>"
