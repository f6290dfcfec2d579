"""
OpenRouter chat-completions client.

Only the plain text of the first choice is used; no structured-output
features are relied on.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Protocol

import aiohttp
from aiohttp import ClientTimeout

log = logging.getLogger("serverforge.openrouter")

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"


class CompletionError(Exception):
    """The completion service could not produce usable text."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class CompletionClient(Protocol):
    async def complete(
        self,
        model: str,
        prompt: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str: ...


class OpenRouterClient:
    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        referer: str = "",
        title: str = "",
        timeout_seconds: float = 60.0,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.referer = referer
        self.title = title
        self.timeout = ClientTimeout(total=timeout_seconds)
        self._session: Optional[aiohttp.ClientSession] = None

        if not self.api_key:
            log.error("No OpenRouter API key configured (OPENROUTER_API_KEY); generation will use the fallback layout")

    def _headers(self) -> dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        if self.referer:
            headers["HTTP-Referer"] = self.referer
        if self.title:
            headers["X-Title"] = self.title
        return headers

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def complete(
        self,
        model: str,
        prompt: str,
        *,
        temperature: float,
        max_tokens: int,
    ) -> str:
        if not self.api_key:
            raise CompletionError("OpenRouter API key is not configured")

        payload = {
            "model": model,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }

        try:
            session = self._get_session()
            async with session.post(
                f"{self.base_url}/chat/completions", json=payload, headers=self._headers()
            ) as resp:
                if resp.status < 200 or resp.status >= 300:
                    body = (await resp.text())[:200]
                    raise CompletionError(f"HTTP {resp.status}: {body}", status=resp.status)
                try:
                    data = await resp.json(content_type=None)
                except ValueError as e:
                    raise CompletionError(f"Undecodable response body: {e}", status=resp.status) from e
        except aiohttp.ClientError as e:
            raise CompletionError(f"Transport error: {e}") from e
        except asyncio.TimeoutError as e:
            raise CompletionError("Completion request timed out") from e

        content = _message_content(data)
        if not content:
            raise CompletionError("Invalid API response structure")

        log.debug("Model %s responded with %d chars", model, len(content))
        return content


def _message_content(data: Any) -> str:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return ""
    return content.strip() if isinstance(content, str) else ""
