from __future__ import annotations

import asyncio

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from serverforge.llm.openrouter import CompletionError, OpenRouterClient


@pytest.fixture
async def completions():
    """Local chat-completions endpoint; tests set ``state["reply"]`` to a handler result."""
    state = {"requests": [], "reply": web.json_response({"choices": [{"message": {"content": " hello "}}]})}

    async def handler(request: web.Request) -> web.StreamResponse:
        state["requests"].append((dict(request.headers), await request.json()))
        reply = state["reply"]
        if callable(reply):
            return await reply()
        return reply

    app = web.Application()
    app.router.add_post("/api/v1/chat/completions", handler)
    server = TestServer(app)
    await server.start_server()
    state["base_url"] = str(server.make_url("/api/v1"))
    try:
        yield state
    finally:
        await server.close()


def _client(state, **kwargs) -> OpenRouterClient:
    kwargs.setdefault("referer", "https://example.org")
    kwargs.setdefault("title", "ServerForge")
    return OpenRouterClient("sk-test", base_url=state["base_url"], **kwargs)


async def test_complete_returns_stripped_content(completions):
    client = _client(completions)
    try:
        text = await client.complete("some/model", "Design a server", temperature=0.7, max_tokens=100)
    finally:
        await client.close()

    assert text == "hello"
    headers, payload = completions["requests"][0]
    assert headers["Authorization"] == "Bearer sk-test"
    assert headers["HTTP-Referer"] == "https://example.org"
    assert headers["X-Title"] == "ServerForge"
    assert payload == {
        "model": "some/model",
        "messages": [{"role": "user", "content": "Design a server"}],
        "temperature": 0.7,
        "max_tokens": 100,
    }


async def test_non_success_status_raises(completions):
    completions["reply"] = web.Response(status=429, text="rate limited")
    client = _client(completions)
    try:
        with pytest.raises(CompletionError) as excinfo:
            await client.complete("m", "p", temperature=0.1, max_tokens=10)
    finally:
        await client.close()

    assert excinfo.value.status == 429
    assert "rate limited" in str(excinfo.value)


@pytest.mark.parametrize("body", [
    {"choices": []},
    {"choices": [{"message": {}}]},
    {"choices": [{"message": {"content": "   "}}]},
    {"error": "nope"},
])
async def test_missing_content_raises(completions, body):
    completions["reply"] = web.json_response(body)
    client = _client(completions)
    try:
        with pytest.raises(CompletionError):
            await client.complete("m", "p", temperature=0.1, max_tokens=10)
    finally:
        await client.close()


async def test_undecodable_body_raises(completions):
    completions["reply"] = web.Response(text="<html>gateway</html>")
    client = _client(completions)
    try:
        with pytest.raises(CompletionError):
            await client.complete("m", "p", temperature=0.1, max_tokens=10)
    finally:
        await client.close()


async def test_timeout_raises(completions):
    async def slow() -> web.Response:
        await asyncio.sleep(1)
        return web.json_response({})

    completions["reply"] = slow
    client = _client(completions, timeout_seconds=0.05)
    try:
        with pytest.raises(CompletionError):
            await client.complete("m", "p", temperature=0.1, max_tokens=10)
    finally:
        await client.close()


async def test_missing_api_key_raises_without_request(completions):
    client = OpenRouterClient("", base_url=completions["base_url"])
    with pytest.raises(CompletionError):
        await client.complete("m", "p", temperature=0.1, max_tokens=10)
    assert completions["requests"] == []
    await client.close()
