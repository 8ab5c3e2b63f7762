"""Tests for the LLM client request building and credential checks."""

import json
from unittest.mock import patch

import httpx
import pytest

from aisle.services import llm


class TestRequestBuilding:
    def test_extract_text_anthropic(self) -> None:
        data = {
            "content": [{"type": "text", "text": "Hello"}],
            "usage": {"input_tokens": 10, "output_tokens": 3},
        }
        assert llm._extract_text("anthropic", data) == ("Hello", 10, 3)

    def test_extract_text_openai(self) -> None:
        data = {
            "choices": [{"message": {"content": "Hello"}}],
            "usage": {"prompt_tokens": 10, "completion_tokens": 3},
        }
        assert llm._extract_text("openai", data) == ("Hello", 10, 3)


class TestCredentials:
    @pytest.mark.asyncio
    async def test_missing_key_raises_before_io(self) -> None:
        with patch.object(llm, "_get_provider_config", return_value=("anthropic", "https://api.anthropic.com", "")), \
                patch.object(llm, "_get_client") as get_client:
            with pytest.raises(ValueError):
                await llm.complete("system", [{"role": "user", "content": "hi"}])
        get_client.assert_not_called()


class TestComplete:
    @pytest.mark.asyncio
    async def test_anthropic_round_trip(self) -> None:
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["headers"] = request.headers
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "content": [{"type": "text", "text": "Congratulations."}],
                "usage": {"input_tokens": 12, "output_tokens": 2},
            })

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        with patch.object(llm, "_get_client", return_value=client):
            text = await llm.complete(
                "You are Aisle.",
                [{"role": "user", "content": "We got engaged"}],
                max_tokens=500,
                provider="anthropic",
            )
        await client.aclose()

        assert text == "Congratulations."
        assert captured["url"].endswith("/v1/messages")
        assert captured["headers"]["x-api-key"] == "test-anthropic-key"
        assert captured["body"]["system"] == "You are Aisle."
        assert captured["body"]["max_tokens"] == 500
        assert captured["body"]["messages"] == [{"role": "user", "content": "We got engaged"}]

    @pytest.mark.asyncio
    async def test_provider_error_propagates(self) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(529, text="overloaded")))
        with patch.object(llm, "_get_client", return_value=client):
            with pytest.raises(httpx.HTTPStatusError):
                await llm.complete("s", [{"role": "user", "content": "hi"}], provider="anthropic")
        await client.aclose()

    def test_openai_request_prepends_system(self) -> None:
        url, headers, payload = llm._build_openai_request(
            "https://api.openai.com/v1", "k", "sys", [{"role": "user", "content": "hi"}], "gpt-4o", 100,
        )
        assert url == "https://api.openai.com/v1/chat/completions"
        assert headers["Authorization"] == "Bearer k"
        assert payload["messages"][0] == {"role": "system", "content": "sys"}
