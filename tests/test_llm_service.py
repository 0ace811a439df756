"""
Tests for the text completion service.
"""
import json

import httpx
import pytest

from omniforge.providers.exceptions import ProviderError, ProviderQuotaExceeded, ProviderUnavailable
from omniforge.services.llm_service import LLMService


def make_service(handler, api_key="sk-test-key-for-testing"):
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return LLMService(api_key=api_key, base_url="https://api.test/v1", client=client)


class TestLLMService:

    @pytest.mark.asyncio
    async def test_generate_text_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={
                "model": "gpt-4o-mini-2024",
                "choices": [{"message": {"role": "assistant", "content": "Hello there"}}],
                "usage": {"prompt_tokens": 5, "completion_tokens": 2, "total_tokens": 7},
            })

        service = make_service(handler)
        result = await service.generate_text("Say hi", system_prompt="Be brief.", temperature=0.2, max_tokens=50)

        assert result.content == "Hello there"
        assert result.model == "gpt-4o-mini-2024"
        assert result.usage.total_tokens == 7
        assert seen["url"] == "https://api.test/v1/chat/completions"
        assert seen["auth"] == "Bearer sk-test-key-for-testing"
        assert seen["body"]["messages"][0] == {"role": "system", "content": "Be brief."}
        assert seen["body"]["temperature"] == 0.2
        assert "response_format" not in seen["body"]

    @pytest.mark.asyncio
    async def test_json_mode_sets_response_format(self):
        seen = {}

        def handler(request):
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": "{}"}}]})

        service = make_service(handler)
        result = await service.generate_text("classify", json_mode=True)

        assert seen["body"]["response_format"] == {"type": "json_object"}
        assert result.usage is None
        assert result.model == service.model

    @pytest.mark.asyncio
    async def test_missing_key_raises_unavailable(self):
        def handler(request):
            raise AssertionError("no request expected")

        service = make_service(handler, api_key="PASTE_KEY_HERE")

        assert service.is_available is False
        with pytest.raises(ProviderUnavailable):
            await service.generate_text("hi")

    @pytest.mark.asyncio
    async def test_http_error_raises_provider_error(self):
        service = make_service(lambda request: httpx.Response(500, text="internal error"))

        with pytest.raises(ProviderError) as exc_info:
            await service.generate_text("hi")

        assert exc_info.value.status_code == 500
        assert not isinstance(exc_info.value, ProviderQuotaExceeded)

    @pytest.mark.asyncio
    async def test_quota_error_is_classified(self):
        service = make_service(lambda request: httpx.Response(
            429, json={"error": {"code": "insufficient_quota", "message": "You exceeded your quota"}},
        ))

        with pytest.raises(ProviderQuotaExceeded):
            await service.generate_text("hi")

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        service = make_service(handler)

        with pytest.raises(ProviderError) as exc_info:
            await service.generate_text("hi")

        assert "connection refused" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_close_keeps_injected_client_open(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        service = LLMService(api_key="sk-test", client=client)

        await service.close()

        assert client.is_closed is False
        await client.aclose()

    @pytest.mark.parametrize("body", [
        ["not", "an", "object"],
        {"choices": ["oops"]},
        {"choices": [{"message": "plain string"}]},
        {"choices": [{"message": {"content": [{"type": "text", "text": "Hello"}]}}]},
    ])
    @pytest.mark.asyncio
    async def test_malformed_body_raises_provider_error(self, body):
        service = make_service(lambda request: httpx.Response(200, json=body))

        with pytest.raises(ProviderError) as exc_info:
            await service.generate_text("hi")

        assert "malformed" in str(exc_info.value)
