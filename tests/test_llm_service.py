import json

import httpx
import pytest

from app.core.exceptions import LLMServiceError
from app.integrations.llm.service import LLMService


def gemini_body(text: str) -> dict:
    return {
        "candidates": [{"content": {"parts": [{"text": text}]}, "finishReason": "STOP"}],
        "usageMetadata": {"promptTokenCount": 10, "candidatesTokenCount": 5, "totalTokenCount": 15},
    }


def service(handler, provider="gemini") -> LLMService:
    return LLMService(
        provider=provider,
        api_key="test-key",
        model_name="test-model",
        timeout=5,
        transport=httpx.MockTransport(handler),
    )


class TestGemini:
    async def test_complete(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=gemini_body('{"isTransaction": false}'))

        response = await service(handler).complete("Oi", max_tokens=100, temperature=0)

        assert response.content == '{"isTransaction": false}'
        assert response.finish_reason == "stop"
        assert response.usage["total_tokens"] == 15
        assert "models/test-model:generateContent" in seen["url"]
        assert "key=test-key" in seen["url"]
        assert seen["body"]["contents"][0]["parts"][0]["text"] == "Oi"

    async def test_non_2xx_raises(self):
        llm = service(lambda request: httpx.Response(503, text="unavailable"))
        with pytest.raises(LLMServiceError):
            await llm.complete("Oi")

    async def test_network_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(LLMServiceError):
            await service(handler).complete("Oi")

    async def test_timeout_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(LLMServiceError):
            await service(handler).complete("Oi")

    async def test_body_without_candidates_raises(self):
        llm = service(lambda request: httpx.Response(200, json={"candidates": []}))
        with pytest.raises(LLMServiceError):
            await llm.complete("Oi")

    async def test_non_json_body_raises(self):
        llm = service(lambda request: httpx.Response(200, text="<html>"))
        with pytest.raises(LLMServiceError):
            await llm.complete("Oi")


class TestGroq:
    async def test_complete(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["Authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "model": "test-model",
                    "choices": [{"message": {"content": "<s>olá</s>"}, "finish_reason": "stop"}],
                },
            )

        response = await service(handler, provider="groq").complete("Oi")

        assert response.content == "olá"
        assert seen["auth"] == "Bearer test-key"
        assert seen["body"]["model"] == "test-model"
        assert seen["body"]["messages"][0] == {"role": "user", "content": "Oi"}

    async def test_missing_key_raises_without_request(self):
        def handler(request):
            raise AssertionError("no request expected")

        llm = LLMService(provider="groq", api_key="", transport=httpx.MockTransport(handler))
        llm.api_key = ""
        with pytest.raises(LLMServiceError):
            await llm.complete("Oi")
