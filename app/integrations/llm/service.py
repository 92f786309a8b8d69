import logging
import re
from typing import Dict, Any, Optional, List, Union
from dataclasses import dataclass

import httpx

from app.core.config import config
from app.core.exceptions import LLMServiceError

logger = logging.getLogger(__name__)

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
GROQ_URL = "https://api.groq.com/openai/v1/chat/completions"

_SPECIAL_TOKENS = re.compile(
    r"<｜(?:begin|end)▁of▁sentence｜>"
    r"|<\|(?:begin|end)_of_(?:sentence|text)\|>"
    r"|<\|im_(?:start|end)\|>"
    r"|</?s>"
)


@dataclass
class LLMMessage:
    """Represents a message in the conversation."""

    role: str  # "system", "user", "assistant"
    content: str


@dataclass
class LLMRequest:
    """Represents a request to the LLM service."""

    messages: List[LLMMessage]
    model: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    top_p: Optional[float] = None
    call_stack: Optional[str] = None


@dataclass
class LLMResponse:
    """Represents a response from the LLM service."""

    content: str
    usage: Optional[Dict[str, int]] = None
    model: Optional[str] = None
    finish_reason: Optional[str] = None
    raw_response: Optional[Dict[str, Any]] = None


class LLMService:
    """Prompt-in, text-out completion client for Gemini and Groq.

    Every transport problem (timeout, network error, non-2xx status, body
    without a completion) is raised as ``LLMServiceError``; retry policy
    belongs to the caller.
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the LLM service."""
        self.provider = provider or config.llm_provider
        if self.provider == "groq":
            self.api_key = api_key or config.groq_api_key
            self.default_model = model_name or config.groq_model_name
        else:
            self.api_key = api_key or config.gemini_key
            self.default_model = model_name or config.gemini_model_name
        self.timeout = timeout or config.llm_timeout
        # Injected in tests (httpx.MockTransport)
        self.transport = transport

        if not self.api_key:
            logger.warning(f"{self.provider} API key not configured")

    async def complete(
        self,
        prompt: str,
        model: Optional[str] = None,
        max_tokens: int = 1000,
        temperature: float = 0.7,
        **kwargs,
    ) -> LLMResponse:
        """Simple completion interface for single prompt requests."""
        messages = [LLMMessage(role="user", content=prompt)]
        request = LLMRequest(
            messages=messages,
            model=model,
            max_tokens=max_tokens,
            temperature=temperature,
            **kwargs,
        )
        return await self.chat(request)

    async def chat(self, request: LLMRequest) -> LLMResponse:
        """Send the conversation to the configured provider."""
        if not self.api_key:
            raise LLMServiceError(f"{self.provider} API key not configured")

        if request.call_stack:
            logger.debug(f"LLM call from {request.call_stack}")

        if self.provider == "groq":
            payload = self._build_payload(request)
            data = await self._post(
                GROQ_URL,
                payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            return self._parse_response(data)

        payload, model = self._build_gemini_payload(request)
        data = await self._post(
            f"{GEMINI_BASE_URL}/models/{model}:generateContent",
            payload,
            params={"key": self.api_key},
        )
        return self._parse_gemini_response(data, model)

    def _build_payload(self, request: LLMRequest) -> Dict[str, Any]:
        """Build API payload from request (for Groq)."""
        payload: Dict[str, Any] = {
            "model": request.model or self.default_model,
            "messages": [
                {"role": msg.role, "content": msg.content} for msg in request.messages
            ],
        }

        # Add optional parameters
        if request.max_tokens is not None:
            payload["max_tokens"] = request.max_tokens
        if request.temperature is not None:
            payload["temperature"] = request.temperature
        if request.top_p is not None:
            payload["top_p"] = request.top_p

        return payload

    def _build_gemini_payload(self, request: LLMRequest) -> tuple[Dict[str, Any], str]:
        """Build Gemini API payload from request."""
        model = request.model or self.default_model

        contents = []
        system_instruction = None

        for msg in request.messages:
            if msg.role == "system":
                system_instruction = msg.content
            else:
                # Gemini uses "user" and "model" roles (not "assistant")
                role = "user" if msg.role == "user" else "model"
                contents.append({"role": role, "parts": [{"text": msg.content}]})

        payload: Dict[str, Any] = {"contents": contents}

        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}

        generation_config: Dict[str, Any] = {}
        if request.max_tokens is not None:
            generation_config["maxOutputTokens"] = request.max_tokens
        if request.temperature is not None:
            generation_config["temperature"] = request.temperature
        if request.top_p is not None:
            generation_config["topP"] = request.top_p

        if generation_config:
            payload["generationConfig"] = generation_config

        return payload, model

    async def _post(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        """POST a JSON payload and return the decoded body."""
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport
            ) as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={"Content-Type": "application/json", **(headers or {})},
                    params=params,
                )
        except httpx.TimeoutException as e:
            logger.warning(f"{self.provider} request timed out: {e}")
            raise LLMServiceError(f"{self.provider} request timed out")
        except httpx.RequestError as e:
            logger.error(f"Network error calling {self.provider}: {e}")
            raise LLMServiceError(f"network error: {e}")

        if not response.is_success:
            logger.error(
                f"{self.provider} API error: HTTP {response.status_code}: {response.text[:500]}"
            )
            raise LLMServiceError(f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise LLMServiceError(f"invalid JSON body: {e}")

        if not isinstance(data, dict):
            raise LLMServiceError("unexpected response body")
        return data

    def _parse_gemini_response(self, data: Dict[str, Any], model: str) -> LLMResponse:
        """Parse the Gemini API response into an LLMResponse object."""
        try:
            if "candidates" not in data or not data["candidates"]:
                raise LLMServiceError("No candidates in Gemini API response")

            candidate = data["candidates"][0]
            content_parts = candidate.get("content", {}).get("parts", [])

            if not content_parts:
                raise LLMServiceError("No content parts in Gemini response")

            content = self._clean_special_tokens(content_parts[0].get("text", ""))
            if not content:
                raise LLMServiceError("Empty content in Gemini response")

            usage = None
            if "usageMetadata" in data:
                usage_meta = data["usageMetadata"]
                usage = {
                    "prompt_tokens": usage_meta.get("promptTokenCount", 0),
                    "completion_tokens": usage_meta.get("candidatesTokenCount", 0),
                    "total_tokens": usage_meta.get("totalTokenCount", 0),
                }

            finish_reason = candidate.get("finishReason", "STOP")
            # Map Gemini finish reasons to standard ones
            if finish_reason == "STOP":
                finish_reason = "stop"
            elif finish_reason == "MAX_TOKENS":
                finish_reason = "length"

            return LLMResponse(
                content=content,
                usage=usage,
                model=data.get("modelVersion", model),
                finish_reason=finish_reason,
                raw_response=data,
            )

        except (KeyError, IndexError, AttributeError, TypeError) as e:
            logger.error(f"Unexpected Gemini response format: {data}")
            raise LLMServiceError(f"Unexpected Gemini response format: {str(e)}")

    def _parse_response(self, data: Dict[str, Any]) -> LLMResponse:
        """Parse the API response into an LLMResponse object (for Groq)."""
        try:
            if "choices" not in data or not data["choices"]:
                raise LLMServiceError("No choices in API response")

            choice = data["choices"][0]
            message = choice.get("message", {})
            content = self._clean_special_tokens(message.get("content") or "")

            if not content:
                raise LLMServiceError("Empty content in LLM response")

            return LLMResponse(
                content=content,
                usage=data.get("usage"),
                model=data.get("model"),
                finish_reason=choice.get("finish_reason"),
                raw_response=data,
            )

        except (KeyError, IndexError, AttributeError, TypeError) as e:
            logger.error(f"Unexpected response format: {data}")
            raise LLMServiceError(f"Unexpected response format: {str(e)}")

    def _clean_special_tokens(self, content: str) -> str:
        """Remove control tokens some models leak into the completion."""
        return _SPECIAL_TOKENS.sub("", content).strip()

    def get_model_info(self) -> Dict[str, Union[str, bool]]:
        """Get information about the current model configuration."""
        return {
            "provider": self.provider,
            "default_model": self.default_model,
            "timeout": str(self.timeout),
            "api_key_configured": bool(self.api_key),
        }
