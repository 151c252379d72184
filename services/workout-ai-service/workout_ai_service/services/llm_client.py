from __future__ import annotations

from typing import Any

import httpx
import structlog
from backend_common.http_client import ServiceClient
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from ..config import Settings
from ..exceptions import ConfigurationError, UpstreamError

logger = structlog.get_logger(__name__)


def _content_to_text(content: Any) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        # multi-part responses: keep text parts only
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and isinstance(part.get("text"), str):
                parts.append(part["text"])
        return "".join(parts)
    return str(content or "")


class GeminiChatClient:
    """Text completion through langchain's Gemini chat model."""

    provider = "gemini"

    def __init__(self, settings: Settings):
        api_key = settings.google_api_key
        if not api_key:
            raise ConfigurationError("GOOGLE_API_KEY (or GEMINI_API_KEY) must be set for workout generation")
        self.model = settings.LLM_MODEL
        self._llm = ChatGoogleGenerativeAI(
            model=settings.LLM_MODEL,
            temperature=settings.LLM_TEMPERATURE,
            google_api_key=api_key,
            timeout=settings.LLM_TIMEOUT_SECONDS,
        )

    async def complete(self, *, system_prompt: str, user_prompt: str) -> str:
        messages = [SystemMessage(content=system_prompt), HumanMessage(content=user_prompt)]
        try:
            response = await self._llm.ainvoke(messages)
        except Exception as exc:
            logger.warning("llm_request_failed", provider=self.provider, model=self.model, error=str(exc))
            raise UpstreamError(f"AI request failed: {exc}") from exc
        return _content_to_text(response.content)


class ChatCompletionsGatewayClient:
    """Text completion through an OpenAI-compatible chat-completions endpoint."""

    provider = "gateway"

    def __init__(self, settings: Settings, *, transport: httpx.AsyncBaseTransport | None = None):
        if not settings.LLM_GATEWAY_URL or not settings.LLM_GATEWAY_API_KEY:
            raise ConfigurationError("LLM_GATEWAY_URL and LLM_GATEWAY_API_KEY must be set for the gateway provider")
        self.model = settings.LLM_MODEL
        self._url = settings.LLM_GATEWAY_URL
        self._api_key = settings.LLM_GATEWAY_API_KEY
        self._temperature = settings.LLM_TEMPERATURE
        self._timeout = settings.LLM_TIMEOUT_SECONDS
        self._transport = transport

    async def complete(self, *, system_prompt: str, user_prompt: str) -> str:
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self._temperature,
            "response_format": {"type": "json_object"},
        }
        async with ServiceClient(
            timeout=self._timeout,
            headers={"Authorization": f"Bearer {self._api_key}"},
            transport=self._transport,
        ) as client:
            resp = await client.post(self._url, json=payload, expected_status=200, provider=self.provider)

        if not resp.success:
            status = resp.status_code
            raise UpstreamError(f"AI API error: {status if status is not None else resp.error}", status=status)

        data = resp.data if isinstance(resp.data, dict) else {}
        choices = data.get("choices") or [{}]
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        return _content_to_text((message or {}).get("content"))


def build_llm_client(settings: Settings):
    provider = settings.LLM_PROVIDER.lower()
    if provider == "gemini":
        return GeminiChatClient(settings)
    if provider == "gateway":
        return ChatCompletionsGatewayClient(settings)
    raise ConfigurationError(f"Unsupported LLM provider: {settings.LLM_PROVIDER}")
