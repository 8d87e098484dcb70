"""
Chat-completion client (OpenRouter-compatible API) used to generate sample
responses for prompts.
"""
import logging
from typing import Optional, Dict, Any

import httpx

from app.config import settings
from app.modules.generation.schemas import (
    ChatCompletionRequest, ChatCompletionResponse, ChatMessage
)

logger = logging.getLogger(__name__)


class ChatCompletionError(Exception):
    """Raised when the chat-completion endpoint cannot be reached or rejects a request"""
    pass


class ChatCompletionNotConfigured(ChatCompletionError):
    """Raised before any network call when no API key is configured"""
    pass


class ChatCompletionClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.openrouter_api_key
        self.base_url = (base_url or settings.openrouter_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.openrouter_timeout_seconds
        self._transport = transport

    def build_payload(self, request: ChatCompletionRequest) -> Dict[str, Any]:
        """Defaults applied, max_tokens capped, system message prepended"""
        max_tokens = min(request.max_tokens or settings.openrouter_max_tokens, settings.openrouter_max_tokens_cap)
        messages = [{"role": "system", "content": settings.openrouter_system_prompt}]
        messages.extend(message.model_dump() for message in request.messages)
        return {
            "model": request.model or settings.openrouter_default_model,
            "messages": messages,
            "temperature": request.temperature if request.temperature is not None else settings.openrouter_temperature,
            "max_tokens": max_tokens,
        }

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
            "HTTP-Referer": settings.openrouter_referer,
            "X-Title": settings.openrouter_app_title,
        }

    async def chat_completion(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        if not self.api_key:
            raise ChatCompletionNotConfigured(
                "OpenRouter API key is not configured. Please check your environment variables."
            )

        payload = self.build_payload(request)
        logger.info(
            "Sending request to OpenRouter: url=%s/chat/completions model=%s messages=%d max_tokens=%d",
            self.base_url, payload["model"], len(payload["messages"]), payload["max_tokens"],
        )

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post("/chat/completions", json=payload, headers=self._headers())
        except httpx.HTTPError as e:
            logger.error(f"Error calling OpenRouter API: {e}")
            raise ChatCompletionError(f"OpenRouter API error: {e}") from e

        if response.is_error:
            logger.error(
                "OpenRouter API error: status=%s reason=%s body=%s",
                response.status_code, response.reason_phrase, response.text,
            )
            raise ChatCompletionError(
                f"OpenRouter API error: {response.status_code} {response.reason_phrase} - {response.text}"
            )

        try:
            data = ChatCompletionResponse(**response.json())
        except ValueError as e:
            raise ChatCompletionError(f"OpenRouter API error: malformed response ({e})") from e

        logger.info("Received response from OpenRouter: id=%s choices=%d", data.id, len(data.choices))
        return data

    async def generate_response(
        self,
        prompt: str,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Send a single user message and return the first choice's content"""
        result = await self.chat_completion(ChatCompletionRequest(
            model=model,
            messages=[ChatMessage(role="user", content=prompt)],
            temperature=temperature,
            max_tokens=max_tokens,
        ))
        if not result.choices:
            raise ChatCompletionError("OpenRouter API error: response contained no choices")
        return result.choices[0].message.content
