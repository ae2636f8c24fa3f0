# uigen/llm/providers/openai.py
"""
OpenAI provider implementation.
"""
import json
import uuid
from typing import Any, AsyncIterator, Dict, List, Optional

from uigen.core.exceptions import LLMError
from uigen.core.logging import log
from uigen.llm.http import VendorResponseError
from uigen.llm.providers.base import BaseAIProvider
from uigen.models.ai import (
    AIGenerateOptions,
    AIMessage,
    AIResponse,
    AIStreamChunk,
    AIToolCall,
    TokenUsage,
)


DEFAULT_BASE_URL = "https://api.openai.com/v1"

ERROR_MESSAGES = {
    "insufficient_quota": "OpenAI API quota exceeded. Please check your billing.",
    "rate_limit_exceeded": "OpenAI API rate limit exceeded. Please try again later.",
    "invalid_api_key": "Invalid OpenAI API key. Please check your configuration.",
}


class OpenAIProvider(BaseAIProvider):

    async def initialize(self) -> None:
        self.validate_api_key()
        self._mark_initialized()

    @property
    def url(self) -> str:
        return f"{(self.config.base_url or DEFAULT_BASE_URL).rstrip('/')}/chat/completions"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def convert_messages(messages: List[AIMessage], system_prompt: Optional[str] = None) -> List[Dict[str, str]]:
        """System prompt first, then system messages, then the conversation."""
        result = []
        if system_prompt:
            result.append({"role": "system", "content": system_prompt})
        result.extend({"role": "system", "content": m.content} for m in messages if m.role == "system")
        result.extend({"role": m.role, "content": m.content} for m in messages if m.role != "system")
        return result

    def _payload(self, messages: List[AIMessage], options: Optional[AIGenerateOptions], stream: bool = False) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.config.model,
            "messages": self.convert_messages(messages, options.system_prompt if options else None),
            "max_tokens": self.max_tokens(options),
            "temperature": self.temperature(options),
            "stream": stream,
        }
        if self.top_p(options) is not None:
            payload["top_p"] = self.top_p(options)
        if options and options.tools:
            payload["tools"] = [
                {
                    "type": "function",
                    "function": {"name": t.name, "description": t.description, "parameters": t.parameters},
                }
                for t in options.tools
            ]
        if stream:
            payload["stream_options"] = {"include_usage": True}
        return payload

    def _tool_call(self, raw: Dict[str, Any]) -> AIToolCall:
        function = raw.get("function") or {}
        arguments = function.get("arguments") or "{}"
        try:
            parsed = json.loads(arguments) if isinstance(arguments, str) else arguments
        except ValueError:
            log("PROVIDER", f"⚠️ Unparseable tool arguments from {self.config.name}: {arguments[:100]}")
            parsed = {}
        return AIToolCall(id=raw.get("id") or f"call_{uuid.uuid4().hex[:12]}", name=function.get("name", ""), arguments=parsed)

    async def generate_content(
        self, messages: List[AIMessage], options: Optional[AIGenerateOptions] = None
    ) -> AIResponse:
        self.ensure_initialized()
        data = await self._post_json(self.url, self._payload(messages, options), self._headers())

        choices = data.get("choices") or []
        if not choices or not choices[0].get("message"):
            raise LLMError(self.config.id, "No response content received from OpenAI")

        choice = choices[0]
        message = choice["message"]
        usage = data.get("usage")
        return AIResponse(
            content=message.get("content") or "",
            usage=TokenUsage(
                input_tokens=usage.get("prompt_tokens", 0),
                output_tokens=usage.get("completion_tokens", 0),
                total_tokens=usage.get("total_tokens", 0),
            ) if usage else None,
            model=data.get("model", self.config.model),
            finish_reason=choice.get("finish_reason"),
            tool_calls=[self._tool_call(raw) for raw in message.get("tool_calls") or []],
        )

    async def generate_content_stream(
        self, messages: List[AIMessage], options: Optional[AIGenerateOptions] = None
    ) -> AsyncIterator[AIStreamChunk]:
        self.ensure_initialized()
        usage: Optional[TokenUsage] = None

        async for _, data in self._stream_sse(self.url, self._payload(messages, options, stream=True), self._headers()):
            if data.strip() == "[DONE]":
                break

            chunk = self._parse_event(data)
            if chunk.get("usage"):
                raw = chunk["usage"]
                usage = TokenUsage(
                    input_tokens=raw.get("prompt_tokens", 0),
                    output_tokens=raw.get("completion_tokens", 0),
                    total_tokens=raw.get("total_tokens", 0),
                )

            for choice in chunk.get("choices") or []:
                text = (choice.get("delta") or {}).get("content")
                if text:
                    yield AIStreamChunk(content=text, is_complete=False)

        # Usage arrives in its own chunk after finish_reason, so complete at [DONE]
        yield AIStreamChunk(content="", is_complete=True, usage=usage)

    async def health_check(self) -> bool:
        return await self._probe()

    def format_error(self, error: Exception) -> str:
        if isinstance(error, VendorResponseError):
            code = error.vendor_code
            if code in ERROR_MESSAGES:
                return ERROR_MESSAGES[code]
            if error.status == 401:
                return ERROR_MESSAGES["invalid_api_key"]
        return super().format_error(error)
