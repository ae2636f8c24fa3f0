# uigen/llm/providers/anthropic.py
"""
Anthropic Claude provider implementation.
"""
from typing import Any, AsyncIterator, Dict, List, Optional

from uigen.core.exceptions import LLMError
from uigen.llm.providers.base import BaseAIProvider
from uigen.models.ai import (
    AIGenerateOptions,
    AIMessage,
    AIResponse,
    AIStreamChunk,
    AIToolCall,
    TokenUsage,
)


DEFAULT_BASE_URL = "https://api.anthropic.com"
API_VERSION = "2023-06-01"


class AnthropicProvider(BaseAIProvider):

    async def initialize(self) -> None:
        self.validate_api_key()
        self._mark_initialized()

    @property
    def url(self) -> str:
        return f"{(self.config.base_url or DEFAULT_BASE_URL).rstrip('/')}/v1/messages"

    def _headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.config.api_key,
            "anthropic-version": API_VERSION,
            "Content-Type": "application/json",
        }

    def _payload(self, messages: List[AIMessage], options: Optional[AIGenerateOptions], stream: bool = False) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.config.model,
            "max_tokens": self.max_tokens(options),
            # System messages go to the top-level "system" field
            "messages": [{"role": m.role, "content": m.content} for m in messages if m.role != "system"],
            "temperature": self.temperature(options),
        }

        system = options.system_prompt if options and options.system_prompt else None
        if not system:
            system = "\n\n".join(m.content for m in messages if m.role == "system") or None
        if system:
            payload["system"] = system

        if self.top_p(options) is not None:
            payload["top_p"] = self.top_p(options)
        if self.top_k(options) is not None:
            payload["top_k"] = self.top_k(options)

        if options and options.tools:
            payload["tools"] = [
                {"name": t.name, "description": t.description, "input_schema": t.parameters}
                for t in options.tools
            ]
        if stream:
            payload["stream"] = True
        return payload

    async def generate_content(
        self, messages: List[AIMessage], options: Optional[AIGenerateOptions] = None
    ) -> AIResponse:
        self.ensure_initialized()
        data = await self._post_json(self.url, self._payload(messages, options), self._headers())

        blocks = data.get("content") or []
        usage = data.get("usage") or {}
        return AIResponse(
            content="".join(b.get("text", "") for b in blocks if b.get("type") == "text"),
            usage=TokenUsage.of(usage.get("input_tokens", 0), usage.get("output_tokens", 0)),
            model=data.get("model", self.config.model),
            finish_reason=data.get("stop_reason"),
            tool_calls=[
                AIToolCall(id=b["id"], name=b["name"], arguments=b.get("input") or {})
                for b in blocks if b.get("type") == "tool_use"
            ],
        )

    async def generate_content_stream(
        self, messages: List[AIMessage], options: Optional[AIGenerateOptions] = None
    ) -> AsyncIterator[AIStreamChunk]:
        self.ensure_initialized()
        input_tokens = output_tokens = 0

        async for event, data in self._stream_sse(self.url, self._payload(messages, options, stream=True), self._headers()):
            body = self._parse_event(data)
            kind = body.get("type", event)

            if kind == "content_block_delta":
                delta = body.get("delta") or {}
                if delta.get("type") == "text_delta":
                    yield AIStreamChunk(content=delta.get("text", ""), is_complete=False)
            elif kind == "message_start":
                input_tokens = ((body.get("message") or {}).get("usage") or {}).get("input_tokens", 0)
            elif kind == "message_delta":
                output_tokens = (body.get("usage") or {}).get("output_tokens", output_tokens)
            elif kind == "message_stop":
                yield AIStreamChunk(
                    content="",
                    is_complete=True,
                    usage=TokenUsage.of(input_tokens, output_tokens),
                )
            elif kind == "error":
                raise LLMError(self.config.id, (body.get("error") or {}).get("message", "Stream error"))

    async def health_check(self) -> bool:
        return await self._probe()
