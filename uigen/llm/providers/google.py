# uigen/llm/providers/google.py
"""
Google Gemini provider implementation.
"""
import uuid
from typing import Any, AsyncIterator, Dict, List, Optional, Tuple

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


DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

STATUS_MESSAGES = {
    400: "Invalid request to Google API. Please check your input.",
    401: "Invalid Google API key. Please check your configuration.",
    403: "Google API access forbidden. Please check your permissions.",
    429: "Google API rate limit exceeded. Please try again later.",
    500: "Google API internal server error. Please try again later.",
}


class GoogleProvider(BaseAIProvider):

    async def initialize(self) -> None:
        self.validate_api_key()
        self._mark_initialized()

    def _url(self, stream: bool = False) -> str:
        base = f"{(self.config.base_url or DEFAULT_BASE_URL).rstrip('/')}/models/{self.config.model}"
        if stream:
            return f"{base}:streamGenerateContent?alt=sse&key={self.config.api_key}"
        return f"{base}:generateContent?key={self.config.api_key}"

    @staticmethod
    def convert_messages(
        messages: List[AIMessage], system_prompt: Optional[str] = None
    ) -> Tuple[List[Dict[str, Any]], Optional[Dict[str, Any]]]:
        """Return (contents, systemInstruction). Gemini calls the assistant 'model'."""
        system_instruction = None
        if system_prompt:
            system_instruction = {"parts": [{"text": system_prompt}]}
        else:
            system_message = next((m for m in messages if m.role == "system"), None)
            if system_message:
                system_instruction = {"parts": [{"text": system_message.content}]}

        contents = [
            {"role": "model" if m.role == "assistant" else "user", "parts": [{"text": m.content}]}
            for m in messages if m.role != "system"
        ]
        return contents, system_instruction

    def _payload(self, messages: List[AIMessage], options: Optional[AIGenerateOptions]) -> Dict[str, Any]:
        contents, system_instruction = self.convert_messages(messages, options.system_prompt if options else None)

        generation_config: Dict[str, Any] = {
            "maxOutputTokens": self.max_tokens(options),
            "temperature": self.temperature(options),
        }
        if self.top_p(options) is not None:
            generation_config["topP"] = self.top_p(options)
        if self.top_k(options) is not None:
            generation_config["topK"] = self.top_k(options)

        payload: Dict[str, Any] = {"contents": contents, "generationConfig": generation_config}
        if system_instruction:
            payload["systemInstruction"] = system_instruction
        if options and options.tools:
            payload["tools"] = [{
                "functionDeclarations": [
                    {"name": t.name, "description": t.description, "parameters": t.parameters}
                    for t in options.tools
                ]
            }]
        return payload

    @staticmethod
    def _parts(data: Dict[str, Any]) -> List[Dict[str, Any]]:
        candidates = data.get("candidates") or []
        if not candidates:
            return []
        return (candidates[0].get("content") or {}).get("parts") or []

    async def generate_content(
        self, messages: List[AIMessage], options: Optional[AIGenerateOptions] = None
    ) -> AIResponse:
        self.ensure_initialized()
        data = await self._post_json(self._url(), self._payload(messages, options), {"Content-Type": "application/json"})

        parts = self._parts(data)
        metadata = data.get("usageMetadata")
        candidates = data.get("candidates") or [{}]
        return AIResponse(
            content="".join(p.get("text", "") for p in parts),
            usage=TokenUsage(
                input_tokens=metadata.get("promptTokenCount", 0),
                output_tokens=metadata.get("candidatesTokenCount", 0),
                total_tokens=metadata.get("totalTokenCount", 0),
            ) if metadata else None,
            model=self.config.model,
            finish_reason=candidates[0].get("finishReason"),
            tool_calls=[
                AIToolCall(
                    id=f"call_{uuid.uuid4().hex[:12]}",
                    name=p["functionCall"].get("name", ""),
                    arguments=p["functionCall"].get("args") or {},
                )
                for p in parts if "functionCall" in p
            ],
        )

    async def generate_content_stream(
        self, messages: List[AIMessage], options: Optional[AIGenerateOptions] = None
    ) -> AsyncIterator[AIStreamChunk]:
        self.ensure_initialized()
        input_tokens: Optional[int] = None
        output_tokens = 0

        async for _, data in self._stream_sse(self._url(stream=True), self._payload(messages, options), {"Content-Type": "application/json"}):
            chunk = self._parse_event(data)
            text = "".join(p.get("text", "") for p in self._parts(chunk))
            if text:
                yield AIStreamChunk(content=text, is_complete=False)

            metadata = chunk.get("usageMetadata")
            if metadata:
                if input_tokens is None:
                    input_tokens = metadata.get("promptTokenCount", 0)
                output_tokens = metadata.get("candidatesTokenCount", output_tokens)

        yield AIStreamChunk(content="", is_complete=True, usage=TokenUsage.of(input_tokens or 0, output_tokens))

    async def health_check(self) -> bool:
        return await self._probe()

    def format_error(self, error: Exception) -> str:
        if isinstance(error, VendorResponseError) and error.status in STATUS_MESSAGES:
            return STATUS_MESSAGES[error.status]
        message = str(error)
        if "quota" in message.lower() or "limit" in message.lower():
            return "Google API quota exceeded. Please check your billing."
        return super().format_error(error)
