# uigen/llm/providers/base.py
"""
Base class for AI provider adapters.

An adapter turns the shared message/option types into one vendor's REST
payload and the reply back into AIResponse / AIStreamChunk. Vendor and
network failures surface as LLMError with a message mapped by
``format_error``.
"""
import asyncio
import json
import time
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, AsyncIterator, Deque, Dict, List, Optional, Tuple

import aiohttp

from uigen.core.exceptions import LLMError, ProviderNotInitializedError, ProviderRateLimitError, UIGenError
from uigen.core.logging import log, log_error
from uigen.llm.http import VendorResponseError, post_json, stream_sse
from uigen.models.ai import (
    AIGenerateOptions,
    AIMessage,
    AIProviderConfig,
    AIResponse,
    AIStreamChunk,
    AITool,
    AIToolCall,
    AIToolResult,
)
from uigen.tools.manager import ToolManager


DEFAULT_MAX_TOKENS = 4096
DEFAULT_TEMPERATURE = 0.7

WINDOW_SECONDS = {"minute": 60, "hour": 3600}

VENDOR_ERRORS = (VendorResponseError, aiohttp.ClientError, asyncio.TimeoutError, ValueError)


class BaseAIProvider(ABC):
    def __init__(self, config: AIProviderConfig, timeout: float = 60.0):
        self.config = config
        self.timeout = timeout
        self.is_initialized = False
        self.tool_manager: Optional[ToolManager] = None
        self._request_times: Deque[float] = deque()

    # ------------------------------------------------------------------
    # ADAPTER CONTRACT
    # ------------------------------------------------------------------

    @abstractmethod
    async def initialize(self) -> None:
        ...

    @abstractmethod
    async def generate_content(
        self, messages: List[AIMessage], options: Optional[AIGenerateOptions] = None
    ) -> AIResponse:
        ...

    @abstractmethod
    def generate_content_stream(
        self, messages: List[AIMessage], options: Optional[AIGenerateOptions] = None
    ) -> AsyncIterator[AIStreamChunk]:
        """Async generator of text chunks ending with one ``is_complete`` chunk."""

    @abstractmethod
    async def health_check(self) -> bool:
        ...

    # ------------------------------------------------------------------
    # CONFIG
    # ------------------------------------------------------------------

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def name(self) -> str:
        return self.config.name

    def get_info(self) -> AIProviderConfig:
        return self.config.model_copy()

    def update_config(self, **changes: Any) -> None:
        self.config = self.config.model_copy(update=changes)

    def ensure_initialized(self) -> None:
        if not self.is_initialized:
            raise ProviderNotInitializedError(self.config.id)

    def validate_api_key(self) -> None:
        if not self.config.api_key:
            raise LLMError(self.config.id, f"API key is required for {self.config.name}")

    def max_tokens(self, options: Optional[AIGenerateOptions]) -> int:
        return (options and options.max_tokens) or self.config.max_tokens or DEFAULT_MAX_TOKENS

    def temperature(self, options: Optional[AIGenerateOptions]) -> float:
        if options and options.temperature is not None:
            return options.temperature
        if self.config.temperature is not None:
            return self.config.temperature
        return DEFAULT_TEMPERATURE

    def top_p(self, options: Optional[AIGenerateOptions]) -> Optional[float]:
        return options.top_p if options and options.top_p is not None else self.config.top_p

    def top_k(self, options: Optional[AIGenerateOptions]) -> Optional[int]:
        return options.top_k if options and options.top_k is not None else self.config.top_k

    # ------------------------------------------------------------------
    # TOOLS
    # ------------------------------------------------------------------

    def set_tool_manager(self, tool_manager: ToolManager) -> None:
        self.tool_manager = tool_manager

    def get_available_tools(self) -> List[AITool]:
        return self.tool_manager.get_available_tools() if self.tool_manager else []

    async def execute_tools(self, tool_calls: List[AIToolCall]) -> List[AIToolResult]:
        if self.tool_manager is None:
            raise LLMError(self.config.id, "Tool manager not initialized")
        return await self.tool_manager.execute_tools(tool_calls)

    async def process_tool_calls(self, response: AIResponse) -> AIResponse:
        """Run the response's tool calls and append their results to its content."""
        if not response.tool_calls:
            return response

        try:
            results = await self.execute_tools(response.tool_calls)
        except UIGenError as e:
            log_error("TOOLS", f"Error processing tool calls: {e.message}")
            return response.model_copy(update={"content": f"{response.content}\n\nTool execution failed: {e.message}"})

        return response.model_copy(update={"content": f"{response.content}\n\n{self._format_tool_results(results)}"})

    @staticmethod
    def _format_tool_results(results: List[AIToolResult]) -> str:
        blocks = []
        for result in results:
            if result.error:
                blocks.append(f"Tool error ({result.tool_call_id}): {result.error}")
                continue
            body = result.result
            text = json.dumps(body, indent=2, ensure_ascii=False) if isinstance(body, (dict, list)) else str(body)
            blocks.append(f"Tool result ({result.tool_call_id}):\n{text}")
        return "\n\n".join(blocks)

    # ------------------------------------------------------------------
    # ERRORS, COST, RATE LIMITS
    # ------------------------------------------------------------------

    def format_error(self, error: Exception) -> str:
        if isinstance(error, VendorResponseError) and error.vendor_message:
            return error.vendor_message
        if isinstance(error, asyncio.TimeoutError):
            return f"Request to {self.config.name} timed out after {self.timeout}s"
        message = str(error)
        return message or f"Unknown error occurred in {self.config.name}"

    def calculate_cost(self, input_tokens: int, output_tokens: int) -> float:
        return (
            (self.config.cost_per_input_token or 0) * input_tokens
            + (self.config.cost_per_output_token or 0) * output_tokens
        )

    def check_rate_limit(self, request_count: int, window: str) -> bool:
        limit = self.config.rate_limit_per_minute if window == "minute" else self.config.rate_limit_per_hour
        if limit and request_count >= limit:
            raise ProviderRateLimitError(self.config.id, request_count, limit, window)
        return True

    def requests_in_window(self, window: str) -> int:
        cutoff = time.monotonic() - WINDOW_SECONDS[window]
        # Hour is the widest window, older entries can go
        horizon = time.monotonic() - WINDOW_SECONDS["hour"]
        while self._request_times and self._request_times[0] < horizon:
            self._request_times.popleft()
        return sum(1 for t in self._request_times if t >= cutoff)

    def enforce_rate_limits(self) -> None:
        for window in ("minute", "hour"):
            self.check_rate_limit(self.requests_in_window(window), window)

    def record_request(self) -> None:
        self._request_times.append(time.monotonic())

    # ------------------------------------------------------------------
    # TRANSPORT
    # ------------------------------------------------------------------

    async def _post_json(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> Dict[str, Any]:
        try:
            return await post_json(url, payload, headers, self.timeout)
        except VENDOR_ERRORS as e:
            raise LLMError(self.config.id, self.format_error(e)) from e

    async def _stream_sse(
        self, url: str, payload: Dict[str, Any], headers: Dict[str, str]
    ) -> AsyncIterator[Tuple[Optional[str], str]]:
        try:
            async for message in stream_sse(url, payload, headers, self.timeout):
                yield message
        except VENDOR_ERRORS as e:
            raise LLMError(self.config.id, self.format_error(e)) from e

    def _parse_event(self, data: str) -> Dict[str, Any]:
        try:
            return json.loads(data)
        except ValueError as e:
            raise LLMError(self.config.id, f"Malformed stream event: {data[:100]}") from e

    async def _probe(self) -> bool:
        """Tiny real request used by vendor health checks."""
        if not self.is_initialized:
            return False
        try:
            response = await self.generate_content(
                [AIMessage(role="user", content="Hi")],
                AIGenerateOptions(max_tokens=10),
            )
        except LLMError as e:
            log_error("PROVIDER", f"{self.config.name} health check failed: {e.message}")
            return False
        return bool(response.content)

    def _mark_initialized(self) -> None:
        self.is_initialized = True
        log("PROVIDER", f"✅ {self.config.name} initialized ({self.config.model})")
