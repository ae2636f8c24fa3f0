# uigen/llm/providers/mock.py
"""
Offline fallback provider.

Always initialises and is always healthy, so the app keeps answering when
no vendor key is configured or every vendor is down.
"""
import asyncio
import math
import random
import re
from typing import AsyncIterator, List, Optional

from uigen.llm.providers.base import BaseAIProvider
from uigen.models.ai import (
    AIGenerateOptions,
    AIMessage,
    AIProviderConfig,
    AIResponse,
    AIStreamChunk,
    TokenUsage,
)


MOCK_RESPONSES = [
    "I'm a mock AI assistant. I can help you with various tasks, but please note that I'm running in simulation mode.",
    "This is a simulated response from the backup AI system. The main AI providers are currently unavailable.",
    "Hello! I'm the fallback AI assistant. While I can provide basic responses, please try again later for full AI capabilities.",
    "I'm operating in mock mode. This means the primary AI services are temporarily unavailable, but I can still assist with basic queries.",
    "This is a test response from the backup system. For full AI functionality, please ensure your API keys are configured correctly.",
]

# (keyword pattern, reply), checked in order
KEYWORD_RESPONSES = [
    (
        re.compile(r"hello|\bhi\b|你好"),
        "Hello! I'm the mock AI assistant. I'm currently running in simulation mode because the main AI providers "
        "are unavailable. How can I help you today?",
    ),
    (
        re.compile(r"help|幫助"),
        "I'm here to help! However, please note that I'm operating in mock mode. This means I can provide basic "
        "responses, but for full AI capabilities, you'll need to configure proper API keys for services like "
        "OpenAI, Anthropic, or Google.",
    ),
    (
        re.compile(r"test|測試"),
        "This is a test response from the mock AI provider. The system is working correctly, but you're seeing "
        "this because the primary AI services are not available. Please check your API configuration.",
    ),
    (
        re.compile(r"code|程式|programming"),
        "I can discuss programming concepts in mock mode, but for actual code generation and analysis, you'll "
        "need access to the full AI providers. Please ensure your API keys are properly configured.",
    ),
    (
        re.compile(r"error|錯誤|problem"),
        "It seems you're experiencing an issue. Since I'm running in mock mode, this likely means there's a "
        "problem with the AI provider configuration. Please check your API keys and network connectivity.",
    ),
]


def estimate_tokens(text: str) -> int:
    """Roughly four characters per token."""
    return math.ceil(len(text) / 4)


def mock_reply(user_input: str) -> str:
    text = user_input.lower()
    for pattern, reply in KEYWORD_RESPONSES:
        if pattern.search(text):
            return reply
    return random.choice(MOCK_RESPONSES)


class MockProvider(BaseAIProvider):
    def __init__(self, config: AIProviderConfig, latency: float = 0.0, timeout: float = 60.0):
        super().__init__(config, timeout)
        self.latency = latency

    async def _simulate_latency(self, fraction: float = 1.0) -> None:
        if self.latency > 0:
            await asyncio.sleep(self.latency * fraction)

    async def initialize(self) -> None:
        await self._simulate_latency(0.1)
        self._mark_initialized()

    async def generate_content(
        self, messages: List[AIMessage], options: Optional[AIGenerateOptions] = None
    ) -> AIResponse:
        self.ensure_initialized()
        await self._simulate_latency()

        reply = mock_reply(messages[-1].content if messages else "")
        return AIResponse(
            content=reply,
            usage=TokenUsage.of(
                estimate_tokens(" ".join(m.content for m in messages)),
                estimate_tokens(reply),
            ),
            model=self.config.model,
            finish_reason="stop",
        )

    async def generate_content_stream(
        self, messages: List[AIMessage], options: Optional[AIGenerateOptions] = None
    ) -> AsyncIterator[AIStreamChunk]:
        self.ensure_initialized()

        reply = mock_reply(messages[-1].content if messages else "")
        words = reply.split(" ")
        input_tokens = estimate_tokens(" ".join(m.content for m in messages))
        output_tokens = 0

        for i, word in enumerate(words):
            piece = word + (" " if i < len(words) - 1 else "")
            output_tokens += estimate_tokens(piece)
            await self._simulate_latency(0.05)
            yield AIStreamChunk(content=piece, is_complete=False)

        yield AIStreamChunk(content="", is_complete=True, usage=TokenUsage.of(input_tokens, output_tokens))

    async def health_check(self) -> bool:
        await self._simulate_latency(0.1)
        return True

    def format_error(self, error: Exception) -> str:
        return f"Mock Provider Error: {error or 'Unknown error in mock mode'}"
