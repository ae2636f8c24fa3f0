# uigen/llm/manager.py
"""
AI provider manager.

Keeps the registered adapters with their health and usage, picks one per
request (preferred if usable, else highest priority) and retries a failed
request once on the next provider.
"""
import asyncio
import time
from typing import Any, AsyncIterator, Dict, Iterable, List, Optional, Type

from uigen.core.exceptions import LLMError, NoHealthyProviderError, ProviderRateLimitError, ValidationError
from uigen.core.logging import log, log_error
from uigen.lib.monitoring import AIMetrics
from uigen.llm.providers.anthropic import AnthropicProvider
from uigen.llm.providers.base import BaseAIProvider
from uigen.llm.providers.google import GoogleProvider
from uigen.llm.providers.mock import MockProvider
from uigen.llm.providers.openai import OpenAIProvider
from uigen.models.ai import (
    AIGenerateOptions,
    AIMessage,
    AIProviderConfig,
    AIProviderStatus,
    AIProviderType,
    AIResponse,
    AIStreamChunk,
    ProviderUsage,
    TokenUsage,
)
from uigen.models.common import utcnow
from uigen.tools.manager import ToolManager


PROVIDER_CLASSES: Dict[str, Type[BaseAIProvider]] = {
    AIProviderType.ANTHROPIC.value: AnthropicProvider,
    AIProviderType.OPENAI.value: OpenAIProvider,
    AIProviderType.GOOGLE.value: GoogleProvider,
    AIProviderType.MOCK.value: MockProvider,
}


class AIProviderManager:
    def __init__(
        self,
        metrics: Optional[AIMetrics] = None,
        request_timeout: float = 60.0,
        mock_latency: float = 0.0,
    ):
        self.providers: Dict[str, BaseAIProvider] = {}
        self.statuses: Dict[str, AIProviderStatus] = {}
        self.default_provider: Optional[str] = None
        self.metrics = metrics
        self.request_timeout = request_timeout
        self.mock_latency = mock_latency
        log("AI", "🤖 AI provider manager initialized")

    # ------------------------------------------------------------------
    # REGISTRATION
    # ------------------------------------------------------------------

    def _build(self, config: AIProviderConfig) -> BaseAIProvider:
        provider_class = PROVIDER_CLASSES.get(config.id)
        if provider_class is None:
            raise ValidationError(f"Unknown provider type: {config.id}", {"provider": config.id})
        if provider_class is MockProvider:
            return MockProvider(config, latency=self.mock_latency, timeout=self.request_timeout)
        return provider_class(config, timeout=self.request_timeout)

    async def register_provider(self, config: AIProviderConfig) -> None:
        provider = self._build(config)
        try:
            await provider.initialize()
        except LLMError as e:
            log_error("AI", f"Failed to register provider {config.name}: {e.message}")
            raise

        self.providers[config.id] = provider
        self.statuses[config.id] = AIProviderStatus(id=config.id, usage=self._fresh_usage())
        if config.is_active and not self.default_provider:
            self.default_provider = config.id
        if self.metrics:
            self.metrics.set_health(config.id, True)

        log("AI", f"✅ Provider {config.name} registered (priority {config.priority})")

    # ------------------------------------------------------------------
    # SELECTION
    # ------------------------------------------------------------------

    def _usable(self, provider_id: str) -> bool:
        provider = self.providers.get(provider_id)
        status = self.statuses.get(provider_id)
        return bool(provider and status and provider.config.is_active and status.is_healthy)

    def _select(self, preferred: Optional[str] = None, exclude: Iterable[str] = ()) -> BaseAIProvider:
        excluded = set(exclude)
        if preferred and preferred not in excluded and self._usable(preferred):
            return self.providers[preferred]

        candidates = sorted(
            (p for pid, p in self.providers.items() if pid not in excluded and self._usable(pid)),
            key=lambda p: p.config.priority,
            reverse=True,
        )
        if not candidates:
            raise NoHealthyProviderError()
        return candidates[0]

    def _fallback_for(self, failed: Iterable[str], error: LLMError) -> BaseAIProvider:
        try:
            fallback = self._select(exclude=failed)
        except NoHealthyProviderError:
            raise error
        log("AI", f"🔄 Trying fallback provider {fallback.name}...")
        return fallback

    # ------------------------------------------------------------------
    # GENERATION
    # ------------------------------------------------------------------

    async def generate_content(
        self,
        messages: List[AIMessage],
        options: Optional[AIGenerateOptions] = None,
        preferred: Optional[str] = None,
        tool_manager: Optional[ToolManager] = None,
    ) -> AIResponse:
        options = options or AIGenerateOptions()
        if tool_manager is not None and not options.tools:
            options = options.model_copy(update={"tools": tool_manager.get_available_tools()})

        provider = self._select(preferred)
        try:
            return await self._generate_with(provider, messages, options, tool_manager)
        except LLMError as e:
            fallback = self._fallback_for({provider.id}, e)
        return await self._generate_with(fallback, messages, options, tool_manager)

    async def _generate_with(
        self,
        provider: BaseAIProvider,
        messages: List[AIMessage],
        options: AIGenerateOptions,
        tool_manager: Optional[ToolManager],
    ) -> AIResponse:
        try:
            provider.enforce_rate_limits()
            provider.record_request()
            response = await provider.generate_content(messages, options)
        except LLMError as e:
            self._record_failure(provider, e)
            raise

        self._update_usage(provider, response.usage)

        if tool_manager is not None and response.tool_calls:
            provider.set_tool_manager(tool_manager)
            log("AI", f"🔧 Running {len(response.tool_calls)} tool call(s) from {provider.name}")
            response = await provider.process_tool_calls(response)
        return response

    async def generate_content_stream(
        self,
        messages: List[AIMessage],
        options: Optional[AIGenerateOptions] = None,
        preferred: Optional[str] = None,
    ) -> AsyncIterator[AIStreamChunk]:
        """Stream from one provider; fail over only if nothing was sent yet."""
        provider = self._select(preferred)
        tried = set()

        while True:
            tried.add(provider.id)
            started = False
            usage: Optional[TokenUsage] = None
            try:
                provider.enforce_rate_limits()
                provider.record_request()
                async for chunk in provider.generate_content_stream(messages, options):
                    started = True
                    if chunk.is_complete and chunk.usage:
                        usage = chunk.usage
                    yield chunk
            except LLMError as e:
                self._record_failure(provider, e)
                if started or len(tried) > 1:
                    raise
                provider = self._fallback_for(tried, e)
                continue

            self._update_usage(provider, usage)
            return

    # ------------------------------------------------------------------
    # HEALTH & USAGE
    # ------------------------------------------------------------------

    def _record_failure(self, provider: BaseAIProvider, error: LLMError) -> None:
        if self.metrics:
            self.metrics.record_failure(provider.id)
        if isinstance(error, ProviderRateLimitError):
            log("AI", f"⏳ {provider.name} hit its request limit ({error.window})")
            return
        log_error("AI", f"Provider {provider.name} failed: {error.message}")
        self._mark_unhealthy(provider.id, error.message)

    def _mark_unhealthy(self, provider_id: str, error_message: str) -> None:
        status = self.statuses.get(provider_id)
        if status:
            status.is_healthy = False
            status.error_message = error_message
            status.last_checked = utcnow()
        if self.metrics:
            self.metrics.set_health(provider_id, False)

    @staticmethod
    def _fresh_usage() -> ProviderUsage:
        now = utcnow()
        return ProviderUsage(day=now.strftime("%Y-%m-%d"), month=now.strftime("%Y-%m"))

    @staticmethod
    def _roll_over(usage: ProviderUsage) -> None:
        now = utcnow()
        day, month = now.strftime("%Y-%m-%d"), now.strftime("%Y-%m")
        if usage.day != day:
            usage.requests_today = usage.tokens_today = 0
            usage.cost_today = 0.0
            usage.day = day
        if usage.month != month:
            usage.requests_this_month = usage.tokens_this_month = 0
            usage.cost_this_month = 0.0
            usage.month = month

    def _update_usage(self, provider: BaseAIProvider, usage: Optional[TokenUsage]) -> None:
        status = self.statuses.get(provider.id)
        if status is None:
            return

        counters = status.usage
        self._roll_over(counters)

        tokens = usage.total_tokens if usage else 0
        cost = provider.calculate_cost(usage.input_tokens, usage.output_tokens) if usage else 0.0

        counters.requests_today += 1
        counters.tokens_today += tokens
        counters.cost_today += cost
        counters.requests_this_month += 1
        counters.tokens_this_month += tokens
        counters.cost_this_month += cost

        if self.metrics:
            self.metrics.record_success(
                provider.id,
                usage.input_tokens if usage else 0,
                usage.output_tokens if usage else 0,
            )

    async def _check(self, provider_id: str, provider: BaseAIProvider) -> None:
        started = time.perf_counter()
        try:
            healthy = await provider.health_check()
        except LLMError as e:
            log_error("AI", f"Health check failed for {provider.name}: {e.message}")
            self._mark_unhealthy(provider_id, e.message)
            return

        elapsed_ms = (time.perf_counter() - started) * 1000
        status = self.statuses[provider_id]
        status.is_healthy = healthy
        status.response_time = round(elapsed_ms, 3)
        status.last_checked = utcnow()
        status.error_message = None if healthy else "Health check failed"
        if self.metrics:
            self.metrics.set_health(provider_id, healthy)

        log("AI", f"{'✅' if healthy else '❌'} {provider.name}: {elapsed_ms:.0f}ms")

    async def perform_health_checks(self) -> List[AIProviderStatus]:
        log("AI", "🔍 Performing health checks for all providers...")
        await asyncio.gather(*(self._check(pid, p) for pid, p in self.providers.items()))
        return self.get_provider_statuses()

    def get_provider_statuses(self) -> List[AIProviderStatus]:
        for status in self.statuses.values():
            self._roll_over(status.usage)
        return [status.model_copy(deep=True) for status in self.statuses.values()]

    def get_provider_info(self, provider_id: str) -> Optional[AIProviderConfig]:
        provider = self.providers.get(provider_id)
        return provider.get_info() if provider else None

    def get_all_provider_info(self) -> List[AIProviderConfig]:
        return [provider.get_info() for provider in self.providers.values()]

    def get_usage_summary(self) -> Dict[str, Any]:
        statuses = self.get_provider_statuses()
        totals = {
            "requestsToday": sum(s.usage.requests_today for s in statuses),
            "tokensToday": sum(s.usage.tokens_today for s in statuses),
            "costToday": sum(s.usage.cost_today for s in statuses),
            "requestsThisMonth": sum(s.usage.requests_this_month for s in statuses),
            "tokensThisMonth": sum(s.usage.tokens_this_month for s in statuses),
            "costThisMonth": sum(s.usage.cost_this_month for s in statuses),
        }
        return {
            "defaultProvider": self.default_provider,
            "providers": [{"id": s.id, "usage": s.usage.to_json_dict()} for s in statuses],
            "totals": totals,
        }
