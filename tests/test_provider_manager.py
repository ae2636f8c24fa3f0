"""
Provider manager tests: registration, selection, failover, usage and health.
"""
from unittest.mock import AsyncMock, patch

import pytest
from prometheus_client.registry import CollectorRegistry

from uigen.core.config import LLMSettings
from uigen.core.exceptions import LLMError, NoHealthyProviderError, ValidationError
from uigen.lib.file_system import VirtualFileSystem
from uigen.lib.monitoring import AIMetrics
from uigen.llm.bootstrap import build_provider_configs, register_default_providers
from uigen.llm.manager import AIProviderManager
from uigen.models.ai import (
    AIMessage,
    AIProviderConfig,
    AIResponse,
    AIStreamChunk,
    AIToolCall,
    TokenUsage,
)
from uigen.tools.manager import ToolManager


MESSAGES = [AIMessage(role="user", content="hello")]


def mock_config(provider_id: str = "mock", priority: int = 0, **overrides) -> AIProviderConfig:
    values = {"id": provider_id, "name": f"{provider_id} provider", "model": "m", "priority": priority,
              "api_key": "key-1234567890"}
    values.update(overrides)
    return AIProviderConfig(**values)


@pytest.fixture
def metrics():
    return AIMetrics(CollectorRegistry())


@pytest.fixture
async def manager(metrics):
    """Mock provider (priority 0) plus an OpenAI adapter (priority 2)."""
    manager = AIProviderManager(metrics=metrics)
    await manager.register_provider(mock_config("mock", 0))
    await manager.register_provider(mock_config("openai", 2))
    return manager


class TestRegistration:
    @pytest.mark.asyncio
    async def test_first_active_provider_becomes_default(self, manager):
        assert manager.default_provider == "mock"
        statuses = manager.get_provider_statuses()
        assert {s.id for s in statuses} == {"mock", "openai"}
        assert all(s.is_healthy for s in statuses)
        assert statuses[0].usage.requests_today == 0

    @pytest.mark.asyncio
    async def test_unknown_provider_type(self):
        with pytest.raises(ValidationError):
            await AIProviderManager().register_provider(mock_config("llama"))

    @pytest.mark.asyncio
    async def test_missing_key_fails_registration(self):
        manager = AIProviderManager()
        with pytest.raises(LLMError):
            await manager.register_provider(mock_config("anthropic", api_key=""))
        assert "anthropic" not in manager.providers

    @pytest.mark.asyncio
    async def test_provider_info(self, manager):
        assert manager.get_provider_info("nope") is None
        assert manager.get_provider_info("openai").priority == 2
        assert len(manager.get_all_provider_info()) == 2


class TestSelectionAndFailover:
    @pytest.mark.asyncio
    async def test_highest_priority_wins(self, manager):
        reply = AIResponse(content="from openai", usage=TokenUsage.of(1, 1))
        with patch.object(manager.providers["openai"], "generate_content", new=AsyncMock(return_value=reply)):
            response = await manager.generate_content(MESSAGES)
        assert response.content == "from openai"

    @pytest.mark.asyncio
    async def test_preferred_provider(self, manager):
        response = await manager.generate_content(MESSAGES, preferred="mock")
        assert "mock" in response.content.lower()

    @pytest.mark.asyncio
    async def test_failover_marks_provider_unhealthy(self, manager, metrics):
        failing = AsyncMock(side_effect=LLMError("openai", "boom"))
        with patch.object(manager.providers["openai"], "generate_content", new=failing):
            response = await manager.generate_content(MESSAGES)

        assert response.content
        status = {s.id: s for s in manager.get_provider_statuses()}["openai"]
        assert status.is_healthy is False
        assert "boom" in status.error_message
        assert metrics.registry.get_sample_value("uigen_ai_provider_healthy", {"provider": "openai"}) == 0

    @pytest.mark.asyncio
    async def test_retries_only_once(self, manager):
        with patch.object(manager.providers["openai"], "generate_content",
                          new=AsyncMock(side_effect=LLMError("openai", "first"))), \
                patch.object(manager.providers["mock"], "generate_content",
                             new=AsyncMock(side_effect=LLMError("mock", "second"))):
            with pytest.raises(LLMError) as exc_info:
                await manager.generate_content(MESSAGES)
        assert exc_info.value.provider == "mock"

    @pytest.mark.asyncio
    async def test_no_fallback_reraises_first_error(self):
        manager = AIProviderManager()
        await manager.register_provider(mock_config("mock"))
        with patch.object(manager.providers["mock"], "generate_content",
                          new=AsyncMock(side_effect=LLMError("mock", "only one"))):
            with pytest.raises(LLMError, match="only one"):
                await manager.generate_content(MESSAGES)

    @pytest.mark.asyncio
    async def test_no_healthy_provider(self):
        with pytest.raises(NoHealthyProviderError):
            await AIProviderManager().generate_content(MESSAGES)

    @pytest.mark.asyncio
    async def test_rate_limited_provider_is_not_marked_unhealthy(self, manager):
        manager.providers["openai"].update_config(rate_limit_per_minute=1)
        manager.providers["openai"].record_request()
        response = await manager.generate_content(MESSAGES)
        assert response.content
        status = {s.id: s for s in manager.get_provider_statuses()}["openai"]
        assert status.is_healthy is True


class TestStreaming:
    @pytest.mark.asyncio
    async def test_stream_fails_over_before_first_chunk(self, manager):
        async def broken(messages, options=None):
            raise LLMError("openai", "down")
            yield  # pragma: no cover

        with patch.object(manager.providers["openai"], "generate_content_stream", new=broken):
            chunks = [c async for c in manager.generate_content_stream(MESSAGES)]
        assert chunks[-1].is_complete
        assert manager.statuses["mock"].usage.requests_today == 1

    @pytest.mark.asyncio
    async def test_stream_does_not_fail_over_after_first_chunk(self, manager):
        async def half(messages, options=None):
            yield AIStreamChunk(content="partial", is_complete=False)
            raise LLMError("openai", "dropped")

        with patch.object(manager.providers["openai"], "generate_content_stream", new=half):
            received = []
            with pytest.raises(LLMError):
                async for chunk in manager.generate_content_stream(MESSAGES):
                    received.append(chunk.content)
        assert received == ["partial"]
        assert manager.statuses["mock"].usage.requests_today == 0

    @pytest.mark.asyncio
    async def test_stream_usage_from_final_chunk(self, manager):
        chunks = [c async for c in manager.generate_content_stream(MESSAGES, preferred="mock")]
        usage = manager.statuses["mock"].usage
        assert usage.requests_today == 1
        assert usage.tokens_today == chunks[-1].usage.total_tokens


class TestUsage:
    @pytest.mark.asyncio
    async def test_usage_counters_and_cost(self, manager):
        manager.providers["mock"].update_config(cost_per_input_token=0.5, cost_per_output_token=1.0)
        reply = AIResponse(content="x", usage=TokenUsage.of(2, 3))
        with patch.object(manager.providers["mock"], "generate_content", new=AsyncMock(return_value=reply)):
            await manager.generate_content(MESSAGES, preferred="mock")
            await manager.generate_content(MESSAGES, preferred="mock")

        summary = manager.get_usage_summary()
        mock_usage = next(p["usage"] for p in summary["providers"] if p["id"] == "mock")
        assert mock_usage["requestsToday"] == 2
        assert mock_usage["tokensToday"] == 10
        assert mock_usage["costToday"] == pytest.approx(8.0)
        assert summary["totals"]["requestsThisMonth"] == 2
        assert summary["defaultProvider"] == "mock"

    @pytest.mark.asyncio
    async def test_day_rolls_over(self, manager):
        await manager.generate_content(MESSAGES, preferred="mock")
        usage = manager.statuses["mock"].usage
        usage.day = "2000-01-01"
        usage.month = "2000-01"
        statuses = {s.id: s for s in manager.get_provider_statuses()}
        assert statuses["mock"].usage.requests_today == 0
        assert statuses["mock"].usage.requests_this_month == 0

    @pytest.mark.asyncio
    async def test_statuses_are_copies(self, manager):
        manager.get_provider_statuses()[0].is_healthy = False
        assert all(s.is_healthy for s in manager.get_provider_statuses())


class TestToolCalls:
    @pytest.mark.asyncio
    async def test_tool_calls_run_against_the_file_system(self, manager):
        vfs = VirtualFileSystem()
        tool_manager = ToolManager(vfs)
        reply = AIResponse(
            content="Creating it",
            tool_calls=[AIToolCall(id="c1", name="str_replace_editor",
                                   arguments={"command": "create", "path": "/App.vue", "file_text": "<template/>"})],
        )
        generate = AsyncMock(return_value=reply)
        with patch.object(manager.providers["mock"], "generate_content", new=generate):
            response = await manager.generate_content(MESSAGES, preferred="mock", tool_manager=tool_manager)

        sent_options = generate.call_args.args[1]
        assert [t.name for t in sent_options.tools] == ["str_replace_editor", "file_manager"]
        assert vfs.read_file("/App.vue") == "<template/>"
        assert "Created file: /App.vue" in response.content


class TestHealthChecks:
    @pytest.mark.asyncio
    async def test_health_checks_record_response_time(self, manager):
        with patch.object(manager.providers["openai"], "health_check", new=AsyncMock(return_value=False)):
            statuses = {s.id: s for s in await manager.perform_health_checks()}
        assert statuses["mock"].is_healthy is True
        assert statuses["mock"].response_time is not None
        assert statuses["openai"].is_healthy is False
        assert statuses["openai"].error_message == "Health check failed"

    @pytest.mark.asyncio
    async def test_recovered_provider_becomes_usable(self, manager):
        manager._mark_unhealthy("openai", "down")
        with patch.object(manager.providers["openai"], "health_check", new=AsyncMock(return_value=True)):
            await manager.perform_health_checks()
        assert manager.statuses["openai"].is_healthy is True


class TestBootstrap:
    def test_configs_follow_priority(self):
        llm = LLMSettings(anthropic_api_key="a" * 20, openai_api_key="o" * 20, google_api_key="g" * 20,
                          enable_mock=True)
        configs = build_provider_configs(llm)
        assert [(c.id, c.priority) for c in configs] == [
            ("anthropic", 3), ("openai", 2), ("google", 1), ("mock", 0),
        ]

    @pytest.mark.asyncio
    async def test_register_defaults_with_override(self):
        llm = LLMSettings(anthropic_api_key=None, openai_api_key="o" * 20, google_api_key=None,
                          enable_mock=True, default_provider="mock", health_check_on_startup=False)
        manager = AIProviderManager()
        registered = await register_default_providers(manager, llm)
        assert registered == ["openai", "mock"]
        assert manager.default_provider == "mock"

    @pytest.mark.asyncio
    async def test_nothing_registered(self):
        llm = LLMSettings(anthropic_api_key=None, openai_api_key=None, google_api_key=None, enable_mock=False)
        assert await register_default_providers(AIProviderManager(), llm) == []
