# uigen/llm/bootstrap.py
"""
Startup registration of AI providers from settings.
"""
from typing import List

from uigen.core.config import LLMSettings
from uigen.core.exceptions import LLMError
from uigen.core.logging import log, log_error
from uigen.llm.manager import AIProviderManager
from uigen.models.ai import AIProviderConfig, AIProviderType


def build_provider_configs(llm: LLMSettings) -> List[AIProviderConfig]:
    """Vendors with an API key, highest priority first, then the mock fallback."""
    configs: List[AIProviderConfig] = []

    if llm.anthropic_api_key:
        configs.append(AIProviderConfig(
            id=AIProviderType.ANTHROPIC.value,
            name="Anthropic Claude",
            api_key=llm.anthropic_api_key,
            base_url=llm.anthropic_base_url,
            model=llm.anthropic_model,
            priority=3,
            max_tokens=llm.max_tokens,
            temperature=llm.temperature,
        ))

    if llm.openai_api_key:
        configs.append(AIProviderConfig(
            id=AIProviderType.OPENAI.value,
            name="OpenAI GPT",
            api_key=llm.openai_api_key,
            base_url=llm.openai_base_url,
            model=llm.openai_model,
            priority=2,
            max_tokens=llm.max_tokens,
            temperature=llm.temperature,
        ))

    if llm.google_api_key:
        configs.append(AIProviderConfig(
            id=AIProviderType.GOOGLE.value,
            name="Google Gemini",
            api_key=llm.google_api_key,
            base_url=llm.google_base_url,
            model=llm.google_model,
            priority=1,
            max_tokens=llm.max_tokens,
            temperature=llm.temperature,
        ))

    if llm.enable_mock:
        configs.append(AIProviderConfig(
            id=AIProviderType.MOCK.value,
            name="Mock Provider",
            model="mock-model",
            priority=0,
            max_tokens=llm.max_tokens,
            temperature=llm.temperature,
        ))

    return configs


async def register_default_providers(manager: AIProviderManager, llm: LLMSettings) -> List[str]:
    """Register every configured provider. One that fails is logged and skipped."""
    registered: List[str] = []
    for config in build_provider_configs(llm):
        try:
            await manager.register_provider(config)
            registered.append(config.id)
        except LLMError as e:
            log_error("AI", f"Skipping provider {config.name}: {e.message}")

    if llm.default_provider and llm.default_provider in manager.providers:
        manager.default_provider = llm.default_provider

    if not registered:
        log("AI", "⚠️ No AI providers registered. Chat requests will fail with 503.")
    else:
        log("AI", f"🤖 Registered providers: {', '.join(registered)}")

    if llm.health_check_on_startup and registered:
        await manager.perform_health_checks()
    return registered
