# uigen/llm/providers/__init__.py
"""
AI provider adapters, one per vendor plus the offline mock.
"""
from uigen.llm.providers.anthropic import AnthropicProvider
from uigen.llm.providers.base import BaseAIProvider
from uigen.llm.providers.google import GoogleProvider
from uigen.llm.providers.mock import MockProvider
from uigen.llm.providers.openai import OpenAIProvider

__all__ = ["AnthropicProvider", "BaseAIProvider", "GoogleProvider", "MockProvider", "OpenAIProvider"]
