# uigen/llm/__init__.py
from uigen.llm.manager import AIProviderManager, PROVIDER_CLASSES

__all__ = ["AIProviderManager", "PROVIDER_CLASSES"]
