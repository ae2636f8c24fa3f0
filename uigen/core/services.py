# uigen/core/services.py
"""
Per-app service container.

create_app() builds one of these and stores it on app.state.services so
routes, the WebSocket handler and tests all reach the same store, provider
manager and connection manager.
"""
from prometheus_client.registry import CollectorRegistry

from uigen.core.config import Settings
from uigen.core.logging import log, log_section
from uigen.db.store import ProjectStore
from uigen.lib.monitoring import AIMetrics
from uigen.lib.websocket import ConnectionManager
from uigen.llm.bootstrap import register_default_providers
from uigen.llm.manager import AIProviderManager


class Services:
    def __init__(self, settings: Settings):
        self.settings = settings
        self.registry = CollectorRegistry()
        self.metrics = AIMetrics(self.registry)
        self.store = ProjectStore(settings.database.path)
        self.providers = AIProviderManager(
            metrics=self.metrics,
            request_timeout=settings.llm.request_timeout,
            mock_latency=settings.llm.mock_latency,
        )
        self.connections = ConnectionManager()
        self.started = False

    async def startup(self) -> None:
        """Register AI providers. Safe to call more than once."""
        if self.started:
            return
        log_section("SERVER", f"🚀 UIGen API starting ({self.settings.server.environment})")
        self.settings.ensure_directories()
        await register_default_providers(self.providers, self.settings.llm)
        self.started = True

    async def shutdown(self) -> None:
        log("SERVER", "🔌 Shutting down...")
        self.started = False
