# uigen/lib/monitoring.py
from typing import Optional

from fastapi import FastAPI
from prometheus_client.registry import CollectorRegistry as Registry
from prometheus_client import Counter, Gauge
from prometheus_fastapi_instrumentator import Instrumentator

from uigen.core.logging import log


class AIMetrics:
    """Provider health, request and token counters kept in one registry."""

    def __init__(self, registry: Optional[Registry] = None):
        self.registry = registry or Registry()

        self.provider_healthy = Gauge(
            'uigen_ai_provider_healthy',
            'Whether an AI provider is currently considered healthy (1) or not (0)',
            ['provider'],
            registry=self.registry
        )
        self.requests = Counter(
            'uigen_ai_requests',
            'AI generation requests by provider and outcome',
            ['provider', 'outcome'],
            registry=self.registry
        )
        self.tokens = Counter(
            'uigen_ai_tokens',
            'Tokens consumed by provider',
            ['provider', 'direction'],
            registry=self.registry
        )

    def set_health(self, provider_id: str, healthy: bool) -> None:
        self.provider_healthy.labels(provider=provider_id).set(1 if healthy else 0)

    def record_success(self, provider_id: str, input_tokens: int, output_tokens: int) -> None:
        self.requests.labels(provider=provider_id, outcome="success").inc()
        self.tokens.labels(provider=provider_id, direction="input").inc(input_tokens)
        self.tokens.labels(provider=provider_id, direction="output").inc(output_tokens)

    def record_failure(self, provider_id: str) -> None:
        self.requests.labels(provider=provider_id, outcome="failure").inc()


def register_monitoring(app: FastAPI, registry: Registry):
    """
    Registers Prometheus monitoring on the FastAPI app.
    Request count and latency come from the instrumentator; /metrics serves
    them together with the AI metrics from the same registry.
    """
    instrumentator = Instrumentator(
        excluded_handlers=["/metrics"],  # Don't monitor the metrics endpoint itself
        registry=registry
    ).instrument(app)

    instrumentator.expose(app, include_in_schema=False, should_gzip=True)

    log("MONITORING", "Prometheus instrumentation registered at /metrics.")
