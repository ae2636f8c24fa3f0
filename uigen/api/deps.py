# uigen/api/deps.py
"""
Request-scoped access to the service container.
"""
from fastapi import Depends, Request

from uigen.core.services import Services
from uigen.db.store import ProjectStore
from uigen.llm.manager import AIProviderManager


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_store(services: Services = Depends(get_services)) -> ProjectStore:
    return services.store


def get_providers(services: Services = Depends(get_services)) -> AIProviderManager:
    return services.providers
