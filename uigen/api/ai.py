# uigen/api/ai.py
"""
AI routes: chat (plain or streamed), provider info, health and usage.

Chat with ``projectId`` + ``useTools`` runs the conversation against an
in-memory copy of the project's files and writes the result back.
"""
import json
from typing import AsyncIterator, Dict, List, Optional, Tuple

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from starlette.concurrency import run_in_threadpool

from uigen.api.deps import get_providers, get_services
from uigen.api.projects import broadcast_files_changed
from uigen.core.exceptions import UIGenError
from uigen.core.logging import log, log_error
from uigen.core.services import Services
from uigen.lib.file_system import VirtualFileSystem
from uigen.llm.manager import AIProviderManager
from uigen.models.ai import AIResponse, AIStreamChunk
from uigen.models.common import ok
from uigen.models.project import ChatRequest
from uigen.tools.manager import ToolManager

router = APIRouter(prefix="/ai", tags=["AI"])


def _sse(payload: dict) -> str:
    return f"data: {json.dumps(payload)}\n\n"


def _preferred(services: Services, request: ChatRequest) -> Optional[str]:
    return request.provider or services.settings.llm.default_provider


async def _chat_with_tools(services: Services, request: ChatRequest) -> Tuple[AIResponse, Dict[str, List[str]]]:
    """Run a tool-enabled chat against the project's files and persist the result."""
    project = await run_in_threadpool(services.store.require_project, request.project_id)

    file_system = VirtualFileSystem()
    file_system.load_file_map({f.name: f.content for f in project.files})
    tool_manager = ToolManager(file_system)

    response = await services.providers.generate_content(
        request.messages,
        request.options,
        preferred=_preferred(services, request),
        tool_manager=tool_manager,
    )

    changes = await run_in_threadpool(services.store.replace_files, project.id, file_system.to_file_map())
    if any(changes.values()):
        log("AI", f"📝 AI changed files: {changes}", project_id=project.id)
        await broadcast_files_changed(services, project.id, "synced")

    return response, changes


async def _stream_events(services: Services, request: ChatRequest) -> AsyncIterator[str]:
    try:
        if request.project_id and request.use_tools:
            response, _ = await _chat_with_tools(services, request)
            yield _sse(AIStreamChunk(content=response.content, is_complete=False).to_json_dict())
            yield _sse(AIStreamChunk(content="", is_complete=True, usage=response.usage).to_json_dict())
            return

        async for chunk in services.providers.generate_content_stream(
            request.messages,
            request.options,
            preferred=_preferred(services, request),
        ):
            yield _sse(chunk.to_json_dict())
    except UIGenError as e:
        # Headers are already sent; report the failure in-band
        log_error("AI", f"Stream failed: {e.message}")
        yield _sse({"error": type(e).__name__, "message": e.message})


@router.post("/chat")
async def chat(request: ChatRequest, services: Services = Depends(get_services)):
    """Send a conversation to the AI provider layer."""
    log("AI", f"💬 Chat request ({len(request.messages)} messages, stream={request.stream})",
        project_id=request.project_id)

    if request.stream:
        return StreamingResponse(
            _stream_events(services, request),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
        )

    if request.project_id and request.use_tools:
        response, changes = await _chat_with_tools(services, request)
        data = response.to_json_dict()
        data["fileChanges"] = changes
        return ok(data)

    response = await services.providers.generate_content(
        request.messages,
        request.options,
        preferred=_preferred(services, request),
    )
    return ok(response.to_json_dict())


@router.get("/providers")
async def list_providers(providers: AIProviderManager = Depends(get_providers)):
    """Registered providers with their API keys masked."""
    statuses = {s.id: s for s in providers.get_provider_statuses()}
    items: List[Dict] = []
    for config in providers.get_all_provider_info():
        item = config.masked()
        status = statuses.get(config.id)
        item["isHealthy"] = status.is_healthy if status else False
        items.append(item)
    return ok({"providers": items, "defaultProvider": providers.default_provider})


@router.get("/health")
async def providers_health(providers: AIProviderManager = Depends(get_providers)):
    """Run a health check against every provider now."""
    statuses = await providers.perform_health_checks()
    return ok({
        "providers": [s.to_json_dict() for s in statuses],
        "healthy": sum(1 for s in statuses if s.is_healthy),
        "total": len(statuses),
    })


@router.get("/usage")
async def usage(providers: AIProviderManager = Depends(get_providers)):
    return ok(providers.get_usage_summary())


@router.get("/tools")
async def tools():
    """Tool definitions offered to the model in tool-enabled chats."""
    tool_manager = ToolManager(VirtualFileSystem())
    return ok({
        "tools": [t.to_json_dict() for t in tool_manager.get_available_tools()],
        **tool_manager.get_tool_stats(),
    })
