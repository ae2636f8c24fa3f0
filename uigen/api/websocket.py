# uigen/api/websocket.py
"""
Realtime channel at /ws.

Clients send JSON messages with a ``type`` field and get JSON replies.
Subscribing to a project also delivers its ``files_changed`` notices.
"""
import json
import time
from typing import Any, Dict, List

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool

from uigen.core.exceptions import UIGenError
from uigen.core.logging import log, log_error
from uigen.core.services import Services
from uigen.models.ai import AIMessage

router = APIRouter()

WELCOME_MESSAGE = "Connected to UIGen Vue WebSocket server"


def _error(message: str) -> Dict[str, Any]:
    return {"type": "error", "message": message}


def _chat_messages(data: Dict[str, Any]) -> List[AIMessage]:
    if data.get("messages"):
        return [AIMessage.model_validate(m) for m in data["messages"]]
    if data.get("message"):
        return [AIMessage(role="user", content=str(data["message"]))]
    return []


async def _handle_chat(services: Services, websocket: WebSocket, data: Dict[str, Any]) -> None:
    try:
        messages = _chat_messages(data)
    except PydanticValidationError:
        await websocket.send_json(_error("Invalid chat messages"))
        return
    if not messages:
        await websocket.send_json(_error("Chat requires 'messages' or 'message'"))
        return

    preferred = data.get("provider") or services.settings.llm.default_provider
    content = ""
    usage = None
    try:
        async for chunk in services.providers.generate_content_stream(messages, preferred=preferred):
            if chunk.content:
                content += chunk.content
                await websocket.send_json({"type": "chat_chunk", "content": chunk.content})
            if chunk.is_complete:
                usage = chunk.usage
    except UIGenError as e:
        log_error("WS", f"Chat failed: {e.message}")
        await websocket.send_json(_error(e.message))
        return

    await websocket.send_json({
        "type": "chat_complete",
        "content": content,
        "usage": usage.to_json_dict() if usage else None,
    })


async def _handle_preview(services: Services, websocket: WebSocket, data: Dict[str, Any]) -> None:
    project_id = data.get("projectId")
    if not project_id:
        await websocket.send_json(_error("Preview requires 'projectId'"))
        return
    try:
        files = await run_in_threadpool(services.store.list_files, project_id)
    except UIGenError as e:
        await websocket.send_json(_error(e.message))
        return
    await websocket.send_json({
        "type": "preview_response",
        "projectId": project_id,
        "files": [f.to_dict() for f in files],
    })


async def handle_message(services: Services, websocket: WebSocket, data: Dict[str, Any]) -> None:
    message_type = data.get("type")
    log("WS", f"📨 Message received: {message_type}")

    if message_type == "ping":
        await websocket.send_json({"type": "pong", "timestamp": int(time.time() * 1000)})
    elif message_type == "subscribe":
        project_id = data.get("projectId")
        if not project_id:
            await websocket.send_json(_error("Subscribe requires 'projectId'"))
            return
        await services.connections.subscribe(websocket, project_id)
        await websocket.send_json({"type": "subscribed", "projectId": project_id})
    elif message_type == "chat":
        await _handle_chat(services, websocket, data)
    elif message_type == "preview":
        await _handle_preview(services, websocket, data)
    else:
        await websocket.send_json(_error(f"Unknown message type: {message_type}"))


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    services: Services = websocket.app.state.services
    manager = services.connections

    await manager.connect(websocket)
    await websocket.send_json({"type": "welcome", "message": WELCOME_MESSAGE})
    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data = json.loads(raw)
            except json.JSONDecodeError:
                await websocket.send_json(_error("Invalid message format"))
                continue
            if not isinstance(data, dict):
                await websocket.send_json(_error("Invalid message format"))
                continue
            await handle_message(services, websocket, data)
    except WebSocketDisconnect as e:
        log("WS", f"Connection closed (code {e.code})")
    finally:
        await manager.disconnect(websocket)
