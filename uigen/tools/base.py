# uigen/tools/base.py
"""
Base class for the tools the model can call.

A tool never raises out of ``execute``: every failure comes back as an
AIToolResult with ``error`` set, so one bad call cannot abort a chat turn.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict

from uigen.models.ai import AITool, AIToolCall, AIToolResult


class BaseTool(ABC):
    def __init__(self, name: str, description: str):
        self.name = name
        self.description = description

    @abstractmethod
    def get_definition(self) -> AITool:
        """JSON-schema definition sent to the provider."""

    @abstractmethod
    async def execute(self, call: AIToolCall) -> AIToolResult:
        ...

    @abstractmethod
    def validate_arguments(self, args: Dict[str, Any]) -> bool:
        ...

    def format_error(self, tool_call_id: str, error: str) -> AIToolResult:
        return AIToolResult(tool_call_id=tool_call_id, result=None, error=error)

    def format_success(self, tool_call_id: str, result: Any) -> AIToolResult:
        return AIToolResult(tool_call_id=tool_call_id, result=result, error=None)
