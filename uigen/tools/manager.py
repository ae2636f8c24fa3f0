# uigen/tools/manager.py
"""
Tool registry and dispatcher bound to one virtual file system.
"""
from typing import Any, Dict, List, Optional

from uigen.core.logging import log
from uigen.lib.file_system import VirtualFileSystem
from uigen.models.ai import AITool, AIToolCall, AIToolName, AIToolResult
from uigen.tools.base import BaseTool
from uigen.tools.file_manager import FileManagerTool
from uigen.tools.str_replace_editor import StrReplaceEditorTool


class ToolManager:
    def __init__(self, file_system: VirtualFileSystem):
        self.file_system = file_system
        self.tools: Dict[str, BaseTool] = {}
        self._initialize_tools()

    def _initialize_tools(self) -> None:
        self.tools = {
            AIToolName.STR_REPLACE_EDITOR.value: StrReplaceEditorTool(self.file_system),
            AIToolName.FILE_MANAGER.value: FileManagerTool(self.file_system),
        }
        log("TOOLS", f"🔧 Tool manager initialized with {len(self.tools)} tools")

    def get_available_tools(self) -> List[AITool]:
        return [tool.get_definition() for tool in self.tools.values()]

    def get_tool_definition(self, name: str) -> Optional[AITool]:
        tool = self.tools.get(name)
        return tool.get_definition() if tool else None

    async def execute_tool(self, call: AIToolCall) -> AIToolResult:
        tool = self.tools.get(call.name)
        if tool is None:
            return AIToolResult(tool_call_id=call.id, result=None, error=f"Unknown tool: {call.name}")
        try:
            return await tool.execute(call)
        except (TypeError, ValueError) as e:
            log("TOOLS", f"⚠️ {call.name} rejected arguments: {e}")
            return AIToolResult(tool_call_id=call.id, result=None, error=f"Error executing {call.name}: {e}")

    async def execute_tools(self, calls: List[AIToolCall]) -> List[AIToolResult]:
        """Run calls one after another; later calls see earlier edits."""
        results = []
        for call in calls:
            results.append(await self.execute_tool(call))
        return results

    def is_tool_available(self, name: str) -> bool:
        return name in self.tools

    def get_tool_stats(self) -> Dict[str, Any]:
        return {"totalTools": len(self.tools), "availableTools": list(self.tools)}

    def update_file_system(self, file_system: VirtualFileSystem) -> None:
        self.file_system = file_system
        self._initialize_tools()
