# uigen/tools/str_replace_editor.py
from typing import Any, Dict, List, Optional

from uigen.core.exceptions import UIGenError
from uigen.core.logging import log
from uigen.lib.file_system import VirtualFileSystem
from uigen.models.ai import AITool, AIToolCall, AIToolName, AIToolResult
from uigen.tools.base import BaseTool


class StrReplaceEditorTool(BaseTool):
    """View, create and edit files by exact string replacement."""

    COMMANDS = ("view", "create", "str_replace")

    def __init__(self, file_system: VirtualFileSystem):
        super().__init__(
            AIToolName.STR_REPLACE_EDITOR.value,
            "String replace editor for viewing, creating and precisely editing file contents"
        )
        self.file_system = file_system

    def get_definition(self) -> AITool:
        return AITool(
            name=self.name,
            description=self.description,
            parameters={
                "type": "object",
                "properties": {
                    "command": {
                        "type": "string",
                        "enum": list(self.COMMANDS),
                        "description": "str_replace (replace text), view (show a file), create (new file)",
                    },
                    "path": {"type": "string", "description": "File path"},
                    "old_str": {"type": "string", "description": "Exact text to replace (str_replace only)"},
                    "new_str": {"type": "string", "description": "Replacement text (str_replace only)"},
                    "file_text": {"type": "string", "description": "File content (create only)"},
                    "view_range": {
                        "type": "array",
                        "items": {"type": "number"},
                        "description": "Optional [start_line, end_line] for view, 1-based and inclusive",
                    },
                },
                "required": ["command", "path"],
            },
        )

    def validate_arguments(self, args: Dict[str, Any]) -> bool:
        command = args.get("command")
        if not command or not args.get("path"):
            return False
        if command == "str_replace":
            return isinstance(args.get("old_str"), str) and isinstance(args.get("new_str"), str)
        if command == "create":
            return isinstance(args.get("file_text"), str)
        return command == "view"

    async def execute(self, call: AIToolCall) -> AIToolResult:
        args = call.arguments
        if not self.validate_arguments(args):
            return self.format_error(call.id, "Invalid tool arguments")

        command, path = args["command"], args["path"]
        log("TOOLS", f"✏️ {self.name} {command} {path}")

        try:
            if command == "view":
                return self._view(call.id, path, args.get("view_range"))
            if command == "create":
                return self._create(call.id, path, args["file_text"])
            return self._replace(call.id, path, args["old_str"], args["new_str"])
        except UIGenError as e:
            return self.format_error(call.id, f"{command} failed: {e.message}")

    def _view(self, call_id: str, path: str, view_range: Optional[List[int]]) -> AIToolResult:
        content = self.file_system.read_file(path)
        if view_range and len(view_range) == 2:
            start, end = int(view_range[0]), int(view_range[1])
            selected = content.split("\n")[max(start - 1, 0):end]
            return self.format_success(call_id, f"File: {path} (lines {start}-{end})\nContent:\n" + "\n".join(selected))
        return self.format_success(call_id, f"File: {path}\nContent:\n{content}")

    def _create(self, call_id: str, path: str, file_text: str) -> AIToolResult:
        if self.file_system.get_file(path) is not None:
            return self.format_error(call_id, f"File already exists: {path}")
        self.file_system.create_file(path, file_text)
        return self.format_success(call_id, f"Created file: {path}")

    def _replace(self, call_id: str, path: str, old_str: str, new_str: str) -> AIToolResult:
        content = self.file_system.read_file(path)
        if old_str not in content:
            return self.format_error(call_id, f"String not found in {path}")
        self.file_system.update_file(path, content.replace(old_str, new_str, 1))
        return self.format_success(call_id, f"Replaced content in {path}")
