# uigen/tools/file_manager.py
from typing import Any, Dict, List

from uigen.core.exceptions import UIGenError
from uigen.core.logging import log
from uigen.lib.file_system import VirtualFileSystem
from uigen.models.ai import AITool, AIToolCall, AIToolName, AIToolResult
from uigen.models.common import isoformat
from uigen.models.file_system import Node
from uigen.tools.base import BaseTool


class FileManagerTool(BaseTool):
    """List, delete, move, copy and create entries in the virtual file system."""

    COMMANDS = ("list", "delete", "move", "copy", "mkdir", "exists")

    def __init__(self, file_system: VirtualFileSystem):
        super().__init__(
            AIToolName.FILE_MANAGER.value,
            "File manager for listing, deleting, moving and copying files and creating directories"
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
                        "description": "list, delete, move, copy, mkdir or exists",
                    },
                    "path": {"type": "string", "description": "File or directory path"},
                    "destination": {"type": "string", "description": "Target path (move and copy)"},
                    "recursive": {
                        "type": "boolean",
                        "description": "Recurse into subdirectories (list)",
                        "default": False,
                    },
                },
                "required": ["command", "path"],
            },
        )

    def validate_arguments(self, args: Dict[str, Any]) -> bool:
        command = args.get("command")
        if command not in self.COMMANDS or not args.get("path"):
            return False
        if command in ("move", "copy") and not args.get("destination"):
            return False
        return True

    async def execute(self, call: AIToolCall) -> AIToolResult:
        args = call.arguments
        if not self.validate_arguments(args):
            return self.format_error(call.id, "Invalid tool arguments")

        command, path = args["command"], args["path"]
        log("TOOLS", f"🗂️ {self.name} {command} {path}")

        try:
            if command == "list":
                return self._list(call.id, path, bool(args.get("recursive", False)))
            if command == "delete":
                return self._delete(call.id, path)
            if command == "move":
                return self._move(call.id, path, args["destination"])
            if command == "copy":
                return self._copy(call.id, path, args["destination"])
            if command == "mkdir":
                self.file_system.create_directory(path)
                return self.format_success(call.id, f"Created directory: {path}")
            return self._exists(call.id, path)
        except UIGenError as e:
            return self.format_error(call.id, f"{command} failed: {e.message}")

    def _entries(self, nodes: List[Node], recursive: bool) -> List[Dict[str, Any]]:
        entries = []
        for node in nodes:
            entries.append({
                "path": node.path,
                "type": "directory" if node.is_directory else "file",
                "size": 0 if node.is_directory else node.size,
                "lastModified": isoformat(node.last_modified),
            })
            if recursive and node.is_directory:
                entries.extend(self._entries(node.children, recursive))
        return entries

    def _list(self, call_id: str, path: str, recursive: bool) -> AIToolResult:
        files = self._entries(self.file_system.list_directory(path), recursive)
        if not files:
            return self.format_success(call_id, f"Directory {path} is empty")
        return self.format_success(call_id, {"path": path, "files": files, "count": len(files)})

    def _delete(self, call_id: str, path: str) -> AIToolResult:
        if self.file_system.is_directory(path):
            self.file_system.delete_directory(path, recursive=True)
            return self.format_success(call_id, f"Deleted directory: {path}")
        if not self.file_system.delete_file(path):
            return self.format_error(call_id, f"File not found: {path}")
        return self.format_success(call_id, f"Deleted file: {path}")

    def _move(self, call_id: str, source: str, destination: str) -> AIToolResult:
        if self.file_system.get_file(destination) is not None:
            return self.format_error(call_id, f"Destination already exists: {destination}")
        self.file_system.move(source, destination)
        return self.format_success(call_id, f"Moved {source} to {destination}")

    def _copy(self, call_id: str, source: str, destination: str) -> AIToolResult:
        if self.file_system.get_file(destination) is not None:
            return self.format_error(call_id, f"Destination already exists: {destination}")
        self.file_system.copy_file(source, destination)
        return self.format_success(call_id, f"Copied {source} to {destination}")

    def _exists(self, call_id: str, path: str) -> AIToolResult:
        exists = self.file_system.exists(path)
        return self.format_success(call_id, {
            "path": path,
            "exists": exists,
            "message": f"{'Exists' if exists else 'Does not exist'}: {path}",
        })
