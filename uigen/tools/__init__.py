# uigen/tools/__init__.py
from uigen.tools.base import BaseTool
from uigen.tools.file_manager import FileManagerTool
from uigen.tools.manager import ToolManager
from uigen.tools.str_replace_editor import StrReplaceEditorTool

__all__ = ["BaseTool", "FileManagerTool", "StrReplaceEditorTool", "ToolManager"]
