# uigen/lib/workspace.py
"""
Exporting project files to disk.

Each project gets a directory under the workspaces root named after its
sanitised id. Writes that would land outside that directory are skipped.
"""
import re
from pathlib import Path
from typing import Dict, List

import aiofiles

from uigen.core.logging import log


UNSAFE_ID_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_project_id(project_id: str) -> str:
    """Project id as a directory name: anything outside [a-zA-Z0-9._-] becomes '_'."""
    return UNSAFE_ID_CHARS.sub("_", project_id)


def get_safe_workspace_path(base_path: Path, project_id: str) -> Path:
    """Absolute workspace directory for a project, created if missing."""
    root = Path(base_path).absolute() / sanitize_project_id(project_id)
    root.mkdir(parents=True, exist_ok=True)
    return root


def within_workspace(project_root: Path, candidate: Path) -> bool:
    return candidate.resolve().is_relative_to(project_root.resolve())


async def read_file_content(file_path: Path) -> str:
    async with aiofiles.open(file_path, "r", encoding="utf-8") as handle:
        return await handle.read()


async def write_file_content(file_path: Path, content: str) -> None:
    """Write UTF-8 text, creating parent directories first."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    async with aiofiles.open(file_path, "w", encoding="utf-8") as handle:
        await handle.write(content)


async def export_project_files(workspace_base: Path, project_id: str, files: Dict[str, str]) -> List[str]:
    """
    Write a {name: content} map relative to the project's workspace.
    Returns the relative paths that were written.
    """
    project_root = get_safe_workspace_path(workspace_base, project_id)
    written: List[str] = []
    for name, content in files.items():
        relative = name.replace("\\", "/").lstrip("/")
        target = project_root / relative
        if not relative or not within_workspace(project_root, target) \
                or target.resolve() == project_root.resolve() or target.is_dir():
            log("WORKSPACE", f"⚠️ Skipping unsafe path: {name}", project_id=project_id)
            continue
        await write_file_content(target, content)
        written.append(relative)

    log("WORKSPACE", f"📦 Exported {len(written)} files to {project_root}", project_id=project_id)
    return written
