# uigen/api/projects.py
"""
Project management routes, including the project's nested files and the
export to a workspace directory on disk.

Store calls run in the threadpool so SQLite I/O never blocks the event loop.
"""
from typing import Optional

from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from uigen.api.deps import get_services, get_store
from uigen.core.exceptions import NotFoundError
from uigen.core.services import Services
from uigen.db.store import FileRecord, ProjectStore
from uigen.lib.workspace import export_project_files, get_safe_workspace_path
from uigen.models.common import isoformat, utcnow
from uigen.models.project import FileUpdate, ProjectCreate, ProjectFileCreate, ProjectUpdate

router = APIRouter(prefix="/projects", tags=["Projects"])


async def broadcast_files_changed(
    services: Services,
    project_id: str,
    action: str,
    file: Optional[FileRecord] = None,
    file_id: Optional[str] = None,
) -> None:
    """Tell WebSocket subscribers of a project that its files changed."""
    message = {
        "type": "files_changed",
        "projectId": project_id,
        "action": action,
        "timestamp": isoformat(utcnow()),
    }
    if file is not None:
        message["file"] = file.to_dict()
    if file_id is not None:
        message["fileId"] = file_id
    await services.connections.send_to_project(project_id, message)


def _project_file(store: ProjectStore, project_id: str, file_id: str) -> FileRecord:
    store.require_project(project_id)
    record = store.get_file(file_id)
    if record is None or record.project_id != project_id:
        raise NotFoundError("File not found", {"id": file_id})
    return record


@router.get("")
async def list_projects(store: ProjectStore = Depends(get_store)):
    projects = await run_in_threadpool(store.list_projects)
    return [p.to_dict() for p in projects]


@router.post("", status_code=201)
async def create_project(data: ProjectCreate, store: ProjectStore = Depends(get_store)):
    project = await run_in_threadpool(store.create_project, data.name, data.description)
    return project.to_dict()


@router.get("/{project_id}")
async def get_project(project_id: str, store: ProjectStore = Depends(get_store)):
    project = await run_in_threadpool(store.require_project, project_id)
    return project.to_dict()


@router.put("/{project_id}")
async def update_project(project_id: str, data: ProjectUpdate, store: ProjectStore = Depends(get_store)):
    # Only fields present in the body are changed
    changes = data.model_dump(exclude_unset=True)
    project = await run_in_threadpool(store.update_project, project_id, **changes)
    return project.to_dict()


@router.delete("/{project_id}")
async def delete_project(project_id: str, store: ProjectStore = Depends(get_store)):
    if not await run_in_threadpool(store.delete_project, project_id):
        raise NotFoundError("Project not found", {"id": project_id})
    return {"deleted": True, "id": project_id}


@router.post("/{project_id}/export")
async def export_project(project_id: str, services: Services = Depends(get_services)):
    """Write every project file into workspaces/<project id>/."""
    project = await run_in_threadpool(services.store.require_project, project_id)
    workspace_base = services.settings.paths.workspaces_dir
    written = await export_project_files(
        workspace_base,
        project.id,
        {f.name: f.content for f in project.files},
    )
    return {
        "projectId": project.id,
        "path": str(get_safe_workspace_path(workspace_base, project.id)),
        "files": written,
    }


# ---------------------------------------------------------------------------
# NESTED FILES
# ---------------------------------------------------------------------------

@router.get("/{project_id}/files")
async def list_project_files(project_id: str, store: ProjectStore = Depends(get_store)):
    files = await run_in_threadpool(store.list_files, project_id)
    return [f.to_dict() for f in files]


@router.post("/{project_id}/files", status_code=201)
async def create_project_file(
    project_id: str,
    data: ProjectFileCreate,
    services: Services = Depends(get_services),
):
    record = await run_in_threadpool(services.store.create_file, project_id, data.name, data.content)
    await broadcast_files_changed(services, project_id, "created", file=record)
    return record.to_dict()


@router.get("/{project_id}/files/{file_id}")
async def get_project_file(project_id: str, file_id: str, store: ProjectStore = Depends(get_store)):
    record = await run_in_threadpool(_project_file, store, project_id, file_id)
    return record.to_dict()


@router.put("/{project_id}/files/{file_id}")
async def update_project_file(
    project_id: str,
    file_id: str,
    data: FileUpdate,
    services: Services = Depends(get_services),
):
    await run_in_threadpool(_project_file, services.store, project_id, file_id)
    record = await run_in_threadpool(services.store.update_file, file_id, data.content)
    await broadcast_files_changed(services, project_id, "updated", file=record)
    return record.to_dict()


@router.delete("/{project_id}/files/{file_id}")
async def delete_project_file(
    project_id: str,
    file_id: str,
    services: Services = Depends(get_services),
):
    await run_in_threadpool(_project_file, services.store, project_id, file_id)
    await run_in_threadpool(services.store.delete_file, file_id)
    await broadcast_files_changed(services, project_id, "deleted", file_id=file_id)
    return {"deleted": True, "id": file_id}
