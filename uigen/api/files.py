# uigen/api/files.py
"""
Flat file routes addressed by file id.
"""
from fastapi import APIRouter, Depends
from starlette.concurrency import run_in_threadpool

from uigen.api.deps import get_services, get_store
from uigen.api.projects import broadcast_files_changed
from uigen.core.exceptions import NotFoundError, ValidationError
from uigen.core.services import Services
from uigen.db.store import FileRecord, ProjectStore
from uigen.models.project import FileCreate, FileUpdate

router = APIRouter(prefix="/files", tags=["Files"])


def _require_file(store: ProjectStore, file_id: str) -> FileRecord:
    record = store.get_file(file_id)
    if record is None:
        raise NotFoundError("File not found", {"id": file_id})
    return record


@router.post("", status_code=201)
async def create_file(data: FileCreate, services: Services = Depends(get_services)):
    store = services.store
    # The project is part of the body here, so a bad id is a bad request
    if await run_in_threadpool(store.get_project, data.project_id) is None:
        raise ValidationError("Project not found", {"projectId": data.project_id})
    record = await run_in_threadpool(store.create_file, data.project_id, data.name, data.content)
    await broadcast_files_changed(services, record.project_id, "created", file=record)
    return record.to_dict()


@router.get("/{file_id}")
async def get_file(file_id: str, store: ProjectStore = Depends(get_store)):
    record = await run_in_threadpool(_require_file, store, file_id)
    return record.to_dict()


@router.put("/{file_id}")
async def update_file(file_id: str, data: FileUpdate, services: Services = Depends(get_services)):
    record = await run_in_threadpool(services.store.update_file, file_id, data.content)
    await broadcast_files_changed(services, record.project_id, "updated", file=record)
    return record.to_dict()


@router.delete("/{file_id}")
async def delete_file(file_id: str, services: Services = Depends(get_services)):
    record = await run_in_threadpool(_require_file, services.store, file_id)
    await run_in_threadpool(services.store.delete_file, file_id)
    await broadcast_files_changed(services, record.project_id, "deleted", file_id=file_id)
    return {"deleted": True, "id": file_id}
