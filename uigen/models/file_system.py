# uigen/models/file_system.py
"""
Virtual file system types.

Nodes are plain mutable dataclasses: the file system owns them and
rewrites paths/parents in place on moves.
"""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from uigen.models.common import FileType, isoformat, utcnow


class FileSystemOperationType(str, Enum):
    CREATE_FILE = "create_file"
    CREATE_DIRECTORY = "create_directory"
    UPDATE_FILE = "update_file"
    DELETE_FILE = "delete_file"
    DELETE_DIRECTORY = "delete_directory"
    MOVE_FILE = "move_file"
    MOVE_DIRECTORY = "move_directory"
    COPY_FILE = "copy_file"
    COPY_DIRECTORY = "copy_directory"
    RENAME_FILE = "rename_file"
    RENAME_DIRECTORY = "rename_directory"


class FileSystemEventType(str, Enum):
    FILE_CREATED = "file_created"
    FILE_UPDATED = "file_updated"
    FILE_DELETED = "file_deleted"
    FILE_MOVED = "file_moved"
    DIRECTORY_CREATED = "directory_created"
    DIRECTORY_DELETED = "directory_deleted"
    DIRECTORY_MOVED = "directory_moved"


@dataclass
class FilePermissions:
    read: bool = True
    write: bool = True
    execute: bool = False


@dataclass
class FileMetadata:
    encoding: str = "utf-8"
    mime_type: str = "text/plain"
    language: str = "text"
    is_executable: bool = False
    permissions: FilePermissions = field(default_factory=FilePermissions)
    tags: List[str] = field(default_factory=list)
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "encoding": self.encoding,
            "mimeType": self.mime_type,
            "language": self.language,
            "isExecutable": self.is_executable,
            "permissions": vars(self.permissions).copy(),
            "tags": list(self.tags),
            "description": self.description,
        }


@dataclass
class DirectoryMetadata:
    description: str = ""
    tags: List[str] = field(default_factory=list)
    is_hidden: bool = False


@dataclass
class VirtualFile:
    id: str
    name: str
    path: str
    content: str
    type: FileType
    size: int
    parent_id: Optional[str] = None
    last_modified: datetime = field(default_factory=utcnow)
    metadata: FileMetadata = field(default_factory=FileMetadata)

    is_directory = False

    def to_dict(self, include_content: bool = True) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "type": self.type.value,
            "size": self.size,
            "isDirectory": False,
            "parentId": self.parent_id,
            "lastModified": isoformat(self.last_modified),
            "metadata": self.metadata.to_dict(),
        }
        if include_content:
            data["content"] = self.content
        return data


@dataclass
class VirtualDirectory:
    id: str
    name: str
    path: str
    parent_id: Optional[str] = None
    children: List["Node"] = field(default_factory=list)
    last_modified: datetime = field(default_factory=utcnow)
    metadata: DirectoryMetadata = field(default_factory=DirectoryMetadata)

    is_directory = True

    def to_dict(self, include_content: bool = True) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "path": self.path,
            "isDirectory": True,
            "parentId": self.parent_id,
            "lastModified": isoformat(self.last_modified),
            "children": [child.to_dict(include_content) for child in self.children],
        }


Node = Union[VirtualFile, VirtualDirectory]


@dataclass
class FileSystemOperation:
    type: FileSystemOperationType
    path: str
    content: Optional[str] = None
    new_path: Optional[str] = None
    timestamp: datetime = field(default_factory=utcnow)
    user_id: Optional[str] = None


@dataclass
class FileSystemEvent:
    type: FileSystemEventType
    path: str
    new_path: Optional[str] = None
    file: Optional[VirtualFile] = None
    directory: Optional[VirtualDirectory] = None
    timestamp: datetime = field(default_factory=utcnow)


WatcherCallback = Callable[[FileSystemEvent], None]


@dataclass
class FileSystemWatcher:
    id: str
    path: str
    recursive: bool
    events: List[FileSystemEventType]
    callback: WatcherCallback


@dataclass
class FileSearchOptions:
    query: str
    file_types: Optional[List[FileType]] = None
    include_content: bool = False
    case_sensitive: bool = False
    use_regex: bool = False
    max_results: int = 100


@dataclass
class FileMatch:
    line: int
    column: int
    text: str
    context: str


@dataclass
class FileSearchResult:
    file: VirtualFile
    matches: List[FileMatch]
    score: int


@dataclass
class SnapshotMetadata:
    total_files: int
    total_directories: int
    total_size: int
    version: str = "1.0.0"


@dataclass
class FileSystemSnapshot:
    id: str
    files: Dict[str, VirtualFile]
    directories: Dict[str, VirtualDirectory]
    root_id: str
    metadata: SnapshotMetadata
    description: Optional[str] = None
    timestamp: datetime = field(default_factory=utcnow)
