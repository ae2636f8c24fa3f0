# uigen/lib/file_system.py
"""
In-memory virtual file system.

Files and directories live in two id-keyed maps; the tree is expressed by
each directory's ``children`` list and each node's ``parent_id``. Paths are
plain strings ("/src/App.vue") and are resolved by scanning the maps.

Used by the AI tools to read and edit a project's files, and by the chat
route to load a project, let the model work on it, and write the result
back to the store.
"""
import copy
import re
import uuid
from typing import Dict, Iterable, List, Optional, Tuple

from uigen.core.exceptions import (
    DirectoryNotEmptyError,
    InvalidPathError,
    NotFoundError,
    PathExistsError,
    PathNotFoundError,
    ValidationError,
)
from uigen.core.logging import log, log_error
from uigen.models.common import FileType, utcnow
from uigen.models.file_system import (
    DirectoryMetadata,
    FileMatch,
    FileMetadata,
    FileSearchOptions,
    FileSearchResult,
    FileSystemEvent,
    FileSystemEventType,
    FileSystemOperation,
    FileSystemOperationType,
    FileSystemSnapshot,
    FileSystemWatcher,
    Node,
    SnapshotMetadata,
    VirtualDirectory,
    VirtualFile,
    WatcherCallback,
)


EXTENSION_TYPES = {
    "vue": FileType.VUE,
    "ts": FileType.TYPESCRIPT,
    "js": FileType.JAVASCRIPT,
    "css": FileType.CSS,
    "html": FileType.HTML,
    "json": FileType.JSON,
    "md": FileType.MARKDOWN,
}

MIME_TYPES = {
    FileType.VUE: "text/x-vue",
    FileType.TYPESCRIPT: "text/typescript",
    FileType.JAVASCRIPT: "text/javascript",
    FileType.CSS: "text/css",
    FileType.HTML: "text/html",
    FileType.JSON: "application/json",
    FileType.MARKDOWN: "text/markdown",
}

LANGUAGES = {
    FileType.VUE: "vue",
    FileType.TYPESCRIPT: "typescript",
    FileType.JAVASCRIPT: "javascript",
    FileType.CSS: "css",
    FileType.HTML: "html",
    FileType.JSON: "json",
    FileType.MARKDOWN: "markdown",
}


def infer_file_type(filename: str) -> FileType:
    """Map a file extension to a FileType. Unknown extensions are TypeScript."""
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return EXTENSION_TYPES.get(extension, FileType.TYPESCRIPT)


def content_size(content: str) -> int:
    return len(content.encode("utf-8"))


class VirtualFileSystem:
    """
    Tree of virtual files and directories with watchers, snapshots and an
    operation log.
    """

    def __init__(self, max_operation_history: int = 1000):
        self.max_operation_history = max_operation_history
        self._files: Dict[str, VirtualFile] = {}
        self._directories: Dict[str, VirtualDirectory] = {}
        self._operations: List[FileSystemOperation] = []
        self._watchers: Dict[str, FileSystemWatcher] = {}
        self._snapshots: Dict[str, FileSystemSnapshot] = {}
        self.root_id = self._create_root()

    def _create_root(self) -> str:
        root = VirtualDirectory(
            id=str(uuid.uuid4()),
            name="root",
            path="/",
            metadata=DirectoryMetadata(description="Root directory"),
        )
        self._directories[root.id] = root
        return root.id

    # ------------------------------------------------------------------
    # PATHS
    # ------------------------------------------------------------------

    @staticmethod
    def normalize_path(path: str) -> str:
        """Collapse repeated slashes, drop the trailing one, anchor at '/'."""
        if not isinstance(path, str):
            raise InvalidPathError(str(path), "Path must be a string")
        normalized = re.sub(r"/+", "/", path.strip().replace("\\", "/"))
        if not normalized.startswith("/"):
            normalized = "/" + normalized
        if len(normalized) > 1:
            normalized = normalized.rstrip("/")
        if any(part in (".", "..") for part in normalized.split("/")):
            raise InvalidPathError(path, f"Relative segments are not allowed: {path}")
        return normalized

    @classmethod
    def parse_path(cls, path: str) -> Tuple[str, str]:
        """Split a path into (parent directory, final name)."""
        normalized = cls.normalize_path(path)
        directory, _, name = normalized.rpartition("/")
        return directory or "/", name

    @staticmethod
    def join_path(directory: str, name: str) -> str:
        return f"{directory.rstrip('/')}/{name}"

    def _find_file(self, path: str) -> Optional[VirtualFile]:
        normalized = self.normalize_path(path)
        return next((f for f in self._files.values() if f.path == normalized), None)

    def _find_directory(self, path: str) -> Optional[VirtualDirectory]:
        normalized = self.normalize_path(path)
        return next((d for d in self._directories.values() if d.path == normalized), None)

    def _require_file(self, path: str) -> VirtualFile:
        file = self._find_file(path)
        if file is None:
            raise PathNotFoundError(path, f"File not found: {path}")
        return file

    def _require_directory(self, path: str) -> VirtualDirectory:
        directory = self._find_directory(path)
        if directory is None:
            if self._find_file(path):
                raise InvalidPathError(path, f"Not a directory: {path}")
            raise PathNotFoundError(path, f"Directory not found: {path}")
        return directory

    def _ensure_directory(self, path: str) -> VirtualDirectory:
        directory = self._find_directory(path)
        if directory is None:
            if self._find_file(path):
                raise InvalidPathError(path, f"Not a directory: {path}")
            directory = self.create_directory(path)
        return directory

    def _detach(self, node: Node) -> None:
        parent = self._directories.get(node.parent_id) if node.parent_id else None
        if parent is not None:
            parent.children = [child for child in parent.children if child.id != node.id]

    # ------------------------------------------------------------------
    # FILES
    # ------------------------------------------------------------------

    def create_file(
        self,
        path: str,
        content: str = "",
        file_type: Optional[FileType] = None,
        metadata: Optional[FileMetadata] = None,
    ) -> VirtualFile:
        normalized = self.normalize_path(path)
        directory, filename = self.parse_path(normalized)
        if not filename:
            raise InvalidPathError(path, "A file name is required")

        if self._find_file(normalized):
            raise PathExistsError(normalized, f"File already exists: {normalized}")
        if self._find_directory(normalized):
            raise PathExistsError(normalized, f"A directory already exists at: {normalized}")

        parent = self._ensure_directory(directory)
        resolved_type = file_type or infer_file_type(filename)

        if metadata is None:
            metadata = FileMetadata(
                mime_type=MIME_TYPES.get(resolved_type, "text/plain"),
                language=LANGUAGES.get(resolved_type, "text"),
            )
        else:
            metadata = copy.deepcopy(metadata)

        file = VirtualFile(
            id=str(uuid.uuid4()),
            name=filename,
            path=normalized,
            content=content,
            type=resolved_type,
            size=content_size(content),
            parent_id=parent.id,
            metadata=metadata,
        )

        self._files[file.id] = file
        parent.children.append(file)

        self._record(FileSystemOperationType.CREATE_FILE, normalized, content=content)
        self._emit(FileSystemEvent(type=FileSystemEventType.FILE_CREATED, path=normalized, file=file))
        log("VFS", f"Created file {normalized} ({file.size} bytes)")
        return file

    def read_file(self, path: str) -> str:
        return self._require_file(path).content

    def get_file(self, path: str) -> Optional[VirtualFile]:
        return self._find_file(path)

    def update_file(self, path: str, content: str) -> VirtualFile:
        file = self._require_file(path)
        file.content = content
        file.size = content_size(content)
        file.last_modified = utcnow()

        self._record(FileSystemOperationType.UPDATE_FILE, file.path, content=content)
        self._emit(FileSystemEvent(type=FileSystemEventType.FILE_UPDATED, path=file.path, file=file))
        return file

    def delete_file(self, path: str) -> bool:
        file = self._find_file(path)
        if file is None:
            return False

        self._detach(file)
        del self._files[file.id]

        self._record(FileSystemOperationType.DELETE_FILE, file.path)
        self._emit(FileSystemEvent(type=FileSystemEventType.FILE_DELETED, path=file.path, file=file))
        return True

    def copy_file(self, source_path: str, target_path: str) -> VirtualFile:
        source = self._find_file(source_path)
        if source is None:
            raise PathNotFoundError(source_path, f"Source file not found: {source_path}")
        return self.create_file(target_path, source.content, source.type, source.metadata)

    # ------------------------------------------------------------------
    # DIRECTORIES
    # ------------------------------------------------------------------

    def create_directory(self, path: str) -> VirtualDirectory:
        normalized = self.normalize_path(path)

        if self._find_directory(normalized):
            raise PathExistsError(normalized, f"Directory already exists: {normalized}")
        if self._find_file(normalized):
            raise PathExistsError(normalized, f"A file already exists at: {normalized}")

        parent_path, name = self.parse_path(normalized)
        parent = self._ensure_directory(parent_path)

        directory = VirtualDirectory(
            id=str(uuid.uuid4()),
            name=name,
            path=normalized,
            parent_id=parent.id,
        )
        self._directories[directory.id] = directory
        parent.children.append(directory)

        self._record(FileSystemOperationType.CREATE_DIRECTORY, normalized)
        self._emit(FileSystemEvent(type=FileSystemEventType.DIRECTORY_CREATED, path=normalized, directory=directory))
        return directory

    def delete_directory(self, path: str, recursive: bool = False) -> bool:
        directory = self._find_directory(path)
        if directory is None:
            return False

        if directory.id == self.root_id:
            raise InvalidPathError("/", "Cannot delete root directory")

        if directory.children and not recursive:
            raise DirectoryNotEmptyError(
                directory.path,
                "Directory is not empty. Use recursive option to delete."
            )

        for child in list(directory.children):
            if child.is_directory:
                self.delete_directory(child.path, recursive=True)
            else:
                self.delete_file(child.path)

        self._detach(directory)
        del self._directories[directory.id]

        self._record(FileSystemOperationType.DELETE_DIRECTORY, directory.path)
        self._emit(FileSystemEvent(type=FileSystemEventType.DIRECTORY_DELETED, path=directory.path, directory=directory))
        return True

    def list_directory(self, path: str = "/") -> List[Node]:
        return list(self._require_directory(path).children)

    def get_file_tree(self, path: str = "/") -> VirtualDirectory:
        """Deep copy of the subtree rooted at ``path``."""
        return copy.deepcopy(self._require_directory(path))

    def exists(self, path: str) -> bool:
        return self._find_file(path) is not None or self._find_directory(path) is not None

    def is_directory(self, path: str) -> bool:
        return self._find_directory(path) is not None

    # ------------------------------------------------------------------
    # MOVE / RENAME
    # ------------------------------------------------------------------

    def move(self, source_path: str, target_path: str) -> bool:
        return self._relocate(source_path, target_path, rename=False)

    def rename(self, path: str, new_name: str) -> bool:
        if not new_name or "/" in new_name or "\\" in new_name:
            raise InvalidPathError(path, f"Invalid name: {new_name!r}")
        parent, _ = self.parse_path(path)
        return self._relocate(path, self.join_path(parent, new_name), rename=True)

    def _relocate(self, source_path: str, target_path: str, rename: bool) -> bool:
        source = self.normalize_path(source_path)
        target = self.normalize_path(target_path)

        file = self._find_file(source)
        directory = self._find_directory(source) if file is None else None
        if file is None and directory is None:
            raise PathNotFoundError(source, f"Source not found: {source}")

        if source == target:
            return True
        if self.exists(target):
            raise PathExistsError(target, f"Target already exists: {target}")

        if directory is not None:
            if directory.id == self.root_id:
                raise InvalidPathError(source, "Cannot move root directory")
            if target.startswith(source + "/"):
                raise InvalidPathError(target, f"Cannot move {source} into itself")

        target_parent, target_name = self.parse_path(target)
        new_parent = self._ensure_directory(target_parent)
        node: Node = file if file is not None else directory

        self._detach(node)
        node.path = target
        node.name = target_name
        node.parent_id = new_parent.id
        node.last_modified = utcnow()
        if directory is not None:
            self._rebase_children(directory, source, target)
        new_parent.children.append(node)

        if file is not None:
            op_type = FileSystemOperationType.RENAME_FILE if rename else FileSystemOperationType.MOVE_FILE
            event = FileSystemEvent(type=FileSystemEventType.FILE_MOVED, path=source, new_path=target, file=file)
        else:
            op_type = FileSystemOperationType.RENAME_DIRECTORY if rename else FileSystemOperationType.MOVE_DIRECTORY
            event = FileSystemEvent(type=FileSystemEventType.DIRECTORY_MOVED, path=source, new_path=target, directory=directory)

        self._record(op_type, source, new_path=target)
        self._emit(event)
        return True

    def _rebase_children(self, directory: VirtualDirectory, old_base: str, new_base: str) -> None:
        for child in directory.children:
            child.path = new_base + child.path[len(old_base):]
            child.last_modified = utcnow()
            if child.is_directory:
                self._rebase_children(child, old_base, new_base)

    # ------------------------------------------------------------------
    # SEARCH
    # ------------------------------------------------------------------

    def search_files(self, options: FileSearchOptions) -> List[FileSearchResult]:
        if not options.query:
            raise ValidationError("Search query must not be empty")

        flags = 0 if options.case_sensitive else re.IGNORECASE
        source = options.query if options.use_regex else re.escape(options.query)
        try:
            pattern = re.compile(source, flags)
        except re.error as e:
            raise ValidationError(f"Invalid search pattern: {e}", {"query": options.query})

        results: List[FileSearchResult] = []
        for file in self._files.values():
            if options.file_types and file.type not in options.file_types:
                continue

            matches: List[FileMatch] = []
            score = 0

            if pattern.search(file.name):
                score += 10
                matches.append(FileMatch(line=0, column=0, text=file.name, context=f"Filename: {file.name}"))

            if options.include_content and file.content:
                for line_number, line in enumerate(file.content.split("\n"), start=1):
                    for match in pattern.finditer(line):
                        if not match.group(0):
                            continue
                        score += 1
                        matches.append(FileMatch(
                            line=line_number,
                            column=match.start(),
                            text=match.group(0),
                            context=line.strip(),
                        ))

            if matches:
                results.append(FileSearchResult(file=file, matches=matches, score=score))

            if len(results) >= options.max_results:
                break

        return sorted(results, key=lambda result: result.score, reverse=True)

    # ------------------------------------------------------------------
    # BULK IMPORT / EXPORT
    # ------------------------------------------------------------------

    def to_file_map(self, root: str = "/") -> Dict[str, str]:
        """Files under ``root`` as {relative path: content}."""
        base = self.normalize_path(root)
        prefix = "/" if base == "/" else base + "/"
        return {
            f.path[len(prefix):]: f.content
            for f in sorted(self._files.values(), key=lambda f: f.path)
            if f.path.startswith(prefix)
        }

    def load_file_map(self, files: Dict[str, str], root: str = "/") -> List[VirtualFile]:
        """Create or overwrite files from a {relative path: content} map."""
        loaded: List[VirtualFile] = []
        for relative, content in sorted(files.items()):
            path = self.join_path(self.normalize_path(root), relative)
            if self._find_file(path):
                loaded.append(self.update_file(path, content))
            else:
                loaded.append(self.create_file(path, content))
        return loaded

    # ------------------------------------------------------------------
    # SNAPSHOTS
    # ------------------------------------------------------------------

    def create_snapshot(self, description: Optional[str] = None) -> FileSystemSnapshot:
        # One deepcopy call keeps file objects shared between both maps
        files, directories = copy.deepcopy((self._files, self._directories))
        snapshot = FileSystemSnapshot(
            id=str(uuid.uuid4()),
            files=files,
            directories=directories,
            root_id=self.root_id,
            description=description,
            metadata=SnapshotMetadata(
                total_files=len(files),
                total_directories=len(directories),
                total_size=sum(f.size for f in files.values()),
            ),
        )
        self._snapshots[snapshot.id] = snapshot
        return snapshot

    def restore_snapshot(self, snapshot_id: str) -> bool:
        snapshot = self._snapshots.get(snapshot_id)
        if snapshot is None:
            raise NotFoundError(f"Snapshot not found: {snapshot_id}")

        self._files, self._directories = copy.deepcopy((snapshot.files, snapshot.directories))
        self.root_id = snapshot.root_id
        log("VFS", f"Restored snapshot {snapshot_id} ({len(self._files)} files)")
        return True

    def list_snapshots(self) -> List[FileSystemSnapshot]:
        return list(self._snapshots.values())

    # ------------------------------------------------------------------
    # WATCHERS
    # ------------------------------------------------------------------

    def add_watcher(
        self,
        path: str,
        callback: WatcherCallback,
        events: Optional[Iterable[FileSystemEventType]] = None,
        recursive: bool = True,
    ) -> str:
        watcher = FileSystemWatcher(
            id=str(uuid.uuid4()),
            path=self.normalize_path(path),
            recursive=recursive,
            events=list(events) if events is not None else list(FileSystemEventType),
            callback=callback,
        )
        self._watchers[watcher.id] = watcher
        return watcher.id

    def remove_watcher(self, watcher_id: str) -> bool:
        return self._watchers.pop(watcher_id, None) is not None

    def _watches(self, watcher: FileSystemWatcher, path: str) -> bool:
        base = watcher.path
        if path == base:
            return True
        if watcher.recursive:
            return base == "/" or path.startswith(base + "/")
        return self.parse_path(path)[0] == base

    def _emit(self, event: FileSystemEvent) -> None:
        paths = [event.path] + ([event.new_path] if event.new_path else [])
        for watcher in list(self._watchers.values()):
            if event.type not in watcher.events:
                continue
            if not any(self._watches(watcher, path) for path in paths):
                continue
            try:
                watcher.callback(event)
            except Exception as e:
                log_error("VFS", f"Watcher {watcher.id[:8]} callback failed: {e}")

    # ------------------------------------------------------------------
    # HISTORY / STATS
    # ------------------------------------------------------------------

    def _record(self, op_type: FileSystemOperationType, path: str, content: Optional[str] = None,
                new_path: Optional[str] = None) -> None:
        self._operations.append(FileSystemOperation(type=op_type, path=path, content=content, new_path=new_path))
        if len(self._operations) > self.max_operation_history:
            self._operations = self._operations[-self.max_operation_history:]

    def get_operations(self) -> List[FileSystemOperation]:
        return list(self._operations)

    def get_stats(self) -> Dict[str, int]:
        return {
            "totalFiles": len(self._files),
            "totalDirectories": len(self._directories),
            "totalSize": sum(f.size for f in self._files.values()),
            "totalOperations": len(self._operations),
            "totalWatchers": len(self._watchers),
            "totalSnapshots": len(self._snapshots),
        }
