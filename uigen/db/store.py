# uigen/db/store.py
"""
Project & File Persistence
--------------------------
SQLite-backed storage for projects and the files that belong to them.

Each project owns a flat set of files, unique by name within the project.
Deleting a project deletes its files.
"""
import sqlite3
import uuid
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from uigen.core.exceptions import ConflictError, NotFoundError
from uigen.core.logging import log
from uigen.models.common import isoformat, utcnow


@dataclass
class FileRecord:
    id: str
    name: str
    content: str
    project_id: str
    created_at: str
    updated_at: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "content": self.content,
            "projectId": self.project_id,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass
class ProjectRecord:
    id: str
    name: str
    description: Optional[str]
    created_at: str
    updated_at: str
    files: List[FileRecord] = field(default_factory=list)

    def to_dict(self, include_files: bool = True) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }
        if include_files:
            data["files"] = [f.to_dict() for f in self.files]
        return data


def _timestamp(after: Optional[str] = None) -> str:
    """Current time, nudged forward so it sorts strictly after ``after``."""
    now = utcnow()
    if after:
        previous = datetime.fromisoformat(after.replace("Z", "+00:00"))
        if now <= previous:
            now = previous + timedelta(milliseconds=1)
    return isoformat(now)


class ProjectStore:
    """
    SQLite-based storage for projects and files.
    DB: data/uigen.db (DATABASE_PATH)
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            with conn:
                yield conn
        finally:
            conn.close()

    def _init_db(self):
        """Initialize the SQLite database."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS projects (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    description TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """)
            conn.execute("""
                CREATE TABLE IF NOT EXISTS files (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    content TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    project_id TEXT NOT NULL
                        REFERENCES projects(id) ON DELETE CASCADE ON UPDATE CASCADE,
                    UNIQUE (project_id, name)
                )
            """)
            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_files_project
                ON files(project_id)
            """)
        log("DB", f"🗄️ Project store ready at {self.db_path}")

    # ------------------------------------------------------------------
    # ROW MAPPING
    # ------------------------------------------------------------------

    @staticmethod
    def _file(row: sqlite3.Row) -> FileRecord:
        return FileRecord(
            id=row["id"],
            name=row["name"],
            content=row["content"],
            project_id=row["project_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _project(self, conn: sqlite3.Connection, row: sqlite3.Row) -> ProjectRecord:
        files = conn.execute(
            "SELECT * FROM files WHERE project_id = ? ORDER BY created_at, rowid",
            (row["id"],)
        ).fetchall()
        return ProjectRecord(
            id=row["id"],
            name=row["name"],
            description=row["description"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
            files=[self._file(f) for f in files],
        )

    # ------------------------------------------------------------------
    # PROJECTS
    # ------------------------------------------------------------------

    def create_project(self, name: str, description: Optional[str] = None) -> ProjectRecord:
        now = _timestamp()
        project = ProjectRecord(
            id=str(uuid.uuid4()),
            name=name,
            description=description,
            created_at=now,
            updated_at=now,
        )
        with self._connect() as conn:
            conn.execute(
                "INSERT INTO projects (id, name, description, created_at, updated_at) VALUES (?, ?, ?, ?, ?)",
                (project.id, project.name, project.description, project.created_at, project.updated_at)
            )
        log("DB", f"📁 Created project '{name}'", project_id=project.id)
        return project

    def list_projects(self) -> List[ProjectRecord]:
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM projects ORDER BY created_at, rowid").fetchall()
            return [self._project(conn, row) for row in rows]

    def get_project(self, project_id: str) -> Optional[ProjectRecord]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM projects WHERE id = ?", (project_id,)).fetchone()
            return self._project(conn, row) if row else None

    def require_project(self, project_id: str) -> ProjectRecord:
        project = self.get_project(project_id)
        if project is None:
            raise NotFoundError("Project not found", {"id": project_id})
        return project

    def update_project(self, project_id: str, **changes) -> ProjectRecord:
        """Apply name/description changes. Keys that are absent stay untouched."""
        project = self.require_project(project_id)
        if "name" in changes:
            project.name = changes["name"]
        if "description" in changes:
            project.description = changes["description"]
        project.updated_at = _timestamp(project.updated_at)

        with self._connect() as conn:
            conn.execute(
                "UPDATE projects SET name = ?, description = ?, updated_at = ? WHERE id = ?",
                (project.name, project.description, project.updated_at, project_id)
            )
        return project

    def delete_project(self, project_id: str) -> bool:
        with self._connect() as conn:
            deleted = conn.execute("DELETE FROM projects WHERE id = ?", (project_id,)).rowcount
        if deleted:
            log("DB", "🗑️ Deleted project", project_id=project_id)
        return bool(deleted)

    def _touch_project(self, conn: sqlite3.Connection, project_id: str) -> None:
        row = conn.execute("SELECT updated_at FROM projects WHERE id = ?", (project_id,)).fetchone()
        if row is None:
            return
        conn.execute(
            "UPDATE projects SET updated_at = ? WHERE id = ?",
            (_timestamp(row["updated_at"]), project_id)
        )

    # ------------------------------------------------------------------
    # FILES
    # ------------------------------------------------------------------

    def list_files(self, project_id: str) -> List[FileRecord]:
        self.require_project(project_id)
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM files WHERE project_id = ? ORDER BY created_at, rowid",
                (project_id,)
            ).fetchall()
            return [self._file(row) for row in rows]

    def get_file(self, file_id: str) -> Optional[FileRecord]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM files WHERE id = ?", (file_id,)).fetchone()
            return self._file(row) if row else None

    def create_file(self, project_id: str, name: str, content: str) -> FileRecord:
        self.require_project(project_id)
        now = _timestamp()
        record = FileRecord(
            id=str(uuid.uuid4()),
            name=name,
            content=content,
            project_id=project_id,
            created_at=now,
            updated_at=now,
        )
        try:
            with self._connect() as conn:
                conn.execute(
                    "INSERT INTO files (id, name, content, created_at, updated_at, project_id) VALUES (?, ?, ?, ?, ?, ?)",
                    (record.id, record.name, record.content, record.created_at, record.updated_at, project_id)
                )
                self._touch_project(conn, project_id)
        except sqlite3.IntegrityError as e:
            raise ConflictError(
                f"A file named '{name}' already exists in this project",
                {"name": name, "projectId": project_id}
            ) from e
        return record

    def update_file(self, file_id: str, content: str) -> FileRecord:
        record = self.get_file(file_id)
        if record is None:
            raise NotFoundError("File not found", {"id": file_id})

        record.content = content
        record.updated_at = _timestamp(record.updated_at)
        with self._connect() as conn:
            conn.execute(
                "UPDATE files SET content = ?, updated_at = ? WHERE id = ?",
                (content, record.updated_at, file_id)
            )
            self._touch_project(conn, record.project_id)
        return record

    def delete_file(self, file_id: str) -> bool:
        record = self.get_file(file_id)
        if record is None:
            return False
        with self._connect() as conn:
            conn.execute("DELETE FROM files WHERE id = ?", (file_id,))
            self._touch_project(conn, record.project_id)
        return True

    def replace_files(self, project_id: str, files: Dict[str, str]) -> Dict[str, List[str]]:
        """
        Make the project's files match a {name: content} map.
        Returns the names that were created, updated and deleted.
        """
        existing = {f.name: f for f in self.list_files(project_id)}
        changes: Dict[str, List[str]] = {"created": [], "updated": [], "deleted": []}
        now = _timestamp()

        with self._connect() as conn:
            for name, content in files.items():
                current = existing.get(name)
                if current is None:
                    conn.execute(
                        "INSERT INTO files (id, name, content, created_at, updated_at, project_id) VALUES (?, ?, ?, ?, ?, ?)",
                        (str(uuid.uuid4()), name, content, now, now, project_id)
                    )
                    changes["created"].append(name)
                elif current.content != content:
                    conn.execute(
                        "UPDATE files SET content = ?, updated_at = ? WHERE id = ?",
                        (content, _timestamp(current.updated_at), current.id)
                    )
                    changes["updated"].append(name)

            for name, current in existing.items():
                if name not in files:
                    conn.execute("DELETE FROM files WHERE id = ?", (current.id,))
                    changes["deleted"].append(name)

            if any(changes.values()):
                self._touch_project(conn, project_id)

        log("DB", f"💾 Synced files: +{len(changes['created'])} ~{len(changes['updated'])} -{len(changes['deleted'])}", project_id=project_id)
        return changes
