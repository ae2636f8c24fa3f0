# uigen/db/__init__.py
from uigen.db.store import FileRecord, ProjectRecord, ProjectStore

__all__ = ["FileRecord", "ProjectRecord", "ProjectStore"]
