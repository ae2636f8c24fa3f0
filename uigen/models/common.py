# uigen/models/common.py
"""
Shared types used across the API, the AI layer and the file system.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


T = TypeVar("T")


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self, **kwargs) -> dict:
        return self.model_dump(mode="json", by_alias=True, **kwargs)


class FileType(str, Enum):
    VUE = "vue"
    TYPESCRIPT = "ts"
    JAVASCRIPT = "js"
    CSS = "css"
    HTML = "html"
    JSON = "json"
    MARKDOWN = "md"


class APIResponse(BaseModel, Generic[T]):
    """Standard envelope for AI and stub routes."""
    success: bool
    data: Optional[T] = None
    message: Optional[str] = None
    error: Optional[str] = None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat(moment: datetime) -> str:
    """ISO-8601 with millisecond precision and a Z suffix."""
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def ok(data: Any = None, message: Optional[str] = None) -> dict:
    return APIResponse(success=True, data=data, message=message).model_dump(exclude_none=False)
