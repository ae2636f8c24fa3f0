# uigen/models/project.py
"""
Request bodies for the project, file and chat routes.
"""
import re
from typing import List, Optional

from pydantic import Field, field_validator

from uigen.models.ai import AIGenerateOptions, AIMessage
from uigen.models.common import CamelModel


FORBIDDEN_FILE_NAME = re.compile(r'[/\\<>|:*?"]')


def _project_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Project name is required")
    if len(value) > 255:
        raise ValueError("Project name must be at most 255 characters")
    if "<" in value or ">" in value:
        raise ValueError("Project name must not contain < or >")
    return value


def _description(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def _file_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("File name is required")
    if FORBIDDEN_FILE_NAME.search(value):
        raise ValueError('File name must not contain / \\ < > | : * ? or "')
    if set(value) == {"."}:
        raise ValueError("File name must not consist only of dots")
    return value


def _content(value: str) -> str:
    if value == "":
        raise ValueError("File content must not be empty")
    return value


class ProjectCreate(CamelModel):
    name: str
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _project_name(value)

    @field_validator("description")
    @classmethod
    def check_description(cls, value: Optional[str]) -> Optional[str]:
        return _description(value)


class ProjectUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name")
    @classmethod
    def check_name(cls, value: Optional[str]) -> str:
        # Only runs when the field was sent
        if value is None:
            raise ValueError("Project name cannot be null")
        return _project_name(value)

    @field_validator("description")
    @classmethod
    def check_description(cls, value: Optional[str]) -> Optional[str]:
        return _description(value)


class ProjectFileCreate(CamelModel):
    name: str
    content: str

    @field_validator("name")
    @classmethod
    def check_name(cls, value: str) -> str:
        return _file_name(value)

    @field_validator("content")
    @classmethod
    def check_content(cls, value: str) -> str:
        return _content(value)


class FileCreate(ProjectFileCreate):
    project_id: str = Field(min_length=1)


class FileUpdate(CamelModel):
    content: str

    @field_validator("content")
    @classmethod
    def check_content(cls, value: str) -> str:
        return _content(value)


class ChatRequest(CamelModel):
    messages: List[AIMessage] = Field(min_length=1)
    provider: Optional[str] = None
    options: Optional[AIGenerateOptions] = None
    stream: bool = False
    project_id: Optional[str] = None
    use_tools: bool = False
