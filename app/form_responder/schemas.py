from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Answer = Union[str, int, float]


class InputType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"


class FieldDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    input_type: InputType
    values: Optional[List[str]] = None
    max_length: Optional[int] = None

    @field_validator("input_type", mode="before")
    @classmethod
    def _normalize_input_type(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("values")
    @classmethod
    def _values_only_for_select(cls, value, info):
        # Options are meaningful for select inputs only.
        if info.data.get("input_type") != InputType.SELECT:
            return None
        return value

    @field_validator("max_length")
    @classmethod
    def _positive_max_length(cls, value):
        if value is not None and value <= 0:
            return None
        return value


class ResponderRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    form: str
    context: str = ""
    file_uri: Optional[str] = Field(default=None, alias="fileUri")


class RemoteFileRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    uri: Optional[str] = None
    display_name: Optional[str] = Field(default=None, alias="displayName")
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    size_bytes: Optional[str] = Field(default=None, alias="sizeBytes")
    create_time: Optional[str] = Field(default=None, alias="createTime")
    update_time: Optional[str] = Field(default=None, alias="updateTime")
    expiration_time: Optional[str] = Field(default=None, alias="expirationTime")
    sha256_hash: Optional[str] = Field(default=None, alias="sha256Hash")
    state: Optional[str] = None

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class LocalFileInfo(BaseModel):
    filename: str
    path: Path
    mime_type: Optional[str] = None


class UploadedFileHandle(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str
    remote_uri: str = Field(alias="uri")
    local_filename: str = Field(alias="localFilename")
    mime_type: str = Field(alias="mimeType")

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


class DeleteAllSummary(BaseModel):
    deleted: List[str] = Field(default_factory=list)
    failed: List[str] = Field(default_factory=list)
