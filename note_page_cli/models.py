from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

DEFAULT_NOTEBOOK_NAME = "default"
NOTEBOOK_ID_FIELD = "noteBookId"


class DecodeError(ValueError):
    """Raised when a stored field does not match the record's type."""


def _string_field(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise DecodeError(f"field {key!r} is {type(value).__name__}, expected string")
    return value


def _timestamp_field(data: Mapping[str, Any], key: str) -> Optional[datetime]:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, datetime):
        raise DecodeError(f"field {key!r} is {type(value).__name__}, expected timestamp")
    return value


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass
class Notebook:
    id: str
    name: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_default(self) -> bool:
        return self.name == DEFAULT_NOTEBOOK_NAME

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "Notebook":
        return cls(
            id=doc_id,
            name=_string_field(data, "name"),
            created_at=_timestamp_field(data, "createdAt"),
            updated_at=_timestamp_field(data, "updatedAt"),
        )

    def as_json(self) -> Dict[str, Any]:
        return {
            "id": self.id
            ,"name": self.name
            ,"createdAt": _isoformat(self.created_at)
            ,"updatedAt": _isoformat(self.updated_at)
        }


@dataclass
class Page:
    id: str
    content: str = ""
    name: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    notebook_id: Optional[str] = None

    @classmethod
    def from_document(cls, doc_id: str, data: Mapping[str, Any]) -> "Page":
        notebook_id = data.get(NOTEBOOK_ID_FIELD)
        if notebook_id is not None and not isinstance(notebook_id, str):
            raise DecodeError(
                f"field {NOTEBOOK_ID_FIELD!r} is {type(notebook_id).__name__}, expected string"
            )
        return cls(
            id=doc_id,
            content=_string_field(data, "content"),
            name=_string_field(data, "name"),
            created_at=_timestamp_field(data, "createdAt"),
            updated_at=_timestamp_field(data, "updatedAt"),
            notebook_id=notebook_id,
        )

    def as_json(self) -> Dict[str, Any]:
        return {
            "id": self.id
            ,"name": self.name
            ,"content": self.content
            ,NOTEBOOK_ID_FIELD: self.notebook_id
            ,"createdAt": _isoformat(self.created_at)
            ,"updatedAt": _isoformat(self.updated_at)
        }
