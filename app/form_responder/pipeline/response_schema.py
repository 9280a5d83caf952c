"""Typed builders for the ``responseSchema`` the Gemini API accepts.

Only the subset of the OpenAPI schema object the service honours is modelled:
type, items, properties, enum, required and nullable.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class SchemaType(str, Enum):
    STRING = "STRING"
    NUMBER = "NUMBER"
    INTEGER = "INTEGER"
    BOOLEAN = "BOOLEAN"
    ARRAY = "ARRAY"
    OBJECT = "OBJECT"


@dataclass(frozen=True)
class ResponseSchema:
    type: SchemaType
    items: Optional["ResponseSchema"] = None
    properties: Dict[str, "ResponseSchema"] = field(default_factory=dict)
    enum: List[str] = field(default_factory=list)
    required: List[str] = field(default_factory=list)
    nullable: bool = False
    description: Optional[str] = None

    def __post_init__(self) -> None:
        if self.type == SchemaType.ARRAY and self.items is None:
            raise ValueError("ARRAY schema requires items")
        if self.type != SchemaType.ARRAY and self.items is not None:
            raise ValueError(f"{self.type.value} schema cannot declare items")
        if self.properties and self.type != SchemaType.OBJECT:
            raise ValueError(f"{self.type.value} schema cannot declare properties")
        if self.enum and self.type != SchemaType.STRING:
            raise ValueError("enum is only supported on STRING schemas")
        unknown = [name for name in self.required if name not in self.properties]
        if unknown:
            raise ValueError(f"required names unknown properties: {unknown}")

    def to_payload(self) -> Dict[str, object]:
        payload: Dict[str, object] = {"type": self.type.value}
        if self.description:
            payload["description"] = self.description
        if self.items is not None:
            payload["items"] = self.items.to_payload()
        if self.properties:
            payload["properties"] = {name: prop.to_payload() for name, prop in self.properties.items()}
        if self.enum:
            payload["format"] = "enum"
            payload["enum"] = list(self.enum)
        if self.required:
            payload["required"] = list(self.required)
        if self.nullable:
            payload["nullable"] = True
        return payload


def string_array() -> ResponseSchema:
    return ResponseSchema(type=SchemaType.ARRAY, items=ResponseSchema(type=SchemaType.STRING))


@dataclass(frozen=True)
class GenerationConfig:
    response_schema: ResponseSchema
    response_mime_type: str = "application/json"
    temperature: Optional[float] = None

    def to_payload(self) -> Dict[str, object]:
        payload: Dict[str, object] = {
            "responseMimeType": self.response_mime_type,
            "responseSchema": self.response_schema.to_payload(),
        }
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        return payload
