from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    REMOTE_UNAVAILABLE = "remote_unavailable"
    INVALID_RESPONSE = "invalid_response"
    AMBIGUOUS = "ambiguous"


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str
    details: Dict[str, object] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return False

    def payload(self) -> Dict[str, object]:
        body: Dict[str, object] = {"message": self.message, "kind": self.kind.value}
        body.update(self.details)
        return body


Result = Union[Ok[T], Err]


# Status codes for adapter errors surfaced by the file endpoints.
HTTP_STATUS_BY_KIND: Dict[ErrorKind, int] = {
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.REMOTE_UNAVAILABLE: 503,
    ErrorKind.INVALID_RESPONSE: 502,
    ErrorKind.AMBIGUOUS: 409,
}
