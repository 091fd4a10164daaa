# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Generic, Optional, TypeVar

from shared.constants import DEFAULT_BOARD, DEFAULT_PIN_SIZE

T = TypeVar("T")


class PinSize(StrEnum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"

    @classmethod
    def parse(cls, value: Any) -> "PinSize":
        """Falls back to medium for empty or unknown values."""
        if not value:
            return cls(DEFAULT_PIN_SIZE)
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls(DEFAULT_PIN_SIZE)


class ErrorKind(StrEnum):
    FETCH_FAILURE = "FETCH_FAILURE"
    PERSISTENCE_ERROR = "PERSISTENCE_ERROR"
    UPLOAD_FAILURE = "UPLOAD_FAILURE"
    DELETE_FAILURE = "DELETE_FAILURE"
    NOT_FOUND = "NOT_FOUND"
    INVALID_IMAGE = "INVALID_IMAGE"


def _as_tag_list(raw: Any) -> list[str]:
    # Documents written by other clients may hold a single tag as a scalar.
    if raw is None or raw == "":
        return []
    if isinstance(raw, (list, tuple)):
        return [str(t) for t in raw]
    return [str(raw)]


# Fields a pin document may be patched with. The identifier is never one.
MUTABLE_PIN_FIELDS = frozenset(
    {"title", "description", "destination", "pin_size", "tags", "board", "img_url"}
)


@dataclass
class Pin:
    """A single image post with its metadata, as stored in the pins collection."""

    id: str
    author: str = ""
    board: str = DEFAULT_BOARD
    title: str = ""
    description: str = ""
    destination: str = ""
    img_url: str = ""
    pin_size: PinSize = PinSize.MEDIUM
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_document(cls, pin_id: str, data: dict[str, Any]) -> "Pin":
        return cls(
            id=pin_id,
            author=str(data.get("author") or ""),
            board=str(data.get("board") or DEFAULT_BOARD),
            title=str(data.get("title") or ""),
            description=str(data.get("description") or ""),
            destination=str(data.get("destination") or ""),
            img_url=str(data.get("img_url") or ""),
            pin_size=PinSize.parse(data.get("pin_size")),
            tags=_as_tag_list(data.get("tags")),
        )

    def as_document(self) -> dict[str, Any]:
        """Stored body of the pin; the identifier lives outside of it."""
        return {
            "author": self.author,
            "board": self.board,
            "title": self.title,
            "description": self.description,
            "destination": self.destination,
            "img_url": self.img_url,
            "pin_size": self.pin_size.value,
            "tags": list(self.tags),
        }

    def as_dict(self) -> dict[str, Any]:
        return {"id": self.id, **self.as_document()}


@dataclass
class GatewayError:
    kind: ErrorKind
    message: str
    pin_id: Optional[str] = None

    def as_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "message": self.message, "pin_id": self.pin_id}


@dataclass
class GatewayResult(Generic[T]):
    """
    Outcome of a backend operation.

    A result may carry both a value and an error: a pin whose document was
    inserted but whose image never made it to storage comes back as the stub
    pin together with an UPLOAD_FAILURE.
    """

    value: Optional[T] = None
    error: Optional[GatewayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "GatewayResult[T]":
        return cls(value=value)

    @classmethod
    def failure(
        cls,
        kind: ErrorKind,
        message: str,
        *,
        pin_id: Optional[str] = None,
        value: Optional[T] = None,
    ) -> "GatewayResult[T]":
        return cls(value=value, error=GatewayError(kind=kind, message=message, pin_id=pin_id))
