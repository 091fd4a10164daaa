"""
Pydantic schemas for the pin board API.
"""

from __future__ import annotations

from typing import Annotated, Literal, Optional

from pydantic import BaseModel, Field

from shared.constants import MAX_DESCRIPTION_LENGTH, MAX_TAG_LENGTH, MAX_TITLE_LENGTH
from shared.types import GatewayError, Pin


class PinOut(BaseModel):
    id: str
    author: str
    board: str
    title: str
    description: str
    destination: str
    img_url: str
    pin_size: Literal["small", "medium", "large"]
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_pin(cls, pin: Pin) -> "PinOut":
        return cls(**pin.as_dict())


class ErrorOut(BaseModel):
    kind: str
    message: str
    pin_id: Optional[str] = None

    @classmethod
    def from_error(cls, error: Optional[GatewayError]) -> Optional["ErrorOut"]:
        return cls(**error.as_dict()) if error else None


class ListPinsResponse(BaseModel):
    pins: list[PinOut]
    total: int
    query: str = ""


class CreatePinResponse(BaseModel):
    pin: PinOut
    error: Optional[ErrorOut] = None


class DeletePinResponse(BaseModel):
    id: str
    status: Literal["deleted"]


class PinUpdateRequest(BaseModel):
    """Fields to merge into a stored pin; omitted fields are left as they are."""

    title: Optional[str] = Field(default=None, max_length=MAX_TITLE_LENGTH)
    description: Optional[str] = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)
    destination: Optional[str] = None
    pin_size: Optional[Literal["small", "medium", "large"]] = None
    tags: Optional[list[Annotated[str, Field(max_length=MAX_TAG_LENGTH)]]] = None
    board: Optional[str] = None


class FilterRequest(BaseModel):
    query: str = ""


class ModalRequest(BaseModel):
    modal: Literal["create", "help", "none"]


class BoardStateResponse(BaseModel):
    status: str
    modal: str
    open_pin: Optional[PinOut] = None
    query: str
    pins: list[PinOut]
    total: int
    loading_list: bool
    generating: bool
    deleting: bool
    last_error: Optional[ErrorOut] = None
    guidelines: list[str] = Field(default_factory=list)


def parse_tags(raw: Optional[str]) -> list[str]:
    """
    Comma-separated form input into a tag list; order and duplicates kept.

    Raises:
        ValueError: If a tag is longer than MAX_TAG_LENGTH.
    """
    if not raw:
        return []
    tags = []
    for part in raw.split(","):
        tag = part.strip()
        if not tag:
            continue
        if len(tag) > MAX_TAG_LENGTH:
            raise ValueError(f"Tag longer than {MAX_TAG_LENGTH} characters: {tag[:16]}...")
        tags.append(tag)
    return tags
