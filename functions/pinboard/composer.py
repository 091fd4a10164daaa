"""
Draft state for a new pin: form fields, tags and the attached image.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Iterable, Optional

from pinboard.gateway import PinGateway
from pinboard.images import (
    FIT_MAX_WIDTH,
    fit_mode,
    image_dimensions,
    is_image_media_type,
    to_data_url,
)
from shared.constants import (
    DEFAULT_AUTHOR,
    DEFAULT_BOARD,
    DEFAULT_COMPOSER_TAGS,
    DEFAULT_PIN_SIZE,
)
from shared.types import ErrorKind, GatewayResult, Pin, PinSize

logger = logging.getLogger(__name__)


@dataclass
class FormState:
    """Text inputs of the composer, updated on every keystroke."""

    title: str = ""
    description: str = ""
    destination: str = ""
    pin_size: str = DEFAULT_PIN_SIZE
    tag_input: str = ""


_FORM_FIELDS = frozenset(f.name for f in fields(FormState))


class PinComposer:
    def __init__(
        self,
        *,
        author: str = DEFAULT_AUTHOR,
        board: str = DEFAULT_BOARD,
        tags: Optional[Iterable[str]] = None,
    ):
        self.author = author
        self.board = board
        self.form = FormState()
        self.tags: list[str] = list(DEFAULT_COMPOSER_TAGS if tags is None else tags)

        self.image: Optional[bytes] = None
        self.media_type: Optional[str] = None
        self.filename: Optional[str] = None
        self.preview_url: str = ""
        self.image_size: Optional[tuple[int, int]] = None

        self.preview_visible = False
        self.upload_label_visible = True
        self.saving = False

    def update_field(self, name: str, value: str) -> None:
        if name not in _FORM_FIELDS:
            raise ValueError(f"Unknown form field: {name}")
        setattr(self.form, name, value)

    def add_tag(self, text: str) -> bool:
        tag = (text or "").strip()
        if not tag:
            return False
        self.tags = [*self.tags, tag]
        return True

    def submit_tag_input(self) -> bool:
        """Adds the typed tag (the Enter key) and clears the input."""
        added = self.add_tag(self.form.tag_input)
        if added:
            self.form.tag_input = ""
        return added

    def remove_tag(self, index: int) -> None:
        self.tags = [t for i, t in enumerate(self.tags) if i != index]

    def attach_image(
        self, data: bytes, media_type: Optional[str], filename: Optional[str] = None
    ) -> bool:
        """
        Stores an image for upload and shows its preview.

        Files that are not images are ignored and leave the draft unchanged.
        """
        if not data or not is_image_media_type(media_type):
            logger.info("Ignoring non-image upload %s (%s)", filename, media_type)
            return False
        self.image = data
        self.media_type = media_type
        self.filename = filename
        self.preview_url = to_data_url(data, media_type)
        try:
            self.image_size = image_dimensions(data)
        except OSError:
            logger.info("Could not measure %s; preview fits by width", filename)
            self.image_size = None
        self.upload_label_visible = False
        self.preview_visible = True
        return True

    def preview_fit(self, container_size: tuple[float, float]) -> str:
        """Fit mode of the preview inside a container of the given size."""
        if self.image_size is None:
            return FIT_MAX_WIDTH
        return fit_mode(self.image_size, container_size)

    def draft(self) -> dict:
        return {
            "author": self.author,
            "board": self.board,
            "title": self.form.title,
            "description": self.form.description,
            "destination": self.form.destination,
            "img_url": self.preview_url,
            "pin_size": PinSize.parse(self.form.pin_size).value,
            "tags": list(self.tags),
        }

    async def submit(
        self, gateway: PinGateway, form: Optional[FormState] = None
    ) -> GatewayResult[Pin]:
        if form is not None:
            self.form = form
        if self.image is None:
            return GatewayResult.failure(
                ErrorKind.INVALID_IMAGE, "An image is required to save a pin"
            )

        # The data URL is only a preview; the stored URL comes from the upload.
        record = {**self.draft(), "img_url": ""}
        self.saving = True
        try:
            return await gateway.create(record, self.image, self.media_type)
        finally:
            self.saving = False
