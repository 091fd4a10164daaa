"""
Async gateway between board operations and the document / blob backends.

Backend clients are synchronous; their calls run in the thread pool so the
event loop stays free. No operation raises: failures are logged and come back
as a GatewayResult carrying the error kind.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi.concurrency import run_in_threadpool

from pinboard.db import DbClient
from pinboard.images import compress_image
from pinboard.storage import StorageClient
from shared.constants import MAX_IMAGE_SIZE_MB
from shared.types import (
    MUTABLE_PIN_FIELDS,
    ErrorKind,
    GatewayResult,
    Pin,
    PinSize,
)

logger = logging.getLogger(__name__)


class PinGateway:
    def __init__(
        self,
        db: DbClient,
        storage: StorageClient,
        *,
        max_image_size_mb: float = MAX_IMAGE_SIZE_MB,
    ):
        self.db = db
        self.storage = storage
        self.max_image_size_mb = max_image_size_mb

    async def fetch_all(self) -> GatewayResult[list[Pin]]:
        try:
            docs = await run_in_threadpool(self.db.list_pins)
        except Exception as exc:
            logger.exception("Fetching pins failed")
            return GatewayResult.failure(ErrorKind.FETCH_FAILURE, str(exc), value=[])
        pins = []
        for pin_id, data in docs:
            try:
                pins.append(Pin.from_document(pin_id, data))
            except Exception:
                logger.warning("Skipping unreadable pin document %s", pin_id, exc_info=True)
        return GatewayResult.success(pins)

    async def get(self, pin_id: str) -> GatewayResult[Pin]:
        try:
            data = await run_in_threadpool(self.db.get_pin, pin_id)
        except Exception as exc:
            logger.exception("Fetching pin %s failed", pin_id)
            return GatewayResult.failure(
                ErrorKind.FETCH_FAILURE, str(exc), pin_id=pin_id
            )
        if data is None:
            return GatewayResult.failure(
                ErrorKind.NOT_FOUND, f"Pin {pin_id} not found", pin_id=pin_id
            )
        try:
            pin = Pin.from_document(pin_id, data)
        except Exception as exc:
            logger.exception("Pin document %s is unreadable", pin_id)
            return GatewayResult.failure(
                ErrorKind.FETCH_FAILURE, str(exc), pin_id=pin_id
            )
        return GatewayResult.success(pin)

    async def create(
        self, record: dict, image: bytes, media_type: Optional[str] = None
    ) -> GatewayResult[Pin]:
        """
        Store a new pin in two phases: a stub document, then its image.

        The stub is inserted with an empty image URL. The image is compressed,
        uploaded under the pin id and its URL patched into the document. If
        any step after the insert fails the stub stays in place with an empty
        image URL; the result then carries both the stub pin and the error.
        """
        stub = Pin.from_document("", {**record, "img_url": ""})
        document = stub.as_document()
        try:
            pin_id = await run_in_threadpool(self.db.insert_pin, document)
        except Exception as exc:
            logger.exception("Error adding pin document")
            return GatewayResult.failure(ErrorKind.PERSISTENCE_ERROR, str(exc))
        stub.id = pin_id

        try:
            payload, content_type = await run_in_threadpool(
                compress_image, image, self.max_image_size_mb
            )
        except Exception as exc:
            logger.exception("[%s] Image compression failed", pin_id)
            return GatewayResult.failure(
                ErrorKind.UPLOAD_FAILURE, str(exc), pin_id=pin_id, value=stub
            )

        try:
            await run_in_threadpool(
                self.storage.upload_bytes, pin_id, payload, content_type or media_type
            )
            logger.info("Uploaded image for pin: %s", pin_id)
            url = await run_in_threadpool(self.storage.get_url, pin_id)
        except Exception as exc:
            logger.exception("[%s] Image upload failed", pin_id)
            return GatewayResult.failure(
                ErrorKind.UPLOAD_FAILURE, str(exc), pin_id=pin_id, value=stub
            )

        try:
            patched = await run_in_threadpool(
                self.db.patch_pin, pin_id, {"img_url": url}
            )
        except Exception as exc:
            logger.exception("[%s] Patching image URL failed", pin_id)
            return GatewayResult.failure(
                ErrorKind.PERSISTENCE_ERROR, str(exc), pin_id=pin_id, value=stub
            )
        if not patched:
            logger.warning("[%s] Pin vanished before its image URL was saved", pin_id)
            return GatewayResult.failure(
                ErrorKind.PERSISTENCE_ERROR,
                f"Pin {pin_id} not found while saving image URL",
                pin_id=pin_id,
                value=stub,
            )

        stub.img_url = url
        logger.info("Update of pin %s successful", pin_id)
        return GatewayResult.success(stub)

    async def remove(self, pin_id: str) -> GatewayResult[str]:
        """
        Delete the pin document, then its image.

        The document delete decides the outcome; a blob that cannot be
        removed is only logged and left orphaned.
        """
        try:
            deleted = await run_in_threadpool(self.db.delete_pin, pin_id)
        except Exception as exc:
            logger.exception("Error deleting pin document %s", pin_id)
            return GatewayResult.failure(
                ErrorKind.DELETE_FAILURE, str(exc), pin_id=pin_id
            )
        if not deleted:
            return GatewayResult.failure(
                ErrorKind.NOT_FOUND, f"Pin {pin_id} not found", pin_id=pin_id
            )

        try:
            await run_in_threadpool(self.storage.delete, pin_id)
            logger.info("Image for pin %s deleted", pin_id)
        except Exception:
            logger.warning("Could not delete image for pin %s", pin_id, exc_info=True)
        return GatewayResult.success(pin_id)

    async def update(self, pin_id: str, patch: dict) -> GatewayResult[Pin]:
        """Merge ``patch`` into the stored pin; only mutable fields are accepted."""
        unknown = sorted(set(patch) - MUTABLE_PIN_FIELDS)
        if unknown:
            return GatewayResult.failure(
                ErrorKind.PERSISTENCE_ERROR,
                f"Fields cannot be updated: {', '.join(unknown)}",
                pin_id=pin_id,
            )

        changes = dict(patch)
        if "pin_size" in changes:
            changes["pin_size"] = PinSize.parse(changes["pin_size"]).value
        if "tags" in changes:
            changes["tags"] = [str(t) for t in changes["tags"] or []]

        try:
            patched = await run_in_threadpool(self.db.patch_pin, pin_id, changes)
        except Exception as exc:
            logger.exception("Error updating pin %s", pin_id)
            return GatewayResult.failure(
                ErrorKind.PERSISTENCE_ERROR, str(exc), pin_id=pin_id
            )
        if not patched:
            return GatewayResult.failure(
                ErrorKind.NOT_FOUND, f"Pin {pin_id} not found", pin_id=pin_id
            )
        return await self.get(pin_id)
