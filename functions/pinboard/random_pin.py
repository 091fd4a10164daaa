"""
Generates a pin from a random image of an external image source.
"""

from __future__ import annotations

import logging
import random
from typing import Optional, Protocol

import requests
from fastapi.concurrency import run_in_threadpool

from pinboard.gateway import PinGateway
from shared.constants import (
    DEFAULT_AUTHOR,
    DEFAULT_BOARD,
    RANDOM_PIN_SOURCE_URL,
    REQUEST_TIMEOUT_SECONDS,
)
from shared.types import ErrorKind, GatewayResult, Pin, PinSize

logger = logging.getLogger(__name__)

SIZE_DIMENSIONS = {
    PinSize.SMALL: (600, 400),
    PinSize.MEDIUM: (600, 800),
    PinSize.LARGE: (600, 1200),
}

RANDOM_TAGS = (
    "Nature",
    "Travel",
    "Architecture",
    "Food",
    "Animals",
    "Art",
    "Design",
    "City",
    "Mountains",
    "Ocean",
    "Vintage",
    "Minimal",
)


class PinGenerator(Protocol):
    async def generate(self) -> GatewayResult[Pin]:
        ...


class RandomPinGenerator:
    def __init__(
        self,
        gateway: PinGateway,
        source_url: str = RANDOM_PIN_SOURCE_URL,
        *,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
        author: str = DEFAULT_AUTHOR,
        board: str = DEFAULT_BOARD,
        session: Optional[requests.Session] = None,
        rng: Optional[random.Random] = None,
    ):
        self.gateway = gateway
        self.source_url = source_url
        self.timeout = timeout
        self.author = author
        self.board = board
        self.session = session or requests.Session()
        self.rng = rng or random.Random()

    def _fetch_image(self, url: str) -> tuple[bytes, str, str]:
        response = self.session.get(url, timeout=self.timeout, allow_redirects=True)
        response.raise_for_status()
        media_type = response.headers.get("Content-Type", "image/jpeg")
        return response.content, media_type, response.url or url

    def build_record(self, size: PinSize, image_url: str) -> dict:
        tags = self.rng.sample(RANDOM_TAGS, 2)
        return {
            "author": self.author,
            "board": self.board,
            "title": f"{tags[0]} & {tags[1]}",
            "description": f"A random {size.value} pin.",
            "destination": image_url,
            "pin_size": size.value,
            "tags": tags,
        }

    async def generate(self) -> GatewayResult[Pin]:
        size = self.rng.choice(list(PinSize))
        width, height = SIZE_DIMENSIONS[size]
        url = self.source_url.format(width=width, height=height)
        try:
            data, media_type, final_url = await run_in_threadpool(self._fetch_image, url)
        except requests.RequestException as exc:
            logger.exception("Fetching random image from %s failed", url)
            return GatewayResult.failure(ErrorKind.UPLOAD_FAILURE, str(exc))

        record = self.build_record(size, final_url)
        logger.info("Creating random %s pin from %s", size.value, final_url)
        return await self.gateway.create(record, data, media_type)
