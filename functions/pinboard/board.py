"""
Board view state: the fetched pins, the displayed subset and the open modal.

Mutations (delete, random generation, submitting a new pin, refresh) each run
their request chain and the follow-up re-fetch under one lock, so the list
that settles last always reflects the most recent mutation.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Optional, Union

from pinboard.composer import PinComposer
from pinboard.gateway import PinGateway
from pinboard.random_pin import PinGenerator
from shared.types import ErrorKind, GatewayError, GatewayResult, Pin

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NoModal:
    name: str = "none"


@dataclass(frozen=True)
class CreateModal:
    name: str = "create"


@dataclass(frozen=True)
class HelpModal:
    name: str = "help"


@dataclass(frozen=True)
class DetailModal:
    pin: Pin
    name: str = "detail"


Modal = Union[NoModal, CreateModal, HelpModal, DetailModal]


def _serialized_tags(pin: Pin) -> str:
    # Compact separators, matching what a browser's JSON.stringify produces.
    return json.dumps(pin.tags, separators=(",", ":"), ensure_ascii=False)


def filter_pins(pins: list[Pin], query: str) -> list[Pin]:
    """Pins whose serialized tag list contains ``query``, ignoring case."""
    needle = (query or "").lower()
    return [pin for pin in pins if needle in _serialized_tags(pin).lower()]


class BoardController:
    def __init__(self, gateway: PinGateway, generator: Optional[PinGenerator] = None):
        self.gateway = gateway
        self.generator = generator

        self.pins: list[Pin] = []
        self.displayed: list[Pin] = []
        self.query = ""
        self.modal: Modal = NoModal()

        self.loading_list = False
        self.generating = False
        self.deleting = False
        self.last_error: Optional[GatewayError] = None

        self._mutation_lock = asyncio.Lock()

    @property
    def status(self) -> str:
        if self.loading_list:
            return "loading-list"
        if self.generating:
            return "generating-random"
        if isinstance(self.modal, CreateModal):
            return "modal-create-open"
        if isinstance(self.modal, DetailModal):
            return "modal-detail-open"
        if isinstance(self.modal, HelpModal):
            return "modal-help-open"
        return "idle"

    @property
    def open_pin(self) -> Optional[Pin]:
        return self.modal.pin if isinstance(self.modal, DetailModal) else None

    def find(self, pin_id: str) -> Optional[Pin]:
        for pin in self.pins:
            if pin.id == pin_id:
                return pin
        return None

    def _record(self, result: GatewayResult) -> None:
        if result.error is not None:
            self.last_error = result.error

    # ---- modals ----

    def open_create(self) -> None:
        self.modal = CreateModal()

    def open_help(self) -> None:
        self.modal = HelpModal()

    def open_detail(self, pin: Pin) -> None:
        self.modal = DetailModal(pin=pin)

    def close_modal(self) -> None:
        self.modal = NoModal()

    # ---- list ----

    def filter(self, query: str) -> list[Pin]:
        self.query = query or ""
        self.displayed = filter_pins(self.pins, self.query)
        return self.displayed

    async def _reload(self) -> GatewayResult[list[Pin]]:
        self.loading_list = True
        try:
            result = await self.gateway.fetch_all()
        finally:
            self.loading_list = False
        if not result.ok:
            logger.warning("Keeping %d pins after failed refresh", len(self.pins))
            self._record(result)
            return result
        self.pins = list(result.value or [])
        # A refresh always shows the full board again.
        self.displayed = list(self.pins)
        self.query = ""
        return result

    async def load_all(self) -> GatewayResult[list[Pin]]:
        async with self._mutation_lock:
            self.last_error = None
            return await self._reload()

    async def refresh(self) -> GatewayResult[list[Pin]]:
        async with self._mutation_lock:
            self.last_error = None
            if isinstance(self.modal, CreateModal):
                self.close_modal()
            return await self._reload()

    # ---- mutations ----

    async def delete(self, pin: Pin) -> GatewayResult[str]:
        async with self._mutation_lock:
            self.last_error = None
            self.deleting = True
            try:
                result = await self.gateway.remove(pin.id)
                self._record(result)
                await self._reload()
            finally:
                self.deleting = False
            if isinstance(self.modal, DetailModal):
                self.close_modal()
            return result

    async def submit(self, composer: PinComposer) -> GatewayResult[Pin]:
        async with self._mutation_lock:
            self.last_error = None
            result = await composer.submit(self.gateway)
            self._record(result)
            # Nothing was written without a value; the draft stays open.
            if result.value is not None and isinstance(self.modal, CreateModal):
                self.close_modal()
            await self._reload()
            return result

    async def generate_random(self) -> GatewayResult[Pin]:
        if self.generator is None:
            result = GatewayResult.failure(
                ErrorKind.UPLOAD_FAILURE, "No random pin generator configured"
            )
            self._record(result)
            return result

        async with self._mutation_lock:
            self.last_error = None
            self.generating = True
            try:
                try:
                    result = await self.generator.generate()
                except Exception as exc:
                    logger.exception("Random pin generator failed")
                    result = GatewayResult.failure(ErrorKind.UPLOAD_FAILURE, str(exc))
                self._record(result)
                await self._reload()
            finally:
                self.generating = False
            return result
