"""
HTTP routes for the pin board API.

``/pins`` is stateless CRUD over the gateway. ``/board`` drives the shared
BoardController, which keeps the fetched list, the search text and the open
modal between requests.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile

from pinboard.board import BoardController, HelpModal, filter_pins
from pinboard.composer import PinComposer
from pinboard.config import Settings, get_settings
from pinboard.db import DbClient
from pinboard.dependencies import (
    get_board,
    get_db_client,
    get_gateway,
    get_storage_client,
)
from pinboard.gateway import PinGateway
from pinboard.schemas import (
    BoardStateResponse,
    CreatePinResponse,
    DeletePinResponse,
    ErrorOut,
    FilterRequest,
    ListPinsResponse,
    ModalRequest,
    PinOut,
    PinUpdateRequest,
    parse_tags,
)
from pinboard.storage import StorageClient
from shared.constants import GUIDELINES, MAX_DESCRIPTION_LENGTH, MAX_TITLE_LENGTH
from shared.types import ErrorKind, GatewayError

logger = logging.getLogger(__name__)

router = APIRouter()

_ERROR_STATUS = {
    ErrorKind.FETCH_FAILURE: 502,
    ErrorKind.PERSISTENCE_ERROR: 502,
    ErrorKind.UPLOAD_FAILURE: 502,
    ErrorKind.DELETE_FAILURE: 502,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_IMAGE: 400,
}


def _raise_for(error: GatewayError) -> None:
    raise HTTPException(
        status_code=_ERROR_STATUS.get(error.kind, 500),
        detail=error.as_dict(),
    )


async def _compose(
    settings: Settings,
    file: UploadFile,
    title: str,
    description: str,
    destination: str,
    pin_size: str,
    tags: str,
    default_tags: bool,
) -> PinComposer:
    composer = PinComposer(
        author=settings.default_author,
        board=settings.default_board,
        tags=None if default_tags else [],
    )
    composer.update_field("title", title)
    composer.update_field("description", description)
    composer.update_field("destination", destination)
    composer.update_field("pin_size", pin_size)
    try:
        parsed = parse_tags(tags)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    for tag in parsed:
        composer.add_tag(tag)
    data = await file.read()
    composer.attach_image(data, file.content_type, file.filename)
    return composer


def _board_state(board: BoardController) -> BoardStateResponse:
    open_pin = board.open_pin
    return BoardStateResponse(
        status=board.status,
        modal=board.modal.name,
        open_pin=PinOut.from_pin(open_pin) if open_pin else None,
        query=board.query,
        pins=[PinOut.from_pin(p) for p in board.displayed],
        total=len(board.pins),
        loading_list=board.loading_list,
        generating=board.generating,
        deleting=board.deleting,
        last_error=ErrorOut.from_error(board.last_error),
        guidelines=list(GUIDELINES) if isinstance(board.modal, HelpModal) else [],
    )


# ---- pins ----


@router.get("/pins", response_model=ListPinsResponse)
async def list_pins(
    q: Optional[str] = Query(None, description="Case-insensitive tag search"),
    gateway: PinGateway = Depends(get_gateway),
):
    result = await gateway.fetch_all()
    if result.error is not None:
        _raise_for(result.error)
    pins = filter_pins(result.value or [], q or "")
    return ListPinsResponse(
        pins=[PinOut.from_pin(p) for p in pins], total=len(pins), query=q or ""
    )


@router.get("/pins/{pin_id}", response_model=PinOut)
async def get_pin(pin_id: str, gateway: PinGateway = Depends(get_gateway)):
    result = await gateway.get(pin_id)
    if result.error is not None:
        _raise_for(result.error)
    return PinOut.from_pin(result.value)


@router.post("/pins", response_model=CreatePinResponse, status_code=201)
async def create_pin(
    file: UploadFile = File(...),
    title: str = Form("", max_length=MAX_TITLE_LENGTH),
    description: str = Form("", max_length=MAX_DESCRIPTION_LENGTH),
    destination: str = Form(""),
    pin_size: str = Form("medium"),
    tags: str = Form(""),
    default_tags: bool = Form(True),
    gateway: PinGateway = Depends(get_gateway),
    settings: Settings = Depends(get_settings),
):
    """
    Create a pin from an uploaded image.

    A pin whose image could not be stored is still created; it comes back
    with an empty image URL and the error alongside it.
    """
    composer = await _compose(
        settings, file, title, description, destination, pin_size, tags, default_tags
    )
    if composer.image is None:
        raise HTTPException(
            status_code=400,
            detail={"kind": ErrorKind.INVALID_IMAGE.value, "message": "Image file required"},
        )
    result = await composer.submit(gateway)
    if result.value is None:
        _raise_for(result.error)
    return CreatePinResponse(
        pin=PinOut.from_pin(result.value), error=ErrorOut.from_error(result.error)
    )


@router.patch("/pins/{pin_id}", response_model=PinOut)
async def update_pin(
    pin_id: str,
    payload: PinUpdateRequest,
    gateway: PinGateway = Depends(get_gateway),
):
    result = await gateway.update(pin_id, payload.model_dump(exclude_none=True))
    if result.error is not None:
        _raise_for(result.error)
    return PinOut.from_pin(result.value)


@router.delete("/pins/{pin_id}", response_model=DeletePinResponse)
async def delete_pin(pin_id: str, gateway: PinGateway = Depends(get_gateway)):
    result = await gateway.remove(pin_id)
    if result.error is not None:
        _raise_for(result.error)
    return DeletePinResponse(id=pin_id, status="deleted")


# ---- board ----


@router.get("/board", response_model=BoardStateResponse)
async def board_state(board: BoardController = Depends(get_board)):
    return _board_state(board)


@router.post("/board/refresh", response_model=BoardStateResponse)
async def refresh_board(board: BoardController = Depends(get_board)):
    await board.refresh()
    return _board_state(board)


@router.post("/board/filter", response_model=BoardStateResponse)
async def filter_board(
    payload: FilterRequest, board: BoardController = Depends(get_board)
):
    board.filter(payload.query)
    return _board_state(board)


@router.post("/board/modal", response_model=BoardStateResponse)
async def set_modal(payload: ModalRequest, board: BoardController = Depends(get_board)):
    if payload.modal == "create":
        board.open_create()
    elif payload.modal == "help":
        board.open_help()
    else:
        board.close_modal()
    return _board_state(board)


@router.post("/board/pins/{pin_id}/open", response_model=BoardStateResponse)
async def open_pin(pin_id: str, board: BoardController = Depends(get_board)):
    pin = board.find(pin_id)
    if pin is None:
        raise HTTPException(status_code=404, detail="Pin not on the board")
    board.open_detail(pin)
    return _board_state(board)


@router.delete("/board/pins/{pin_id}", response_model=BoardStateResponse)
async def delete_board_pin(pin_id: str, board: BoardController = Depends(get_board)):
    pin = board.find(pin_id)
    if pin is None:
        raise HTTPException(status_code=404, detail="Pin not on the board")
    await board.delete(pin)
    return _board_state(board)


@router.post("/board/pins", response_model=BoardStateResponse)
async def submit_board_pin(
    file: UploadFile = File(...),
    title: str = Form("", max_length=MAX_TITLE_LENGTH),
    description: str = Form("", max_length=MAX_DESCRIPTION_LENGTH),
    destination: str = Form(""),
    pin_size: str = Form("medium"),
    tags: str = Form(""),
    default_tags: bool = Form(True),
    board: BoardController = Depends(get_board),
    settings: Settings = Depends(get_settings),
):
    composer = await _compose(
        settings, file, title, description, destination, pin_size, tags, default_tags
    )
    await board.submit(composer)
    return _board_state(board)


@router.post("/board/random", response_model=BoardStateResponse)
async def generate_random_pin(board: BoardController = Depends(get_board)):
    await board.generate_random()
    return _board_state(board)


@router.get("/healthz")
def healthz(
    db: DbClient = Depends(get_db_client),
    storage: StorageClient = Depends(get_storage_client),
) -> dict:
    return {
        "ok": True,
        "db": db.__class__.__name__,
        "storage": storage.__class__.__name__,
    }
