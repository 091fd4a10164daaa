"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from pinboard.board import BoardController
from pinboard.config import get_settings
from pinboard.db import DbClient, FirestoreDbClient, InMemoryDbClient, PostgresDbClient
from pinboard.gateway import PinGateway
from pinboard.random_pin import RandomPinGenerator
from pinboard.storage import (
    FirebaseStorageClient,
    InMemoryStorageClient,
    S3StorageClient,
    StorageClient,
)

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None
_storage_client: StorageClient | None = None
_gateway: PinGateway | None = None
_board: BoardController | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so pins persist across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _db_client = InMemoryDbClient()
    elif settings.firebase_enabled:
        _db_client = FirestoreDbClient(
            settings.pins_collection,
            credentials_path=settings.firebase_credentials_path,
            project_id=settings.firebase_project_id,
        )
    elif settings.database_url:
        _db_client = PostgresDbClient(settings.database_url)
    else:
        _db_client = InMemoryDbClient()
    logger.info("Document store: %s", _db_client.__class__.__name__)
    return _db_client


def get_storage_client() -> StorageClient:
    global _storage_client
    if _storage_client:
        return _storage_client

    settings = get_settings()
    if settings.use_in_memory_backends:
        _storage_client = InMemoryStorageClient()
    elif settings.s3_bucket:
        _storage_client = S3StorageClient(
            bucket=settings.s3_bucket,
            region=settings.s3_region or "",
            endpoint=settings.s3_endpoint or "",
            access_key_id=settings.aws_access_key_id or "",
            secret_access_key=settings.aws_secret_access_key or "",
            public_base_url=settings.s3_public_base_url,
        )
    elif settings.firebase_enabled and settings.firebase_storage_bucket:
        _storage_client = FirebaseStorageClient(
            settings.firebase_storage_bucket,
            credentials_path=settings.firebase_credentials_path,
            project_id=settings.firebase_project_id,
        )
    else:
        if settings.firebase_enabled:
            logger.warning(
                "FIREBASE_STORAGE_BUCKET is not set; images are kept in memory"
            )
        _storage_client = InMemoryStorageClient()
    logger.info("Blob store: %s", _storage_client.__class__.__name__)
    return _storage_client


def get_gateway() -> PinGateway:
    global _gateway
    if _gateway:
        return _gateway

    settings = get_settings()
    _gateway = PinGateway(
        get_db_client(),
        get_storage_client(),
        max_image_size_mb=settings.max_image_size_mb,
    )
    return _gateway


def get_board() -> BoardController:
    """
    Return the singleton board so view state survives between requests.
    """
    global _board
    if _board:
        return _board

    settings = get_settings()
    gateway = get_gateway()
    generator = RandomPinGenerator(
        gateway,
        settings.random_pin_source_url,
        timeout=settings.request_timeout_seconds,
        author=settings.default_author,
        board=settings.default_board,
    )
    _board = BoardController(gateway, generator)
    return _board


def reset_dependencies() -> None:
    """Drop all singletons (useful in tests)."""
    global _db_client, _storage_client, _gateway, _board
    _db_client = None
    _storage_client = None
    _gateway = None
    _board = None
