"""
Blob storage abstraction for pin images: S3-compatible, Firebase Storage and in-memory.

Images are addressed by the identifier of the pin they belong to.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

import boto3
from botocore.config import Config
from firebase_admin import storage as firebase_storage

from pinboard.firebase import get_firebase_app


class StorageClient(Protocol):
    """Defines the operations the gateway needs from object storage."""

    def upload_bytes(self, key: str, data: bytes, content_type: str) -> None:
        ...

    def get_url(self, key: str) -> str:
        ...

    def delete(self, key: str) -> None:
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "https://example.test/storage"
    stored_objects: dict = field(default_factory=dict)
    content_types: dict = field(default_factory=dict)

    def upload_bytes(self, key: str, data: bytes, content_type: str) -> None:
        self.stored_objects[key] = bytes(data)
        self.content_types[key] = content_type

    def get_url(self, key: str) -> str:
        if key not in self.stored_objects:
            raise FileNotFoundError(key)
        return f"{self.base_url}/{key}"

    def delete(self, key: str) -> None:
        if self.stored_objects.pop(key, None) is None:
            raise FileNotFoundError(key)
        self.content_types.pop(key, None)

    def reset(self) -> None:
        self.stored_objects.clear()
        self.content_types.clear()


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client (AWS S3, Tencent COS, MinIO).

    With a public base URL the bucket is assumed to be publicly readable;
    otherwise image URLs are presigned GETs.
    """

    bucket: str
    region: str = ""
    endpoint: str = ""
    access_key_id: str = ""
    secret_access_key: str = ""
    public_base_url: Optional[str] = None
    url_expires_in: int = 7 * 24 * 3600

    def __post_init__(self):
        config = Config(
            s3={"addressing_style": "virtual"},
            signature_version="s3v4",
        )
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def upload_bytes(self, key: str, data: bytes, content_type: str) -> None:
        self._client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
        )

    def get_url(self, key: str) -> str:
        # Raises if the object is missing, so a URL is never handed out for nothing.
        self._client.head_object(Bucket=self.bucket, Key=key)
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{key}"
        return self._client.generate_presigned_url(
            ClientMethod="get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=self.url_expires_in,
        )

    def delete(self, key: str) -> None:
        self._client.delete_object(Bucket=self.bucket, Key=key)


class FirebaseStorageClient:
    """Firebase Storage (Google Cloud Storage) bucket of the Firebase app."""

    def __init__(
        self,
        bucket_name: Optional[str] = None,
        *,
        credentials_path: Optional[str] = None,
        project_id: Optional[str] = None,
        url_expires_in: int = 7 * 24 * 3600,
        bucket: Any = None,
    ):
        if bucket is None:
            app = get_firebase_app(credentials_path, project_id, bucket_name)
            bucket = firebase_storage.bucket(bucket_name, app=app)
        self._bucket = bucket
        self.url_expires_in = url_expires_in

    def upload_bytes(self, key: str, data: bytes, content_type: str) -> None:
        self._bucket.blob(key).upload_from_string(data, content_type=content_type)

    def get_url(self, key: str) -> str:
        blob = self._bucket.blob(key)
        if not blob.exists():
            raise FileNotFoundError(key)
        return blob.generate_signed_url(
            expiration=datetime.timedelta(seconds=self.url_expires_in),
            version="v4",
        )

    def delete(self, key: str) -> None:
        self._bucket.blob(key).delete()
