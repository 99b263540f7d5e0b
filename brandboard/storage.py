"""
Object storage for uploaded logos: local disk, S3-compatible, and in-memory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Protocol

import boto3
from botocore.config import Config


class StorageClient(Protocol):
    """Defines the operations the API needs from object storage."""

    def put_bytes(self, path: str, data: bytes, content_type: str) -> str:
        """Store *data* under *path* and return a stable reference to it."""
        ...


@dataclass
class InMemoryStorageClient:
    """Test double for storage interactions."""

    base_url: str = "/uploads"
    stored_objects: dict = field(default_factory=dict)

    def put_bytes(self, path: str, data: bytes, content_type: str) -> str:
        self.stored_objects[path] = data
        return f"{self.base_url}/{path}"


@dataclass
class LocalStorageClient:
    """Writes files under a directory that is served statically at *url_prefix*."""

    root_dir: str
    url_prefix: str = "/uploads"

    def _full_path(self, path: str) -> str:
        full = os.path.abspath(os.path.join(self.root_dir, path))
        if not full.startswith(os.path.abspath(self.root_dir) + os.sep):
            raise ValueError(f"path escapes storage root: {path}")
        return full

    def put_bytes(self, path: str, data: bytes, content_type: str) -> str:
        full = self._full_path(path)
        os.makedirs(os.path.dirname(full), exist_ok=True)
        with open(full, "wb") as f:
            f.write(data)
        return f"{self.url_prefix.rstrip('/')}/{path}"


@dataclass
class S3StorageClient:
    """
    S3-compatible storage client. Objects are referenced by their public URL.
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str

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

    def _object_url(self, path: str) -> str:
        if self.endpoint:
            scheme, _, host = self.endpoint.partition("://")
            return f"{scheme}://{self.bucket}.{host.rstrip('/')}/{path}"
        return f"https://{self.bucket}.s3.amazonaws.com/{path}"

    def put_bytes(self, path: str, data: bytes, content_type: str) -> str:
        self._client.put_object(
            Bucket=self.bucket,
            Key=path,
            Body=data,
            ContentType=content_type,
        )
        return self._object_url(path)
