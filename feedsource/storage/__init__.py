"""Storage backends a feed source resolves to (local, Azure blob, S3-compatible)."""

from __future__ import annotations

from typing import Protocol

from feedsource.storage.azure import BlobFileSystem
from feedsource.storage.base import join_key, join_uri
from feedsource.storage.local import LocalFileSystem
from feedsource.storage.s3 import ObjectStoreFileSystem


class FeedFileSystem(Protocol):
    root: str
    base_uri: str
    feed_sub_path: str | None

    def get_uri(self, key: str) -> str:  # public URL of key
        ...

    def put_bytes(self, key: str, data: bytes) -> str:  # returns uri
        ...

    def get_bytes(self, key: str) -> bytes:
        ...

    def exists(self, key: str) -> bool:
        ...

    def list_keys(self, prefix: str = "") -> list[str]:
        ...

    def delete(self, key: str) -> None:
        ...


__all__ = [
    "FeedFileSystem",
    "LocalFileSystem",
    "BlobFileSystem",
    "ObjectStoreFileSystem",
    "join_key",
    "join_uri",
]
