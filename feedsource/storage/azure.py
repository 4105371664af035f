from __future__ import annotations

from typing import Any

from azure.core.exceptions import AzureError, ResourceNotFoundError

from feedsource.exceptions import StorageError
from feedsource.storage.base import join_key, join_uri


class BlobFileSystem:
    """Azure blob container holding a feed, authenticated by SAS or account key."""

    def __init__(
        self,
        root: str,
        base_uri: str,
        container_client: Any,
        feed_sub_path: str | None = None,
    ) -> None:
        self.root = root
        self.base_uri = base_uri
        self.container_client = container_client
        self.feed_sub_path = feed_sub_path

    def _name(self, key: str) -> str:
        return join_key(self.feed_sub_path, key)

    def get_uri(self, key: str) -> str:
        return join_uri(self.base_uri, self.feed_sub_path, key)

    def put_bytes(self, key: str, data: bytes) -> str:
        name = self._name(key)
        try:
            blob = self.container_client.upload_blob(name, data, overwrite=True)
        except AzureError as exc:
            raise StorageError(f"Unable to upload blob {name}", {"blob": name}) from exc
        return blob.url

    def get_bytes(self, key: str) -> bytes:
        name = self._name(key)
        try:
            return self.container_client.download_blob(name).readall()
        except AzureError as exc:
            raise StorageError(f"Unable to download blob {name}", {"blob": name}) from exc

    def exists(self, key: str) -> bool:
        name = self._name(key)
        try:
            return self.container_client.get_blob_client(name).exists()
        except AzureError as exc:
            raise StorageError(f"Unable to check blob {name}", {"blob": name}) from exc

    def list_keys(self, prefix: str = "") -> list[str]:
        root_prefix = self._name("")
        try:
            blobs = self.container_client.list_blobs(name_starts_with=f"{root_prefix}{prefix}")
            return [blob.name[len(root_prefix):] for blob in blobs]
        except AzureError as exc:
            raise StorageError(f"Unable to list blobs under {root_prefix}", {"prefix": root_prefix}) from exc

    def delete(self, key: str) -> None:
        name = self._name(key)
        try:
            self.container_client.delete_blob(name)
        except ResourceNotFoundError:
            return
        except AzureError as exc:
            raise StorageError(f"Unable to delete blob {name}", {"blob": name}) from exc


__all__ = ["BlobFileSystem"]
