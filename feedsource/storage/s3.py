from __future__ import annotations

import gzip
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from feedsource.exceptions import StorageError
from feedsource.models import EncryptionMode
from feedsource.storage.base import join_key, join_uri

# Feed index files are served gzip encoded when compression is on
COMPRESSED_SUFFIXES = (".json",)


class ObjectStoreFileSystem:
    """S3-compatible bucket holding a feed.

    The boto3 client is owned by this handle. boto3 clients are thread-safe,
    the session that created them is not.
    """

    def __init__(
        self,
        root: str,
        base_uri: str,
        client: Any,
        bucket: str,
        encryption: EncryptionMode = EncryptionMode.NONE,
        feed_sub_path: str | None = None,
        compress: bool = True,
    ) -> None:
        self.root = root
        self.base_uri = base_uri
        self.client = client
        self.bucket = bucket
        self.encryption = encryption
        self.feed_sub_path = feed_sub_path
        self.compress = compress

    def _key(self, key: str) -> str:
        return join_key(self.feed_sub_path, key)

    def get_uri(self, key: str) -> str:
        return join_uri(self.base_uri, self.feed_sub_path, key)

    def put_bytes(self, key: str, data: bytes) -> str:
        s3_key = self._key(key)
        params: dict[str, Any] = {"Bucket": self.bucket, "Key": s3_key, "Body": data}
        if self.compress and s3_key.endswith(COMPRESSED_SUFFIXES):
            params["Body"] = gzip.compress(data)
            params["ContentEncoding"] = "gzip"
        if self.encryption.s3_value:
            params["ServerSideEncryption"] = self.encryption.s3_value
        try:
            self.client.put_object(**params)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Unable to upload s3://{self.bucket}/{s3_key}", {"key": s3_key}) from exc
        return f"s3://{self.bucket}/{s3_key}"

    def get_bytes(self, key: str) -> bytes:
        s3_key = self._key(key)
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=s3_key)
            data = response["Body"].read()
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Unable to download s3://{self.bucket}/{s3_key}", {"key": s3_key}) from exc
        if response.get("ContentEncoding") == "gzip":
            return gzip.decompress(data)
        return data

    def exists(self, key: str) -> bool:
        s3_key = self._key(key)
        try:
            self.client.head_object(Bucket=self.bucket, Key=s3_key)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in {"404", "NoSuchKey", "NotFound"}:
                return False
            raise StorageError(f"Unable to check s3://{self.bucket}/{s3_key}", {"key": s3_key}) from exc
        return True

    def list_keys(self, prefix: str = "") -> list[str]:
        root_prefix = self._key("")
        paginator = self.client.get_paginator("list_objects_v2")
        keys: list[str] = []
        try:
            for page in paginator.paginate(Bucket=self.bucket, Prefix=f"{root_prefix}{prefix}"):
                keys.extend(item["Key"][len(root_prefix):] for item in page.get("Contents", []))
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Unable to list s3://{self.bucket}/{root_prefix}", {"prefix": root_prefix}) from exc
        return keys

    def delete(self, key: str) -> None:
        s3_key = self._key(key)
        try:
            self.client.delete_object(Bucket=self.bucket, Key=s3_key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"Unable to delete s3://{self.bucket}/{s3_key}", {"key": s3_key}) from exc


__all__ = ["ObjectStoreFileSystem"]
