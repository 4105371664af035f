"""Typed source entries and resolution results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SourceType(str, Enum):
    """Closed set of storage backends a source entry can describe."""
    LOCAL = "local"
    BLOB_SAS = "blob-sas"
    BLOB_ACCOUNT = "blob-account"
    OBJECT_STORE = "object-store"

    @classmethod
    def parse(cls, value: str) -> "SourceType | None":
        normalized = value.strip().lower()
        normalized = SOURCE_TYPE_ALIASES.get(normalized, normalized)
        for member in cls:
            if member.value == normalized:
                return member
        return None


# Type names used by existing sleet.json files
SOURCE_TYPE_ALIASES = {
    "azure-sas": SourceType.BLOB_SAS.value,
    "azure": SourceType.BLOB_ACCOUNT.value,
    "s3": SourceType.OBJECT_STORE.value,
}


class EncryptionMode(str, Enum):
    """Server side encryption applied to uploaded objects."""
    NONE = "none"
    AES256 = "aes256"

    @property
    def s3_value(self) -> str | None:
        """Value for the ``ServerSideEncryption`` request parameter."""
        return "AES256" if self is EncryptionMode.AES256 else None


@dataclass(frozen=True)
class ResolvedPaths:
    absolute_path: str
    base_uri: str


class SourceConfig(BaseModel):
    """Fields shared by every source entry."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    type: SourceType
    path: str | None = None
    base_uri: str | None = Field(default=None, alias="baseURI")
    feed_sub_path: str | None = Field(default=None, alias="feedSubPath")


class LocalSourceConfig(SourceConfig):
    # Resolved against the config file location during parsing
    absolute_path: str


class BlobSasSourceConfig(SourceConfig):
    sas_url: str = Field(alias="sasUrl")


class BlobAccountSourceConfig(SourceConfig):
    connection_string: str = Field(alias="connectionString", repr=False)
    container: str


class ObjectStoreSourceConfig(SourceConfig):
    bucket_name: str = Field(alias="bucketName")
    region: str | None = None
    service_url: str | None = Field(default=None, alias="serviceURL")
    profile_name: str | None = Field(default=None, alias="profileName")
    access_key_id: str | None = Field(default=None, alias="accessKeyId", repr=False)
    secret_access_key: str | None = Field(default=None, alias="secretAccessKey", repr=False)
    encryption: EncryptionMode = Field(default=EncryptionMode.NONE, alias="serverSideEncryptionMethod")
    compress: bool = True


AnySourceConfig = LocalSourceConfig | BlobSasSourceConfig | BlobAccountSourceConfig | ObjectStoreSourceConfig


__all__ = [
    "SourceType",
    "SOURCE_TYPE_ALIASES",
    "EncryptionMode",
    "ResolvedPaths",
    "SourceConfig",
    "LocalSourceConfig",
    "BlobSasSourceConfig",
    "BlobAccountSourceConfig",
    "ObjectStoreSourceConfig",
    "AnySourceConfig",
]
