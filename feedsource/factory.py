"""Build a storage backend handle from a named feed source."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from azure.storage.blob import ContainerClient
from botocore.config import Config
from loguru import logger

from feedsource.credentials import CredentialResolver, ResolvedCredentials
from feedsource.exceptions import ConfigError
from feedsource.models import (
    AnySourceConfig,
    BlobAccountSourceConfig,
    BlobSasSourceConfig,
    LocalSourceConfig,
    ObjectStoreSourceConfig,
    SourceType,
)
from feedsource.settings import LocalSettings
from feedsource.sources import find_source
from feedsource.storage import BlobFileSystem, FeedFileSystem, LocalFileSystem, ObjectStoreFileSystem
from feedsource.uri import bucket_uri, container_uri_from_sas, remove_query, resolve_paths, service_bucket_uri

# Seconds, per S3 request
S3_CLIENT_TIMEOUT = 100


def _build_local(source: LocalSourceConfig, credentials: ResolvedCredentials | None) -> LocalFileSystem:
    paths = resolve_paths(source.absolute_path, source.base_uri)
    return LocalFileSystem(paths.absolute_path, paths.base_uri, source.feed_sub_path)


def _build_blob_sas(source: BlobSasSourceConfig, credentials: ResolvedCredentials | None) -> BlobFileSystem:
    try:
        container_client = ContainerClient.from_container_url(container_uri_from_sas(source.sas_url))
    except ValueError as exc:
        raise ConfigError(
            "Invalid sasUrl for azure account.",
            field="sasUrl",
            source_type=source.type.value,
        ) from exc

    paths = resolve_paths(remove_query(source.sas_url), source.base_uri)
    return BlobFileSystem(paths.absolute_path, paths.base_uri, container_client, source.feed_sub_path)


def _build_blob_account(source: BlobAccountSourceConfig, credentials: ResolvedCredentials | None) -> BlobFileSystem:
    try:
        container_client = ContainerClient.from_connection_string(
            source.connection_string,
            container_name=source.container,
        )
    except ValueError as exc:
        raise ConfigError(
            "Invalid connectionString for azure account.",
            field="connectionString",
            source_type=source.type.value,
        ) from exc

    paths = resolve_paths(source.path or container_client.url, source.base_uri)
    return BlobFileSystem(paths.absolute_path, paths.base_uri, container_client, source.feed_sub_path)


def _build_object_store(
    source: ObjectStoreSourceConfig,
    credentials: ResolvedCredentials | None,
) -> ObjectStoreFileSystem:
    if credentials is None:
        raise ConfigError(
            "Missing credentials for Amazon S3 account.",
            field="credentials",
            source_type=source.type.value,
        )

    config = Config(connect_timeout=S3_CLIENT_TIMEOUT, read_timeout=S3_CLIENT_TIMEOUT)
    client = credentials.client(
        "s3",
        region_name=source.region,
        endpoint_url=source.service_url,
        config=config,
    )

    if source.path:
        default_path = source.path
    elif source.region:
        default_path = bucket_uri(source.bucket_name, source.region)
    else:
        default_path = service_bucket_uri(source.service_url, source.bucket_name)

    paths = resolve_paths(default_path, source.base_uri)
    return ObjectStoreFileSystem(
        paths.absolute_path,
        paths.base_uri,
        client,
        source.bucket_name,
        encryption=source.encryption,
        feed_sub_path=source.feed_sub_path,
        compress=source.compress,
    )


_BUILDERS: dict[SourceType, Callable[[Any, ResolvedCredentials | None], FeedFileSystem]] = {
    SourceType.LOCAL: _build_local,
    SourceType.BLOB_SAS: _build_blob_sas,
    SourceType.BLOB_ACCOUNT: _build_blob_account,
    SourceType.OBJECT_STORE: _build_object_store,
}


def build_backend(source: AnySourceConfig, credentials: ResolvedCredentials | None = None) -> FeedFileSystem:
    """Construct the backend handle for an already validated source.

    Raises:
        ConfigError: If the source type has no builder or inputs are missing.
    """
    builder = _BUILDERS.get(source.type)
    if builder is None:
        raise ConfigError(f"Unsupported source type '{source.type}'.", field="type", source_type=str(source.type))
    backend = builder(source, credentials)
    logger.debug(
        "Resolved source '{name}' ({type}) to {root} with base URI {base}",
        name=source.name,
        type=source.type.value,
        root=backend.root,
        base=backend.base_uri,
    )
    return backend


def create_file_system(
    settings: LocalSettings,
    source_name: str,
    resolver: CredentialResolver | None = None,
) -> FeedFileSystem:
    """Find ``source_name`` in ``settings`` and return its live backend handle.

    Field validation happens before any credential lookup; credentials are
    only resolved for object-store sources.

    Raises:
        SourceNotFoundError: If no source has that name.
        ConfigError: For invalid entries or unusable credentials.
    """
    source = find_source(settings.sources, source_name, settings.path)
    credentials = None
    if source.type is SourceType.OBJECT_STORE:
        credentials = (resolver or CredentialResolver()).resolve(source)
    return build_backend(source, credentials)


__all__ = ["S3_CLIENT_TIMEOUT", "build_backend", "create_file_system"]
