"""Source lookup and validation.

A feed configuration carries an ordered ``sources`` list of flat mappings.
Keys are matched case-insensitively so hand-written configs with
inconsistent casing still load. Every type-specific rule is checked here,
before any credential or network work starts.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from loguru import logger
from pydantic import ValidationError

from feedsource.exceptions import ConfigError, SourceNotFoundError
from feedsource.models import (
    AnySourceConfig,
    BlobAccountSourceConfig,
    BlobSasSourceConfig,
    EncryptionMode,
    LocalSourceConfig,
    ObjectStoreSourceConfig,
    SourceType,
)
from feedsource.uri import resolve_absolute_path

# Connection string written by `sleet createconfig` before it is filled in
AZURE_EMPTY_CONNECTION_STRING = "DefaultEndpointsProtocol=https;AccountName=;AccountKey=;BlobEndpoint="


def get_value_case_insensitive(entry: Mapping[str, Any], key: str) -> str | None:
    wanted = key.lower()
    for candidate, value in entry.items():
        if isinstance(candidate, str) and candidate.lower() == wanted:
            if value is None:
                return None
            if isinstance(value, bool):
                return "true" if value else "false"
            return value if isinstance(value, str) else str(value)
    return None


def get_bool_case_insensitive(entry: Mapping[str, Any], key: str, default: bool) -> bool:
    wanted = key.lower()
    for candidate, value in entry.items():
        if not (isinstance(candidate, str) and candidate.lower() == wanted):
            continue
        if value is None:
            return default
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in {"true", "false"}:
            return value.strip().lower() == "true"
        raise ConfigError(f"Invalid value for '{key}', expected true or false.", field=key)
    return default


def _non_empty(value: str | None) -> str | None:
    return value if value else None


def find_source_entry(sources: Sequence[Any], name: str) -> Mapping[str, Any]:
    """Return the first raw entry whose name matches ``name`` case-insensitively.

    Raises:
        SourceNotFoundError: If no entry matches.
        ConfigError: If an entry is not a mapping.
    """
    wanted = name.lower()
    matches: list[Mapping[str, Any]] = []
    for index, entry in enumerate(sources):
        if not isinstance(entry, Mapping):
            raise ConfigError(
                f"Invalid config. Source entry {index} is not an object.",
                field="sources",
                details={"index": str(index)},
            )
        entry_name = get_value_case_insensitive(entry, "name")
        if entry_name is not None and entry_name.lower() == wanted:
            matches.append(entry)

    if not matches:
        raise SourceNotFoundError(name)
    if len(matches) > 1:
        logger.warning("Found {count} sources named '{name}', using the first one", count=len(matches), name=name)
    return matches[0]


def find_source(
    sources: Sequence[Any],
    name: str,
    config_path: Path | str | None = None,
) -> AnySourceConfig:
    """Locate the source named ``name`` and return it validated and typed."""
    return parse_source(find_source_entry(sources, name), config_path)


def parse_source(entry: Mapping[str, Any], config_path: Path | str | None = None) -> AnySourceConfig:
    """Validate a raw source entry and build its typed config.

    Raises:
        ConfigError: Naming the first missing or invalid field.
    """
    name = get_value_case_insensitive(entry, "name") or ""
    raw_type = get_value_case_insensitive(entry, "type")
    if not raw_type:
        raise ConfigError(f"Missing type for source '{name}'.", field="type")
    source_type = SourceType.parse(raw_type)
    if source_type is None:
        raise ConfigError(
            f"Unsupported type '{raw_type}' for source '{name}'.",
            field="type",
            source_type=raw_type,
        )

    common: dict[str, Any] = {
        "name": name,
        "type": source_type,
        "path": get_value_case_insensitive(entry, "path"),
        "base_uri": get_value_case_insensitive(entry, "baseURI"),
        "feed_sub_path": _non_empty(get_value_case_insensitive(entry, "feedSubPath")),
    }
    parser = _PARSERS[source_type]
    try:
        return parser(entry, common, config_path)
    except ValidationError as exc:
        error = exc.errors()[0]
        field = ".".join(str(part) for part in error.get("loc", ())) or None
        raise ConfigError(
            f"Invalid value for '{field}' in source '{name}': {error.get('msg')}",
            field=field,
            source_type=source_type.value,
        ) from exc


def _parse_local(entry: Mapping[str, Any], common: dict[str, Any], config_path: Path | str | None) -> LocalSourceConfig:
    absolute_path = resolve_absolute_path(config_path, common["path"], SourceType.LOCAL)
    if absolute_path is None:
        raise ConfigError("Missing path for local source.", field="path", source_type=SourceType.LOCAL.value)
    return LocalSourceConfig(absolute_path=absolute_path, **common)


def _parse_blob_sas(entry: Mapping[str, Any], common: dict[str, Any], config_path: Path | str | None) -> BlobSasSourceConfig:
    sas_url = get_value_case_insensitive(entry, "sasUrl")
    if not sas_url:
        raise ConfigError("Missing sasUrl for azure account.", field="sasUrl", source_type=SourceType.BLOB_SAS.value)
    parts = urlsplit(sas_url)
    # The first path segment names the container
    if not parts.scheme or not parts.netloc or not parts.path.strip("/"):
        raise ConfigError("Invalid sasUrl for azure account.", field="sasUrl", source_type=SourceType.BLOB_SAS.value)
    return BlobSasSourceConfig(sas_url=sas_url, **common)


def _parse_blob_account(
    entry: Mapping[str, Any],
    common: dict[str, Any],
    config_path: Path | str | None,
) -> BlobAccountSourceConfig:
    source_type = SourceType.BLOB_ACCOUNT.value
    connection_string = get_value_case_insensitive(entry, "connectionString")
    container = get_value_case_insensitive(entry, "container")

    if not connection_string:
        raise ConfigError("Missing connectionString for azure account.", field="connectionString", source_type=source_type)
    if connection_string.lower() == AZURE_EMPTY_CONNECTION_STRING.lower():
        raise ConfigError("Invalid connectionString for azure account.", field="connectionString", source_type=source_type)
    if not container:
        raise ConfigError("Missing container for azure account.", field="container", source_type=source_type)

    return BlobAccountSourceConfig(connection_string=connection_string, container=container, **common)


def _parse_object_store(
    entry: Mapping[str, Any],
    common: dict[str, Any],
    config_path: Path | str | None,
) -> ObjectStoreSourceConfig:
    source_type = SourceType.OBJECT_STORE.value
    bucket_name = get_value_case_insensitive(entry, "bucketName")
    region = _non_empty(get_value_case_insensitive(entry, "region"))
    service_url = _non_empty(get_value_case_insensitive(entry, "serviceURL"))
    raw_encryption = get_value_case_insensitive(entry, "serverSideEncryptionMethod") or EncryptionMode.NONE.value

    if not bucket_name:
        raise ConfigError("Missing bucketName for Amazon S3 account.", field="bucketName", source_type=source_type)
    if region is None and service_url is None:
        raise ConfigError(
            "Either 'region' or 'serviceURL' must be specified for an Amazon S3 account",
            field="region",
            source_type=source_type,
        )
    if region is not None and service_url is not None:
        raise ConfigError(
            "Options 'region' and 'serviceURL' cannot be used together",
            field="serviceURL",
            source_type=source_type,
        )

    try:
        encryption = EncryptionMode(raw_encryption.strip().lower())
    except ValueError as exc:
        raise ConfigError(
            "Only 'None' or 'AES256' are currently supported for serverSideEncryptionMethod",
            field="serverSideEncryptionMethod",
            source_type=source_type,
        ) from exc

    try:
        compress = get_bool_case_insensitive(entry, "compress", True)
    except ConfigError as exc:
        raise ConfigError(exc.message, field="compress", source_type=source_type) from exc

    return ObjectStoreSourceConfig(
        bucket_name=bucket_name,
        region=region,
        service_url=service_url,
        profile_name=get_value_case_insensitive(entry, "profileName"),
        access_key_id=get_value_case_insensitive(entry, "accessKeyId"),
        secret_access_key=get_value_case_insensitive(entry, "secretAccessKey"),
        encryption=encryption,
        compress=compress,
        **common,
    )


_PARSERS = {
    SourceType.LOCAL: _parse_local,
    SourceType.BLOB_SAS: _parse_blob_sas,
    SourceType.BLOB_ACCOUNT: _parse_blob_account,
    SourceType.OBJECT_STORE: _parse_object_store,
}


__all__ = [
    "AZURE_EMPTY_CONNECTION_STRING",
    "get_value_case_insensitive",
    "get_bool_case_insensitive",
    "find_source_entry",
    "find_source",
    "parse_source",
]
