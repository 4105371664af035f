"""Path and URI helpers used while resolving a source.

Everything here is pure apart from reading the process working directory
when a relative config location has to be made absolute.
"""

from __future__ import annotations

import os
from pathlib import Path
from urllib.parse import unquote, urlsplit, urlunsplit

from feedsource.exceptions import ConfigError
from feedsource.models import ResolvedPaths, SourceType

US_EAST_1 = "us-east-1"


def ensure_trailing_slash(uri: str) -> str:
    if uri.endswith("/"):
        return uri
    return f"{uri}/"


def remove_query(uri: str) -> str:
    parts = urlsplit(uri)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def _local_path(raw_path: str) -> str:
    if raw_path.lower().startswith("file://"):
        parts = urlsplit(raw_path)
        # UNC style file://server/share URIs do not name a local directory
        if parts.netloc.lower() not in {"", "localhost"}:
            raise ConfigError(
                f"file URI must not name a remote host: {parts.netloc}",
                field="path",
                source_type=SourceType.LOCAL.value,
            )
        return unquote(parts.path)
    return os.path.expanduser(raw_path)


def resolve_absolute_path(
    config_path: Path | str | None,
    raw_path: str | None,
    source_type: SourceType,
) -> str | None:
    """Resolve the ``path`` of a source entry to an absolute location.

    Local paths are resolved against the directory holding the config file;
    an empty path means that directory itself. Remote paths are already
    absolute URIs and are returned untouched.

    Raises:
        ConfigError: If a relative local path is used without a config file.
    """
    if raw_path is None:
        return None
    if source_type is not SourceType.LOCAL:
        return raw_path

    local = _local_path(raw_path)
    if config_path is None:
        if not os.path.isabs(local):
            raise ConfigError(
                "relative path requires a known config location",
                field="path",
                source_type=source_type.value,
            )
        return os.path.normpath(local)

    settings_dir = os.path.dirname(os.path.abspath(os.fspath(config_path)))
    return os.path.normpath(os.path.join(settings_dir, local or "."))


def resolve_paths(absolute_path: str, base_uri: str | None = None) -> ResolvedPaths:
    """Normalize a root and its public base URI; the base defaults to the root."""
    root = ensure_trailing_slash(absolute_path)
    base = ensure_trailing_slash(base_uri) if base_uri else root
    return ResolvedPaths(absolute_path=root, base_uri=base)


def bucket_uri(bucket_name: str, region: str) -> str:
    """Default virtual-hosted style URL of a bucket in ``region``."""
    if region == US_EAST_1:
        return f"https://{bucket_name}.s3.amazonaws.com/"
    return f"https://{bucket_name}.s3.{region}.amazonaws.com/"


def service_bucket_uri(service_url: str, bucket_name: str) -> str:
    """Default path style URL of a bucket on a custom S3-compatible endpoint."""
    return ensure_trailing_slash(f"{ensure_trailing_slash(service_url)}{bucket_name}")


def container_uri_from_sas(sas_url: str) -> str:
    """Trim a blob SAS URL down to its container, keeping the SAS token."""
    parts = urlsplit(sas_url)
    segments = [segment for segment in parts.path.split("/") if segment]
    container_path = f"/{segments[0]}" if segments else ""
    return urlunsplit((parts.scheme, parts.netloc, container_path, parts.query, ""))


__all__ = [
    "ensure_trailing_slash",
    "remove_query",
    "resolve_absolute_path",
    "resolve_paths",
    "bucket_uri",
    "service_bucket_uri",
    "container_uri_from_sas",
]
