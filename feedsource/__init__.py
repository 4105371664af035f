"""Resolve named feed sources into local, Azure blob or S3-compatible storage handles."""

from feedsource.credentials import CredentialResolver, CredentialStrategy, ResolvedCredentials
from feedsource.exceptions import ConfigError, CredentialError, FeedSourceError, SourceNotFoundError, StorageError
from feedsource.factory import build_backend, create_file_system
from feedsource.models import EncryptionMode, ResolvedPaths, SourceType
from feedsource.settings import LocalSettings
from feedsource.sources import find_source

__version__ = "0.1.0"

__all__ = [
    "ConfigError",
    "CredentialError",
    "CredentialResolver",
    "CredentialStrategy",
    "EncryptionMode",
    "FeedSourceError",
    "LocalSettings",
    "ResolvedCredentials",
    "ResolvedPaths",
    "SourceNotFoundError",
    "SourceType",
    "StorageError",
    "build_backend",
    "create_file_system",
    "find_source",
]
