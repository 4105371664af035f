"""Custom exception hierarchy for feedsource."""

from __future__ import annotations


class FeedSourceError(Exception):
    """Base exception for all feedsource-specific errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigError(FeedSourceError):
    """Raised when a source entry is invalid, missing fields or contradictory.

    The offending field and backend type are kept both as attributes and in
    ``details`` so callers can report them without parsing the message.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        source_type: str | None = None,
        details: dict[str, str] | None = None,
    ) -> None:
        merged = dict(details or {})
        if field is not None:
            merged.setdefault("field", field)
        if source_type is not None:
            merged.setdefault("type", source_type)
        super().__init__(message, merged)
        self.field = field
        self.source_type = source_type


class CredentialError(ConfigError):
    """Raised when ambient object-store credentials fail identity verification."""

    def __init__(
        self,
        message: str,
        cause: BaseException,
        *,
        source_type: str | None = None,
    ) -> None:
        super().__init__(
            message,
            field="credentials",
            source_type=source_type,
            details={"cause": f"{type(cause).__name__}: {cause}"},
        )
        self.cause = cause
        self.__cause__ = cause


class SourceNotFoundError(ConfigError):
    """Raised when no source entry matches the requested name."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"Unable to find source '{name}' in the feed configuration.",
            field="name",
            details={"name": name},
        )
        self.name = name


class StorageError(FeedSourceError):
    """Raised when a backend read/write operation fails."""
    pass
