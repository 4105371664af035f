"""Tests for custom exception hierarchy."""

from feedsource.exceptions import (
    ConfigError,
    CredentialError,
    FeedSourceError,
    SourceNotFoundError,
    StorageError,
)


def test_feed_source_error_base():
    """Test base FeedSourceError."""
    error = FeedSourceError("Test error", {"key": "value"})
    assert str(error) == "Test error"
    assert error.message == "Test error"
    assert error.details == {"key": "value"}


def test_config_error_carries_field_and_type():
    error = ConfigError("Missing bucketName", field="bucketName", source_type="object-store")
    assert isinstance(error, FeedSourceError)
    assert error.field == "bucketName"
    assert error.source_type == "object-store"
    assert error.details == {"field": "bucketName", "type": "object-store"}


def test_credential_error_wraps_cause():
    cause = TimeoutError("read timed out")
    error = CredentialError("identity check failed", cause, source_type="object-store")
    assert isinstance(error, ConfigError)
    assert error.cause is cause
    assert error.__cause__ is cause
    assert error.details["cause"] == "TimeoutError: read timed out"
    assert error.field == "credentials"


def test_source_not_found_error():
    error = SourceNotFoundError("feed")
    assert isinstance(error, ConfigError)
    assert error.name == "feed"
    assert "feed" in str(error)


def test_exception_inheritance():
    """Test exception inheritance hierarchy."""
    assert issubclass(ConfigError, FeedSourceError)
    assert issubclass(CredentialError, ConfigError)
    assert issubclass(SourceNotFoundError, ConfigError)
    assert issubclass(StorageError, FeedSourceError)
    assert not issubclass(StorageError, ConfigError)
