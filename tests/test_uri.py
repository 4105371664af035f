import os

import pytest

from feedsource.exceptions import ConfigError
from feedsource.models import SourceType
from feedsource.uri import (
    bucket_uri,
    container_uri_from_sas,
    ensure_trailing_slash,
    remove_query,
    resolve_absolute_path,
    resolve_paths,
    service_bucket_uri,
)


@pytest.mark.parametrize(
    "uri",
    ["/cfg", "/cfg/", "https://b.s3.amazonaws.com", "https://account.blob.core.windows.net/feed/"],
)
def test_ensure_trailing_slash_is_idempotent(uri):
    once = ensure_trailing_slash(uri)
    assert once.endswith("/")
    assert ensure_trailing_slash(once) == once


def test_empty_local_path_is_config_directory():
    assert resolve_absolute_path("/cfg/sleet.json", "", SourceType.LOCAL) == "/cfg"


def test_relative_local_path_resolves_against_config_directory():
    assert resolve_absolute_path("/cfg/sleet.json", "../feed", SourceType.LOCAL) == "/feed"
    assert resolve_absolute_path("/cfg/sleet.json", "out/feed", SourceType.LOCAL) == "/cfg/out/feed"


def test_relative_config_path_uses_working_directory(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    assert resolve_absolute_path("sleet.json", "feed", SourceType.LOCAL) == os.path.join(str(tmp_path), "feed")


def test_absolute_local_path_without_config():
    assert resolve_absolute_path(None, "/srv/feed", SourceType.LOCAL) == "/srv/feed"


def test_file_uri_is_accepted_for_local():
    assert resolve_absolute_path(None, "file:///srv/my%20feed", SourceType.LOCAL) == "/srv/my feed"
    assert resolve_absolute_path("/cfg/sleet.json", "file://localhost/srv/feed", SourceType.LOCAL) == "/srv/feed"


@pytest.mark.parametrize("raw_path", ["file://server/share/feed", "FILE://nas.local/feed"])
def test_file_uri_with_remote_host_is_rejected(raw_path):
    with pytest.raises(ConfigError) as excinfo:
        resolve_absolute_path("/cfg/sleet.json", raw_path, SourceType.LOCAL)
    assert excinfo.value.field == "path"
    assert excinfo.value.source_type == "local"


@pytest.mark.parametrize("raw_path", ["", "feed", "./feed"])
def test_relative_local_path_without_config_fails(raw_path):
    with pytest.raises(ConfigError) as excinfo:
        resolve_absolute_path(None, raw_path, SourceType.LOCAL)
    assert excinfo.value.field == "path"
    assert excinfo.value.source_type == "local"


def test_remote_path_is_verbatim():
    raw = "https://b.s3.amazonaws.com/feed"
    assert resolve_absolute_path(None, raw, SourceType.OBJECT_STORE) == raw
    assert resolve_absolute_path("/cfg/sleet.json", "relative", SourceType.BLOB_ACCOUNT) == "relative"


def test_missing_path_is_none():
    assert resolve_absolute_path("/cfg/sleet.json", None, SourceType.LOCAL) is None


def test_base_uri_defaults_to_path():
    paths = resolve_paths("/cfg")
    assert paths.absolute_path == "/cfg/"
    assert paths.base_uri == "/cfg/"

    paths = resolve_paths("/cfg", "https://feed.example.com/nuget")
    assert paths.base_uri == "https://feed.example.com/nuget/"


def test_bucket_uri():
    assert bucket_uri("b", "us-east-1") == "https://b.s3.amazonaws.com/"
    assert bucket_uri("b", "eu-west-2") == "https://b.s3.eu-west-2.amazonaws.com/"


def test_service_bucket_uri():
    assert service_bucket_uri("http://localhost:9000", "b") == "http://localhost:9000/b/"
    assert service_bucket_uri("http://localhost:9000/", "b") == "http://localhost:9000/b/"


def test_sas_helpers():
    sas = "https://account.blob.core.windows.net/feed/sub/dir?sv=2020-08-04&sig=abc"
    assert container_uri_from_sas(sas) == "https://account.blob.core.windows.net/feed?sv=2020-08-04&sig=abc"
    assert remove_query(sas) == "https://account.blob.core.windows.net/feed/sub/dir"
