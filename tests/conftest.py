from __future__ import annotations

from types import SimpleNamespace
from typing import Any

import pytest
from botocore.exceptions import ProfileNotFound


class FakeClient:
    def __init__(self, service_name: str, identity: Any = None, **kwargs: Any) -> None:
        self.service_name = service_name
        self.kwargs = kwargs
        self._identity = identity
        self.identity_calls = 0
        self.closed = False

    def get_caller_identity(self) -> dict[str, str]:
        self.identity_calls += 1
        if isinstance(self._identity, BaseException):
            raise self._identity
        return self._identity or {"Arn": "arn:aws:iam::123456789012:role/feed-writer"}

    def close(self) -> None:
        self.closed = True


class FakeSession:
    def __init__(self, recorder: "SessionRecorder", **kwargs: Any) -> None:
        self.recorder = recorder
        self.kwargs = kwargs
        self.clients: list[FakeClient] = []

    def client(self, service_name: str, **kwargs: Any) -> FakeClient:
        client = FakeClient(service_name, identity=self.recorder.identity, **kwargs)
        self.clients.append(client)
        self.recorder.clients.append(client)
        return client

    def get_credentials(self) -> SimpleNamespace | None:
        if self.recorder.credential_method is None:
            return None
        return SimpleNamespace(method=self.recorder.credential_method)


class SessionRecorder:
    """Stands in for ``boto3.session.Session`` and records every session built."""

    def __init__(self) -> None:
        self.sessions: list[FakeSession] = []
        self.clients: list[FakeClient] = []
        self.known_profiles: set[str] = set()
        self.identity: Any = None
        # botocore provider method reported by get_credentials()
        self.credential_method: str | None = "config-file"

    def __call__(self, **kwargs: Any) -> FakeSession:
        profile_name = kwargs.get("profile_name")
        if profile_name is not None and profile_name not in self.known_profiles:
            raise ProfileNotFound(profile=profile_name)
        session = FakeSession(self, **kwargs)
        self.sessions.append(session)
        return session

    def client_for(self, service_name: str) -> list[FakeClient]:
        return [client for client in self.clients if client.service_name == service_name]


@pytest.fixture()
def session_factory() -> SessionRecorder:
    return SessionRecorder()


@pytest.fixture()
def no_aws_files(monkeypatch, tmp_path):
    """Point boto3 at empty config locations so real profiles never leak in."""
    monkeypatch.setenv("AWS_SHARED_CREDENTIALS_FILE", str(tmp_path / "missing-credentials"))
    monkeypatch.setenv("AWS_CONFIG_FILE", str(tmp_path / "missing-config"))
    return tmp_path
