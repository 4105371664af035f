"""Credential chain for object-store sources.

Strategies are tried in a fixed order and the first one whose precondition
holds decides the outcome, even if it later fails. Only the last strategy
touches the network: it verifies ambient credentials with a single STS
``GetCallerIdentity`` call.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

import boto3
import botocore.session
from botocore import credentials as botocore_credentials
from botocore.config import Config
from botocore.configloader import raw_config_parse
from botocore.exceptions import BotoCoreError, ClientError, ConfigNotFound, ConfigParseError
from botocore.utils import ContainerMetadataFetcher
from loguru import logger

from feedsource.exceptions import ConfigError, CredentialError
from feedsource.models import ObjectStoreSourceConfig, SourceType
from feedsource.uri import US_EAST_1

ACCESS_KEY_ENV = "AWS_ACCESS_KEY_ID"
SECRET_KEY_ENV = "AWS_SECRET_ACCESS_KEY"
SESSION_TOKEN_ENV = "AWS_SESSION_TOKEN"
CONTAINER_CREDENTIALS_URI_ENV = "AWS_CONTAINER_CREDENTIALS_RELATIVE_URI"
SHARED_CREDENTIALS_FILE_ENV = "AWS_SHARED_CREDENTIALS_FILE"
DEFAULT_SHARED_CREDENTIALS_FILE = "~/.aws/credentials"

# Seconds, applied to both connect and read of the identity check
IDENTITY_CHECK_TIMEOUT = 20

PROFILE_HELP_URL = "https://docs.aws.amazon.com/cli/latest/userguide/cli-configure-files.html"

# botocore provider methods that read the named profile itself
PROFILE_CREDENTIAL_METHODS = frozenset(
    {
        "shared-credentials-file",
        "config-file",
        "assume-role",
        "assume-role-with-web-identity",
        "sso",
        "custom-process",
    }
)

SessionFactory = Callable[..., Any]


class CredentialStrategy(str, Enum):
    PROFILE = "profile"
    EXPLICIT_KEYS = "explicit-keys"
    ENVIRONMENT = "environment"
    CONTAINER = "container"
    AMBIENT = "ambient"


@dataclass(frozen=True)
class ResolvedCredentials:
    """A boto3 session able to sign requests and the strategy that produced it."""

    session: Any
    strategy: CredentialStrategy

    def client(self, service_name: str, **kwargs: Any) -> Any:
        return self.session.client(service_name, **kwargs)


class _FixedCredentialProvider(botocore_credentials.CredentialProvider):
    METHOD = "container-role"

    def __init__(self, credentials: botocore_credentials.Credentials) -> None:
        super().__init__()
        self._credentials = credentials

    def load(self) -> botocore_credentials.Credentials:
        return self._credentials


def _blank(value: str | None) -> bool:
    return value is None or not value.strip()


class CredentialResolver:
    """Resolve object-store credentials through the ordered strategy chain.

    ``environ`` defaults to the process environment and ``session_factory``
    to ``boto3.session.Session``; both are injectable so the chain can be
    exercised without touching real credentials or the network.
    """

    def __init__(
        self,
        environ: Mapping[str, str] | None = None,
        session_factory: SessionFactory = boto3.session.Session,
        identity_timeout: float = IDENTITY_CHECK_TIMEOUT,
    ) -> None:
        self._environ = os.environ if environ is None else environ
        self._session_factory = session_factory
        self._identity_timeout = identity_timeout
        self._strategies: tuple[Callable[[ObjectStoreSourceConfig], ResolvedCredentials | None], ...] = (
            self._from_profile,
            self._from_explicit_keys,
            self._from_environment,
            self._from_container,
        )

    def resolve(self, source: ObjectStoreSourceConfig) -> ResolvedCredentials:
        resolved = None
        for strategy in self._strategies:
            resolved = strategy(source)
            if resolved is not None:
                break
        else:
            # Ambient credentials are verified before use
            resolved = self._from_ambient(source)

        logger.debug(
            "Resolved credentials for source '{name}' using {strategy}",
            name=source.name,
            strategy=resolved.strategy.value,
        )
        return resolved

    def _env(self, key: str) -> str:
        return (self._environ.get(key) or "").strip()

    def _from_profile(self, source: ObjectStoreSourceConfig) -> ResolvedCredentials | None:
        if _blank(source.profile_name):
            return None
        profile_name = source.profile_name.strip()

        keys = self._shared_credentials(profile_name)
        if keys is not None:
            session = self._session_factory(region_name=source.region, **keys)
            return ResolvedCredentials(session, CredentialStrategy.PROFILE)

        # SSO and assume-role profiles live in the config file; boto3 resolves those
        try:
            session = self._session_factory(profile_name=profile_name, region_name=source.region)
            found = session.get_credentials()
        except BotoCoreError as exc:
            raise self._missing_profile(profile_name) from exc
        # Container, instance metadata and env credentials are not the named profile
        if found is None or getattr(found, "method", None) not in PROFILE_CREDENTIAL_METHODS:
            raise self._missing_profile(profile_name)
        return ResolvedCredentials(session, CredentialStrategy.PROFILE)

    def _shared_credentials(self, profile_name: str) -> dict[str, str] | None:
        path = self._env(SHARED_CREDENTIALS_FILE_ENV) or DEFAULT_SHARED_CREDENTIALS_FILE
        try:
            profiles = raw_config_parse(path, parse_subsections=False)
        except ConfigNotFound:
            return None
        except ConfigParseError as exc:
            raise ConfigError(
                f"Unable to parse the AWS credentials file {path}.",
                field="profileName",
                source_type=SourceType.OBJECT_STORE.value,
            ) from exc

        profile = profiles.get(profile_name) or {}
        access_key = (profile.get("aws_access_key_id") or "").strip()
        secret_key = (profile.get("aws_secret_access_key") or "").strip()
        if not access_key or not secret_key:
            return None
        keys = {"aws_access_key_id": access_key, "aws_secret_access_key": secret_key}
        token = (profile.get("aws_session_token") or "").strip()
        if token:
            keys["aws_session_token"] = token
        return keys

    @staticmethod
    def _missing_profile(profile_name: str) -> ConfigError:
        return ConfigError(
            f"The specified AWS profileName {profile_name} could not be found. The feed must specify a "
            f"valid profileName for an AWS credentials file. For help on credential files see: {PROFILE_HELP_URL}",
            field="profileName",
            source_type=SourceType.OBJECT_STORE.value,
            details={"profile": profile_name},
        )

    def _from_explicit_keys(self, source: ObjectStoreSourceConfig) -> ResolvedCredentials | None:
        if _blank(source.access_key_id) or _blank(source.secret_access_key):
            return None
        session = self._session_factory(
            aws_access_key_id=source.access_key_id.strip(),
            aws_secret_access_key=source.secret_access_key.strip(),
            region_name=source.region,
        )
        return ResolvedCredentials(session, CredentialStrategy.EXPLICIT_KEYS)

    def _from_environment(self, source: ObjectStoreSourceConfig) -> ResolvedCredentials | None:
        access_key = self._env(ACCESS_KEY_ENV)
        secret_key = self._env(SECRET_KEY_ENV)
        if not access_key or not secret_key:
            return None
        session = self._session_factory(
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            aws_session_token=self._env(SESSION_TOKEN_ENV) or None,
            region_name=source.region,
        )
        return ResolvedCredentials(session, CredentialStrategy.ENVIRONMENT)

    def _from_container(self, source: ObjectStoreSourceConfig) -> ResolvedCredentials | None:
        relative_uri = self._env(CONTAINER_CREDENTIALS_URI_ENV)
        if not relative_uri:
            return None

        fetcher = ContainerMetadataFetcher()
        full_uri = fetcher.full_url(relative_uri)

        def refresh() -> dict[str, str]:
            response = fetcher.retrieve_full_uri(full_uri)
            return {
                "access_key": response["AccessKeyId"],
                "secret_key": response["SecretAccessKey"],
                "token": response["Token"],
                "expiry_time": response["Expiration"],
            }

        # Fetched on first signed request, not here
        deferred = botocore_credentials.DeferredRefreshableCredentials(
            refresh_using=refresh,
            method=_FixedCredentialProvider.METHOD,
        )
        core_session = botocore.session.get_session()
        core_session.register_component(
            "credential_provider",
            botocore_credentials.CredentialResolver(providers=[_FixedCredentialProvider(deferred)]),
        )
        session = self._session_factory(botocore_session=core_session, region_name=source.region)
        return ResolvedCredentials(session, CredentialStrategy.CONTAINER)

    def _from_ambient(self, source: ObjectStoreSourceConfig) -> ResolvedCredentials:
        session = self._session_factory(region_name=source.region)
        config = Config(
            connect_timeout=self._identity_timeout,
            read_timeout=self._identity_timeout,
            retries={"total_max_attempts": 1},
        )
        try:
            sts = session.client("sts", region_name=source.region or US_EAST_1, config=config)
            try:
                identity = sts.get_caller_identity()
            finally:
                sts.close()
        except (BotoCoreError, ClientError) as exc:
            raise CredentialError(
                "Failed to determine AWS identity - ensure you have an IAM role set, have set up "
                "default credentials or have specified a profile/key pair.",
                exc,
                source_type=SourceType.OBJECT_STORE.value,
            ) from exc

        logger.debug("Verified ambient AWS identity {arn}", arn=identity.get("Arn"))
        return ResolvedCredentials(session, CredentialStrategy.AMBIENT)


__all__ = [
    "ACCESS_KEY_ENV",
    "SECRET_KEY_ENV",
    "SESSION_TOKEN_ENV",
    "CONTAINER_CREDENTIALS_URI_ENV",
    "SHARED_CREDENTIALS_FILE_ENV",
    "IDENTITY_CHECK_TIMEOUT",
    "CredentialStrategy",
    "ResolvedCredentials",
    "CredentialResolver",
]
