"""
Credentials providers for signing uploads.

Every provider implements a single blocking accessor, ``get()``. Static
providers hold fixed credentials; the others resolve them on each call so
rotated or short-lived credentials are picked up. No provider caches on
its own behalf.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from tracebin.exceptions import ConfigurationError, CredentialsError
from tracebin.types import Credentials

logger = logging.getLogger(__name__)

# Check if boto3 is available
try:
    import boto3
    HAS_BOTO3 = True
except ImportError:
    boto3 = None  # type: ignore
    HAS_BOTO3 = False


@runtime_checkable
class CredentialsProvider(Protocol):
    """Protocol for credential sources."""

    def get(self) -> Credentials:
        """
        Resolve credentials.

        Raises:
            CredentialsError: If no usable credentials are available.
        """
        ...


class StaticCredentialsProvider:
    """Provider returning the same credentials on every call."""

    def __init__(
        self,
        access_key_id: str,
        secret_key: str,
        session_token: str | None = None,
    ) -> None:
        if not access_key_id or not secret_key:
            raise ConfigurationError(
                config_key="credentials",
                expected="non-empty access key id and secret key",
            )
        self._credentials = Credentials(access_key_id, secret_key, session_token)

    def get(self) -> Credentials:
        return self._credentials


class CallableCredentialsProvider:
    """
    Provider resolving credentials through a callable on every ``get()``.

    The callable may return a :class:`Credentials`, a mapping or an object
    with ``access_key``/``secret_key``/``token`` attributes such as
    botocore's frozen credentials.

    Example:
        >>> provider = CallableCredentialsProvider(vault.fetch_aws_credentials)
        >>> provider.get().access_key_id
        'AKID...'
    """

    def __init__(self, fn: Callable[[], Any], name: str | None = None) -> None:
        self._fn = fn
        self.name = name or getattr(fn, "__qualname__", "callable")

    def get(self) -> Credentials:
        try:
            resolved = self._fn()
        except CredentialsError:
            raise
        except Exception as e:
            raise CredentialsError(self.name, f"{type(e).__name__}: {e}") from e
        return coerce_credentials(resolved, self.name)


class EnvironmentCredentialsProvider:
    """Provider reading the standard AWS environment variables."""

    name = "environment"

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ

    def get(self) -> Credentials:
        environ = os.environ if self._environ is None else self._environ
        return coerce_credentials(
            {
                "access_key_id": environ.get("AWS_ACCESS_KEY_ID"),
                "secret_key": environ.get("AWS_SECRET_ACCESS_KEY"),
                "session_token": environ.get("AWS_SESSION_TOKEN"),
            },
            self.name,
        )


class FileCredentialsProvider:
    """
    Provider reading a JSON credentials file on every ``get()``.

    Expected keys: ``aws_access_key_id``, ``aws_secret_access_key`` and the
    optional ``aws_session_token``.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.name = f"file {self.path}"

    def get(self) -> Credentials:
        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CredentialsError(self.name, str(e)) from e
        if not isinstance(data, dict):
            raise CredentialsError(self.name, "expected a JSON object")
        return coerce_credentials(data, self.name)


class Boto3CredentialsProvider:
    """
    Provider resolving the standard AWS credential chain through boto3.

    Resolves on every call; refreshable credentials (instance profiles,
    assumed roles) are frozen so one signing operation sees a consistent
    key, secret and token.
    """

    name = "boto3"

    def __init__(self, session: Any = None) -> None:
        if not HAS_BOTO3 and session is None:
            raise ConfigurationError(
                config_key="credentials",
                expected="boto3 installed (pip install tracebin[aws])",
            )
        self._session = session

    def get(self) -> Credentials:
        session = self._session if self._session is not None else boto3.Session()
        try:
            resolved = session.get_credentials()
            if resolved is None:
                raise CredentialsError(self.name, "no credentials found in the AWS provider chain")
            frozen = resolved.get_frozen_credentials()
        except CredentialsError:
            raise
        except Exception as e:
            raise CredentialsError(self.name, f"{type(e).__name__}: {e}") from e
        return coerce_credentials(frozen, self.name)


def coerce_credentials(value: Any, provider: str) -> Credentials:
    """
    Normalize a provider result into :class:`Credentials`.

    Raises:
        CredentialsError: If the key id or secret is missing.
    """
    if isinstance(value, Credentials):
        return value

    if isinstance(value, Mapping):
        access_key_id = value.get("access_key_id") or value.get("aws_access_key_id")
        secret_key = value.get("secret_key") or value.get("aws_secret_access_key")
        session_token = value.get("session_token") or value.get("aws_session_token")
    else:
        access_key_id = getattr(value, "access_key", None)
        secret_key = getattr(value, "secret_key", None)
        session_token = getattr(value, "token", None)

    if not access_key_id or not secret_key:
        raise CredentialsError(provider, "access key id or secret key is missing")

    return Credentials(
        access_key_id=str(access_key_id),
        secret_key=str(secret_key),
        session_token=str(session_token) if session_token else None,
    )
