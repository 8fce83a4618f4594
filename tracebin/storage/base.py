"""
Base protocol and configuration for remote storage drivers.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable
from urllib.parse import urlsplit

from tracebin.exceptions import ConfigurationError


@runtime_checkable
class RemoteStorageDriver(Protocol):
    """
    Protocol for remote report storage.

    ``get_url`` and ``upload`` must agree: uploading a file named ``name``
    makes it available at ``get_url(name)``.
    """

    def get_url(self, local_name: str) -> str:
        """Return the public URL an artifact named ``local_name`` is stored at."""
        ...

    def upload(self, local_path: str | Path) -> bool:
        """
        Upload a local report file.

        Returns:
            True if the transport reported success.
        """
        ...

    def publish(self, local_path: str | Path) -> str | None:
        """
        Upload a local report file.

        Returns:
            The URL of the written object, or None if the transport failed.
        """
        ...


@dataclass
class S3StorageConfig:
    """
    Configuration for S3 storage.

    Attributes:
        bucket: Bucket name.
        region: Bucket region (e.g., "eu-central-1").
        prefix: Key prefix inside the bucket (e.g., "exceptions/").
        user_agent: User-Agent header sent with uploads.
        acl: Canned ACL applied to uploaded objects.
        content_type: Content-Type of uploaded reports (not signed).
        endpoint_url: Base URL of an S3-compatible store. Defaults to AWS.
    """
    bucket: str
    region: str
    prefix: str = ""
    user_agent: str = "tracebin"
    acl: str = "public-read"
    content_type: str = "text/html; charset=utf-8"
    endpoint_url: str | None = None

    def __post_init__(self) -> None:
        """Validate and normalize configuration."""
        if not self.bucket:
            raise ConfigurationError("bucket", expected="non-empty bucket name", received=self.bucket)
        if not self.region:
            raise ConfigurationError("region", expected="non-empty region", received=self.region)

        self.prefix = (self.prefix or "").lstrip("/")

        if self.endpoint_url:
            parts = urlsplit(self.endpoint_url)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                raise ConfigurationError(
                    "endpoint_url",
                    expected="absolute http(s) URL",
                    received=self.endpoint_url,
                )

    @property
    def scheme(self) -> str:
        if self.endpoint_url:
            return urlsplit(self.endpoint_url).scheme
        return "https"

    @property
    def host(self) -> str:
        if self.endpoint_url:
            return urlsplit(self.endpoint_url).netloc
        return f"s3.{self.region}.amazonaws.com"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> S3StorageConfig:
        """
        Create configuration from environment variables.

        Reads ``TRACEBIN_S3_BUCKET``, ``TRACEBIN_S3_REGION`` (falling back to
        ``AWS_REGION`` and ``AWS_DEFAULT_REGION``), ``TRACEBIN_S3_PREFIX``,
        ``TRACEBIN_S3_ENDPOINT_URL`` and ``TRACEBIN_USER_AGENT``.

        Raises:
            ConfigurationError: If bucket or region is missing.
        """
        env = os.environ if environ is None else environ
        region = (
            env.get("TRACEBIN_S3_REGION")
            or env.get("AWS_REGION")
            or env.get("AWS_DEFAULT_REGION")
            or ""
        )
        return cls(
            bucket=env.get("TRACEBIN_S3_BUCKET", ""),
            region=region,
            prefix=env.get("TRACEBIN_S3_PREFIX", ""),
            user_agent=env.get("TRACEBIN_USER_AGENT", "tracebin"),
            endpoint_url=env.get("TRACEBIN_S3_ENDPOINT_URL") or None,
        )
