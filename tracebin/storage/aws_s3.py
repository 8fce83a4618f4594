"""
S3 storage driver for exception reports.

Uploads are single PUT requests signed with SigV4 and sent through a
pluggable request sender; no AWS SDK is involved. The object key is an
HMAC-MD5 of the artifact name keyed with the secret key, which makes the
public URL unguessable but stable for a given name and key.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import os
from pathlib import Path

from tracebin.clock import Clock, SystemClock
from tracebin.credentials import CredentialsProvider
from tracebin.senders.base import RequestSender
from tracebin.storage.base import S3StorageConfig
from tracebin.storage.signer import UNSIGNED_PAYLOAD, SigV4Signer, amz_date
from tracebin.types import Credentials, SignedRequest

logger = logging.getLogger(__name__)


class S3StorageDriver:
    """
    Store exception reports in S3 or an S3-compatible object store.

    Example:
        >>> driver = S3StorageDriver(
        ...     S3StorageConfig(bucket="reports", region="eu-central-1", prefix="app/"),
        ...     credentials_provider=EnvironmentCredentialsProvider(),
        ...     request_sender=CurlRequestSender(),
        ... )
        >>> driver.get_url("exception--2024-01-01--3f2a9c0d1e.html")
        'https://s3.eu-central-1.amazonaws.com/reports/app/6c1f...e2.html'
        >>> driver.upload("/var/log/app/exception--2024-01-01--3f2a9c0d1e.html")
        True
    """

    method = "PUT"

    def __init__(
        self,
        config: S3StorageConfig,
        credentials_provider: CredentialsProvider,
        request_sender: RequestSender,
        clock: Clock | None = None,
    ) -> None:
        """
        Initialize the driver.

        Args:
            config: Storage configuration.
            credentials_provider: Source of signing credentials, consulted on every call.
            request_sender: Transport for the signed request.
            clock: Time source for signing (default: system clock).
        """
        self.config = config
        self.credentials_provider = credentials_provider
        self.request_sender = request_sender
        self.clock = clock or SystemClock()
        self.signer = SigV4Signer(region=config.region, service="s3")

    def get_url(self, local_name: str) -> str:
        """
        Return the public URL for an artifact.

        Raises:
            CredentialsError: If credentials cannot be resolved.
        """
        credentials = self.credentials_provider.get()
        return self._url(self._path(local_name, credentials))

    def build_request(self, local_path: str | Path) -> SignedRequest:
        """
        Build the signed PUT request for a local report file.

        Raises:
            CredentialsError: If credentials cannot be resolved.
            SigningError: If the request cannot be signed.
        """
        credentials = self.credentials_provider.get()
        now = self.clock.now()
        path = self._path(os.path.basename(os.fspath(local_path)), credentials)

        headers = {
            "Host": self.config.host,
            "User-Agent": self.config.user_agent,
            "X-Amz-ACL": self.config.acl,
            "X-Amz-Content-Sha256": UNSIGNED_PAYLOAD,
            "X-Amz-Date": amz_date(now),
        }
        if credentials.session_token:
            headers["X-Amz-Security-Token"] = credentials.session_token

        authorization = self.signer.sign(
            self.method, path, headers, UNSIGNED_PAYLOAD, credentials, now
        )
        headers["Authorization"] = authorization
        # Added after signing, so it is not part of SignedHeaders.
        headers["Content-Type"] = self.config.content_type

        return SignedRequest(
            method=self.method,
            url=self._url(path),
            path=path,
            headers=headers,
            authorization=authorization,
        )

    def upload(self, local_path: str | Path) -> bool:
        """
        Upload a local report file.

        Credential and signing failures propagate. Transport failures are
        logged and reported as False.

        Args:
            local_path: Path of the rendered report; its base name is the artifact name.

        Returns:
            True if the sender reported success.
        """
        return self.publish(local_path) is not None

    def publish(self, local_path: str | Path) -> str | None:
        """
        Upload a local report file and return the URL it was stored at.

        The URL is the one the request was signed for, so it always names
        the object that was written, even when credentials rotate between
        calls.

        Returns:
            The public URL, or None if the transport failed.
        """
        request = self.build_request(local_path)

        try:
            sent = self.request_sender.send(
                request.method, request.url, request.headers, os.fspath(local_path)
            )
        except Exception as e:
            logger.warning(f"Upload of {local_path} to {request.url} failed: {e}")
            return None

        if not sent:
            logger.warning(f"Upload of {local_path} to {request.url} was not successful")
            return None
        return request.url

    def _path(self, local_name: str, credentials: Credentials) -> str:
        digest = hmac.new(
            credentials.secret_key.encode("utf-8"),
            local_name.encode("utf-8"),
            hashlib.md5,
        ).hexdigest()
        return f"/{self.config.bucket}/{self.config.prefix}{digest}.html"

    def _url(self, path: str) -> str:
        return f"{self.config.scheme}://{self.config.host}{path}"
