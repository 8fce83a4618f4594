"""
Pytest fixtures for tracebin tests.

Provides common fixtures used across all test modules.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from tracebin.clock import FrozenClock
from tracebin.credentials import StaticCredentialsProvider
from tracebin.senders.base import RequestSender
from tracebin.storage.aws_s3 import S3StorageDriver
from tracebin.storage.base import S3StorageConfig
from tracebin.types import Credentials, ExceptionFrame

ACCESS_KEY_ID = "AKIDEXAMPLE"
SECRET_KEY = "wJalrXUtnFEMI/K7MDENG/bPxRfiCYEXAMPLEKEY"


# ============================================================================
# Time and Credentials Fixtures
# ============================================================================


@pytest.fixture
def frozen_clock() -> FrozenClock:
    """Clock frozen at 2024-01-01T00:00:00Z."""
    return FrozenClock(datetime(2024, 1, 1, tzinfo=timezone.utc))


@pytest.fixture
def credentials() -> Credentials:
    """Example credentials without a session token."""
    return Credentials(access_key_id=ACCESS_KEY_ID, secret_key=SECRET_KEY)


@pytest.fixture
def credentials_provider() -> StaticCredentialsProvider:
    """Static provider for the example credentials."""
    return StaticCredentialsProvider(ACCESS_KEY_ID, SECRET_KEY)


# ============================================================================
# Storage Fixtures
# ============================================================================


@pytest.fixture
def storage_config() -> S3StorageConfig:
    """S3 configuration for bucket 'bucket' in us-east-1."""
    return S3StorageConfig(bucket="bucket", region="us-east-1", prefix="prefix/")


@pytest.fixture
def request_sender() -> MagicMock:
    """Sender mock reporting success."""
    sender = MagicMock(spec=RequestSender)
    sender.send.return_value = True
    return sender


@pytest.fixture
def driver(
    storage_config: S3StorageConfig,
    credentials_provider: StaticCredentialsProvider,
    request_sender: MagicMock,
    frozen_clock: FrozenClock,
) -> S3StorageDriver:
    """Driver wired to the mock sender and frozen clock."""
    return S3StorageDriver(
        storage_config,
        credentials_provider=credentials_provider,
        request_sender=request_sender,
        clock=frozen_clock,
    )


@pytest.fixture
def report_file(tmp_path: Path) -> Path:
    """A rendered report on disk."""
    path = tmp_path / "exception--2024-01-01--0123456789.html"
    path.write_text("<html><body>boom</body></html>", encoding="utf-8")
    return path


# ============================================================================
# Exception Fixtures
# ============================================================================


@pytest.fixture
def boom_frame() -> ExceptionFrame:
    """Single RuntimeError frame without a stack."""
    return ExceptionFrame(
        type_name="RuntimeError",
        message="boom",
        code=0,
        file="/app/x",
        line=10,
        stack=(),
    )


@pytest.fixture
def raised_error() -> ValueError:
    """A ValueError raised from a KeyError, with tracebacks attached."""
    try:
        try:
            {}["missing"]
        except KeyError as e:
            raise ValueError("bad input") from e
    except ValueError as e:
        return e
    raise AssertionError("unreachable")
