"""
tracebin: exception report exporter for application logging pipelines.

When a log record carries an exception, tracebin names the exception
report deterministically, uploads the rendered report to S3 (or an
S3-compatible store) with a self-signed SigV4 PUT request and annotates
the record with the report's file name and public URL.

Basic Usage:
    >>> import logging
    >>> from tracebin import (
    ...     CurlRequestSender,
    ...     EnvironmentCredentialsProvider,
    ...     ExceptionReportFilter,
    ...     ExceptionReportProcessor,
    ...     HtmlReportRenderer,
    ...     S3StorageConfig,
    ...     S3StorageDriver,
    ... )
    >>>
    >>> driver = S3StorageDriver(
    ...     S3StorageConfig(bucket="reports", region="eu-central-1", prefix="app/"),
    ...     credentials_provider=EnvironmentCredentialsProvider(),
    ...     request_sender=CurlRequestSender(truncate=True),
    ... )
    >>> processor = ExceptionReportProcessor(
    ...     driver, "/var/log/app", renderer=HtmlReportRenderer()
    ... )
    >>> logging.getLogger().handlers[0].addFilter(ExceptionReportFilter(processor))
"""

__version__ = "0.1.0"

from tracebin.clock import Clock, FrozenClock, SystemClock
from tracebin.context import is_serving_request, serving_request
from tracebin.credentials import (
    Boto3CredentialsProvider,
    CallableCredentialsProvider,
    CredentialsProvider,
    EnvironmentCredentialsProvider,
    FileCredentialsProvider,
    StaticCredentialsProvider,
)
from tracebin.exceptions import (
    ConfigurationError,
    CredentialsError,
    SigningError,
    TracebinError,
)
from tracebin.fingerprint import (
    ExceptionFingerprinter,
    artifact_name,
    capture_chain,
    compute_fingerprint,
)
from tracebin.processor import ExceptionReportFilter, ExceptionReportProcessor
from tracebin.report import HtmlReportRenderer
from tracebin.senders import CurlRequestSender, RequestSender, UrllibRequestSender
from tracebin.storage import (
    RemoteStorageDriver,
    S3StorageConfig,
    S3StorageDriver,
    SigV4Signer,
)
from tracebin.types import Credentials, ExceptionFrame, SignedRequest, StackEntry

__all__ = [
    # Version
    "__version__",
    # Types
    "Credentials",
    "ExceptionFrame",
    "StackEntry",
    "SignedRequest",
    # Clock
    "Clock",
    "SystemClock",
    "FrozenClock",
    # Credentials
    "CredentialsProvider",
    "StaticCredentialsProvider",
    "CallableCredentialsProvider",
    "EnvironmentCredentialsProvider",
    "FileCredentialsProvider",
    "Boto3CredentialsProvider",
    # Fingerprinting
    "ExceptionFingerprinter",
    "capture_chain",
    "compute_fingerprint",
    "artifact_name",
    # Storage
    "RemoteStorageDriver",
    "S3StorageConfig",
    "S3StorageDriver",
    "SigV4Signer",
    # Senders
    "RequestSender",
    "CurlRequestSender",
    "UrllibRequestSender",
    # Pipeline
    "ExceptionReportProcessor",
    "ExceptionReportFilter",
    "HtmlReportRenderer",
    "serving_request",
    "is_serving_request",
    # Exceptions
    "TracebinError",
    "ConfigurationError",
    "CredentialsError",
    "SigningError",
]
