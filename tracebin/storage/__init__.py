"""
Remote storage for exception reports.

Example:
    >>> from tracebin.storage import S3StorageConfig, S3StorageDriver
    >>>
    >>> config = S3StorageConfig(bucket="reports", region="eu-central-1")
    >>> driver = S3StorageDriver(config, credentials_provider, request_sender)
"""

from tracebin.storage.aws_s3 import S3StorageDriver
from tracebin.storage.base import RemoteStorageDriver, S3StorageConfig
from tracebin.storage.signer import UNSIGNED_PAYLOAD, SigV4Signer

__all__ = [
    "RemoteStorageDriver",
    "S3StorageConfig",
    "S3StorageDriver",
    "SigV4Signer",
    "UNSIGNED_PAYLOAD",
]
