"""
Log pipeline integration.

ExceptionReportProcessor annotates dict-shaped log records (Monolog or
structlog style) that carry an exception with the report's file name
and, once uploaded, its public URL. ExceptionReportFilter adapts it to
the standard library ``logging`` module.

Quick Start:
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
    ...     S3StorageConfig.from_env(),
    ...     credentials_provider=EnvironmentCredentialsProvider(),
    ...     request_sender=CurlRequestSender(truncate=True),
    ... )
    >>> processor = ExceptionReportProcessor(
    ...     driver, "/var/log/app", renderer=HtmlReportRenderer()
    ... )
    >>> handler = logging.StreamHandler()
    >>> handler.addFilter(ExceptionReportFilter(processor))
    >>> handler.setFormatter(logging.Formatter("%(message)s %(report_url)s"))
"""

from __future__ import annotations

import logging
from collections.abc import Callable, MutableMapping
from pathlib import Path
from typing import Any

from tracebin.fingerprint import ExceptionFingerprinter
from tracebin.storage.base import RemoteStorageDriver

logger = logging.getLogger(__name__)

Renderer = Callable[[BaseException, Path], None]


def _exception_from(record: MutableMapping[str, Any]) -> BaseException | None:
    context = record.get("context")
    if isinstance(context, MutableMapping):
        candidate = context.get("exception")
        if isinstance(candidate, BaseException):
            return candidate

    for key in ("exception", "exc_info"):
        candidate = record.get(key)
        if isinstance(candidate, tuple) and len(candidate) == 3:
            candidate = candidate[1]
        if isinstance(candidate, BaseException):
            return candidate
    return None


class ExceptionReportProcessor:
    """
    Attach exception report names and URLs to log records.

    For a record carrying an exception the processor names the report,
    renders it when missing and a renderer is configured, uploads it and
    adds ``report_filename`` (always) and ``report_url`` (only after a
    successful upload) to the record's ``context``.

    A report emptied by a truncating sender was exported by an earlier
    record with the same name. It is rendered again when a renderer is
    configured; otherwise it is not sent again and its existing URL is
    attached.

    The processor never raises; its own failures are logged as warnings.
    """

    def __init__(
        self,
        driver: RemoteStorageDriver,
        report_directory: str | Path,
        renderer: Renderer | None = None,
        fingerprinter: ExceptionFingerprinter | None = None,
        filename_key: str = "report_filename",
        url_key: str = "report_url",
    ) -> None:
        """
        Initialize the processor.

        Args:
            driver: Remote storage driver.
            report_directory: Directory holding rendered reports.
            renderer: Optional callable rendering a missing report file.
            fingerprinter: Report namer (default: system clock).
            filename_key: Context key for the report file name.
            url_key: Context key for the report URL.
        """
        self.driver = driver
        self.report_directory = Path(report_directory)
        self.renderer = renderer
        self.fingerprinter = fingerprinter or ExceptionFingerprinter()
        self.filename_key = filename_key
        self.url_key = url_key

    def __call__(self, record: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
        exc = _exception_from(record)
        if exc is None:
            return record

        context = record.get("context")
        if not isinstance(context, MutableMapping):
            context = {}
            record["context"] = context

        try:
            name = self.fingerprinter.name_for(exc)
            context[self.filename_key] = name

            url = self.export(exc, name)
            if url is not None:
                context[self.url_key] = url
        except Exception as e:
            logger.warning(f"Exception report export failed: {type(e).__name__}: {e}")

        return record

    def export(self, exc: BaseException, name: str) -> str | None:
        """
        Make sure the report exists, upload it and return its URL.

        Returns:
            The public URL, or None if the report is missing or the upload failed.
        """
        path = self.report_directory / name
        truncated = path.exists() and path.stat().st_size == 0

        if self.renderer is not None and (truncated or not path.exists()):
            self.renderer(exc, path)
        elif truncated:
            # Uploaded before and emptied by the sender; never overwrite it with 0 bytes.
            return self.driver.get_url(name)

        if not path.exists():
            logger.warning(f"Exception report {path} does not exist, skipping upload")
            return None

        return self.driver.publish(path)


class ExceptionReportFilter(logging.Filter):
    """
    ``logging.Filter`` adding ``report_filename`` and ``report_url`` attributes.

    Both attributes are always set (None when not applicable) so format
    strings can reference them. Records never get dropped.
    """

    def __init__(self, processor: ExceptionReportProcessor, name: str = "") -> None:
        super().__init__(name)
        self.processor = processor

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003 (filter)
        filename_key = self.processor.filename_key
        url_key = self.processor.url_key
        if getattr(record, filename_key, None) is not None:
            # Already processed by another handler.
            return True
        setattr(record, filename_key, None)
        setattr(record, url_key, None)

        # Our own warnings must not trigger another export.
        if record.name == "tracebin" or record.name.startswith("tracebin."):
            return True
        if not record.exc_info or record.exc_info[1] is None:
            return True

        context = self.processor({"context": {"exception": record.exc_info[1]}})["context"]
        setattr(record, filename_key, context.get(filename_key))
        setattr(record, url_key, context.get(url_key))
        return True
