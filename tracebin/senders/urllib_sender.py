"""
Request sender using urllib from the standard library.
"""

from __future__ import annotations

import http.client
import logging
import os
import threading
import urllib.error
import urllib.request
from collections.abc import Mapping

from tracebin.senders.base import resolve_detached, truncate_file

logger = logging.getLogger(__name__)


class UrllibRequestSender:
    """
    Upload files with ``urllib.request``, streaming the file as the body.

    Detached mode performs the same transfer on a daemon thread and
    returns True immediately.
    """

    def __init__(
        self,
        timeout: float | None = None,
        detached: bool | None = None,
        truncate: bool = False,
    ) -> None:
        """
        Initialize the sender.

        Args:
            timeout: Socket timeout in seconds. None leaves the transport default.
            detached: Run on a background thread. None means: only while serving a request.
            truncate: Truncate the body file to zero bytes after sending.
        """
        self.timeout = timeout
        self.detached = detached
        self.truncate = truncate

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body_file_path: str,
    ) -> bool:
        if resolve_detached(self.detached):
            thread = threading.Thread(
                target=self._transfer,
                args=(method, url, dict(headers), body_file_path),
                name="tracebin-upload",
                daemon=True,
            )
            thread.start()
            return True

        return self._transfer(method, url, headers, body_file_path)

    def _transfer(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body_file_path: str,
    ) -> bool:
        try:
            return self._put(method, url, headers, body_file_path)
        finally:
            if self.truncate:
                truncate_file(body_file_path)

    def _put(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body_file_path: str,
    ) -> bool:
        try:
            with open(body_file_path, "rb") as body:
                request_headers = dict(headers)
                request_headers["Content-Length"] = str(os.fstat(body.fileno()).st_size)
                request = urllib.request.Request(
                    url, data=body, headers=request_headers, method=method
                )
                kwargs = {} if self.timeout is None else {"timeout": self.timeout}
                with urllib.request.urlopen(request, **kwargs) as response:
                    status = response.status
        except urllib.error.HTTPError as e:
            logger.warning(f"Upload to {url} failed: {e.code} {e.reason}")
            return False
        except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
            logger.warning(f"Upload to {url} failed: {e}")
            return False

        if not 200 <= status < 300:
            logger.warning(f"Upload to {url} failed with status {status}")
            return False
        return True
