"""
Base protocol for request senders.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

from tracebin.context import is_serving_request

logger = logging.getLogger(__name__)


@runtime_checkable
class RequestSender(Protocol):
    """
    Protocol for transports that PUT a local file to a URL.

    In detached mode a sender launches the transfer and returns True
    without observing its outcome.
    """

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body_file_path: str,
    ) -> bool:
        """
        Send the request with the file contents as body.

        Returns:
            True on success (or once launched, when detached).
        """
        ...


def resolve_detached(detached: bool | None) -> bool:
    """Resolve an unset detached flag from the request-serving context."""
    if detached is None:
        return is_serving_request()
    return detached


def truncate_file(path: str | os.PathLike[str]) -> bool:
    """Truncate a file to zero bytes. Best-effort; never raises."""
    try:
        os.truncate(path, 0)
    except OSError as e:
        logger.debug(f"Could not truncate {path}: {e}")
        return False
    return True
