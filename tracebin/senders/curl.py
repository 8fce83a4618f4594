"""
Request sender that shells out to the curl binary.
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Mapping

from tracebin.senders.base import resolve_detached, truncate_file

logger = logging.getLogger(__name__)


class CurlRequestSender:
    """
    Upload files with ``curl --upload-file``.

    Synchronous mode waits for curl and reports its exit status. Detached
    mode starts curl (followed by the optional truncation) in its own
    session and returns True immediately; the outcome is never observed.

    Example:
        >>> sender = CurlRequestSender(truncate=True)
        >>> sender.send("PUT", url, headers, "/var/log/app/exception--...html")
        True
    """

    def __init__(
        self,
        curl_binary: str = "curl",
        detached: bool | None = None,
        truncate: bool = False,
    ) -> None:
        """
        Initialize the sender.

        Args:
            curl_binary: curl executable name or path.
            detached: Run in the background. None means: only while serving a request.
            truncate: Truncate the body file to zero bytes after sending.
        """
        self.curl_binary = curl_binary
        self.detached = detached
        self.truncate = truncate

    def build_args(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body_file_path: str,
    ) -> list[str]:
        """Build the curl argument vector. ``--fail`` turns non-2xx into a non-zero exit."""
        args = [
            self.curl_binary,
            "--silent",
            "--show-error",
            "--fail",
            "--request", method,
            "--url", url,
        ]
        for name, value in headers.items():
            args += ["--header", f"{name}: {value}"]
        args += ["--upload-file", body_file_path]
        return args

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body_file_path: str,
    ) -> bool:
        args = self.build_args(method, url, headers, body_file_path)

        if resolve_detached(self.detached):
            return self._launch_detached(args, body_file_path)

        try:
            completed = subprocess.run(
                args,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                check=False,
            )
        except OSError as e:
            logger.warning(f"Could not run {self.curl_binary}: {e}")
            return False

        if self.truncate:
            truncate_file(body_file_path)

        if completed.returncode != 0:
            stderr = (completed.stderr or b"").decode("utf-8", "replace").strip()
            logger.warning(f"curl exited with status {completed.returncode}: {stderr}")
            return False
        return True

    def _launch_detached(self, args: list[str], body_file_path: str) -> bool:
        commands = [shlex.join(args)]
        if self.truncate:
            commands.append(shlex.join(["truncate", "-s", "0", body_file_path]))
        command = f"({'; '.join(commands)}) >/dev/null 2>&1"

        try:
            subprocess.Popen(
                command,
                shell=True,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            logger.warning(f"Could not launch detached upload: {e}")
            return False

        logger.debug(f"Launched detached upload of {body_file_path}")
        return True
