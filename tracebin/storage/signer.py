"""
AWS Signature Version 4 signing for S3 requests.

Only the pieces needed for a single-object PUT are implemented: the query
string is always empty and the payload hash is supplied by the caller
(normally the ``UNSIGNED-PAYLOAD`` sentinel, so the body never has to be
read before it is sent).

Only the headers passed to :meth:`SigV4Signer.sign` are signed. Headers
added afterwards, such as ``Content-Type``, travel unsigned.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
from collections.abc import Mapping
from datetime import datetime

from tracebin.clock import to_utc
from tracebin.exceptions import SigningError
from tracebin.types import Credentials

logger = logging.getLogger(__name__)

ALGORITHM = "AWS4-HMAC-SHA256"
UNSIGNED_PAYLOAD = "UNSIGNED-PAYLOAD"
TERMINATOR = "aws4_request"

AMZ_DATE_FORMAT = "%Y%m%dT%H%M%SZ"
SHORT_DATE_FORMAT = "%Y%m%d"


def amz_date(now: datetime) -> str:
    """Format a timestamp for the ``X-Amz-Date`` header."""
    return to_utc(now).strftime(AMZ_DATE_FORMAT)


def _hmac_sha256(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


class SigV4Signer:
    """
    Computes SigV4 Authorization values.

    Example:
        >>> signer = SigV4Signer(region="eu-central-1")
        >>> signer.sign(
        ...     "PUT",
        ...     "/bucket/report.html",
        ...     {"Host": "s3.eu-central-1.amazonaws.com", "X-Amz-Date": "20240101T000000Z"},
        ...     UNSIGNED_PAYLOAD,
        ...     credentials,
        ...     now,
        ... )
        'AWS4-HMAC-SHA256 Credential=AKID/20240101/eu-central-1/s3/aws4_request, ...'
    """

    def __init__(self, region: str, service: str = "s3") -> None:
        self.region = region
        self.service = service

    def credential_scope(self, now: datetime) -> str:
        """Return ``{date}/{region}/{service}/aws4_request``."""
        date_stamp = to_utc(now).strftime(SHORT_DATE_FORMAT)
        return f"{date_stamp}/{self.region}/{self.service}/{TERMINATOR}"

    def signed_header_names(self, headers: Mapping[str, str]) -> str:
        """Lower-case, sort and join header names with ``;``."""
        return ";".join(sorted(self._lowercase(headers)))

    def signed_header_lines(self, headers: Mapping[str, str]) -> str:
        """Emit ``name:value`` lines in signed-header order, values untouched."""
        lowered = self._lowercase(headers)
        return "\n".join(f"{name}:{lowered[name]}" for name in sorted(lowered))

    def canonical_request(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str],
        payload_hash: str,
    ) -> str:
        """Build the canonical request. The query component is always empty."""
        if not method or not path:
            raise SigningError(
                "Method and path are required for signing",
                {"method": method, "path": path},
            )
        query = ""
        return (
            f"{method}\n"
            f"{path}\n"
            f"{query}\n"
            f"{self.signed_header_lines(headers)}\n"
            f"\n"
            f"{self.signed_header_names(headers)}\n"
            f"{payload_hash}"
        )

    def string_to_sign(self, canonical_request: str, now: datetime) -> str:
        digest = hashlib.sha256(canonical_request.encode("utf-8")).hexdigest()
        return (
            f"{ALGORITHM}\n"
            f"{amz_date(now)}\n"
            f"{self.credential_scope(now)}\n"
            f"{digest}"
        )

    def signing_key(self, secret_key: str, now: datetime) -> bytes:
        """Derive the signing key; each HMAC step is keyed by the previous raw digest."""
        date_stamp = to_utc(now).strftime(SHORT_DATE_FORMAT)
        k_date = _hmac_sha256(f"AWS4{secret_key}".encode("utf-8"), date_stamp)
        k_region = _hmac_sha256(k_date, self.region)
        k_service = _hmac_sha256(k_region, self.service)
        return _hmac_sha256(k_service, TERMINATOR)

    def sign(
        self,
        method: str,
        path: str,
        headers: Mapping[str, str],
        payload_hash: str,
        credentials: Credentials,
        now: datetime,
    ) -> str:
        """
        Compute the Authorization header value.

        Args:
            method: HTTP method.
            path: Request path, already in canonical form.
            headers: Exactly the headers to sign, values already normalized.
            payload_hash: Hex SHA-256 of the body or ``UNSIGNED-PAYLOAD``.
            credentials: Credentials to sign with.
            now: Signing instant; must match the ``X-Amz-Date`` header.

        Returns:
            The Authorization header value.

        Raises:
            SigningError: If the request cannot be canonicalized.
        """
        canonical_request = self.canonical_request(method, path, headers, payload_hash)
        string_to_sign = self.string_to_sign(canonical_request, now)
        signature = hmac.new(
            self.signing_key(credentials.secret_key, now),
            string_to_sign.encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()

        logger.debug(f"Signed {method} {path} with scope {self.credential_scope(now)}")

        return (
            f"{ALGORITHM} "
            f"Credential={credentials.access_key_id}/{self.credential_scope(now)}, "
            f"SignedHeaders={self.signed_header_names(headers)}, "
            f"Signature={signature}"
        )

    @staticmethod
    def _lowercase(headers: Mapping[str, str]) -> dict[str, str]:
        lowered: dict[str, str] = {}
        for name, value in headers.items():
            key = name.lower()
            if key in lowered:
                raise SigningError(
                    f"Duplicate header '{name}' (header names are case-insensitive)",
                    {"header": key},
                )
            lowered[key] = value
        return lowered
