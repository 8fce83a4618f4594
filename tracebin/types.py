"""
Core data types for tracebin.

These types describe an exception chain captured from a logged error,
the credentials used to sign uploads and the signed request handed to a
request sender.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Credentials:
    """
    Access credentials for the object store.

    Treated as immutable for the duration of one signing operation.

    Attributes:
        access_key_id: Public access key identifier.
        secret_key: Secret key used to derive signing keys.
        session_token: Optional short-lived session token.
    """

    access_key_id: str
    secret_key: str = field(repr=False)
    session_token: str | None = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not self.session_token:
            object.__setattr__(self, "session_token", None)


@dataclass(frozen=True)
class StackEntry:
    """A single call-stack entry. Argument values are never captured."""

    file: str = ""
    line: int = 0
    function: str = ""

    def to_canonical(self) -> list[Any]:
        return [self.file, self.line, self.function]


@dataclass(frozen=True)
class ExceptionFrame:
    """
    One exception of an exception chain.

    Attributes:
        type_name: Type tag captured when the exception was caught.
        message: Exception message.
        code: Numeric code (errno or similar), 0 when absent.
        file: Source file where the exception was raised.
        line: Source line where the exception was raised.
        stack: Call-stack entries, outermost call first.
    """

    type_name: str = ""
    message: str = ""
    code: int = 0
    file: str = ""
    line: int = 0
    stack: tuple[StackEntry, ...] = ()

    def to_canonical(self) -> list[Any]:
        """Return the fixed-order list used for fingerprinting."""
        return [
            self.type_name,
            self.message,
            self.code,
            self.file,
            self.line,
            [entry.to_canonical() for entry in self.stack],
        ]


# Ordered frames, outermost exception first.
ExceptionChain = tuple[ExceptionFrame, ...]


@dataclass
class SignedRequest:
    """
    A fully signed request ready to be handed to a request sender.

    Built fresh for every upload and never reused.

    Attributes:
        method: HTTP method.
        url: Absolute request URL.
        path: Canonical path that was signed.
        headers: Wire headers in send order, Authorization included.
        authorization: The Authorization header value.
    """

    method: str
    url: str
    path: str
    headers: dict[str, str]
    authorization: str

    @property
    def signed_header_names(self) -> list[str]:
        """Header names listed in the SignedHeaders component."""
        _, _, rest = self.authorization.partition("SignedHeaders=")
        names, _, _ = rest.partition(",")
        return names.split(";") if names else []
