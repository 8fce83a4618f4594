"""
Deterministic naming of exception reports.

An exception chain is reduced to a canonical JSON encoding, hashed with
MD5 and truncated to a short hex fingerprint. Combined with the calendar
date it forms the artifact name, which is used both as the local report
file name and as the seed for the remote object path:

    exception--2024-01-01--3f2a9c0d1e.html

The same chain on the same day always yields the same name, so a burst
of identical errors produces a single report.
"""

from __future__ import annotations

import hashlib
import json
import logging
import traceback
from collections.abc import Callable, Sequence
from datetime import date
from typing import Any, TypeVar

from tracebin.clock import Clock, SystemClock
from tracebin.types import ExceptionChain, ExceptionFrame, StackEntry

logger = logging.getLogger(__name__)

T = TypeVar("T")

FINGERPRINT_LENGTH = 10
MAX_CHAIN_DEPTH = 32


def _safe(read: Callable[[], T], default: T) -> T:
    """Read a field of a possibly malformed exception, falling back to a default."""
    try:
        value = read()
    except Exception:
        return default
    return default if value is None else value


def _type_tag(exc: BaseException) -> str:
    cls = type(exc)
    module = getattr(cls, "__module__", "") or ""
    name = getattr(cls, "__qualname__", cls.__name__)
    if module in ("builtins", "__builtin__"):
        return name
    return f"{module}.{name}"


def _code(exc: BaseException) -> int:
    for attr in ("errno", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return 0


def _stack(exc: BaseException) -> tuple[StackEntry, ...]:
    entries = traceback.extract_tb(exc.__traceback__)
    return tuple(
        StackEntry(
            file=str(entry.filename or ""),
            line=int(entry.lineno or 0),
            function=str(entry.name or ""),
        )
        for entry in entries
    )


def capture_frame(exc: BaseException) -> ExceptionFrame:
    """
    Capture one exception as an ExceptionFrame.

    Never raises: unreadable fields are captured as empty values.
    """
    stack = _safe(lambda: _stack(exc), ())
    raised_at = stack[-1] if stack else StackEntry()
    return ExceptionFrame(
        type_name=_safe(lambda: _type_tag(exc), ""),
        message=_safe(lambda: str(exc), ""),
        code=_safe(lambda: _code(exc), 0),
        file=raised_at.file,
        line=raised_at.line,
        stack=stack,
    )


def _next_cause(exc: BaseException) -> BaseException | None:
    cause = getattr(exc, "__cause__", None)
    if cause is None and not getattr(exc, "__suppress_context__", False):
        cause = getattr(exc, "__context__", None)
    return cause if isinstance(cause, BaseException) else None


def capture_chain(exc: BaseException, max_depth: int = MAX_CHAIN_DEPTH) -> ExceptionChain:
    """
    Capture an exception and its causes, outermost exception first.

    Follows ``__cause__`` (or ``__context__`` unless suppressed) until no
    cause remains, an exception repeats or ``max_depth`` frames were taken.

    Args:
        exc: The logged exception.
        max_depth: Maximum number of frames to capture.

    Returns:
        The captured chain.
    """
    frames: list[ExceptionFrame] = []
    seen: set[int] = set()
    current: BaseException | None = exc

    while current is not None and id(current) not in seen:
        if len(frames) >= max_depth:
            logger.debug(f"Exception chain truncated at {max_depth} frames")
            break
        seen.add(id(current))
        frames.append(capture_frame(current))
        current = _safe(lambda: _next_cause(current), None)

    return tuple(frames)


def canonical_encoding(chain: Sequence[ExceptionFrame]) -> bytes:
    """Encode a chain as compact, key-sorted, ASCII-only JSON."""
    data: list[Any] = [frame.to_canonical() for frame in chain]
    return json.dumps(
        data,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
    ).encode("utf-8")


def compute_fingerprint(chain: Sequence[ExceptionFrame]) -> str:
    """Return the truncated MD5 hex digest of the canonical encoding."""
    return hashlib.md5(canonical_encoding(chain)).hexdigest()[:FINGERPRINT_LENGTH]


def artifact_name(fingerprint: str, day: date) -> str:
    """Build the artifact name for a fingerprint and calendar date."""
    return f"exception--{day.strftime('%Y-%m-%d')}--{fingerprint}.html"


class ExceptionFingerprinter:
    """
    Names exception reports.

    Example:
        >>> fingerprinter = ExceptionFingerprinter()
        >>> try:
        ...     1 / 0
        ... except ZeroDivisionError as e:
        ...     fingerprinter.name_for(e)
        'exception--2024-01-01--8d6e0f3b2a.html'
    """

    def __init__(self, clock: Clock | None = None, max_depth: int = MAX_CHAIN_DEPTH) -> None:
        self.clock = clock or SystemClock()
        self.max_depth = max_depth

    def fingerprint(self, chain: Sequence[ExceptionFrame], today: date | None = None) -> str:
        """
        Return the artifact name for a captured chain.

        Args:
            chain: Captured exception chain.
            today: Calendar date to embed (default: the clock's UTC date).
        """
        if today is None:
            today = self.clock.now().date()
        return artifact_name(compute_fingerprint(chain), today)

    def name_for(self, exc: BaseException, today: date | None = None) -> str:
        """Capture ``exc`` and return its artifact name."""
        return self.fingerprint(capture_chain(exc, self.max_depth), today)
