"""
Tests for exception fingerprinting.

Tests cover:
- Artifact name format and determinism
- Sensitivity to every frame field and to the date
- Capturing Python exception chains (cause, context, suppression)
- Cycle and depth protection
- Malformed exceptions
"""

from __future__ import annotations

import re
from dataclasses import replace
from datetime import date, datetime, timezone

from tracebin.clock import FrozenClock
from tracebin.fingerprint import (
    ExceptionFingerprinter,
    artifact_name,
    canonical_encoding,
    capture_chain,
    capture_frame,
    compute_fingerprint,
)
from tracebin.types import ExceptionFrame, StackEntry

NAME_PATTERN = re.compile(r"exception--2024-01-01--[0-9a-f]{10}\.html")


class TestArtifactName:
    """Tests for artifact naming of captured chains."""

    def test_name_format(self, boom_frame: ExceptionFrame):
        """Test the name matches the documented pattern."""
        name = ExceptionFingerprinter().fingerprint((boom_frame,), date(2024, 1, 1))

        assert NAME_PATTERN.fullmatch(name)

    def test_deterministic(self, boom_frame: ExceptionFrame):
        """Test repeated calls with identical input agree."""
        fingerprinter = ExceptionFingerprinter()
        first = fingerprinter.fingerprint((boom_frame,), date(2024, 1, 1))
        second = fingerprinter.fingerprint((replace(boom_frame),), date(2024, 1, 1))

        assert first == second

    def test_different_date_different_name(self, boom_frame: ExceptionFrame):
        """Test that the same chain on another day gets another name."""
        fingerprinter = ExceptionFingerprinter()

        first = fingerprinter.fingerprint((boom_frame,), date(2024, 1, 1))
        second = fingerprinter.fingerprint((boom_frame,), date(2024, 1, 2))

        assert first != second
        assert second.startswith("exception--2024-01-02--")

    def test_message_change_changes_fingerprint(self, boom_frame: ExceptionFrame):
        """Test that a changed message yields a different fingerprint."""
        changed = replace(boom_frame, message="boom2")

        assert compute_fingerprint((boom_frame,)) != compute_fingerprint((changed,))

    def test_every_field_matters(self, boom_frame: ExceptionFrame):
        """Test that each frame field contributes to the fingerprint."""
        base = compute_fingerprint((boom_frame,))
        variants = [
            replace(boom_frame, type_name="ValueError"),
            replace(boom_frame, code=1),
            replace(boom_frame, file="/app/y"),
            replace(boom_frame, line=11),
            replace(boom_frame, stack=(StackEntry("/app/x", 3, "main"),)),
        ]

        for variant in variants:
            assert compute_fingerprint((variant,)) != base

    def test_chain_order_matters(self, boom_frame: ExceptionFrame):
        """Test that frame order is part of the encoding."""
        other = replace(boom_frame, type_name="KeyError")

        assert compute_fingerprint((boom_frame, other)) != compute_fingerprint((other, boom_frame))

    def test_default_date_from_clock(self, boom_frame: ExceptionFrame):
        """Test that the clock supplies the date when none is given."""
        clock = FrozenClock(datetime(2024, 1, 1, 23, 59, tzinfo=timezone.utc))

        name = ExceptionFingerprinter(clock=clock).fingerprint((boom_frame,))

        assert NAME_PATTERN.fullmatch(name)

    def test_artifact_name_helper(self):
        """Test the name helper."""
        assert artifact_name("0123456789", date(2024, 3, 5)) == (
            "exception--2024-03-05--0123456789.html"
        )

    def test_canonical_encoding_is_ascii_json(self):
        """Test the canonical encoding is compact ASCII JSON."""
        frame = ExceptionFrame(type_name="E", message="ü", line=1)

        assert canonical_encoding((frame,)) == b'[["E","\\u00fc",0,"",1,[]]]'


class TestCaptureChain:
    """Tests for capturing Python exceptions."""

    def test_captures_cause_outermost_first(self, raised_error: ValueError):
        """Test that the explicit cause follows the logged exception."""
        chain = capture_chain(raised_error)

        assert [frame.type_name for frame in chain] == ["ValueError", "KeyError"]
        assert chain[0].message == "bad input"

    def test_raise_location_and_stack(self, raised_error: ValueError):
        """Test file, line and stack come from the traceback."""
        frame = capture_chain(raised_error)[0]

        assert frame.file.endswith("conftest.py")
        assert frame.line > 0
        assert frame.stack
        assert frame.stack[-1].function == "raised_error"
        assert (frame.file, frame.line) == (frame.stack[-1].file, frame.stack[-1].line)

    def test_implicit_context_followed(self):
        """Test that implicit context is followed when not suppressed."""
        try:
            try:
                raise KeyError("inner")
            except KeyError:
                raise RuntimeError("outer")
        except RuntimeError as e:
            chain = capture_chain(e)

        assert [frame.type_name for frame in chain] == ["RuntimeError", "KeyError"]

    def test_suppressed_context_ignored(self):
        """Test that ``raise ... from None`` ends the chain."""
        try:
            try:
                raise KeyError("inner")
            except KeyError:
                raise RuntimeError("outer") from None
        except RuntimeError as e:
            chain = capture_chain(e)

        assert len(chain) == 1

    def test_errno_used_as_code(self):
        """Test that OSError.errno becomes the frame code."""
        frame = capture_frame(FileNotFoundError(2, "No such file"))

        assert frame.code == 2
        assert frame.type_name == "FileNotFoundError"

    def test_module_qualified_type_tag(self):
        """Test that non-builtin exceptions are tagged with their module."""

        class CustomError(Exception):
            pass

        frame = capture_frame(CustomError("x"))

        assert frame.type_name.startswith(f"{__name__}.")
        assert frame.type_name.endswith("CustomError")

    def test_unraised_exception_has_empty_location(self):
        """Test that an exception without traceback is captured with empty location."""
        frame = capture_frame(RuntimeError("never raised"))

        assert frame.file == ""
        assert frame.line == 0
        assert frame.stack == ()

    def test_cycle_stops(self):
        """Test that cyclic cause links terminate."""
        first = RuntimeError("first")
        second = ValueError("second")
        first.__cause__ = second
        second.__cause__ = first

        chain = capture_chain(first)

        assert [frame.message for frame in chain] == ["first", "second"]

    def test_depth_capped(self):
        """Test that very deep chains are truncated."""
        exc = RuntimeError("0")
        for i in range(1, 50):
            outer = RuntimeError(str(i))
            outer.__cause__ = exc
            exc = outer

        assert len(capture_chain(exc, max_depth=5)) == 5
        assert len(capture_chain(exc)) == 32

    def test_unreadable_message_encoded_empty(self):
        """Test that an exception whose __str__ fails is still captured."""

        class BrokenError(Exception):
            def __str__(self):
                raise RuntimeError("cannot render")

        frame = capture_frame(BrokenError())

        assert frame.message == ""
        assert frame.type_name.endswith("BrokenError")

    def test_name_for_is_stable(self, raised_error: ValueError):
        """Test naming the same exception twice on the same day."""
        fingerprinter = ExceptionFingerprinter()

        first = fingerprinter.name_for(raised_error, date(2024, 1, 1))
        second = fingerprinter.name_for(raised_error, date(2024, 1, 1))

        assert first == second
        assert NAME_PATTERN.fullmatch(first)
