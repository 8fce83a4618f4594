"""
Minimal HTML rendering of exception reports.

Applications with a richer error page renderer can pass their own
callable ``(exception, path) -> None`` to the processor instead.
"""

from __future__ import annotations

import html
import traceback
from datetime import datetime, timezone
from pathlib import Path


class HtmlReportRenderer:
    """Write an exception and its causes as a standalone HTML page."""

    def __call__(self, exc: BaseException, path: str | Path) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render(exc), encoding="utf-8")

    def render(self, exc: BaseException) -> str:
        title = html.escape(f"{type(exc).__name__}: {exc}")
        body = html.escape("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
        generated = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S UTC")
        return (
            "<!DOCTYPE html>\n"
            "<html>\n<head>\n<meta charset=\"utf-8\">\n"
            f"<title>{title}</title>\n"
            "</head>\n<body>\n"
            f"<h1>{title}</h1>\n"
            f"<p>Generated {generated}</p>\n"
            f"<pre>{body}</pre>\n"
            "</body>\n</html>\n"
        )
