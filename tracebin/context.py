"""
Request-serving context tracking.

Senders created with ``detached=None`` upload in the background while a
request is being served, so that a user-facing response never waits on a
log upload. Web integrations mark the serving scope with
:func:`serving_request`.
"""

from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager

_serving_request: contextvars.ContextVar[bool] = contextvars.ContextVar(
    "tracebin_serving_request", default=False
)


def is_serving_request() -> bool:
    """Return True while inside a :func:`serving_request` scope."""
    return _serving_request.get()


@contextmanager
def serving_request() -> Iterator[None]:
    """
    Mark the enclosed code as handling a user-facing request.

    Example:
        >>> def wsgi_app(environ, start_response):
        ...     with serving_request():
        ...         return inner_app(environ, start_response)
    """
    token = _serving_request.set(True)
    try:
        yield
    finally:
        _serving_request.reset(token)
