"""Logging for snippetgen: component-tagged handlers and per-request context.

Every record passing through the ``snippetgen`` handlers carries a
``request`` attribute naming the identifier being generated, or ``-`` outside
a generation. The value lives in a context variable, so it follows the request
into ``asyncio`` tasks and ``asyncio.to_thread`` workers.
"""

from __future__ import annotations

import contextlib
import contextvars
import logging
from pathlib import Path
from typing import Iterator

_LOGGER_NAME = "snippetgen"
_NO_REQUEST = "-"
# One request per process: console lines need no request tag.
_PLAIN_COMPONENTS = ("", "cli", "generate")

_current_request: contextvars.ContextVar[str] = contextvars.ContextVar(
    "snippetgen_request", default=_NO_REQUEST
)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the snippetgen hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def current_request() -> str:
    return _current_request.get()


@contextlib.contextmanager
def request_context(identifier: str) -> Iterator[None]:
    """Tag log records emitted inside the block with ``identifier``."""
    token = _current_request.set(identifier or _NO_REQUEST)
    try:
        yield
    finally:
        _current_request.reset(token)


class RequestContextFilter(logging.Filter):
    """Copies the active request identifier onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request = _current_request.get()
        return True


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    component: str = "cli",
) -> logging.Logger:
    """Install console (and optional file) handlers for one CLI or service process.

    ``component`` labels console lines, e.g. ``[snippetgen:serve]``. The CLI's
    ``generate`` command keeps the bare ``[snippetgen]`` prefix.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    tagged = component not in _PLAIN_COMPONENTS
    prefix = f"{_LOGGER_NAME}:{component}" if tagged else _LOGGER_NAME
    console_format = (
        f"[{prefix}] %(levelname)s [%(request)s] %(message)s"
        if tagged
        else f"[{prefix}] %(levelname)s %(message)s"
    )
    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.addFilter(RequestContextFilter())
    stream_handler.setFormatter(logging.Formatter(console_format))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.addFilter(RequestContextFilter())
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s [%(request)s]: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = [
    "RequestContextFilter",
    "configure_logging",
    "current_request",
    "get_logger",
    "request_context",
]
