"""Structured log records for configuration reads and writes.

The library never installs handlers. Records go to the ``lib_config_io``
logger, which carries a :class:`logging.NullHandler` until the host application
attaches its own. Each record has a ``context`` extra holding the bound trace id
plus the event fields, ready for a JSON formatter.

Contents
    - ``TRACE_ID`` / ``bind_trace_id``: correlation id stamped on every record.
    - ``get_logger``: the package logger.
    - ``log_debug`` / ``log_info``: progress records (``config_reading``,
      ``config_written``, ``payload_decoded`` ...).
    - ``make_event``: ``operation``/``path`` payload shared by those records.
    - ``log_failure``: ``config_<operation>_failed`` for a
      :class:`~lib_config_io.domain.errors.ContextualError` leaving the pipeline.
    - ``log_codec_failure``: ``codec_failed`` for a parser or serialiser error
      before it is wrapped.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any, Final, Mapping

from .domain.errors import ContextualError

TRACE_ID: ContextVar[str | None] = ContextVar("lib_config_io_trace_id", default=None)
"""Trace id copied into every record; ``None`` when nothing is bound."""

_LOGGER: Final[logging.Logger] = logging.getLogger("lib_config_io")
_LOGGER.addHandler(logging.NullHandler())


def get_logger() -> logging.Logger:
    """Return the package logger so applications can attach handlers."""

    return _LOGGER


def bind_trace_id(trace_id: str | None) -> None:
    """Bind *trace_id* for subsequent records in this context; ``None`` clears it.

    Examples
    --------
    >>> bind_trace_id('req-7')
    >>> TRACE_ID.get()
    'req-7'
    >>> bind_trace_id(None)
    >>> TRACE_ID.get() is None
    True
    """

    TRACE_ID.set(trace_id)


def log_debug(message: str, **fields: Any) -> None:
    _emit(logging.DEBUG, message, fields)


def log_info(message: str, **fields: Any) -> None:
    _emit(logging.INFO, message, fields)


def make_event(operation: str, path: str | None, payload: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Return the ``operation``/``path`` fields of a pipeline record plus *payload*.

    ``path`` is ``None`` for the in-memory ``dump``/``load`` operations.

    Examples
    --------
    >>> make_event("write", "/etc/app.json", {"format": "json"})
    {'operation': 'write', 'path': '/etc/app.json', 'format': 'json'}
    >>> make_event("load", None)
    {'operation': 'load', 'path': None}
    """

    return {"operation": operation, "path": path, **(payload or {})}


def log_failure(operation: str, path: str | None, error: ContextualError) -> None:
    """Record *error* as ``config_<operation>_failed``.

    The error travels under an ``error`` key (``kind``, ``message``,
    ``context``) so its context cannot clobber the event fields.

    Examples
    --------
    >>> from lib_config_io.domain.errors import NotFound
    >>> log_failure("read", "/etc/app.json", NotFound("missing", context={"step": "read"}))
    """

    _emit(logging.ERROR, f"config_{operation}_failed", make_event(operation, path, {"error": error.to_event()}))


def log_codec_failure(format_name: str, direction: str, exc: BaseException) -> None:
    """Record a raw parser or serialiser exception raised inside a codec.

    *direction* is ``"encode"`` or ``"decode"``.
    """

    _emit(
        logging.ERROR,
        "codec_failed",
        {"format": format_name, "direction": direction, "exception": type(exc).__name__, "reason": str(exc)},
    )


def _emit(level: int, message: str, fields: Mapping[str, Any]) -> None:
    _LOGGER.log(level, message, extra={"context": {"trace_id": TRACE_ID.get(), **fields}})


__all__ = [
    "TRACE_ID",
    "bind_trace_id",
    "get_logger",
    "log_codec_failure",
    "log_debug",
    "log_failure",
    "log_info",
    "make_event",
]
