"""Domain-level exception hierarchy.

Purpose
-------
Expose the single error currency shared by adapters, the composition root, and
consuming applications. Every failure raised across the public boundary is a
:class:`ContextualError` carrying a kind, a display-safe message, and a
structured diagnostic context.

Contents
--------
* :class:`ErrorKind` – closed set of failure categories.
* :class:`ContextualError` – base class holding ``kind``/``message``/``context``.
* :class:`UnsupportedFormat`, :class:`EncodeFailure`, :class:`DecodeFailure`,
  :class:`ShapeMismatch`, :class:`NotFound`, :class:`ReadFailure`,
  :class:`WriteFailure` – one subclass per kind so callers may use either
  ``except NotFound`` or ``error.kind is ErrorKind.NOT_FOUND``.
* :func:`merge_context` – ordered merge used when an error is re-wrapped.

System Role
-----------
Adapters raise these exceptions; :mod:`lib_config_io.core` re-wraps them with
the caller's :data:`DiagnosticContext` before they reach the caller.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, ClassVar, Mapping, TypeVar

DiagnosticContext = Mapping[str, Any]
"""Caller-supplied key/value data attached to every error of an operation."""

E = TypeVar("E", bound="ContextualError")


class ErrorKind(str, Enum):
    """Failure categories surfaced through :class:`ContextualError`."""

    UNSUPPORTED_FORMAT = "UnsupportedFormat"
    ENCODE_FAILURE = "EncodeFailure"
    DECODE_FAILURE = "DecodeFailure"
    SHAPE_MISMATCH = "ShapeMismatch"
    NOT_FOUND = "NotFound"
    READ_FAILURE = "ReadFailure"
    WRITE_FAILURE = "WriteFailure"


def merge_context(outer: DiagnosticContext | None, inner: DiagnosticContext | None) -> dict[str, Any]:
    """Merge two diagnostic contexts, letting *inner* win on key collisions.

    Keys keep insertion order: ``outer`` keys first, then keys only known to
    ``inner``.

    Examples
    --------
    >>> merge_context({"app": "demo", "path": "a"}, {"path": "b", "origin": "x"})
    {'app': 'demo', 'path': 'b', 'origin': 'x'}
    >>> merge_context(None, None)
    {}
    """

    merged: dict[str, Any] = dict(outer or {})
    merged.update(inner or {})
    return merged


class ContextualError(Exception):
    """Base type for all exceptions emitted by ``lib_config_io``.

    Why
    ----
    Callers need one catch-all type whose ``kind`` can be matched, whose
    ``message`` can be displayed directly, and whose ``context`` can be shipped
    to structured logs.

    Parameters
    ----------
    message:
        Human-readable description, safe for end-user display.
    kind:
        Failure category. Subclasses supply it; the base class requires it.
    context:
        Diagnostic key/value pairs. Copied into an immutable proxy.

    Examples
    --------
    >>> err = ContextualError("boom", kind=ErrorKind.READ_FAILURE, context={"path": "/tmp/x"})
    >>> err.kind.value, err.message, dict(err.context)
    ('ReadFailure', 'boom', {'path': '/tmp/x'})
    """

    default_kind: ClassVar[ErrorKind | None] = None

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind | None = None,
        context: DiagnosticContext | None = None,
    ) -> None:
        resolved = kind if kind is not None else type(self).default_kind
        if resolved is None:
            raise TypeError("ContextualError requires an error kind")
        super().__init__(message)
        self._kind = resolved
        self._message = message
        self._context: Mapping[str, Any] = MappingProxyType(dict(context or {}))

    @classmethod
    def new(cls, kind: ErrorKind, message: str, context: DiagnosticContext | None = None) -> ContextualError:
        """Build the subclass registered for *kind*.

        Examples
        --------
        >>> type(ContextualError.new(ErrorKind.NOT_FOUND, "missing")).__name__
        'NotFound'
        """

        error_type = _ERROR_TYPES.get(kind, ContextualError)
        return error_type(message, kind=kind, context=context)

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def message(self) -> str:
        return self._message

    @property
    def context(self) -> Mapping[str, Any]:
        return self._context

    def with_context(self: E, outer: DiagnosticContext | None) -> E:
        """Return a copy whose context merges *outer* underneath this error's own keys.

        Why
        ----
        A higher layer re-wrapping a lower-layer failure must keep every
        diagnostic key from both layers; the inner, more specific value wins.

        Examples
        --------
        >>> inner = NotFound("missing", context={"path": "/etc/app.json"})
        >>> outer = inner.with_context({"request": "42", "path": "app.json"})
        >>> dict(outer.context)
        {'request': '42', 'path': '/etc/app.json'}
        >>> type(outer) is NotFound
        True
        """

        clone = type(self)(self._message, kind=self._kind, context=merge_context(outer, self._context))
        clone.__cause__ = self.__cause__
        return clone

    def to_event(self) -> dict[str, Any]:
        """Render the error as a mapping suitable for structured logging.

        Examples
        --------
        >>> NotFound("missing", context={"path": "a.json"}).to_event()
        {'kind': 'NotFound', 'message': 'missing', 'context': {'path': 'a.json'}}
        """

        return {"kind": self._kind.value, "message": self._message, "context": dict(self._context)}

    def __str__(self) -> str:
        return self._message

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self._kind.value!r}, message={self._message!r}, context={dict(self._context)!r})"


class UnsupportedFormat(ContextualError):
    """Raised when a format is unknown or its codec is not installed."""

    default_kind = ErrorKind.UNSUPPORTED_FORMAT


class EncodeFailure(ContextualError):
    """Raised when a value cannot be turned into bytes by the selected codec."""

    default_kind = ErrorKind.ENCODE_FAILURE


class DecodeFailure(ContextualError):
    """Raised when bytes are not valid for the selected codec.

    Typical Sources
    ---------------
    :mod:`json`, :mod:`tomllib`, :mod:`yaml` and :mod:`lxml.etree` parse errors,
    as well as non UTF-8 payloads.
    """

    default_kind = ErrorKind.DECODE_FAILURE


class ShapeMismatch(ContextualError):
    """Raised when a decoded tree does not fit the requested target type.

    The context names the offending ``field`` together with the ``expected``
    and ``found`` kinds.
    """

    default_kind = ErrorKind.SHAPE_MISMATCH


class NotFound(ContextualError):
    """Represents a missing read target."""

    default_kind = ErrorKind.NOT_FOUND


class ReadFailure(ContextualError):
    """I/O-level failure while reading (permissions, directories, ...)."""

    default_kind = ErrorKind.READ_FAILURE


class WriteFailure(ContextualError):
    """I/O-level failure while writing (permissions, disk full, missing parent, ...)."""

    default_kind = ErrorKind.WRITE_FAILURE


_ERROR_TYPES: Mapping[ErrorKind, type[ContextualError]] = MappingProxyType(
    {error_type.default_kind: error_type for error_type in ContextualError.__subclasses__() if error_type.default_kind}
)
