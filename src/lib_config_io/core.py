"""Composition root for ``lib_config_io``.

Purpose
-------
Provide the entry points that orchestrate path expansion, format selection,
value bridging, encoding, and file access. Every failure leaves this module as a
:class:`~lib_config_io.domain.errors.ContextualError` carrying the caller's
diagnostic context plus the step that failed.

Contents
--------
* :func:`write_config` – typed value → file.
* :func:`read_config` – file → typed value (or generic tree).
* :func:`dumps_config` / :func:`loads_config` – the same pipelines in memory.
* :func:`default_registry` – capability table of the installed codecs.

System Role
-----------
Connects adapters (path resolver, codecs, local file store) with the bridge
while emitting structured observability signals. Callers may inject their own
``registry``, ``resolver`` or ``store``; defaults are shared, immutable
instances, so concurrent calls never share mutable state. Concurrent writes to
the *same* path are not coordinated here.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, TypeVar, Union, overload

from .adapters.codecs.structured import available_codecs
from .adapters.filesystem.local import LocalFileStore
from .adapters.path_resolvers.default import ExpandingPathResolver
from .application.bridge import from_generic, to_generic
from .application.ports import FileStore, PathResolver
from .application.registry import FormatRegistry
from .domain.errors import ContextualError, DecodeFailure, DiagnosticContext, merge_context
from .domain.formats import Format
from .domain.values import GenericValue
from .observability import log_debug, log_failure, log_info, make_event

T = TypeVar("T")

PathLike = Union[str, "os.PathLike[str]"]

_IN_MEMORY = "<memory>"

# Built once from whatever codec libraries are installed; read-only afterwards.
_DEFAULT_REGISTRY = FormatRegistry(available_codecs())
_DEFAULT_RESOLVER = ExpandingPathResolver()
_DEFAULT_STORE = LocalFileStore()


def _payload_bytes(payload: bytes | str, fmt: Format) -> bytes:
    if not isinstance(payload, str):
        return payload
    try:
        return payload.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise DecodeFailure(
            f"Text payload is not valid Unicode: {exc.reason}",
            context={"format": fmt.value, "origin": str(exc), "offset": exc.start},
        ) from exc


def default_registry() -> FormatRegistry:
    """Return the shared registry of installed codecs.

    Examples
    --------
    >>> Format.JSON in default_registry().available()
    True
    """

    return _DEFAULT_REGISTRY


class _Pipeline:
    """Track the current step of one operation and contextualise its failures."""

    def __init__(self, operation: str, context: DiagnosticContext | None) -> None:
        self.operation = operation
        self.caller = dict(context or {})
        self.detail: dict[str, Any] = {"operation": operation}

    @contextmanager
    def step(self, name: str) -> Iterator[None]:
        self.detail["step"] = name
        try:
            yield
        except ContextualError as exc:
            error = exc.with_context(merge_context(self.caller, self.detail))
            log_failure(self.operation, self.detail.get("path"), error)
            raise error from exc.__cause__


def write_config(
    path: PathLike,
    value: Any,
    *,
    format: Format | str | None = None,
    context: DiagnosticContext | None = None,
    registry: FormatRegistry | None = None,
    resolver: PathResolver | None = None,
    store: FileStore | None = None,
) -> Path:
    """Serialise *value* and write it to *path*.

    Why
    ----
    Callers persist typed configuration without choosing a codec by hand.

    What
    ----
    Expands the path, picks the format (``format`` → extension → JSON), bridges
    the value to a generic tree, encodes it, and atomically replaces the file.

    Parameters
    ----------
    path:
        Target path; ``~`` and ``$VAR``/``${VAR}`` are expanded.
    value:
        Dataclass, mapping, model or primitive tree to persist.
    format:
        Explicit :class:`Format` (or its name) overriding extension inference.
    context:
        Diagnostic key/value pairs attached to any raised error.

    Returns
    -------
    Path
        The expanded path that was written.

    Raises
    ------
    ContextualError
        ``UnsupportedFormat``, ``EncodeFailure`` or ``WriteFailure``.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> target = write_config(f"{tmp.name}/locker-db.json", {"user": "john", "password": "smith"})
    >>> target.read_text(encoding="utf-8")
    '{"user":"john","password":"smith"}'
    >>> tmp.cleanup()
    """

    registry = registry or _DEFAULT_REGISTRY
    resolver = resolver or _DEFAULT_RESOLVER
    store = store or _DEFAULT_STORE
    pipeline = _Pipeline("write", context)
    raw_path = os.fspath(path)
    pipeline.detail["raw_path"] = raw_path

    with pipeline.step("resolve_path"):
        resolved = resolver.resolve(raw_path)
    pipeline.detail["path"] = resolved
    with pipeline.step("resolve_format"):
        fmt = registry.resolve_format(format, resolved)
    pipeline.detail["format"] = fmt.value
    log_info("config_writing", **make_event("write", resolved, {"format": fmt.value}))

    with pipeline.step("bridge"):
        tree = to_generic(value)
    with pipeline.step("encode"):
        payload = registry.encode(fmt, tree)
    with pipeline.step("write"):
        store.write_bytes(resolved, payload)

    log_info("config_written", **make_event("write", resolved, {"format": fmt.value, "size": len(payload)}))
    return Path(resolved)


@overload
def read_config(
    path: PathLike,
    target: type[T],
    *,
    format: Format | str | None = ...,
    context: DiagnosticContext | None = ...,
    strict: bool = ...,
    registry: FormatRegistry | None = ...,
    resolver: PathResolver | None = ...,
    store: FileStore | None = ...,
) -> T: ...


@overload
def read_config(
    path: PathLike,
    target: None = ...,
    *,
    format: Format | str | None = ...,
    context: DiagnosticContext | None = ...,
    strict: bool = ...,
    registry: FormatRegistry | None = ...,
    resolver: PathResolver | None = ...,
    store: FileStore | None = ...,
) -> GenericValue: ...


def read_config(
    path: PathLike,
    target: Any = None,
    *,
    format: Format | str | None = None,
    context: DiagnosticContext | None = None,
    strict: bool = False,
    registry: FormatRegistry | None = None,
    resolver: PathResolver | None = None,
    store: FileStore | None = None,
) -> Any:
    """Read *path* and return its content as *target*.

    What
    ----
    Expands the path, reads the bytes, picks the format (``format`` →
    extension → JSON), decodes, and bridges the tree into *target*. With
    ``target=None`` the generic tree is returned unchanged.

    Parameters
    ----------
    strict:
        Reject entries the target dataclass does not declare.

    Raises
    ------
    ContextualError
        ``NotFound``, ``ReadFailure``, ``UnsupportedFormat``,
        ``DecodeFailure`` or ``ShapeMismatch``.

    Examples
    --------
    >>> from tempfile import TemporaryDirectory
    >>> tmp = TemporaryDirectory()
    >>> _ = Path(tmp.name, "app.json").write_text('{"debug": true}', encoding="utf-8")
    >>> read_config(f"{tmp.name}/app.json")
    {'debug': True}
    >>> read_config(f"{tmp.name}/missing.json", context={"request": "42"})
    Traceback (most recent call last):
    ...
    lib_config_io.domain.errors.NotFound: Configuration file not found: ...
    >>> tmp.cleanup()
    """

    registry = registry or _DEFAULT_REGISTRY
    resolver = resolver or _DEFAULT_RESOLVER
    store = store or _DEFAULT_STORE
    pipeline = _Pipeline("read", context)
    raw_path = os.fspath(path)
    pipeline.detail["raw_path"] = raw_path

    with pipeline.step("resolve_path"):
        resolved = resolver.resolve(raw_path)
    pipeline.detail["path"] = resolved
    log_info("config_reading", **make_event("read", resolved))

    with pipeline.step("read"):
        payload = store.read_bytes(resolved)
    with pipeline.step("resolve_format"):
        fmt = registry.resolve_format(format, resolved)
    pipeline.detail["format"] = fmt.value
    with pipeline.step("decode"):
        tree = registry.decode(fmt, payload)
    with pipeline.step("bridge"):
        result = tree if target is None else from_generic(tree, target, strict=strict)

    log_info("config_read", **make_event("read", resolved, {"format": fmt.value, "size": len(payload)}))
    return result


def dumps_config(
    value: Any,
    *,
    format: Format | str | None = None,
    context: DiagnosticContext | None = None,
    registry: FormatRegistry | None = None,
) -> bytes:
    """Return *value* encoded as bytes without touching the filesystem.

    Examples
    --------
    >>> dumps_config({"name": "demo", "port": 8080})
    b'{"name":"demo","port":8080}'
    """

    registry = registry or _DEFAULT_REGISTRY
    pipeline = _Pipeline("dump", context)
    with pipeline.step("resolve_format"):
        fmt = registry.resolve_format(format, _IN_MEMORY)
    pipeline.detail["format"] = fmt.value
    with pipeline.step("bridge"):
        tree = to_generic(value)
    with pipeline.step("encode"):
        payload = registry.encode(fmt, tree)
    log_debug("config_dumped", **make_event("dump", None, {"format": fmt.value, "size": len(payload)}))
    return payload


@overload
def loads_config(
    payload: bytes | str,
    target: type[T],
    *,
    format: Format | str | None = ...,
    context: DiagnosticContext | None = ...,
    strict: bool = ...,
    registry: FormatRegistry | None = ...,
) -> T: ...


@overload
def loads_config(
    payload: bytes | str,
    target: None = ...,
    *,
    format: Format | str | None = ...,
    context: DiagnosticContext | None = ...,
    strict: bool = ...,
    registry: FormatRegistry | None = ...,
) -> GenericValue: ...


def loads_config(
    payload: bytes | str,
    target: Any = None,
    *,
    format: Format | str | None = None,
    context: DiagnosticContext | None = None,
    strict: bool = False,
    registry: FormatRegistry | None = None,
) -> Any:
    """Decode an in-memory document (text or UTF-8 bytes) into *target*.

    Examples
    --------
    >>> loads_config('{"user": "john"}', dict)
    {'user': 'john'}
    """

    registry = registry or _DEFAULT_REGISTRY
    pipeline = _Pipeline("load", context)
    with pipeline.step("resolve_format"):
        fmt = registry.resolve_format(format, _IN_MEMORY)
    pipeline.detail["format"] = fmt.value
    with pipeline.step("decode"):
        data = _payload_bytes(payload, fmt)
        tree = registry.decode(fmt, data)
    with pipeline.step("bridge"):
        result = tree if target is None else from_generic(tree, target, strict=strict)
    log_debug("config_loaded", **make_event("load", None, {"format": fmt.value, "size": len(data)}))
    return result


__all__ = [
    "default_registry",
    "dumps_config",
    "loads_config",
    "read_config",
    "write_config",
]
