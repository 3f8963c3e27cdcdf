"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts that adapters must satisfy so the composition
root can orchestrate reads and writes without depending on concrete
implementations.

Contents
--------
* :class:`PathResolver` – expands a raw path string into a filesystem path.
* :class:`Codec` – converts between a generic tree and bytes for one format.
* :class:`FileStore` – reads and writes whole files as bytes.

System Role
-----------
These protocols enforce Dependency Inversion (DIP). Each adapter implements one
protocol; tests and callers may inject their own implementations into
:func:`lib_config_io.core.read_config` and :func:`lib_config_io.core.write_config`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..domain.formats import Format
from ..domain.values import GenericValue


@runtime_checkable
class PathResolver(Protocol):
    """Expand home-directory and environment references in a path.

    Why
    ----
    Keep environment lookups out of the I/O pipeline so path handling stays a
    pure, replaceable function.
    """

    def resolve(self, raw_path: str) -> str:
        """Return *raw_path* with ``~`` and ``$VAR``/``${VAR}`` tokens expanded."""


@runtime_checkable
class Codec(Protocol):
    """Encode generic trees to bytes and back for a single :class:`Format`.

    Implementations raise :class:`~lib_config_io.domain.errors.EncodeFailure`
    or :class:`~lib_config_io.domain.errors.DecodeFailure`, never the
    underlying library's exceptions.
    """

    format: Format

    def encode(self, value: GenericValue) -> bytes:
        """Return the standard textual encoding of *value* as UTF-8 bytes."""

    def decode(self, payload: bytes) -> GenericValue:
        """Parse *payload* into a generic tree."""


@runtime_checkable
class FileStore(Protocol):
    """Whole-file byte access.

    Why
    ----
    Confine side effects to one adapter so the pipeline can be exercised
    in-memory and failures map onto ``NotFound``/``ReadFailure``/``WriteFailure``.
    """

    def read_bytes(self, path: str) -> bytes:
        """Return the content of *path*."""

    def write_bytes(self, path: str, payload: bytes) -> None:
        """Replace the content of *path* with *payload*, creating it if absent."""
