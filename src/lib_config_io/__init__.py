"""Public package surface for ``lib_config_io``.

Read and write typed configuration values as JSON, TOML, YAML or XML files.
The functions re-exported here form the stable API; adapters and the value
bridge stay importable from their modules for callers that inject their own
registry, resolver or file store.
"""

from __future__ import annotations

from .adapters.path_resolvers.default import resolve_path
from .application.bridge import from_generic, to_generic
from .application.registry import FormatRegistry
from .core import default_registry, dumps_config, loads_config, read_config, write_config
from .domain.errors import (
    ContextualError,
    DecodeFailure,
    DiagnosticContext,
    EncodeFailure,
    ErrorKind,
    NotFound,
    ReadFailure,
    ShapeMismatch,
    UnsupportedFormat,
    WriteFailure,
)
from .domain.formats import Format
from .domain.values import GenericValue, ValueKind
from .observability import bind_trace_id, get_logger

__all__ = [
    "ContextualError",
    "DecodeFailure",
    "DiagnosticContext",
    "EncodeFailure",
    "ErrorKind",
    "Format",
    "FormatRegistry",
    "GenericValue",
    "NotFound",
    "ReadFailure",
    "ShapeMismatch",
    "UnsupportedFormat",
    "ValueKind",
    "WriteFailure",
    "bind_trace_id",
    "default_registry",
    "dumps_config",
    "from_generic",
    "get_logger",
    "loads_config",
    "read_config",
    "resolve_path",
    "to_generic",
    "write_config",
]
