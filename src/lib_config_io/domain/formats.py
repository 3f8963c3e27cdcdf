"""Closed set of textual encodings understood by the library.

Purpose
-------
Name the formats once so format selection, the codec capability table, and the
CLI share the same vocabulary. Whether a format can actually be used depends on
the codecs installed (see :mod:`lib_config_io.application.registry`).

Contents
--------
* :class:`Format` – ``JSON``/``TOML``/``YAML``/``XML`` with their extensions.
* :data:`DEFAULT_FORMAT` – format used when neither an explicit argument nor a
  recognised extension is available.
* :func:`format_for_path` – extension lookup used during format inference.
"""

from __future__ import annotations

from enum import Enum
from pathlib import PurePath
from typing import Final

from .errors import UnsupportedFormat


class Format(str, Enum):
    """Supported configuration encodings.

    Examples
    --------
    >>> Format.YAML.extension
    '.yaml'
    >>> Format.parse("yml") is Format.YAML
    True
    """

    JSON = "json"
    TOML = "toml"
    YAML = "yaml"
    XML = "xml"

    @property
    def extensions(self) -> tuple[str, ...]:
        """All suffixes mapped to this format, canonical one first."""

        return _EXTENSIONS[self]

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self][0]

    @classmethod
    def parse(cls, value: Format | str) -> Format:
        """Return the member named by *value* (name, value or extension, any case).

        Raises
        ------
        UnsupportedFormat
            When *value* names no known format.

        Examples
        --------
        >>> Format.parse(".JSON")
        <Format.JSON: 'json'>
        >>> Format.parse("ini")
        Traceback (most recent call last):
        ...
        lib_config_io.domain.errors.UnsupportedFormat: Unknown configuration format: ini
        """

        if isinstance(value, Format):
            return value
        alias = str(value).strip().lower()
        found = _BY_EXTENSION.get(alias if alias.startswith(".") else f".{alias}")
        if found is None:
            raise UnsupportedFormat(
                f"Unknown configuration format: {value}",
                context={"format": str(value), "known": ", ".join(member.value for member in cls)},
            )
        return found


_EXTENSIONS: Final[dict[Format, tuple[str, ...]]] = {
    Format.JSON: (".json",),
    Format.TOML: (".toml",),
    Format.YAML: (".yaml", ".yml"),
    Format.XML: (".xml",),
}

_BY_EXTENSION: Final[dict[str, Format]] = {
    suffix: member for member, suffixes in _EXTENSIONS.items() for suffix in suffixes
}

DEFAULT_FORMAT: Final[Format] = Format.JSON


def format_for_path(path: str) -> Format | None:
    """Return the format implied by *path*'s extension, or ``None`` when unrecognised.

    Examples
    --------
    >>> format_for_path("/etc/app/cfg.YML")
    <Format.YAML: 'yaml'>
    >>> format_for_path("cfg.dat") is None
    True
    """

    return _BY_EXTENSION.get(PurePath(path).suffix.lower())
