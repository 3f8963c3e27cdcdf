"""Format selection and codec dispatch.

Purpose
-------
Hold the capability table of installed codecs and decide which format a call
uses: the explicit argument wins, else the path extension, else the default.
A format whose codec is missing is reported as ``UnsupportedFormat`` at the
point of use; the registry never substitutes another format.

Contents
--------
* :class:`FormatRegistry` – read-only ``Format → Codec`` table plus
  ``resolve_format``/``encode``/``decode``.

System Role
-----------
Built once by :func:`lib_config_io.core.default_registry` from the codecs that
:mod:`lib_config_io.adapters.codecs.structured` could import. The table is an
immutable mapping, so a registry may be shared between threads.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping

from ..domain.errors import UnsupportedFormat
from ..domain.formats import DEFAULT_FORMAT, Format, format_for_path
from ..domain.values import GenericValue
from .ports import Codec


class FormatRegistry:
    """Map formats to codecs and resolve the format of a call.

    Parameters
    ----------
    codecs:
        Codec instances; each registers under its ``format`` attribute.
    default:
        Format used when neither an explicit format nor a known extension is
        available.

    Examples
    --------
    >>> from lib_config_io.adapters.codecs.structured import JSONCodec
    >>> registry = FormatRegistry([JSONCodec()])
    >>> registry.resolve_format(None, "settings.dat")
    <Format.JSON: 'json'>
    >>> registry.decode(Format.JSON, b'{"debug": true}')
    {'debug': True}
    """

    def __init__(self, codecs: Iterable[Codec], *, default: Format = DEFAULT_FORMAT) -> None:
        self._codecs: Mapping[Format, Codec] = MappingProxyType({codec.format: codec for codec in codecs})
        self._default = default

    @property
    def default(self) -> Format:
        return self._default

    def available(self) -> tuple[Format, ...]:
        """Return the formats with an installed codec, in declaration order."""

        return tuple(member for member in Format if member in self._codecs)

    def supports(self, fmt: Format | str) -> bool:
        try:
            return Format.parse(fmt) in self._codecs
        except UnsupportedFormat:
            return False

    def codec(self, fmt: Format | str) -> Codec:
        """Return the codec for *fmt* or raise :class:`UnsupportedFormat`."""

        member = Format.parse(fmt)
        codec = self._codecs.get(member)
        if codec is None:
            raise UnsupportedFormat(
                f"{member.name} support is not installed",
                context={"format": member.value, "available": self._available_text()},
            )
        return codec

    def resolve_format(self, explicit: Format | str | None, path: str) -> Format:
        """Return the format for a call on *path*.

        Precedence: *explicit* → extension of *path* → :attr:`default`.

        Raises
        ------
        UnsupportedFormat
            When the chosen format is unknown or has no installed codec.

        Examples
        --------
        >>> from lib_config_io.adapters.codecs.structured import JSONCodec
        >>> registry = FormatRegistry([JSONCodec()])
        >>> registry.resolve_format("json", "cfg.yaml")
        <Format.JSON: 'json'>
        >>> registry.resolve_format(None, "cfg.xml")
        Traceback (most recent call last):
        ...
        lib_config_io.domain.errors.UnsupportedFormat: XML support is not installed (cfg.xml)
        """

        if explicit is not None:
            member = Format.parse(explicit)
            source = "explicit"
        else:
            inferred = format_for_path(path)
            member = inferred if inferred is not None else self._default
            source = "extension" if inferred is not None else "default"
        if member not in self._codecs:
            raise UnsupportedFormat(
                f"{member.name} support is not installed ({path})",
                context={"format": member.value, "path": path, "source": source, "available": self._available_text()},
            )
        return member

    def encode(self, fmt: Format | str, value: GenericValue) -> bytes:
        return self.codec(fmt).encode(value)

    def decode(self, fmt: Format | str, payload: bytes) -> GenericValue:
        return self.codec(fmt).decode(payload)

    def _available_text(self) -> str:
        return ", ".join(member.value for member in self.available())
