"""Structured text codecs.

Purpose
-------
Convert generic value trees to bytes and back. Adapters are small wrappers
around ``json``, ``tomllib``/``tomli_w``, ``yaml.safe_load``/``safe_dump`` and
``lxml.etree`` so error mapping and observability live in one place.

Contents
--------
* :class:`BaseCodec` – shared failure mapping and tree normalisation.
* :class:`JSONCodec` – always available.
* :class:`TOMLCodec` – available when ``tomli-w`` is installed.
* :class:`YAMLCodec` – available when PyYAML is installed.
* :class:`XMLCodec` – available when ``lxml`` is installed.
* :func:`available_codecs` – instances for every codec whose library imported.

System Role
-----------
Feeds :class:`lib_config_io.application.registry.FormatRegistry`. Optional
libraries are imported once, at module load; a missing one simply leaves its format
out of the capability table.
"""

from __future__ import annotations

import json
import re
from typing import Any

try:  # Python >= 3.11
    import tomllib
except ModuleNotFoundError:  # pragma: no cover - fallback for <3.11
    import tomli as tomllib  # type: ignore[no-redef]

try:
    import tomli_w  # type: ignore[import-not-found]
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    tomli_w = None  # type: ignore[assignment]

try:
    import yaml  # type: ignore[import-not-found]
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    yaml = None  # type: ignore[assignment]

try:
    from lxml import etree  # type: ignore[import-not-found]
except ModuleNotFoundError:  # pragma: no cover - optional dependency
    etree = None  # type: ignore[assignment]

from ...domain.errors import DecodeFailure, EncodeFailure, UnsupportedFormat
from ...domain.formats import Format
from ...domain.values import GenericValue, ValueKind, kind_of, normalize
from ...observability import log_codec_failure, log_debug


class BaseCodec:
    """Common utilities shared by the structured codecs."""

    format: Format
    requires: str | None = None

    def _require(self, module: Any) -> None:
        """Raise :class:`UnsupportedFormat` when the backing library is missing."""

        if module is None:
            raise UnsupportedFormat(
                f"{self.requires} is required for {self.format.name} support",
                context={"format": self.format.value, "requires": self.requires},
            )

    def _encode_failure(self, exc: BaseException) -> EncodeFailure:
        log_codec_failure(self.format.value, "encode", exc)
        return EncodeFailure(
            f"Cannot encode value as {self.format.name}: {exc}",
            context={"format": self.format.value, "origin": str(exc)},
        )

    def _decode_failure(self, exc: BaseException) -> DecodeFailure:
        log_codec_failure(self.format.value, "decode", exc)
        return DecodeFailure(
            f"Invalid {self.format.name} content: {exc}",
            context={"format": self.format.value, "origin": str(exc)},
        )

    def _normalize(self, data: Any) -> GenericValue:
        """Turn parser output into a pure tree, mapping leftovers to ``DecodeFailure``."""

        try:
            tree = normalize(data)
        except (TypeError, RecursionError) as exc:
            raise self._decode_failure(exc) from exc
        log_debug("payload_decoded", format=self.format.value, kind=kind_of(tree).value)
        return tree


class JSONCodec(BaseCodec):
    """Compact UTF-8 JSON; key order follows the tree.

    Examples
    --------
    >>> JSONCodec().encode({"user": "john", "port": 5432})
    b'{"user":"john","port":5432}'
    """

    format = Format.JSON

    def __init__(self, *, indent: int | None = None) -> None:
        self._indent = indent

    def encode(self, value: GenericValue) -> bytes:
        separators = (",", ":") if self._indent is None else (",", ": ")
        try:
            text = json.dumps(value, indent=self._indent, separators=separators, ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError, RecursionError) as exc:
            raise self._encode_failure(exc) from exc
        return text.encode("utf-8")

    def decode(self, payload: bytes) -> GenericValue:
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as exc:
            raise self._decode_failure(exc) from exc
        return self._normalize(data)


class TOMLCodec(BaseCodec):
    """TOML documents; reading uses the standard library parser.

    TOML has no null, so ``None`` entries of maps are left out when writing and
    come back as absent keys. ``None`` inside arrays cannot be written.
    """

    format = Format.TOML
    requires = "tomli-w"

    def __init__(self) -> None:
        self._require(tomli_w)

    def encode(self, value: GenericValue) -> bytes:
        if not isinstance(value, dict):
            raise EncodeFailure(
                "TOML documents must be a map at the top level",
                context={"format": self.format.value, "found": _kind_text(value)},
            )
        try:
            text = tomli_w.dumps(_drop_nulls(value))
        except (TypeError, ValueError, RecursionError) as exc:
            raise self._encode_failure(exc) from exc
        return text.encode("utf-8")

    def decode(self, payload: bytes) -> GenericValue:
        try:
            data = tomllib.loads(payload.decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError, RecursionError) as exc:
            raise self._decode_failure(exc) from exc
        return self._normalize(data)


class YAMLCodec(BaseCodec):
    """YAML documents through PyYAML's safe loader and dumper."""

    format = Format.YAML
    requires = "PyYAML"

    def __init__(self) -> None:
        self._require(yaml)

    def encode(self, value: GenericValue) -> bytes:
        try:
            text = yaml.safe_dump(value, sort_keys=False, allow_unicode=True, default_flow_style=False)
        except (yaml.YAMLError, RecursionError) as exc:
            raise self._encode_failure(exc) from exc
        return text.encode("utf-8")

    def decode(self, payload: bytes) -> GenericValue:
        try:
            data = yaml.safe_load(payload)
        except (yaml.YAMLError, RecursionError) as exc:
            raise self._decode_failure(exc) from exc
        if data is None:
            data = {}
        return self._normalize(data)


_XML_ROOT = "config"
_XML_ITEM = "item"
_XML_ENTRY = "entry"
_CLARK_OR_PREFIX = re.compile(r"[{}:]")


class XMLCodec(BaseCodec):
    """XML documents with ``type`` attributes describing non-string nodes.

    Map entries become child elements (``<entry key="...">`` when the key is not
    a valid element name), sequences hold ``<item>`` children, and every node
    other than a string carries ``type="map|sequence|integer|float|boolean|null"``
    so the tree survives a round trip. Untyped documents decode leaves as
    strings, parents as maps, and repeated sibling tags as sequences.

    Examples
    --------
    >>> codec = XMLCodec()  # doctest: +SKIP
    >>> codec.decode(codec.encode({"port": 8080, "hosts": ["a"]}))  # doctest: +SKIP
    {'port': 8080, 'hosts': ['a']}
    """

    format = Format.XML
    requires = "lxml"

    def __init__(self, *, root_tag: str = _XML_ROOT) -> None:
        self._require(etree)
        self._root_tag = root_tag

    def encode(self, value: GenericValue) -> bytes:
        try:
            root = etree.Element(self._root_tag)
            _fill_element(root, value)
            return etree.tostring(root, xml_declaration=True, encoding="utf-8", pretty_print=True)
        except (TypeError, ValueError, RecursionError) as exc:
            raise self._encode_failure(exc) from exc

    def decode(self, payload: bytes) -> GenericValue:
        parser = etree.XMLParser(resolve_entities=False, no_network=True, remove_comments=True, remove_pis=True)
        try:
            root = etree.fromstring(payload, parser=parser)
            data = _element_value(root)
        except (etree.XMLSyntaxError, ValueError, RecursionError) as exc:
            raise self._decode_failure(exc) from exc
        return self._normalize(data)


def _drop_nulls(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _drop_nulls(item) for key, item in value.items() if item is not None}
    if isinstance(value, list):
        return [_drop_nulls(item) for item in value]
    return value


def _kind_text(value: Any) -> str:
    try:
        return kind_of(value).value
    except TypeError:
        return type(value).__name__


def _fill_element(element: Any, value: GenericValue) -> None:
    kind = kind_of(value)
    if kind is ValueKind.MAP:
        element.set("type", kind.value)
        for key, item in value.items():  # type: ignore[union-attr]
            _fill_element(_child_for_key(element, key), item)
    elif kind is ValueKind.SEQUENCE:
        element.set("type", kind.value)
        for item in value:  # type: ignore[union-attr]
            _fill_element(etree.SubElement(element, _XML_ITEM), item)
    elif kind is ValueKind.STRING:
        element.text = value
    elif kind is ValueKind.NULL:
        element.set("type", kind.value)
    else:
        element.set("type", kind.value)
        element.text = _scalar_text(value)


def _child_for_key(parent: Any, key: str) -> Any:
    # lxml reads "{ns}tag" as a namespaced name and "p:tag" as a prefixed one.
    if not _CLARK_OR_PREFIX.search(key):
        try:
            return etree.SubElement(parent, key)
        except ValueError:
            log_debug("xml_key_as_entry", key=key)
    child = etree.SubElement(parent, _XML_ENTRY)
    child.set("key", key)
    return child


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return repr(value)
    return str(value)


def _element_value(element: Any) -> Any:
    declared = element.get("type")
    children = [child for child in element if isinstance(child.tag, str)]
    if declared == ValueKind.MAP.value or (declared is None and children):
        return _map_value(children, gather_repeats=declared is None)
    if declared == ValueKind.SEQUENCE.value:
        return [_element_value(child) for child in children]
    text = element.text or ""
    if declared is None or declared == ValueKind.STRING.value:
        return text
    if declared == ValueKind.NULL.value:
        return None
    if declared == ValueKind.INTEGER.value:
        return int(text.strip())
    if declared == ValueKind.FLOAT.value:
        return float(text.strip())
    if declared == ValueKind.BOOLEAN.value:
        return _parse_bool(text)
    raise ValueError(f"Unknown type attribute {declared!r} on <{element.tag}>")


def _map_value(children: list[Any], *, gather_repeats: bool) -> dict[str, Any]:
    result: dict[str, Any] = {}
    repeated: set[str] = set()
    for child in children:
        key = child.get("key") if child.tag == _XML_ENTRY and child.get("key") is not None else child.tag
        value = _element_value(child)
        if gather_repeats and key in result:
            if key not in repeated:
                result[key] = [result[key]]
                repeated.add(key)
            result[key].append(value)
        else:
            result[key] = value
    return result


def _parse_bool(text: str) -> bool:
    lowered = text.strip().lower()
    if lowered in {"true", "1"}:
        return True
    if lowered in {"false", "0"}:
        return False
    raise ValueError(f"Invalid boolean literal {text!r}")


def available_codecs() -> list[BaseCodec]:
    """Return one instance of every codec whose library could be imported.

    Examples
    --------
    >>> available_codecs()[0].format
    <Format.JSON: 'json'>
    """

    codecs: list[BaseCodec] = [JSONCodec()]
    if tomli_w is not None:
        codecs.append(TOMLCodec())
    if yaml is not None:
        codecs.append(YAMLCodec())
    if etree is not None:
        codecs.append(XMLCodec())
    return codecs
