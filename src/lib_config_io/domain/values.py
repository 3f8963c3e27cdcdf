"""Self-describing intermediate value tree.

Purpose
-------
Decouple caller types from codecs. The bridge turns typed values into a
:data:`GenericValue` tree and codecs only ever see such trees, so neither side
needs to know the other's concrete types.

Contents
--------
* :data:`GenericValue` – map / sequence / scalar union.
* :class:`ValueKind` – tag naming the variant of a node.
* :func:`kind_of` – classify a node.
* :func:`normalize` – coerce parser output (tuples, dates, scalar keys) into a
  pure tree.
"""

from __future__ import annotations

from datetime import date, datetime, time
from enum import Enum
from typing import Any, Dict, List, Union

GenericValue = Union[None, bool, int, float, str, List["GenericValue"], Dict[str, "GenericValue"]]


class ValueKind(str, Enum):
    """Variant tags of :data:`GenericValue` nodes."""

    MAP = "map"
    SEQUENCE = "sequence"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    NULL = "null"


def kind_of(value: Any) -> ValueKind:
    """Return the :class:`ValueKind` of *value*.

    ``bool`` is checked before ``int`` because it is a subclass of it.

    Raises
    ------
    TypeError
        When *value* is not a generic tree node.

    Examples
    --------
    >>> kind_of(True).value, kind_of(3).value, kind_of({"a": [1]}).value
    ('boolean', 'integer', 'map')
    """

    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, dict):
        return ValueKind.MAP
    if isinstance(value, list):
        return ValueKind.SEQUENCE
    raise TypeError(f"{type(value).__name__} is not a generic value")


def normalize(value: Any) -> GenericValue:
    """Return a pure tree built from parser output.

    Parsers hand back a few extra types: ``tomllib`` and ``yaml`` produce
    ``datetime``/``date``/``time`` objects (kept as ISO-8601 strings), YAML
    allows scalar keys (turned into strings), and tuples may appear in
    hand-built data.

    Examples
    --------
    >>> from datetime import date
    >>> normalize({1: (date(2024, 5, 1), None)})
    {'1': ['2024-05-01', None]}
    """

    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {_normalize_key(key): normalize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalize(item) for item in value]
    raise TypeError(f"{type(value).__name__} is not a generic value")


def _normalize_key(key: Any) -> str:
    if isinstance(key, str):
        return key
    if key is None:
        return "null"
    if isinstance(key, bool):
        return "true" if key else "false"
    if isinstance(key, (int, float)):
        return str(key)
    if isinstance(key, (datetime, date, time)):
        return key.isoformat()
    raise TypeError(f"{type(key).__name__} cannot be used as a map key")
