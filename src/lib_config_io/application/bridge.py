"""Bridge between caller-defined types and the generic value tree.

Purpose
-------
Let one read/write pipeline serve any structure that pydantic can describe.
``to_generic`` flattens a typed value into a
:data:`~lib_config_io.domain.values.GenericValue`; ``from_generic`` rebuilds the
typed value and reports structural mismatches with the offending field path.

Contents
--------
* :func:`to_generic` – typed value → tree; raises ``EncodeFailure``.
* :func:`from_generic` – tree → typed value; raises ``ShapeMismatch``.

Supported shapes
----------------
Everything a :class:`pydantic.TypeAdapter` handles: primitives, enums, paths,
dates, dataclasses, ``TypedDict``, ``BaseModel``, containers, ``Optional``,
``Union`` and ``Literal``. Validation runs in pydantic's lax mode, so the
string leaves of untyped XML still fill numeric fields.

System Role
-----------
Called by :mod:`lib_config_io.core` between path/format resolution and the
codec step. Knows nothing about formats or files.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Mapping, Sequence, TypeVar, overload

from pydantic import ConfigDict, PydanticUndefinedAnnotation, PydanticUserError, TypeAdapter, ValidationError

from ..domain.errors import EncodeFailure, ShapeMismatch
from ..domain.values import GenericValue, ValueKind, kind_of

T = TypeVar("T")

_ROOT = "<root>"
_ANY: TypeAdapter[Any] = TypeAdapter(Any)

# pydantic error types are prefixed with the kind they wanted (``int_parsing``,
# ``dataclass_type``, ``string_too_short`` ...).
_EXPECTED_BY_PREFIX: Mapping[str, str] = {
    "int": ValueKind.INTEGER.value,
    "float": ValueKind.FLOAT.value,
    "bool": ValueKind.BOOLEAN.value,
    "string": ValueKind.STRING.value,
    "path": ValueKind.STRING.value,
    "none": ValueKind.NULL.value,
    "list": ValueKind.SEQUENCE.value,
    "tuple": ValueKind.SEQUENCE.value,
    "set": ValueKind.SEQUENCE.value,
    "frozen": ValueKind.SEQUENCE.value,
    "iterable": ValueKind.SEQUENCE.value,
    "too": ValueKind.SEQUENCE.value,
    "dict": ValueKind.MAP.value,
    "mapping": ValueKind.MAP.value,
    "model": ValueKind.MAP.value,
    "dataclass": ValueKind.MAP.value,
    "date": "ISO-8601 date",
    "datetime": "ISO-8601 datetime",
    "time": "ISO-8601 time",
}
_UNEXPECTED_TYPES = frozenset({"extra_forbidden", "unexpected_keyword_argument"})


def to_generic(value: Any) -> GenericValue:
    """Convert *value* into a generic tree.

    Dataclass and model fields keep their declaration order, which becomes the
    key order of the encoded document. Map keys are rendered as strings.

    Raises
    ------
    EncodeFailure
        When a node cannot be represented (unknown object, circular reference).

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Database:
    ...     user: str
    ...     port: int = 5432
    >>> to_generic({"db": Database("john"), "tags": ("a", "b")})
    {'db': {'user': 'john', 'port': 5432}, 'tags': ['a', 'b']}
    """

    try:
        return _dump(_dump_adapter(type(value)), value)
    except (PydanticUserError, PydanticUndefinedAnnotation):
        # The runtime type has no schema of its own; serialise by inspection.
        return _dump(_ANY, value)


@overload
def from_generic(tree: GenericValue, target: type[T], *, strict: bool = ...) -> T: ...


@overload
def from_generic(tree: GenericValue, target: Any, *, strict: bool = ...) -> Any: ...


def from_generic(tree: GenericValue, target: Any, *, strict: bool = False) -> Any:
    """Rebuild a value of type *target* from *tree*.

    Parameters
    ----------
    tree:
        Generic tree, usually produced by a codec.
    target:
        Type annotation describing the expected shape (``Any`` returns the tree).
    strict:
        Reject map entries that the target dataclass or ``TypedDict`` does not
        declare. Models keep the ``extra`` policy of their own ``model_config``.

    Raises
    ------
    ShapeMismatch
        With ``field``/``expected``/``found`` context when the tree does not
        fit, or when pydantic cannot build a schema for *target*.

    Examples
    --------
    >>> from dataclasses import dataclass
    >>> @dataclass
    ... class Database:
    ...     user: str
    ...     password: str
    >>> from_generic({"user": "john", "password": "smith"}, Database)
    Database(user='john', password='smith')
    >>> from_generic({"user": "john"}, Database)
    Traceback (most recent call last):
    ...
    lib_config_io.domain.errors.ShapeMismatch: Missing required field 'password'
    """

    if target is Any:
        return tree
    try:
        (value,) = _load_adapter(target, strict).validate_python((tree,))
    except ValidationError as exc:
        raise _shape_mismatch(exc) from exc
    except (PydanticUserError, PydanticUndefinedAnnotation, TypeError) as exc:
        # Unhashable annotations fail in the adapter cache with a plain TypeError.
        name, reason = _describe(target), getattr(exc, "message", str(exc))
        raise ShapeMismatch(
            f"Cannot read configuration into {name}: {reason}",
            context={"field": _ROOT, "expected": name, "found": _found(tree), "origin": reason},
        ) from exc
    except RecursionError as exc:
        raise ShapeMismatch(
            f"Configuration is nested too deeply for {_describe(target)}",
            context={"field": _ROOT, "expected": _describe(target), "found": _found(tree), "origin": str(exc)},
        ) from exc
    return value


@lru_cache(maxsize=256)
def _dump_adapter(kind: type[Any]) -> TypeAdapter[Any]:
    return TypeAdapter(kind)


@lru_cache(maxsize=256)
def _load_adapter(target: Any, strict: bool) -> TypeAdapter[Any]:
    """Adapter validating a one-element tuple holding *target*.

    The tuple lets ``extra="forbid"`` reach dataclasses and ``TypedDict``s,
    which refuse a ``config`` of their own on a top-level ``TypeAdapter``.
    """

    return TypeAdapter(tuple[target], config=ConfigDict(extra="forbid" if strict else "ignore"))


def _dump(adapter: TypeAdapter[Any], value: Any) -> GenericValue:
    try:
        return adapter.dump_python(value, mode="json", warnings=False)
    except (ValueError, RecursionError) as exc:
        found = type(value).__name__
        raise EncodeFailure(
            f"Cannot represent {found} as a configuration value: {exc}",
            context={"field": _ROOT, "found": found, "origin": str(exc)},
        ) from exc


def _shape_mismatch(exc: ValidationError) -> ShapeMismatch:
    errors = exc.errors(include_url=False)
    first = errors[0]
    # Drop the wrapping tuple index added by ``_load_adapter``.
    field = _field_path(first["loc"][1:])
    kind = first["type"]
    if kind == "missing":
        expected, found = "required", "missing"
        message = f"Missing required field '{field}'"
    elif kind in _UNEXPECTED_TYPES:
        expected, found = "absent", _found(first.get("input"))
        message = f"Unexpected field '{field}'"
    else:
        expected, found = _expected(first), _found(first.get("input"))
        message = f"Expected {expected} at {field} but found {found}"
    return ShapeMismatch(
        message,
        context={
            "field": field,
            "expected": expected,
            "found": found,
            "origin": first["msg"],
            "errors": len(errors),
        },
    )


def _field_path(loc: Sequence[int | str]) -> str:
    """Render a pydantic location as ``pool.size`` or ``hosts[1]``."""

    path = ""
    for part in loc:
        if isinstance(part, int):
            path = f"{path or _ROOT}[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path or _ROOT


def _expected(error: Mapping[str, Any]) -> str:
    ctx = error.get("ctx") or {}
    if "expected" in ctx:
        return str(ctx["expected"])
    kind = error["type"]
    return _EXPECTED_BY_PREFIX.get(kind.split("_", 1)[0], kind)


def _found(value: Any) -> str:
    try:
        return kind_of(value).value
    except TypeError:
        return type(value).__name__


def _describe(target: Any) -> str:
    return getattr(target, "__name__", None) or repr(target)


__all__ = ["from_generic", "to_generic"]
