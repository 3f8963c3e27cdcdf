from __future__ import annotations

import pytest

from lib_config_io.domain.errors import (
    ContextualError,
    DecodeFailure,
    EncodeFailure,
    ErrorKind,
    NotFound,
    ReadFailure,
    ShapeMismatch,
    UnsupportedFormat,
    WriteFailure,
    merge_context,
)

SUBCLASSES = [UnsupportedFormat, EncodeFailure, DecodeFailure, ShapeMismatch, NotFound, ReadFailure, WriteFailure]


def test_error_hierarchy() -> None:
    for error_type in SUBCLASSES:
        assert issubclass(error_type, ContextualError)
        exception = error_type("")
        assert isinstance(exception, ContextualError)
        assert exception.kind is error_type.default_kind


def test_every_kind_has_a_subclass() -> None:
    assert {error_type.default_kind for error_type in SUBCLASSES} == set(ErrorKind)
    for kind in ErrorKind:
        assert type(ContextualError.new(kind, "x")).default_kind is kind


def test_base_class_requires_a_kind() -> None:
    with pytest.raises(TypeError):
        ContextualError("no kind")


def test_context_is_copied_and_read_only() -> None:
    source = {"path": "/etc/app.json"}
    error = NotFound("missing", context=source)
    source["path"] = "changed"

    assert error.context["path"] == "/etc/app.json"
    with pytest.raises(TypeError):
        error.context["path"] = "mutated"  # type: ignore[index]


def test_message_is_the_string_form() -> None:
    error = DecodeFailure("Invalid JSON content", context={"format": "json"})
    assert str(error) == "Invalid JSON content"
    assert "DecodeFailure" in repr(error)
    assert "'format': 'json'" in repr(error)


def test_with_context_keeps_inner_keys_and_cause() -> None:
    origin = OSError("disk full")
    try:
        raise WriteFailure("write failed", context={"path": "/data/a.json"}) from origin
    except WriteFailure as exc:
        wrapped = exc.with_context({"path": "a.json", "request": "r-1"})

    assert type(wrapped) is WriteFailure
    assert wrapped.kind is ErrorKind.WRITE_FAILURE
    assert dict(wrapped.context) == {"path": "/data/a.json", "request": "r-1"}
    assert wrapped.__cause__ is origin


def test_merge_context_preserves_outer_order() -> None:
    merged = merge_context({"a": 1, "b": 2}, {"b": 3, "c": 4})
    assert list(merged) == ["a", "b", "c"]
    assert merged["b"] == 3

