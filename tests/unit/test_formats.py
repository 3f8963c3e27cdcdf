from __future__ import annotations

import pytest

from lib_config_io.domain.errors import ErrorKind, UnsupportedFormat
from lib_config_io.domain.formats import DEFAULT_FORMAT, Format, format_for_path


@pytest.mark.parametrize(
    ("alias", "expected"),
    [
        ("json", Format.JSON),
        ("JSON", Format.JSON),
        (".toml", Format.TOML),
        ("yml", Format.YAML),
        (" Yaml ", Format.YAML),
        (".XML", Format.XML),
        (Format.TOML, Format.TOML),
    ],
)
def test_parse_accepts_user_spellings(alias: str | Format, expected: Format) -> None:
    assert Format.parse(alias) is expected


def test_parse_rejects_unknown_names() -> None:
    with pytest.raises(UnsupportedFormat) as captured:
        Format.parse("ini")
    assert captured.value.kind is ErrorKind.UNSUPPORTED_FORMAT
    assert captured.value.context["format"] == "ini"
    assert "json" in captured.value.context["known"]


def test_canonical_extensions() -> None:
    assert [member.extension for member in Format] == [".json", ".toml", ".yaml", ".xml"]
    assert Format.YAML.extensions == (".yaml", ".yml")


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("/etc/app/locker-db.json", Format.JSON),
        ("settings.TOML", Format.TOML),
        ("~/cfg.yml", Format.YAML),
        ("C:/cfg/app.xml", Format.XML),
        ("settings.dat", None),
        ("Makefile", None),
        ("archive.json.bak", None),
    ],
)
def test_format_for_path(path: str, expected: Format | None) -> None:
    assert format_for_path(path) is expected


def test_default_format_is_json() -> None:
    assert DEFAULT_FORMAT is Format.JSON
