"""End-to-end CLI coverage for the commands exposed by lib_config_io.

These tests run the click commands through ``CliRunner`` and the shared
``main`` entry point so exit codes follow ``lib_cli_exit_tools``.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

import lib_cli_exit_tools

from lib_config_io import Format, cli, default_registry


def _runner() -> CliRunner:
    """Return a fresh CLI runner so each test starts from a clean state."""

    return CliRunner()


def test_cli_read_outputs_json(tmp_path: Path) -> None:
    target = tmp_path / "locker-db.json"
    target.write_text('{"user": "john", "password": "smith", "database": "example"}', encoding="utf-8")

    result = _runner().invoke(cli.cli, ["read", str(target)])

    assert result.exit_code == 0
    assert result.output.strip() == '{"user":"john","password":"smith","database":"example"}'


def test_cli_read_with_indent_and_explicit_format(tmp_path: Path) -> None:
    target = tmp_path / "settings.conf"
    target.write_text('{"debug": true}', encoding="utf-8")

    result = _runner().invoke(cli.cli, ["read", str(target), "--format", "JSON", "--indent", "2"])

    assert result.exit_code == 0
    assert result.output == '{\n  "debug": true\n}\n'


def test_cli_read_expands_environment(tmp_path: Path) -> None:
    (tmp_path / "app.json").write_text('{"ok": 1}', encoding="utf-8")

    result = _runner().invoke(cli.cli, ["read", "$CONFIG_DIR/app.json"], env={"CONFIG_DIR": str(tmp_path)})

    assert result.exit_code == 0
    assert json.loads(result.output) == {"ok": 1}


@pytest.mark.parametrize("fmt", default_registry().available(), ids=lambda fmt: fmt.value)
def test_cli_convert_between_formats(tmp_path: Path, fmt: Format) -> None:
    source = tmp_path / "service.json"
    source.write_text('{"name": "api", "port": 8080, "hosts": ["a", "b"]}', encoding="utf-8")
    dest = tmp_path / f"converted{fmt.extension}"

    result = _runner().invoke(cli.cli, ["convert", str(source), str(dest)])

    assert result.exit_code == 0
    assert result.output.strip() == str(dest)
    reread = _runner().invoke(cli.cli, ["read", str(dest)])
    assert json.loads(reread.output) == {"name": "api", "port": 8080, "hosts": ["a", "b"]}


def test_cli_convert_with_explicit_formats(tmp_path: Path) -> None:
    source = tmp_path / "in.txt"
    source.write_text('{"a": [1, 2]}', encoding="utf-8")
    dest = tmp_path / "out.txt"

    result = _runner().invoke(cli.cli, ["convert", str(source), str(dest), "--from", "json", "--to", "json"])

    assert result.exit_code == 0
    assert dest.read_text(encoding="utf-8") == '{"a":[1,2]}'


def test_cli_formats_lists_every_format() -> None:
    result = _runner().invoke(cli.cli, ["formats"])

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert [line.split()[0] for line in lines] == [member.value for member in Format]
    assert lines[0].split()[1] == "installed"
    assert ".yml" in lines[2]


def test_cli_resolve_path() -> None:
    result = _runner().invoke(cli.cli, ["resolve-path", "${STAGE}/app.toml"], env={"STAGE": "prod"})

    assert result.exit_code == 0
    assert result.output.strip() == "prod/app.toml"


def test_cli_info_runs() -> None:
    result = _runner().invoke(cli.cli, ["info"])

    assert result.exit_code == 0
    assert "lib_config_io" in result.output


def test_cli_info_handles_missing_metadata(monkeypatch: pytest.MonkeyPatch) -> None:
    def _raise_pkg_not_found(*_args, **_kwargs):
        raise cli.metadata.PackageNotFoundError()

    monkeypatch.setattr(cli.metadata, "metadata", _raise_pkg_not_found)
    result = _runner().invoke(cli.cli, ["info"])

    assert result.exit_code == 0
    assert "metadata unavailable" in result.output


def test_cli_rejects_unknown_format_choice(tmp_path: Path) -> None:
    result = _runner().invoke(cli.cli, ["read", str(tmp_path / "x.json"), "--format", "ini"])

    assert result.exit_code != 0


def test_main_reports_missing_file(tmp_path: Path) -> None:
    missing = tmp_path / "missing.json"

    exit_code = cli.main(["read", str(missing)])

    assert exit_code != 0


def test_main_restores_traceback_flag(tmp_path: Path) -> None:
    previous = getattr(lib_cli_exit_tools.config, "traceback", False)
    target = tmp_path / "app.json"
    target.write_text("{}", encoding="utf-8")

    exit_code = cli.main(["--traceback", "read", str(target)], restore_traceback=True)

    assert exit_code == 0
    assert getattr(lib_cli_exit_tools.config, "traceback", False) == previous

