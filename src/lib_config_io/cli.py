"""CLI adapter for ``lib_config_io`` built on ``lib_cli_exit_tools``.

Purpose
-------
Expose the read/write pipeline on the command line so operators can inspect,
validate and convert configuration files without writing Python code.

Contents
--------
* :data:`CLICK_CONTEXT_SETTINGS` – shared Click settings ensuring ``-h`` works.
* :func:`cli` – root command that wires global traceback handling into
  ``lib_cli_exit_tools``.
* :func:`cli_info` – prints distribution metadata for quick diagnostics.
* :func:`cli_formats` – lists every format and whether its codec is installed.
* :func:`cli_resolve_path` – shows how a path expands.
* :func:`cli_read` – decodes a file and prints it as JSON.
* :func:`cli_convert` – reads one file and writes it in another format.
* :func:`main` – entry point used by ``console_scripts`` registration.

System Role
-----------
The CLI lives in the outermost layer. It calls the composition root only;
errors propagate as :class:`~lib_config_io.domain.errors.ContextualError` and
``lib_cli_exit_tools`` turns them into messages and exit codes.
"""

from __future__ import annotations

import json
import sys
from importlib import metadata
from typing import Final, Optional, Sequence

import lib_cli_exit_tools
import rich_click as click

from .adapters.path_resolvers.default import resolve_path
from .core import default_registry, read_config, write_config
from .domain.formats import Format

CLICK_CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}
_TRACEBACK_SUMMARY_LIMIT: Final[int] = 500
_TRACEBACK_VERBOSE_LIMIT: Final[int] = 10_000

FORMAT_CHOICES: Final[tuple[str, ...]] = tuple(member.value for member in Format) + ("yml",)


def _resolve_version() -> str:
    """Return the installed package version, or ``"0.0.0"`` from a bare checkout."""

    try:
        return metadata.version("lib_config_io")
    except metadata.PackageNotFoundError:
        return "0.0.0"


@click.group(
    help="Read, write and convert typed configuration files",
    context_settings=CLICK_CONTEXT_SETTINGS,
    invoke_without_command=False,
)
@click.version_option(
    version=_resolve_version(),
    prog_name="lib_config_io",
    message="lib_config_io version %(version)s",
)
@click.option(
    "--traceback/--no-traceback",
    is_flag=True,
    default=False,
    help="Show full Python traceback on errors",
)
@click.pass_context
def cli(ctx: click.Context, traceback: bool) -> None:
    """Root command configuring traceback handling for all subcommands.

    Side Effects
        Mutates ``lib_cli_exit_tools.config.traceback`` and
        ``lib_cli_exit_tools.config.traceback_force_color``.
    """

    ctx.ensure_object(dict)
    ctx.obj["traceback"] = traceback
    lib_cli_exit_tools.config.traceback = traceback
    lib_cli_exit_tools.config.traceback_force_color = traceback


@cli.command("info", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_info() -> None:
    """Print basic distribution metadata so users can confirm installation."""

    try:
        meta = metadata.metadata("lib_config_io")
    except metadata.PackageNotFoundError:
        click.echo("lib_config_io (metadata unavailable)")
        return
    click.echo(f"Info for {meta.get('Name', 'lib_config_io')}:")
    click.echo(f"  Version         : {meta.get('Version', _resolve_version())}")
    click.echo(f"  Requires-Python : {meta.get('Requires-Python', '>=3.10')}")
    summary = meta.get("Summary")
    if summary:
        click.echo(f"  Summary         : {summary}")
    for entry in meta.get_all("Project-URL") or []:
        click.echo(f"  {entry}")


@cli.command("formats", context_settings=CLICK_CONTEXT_SETTINGS)
def cli_formats() -> None:
    """List the known formats, their extensions and whether a codec is installed.

    Examples
    --------
    >>> from click.testing import CliRunner
    >>> result = CliRunner().invoke(cli, ["formats"])
    >>> result.output.splitlines()[0]
    'json  installed  .json'
    """

    registry = default_registry()
    for member in Format:
        status = "installed" if registry.supports(member) else "missing"
        click.echo(f"{member.value:<5} {status:<10} {' '.join(member.extensions)}".rstrip())


@cli.command("resolve-path", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("path")
def cli_resolve_path(path: str) -> None:
    """Print PATH with ``~`` and environment variables expanded."""

    click.echo(resolve_path(path))


@cli.command("read", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("path")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(FORMAT_CHOICES, case_sensitive=False),
    default=None,
    help="Format of PATH (default: inferred from the extension, else json)",
)
@click.option(
    "--indent",
    type=int,
    default=None,
    help="Pretty-print JSON output with the provided indent size",
)
def cli_read(path: str, fmt: Optional[str], indent: Optional[int]) -> None:
    """Decode PATH and print its content as JSON."""

    tree = read_config(path, format=fmt, context={"command": "read"})
    separators = (",", ":") if indent is None else (",", ": ")
    click.echo(json.dumps(tree, indent=indent, separators=separators, ensure_ascii=False))


@cli.command("convert", context_settings=CLICK_CONTEXT_SETTINGS)
@click.argument("source")
@click.argument("dest")
@click.option(
    "--from",
    "source_format",
    type=click.Choice(FORMAT_CHOICES, case_sensitive=False),
    default=None,
    help="Format of SOURCE (default: inferred from the extension, else json)",
)
@click.option(
    "--to",
    "dest_format",
    type=click.Choice(FORMAT_CHOICES, case_sensitive=False),
    default=None,
    help="Format of DEST (default: inferred from the extension, else json)",
)
def cli_convert(source: str, dest: str, source_format: Optional[str], dest_format: Optional[str]) -> None:
    """Read SOURCE and write the same content to DEST, printing the written path."""

    context = {"command": "convert", "source": source, "dest": dest}
    tree = read_config(source, format=source_format, context=context)
    written = write_config(dest, tree, format=dest_format, context=context)
    click.echo(str(written))


def main(argv: Optional[Sequence[str]] = None, *, restore_traceback: bool = True) -> int:
    """Execute the CLI with shared exit handling and return the exit code."""

    previous_traceback = getattr(lib_cli_exit_tools.config, "traceback", False)
    previous_force_color = getattr(lib_cli_exit_tools.config, "traceback_force_color", False)
    try:
        try:
            return lib_cli_exit_tools.run_cli(
                cli,
                argv=list(argv) if argv is not None else None,
                prog_name="lib_config_io",
            )
        except BaseException as exc:  # noqa: BLE001 - funnel through shared printers
            lib_cli_exit_tools.print_exception_message(
                trace_back=lib_cli_exit_tools.config.traceback,
                length_limit=(
                    _TRACEBACK_VERBOSE_LIMIT if lib_cli_exit_tools.config.traceback else _TRACEBACK_SUMMARY_LIMIT
                ),
            )
            return lib_cli_exit_tools.get_system_exit_code(exc)
    finally:
        if restore_traceback:
            lib_cli_exit_tools.config.traceback = previous_traceback
            lib_cli_exit_tools.config.traceback_force_color = previous_force_color


if __name__ == "__main__":  # pragma: no cover - exercised via console entry point
    raise SystemExit(main(sys.argv[1:]))
