from __future__ import annotations

import sys
from importlib import import_module
from pathlib import Path

import click

project_root = Path(__file__).resolve().parents[1]
src_path = project_root / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

PACKAGE = "lib_config_io"


@click.command(help=f"Run {PACKAGE} CLI (passes additional args)")
@click.argument("args", nargs=-1)
def main(args: tuple[str, ...]) -> None:
    cli_main = import_module(f"{PACKAGE}.cli").main

    code = cli_main(list(args) if args else ["--help"])  # returns int
    raise SystemExit(int(code))


if __name__ == "__main__":
    main()
