from __future__ import annotations

import os
import subprocess
import sys
from pathlib import Path

import click

PROJECT_ROOT = Path(__file__).resolve().parents[1]
COVERAGE_TARGET = "lib_config_io"


def _build_default_env() -> dict[str, str]:
    """Return the base environment for subprocess execution."""
    pythonpath = os.pathsep.join(filter(None, [str(PROJECT_ROOT / "src"), os.environ.get("PYTHONPATH")]))
    return os.environ | {"PYTHONPATH": pythonpath}


DEFAULT_ENV = _build_default_env()


@click.command(help="Run lints, type-check and tests with coverage")
@click.option("--coverage", type=click.Choice(["on", "off"]), default="on")
@click.option("--verbose", "-v", is_flag=True, help="Print executed commands before running them")
def main(coverage: str, verbose: bool) -> None:
    env_verbose = os.getenv("TEST_VERBOSE", "").lower()
    if not verbose and env_verbose in {"1", "true", "yes", "on"}:
        verbose = True

    def _run(cmd: list[str], *, label: str) -> None:
        display = " ".join(cmd)
        click.echo(f"[{label}] $ {display}" if not verbose else f"  $ {display}")
        result = subprocess.run(cmd, cwd=PROJECT_ROOT, env=DEFAULT_ENV, check=False)
        if result.returncode != 0:
            click.echo(f"[{label}] failed with exit code {result.returncode}", err=True)
            raise SystemExit(result.returncode)

    _run([sys.executable, "-m", "ruff", "check", "."], label="ruff-lint")
    _run([sys.executable, "-m", "ruff", "format", "--check", "."], label="ruff-format")
    _run([sys.executable, "-m", "pyright"], label="pyright")

    pytest_cmd = [sys.executable, "-m", "pytest", "-q"]
    if coverage == "on":
        pytest_cmd += [f"--cov={COVERAGE_TARGET}", "--cov-report=term-missing", "--cov-branch"]
    _run(pytest_cmd, label="pytest")
    click.echo("All checks passed.")


if __name__ == "__main__":
    main()
