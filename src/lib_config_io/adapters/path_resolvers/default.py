"""Home-directory and environment expansion for configuration paths.

Purpose
-------
Implement the :class:`lib_config_io.application.ports.PathResolver` protocol.
Expansion is purely textual and happens before any filesystem access:

* a leading ``~`` (alone or followed by a path separator) becomes the home
  directory;
* ``$VAR`` and ``${VAR}`` references are replaced from the environment;
* unset variables stay in the path literally, as a shell would leave them.

Contents
--------
* :class:`ExpandingPathResolver` – resolver bound to an environment snapshot.
* :func:`resolve_path` – convenience wrapper using :data:`os.environ`.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Final, Mapping

_VARIABLE: Final[re.Pattern[str]] = re.compile(r"\$(?:\{(?P<braced>[A-Za-z_][A-Za-z0-9_]*)\}|(?P<bare>[A-Za-z_][A-Za-z0-9_]*))")
_SEPARATORS: Final[tuple[str, ...]] = tuple(sep for sep in (os.sep, os.altsep, "/") if sep)


class ExpandingPathResolver:
    """Expand ``~`` and environment references in path strings.

    Parameters
    ----------
    environ:
        Mapping to read variables from. Defaults to :data:`os.environ`, read at
        call time.
    home:
        Home directory override. Defaults to ``HOME``, then ``USERPROFILE``,
        then :meth:`pathlib.Path.home`. Without any of them ``~`` stays literal,
        like an unset variable.

    Examples
    --------
    >>> resolver = ExpandingPathResolver(environ={"HOME": "/home/john", "APP": "demo"})
    >>> resolver.resolve("~/.config/${APP}/cfg.json")
    '/home/john/.config/demo/cfg.json'
    >>> resolver.resolve("$HOME/app/cfg.json")
    '/home/john/app/cfg.json'
    >>> resolver.resolve("$NOPE/cfg.json")
    '$NOPE/cfg.json'
    """

    def __init__(self, *, environ: Mapping[str, str] | None = None, home: str | None = None) -> None:
        self._environ = environ
        self._home = home

    def resolve(self, raw_path: str) -> str:
        """Return *raw_path* with the home token and variables expanded."""

        environ = os.environ if self._environ is None else self._environ
        return _expand_variables(self._expand_home(raw_path, environ), environ)

    def _expand_home(self, raw_path: str, environ: Mapping[str, str]) -> str:
        if raw_path != "~" and not raw_path.startswith(tuple(f"~{sep}" for sep in _SEPARATORS)):
            return raw_path
        home = self._home or environ.get("HOME") or environ.get("USERPROFILE") or _platform_home()
        if home is None:
            return raw_path
        if raw_path == "~":
            return home
        return home.rstrip("".join(_SEPARATORS)) + raw_path[1:]


def _platform_home() -> str | None:
    """Return the account home directory, or ``None`` when it cannot be determined."""

    try:
        return str(Path.home())
    except (RuntimeError, KeyError):
        return None


def _expand_variables(text: str, environ: Mapping[str, str]) -> str:
    def substitute(match: re.Match[str]) -> str:
        name = match.group("braced") or match.group("bare")
        value = environ.get(name)
        return match.group(0) if value is None else value

    return _VARIABLE.sub(substitute, text)


def resolve_path(raw_path: str) -> str:
    """Expand *raw_path* against the current process environment."""

    return ExpandingPathResolver().resolve(raw_path)
