"""Local filesystem adapter.

Purpose
-------
Implement :class:`lib_config_io.application.ports.FileStore` on top of
:mod:`pathlib`. Reads map missing files to :class:`NotFound` and other OS errors
to :class:`ReadFailure`; writes go to a temporary sibling that is atomically
renamed over the target so readers never observe a half-written file.

Concurrent writers to the same path are not coordinated; the last rename wins.
"""

from __future__ import annotations

import os
import stat
import tempfile
from pathlib import Path

from ...domain.errors import NotFound, ReadFailure, WriteFailure
from ...observability import log_debug


def _process_umask() -> int:
    # os.umask can only be read by setting it; done once, at import.
    mask = os.umask(0o022)
    os.umask(mask)
    return mask


NEW_FILE_MODE = 0o666 & ~_process_umask()
"""Mode of newly created files, as ``open`` would apply it under the import-time umask."""


class LocalFileStore:
    """Read and write whole files on the local filesystem."""

    def read_bytes(self, path: str) -> bytes:
        """Return the content of *path*.

        Raises
        ------
        NotFound
            When *path* does not exist.
        ReadFailure
            For every other OS-level error (directory, permissions, ...).

        Examples
        --------
        >>> from tempfile import TemporaryDirectory
        >>> tmp = TemporaryDirectory()
        >>> target = Path(tmp.name) / "cfg.json"
        >>> _ = target.write_bytes(b"{}")
        >>> LocalFileStore().read_bytes(str(target))
        b'{}'
        >>> tmp.cleanup()
        """

        try:
            payload = Path(path).read_bytes()
        except FileNotFoundError as exc:
            raise NotFound(
                f"Configuration file not found: {path}",
                context={"path": path, "origin": str(exc)},
            ) from exc
        except OSError as exc:
            raise ReadFailure(
                f"Failed to read configuration file {path}: {exc.strerror or exc}",
                context={"path": path, "origin": str(exc)},
            ) from exc
        log_debug("config_file_read", path=path, size=len(payload))
        return payload

    def write_bytes(self, path: str, payload: bytes) -> None:
        """Atomically replace *path* with *payload*.

        The parent directory must exist. An existing file keeps its permission
        bits; a new file gets :data:`NEW_FILE_MODE`. On failure the
        temporary file is removed and the previous content of *path* is kept.
        """

        target = Path(path)
        temp_name: str | None = None
        try:
            with tempfile.NamedTemporaryFile(
                "wb",
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                temp_name = handle.name
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            mode = stat.S_IMODE(target.stat().st_mode) if target.is_file() else NEW_FILE_MODE
            os.chmod(temp_name, mode)
            os.replace(temp_name, target)
        except OSError as exc:
            if temp_name is not None:
                Path(temp_name).unlink(missing_ok=True)
            raise WriteFailure(
                f"Failed to write configuration file {path}: {exc.strerror or exc}",
                context={"path": path, "origin": str(exc)},
            ) from exc
        log_debug("config_file_written", path=path, size=len(payload))
