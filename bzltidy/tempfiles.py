"""Temporary files that are tracked and removed together."""

from __future__ import annotations

import os
import tempfile


class TempFiles:
    """Creates temporary files and removes them all on :meth:`clean`."""

    def __init__(self) -> None:
        self._filenames: list[str] = []

    def write_temp(self, data: bytes) -> str:
        """Write ``data`` to a new temporary file and return its name."""
        with tempfile.NamedTemporaryFile(
            prefix="buildifier-tmp-", delete=False
        ) as fh:
            name = fh.name
            try:
                fh.write(data)
            except OSError:
                fh.close()
                os.remove(name)
                raise
        self._filenames.append(name)
        return name

    def clean(self) -> None:
        """Remove every file created so far."""
        for name in self._filenames:
            os.remove(name)
        self._filenames = []

    def __enter__(self) -> "TempFiles":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.clean()