"""The daemon's PID file."""

from __future__ import annotations

import os
from pathlib import Path


class PIDFile:
    """Stores and checks the PID of the running daemon."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def write(self, pid: int) -> None:
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="ascii") as fh:
            fh.write(str(pid))

    def read(self) -> int:
        """Return the stored PID; raise OSError if missing, ValueError if malformed."""
        text = self.path.read_text(encoding="ascii", errors="replace").strip()
        try:
            return int(text)
        except ValueError:
            raise ValueError(f"invalid pid: {text!r}") from None

    def remove(self) -> None:
        self.path.unlink()

    def is_stale(self) -> bool:
        """Return True if the file names a process that is not running."""
        try:
            pid = self.read()
        except (OSError, ValueError):
            return False
        if pid <= 0:
            return True
        try:
            os.kill(pid, 0)
        except (OSError, OverflowError):
            return True
        return False