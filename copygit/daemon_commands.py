"""Commands that stop the sync daemon and report on it."""

from __future__ import annotations

import os
import signal

from .models import CopygitError
from .paths import default_pid_file_path
from .pidfile import PIDFile


def run_daemon_stop() -> int:
    """Send SIGTERM to the running daemon and return its PID."""
    pid_file = PIDFile(default_pid_file_path())
    try:
        pid = pid_file.read()
    except (OSError, ValueError):
        raise CopygitError("daemon not running (no pid file)") from None

    if pid_file.is_stale():
        try:
            pid_file.remove()
        except OSError:
            pass
        raise CopygitError("daemon not running (stale pid file)")

    try:
        os.kill(pid, signal.SIGTERM)
    except OSError as exc:
        raise CopygitError(f"send signal: {exc}") from exc

    try:
        pid_file.remove()
    except OSError:
        pass
    print(f"Daemon stopped (PID {pid})")
    return pid


def run_daemon_status() -> bool:
    """Print whether the daemon is running and return True if it is."""
    pid_file = PIDFile(default_pid_file_path())
    try:
        pid = pid_file.read()
    except (OSError, ValueError):
        print("Daemon is not running")
        return False

    if pid_file.is_stale():
        print(f"Daemon is not running (stale PID {pid})")
        return False

    print(f"Daemon is running (PID {pid})")
    return True