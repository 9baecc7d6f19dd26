"""Repository commands: path resolution, sync target selection and removal."""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import TextIO

from .config import GlobalConfig
from .models import ProviderNotFoundError, RepoSyncTarget
from .paths import default_repo_registry_path
from .registry import (
    find_repo,
    load_repo_registry,
    save_repo_registry,
    unregister_repo,
)
from .repo_config import repo_config_path

log = logging.getLogger(__name__)


def resolve_repo_path(repo_path: str | os.PathLike[str]) -> str:
    """Expand a leading "~" and return a clean absolute path."""
    text = os.fspath(repo_path)
    if text.startswith("~"):
        rest = text[1:].lstrip("/" + os.sep)
        text = os.path.join(str(Path.home()), rest)
    return os.path.abspath(text)


def _read_line(stdin: TextIO) -> str:
    line = stdin.readline()
    if not line.endswith("\n"):
        raise EOFError("unexpected end of input")
    return line


def interactive_provider_selection(
    global_config: GlobalConfig,
    repo_path: str | os.PathLike[str],
    stdin: TextIO | None = None,
) -> list[RepoSyncTarget]:
    """Ask which providers to sync to and the remote URL for each."""
    stdin = sys.stdin if stdin is None else stdin
    providers = global_config.providers
    if not providers:
        print("No providers configured. Run 'copygit config add-provider' first.")
        raise ProviderNotFoundError("no providers configured")

    print("\nAvailable providers:")
    for name in sorted(providers):
        print(f"  - {name} ({providers[name].type})")

    print("\nSelect providers to sync to (comma-separated names, or 'all'):")
    choice = _read_line(stdin).strip()
    if choice == "all":
        selected = list(providers)
    else:
        selected = [part.strip() for part in choice.split(",")]

    repo_name = Path(os.fspath(repo_path)).name
    targets: list[RepoSyncTarget] = []
    for name in selected:
        if name not in providers:
            log.warning("provider not found: name=%s", name)
            continue

        print(f"\nEnter remote URL for {name} (or press Enter to auto-generate):")
        remote_url = _read_line(stdin).strip()
        if not remote_url:
            remote_url = f"https://example.com/{repo_name}.git"
        targets.append(
            RepoSyncTarget(provider_name=name, remote_url=remote_url, enabled=True)
        )
    return targets


def run_remove(repo_path: str | os.PathLike[str], clean: bool = False) -> None:
    """Unregister a repository and, with clean, delete its .copygit.toml."""
    abs_path = resolve_repo_path(repo_path)
    registry_path = default_repo_registry_path()
    registry = load_repo_registry(registry_path)

    find_repo(registry, abs_path)
    unregister_repo(registry, abs_path)
    save_repo_registry(registry_path, registry)
    log.info("repository unregistered: path=%s", abs_path)

    if clean:
        config_file = repo_config_path(abs_path)
        try:
            config_file.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            log.warning("could not remove .copygit.toml: error=%s", exc)
        else:
            log.info(".copygit.toml removed: path=%s", config_file)