"""The global registry of repositories managed by copygit."""

from __future__ import annotations

import os
import tomllib
from datetime import datetime
from pathlib import Path

import tomli_w

from .config import ValidationError
from .models import (
    ConfigInvalidError,
    RepoAlreadyRegisteredError,
    RepoNotFoundError,
    RepoRegistration,
    RepoRegistry,
)


def load_repo_registry(path: str | os.PathLike[str]) -> RepoRegistry:
    """Read the registry; a missing file gives an empty registry."""
    try:
        raw = Path(path).read_bytes()
    except FileNotFoundError:
        return RepoRegistry(version="1", repos=[])
    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ConfigInvalidError(f"invalid repo registry {path}: {exc}") from exc
    return RepoRegistry.from_dict(data)


def save_repo_registry(path: str | os.PathLike[str], registry: RepoRegistry) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(tomli_w.dumps(registry.to_dict()), encoding="utf-8")


def register_repo(registry: RepoRegistry, path: str, alias: str = "") -> RepoRegistration:
    """Add a repository; raise RepoAlreadyRegisteredError if the path is known."""
    if any(r.path == path for r in registry.repos):
        raise RepoAlreadyRegisteredError(f"repository already registered: {path}")
    registration = RepoRegistration(
        path=path, alias=alias, registered_at=datetime.now().astimezone()
    )
    registry.repos.append(registration)
    return registration


def unregister_repo(registry: RepoRegistry, path: str) -> None:
    registry.repos.remove(find_repo(registry, path))


def find_repo(registry: RepoRegistry, path: str) -> RepoRegistration:
    for repo in registry.repos:
        if repo.path == path:
            return repo
    raise RepoNotFoundError(f"repository not registered: {path}")


def find_repo_by_alias(registry: RepoRegistry, alias: str) -> RepoRegistration:
    for repo in registry.repos:
        if repo.alias == alias:
            return repo
    raise RepoNotFoundError(f"no repository with alias: {alias}")


def update_last_sync(registry: RepoRegistry, path: str) -> None:
    find_repo(registry, path).last_sync_time = datetime.now().astimezone()


def valid_repos(registry: RepoRegistry) -> list[RepoRegistration]:
    """Return the registrations whose paths still exist."""
    return [r for r in registry.repos if os.path.exists(r.path)]


def validate_repo_registry(registry: RepoRegistry) -> list[ValidationError]:
    errors: list[ValidationError] = []
    if not registry.version:
        errors.append(ValidationError("version", "version is required"))

    paths: set[str] = set()
    aliases: set[str] = set()
    for i, repo in enumerate(registry.repos):
        if not repo.path:
            errors.append(ValidationError(f"repos[{i}].path", "path is required"))
        if repo.path in paths:
            errors.append(ValidationError(f"repos[{i}].path", "duplicate path"))
        paths.add(repo.path)

        if repo.alias:
            if repo.alias in aliases:
                errors.append(ValidationError(f"repos[{i}].alias", "duplicate alias"))
            aliases.add(repo.alias)
    return errors