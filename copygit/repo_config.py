"""Per-repository configuration stored in .copygit.toml."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path

import tomli_w

from .config import ValidationError
from .models import ConfigInvalidError, ConfigNotFoundError, RepoConfig


def repo_config_path(repo_root: str | os.PathLike[str]) -> Path:
    return Path(repo_root) / ".copygit.toml"


def load_repo_config(repo_root: str | os.PathLike[str]) -> RepoConfig:
    """Read .copygit.toml; raise ConfigNotFoundError or ConfigInvalidError."""
    path = repo_config_path(repo_root)
    try:
        raw = path.read_bytes()
    except FileNotFoundError as exc:
        raise ConfigNotFoundError(f"repo config not found: {path}") from exc
    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ConfigInvalidError(f"invalid repo config {path}: {exc}") from exc
    return RepoConfig.from_dict(data)


def save_repo_config(repo_root: str | os.PathLike[str], cfg: RepoConfig) -> None:
    path = repo_config_path(repo_root)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(tomli_w.dumps(cfg.to_dict()), encoding="utf-8")


def validate_repo_config(cfg: RepoConfig) -> list[ValidationError]:
    errors: list[ValidationError] = []
    if not cfg.version:
        errors.append(ValidationError("version", "version is required"))
    if not cfg.sync_targets:
        errors.append(
            ValidationError("sync_targets", "at least one sync target is required")
        )
    for i, target in enumerate(cfg.sync_targets):
        if not target.provider_name:
            errors.append(
                ValidationError(f"sync_targets[{i}].provider", "provider name is required")
            )
        if not target.remote_url:
            errors.append(
                ValidationError(f"sync_targets[{i}].remote_url", "remote_url is required")
            )
    return errors