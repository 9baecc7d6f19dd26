"""Deriving repository names, owners and remote URLs from git URLs."""

from __future__ import annotations

from .config import GlobalConfig
from .models import AuthMethod, ProviderConfig, RepoSyncTarget


def _ssh_path(url: str) -> str | None:
    """Return the path part of an scp-style URL such as user@host:owner/repo.git."""
    if ":" in url and "@" in url:
        parts = url.split(":")
        if len(parts) == 2:
            return parts[1].removesuffix(".git")
    return None


def generate_remote_url(provider: ProviderConfig, owner: str, repo_name: str) -> str:
    """Build the remote URL for a repository on a provider."""
    base = provider.base_url.removesuffix("/")
    if provider.auth_method == AuthMethod.SSH:
        host = base.removeprefix("https://").removeprefix("http://")
        return f"git@{host}:{owner}/{repo_name}.git"
    return f"{base}/{owner}/{repo_name}.git"


def repo_name_from_url(url: str) -> str:
    path = _ssh_path(url)
    if path is not None:
        return path.split("/")[-1]
    return url.removesuffix(".git").removesuffix("/").split("/")[-1]


def owner_from_url(url: str) -> str:
    path = _ssh_path(url)
    if path is not None:
        segments = path.split("/")
        if len(segments) >= 2:
            return segments[0]
    segments = url.removesuffix(".git").split("/")
    if len(segments) >= 2:
        return segments[-2]
    return "user"


def detect_provider_from_url(url: str) -> str:
    """Guess the provider name from a URL; empty when unknown."""
    lower = url.lower()
    if "github.com" in lower:
        return "github"
    if "gitlab.com" in lower:
        return "gitlab"
    if "gitea" in lower:
        return "gitea"
    return ""


def build_sync_targets(
    source_url: str, source_provider: str, global_config: GlobalConfig
) -> list[RepoSyncTarget]:
    """Create an enabled sync target for every configured provider."""
    repo_name = repo_name_from_url(source_url)
    owner = owner_from_url(source_url)
    return [
        RepoSyncTarget(
            provider_name=name,
            remote_url=(
                source_url
                if name == source_provider
                else generate_remote_url(prov, owner, repo_name)
            ),
            enabled=True,
        )
        for name, prov in global_config.providers.items()
    ]