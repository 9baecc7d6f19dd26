"""Core data types shared by configuration, registry and credential code."""

from __future__ import annotations

import enum
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


class ProviderType(enum.StrEnum):
    """Kinds of git hosting providers."""

    GITHUB = "github"
    GITLAB = "gitlab"
    GITEA = "gitea"
    GENERIC = "generic"


class AuthMethod(enum.StrEnum):
    """Ways of authenticating against a provider."""

    SSH = "ssh"
    HTTPS = "https"
    TOKEN = "token"


class CopygitError(Exception):
    """Base class for all errors raised by copygit."""


class ConfigNotFoundError(CopygitError):
    """A configuration file does not exist."""


class ConfigInvalidError(CopygitError):
    """A configuration file could not be parsed."""


class CredentialNotFoundError(CopygitError):
    """No credential could be found for a provider."""


class RepoNotFoundError(CopygitError, LookupError):
    """A repository is not registered."""


class RepoAlreadyRegisteredError(CopygitError):
    """A repository is already registered."""


class ProviderNotFoundError(CopygitError, LookupError):
    """A provider name is not configured."""


def _coerce(enum_cls: type[enum.StrEnum], value: str) -> Any:
    try:
        return enum_cls(value)
    except ValueError:
        return value


def _value(data: Mapping[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key, default)
    if (isinstance(value, bool) and kind is not bool) or not isinstance(value, kind):
        raise ConfigInvalidError(
            f"{key}: expected {kind.__name__}, got {type(value).__name__}"
        )
    return value


def _optional_datetime(data: Mapping[str, Any], key: str) -> datetime | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, datetime):
        raise ConfigInvalidError(f"{key}: expected datetime, got {type(value).__name__}")
    return value


def _table(value: Any, key: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise ConfigInvalidError(f"{key}: expected table, got {type(value).__name__}")
    return value


def _tables(data: Mapping[str, Any], key: str) -> list[Mapping[str, Any]]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ConfigInvalidError(f"{key}: expected array, got {type(value).__name__}")
    return [_table(item, key) for item in value]


@dataclass
class ProviderConfig:
    """A git hosting provider shared by all repositories."""

    name: str = ""
    type: ProviderType | str = ""
    base_url: str = ""
    auth_method: AuthMethod | str = ""
    is_preferred: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "type": str(self.type),
            "base_url": self.base_url,
            "auth_method": str(self.auth_method),
            "is_preferred": self.is_preferred,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProviderConfig:
        return cls(
            name=_value(data, "name", str, ""),
            type=_coerce(ProviderType, _value(data, "type", str, "")),
            base_url=_value(data, "base_url", str, ""),
            auth_method=_coerce(AuthMethod, _value(data, "auth_method", str, "")),
            is_preferred=_value(data, "is_preferred", bool, False),
        )


@dataclass
class Credential:
    """Authentication material for one provider."""

    provider_name: str = ""
    auth_method: AuthMethod | str = ""
    token: str = field(default="", repr=False)
    ssh_key_path: str = ""
    username: str = ""


@dataclass
class RepoSyncTarget:
    """A remote that a repository is pushed to."""

    provider_name: str = ""
    remote_url: str = ""
    enabled: bool = False


@dataclass
class RepoMetadata:
    """Optional repository metadata kept in the per-repo config."""

    inherit_from: str = ""
    visibility: str = ""
    description: str = ""
    wiki_enabled: bool = False
    issues_enabled: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "inherit_from": self.inherit_from,
            "visibility": self.visibility,
            "description": self.description,
            "wiki_enabled": self.wiki_enabled,
            "issues_enabled": self.issues_enabled,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RepoMetadata:
        return cls(
            inherit_from=_value(data, "inherit_from", str, ""),
            visibility=_value(data, "visibility", str, ""),
            description=_value(data, "description", str, ""),
            wiki_enabled=_value(data, "wiki_enabled", bool, False),
            issues_enabled=_value(data, "issues_enabled", bool, False),
        )


@dataclass
class RepoSyncTargetWithOverrides:
    """A sync target as stored in the per-repo config, with optional overrides."""

    provider_name: str = ""
    remote_url: str = ""
    enabled: bool = False
    overrides: dict[str, Any] | None = None

    def to_repo_sync_target(self) -> RepoSyncTarget:
        return RepoSyncTarget(
            provider_name=self.provider_name,
            remote_url=self.remote_url,
            enabled=self.enabled,
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "provider": self.provider_name,
            "remote_url": self.remote_url,
            "enabled": self.enabled,
        }
        if self.overrides is not None:
            result["overrides"] = dict(self.overrides)
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RepoSyncTargetWithOverrides:
        overrides = data.get("overrides")
        if overrides is not None:
            overrides = dict(_table(overrides, "overrides"))
        return cls(
            provider_name=_value(data, "provider", str, ""),
            remote_url=_value(data, "remote_url", str, ""),
            enabled=_value(data, "enabled", bool, False),
            overrides=overrides,
        )


@dataclass
class RepoConfig:
    """The per-repository configuration stored in .copygit.toml."""

    version: str = ""
    sync_targets: list[RepoSyncTargetWithOverrides] = field(default_factory=list)
    metadata: RepoMetadata | None = None

    def enabled_provider_names(self) -> list[str]:
        return [t.provider_name for t in self.sync_targets if t.enabled]

    def as_repo_sync_targets(self) -> list[RepoSyncTarget]:
        return [t.to_repo_sync_target() for t in self.sync_targets]

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"version": self.version}
        if self.metadata is not None:
            result["metadata"] = self.metadata.to_dict()
        result["sync_targets"] = [t.to_dict() for t in self.sync_targets]
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RepoConfig:
        metadata = data.get("metadata")
        return cls(
            version=_value(data, "version", str, ""),
            sync_targets=[
                RepoSyncTargetWithOverrides.from_dict(t)
                for t in _tables(data, "sync_targets")
            ],
            metadata=(
                None
                if metadata is None
                else RepoMetadata.from_dict(_table(metadata, "metadata"))
            ),
        )


@dataclass
class RepoRegistration:
    """One repository known to copygit."""

    path: str = ""
    alias: str = ""
    registered_at: datetime | None = None
    last_sync_time: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"path": self.path, "alias": self.alias}
        if self.registered_at is not None:
            result["registered_at"] = self.registered_at
        if self.last_sync_time is not None:
            result["last_sync_time"] = self.last_sync_time
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RepoRegistration:
        return cls(
            path=_value(data, "path", str, ""),
            alias=_value(data, "alias", str, ""),
            registered_at=_optional_datetime(data, "registered_at"),
            last_sync_time=_optional_datetime(data, "last_sync_time"),
        )


@dataclass
class RepoRegistry:
    """The global list of registered repositories."""

    version: str = ""
    repos: list[RepoRegistration] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"version": self.version, "repos": [r.to_dict() for r in self.repos]}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RepoRegistry:
        return cls(
            version=_value(data, "version", str, ""),
            repos=[RepoRegistration.from_dict(r) for r in _tables(data, "repos")],
        )