"""Global configuration: providers and sync, daemon and log settings."""

from __future__ import annotations

import dataclasses
import ipaddress
import os
import tomllib
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import tomli_w

from .models import (
    ConfigInvalidError,
    ConfigNotFoundError,
    ProviderConfig,
    ProviderNotFoundError,
)
from .paths import default_config_path


@dataclass
class SyncConfig:
    max_retries: int = 0
    retry_base_delay: str = ""
    dry_run_default: bool = False
    push_tags: bool = False
    push_branches: bool = False


@dataclass
class DaemonConfig:
    poll_interval: str = ""
    max_retries: int = 0
    auto_start: bool = False


@dataclass
class LogConfig:
    level: str = ""
    format: str = ""


@dataclass(frozen=True)
class ValidationError:
    """One problem found while validating a configuration."""

    field: str
    message: str


def _check(data: Mapping[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key, default)
    if (isinstance(value, bool) and kind is not bool) or not isinstance(value, kind):
        raise ConfigInvalidError(
            f"{key}: expected {kind.__name__}, got {type(value).__name__}"
        )
    return value


def _section(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    return _check(data, key, Mapping, {})


def _from_section(cls: type, data: Mapping[str, Any]) -> Any:
    kwargs = {
        f.name: _check(data, f.name, type(f.default), f.default)
        for f in dataclasses.fields(cls)
    }
    return cls(**kwargs)


@dataclass
class GlobalConfig:
    """The top-level configuration stored in ~/.copygit/config."""

    version: str = ""
    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    sync: SyncConfig = field(default_factory=SyncConfig)
    daemon: DaemonConfig = field(default_factory=DaemonConfig)
    log: LogConfig = field(default_factory=LogConfig)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "providers": {name: p.to_dict() for name, p in self.providers.items()},
            "sync": dataclasses.asdict(self.sync),
            "daemon": dataclasses.asdict(self.daemon),
            "log": dataclasses.asdict(self.log),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> GlobalConfig:
        providers = {
            name: ProviderConfig.from_dict(_check(entries, name, Mapping, {}))
            for name, entries in _section(data, "providers").items()
        }
        return cls(
            version=_check(data, "version", str, ""),
            providers=providers,
            sync=_from_section(SyncConfig, _section(data, "sync")),
            daemon=_from_section(DaemonConfig, _section(data, "daemon")),
            log=_from_section(LogConfig, _section(data, "log")),
        )

    def save(self, path: str | os.PathLike[str]) -> None:
        """Write the config as TOML, readable by the owner only."""
        path = Path(path)
        path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        data = tomli_w.dumps(self.to_dict()).encode()
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)

    def providers_by_names(self, names: Iterable[str]) -> dict[str, ProviderConfig]:
        """Return the named providers; raise ProviderNotFoundError for any unknown name."""
        result: dict[str, ProviderConfig] = {}
        for name in names:
            try:
                result[name] = self.providers[name]
            except KeyError:
                raise ProviderNotFoundError(f'provider "{name}" not found') from None
        return result

    def validate(self) -> list[ValidationError]:
        errors: list[ValidationError] = []
        if not self.version:
            errors.append(ValidationError("version", "version is required"))
        if not self.providers:
            errors.append(ValidationError("providers", "at least one provider is required"))

        preferred = 0
        for name, prov in self.providers.items():
            if not prov.name:
                errors.append(ValidationError(f"providers.{name}.name", "name is required"))
            if not prov.type:
                errors.append(ValidationError(f"providers.{name}.type", "type is required"))
            if not prov.base_url:
                errors.append(
                    ValidationError(f"providers.{name}.base_url", "base_url is required")
                )
            else:
                errors.extend(
                    ValidationError(f"providers.{name}.base_url", message)
                    for message in validate_base_url(prov.base_url)
                )
            if prov.is_preferred:
                preferred += 1

        if preferred > 1:
            errors.append(
                ValidationError("providers", "at most one provider may be preferred")
            )
        return errors


def default_global_config() -> GlobalConfig:
    """Return a GlobalConfig with every default filled in."""
    return GlobalConfig(
        version="1",
        providers={},
        sync=SyncConfig(
            max_retries=5,
            retry_base_delay="5s",
            dry_run_default=False,
            push_tags=True,
            push_branches=True,
        ),
        daemon=DaemonConfig(poll_interval="30s", max_retries=10, auto_start=False),
        log=LogConfig(level="info", format="text"),
    )


def load_global(path: str | os.PathLike[str]) -> GlobalConfig:
    """Read the global config; raise ConfigNotFoundError or ConfigInvalidError."""
    try:
        raw = Path(path).read_bytes()
    except FileNotFoundError as exc:
        raise ConfigNotFoundError(f"config not found: {path}") from exc
    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
        raise ConfigInvalidError(f"invalid config {path}: {exc}") from exc
    return GlobalConfig.from_dict(data)


def config_path(flag_value: str | os.PathLike[str] | None = None) -> Path:
    """Resolve the config file: flag, then $COPYGIT_CONFIG, then the default."""
    if flag_value:
        return Path(flag_value)
    env = os.environ.get("COPYGIT_CONFIG")
    if env:
        return Path(env)
    return default_config_path()


_PRIVATE_NETWORKS = tuple(
    ipaddress.ip_network(n)
    for n in ("10.0.0.0/8", "172.16.0.0/12", "192.168.0.0/16", "fc00::/7")
)
_LINK_LOCAL_MULTICAST = tuple(
    ipaddress.ip_network(n) for n in ("224.0.0.0/24", "ff02::/16")
)


def _is_internal(ip: ipaddress.IPv4Address | ipaddress.IPv6Address) -> bool:
    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        ip = ip.ipv4_mapped
    if ip.is_loopback or ip.is_link_local:
        return True
    return any(
        ip.version == net.version and ip in net
        for net in _PRIVATE_NETWORKS + _LINK_LOCAL_MULTICAST
    )


def validate_base_url(raw_url: str) -> list[str]:
    """Return security problems with a provider base URL (empty when fine)."""
    try:
        parsed = urlsplit(raw_url)
    except ValueError as exc:
        return [f"invalid URL: {exc}"]

    errors: list[str] = []
    scheme = parsed.scheme.lower()
    if scheme not in ("https", "http"):
        return [f'unsupported scheme "{parsed.scheme}": only http and https are allowed']
    if scheme != "https":
        errors.append("base_url should use HTTPS to protect API tokens")

    hostname = parsed.hostname or ""
    try:
        ip = ipaddress.ip_address(hostname)
    except ValueError:
        ip = None
    if ip is not None and _is_internal(ip):
        errors.append(
            f"base_url must not point to a private/internal IP address ({hostname})"
        )

    if hostname == "metadata.google.internal":
        errors.append("base_url must not point to cloud metadata endpoints")
    return errors