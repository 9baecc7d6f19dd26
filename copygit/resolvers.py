"""Credential sources: environment, credentials file, SSH keys and a test double."""

from __future__ import annotations

import abc
import logging
import os
import stat
import tomllib
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import tomli_w

from .models import (
    AuthMethod,
    ConfigInvalidError,
    CopygitError,
    Credential,
    CredentialNotFoundError,
    ProviderConfig,
)

log = logging.getLogger(__name__)

_SSH_KEY_NAMES = ("id_ed25519", "id_rsa", "id_ecdsa")


class CredentialResolver(abc.ABC):
    """One source of credentials; several are chained together."""

    @abc.abstractmethod
    def name(self) -> str:
        """Return a short name such as "env" or "file"."""

    @abc.abstractmethod
    def resolve(self, provider: ProviderConfig) -> Credential:
        """Return the credential for a provider or raise CredentialNotFoundError."""

    @abc.abstractmethod
    def store(self, provider: ProviderConfig, credential: Credential) -> None:
        """Persist a credential for a provider."""

    @abc.abstractmethod
    def delete(self, provider_name: str) -> None:
        """Remove any stored credential for a provider."""

    @abc.abstractmethod
    def is_available(self) -> bool:
        """Return True if this source can be used on this system."""


def env_var_name(provider_name: str) -> str:
    """Map a provider name to its token variable: "my-github" -> COPYGIT_TOKEN_MY_GITHUB."""
    return "COPYGIT_TOKEN_" + provider_name.replace("-", "_").upper()


class EnvResolver(CredentialResolver):
    """Reads tokens from COPYGIT_TOKEN_<PROVIDER> environment variables."""

    def name(self) -> str:
        return "env"

    def is_available(self) -> bool:
        return True

    def resolve(self, provider: ProviderConfig) -> Credential:
        variable = env_var_name(provider.name)
        token = os.environ.get(variable, "")
        if not token:
            raise CredentialNotFoundError(f"{variable} is not set")
        return Credential(
            provider_name=provider.name,
            auth_method=AuthMethod.TOKEN,
            token=token,
        )

    def store(self, provider: ProviderConfig, credential: Credential) -> None:
        raise CredentialNotFoundError("environment variables cannot be stored")

    def delete(self, provider_name: str) -> None:
        return None


class FileResolver(CredentialResolver):
    """Reads credentials from a TOML file that must have permissions 0600."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)

    def name(self) -> str:
        return "file"

    def _mode(self) -> int | None:
        try:
            return stat.S_IMODE(self.path.stat().st_mode)
        except OSError:
            return None

    def is_available(self) -> bool:
        return self._mode() == 0o600

    def _write(self, entries: Mapping[str, Any]) -> None:
        data = tomli_w.dumps(dict(entries)).encode()
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)

    def resolve(self, provider: ProviderConfig) -> Credential:
        mode = self._mode()
        if mode is None:
            raise CredentialNotFoundError(f"credentials file not found: {self.path}")
        if mode != 0o600:
            log.warning(
                "credentials file has insecure permissions: path=%s mode=%o",
                self.path,
                mode,
            )
            raise CopygitError("credentials file must have permissions 0600")

        try:
            raw = self.path.read_bytes()
        except OSError as exc:
            raise CredentialNotFoundError(str(exc)) from exc
        try:
            entries = tomllib.loads(raw.decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise ConfigInvalidError(f"parse credentials: {exc}") from exc

        if provider.name not in entries:
            raise CredentialNotFoundError(f"no credential for {provider.name}")
        entry = entries[provider.name]
        if not isinstance(entry, Mapping):
            raise ConfigInvalidError(f"parse credentials: {provider.name} is not a table")

        def text(key: str) -> str:
            value = entry.get(key, "")
            if not isinstance(value, str):
                raise ConfigInvalidError(f"parse credentials: {key} must be a string")
            return value

        return Credential(
            provider_name=provider.name,
            auth_method=provider.auth_method,
            token=text("token"),
            ssh_key_path=text("ssh_key_path"),
            username=text("username"),
        )

    def store(self, provider: ProviderConfig, credential: Credential) -> None:
        entries: dict[str, Any] = {}
        try:
            entries = tomllib.loads(self.path.read_bytes().decode("utf-8"))
        except (OSError, tomllib.TOMLDecodeError, UnicodeDecodeError):
            entries = {}

        entry = {
            key: value
            for key, value in (
                ("token", credential.token),
                ("ssh_key_path", credential.ssh_key_path),
                ("username", credential.username),
            )
            if value
        }
        entries[provider.name] = entry
        self._write(entries)

    def delete(self, provider_name: str) -> None:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return
        try:
            entries = tomllib.loads(raw.decode("utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as exc:
            raise ConfigInvalidError(f"parse credentials: {exc}") from exc
        entries.pop(provider_name, None)
        self._write(entries)


def _home() -> Path | None:
    try:
        return Path.home()
    except RuntimeError:
        return None


class SSHResolver(CredentialResolver):
    """Finds a default SSH key in ~/.ssh for providers that use SSH."""

    def name(self) -> str:
        return "ssh"

    def is_available(self) -> bool:
        home = _home()
        return home is not None and (home / ".ssh").exists()

    def resolve(self, provider: ProviderConfig) -> Credential:
        if provider.auth_method != AuthMethod.SSH:
            raise CredentialNotFoundError(f"{provider.name} does not use ssh")
        home = _home()
        if home is None:
            raise CredentialNotFoundError("home directory is unknown")
        for key_name in _SSH_KEY_NAMES:
            key_path = home / ".ssh" / key_name
            if key_path.exists():
                return Credential(
                    provider_name=provider.name,
                    auth_method=AuthMethod.SSH,
                    ssh_key_path=str(key_path),
                )
        raise CredentialNotFoundError("no ssh key found")

    def store(self, provider: ProviderConfig, credential: Credential) -> None:
        raise CredentialNotFoundError("ssh keys are not managed by copygit")

    def delete(self, provider_name: str) -> None:
        return None


@dataclass
class FakeCredentialResolver(CredentialResolver):
    """A configurable resolver for tests."""

    name_value: str = ""
    available: bool = False
    resolve_func: Callable[[ProviderConfig], Credential] | None = None
    store_func: Callable[[ProviderConfig, Credential], None] | None = None
    delete_func: Callable[[str], None] | None = None

    def name(self) -> str:
        return self.name_value

    def is_available(self) -> bool:
        return self.available

    def resolve(self, provider: ProviderConfig) -> Credential:
        if self.resolve_func is not None:
            return self.resolve_func(provider)
        raise CredentialNotFoundError(f"no credential for {provider.name}")

    def store(self, provider: ProviderConfig, credential: Credential) -> None:
        if self.store_func is not None:
            self.store_func(provider, credential)

    def delete(self, provider_name: str) -> None:
        if self.delete_func is not None:
            self.delete_func(provider_name)