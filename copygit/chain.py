"""Credential resolution across several sources, and the managers built on it."""

from __future__ import annotations

import abc
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass, field

from .models import CopygitError, Credential, CredentialNotFoundError, ProviderConfig
from .resolvers import CredentialResolver, EnvResolver, FileResolver, SSHResolver

log = logging.getLogger(__name__)

_RESOLVER_ERRORS = (CopygitError, OSError)


class CredentialChain:
    """Tries a sequence of credential resolvers in order."""

    def __init__(self, resolvers: Iterable[CredentialResolver]) -> None:
        self.resolvers: tuple[CredentialResolver, ...] = tuple(resolvers)

    def resolve(self, provider: ProviderConfig) -> Credential:
        """Return the first credential found; raise CredentialNotFoundError otherwise."""
        for resolver in self.resolvers:
            try:
                credential = resolver.resolve(provider)
            except _RESOLVER_ERRORS as exc:
                log.debug(
                    "resolver failed: provider=%s resolver=%s error=%s",
                    provider.name,
                    resolver.name(),
                    exc,
                )
                continue
            log.debug(
                "credential resolved: provider=%s resolver=%s",
                provider.name,
                resolver.name(),
            )
            return credential
        raise CredentialNotFoundError(f"no credential found for {provider.name}")

    def store(self, provider: ProviderConfig, credential: Credential) -> None:
        """Store with the first resolver that accepts the credential."""
        for resolver in self.resolvers:
            try:
                resolver.store(provider, credential)
            except _RESOLVER_ERRORS:
                continue
            log.debug(
                "credential stored: provider=%s resolver=%s",
                provider.name,
                resolver.name(),
            )
            return
        raise CredentialNotFoundError(f"no resolver could store a credential for {provider.name}")

    def delete(self, provider_name: str) -> None:
        """Delete from every resolver; re-raise the last failure, if any."""
        last_error: Exception | None = None
        for resolver in self.resolvers:
            try:
                resolver.delete(provider_name)
            except _RESOLVER_ERRORS as exc:
                last_error = exc
        if last_error is not None:
            raise last_error


def default_chain(credentials_path: str | os.PathLike[str]) -> CredentialChain:
    """Build the standard chain (SSH, environment, file), keeping usable sources only."""
    candidates: list[CredentialResolver] = [
        SSHResolver(),
        EnvResolver(),
        FileResolver(credentials_path),
    ]
    available = []
    for resolver in candidates:
        if resolver.is_available():
            available.append(resolver)
        else:
            log.debug("credential resolver unavailable: resolver=%s", resolver.name())
    return CredentialChain(available)


class CredentialManager(abc.ABC):
    """Resolves, stores and deletes provider credentials."""

    @abc.abstractmethod
    def resolve(self, provider: ProviderConfig) -> Credential:
        """Return the credential for a provider or raise CredentialNotFoundError."""

    @abc.abstractmethod
    def store(self, provider: ProviderConfig, credential: Credential) -> None:
        """Persist a credential for a provider."""

    @abc.abstractmethod
    def delete(self, provider_name: str) -> None:
        """Remove a provider's credential."""


class ChainManager(CredentialManager):
    """A credential manager backed by a CredentialChain."""

    def __init__(self, chain: CredentialChain) -> None:
        self.chain = chain

    @classmethod
    def from_credentials_file(cls, credentials_path: str | os.PathLike[str]) -> ChainManager:
        return cls(default_chain(credentials_path))

    @classmethod
    def with_resolvers(cls, *args: CredentialResolver) -> ChainManager:
        return cls(CredentialChain(args))

    def resolve(self, provider: ProviderConfig) -> Credential:
        return self.chain.resolve(provider)

    def store(self, provider: ProviderConfig, credential: Credential) -> None:
        self.chain.store(provider, credential)

    def delete(self, provider_name: str) -> None:
        self.chain.delete(provider_name)


@dataclass
class FakeManager(CredentialManager):
    """An in-memory credential manager for tests."""

    credentials: dict[str, Credential] = field(default_factory=dict)
    store_error: Exception | None = None
    delete_error: Exception | None = None

    def resolve(self, provider: ProviderConfig) -> Credential:
        try:
            return self.credentials[provider.name]
        except KeyError:
            raise CredentialNotFoundError(f"no credential for {provider.name}") from None

    def store(self, provider: ProviderConfig, credential: Credential) -> None:
        if self.store_error is not None:
            raise self.store_error
        self.credentials[provider.name] = credential

    def delete(self, provider_name: str) -> None:
        if self.delete_error is not None:
            raise self.delete_error
        self.credentials.pop(provider_name, None)