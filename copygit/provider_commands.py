"""Commands that add and remove providers in the global configuration."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from .config import config_path, default_global_config, load_global
from .models import (
    AuthMethod,
    ConfigNotFoundError,
    CopygitError,
    ProviderConfig,
    ProviderNotFoundError,
    ProviderType,
)

log = logging.getLogger(__name__)

_AUTH_CHOICES = {"2": AuthMethod.SSH, "3": AuthMethod.TOKEN}


def _prompt_auth_method(stdin: TextIO) -> AuthMethod:
    print("Select auth method (default: https):")
    print("  1. https")
    print("  2. ssh")
    print("  3. token")
    print("Choice: ", end="", flush=True)
    choice = stdin.readline().strip()
    return _AUTH_CHOICES.get(choice, AuthMethod.HTTPS)


def run_config_add_provider(
    name: str,
    provider_type: str,
    base_url: str,
    stdin: TextIO | None = None,
) -> ProviderConfig:
    """Add a provider to the global config, asking for its auth method."""
    valid_types = {t.value for t in ProviderType}
    if provider_type not in valid_types:
        raise CopygitError(
            f"invalid type: {provider_type} (must be github|gitlab|gitea|generic)"
        )

    path = config_path("")
    try:
        global_config = load_global(path)
    except ConfigNotFoundError:
        global_config = default_global_config()

    if name in global_config.providers:
        raise CopygitError(f"provider already exists: {name}")

    auth_method = _prompt_auth_method(sys.stdin if stdin is None else stdin)

    provider = ProviderConfig(
        name=name,
        type=ProviderType(provider_type),
        base_url=base_url,
        auth_method=auth_method,
        is_preferred=False,
    )
    global_config.providers[name] = provider
    global_config.save(path)

    log.info(
        "provider added: name=%s type=%s auth=%s", name, provider_type, auth_method
    )
    return provider


def run_config_remove_provider(name: str) -> None:
    """Remove a provider from the global config."""
    path = config_path("")
    global_config = load_global(path)

    if name not in global_config.providers:
        raise ProviderNotFoundError(f"provider not found: {name}")

    del global_config.providers[name]
    global_config.save(path)
    log.info("provider removed: name=%s", name)