"""Connectivity checks for configured providers."""

from __future__ import annotations

import http.client
import json
import time
import urllib.error
import urllib.request
from collections.abc import Iterable
from dataclasses import dataclass

from .config import config_path, load_global
from .models import ConfigNotFoundError, ProviderConfig, ProviderType

USER_AGENT = "copygit/health-check"
DEFAULT_TIMEOUT = 10.0


@dataclass
class ProviderHealth:
    """The outcome of checking one provider."""

    name: str
    type: str
    base_url: str
    reachable: bool = False
    latency_ms: int = 0
    status: int = 0
    error: str = ""


class _NoRedirect(urllib.request.HTTPRedirectHandler):
    """Stops at the first redirect and reports it as the final response."""

    def redirect_request(self, req, fp, code, msg, headers, newurl):
        raise urllib.error.HTTPError(req.full_url, code, msg, headers, fp)


def health_check_url(provider: ProviderConfig) -> str:
    """Return the URL probed for a provider."""
    base = provider.base_url.removesuffix("/")
    if provider.type == ProviderType.GITHUB:
        if "github.com" in base:
            return "https://api.github.com"
        return base + "/api/v3"
    if provider.type == ProviderType.GITLAB:
        return base + "/api/v4/version"
    if provider.type == ProviderType.GITEA:
        return base + "/api/v1/version"
    return base


def check_provider(
    name: str, provider: ProviderConfig, timeout: float = DEFAULT_TIMEOUT
) -> ProviderHealth:
    """Probe a provider over HTTP without following redirects."""
    health = ProviderHealth(
        name=name, type=str(provider.type), base_url=provider.base_url
    )
    url = health_check_url(provider)

    start = time.monotonic()
    try:
        request = urllib.request.Request(
            url, method="GET", headers={"User-Agent": USER_AGENT}
        )
    except ValueError as exc:
        health.error = str(exc)
        return health

    opener = urllib.request.build_opener(_NoRedirect)
    try:
        with opener.open(request, timeout=timeout) as response:
            status = response.status
    except urllib.error.HTTPError as exc:
        status = exc.code
        exc.close()
    except (ValueError, OSError, http.client.HTTPException) as exc:
        health.latency_ms = int((time.monotonic() - start) * 1000)
        health.error = str(exc)
        return health

    health.latency_ms = int((time.monotonic() - start) * 1000)
    health.status = status
    health.reachable = status < 500
    return health


def _json_entry(result: ProviderHealth) -> dict[str, object]:
    entry: dict[str, object] = {
        "name": result.name,
        "type": result.type,
        "reachable": result.reachable,
        "latency_ms": result.latency_ms,
        "status": result.status,
    }
    if result.error:
        entry["error"] = result.error
    return entry


def format_health_results(
    results: Iterable[ProviderHealth], output_format: str = "text"
) -> str:
    """Render check results as text or as a JSON array."""
    results = list(results)
    if output_format == "json":
        return json.dumps([_json_entry(r) for r in results], separators=(",", ":")) + "\n"

    lines = ["Provider Health Check", "-" * 60]
    for result in results:
        status = "OK" if result.reachable else "FAIL"
        if result.error:
            status = "ERROR"
        icon = "+" if status == "OK" else "x"

        lines.append(f"  [{icon}] {result.name} ({result.type})")
        lines.append(f"      URL:     {result.base_url}")
        if result.reachable:
            detail = f" ({result.latency_ms}ms)"
        elif result.error:
            detail = f" - {result.error}"
        else:
            detail = f" (HTTP {result.status})"
        lines.append(f"      Status:  {status}{detail}")
        lines.append("")
    return "\n".join(lines) + "\n"


def run_health(output_format: str = "text") -> list[ProviderHealth]:
    """Check every configured provider, print the results and return them."""
    try:
        global_config = load_global(config_path(""))
    except ConfigNotFoundError:
        print("No providers configured. Run 'copygit config add-provider' first.")
        return []

    if not global_config.providers:
        print("No providers configured.")
        return []

    results = [
        check_provider(name, provider)
        for name, provider in global_config.providers.items()
    ]
    print(format_health_results(results, output_format), end="")
    return results