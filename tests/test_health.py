import json
import socket
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from copygit.config import default_global_config
from copygit.health import (
    ProviderHealth,
    check_provider,
    format_health_results,
    health_check_url,
    run_health,
)
from copygit.models import ProviderConfig, ProviderType


@pytest.fixture(autouse=True)
def _no_proxies(monkeypatch):
    for var in ("http_proxy", "HTTP_PROXY", "https_proxy", "HTTPS_PROXY", "all_proxy", "ALL_PROXY"):
        monkeypatch.delenv(var, raising=False)


class _Handler(BaseHTTPRequestHandler):
    agents: list[str] = []

    def do_GET(self):
        type(self).agents.append(self.headers.get("User-Agent", ""))
        if self.path == "/down":
            self.send_response(503)
        elif self.path == "/moved":
            self.send_response(302)
            self.send_header("Location", "/ok")
        elif self.path == "/missing":
            self.send_response(404)
        else:
            self.send_response(200)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def log_message(self, format, *args):
        pass


@pytest.fixture
def server():
    _Handler.agents = []
    httpd = ThreadingHTTPServer(("127.0.0.1", 0), _Handler)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{httpd.server_address[1]}"
    httpd.shutdown()
    httpd.server_close()


def _generic(url):
    return ProviderConfig(name="p", type=ProviderType.GENERIC, base_url=url)


@pytest.mark.parametrize(
    "provider, expected",
    [
        (ProviderConfig(type=ProviderType.GITHUB, base_url="https://github.com"), "https://api.github.com"),
        (ProviderConfig(type=ProviderType.GITHUB, base_url="https://git.corp.com"), "https://git.corp.com/api/v3"),
        (ProviderConfig(type=ProviderType.GITLAB, base_url="https://gitlab.com"), "https://gitlab.com/api/v4/version"),
        (ProviderConfig(type=ProviderType.GITEA, base_url="https://gitea.example.com"), "https://gitea.example.com/api/v1/version"),
        (ProviderConfig(type=ProviderType.GENERIC, base_url="https://git.example.com"), "https://git.example.com"),
        (ProviderConfig(type=ProviderType.GITLAB, base_url="https://gitlab.com/"), "https://gitlab.com/api/v4/version"),
    ],
    ids=["github.com", "github enterprise", "gitlab", "gitea", "generic", "trailing slash"],
)
def test_health_check_url(provider, expected):
    assert health_check_url(provider) == expected


def test_check_provider_ok(server):
    health = check_provider("mine", _generic(server + "/ok"), timeout=5)
    assert health.reachable is True
    assert health.status == 200
    assert health.error == ""
    assert health.name == "mine"
    assert health.type == "generic"
    assert _Handler.agents == ["copygit/health-check"]


def test_check_provider_server_error(server):
    health = check_provider("p", _generic(server + "/down"), timeout=5)
    assert health.reachable is False
    assert health.status == 503
    assert health.error == ""


def test_check_provider_client_error_is_reachable(server):
    health = check_provider("p", _generic(server + "/missing"), timeout=5)
    assert health.reachable is True
    assert health.status == 404


def test_check_provider_does_not_follow_redirects(server):
    health = check_provider("p", _generic(server + "/moved"), timeout=5)
    assert health.status == 302
    assert health.reachable is True
    assert len(_Handler.agents) == 1


def test_check_provider_connection_refused():
    sock = socket.socket()
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    health = check_provider("p", _generic(f"http://127.0.0.1:{port}"), timeout=5)
    assert health.reachable is False
    assert health.status == 0
    assert health.error


def test_check_provider_invalid_url():
    health = check_provider("p", _generic("not a url"))
    assert health.reachable is False
    assert health.error


def test_format_text():
    results = [
        ProviderHealth("a", "github", "https://a.example.com", True, 12, 200),
        ProviderHealth("b", "gitlab", "https://b.example.com", False, 5, 503),
        ProviderHealth("c", "gitea", "https://c.example.com", False, 0, 0, "boom"),
    ]
    expected = (
        "Provider Health Check\n"
        + "-" * 60 + "\n"
        "  [+] a (github)\n"
        "      URL:     https://a.example.com\n"
        "      Status:  OK (12ms)\n"
        "\n"
        "  [x] b (gitlab)\n"
        "      URL:     https://b.example.com\n"
        "      Status:  FAIL (HTTP 503)\n"
        "\n"
        "  [x] c (gitea)\n"
        "      URL:     https://c.example.com\n"
        "      Status:  ERROR - boom\n"
        "\n"
    )
    assert format_health_results(results, "text") == expected


def test_format_json():
    results = [
        ProviderHealth("a", "github", "https://a.example.com", True, 12, 200),
        ProviderHealth("c", "gitea", "https://c.example.com", False, 0, 0, "boom"),
    ]
    out = format_health_results(results, "json")
    assert out.endswith("\n")
    assert json.loads(out) == [
        {"name": "a", "type": "github", "reachable": True, "latency_ms": 12, "status": 200},
        {"name": "c", "type": "gitea", "reachable": False, "latency_ms": 0, "status": 0, "error": "boom"},
    ]


def test_run_health_without_config(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("COPYGIT_CONFIG", str(tmp_path / "missing"))
    assert run_health("text") == []
    assert capsys.readouterr().out == (
        "No providers configured. Run 'copygit config add-provider' first.\n"
    )


def test_run_health_empty_providers(tmp_path, monkeypatch, capsys):
    path = tmp_path / "config"
    default_global_config().save(path)
    monkeypatch.setenv("COPYGIT_CONFIG", str(path))
    assert run_health("text") == []
    assert capsys.readouterr().out == "No providers configured.\n"


def test_run_health_json(server, tmp_path, monkeypatch, capsys):
    path = tmp_path / "config"
    cfg = default_global_config()
    cfg.providers["local"] = ProviderConfig(
        name="local", type=ProviderType.GENERIC, base_url=server + "/ok"
    )
    cfg.save(path)
    monkeypatch.setenv("COPYGIT_CONFIG", str(path))

    results = run_health("json")
    assert [r.status for r in results] == [200]
    printed = json.loads(capsys.readouterr().out)
    assert printed[0]["name"] == "local"
    assert printed[0]["reachable"] is True