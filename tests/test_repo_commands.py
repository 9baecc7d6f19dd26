import io
import os

import pytest

from copygit.config import GlobalConfig
from copygit.models import (
    ProviderConfig,
    ProviderNotFoundError,
    ProviderType,
    RepoConfig,
    RepoNotFoundError,
    RepoSyncTarget,
    RepoSyncTargetWithOverrides,
)
from copygit.paths import default_repo_registry_path
from copygit.registry import load_repo_registry, register_repo, save_repo_registry
from copygit.repo_commands import (
    interactive_provider_selection,
    resolve_repo_path,
    run_remove,
)
from copygit.repo_config import repo_config_path, save_repo_config


def test_resolve_absolute_path():
    assert resolve_repo_path("/tmp/test-repo") == "/tmp/test-repo"


def test_resolve_relative_path():
    result = resolve_repo_path("relative/path")
    assert os.path.isabs(result)
    assert result == os.path.join(os.getcwd(), "relative", "path")


def test_resolve_home_expansion(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    result = resolve_repo_path("~/projects")
    assert result.startswith(str(tmp_path))
    assert result.endswith("projects")
    assert result == str(tmp_path / "projects")


def test_resolve_dot_is_cwd():
    assert resolve_repo_path(".") == os.getcwd()


def _config():
    return GlobalConfig(
        version="1",
        providers={
            "gl": ProviderConfig(name="gl", type=ProviderType.GITLAB, base_url="https://gitlab.com"),
            "gh": ProviderConfig(name="gh", type=ProviderType.GITHUB, base_url="https://github.com"),
        },
    )


def test_selection_no_providers(capsys):
    with pytest.raises(ProviderNotFoundError):
        interactive_provider_selection(GlobalConfig(version="1"), "/r/repo", io.StringIO(""))
    assert "No providers configured" in capsys.readouterr().out


def test_selection_lists_sorted_providers(capsys):
    interactive_provider_selection(_config(), "/r/repo", io.StringIO("gh\n\n"))
    out = capsys.readouterr().out
    assert out.index("  - gh (github)") < out.index("  - gl (gitlab)")


def test_selection_named_with_urls():
    stdin = io.StringIO(" gh , missing ,gl\nhttps://github.com/u/r.git\n\n")
    targets = interactive_provider_selection(_config(), "/work/myrepo", stdin)
    assert targets == [
        RepoSyncTarget("gh", "https://github.com/u/r.git", True),
        RepoSyncTarget("gl", "https://example.com/myrepo.git", True),
    ]


def test_selection_all():
    stdin = io.StringIO("all\nhttps://a.example.com/x.git\nhttps://b.example.com/x.git\n")
    targets = interactive_provider_selection(_config(), "/work/myrepo", stdin)
    assert [t.provider_name for t in targets] == ["gl", "gh"]
    assert [t.remote_url for t in targets] == [
        "https://a.example.com/x.git",
        "https://b.example.com/x.git",
    ]


def test_selection_end_of_input():
    with pytest.raises(EOFError):
        interactive_provider_selection(_config(), "/work/myrepo", io.StringIO(""))


@pytest.fixture
def home(tmp_path, monkeypatch):
    monkeypatch.setenv("COPYGIT_HOME", str(tmp_path / "home"))
    return tmp_path


def _register(path):
    registry = load_repo_registry(default_repo_registry_path())
    register_repo(registry, path, "")
    save_repo_registry(default_repo_registry_path(), registry)


def test_run_remove_unregisters(home):
    repo = home / "repo"
    repo.mkdir()
    _register(str(repo))
    save_repo_config(repo, RepoConfig(version="1", sync_targets=[
        RepoSyncTargetWithOverrides("gh", "https://github.com/u/r.git", True)
    ]))

    run_remove(str(repo))

    assert load_repo_registry(default_repo_registry_path()).repos == []
    assert repo_config_path(repo).exists()


def test_run_remove_clean_deletes_config(home):
    repo = home / "repo"
    repo.mkdir()
    _register(str(repo))
    save_repo_config(repo, RepoConfig(version="1"))

    run_remove(str(repo), clean=True)

    assert not repo_config_path(repo).exists()
    assert load_repo_registry(default_repo_registry_path()).repos == []


def test_run_remove_clean_without_config_file(home):
    repo = home / "repo"
    repo.mkdir()
    _register(str(repo))
    run_remove(str(repo), clean=True)
    assert load_repo_registry(default_repo_registry_path()).repos == []


def test_run_remove_not_registered(home):
    with pytest.raises(RepoNotFoundError):
        run_remove(str(home / "nowhere"))