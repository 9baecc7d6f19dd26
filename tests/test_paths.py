from pathlib import Path

from copygit import paths


def test_copygit_home_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("COPYGIT_HOME", str(tmp_path))
    assert paths.default_config_dir() == tmp_path


def test_files_live_in_config_dir(monkeypatch, tmp_path):
    monkeypatch.setenv("COPYGIT_HOME", str(tmp_path))
    assert paths.default_config_path() == tmp_path / "config"
    assert paths.default_repo_registry_path() == tmp_path / "repos.toml"
    assert paths.default_queue_dir() == tmp_path / "queue"
    assert paths.default_credentials_path() == tmp_path / "credentials"
    assert paths.default_lock_path() == tmp_path / "lock"
    assert paths.default_pid_file_path() == tmp_path / "daemon.pid"
    assert paths.default_state_dir() == tmp_path / "state"


def test_falls_back_to_home(monkeypatch, tmp_path):
    monkeypatch.delenv("COPYGIT_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    assert paths.default_config_dir() == Path(tmp_path) / ".copygit"


def test_empty_copygit_home_is_ignored(monkeypatch, tmp_path):
    monkeypatch.setenv("COPYGIT_HOME", "")
    monkeypatch.setenv("HOME", str(tmp_path))
    assert paths.default_config_path().parent == Path(tmp_path) / ".copygit"