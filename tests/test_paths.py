"""Tests for path management."""

from pathlib import Path

from kvgraph.config.paths import (
    ENV_VAR,
    ensure_kvgraph_home,
    get_all_paths,
    get_config_path,
    get_kvgraph_home,
    get_logs_path,
    get_store_path,
)


class TestGetKVGraphHome:
    def test_default_is_home_dot_kvgraph(self, monkeypatch):
        monkeypatch.delenv(ENV_VAR, raising=False)
        get_kvgraph_home.cache_clear()

        assert get_kvgraph_home() == Path.home() / ".kvgraph"

    def test_respects_env_var(self, monkeypatch, tmp_path):
        custom_path = tmp_path / "custom-kvgraph"
        monkeypatch.setenv(ENV_VAR, str(custom_path))
        get_kvgraph_home.cache_clear()

        assert get_kvgraph_home() == custom_path.resolve()

    def test_expands_tilde_in_env_var(self, monkeypatch):
        monkeypatch.setenv(ENV_VAR, "~/my-kvgraph")
        get_kvgraph_home.cache_clear()

        assert get_kvgraph_home() == (Path.home() / "my-kvgraph").resolve()


class TestDerivedPaths:
    def test_derived_paths(self, monkeypatch, tmp_path):
        monkeypatch.setenv(ENV_VAR, str(tmp_path))
        get_kvgraph_home.cache_clear()
        home = tmp_path.resolve()

        assert get_config_path() == home / "config.toml"
        assert get_logs_path() == home / "logs"
        assert get_store_path() == home / "store"

    def test_get_all_paths(self, monkeypatch, tmp_path):
        monkeypatch.setenv(ENV_VAR, str(tmp_path))
        get_kvgraph_home.cache_clear()

        paths = get_all_paths()
        assert set(paths) == {"home", "config", "logs", "store"}
        assert paths["home"] == tmp_path.resolve()

    def test_ensure_kvgraph_home_creates_directory(self, monkeypatch, tmp_path):
        target = tmp_path / "nested" / "home"
        monkeypatch.setenv(ENV_VAR, str(target))
        get_kvgraph_home.cache_clear()

        assert ensure_kvgraph_home() == target.resolve()
        assert target.is_dir()
