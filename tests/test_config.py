"""Tests for configuration loading and models."""

from pathlib import Path

import pytest
from pydantic import SecretStr, ValidationError

from kvgraph.config import (
    KVGraphConfig,
    LoggingConfig,
    ServerConfig,
    StorageConfig,
    get_default_config,
    load_config,
)


class TestStorageConfig:
    """Tests for StorageConfig model."""

    def test_defaults(self, kvgraph_home):
        config = StorageConfig()
        assert config.backend == "file"
        assert config.key == "knowledge_graph"
        assert config.path == kvgraph_home / "store"
        assert config.url is None
        assert config.token is None
        assert config.timeout == 10.0

    def test_rest_with_credentials(self):
        config = StorageConfig(
            backend="rest", url="https://kv.example.com", token=SecretStr("t0k")
        )
        assert config.token is not None
        assert config.token.get_secret_value() == "t0k"
        assert "t0k" not in repr(config)

    def test_rest_requires_url(self):
        with pytest.raises(ValidationError):
            StorageConfig(backend="rest", token=SecretStr("t0k"))

    def test_rest_requires_token(self):
        with pytest.raises(ValidationError):
            StorageConfig(backend="rest", url="https://kv.example.com")

    def test_unknown_backend(self):
        with pytest.raises(ValidationError):
            StorageConfig(backend="sqlite")  # type: ignore[arg-type]


class TestServerConfig:
    def test_defaults(self):
        config = ServerConfig()
        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.api_prefix == ""


class TestLoggingConfig:
    def test_defaults(self):
        config = LoggingConfig()
        assert config.level is None
        assert config.log_to_file is False
        assert config.redact is True
        assert config.retention_days == 7


class TestKVGraphConfig:
    def test_describe_storage(self, tmp_path: Path):
        file_config = KVGraphConfig.model_validate(
            {"storage": {"backend": "file", "path": str(tmp_path)}}
        )
        assert file_config.describe_storage() == f"file:{tmp_path}"

        memory_config = KVGraphConfig.model_validate({"storage": {"backend": "memory"}})
        assert memory_config.describe_storage() == "memory"

        rest_config = KVGraphConfig.model_validate(
            {
                "storage": {
                    "backend": "rest",
                    "url": "https://kv.example.com",
                    "token": "t",
                }
            }
        )
        assert rest_config.describe_storage() == "rest:https://kv.example.com"


class TestLoadConfig:
    """Tests for load_config function."""

    def test_load_from_file(self, config_file, tmp_path):
        config = load_config(config_file)
        assert config.storage.backend == "file"
        assert config.storage.key == "test_graph"
        assert config.storage.path == tmp_path / "store"
        assert config.server.host == "0.0.0.0"
        assert config.server.port == 9090

    def test_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.toml")

    def test_invalid_toml(self, tmp_path):
        invalid_file = tmp_path / "invalid.toml"
        invalid_file.write_text("not valid toml [[[")

        with pytest.raises(ValueError):
            load_config(invalid_file)

    def test_invalid_config_values(self, tmp_path):
        bad = tmp_path / "bad.toml"
        bad.write_text('[server]\nport = "not a port"\n')

        with pytest.raises(ValidationError):
            load_config(bad)

    def test_no_file_uses_defaults(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(
            "kvgraph.config.loader._get_default_config_paths",
            lambda: [tmp_path / "missing.toml"],
        )
        config = load_config()
        assert config.storage.backend == "file"
        assert config.server.port == 8080

    def test_finds_config_in_kvgraph_home(self, kvgraph_home, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        (kvgraph_home / "config.toml").write_text('[storage]\nkey = "from_home"\n')

        config = load_config()
        assert config.storage.key == "from_home"

    def test_rest_credentials_from_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("KV_REST_API_URL", "https://env.example.com")
        monkeypatch.setenv("KV_REST_API_TOKEN", "env-token")
        path = tmp_path / "rest.toml"
        path.write_text('[storage]\nbackend = "rest"\n')

        config = load_config(path)
        assert config.storage.url == "https://env.example.com"
        assert config.storage.token is not None
        assert config.storage.token.get_secret_value() == "env-token"

    def test_file_values_take_precedence_over_env(self, tmp_path, monkeypatch):
        monkeypatch.setenv("KV_REST_API_URL", "https://env.example.com")
        monkeypatch.setenv("KV_REST_API_TOKEN", "env-token")
        path = tmp_path / "rest.toml"
        path.write_text(
            '[storage]\nbackend = "rest"\n'
            'url = "https://file.example.com"\ntoken = "file-token"\n'
        )

        config = load_config(path)
        assert config.storage.url == "https://file.example.com"
        assert config.storage.token is not None
        assert config.storage.token.get_secret_value() == "file-token"

    def test_rest_without_credentials_fails(self, tmp_path):
        path = tmp_path / "rest.toml"
        path.write_text('[storage]\nbackend = "rest"\n')

        with pytest.raises(ValidationError):
            load_config(path)


class TestGetDefaultConfig:
    def test_returns_valid_config(self):
        config = get_default_config()
        assert isinstance(config, KVGraphConfig)
        assert config.storage.key == "knowledge_graph"
