"""Tests for engine configuration loading."""

import pytest

from src.design_engine.errors import ConfigurationError
from src.utils.config import EngineConfig, load_config


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.base_url == "https://openrouter.ai/api/v1"
        assert config.request_timeout == 60
        assert config.retrieval_cap == 100
        assert config.vision_models[0] == "anthropic/claude-3.5-sonnet"

    def test_yaml_round_trip_omits_key(self, tmp_path):
        path = tmp_path / "engine.yaml"
        EngineConfig(api_key="secret", retrieval_cap=20, outline_models=["a"]).to_yaml(path)
        assert "secret" not in path.read_text(encoding="utf-8")
        loaded = EngineConfig.from_yaml(path)
        assert loaded.retrieval_cap == 20
        assert loaded.outline_models == ["a"]
        assert loaded.api_key is None

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EngineConfig.from_yaml(tmp_path / "missing.yaml")

    def test_invalid_value_is_configuration_error(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("retrieval_cap: 0\n", encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc_info:
            EngineConfig.from_yaml(path)
        assert "retrieval_cap" in exc_info.value.details

    def test_broken_yaml_is_configuration_error(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("vision_models: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            EngineConfig.from_yaml(path)

    def test_env_overrides(self):
        config = EngineConfig().with_env_overrides({
            "OPENROUTER_API_KEY": "k",
            "DESIGN_VISION_MODELS": " v1 , v2,, ",
            "DESIGN_STORE_PATH": "/tmp/x.json",
            "DESIGN_OUTLINE_MODELS": "  ",
        })
        assert config.api_key == "k"
        assert config.vision_models == ["v1", "v2"]
        assert config.store_path == "/tmp/x.json"
        assert config.outline_models == EngineConfig().outline_models

    def test_load_config_env_wins(self, tmp_path, monkeypatch):
        path = tmp_path / "engine.yaml"
        path.write_text("keyword_models: [from-file]\nrequest_timeout: 5\n", encoding="utf-8")
        monkeypatch.setenv("DESIGN_KEYWORD_MODELS", "from-env")
        config = load_config(path)
        assert config.keyword_models == ["from-env"]
        assert config.request_timeout == 5

    def test_bundled_config_loads(self, monkeypatch):
        for var in ("DESIGN_VISION_MODELS", "DESIGN_KEYWORD_MODELS", "DESIGN_OUTLINE_MODELS", "DESIGN_STORE_PATH"):
            monkeypatch.delenv(var, raising=False)
        config = load_config()
        assert config.vision_models
        assert config.outline_models
